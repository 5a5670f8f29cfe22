"""
通知相关数据模型
"""

from typing import Optional
from pydantic import BaseModel, Field
from enum import Enum


class NotificationType(str, Enum):
    """通知类型枚举"""
    QUOTE_OFFER = "quote_offer"  # 报价通知
    COUPON = "coupon"  # 报价附带优惠券


class NotificationCreate(BaseModel):
    """创建通知模型，title/message 为语言无关的结构化数据"""

    user_id: str = Field(..., description="收件人用户ID")
    type: NotificationType = Field(..., description="通知类型")
    title: str = Field(..., description="标题键")
    message: str = Field(..., description="JSON内容")
    link: Optional[str] = Field(None, description="跳转链接")
    coupon_id: Optional[str] = None
    quote_id: Optional[str] = None
    product_id: Optional[str] = None

