"""
结账相关数据模型
"""

from decimal import Decimal
from typing import Dict, Optional
from pydantic import BaseModel, Field


class CheckoutRequest(BaseModel):
    """结账准备请求"""

    product_id: str = Field(..., description="商品ID")
    email: Optional[str] = Field(None, description="客户邮箱")
    coupon_code: Optional[str] = Field(None, description="优惠券代码")
    locale: Optional[str] = Field(None, description="错误提示语言")


class CheckoutPreparation(BaseModel):
    """交给支付服务的金额与元数据"""

    product_id: str
    product_name: Optional[str] = None
    currency: str
    original_price: Decimal
    discount_amount: Decimal
    final_price: Decimal
    amount_cents: int = Field(..., description="支付金额 (分)")
    coupon_id: Optional[str] = None
    coupon_code: Optional[str] = None
    metadata: Dict[str, str] = Field(default_factory=dict, description="支付会话元数据，支付成功后原样回传")
