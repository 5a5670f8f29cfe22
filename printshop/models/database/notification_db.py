"""
通知数据库模型
"""

from datetime import datetime

from sqlalchemy import Column, String, Text, Boolean, DateTime
from printshop.core.database import Base


class NotificationDB(Base):
    """站内通知表"""

    __tablename__ = "notifications"

    notification_id = Column(String(50), primary_key=True, comment="通知ID")
    user_id = Column(String(50), nullable=False, index=True, comment="收件人用户ID")
    type = Column(String(30), nullable=False, index=True, comment="通知类型")

    # 标题和内容均为语言无关的结构化数据，由前端本地化
    title = Column(String(500), nullable=False, comment="标题键或JSON")
    message = Column(Text, nullable=False, comment="JSON内容")
    link = Column(String(500), comment="跳转链接")

    # 关联对象
    coupon_id = Column(String(50), index=True, comment="关联优惠券ID")
    quote_id = Column(String(50), index=True, comment="关联报价ID")
    product_id = Column(String(50), comment="关联商品ID")

    read = Column(Boolean, nullable=False, default=False, comment="是否已读")
    created_at = Column(DateTime, default=datetime.now, comment="创建时间")

    __table_args__ = (
        {'comment': '站内通知表'}
    )
