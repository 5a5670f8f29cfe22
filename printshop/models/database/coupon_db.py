"""
优惠券数据库模型
"""

from datetime import datetime

from sqlalchemy import Column, String, Integer, Numeric, Boolean, DateTime, JSON, ForeignKey
from printshop.core.database import Base


class CouponDB(Base):
    """优惠券数据库表"""

    __tablename__ = "coupons"

    # 主键和基本信息
    coupon_id = Column(String(50), primary_key=True, comment="优惠券ID")
    code = Column(String(50), nullable=False, unique=True, index=True, comment="优惠券代码(大写)")
    coupon_type = Column(String(20), nullable=False, comment="优惠券类型 percentage/fixed")

    # 折扣信息
    value = Column(Numeric(10, 2), nullable=False, comment="折扣值")
    currency = Column(String(3), comment="固定金额券的币种")
    min_purchase = Column(Numeric(10, 2), comment="最低消费金额")

    # 使用限制 (使用次数由 coupon_usages 表统计)
    max_uses = Column(Integer, comment="总使用次数限制")
    per_user_limit = Column(Integer, comment="单用户使用次数限制")

    # 适用范围，空列表表示全部商品
    product_ids = Column(JSON, nullable=False, default=list, comment="适用商品ID列表")
    allow_on_sale = Column(Boolean, nullable=False, default=False, comment="是否可与促销价叠加")
    show_on_product = Column(Boolean, nullable=False, default=False, comment="是否在商品页展示")

    # 状态和有效期
    active = Column(Boolean, nullable=False, default=True, index=True, comment="是否启用")
    starts_at = Column(DateTime, comment="有效开始时间")
    expires_at = Column(DateTime, comment="有效结束时间")

    # 时间戳
    created_at = Column(DateTime, default=datetime.now, comment="创建时间")
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, comment="更新时间")

    __table_args__ = (
        {'comment': '优惠券信息表'}
    )


class CouponUsageDB(Base):
    """优惠券使用记录表，每次成功核销一行"""

    __tablename__ = "coupon_usages"

    usage_id = Column(String(50), primary_key=True, comment="使用记录ID")
    coupon_id = Column(String(50), ForeignKey("coupons.coupon_id"), nullable=False, index=True, comment="优惠券ID")
    email = Column(String(255), nullable=False, index=True, comment="使用者邮箱")

    # 使用详情
    original_price = Column(Numeric(10, 2), nullable=False, comment="原始金额")
    discount_amount = Column(Numeric(10, 2), nullable=False, comment="折扣金额")
    final_price = Column(Numeric(10, 2), nullable=False, comment="最终金额")
    stripe_session = Column(String(255), comment="支付会话ID")

    used_at = Column(DateTime, default=datetime.now, comment="使用时间")

    __table_args__ = (
        {'comment': '优惠券使用记录表'}
    )
