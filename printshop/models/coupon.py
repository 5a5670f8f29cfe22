"""
优惠券相关数据模型
"""

from decimal import Decimal
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator
from enum import Enum


class CouponType(str, Enum):
    """优惠券类型枚举"""
    PERCENTAGE = "percentage"  # 百分比折扣券, value 为 0-100
    FIXED = "fixed"  # 固定金额折扣券


class CouponErrorCode(str, Enum):
    """优惠券校验错误码，前十项的顺序即校验顺序"""
    NOT_FOUND = "NOT_FOUND"
    INACTIVE = "INACTIVE"
    NOT_STARTED = "NOT_STARTED"
    EXPIRED = "EXPIRED"
    MAX_USES = "MAX_USES"
    USER_LIMIT = "USER_LIMIT"
    WRONG_PRODUCT = "WRONG_PRODUCT"
    NOT_ON_SALE = "NOT_ON_SALE"
    MIN_PURCHASE = "MIN_PURCHASE"
    CURRENCY_MISMATCH = "CURRENCY_MISMATCH"
    # 服务层附加错误 (查询阶段)
    MISSING_PARAMS = "MISSING_PARAMS"
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"


def normalize_coupon_code(code: str) -> str:
    """优惠券代码不区分大小写，统一存储为大写"""
    return code.strip().upper()


def format_coupon_value(value: Decimal) -> str:
    """去掉多余的小数零，例如 10.00 -> 10, 12.50 -> 12.5"""
    if value == value.to_integral_value():
        return str(value.quantize(Decimal("1")))
    return format(value.normalize(), "f")


def coupon_discount_label(coupon_type: str, value: Decimal, currency: Optional[str], default_currency: str = "EUR") -> str:
    """折扣展示文本: 百分比券为 "10%"，固定金额券为 "5 EUR" """
    if coupon_type == CouponType.PERCENTAGE.value:
        return f"{format_coupon_value(value)}%"
    return f"{format_coupon_value(value)} {currency or default_currency}"


class Coupon(BaseModel):
    """优惠券基础模型"""

    coupon_id: str = Field(..., description="优惠券ID")
    code: str = Field(..., min_length=1, max_length=50, description="优惠券代码")
    coupon_type: CouponType = Field(..., description="优惠券类型")
    value: Decimal = Field(..., ge=0, description="折扣值")
    currency: Optional[str] = Field(None, max_length=3, description="固定金额券币种")
    min_purchase: Optional[Decimal] = Field(None, ge=0, description="最低消费金额")
    max_uses: Optional[int] = Field(None, ge=0, description="总使用次数限制")
    per_user_limit: Optional[int] = Field(None, ge=0, description="单用户使用次数限制")
    product_ids: List[str] = Field(default_factory=list, description="适用商品ID，空列表表示全部商品")
    allow_on_sale: bool = Field(default=False, description="是否可用于促销商品")
    show_on_product: bool = Field(default=False, description="是否在商品页展示")
    active: bool = Field(default=True, description="是否启用")
    starts_at: Optional[datetime] = Field(None, description="有效开始时间")
    expires_at: Optional[datetime] = Field(None, description="有效结束时间")
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @field_validator('code')
    @classmethod
    def normalize_code(cls, v):
        return normalize_coupon_code(v)

    @model_validator(mode='after')
    def validate_value_range(self):
        """验证折扣值范围"""
        if self.coupon_type == CouponType.PERCENTAGE and self.value > Decimal('100'):
            raise ValueError('百分比折扣值不能超过100')
        if self.coupon_type == CouponType.FIXED and self.value <= 0:
            raise ValueError('固定金额折扣值必须大于0')
        if self.starts_at and self.expires_at and self.expires_at <= self.starts_at:
            raise ValueError('结束时间必须晚于开始时间')
        return self

    @property
    def is_global(self) -> bool:
        """未限定商品的券适用于全部商品"""
        return not self.product_ids

    def applies_to_product(self, product_id: str) -> bool:
        """检查是否适用于指定商品"""
        return self.is_global or product_id in self.product_ids

    def is_within_window(self, now: datetime) -> bool:
        """检查当前时间是否在 [starts_at, expires_at) 内"""
        if self.starts_at and now < self.starts_at:
            return False
        if self.expires_at and now >= self.expires_at:
            return False
        return True

    def discount_label(self, default_currency: str = "EUR") -> str:
        return coupon_discount_label(self.coupon_type.value, self.value, self.currency, default_currency)


class CouponCreate(BaseModel):
    """创建优惠券模型"""

    code: str = Field(..., min_length=1, max_length=50)
    coupon_type: CouponType = Field(...)
    value: Decimal = Field(..., ge=0)
    currency: Optional[str] = Field(None, max_length=3)
    min_purchase: Optional[Decimal] = Field(None, ge=0)
    max_uses: Optional[int] = Field(None, ge=0)
    per_user_limit: Optional[int] = Field(None, ge=0)
    product_ids: List[str] = Field(default_factory=list)
    allow_on_sale: bool = False
    show_on_product: bool = False
    active: bool = True
    starts_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    @field_validator('code')
    @classmethod
    def normalize_code(cls, v):
        return normalize_coupon_code(v)


class CouponUsageCounts(BaseModel):
    """优惠券使用次数 (来自使用记录表的计数)"""

    total: int = Field(default=0, ge=0, description="总使用次数")
    user: Optional[int] = Field(None, ge=0, description="当前客户使用次数，客户未知时为None")


class CouponCheckOptions(BaseModel):
    """校验选项，报价场景不检查促销与币种"""

    check_sale: bool = True
    check_currency: bool = True


class CouponSummary(BaseModel):
    """校验结果中的优惠券摘要"""

    coupon_id: str
    code: str
    coupon_type: CouponType
    value: Decimal
    currency: Optional[str] = None
    allow_on_sale: bool = False
    discount_label: str


class DiscountBreakdown(BaseModel):
    """折扣计算结果，金额均为两位小数"""

    original: Decimal = Field(..., description="原价(促销时为促销价)")
    discount_amount: Decimal = Field(..., description="折扣金额")
    final: Decimal = Field(..., description="最终金额")
    currency: str = Field(..., description="商品币种")


class CouponValidation(BaseModel):
    """优惠券验证结果"""

    is_valid: bool = Field(..., description="是否有效")
    error_code: Optional[CouponErrorCode] = Field(None, description="第一个失败的校验项")
    error_message: Optional[str] = Field(None, description="本地化错误提示")
    coupon: Optional[CouponSummary] = Field(None, description="优惠券信息")
    discount: Optional[DiscountBreakdown] = Field(None, description="折扣计算结果")

    @classmethod
    def failure(cls, code: CouponErrorCode) -> "CouponValidation":
        return cls(is_valid=False, error_code=code)


class CouponValidateRequest(BaseModel):
    """商品页优惠券预览请求"""

    code: Optional[str] = Field(None, description="优惠券代码")
    product_id: Optional[str] = Field(None, description="商品ID")
    email: Optional[str] = Field(None, description="客户邮箱，用于单用户限制")
    locale: Optional[str] = Field(None, description="错误提示语言")


class CouponPromotion(BaseModel):
    """商品卡片上展示的促销优惠券"""

    product_id: str
    coupon_type: CouponType
    value: Decimal
    currency: Optional[str] = None
    discount_label: str


class CouponRedemption(BaseModel):
    """支付成功后的优惠券核销记录"""

    coupon_id: str = Field(..., description="优惠券ID")
    email: str = Field(..., description="客户邮箱")
    original_price: Decimal = Field(..., ge=0)
    discount_amount: Decimal = Field(..., ge=0)
    final_price: Decimal = Field(..., ge=0)
    stripe_session: Optional[str] = None
