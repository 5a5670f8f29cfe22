"""
数据模型包初始化文件
"""

from .coupon import (
    Coupon,
    CouponCreate,
    CouponType,
    CouponErrorCode,
    CouponCheckOptions,
    CouponUsageCounts,
    CouponValidation,
    CouponPromotion,
    CouponRedemption,
    DiscountBreakdown,
)
from .product import ProductRef
from .quote import (
    QuoteRequest,
    QuoteMessage,
    QuoteStatus,
    DisplayStatus,
    QuoteAction,
    SenderType,
    derive_display_status,
)
from .notification import NotificationCreate, NotificationType

__all__ = [
    "Coupon",
    "CouponCreate",
    "CouponType",
    "CouponErrorCode",
    "CouponCheckOptions",
    "CouponUsageCounts",
    "CouponValidation",
    "CouponPromotion",
    "CouponRedemption",
    "DiscountBreakdown",
    "ProductRef",
    "QuoteRequest",
    "QuoteMessage",
    "QuoteStatus",
    "DisplayStatus",
    "QuoteAction",
    "SenderType",
    "derive_display_status",
    "NotificationCreate",
    "NotificationType",
]
