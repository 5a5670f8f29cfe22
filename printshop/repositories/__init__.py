"""
仓库包初始化文件 - 数据库访问层
"""

from .coupon_repository import CouponRepository
from .notification_repository import NotificationRepository
from .product_repository import ProductRepository
from .quote_repository import QuoteRepository

__all__ = [
    "CouponRepository",
    "NotificationRepository",
    "ProductRepository",
    "QuoteRepository"
]
