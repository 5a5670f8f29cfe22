"""
数据库模型包初始化文件
"""

from .coupon_db import CouponDB, CouponUsageDB
from .quote_db import QuoteRequestDB, QuoteMessageDB
from .product_db import ProductDB
from .user_db import UserDB
from .notification_db import NotificationDB

__all__ = [
    "CouponDB",
    "CouponUsageDB",
    "QuoteRequestDB",
    "QuoteMessageDB",
    "ProductDB",
    "UserDB",
    "NotificationDB"
]
