"""
路由依赖: 数据库会话 -> 仓储 -> 业务服务，以及调用方身份
"""

import secrets
from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from printshop.api.exceptions import AdminAuthError
from printshop.core.config import settings
from printshop.core.database import get_db_session
from printshop.repositories.coupon_repository import CouponRepository
from printshop.repositories.notification_repository import NotificationRepository
from printshop.repositories.product_repository import ProductRepository
from printshop.repositories.quote_repository import QuoteRepository
from printshop.services.checkout_service import CheckoutService
from printshop.services.coupon_service import CouponService
from printshop.services.file_storage import LocalFileStorage
from printshop.services.notification_service import NotificationService
from printshop.services.quote_service import QuoteService


def get_coupon_service(db: AsyncSession = Depends(get_db_session)) -> CouponService:
    return CouponService(CouponRepository(db), ProductRepository(db))


def get_quote_service(db: AsyncSession = Depends(get_db_session)) -> QuoteService:
    return QuoteService(
        quote_repo=QuoteRepository(db),
        coupon_service=CouponService(CouponRepository(db), ProductRepository(db)),
        notification_service=NotificationService(NotificationRepository(db)),
        file_storage=LocalFileStorage()
    )


def get_checkout_service(coupon_service: CouponService = Depends(get_coupon_service)) -> CheckoutService:
    return CheckoutService(coupon_service)


def get_customer_email(request: Request) -> Optional[str]:
    """调用方邮箱由上游认证层通过请求头注入"""
    email = request.headers.get(settings.customer_email_header)
    return email.strip() if email and email.strip() else None


def is_admin_key(key: Optional[str]) -> bool:
    return bool(key) and secrets.compare_digest(key, settings.admin_api_key)


def require_admin(x_admin_key: Optional[str] = Header(None)) -> None:
    if not is_admin_key(x_admin_key):
        raise AdminAuthError()
