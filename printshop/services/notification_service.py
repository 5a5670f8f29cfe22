"""
报价通知服务
通知内容为语言无关的结构化数据，由前端按用户语言渲染
"""

import json
import logging
from decimal import Decimal
from typing import Optional, Tuple

from printshop.core.config import settings
from printshop.models.coupon import coupon_discount_label
from printshop.models.notification import NotificationCreate, NotificationType
from printshop.repositories.notification_repository import NotificationRepository
from printshop.services.quote_messages import format_price

logger = logging.getLogger(__name__)

QUOTE_OFFER_LINK = "/my-orders"


class NotificationService:
    """通知业务服务"""

    def __init__(self, notification_repo: NotificationRepository):
        self.notification_repo = notification_repo

    async def notify_quote_offer(
        self,
        quote_id: str,
        email: str,
        quoted_price: Decimal,
        coupon_id: Optional[str] = None,
        product_id: Optional[str] = None
    ) -> Optional[str]:
        """
        向客户发送报价通知

        客户没有注册账号时不发送，返回None；否则返回通知ID
        """
        user_id = await self.notification_repo.find_user_id_by_email(email)
        if not user_id:
            logger.info(f"报价 {quote_id} 的客户 {email} 没有账号，跳过通知")
            return None

        payload = NotificationCreate(
            user_id=user_id,
            type=NotificationType.COUPON if coupon_id else NotificationType.QUOTE_OFFER,
            title=NotificationType.QUOTE_OFFER.value,
            message=json.dumps({"price": format_price(quoted_price), "hasCoupon": bool(coupon_id)}),
            link=QUOTE_OFFER_LINK,
            coupon_id=coupon_id,
            quote_id=quote_id,
            product_id=product_id
        )
        db_notification = await self.notification_repo.create(payload)
        logger.info(f"报价通知已创建 {db_notification.notification_id} 报价 {quote_id}")
        return db_notification.notification_id

    async def find_offer_coupon_label(self, quote_id: str) -> Optional[Tuple[str, str]]:
        """
        从报价通知上找回附带的优惠券 (code, 折扣文本)

        仅用于没有优惠券快照的旧报价
        """
        db_coupon = await self.notification_repo.find_quote_coupon(quote_id)
        if not db_coupon:
            return None
        label = coupon_discount_label(db_coupon.coupon_type, db_coupon.value, db_coupon.currency, settings.default_currency)
        return db_coupon.code, label
