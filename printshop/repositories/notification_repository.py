"""
通知数据库操作层
"""

import uuid
from typing import Optional

from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from printshop.models.notification import NotificationCreate
from printshop.models.database.notification_db import NotificationDB
from printshop.models.database.coupon_db import CouponDB
from printshop.models.database.user_db import UserDB


class NotificationRepository:
    """通知数据库操作类"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_user_id_by_email(self, email: str) -> Optional[str]:
        """根据邮箱查找用户ID"""
        result = await self.db.execute(
            select(UserDB.user_id).where(UserDB.email == email)
        )
        return result.scalar_one_or_none()

    async def create(self, notification: NotificationCreate) -> NotificationDB:
        """创建通知"""
        db_notification = NotificationDB(
            notification_id=str(uuid.uuid4()),
            user_id=notification.user_id,
            type=notification.type.value,
            title=notification.title,
            message=notification.message,
            link=notification.link,
            coupon_id=notification.coupon_id,
            quote_id=notification.quote_id,
            product_id=notification.product_id,
            read=False
        )
        self.db.add(db_notification)
        await self.db.flush()
        return db_notification

    async def find_quote_coupon(self, quote_id: str) -> Optional[CouponDB]:
        """查找报价通知上附带的优惠券 (旧报价没有优惠券快照时使用)"""
        result = await self.db.execute(
            select(CouponDB)
            .join(NotificationDB, NotificationDB.coupon_id == CouponDB.coupon_id)
            .where(
                and_(
                    NotificationDB.quote_id == quote_id,
                    NotificationDB.coupon_id.is_not(None)
                )
            )
            .order_by(NotificationDB.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()
