"""
优惠券数据库操作层
"""

import uuid
from typing import List, Optional
from datetime import datetime

from sqlalchemy import select, and_, or_, func
from sqlalchemy.ext.asyncio import AsyncSession

from printshop.models.coupon import Coupon, CouponCreate, CouponRedemption, CouponUsageCounts, normalize_coupon_code
from printshop.models.database.coupon_db import CouponDB, CouponUsageDB


class CouponRepository:
    """优惠券数据库操作类"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_code(self, code: str) -> Optional[CouponDB]:
        """根据优惠券代码获取优惠券 (不区分大小写)"""
        result = await self.db.execute(
            select(CouponDB).where(CouponDB.code == normalize_coupon_code(code))
        )
        return result.scalar_one_or_none()

    async def get_by_coupon_id(self, coupon_id: str) -> Optional[CouponDB]:
        """根据优惠券ID获取优惠券"""
        result = await self.db.execute(
            select(CouponDB).where(CouponDB.coupon_id == coupon_id)
        )
        return result.scalar_one_or_none()

    async def create(self, coupon_data: CouponCreate) -> CouponDB:
        """创建优惠券"""
        db_coupon = CouponDB(
            coupon_id=str(uuid.uuid4()),
            code=coupon_data.code,
            coupon_type=coupon_data.coupon_type.value,
            value=coupon_data.value,
            currency=coupon_data.currency,
            min_purchase=coupon_data.min_purchase,
            max_uses=coupon_data.max_uses,
            per_user_limit=coupon_data.per_user_limit,
            product_ids=list(coupon_data.product_ids),
            allow_on_sale=coupon_data.allow_on_sale,
            show_on_product=coupon_data.show_on_product,
            active=coupon_data.active,
            starts_at=coupon_data.starts_at,
            expires_at=coupon_data.expires_at
        )
        self.db.add(db_coupon)
        await self.db.flush()
        return db_coupon

    async def count_usages(self, coupon_id: str) -> int:
        """统计优惠券总使用次数"""
        result = await self.db.execute(
            select(func.count(CouponUsageDB.usage_id)).where(CouponUsageDB.coupon_id == coupon_id)
        )
        return result.scalar() or 0

    async def count_user_usages(self, coupon_id: str, email: str) -> int:
        """统计某客户对优惠券的使用次数"""
        result = await self.db.execute(
            select(func.count(CouponUsageDB.usage_id)).where(
                and_(
                    CouponUsageDB.coupon_id == coupon_id,
                    CouponUsageDB.email == email
                )
            )
        )
        return result.scalar() or 0

    async def get_usage_counts(self, coupon_id: str, email: Optional[str] = None) -> CouponUsageCounts:
        """获取总使用次数和客户使用次数"""
        total = await self.count_usages(coupon_id)
        user = await self.count_user_usages(coupon_id, email) if email else None
        return CouponUsageCounts(total=total, user=user)

    async def record_usage(self, redemption: CouponRedemption) -> CouponUsageDB:
        """记录一次成功核销"""
        usage = CouponUsageDB(
            usage_id=str(uuid.uuid4()),
            coupon_id=redemption.coupon_id,
            email=redemption.email,
            original_price=redemption.original_price,
            discount_amount=redemption.discount_amount,
            final_price=redemption.final_price,
            stripe_session=redemption.stripe_session,
            used_at=datetime.now()
        )
        self.db.add(usage)
        await self.db.flush()
        return usage

    async def get_promoted_coupons(self, current_time: Optional[datetime] = None) -> List[CouponDB]:
        """获取商品页展示的有效优惠券"""
        if current_time is None:
            current_time = datetime.now()

        query = select(CouponDB).where(
            and_(
                CouponDB.show_on_product.is_(True),
                CouponDB.active.is_(True),
                or_(CouponDB.starts_at.is_(None), CouponDB.starts_at <= current_time),
                or_(CouponDB.expires_at.is_(None), CouponDB.expires_at > current_time)
            )
        ).order_by(CouponDB.created_at)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    def to_model(self, db_coupon: CouponDB) -> Coupon:
        """转换为Pydantic模型"""
        return Coupon(
            coupon_id=db_coupon.coupon_id,
            code=db_coupon.code,
            coupon_type=db_coupon.coupon_type,
            value=db_coupon.value,
            currency=db_coupon.currency,
            min_purchase=db_coupon.min_purchase,
            max_uses=db_coupon.max_uses,
            per_user_limit=db_coupon.per_user_limit,
            product_ids=db_coupon.product_ids or [],
            allow_on_sale=bool(db_coupon.allow_on_sale),
            show_on_product=bool(db_coupon.show_on_product),
            active=bool(db_coupon.active),
            starts_at=db_coupon.starts_at,
            expires_at=db_coupon.expires_at,
            created_at=db_coupon.created_at or datetime.now(),
            updated_at=db_coupon.updated_at or datetime.now()
        )
