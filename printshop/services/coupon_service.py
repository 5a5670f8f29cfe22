"""
优惠券业务服务层
负责查询优惠券、商品和使用次数，并调用折扣引擎完成校验与计价
"""

import logging
from typing import Dict, List, Optional
from decimal import Decimal
from datetime import datetime

from printshop.core.config import settings
from printshop.config.message_catalog import coupon_error_message
from printshop.models.coupon import (
    Coupon,
    CouponCheckOptions,
    CouponErrorCode,
    CouponPromotion,
    CouponRedemption,
    CouponUsageCounts,
    CouponValidation,
)
from printshop.models.product import ProductRef
from printshop.repositories.coupon_repository import CouponRepository
from printshop.repositories.product_repository import ProductRepository
from printshop.services.common_cache import coupon_cache
from printshop.services.coupon_engine import check_coupon_state, resolve_promotions, validate_and_price

logger = logging.getLogger(__name__)

# 报价场景: 价格由管理员给出，不存在促销价和币种差异
QUOTE_OFFER_OPTIONS = CouponCheckOptions(check_sale=False, check_currency=False)


class CouponService:
    """优惠券业务服务"""

    def __init__(self, coupon_repo: CouponRepository, product_repo: ProductRepository):
        self.coupon_repo = coupon_repo
        self.product_repo = product_repo
        self.cache = coupon_cache
        self.cache_ttl = settings.promotion_cache_ttl

    def _localized(self, validation: CouponValidation, locale: Optional[str]) -> CouponValidation:
        if validation.error_code is not None:
            validation.error_message = coupon_error_message(validation.error_code.value, locale)
        return validation

    async def _load_coupon(self, code: str) -> Optional[Coupon]:
        db_coupon = await self.coupon_repo.get_by_code(code)
        if not db_coupon:
            return None
        return self.coupon_repo.to_model(db_coupon)

    async def _usage_for(self, coupon: Optional[Coupon], email: Optional[str]) -> CouponUsageCounts:
        if coupon is None:
            return CouponUsageCounts()
        return await self.coupon_repo.get_usage_counts(coupon.coupon_id, email or None)

    async def get_product_ref(self, product_id: str, locale: Optional[str] = None) -> Optional[ProductRef]:
        db_product = await self.product_repo.get_by_product_id(product_id)
        if not db_product:
            return None
        return self.product_repo.to_ref(db_product, locale)

    async def validate_coupon(
        self,
        code: Optional[str],
        product_id: Optional[str],
        email: Optional[str] = None,
        locale: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> CouponValidation:
        """
        商品页/结账前的优惠券校验

        校验结果不缓存，使用次数必须是实时数据
        """
        if not code or not code.strip() or not product_id:
            return self._localized(CouponValidation.failure(CouponErrorCode.MISSING_PARAMS), locale)

        now = now or datetime.now()
        coupon = await self._load_coupon(code)
        usage = await self._usage_for(coupon, email)

        # 券自身的问题优先于商品问题报告
        error = check_coupon_state(coupon, product_id, usage, now)
        if error is not None:
            logger.info(f"优惠券校验失败 {code} 商品 {product_id}: {error.value}")
            return self._localized(CouponValidation.failure(error), locale)

        product = await self.get_product_ref(product_id, locale)
        if product is None:
            return self._localized(CouponValidation.failure(CouponErrorCode.PRODUCT_NOT_FOUND), locale)

        validation = validate_and_price(coupon, product, usage, now=now)

        if validation.is_valid:
            logger.info(f"优惠券校验通过 {validation.coupon.code} 商品 {product_id}")
        else:
            logger.info(f"优惠券校验失败 {code} 商品 {product_id}: {validation.error_code.value}")
        return self._localized(validation, locale)

    async def price_quote_offer(
        self,
        coupon_id: str,
        quoted_price: Decimal,
        product_id: Optional[str],
        email: Optional[str],
        now: Optional[datetime] = None
    ) -> CouponValidation:
        """
        管理员报价附券校验

        使用同一引擎，以报价金额计价，不检查促销和币种；
        自由报价没有关联商品，限定商品的券会因 WRONG_PRODUCT 失败
        """
        db_coupon = await self.coupon_repo.get_by_coupon_id(coupon_id)
        coupon = self.coupon_repo.to_model(db_coupon) if db_coupon else None
        usage = await self._usage_for(coupon, email)
        product = ProductRef(
            product_id=product_id or "",
            price=quoted_price,
            currency=settings.default_currency
        )
        return self._localized(
            validate_and_price(coupon, product, usage, now=now, options=QUOTE_OFFER_OPTIONS),
            None
        )

    async def get_promoted_coupons(self, use_cache: bool = True) -> List[Coupon]:
        """获取商品页展示的优惠券列表"""
        cache_key = "promoted:active"

        if use_cache:
            cached_coupons = await self.cache.get(cache_key)
            if cached_coupons:
                return [Coupon(**coupon_data) for coupon_data in cached_coupons]

        db_coupons = await self.coupon_repo.get_promoted_coupons()
        coupons = [self.coupon_repo.to_model(db_coupon) for db_coupon in db_coupons]

        if use_cache and coupons:
            await self.cache.set(
                cache_key,
                [coupon.model_dump(mode="json") for coupon in coupons],
                ttl=self.cache_ttl
            )
        return coupons

    async def get_promotions(self, product_ids: List[str], now: Optional[datetime] = None) -> Dict[str, CouponPromotion]:
        """为商品列表挑选展示用的优惠券"""
        if not product_ids:
            return {}

        now = now or datetime.now()
        coupons = [c for c in await self.get_promoted_coupons() if c.active and c.is_within_window(now)]
        if not coupons:
            return {}

        db_products = await self.product_repo.get_by_product_ids(product_ids)
        products = [ref for ref in (self.product_repo.to_ref(p) for p in db_products) if ref is not None]
        return resolve_promotions(coupons, products, settings.default_currency)

    async def record_redemption(self, redemption: CouponRedemption) -> None:
        """支付成功后记录优惠券使用"""
        await self.coupon_repo.record_usage(redemption)
        logger.info(f"优惠券已核销 {redemption.coupon_id} 客户 {redemption.email}")
