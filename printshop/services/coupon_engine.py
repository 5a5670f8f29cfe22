"""
优惠券折扣引擎

纯函数实现，不访问数据库。商品页预览、结账前复核、管理员报价附券三处共用，
保证各处计算结果一致。
"""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional

from printshop.models.coupon import (
    Coupon,
    CouponCheckOptions,
    CouponErrorCode,
    CouponPromotion,
    CouponSummary,
    CouponType,
    CouponUsageCounts,
    CouponValidation,
    DiscountBreakdown,
)
from printshop.models.product import ProductRef

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def round2(amount: Decimal) -> Decimal:
    """四舍五入到两位小数"""
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def check_coupon_state(
    coupon: Optional[Coupon],
    product_id: str,
    usage: CouponUsageCounts,
    now: datetime
) -> Optional[CouponErrorCode]:
    """
    只依赖券本身和商品ID的校验 (存在、启用、有效期、次数、适用商品)

    这些检查排在商品价格相关检查之前，调用方可以在加载商品前先执行
    """
    if coupon is None:
        return CouponErrorCode.NOT_FOUND
    if not coupon.active:
        return CouponErrorCode.INACTIVE
    if coupon.starts_at and now < coupon.starts_at:
        return CouponErrorCode.NOT_STARTED
    if coupon.expires_at and now >= coupon.expires_at:
        return CouponErrorCode.EXPIRED
    if coupon.max_uses is not None and usage.total >= coupon.max_uses:
        return CouponErrorCode.MAX_USES
    # 单用户限制只在客户已知时检查，0 视为不限制
    if coupon.per_user_limit and usage.user is not None and usage.user >= coupon.per_user_limit:
        return CouponErrorCode.USER_LIMIT
    if not coupon.applies_to_product(product_id):
        return CouponErrorCode.WRONG_PRODUCT
    return None


def check_eligibility(
    coupon: Optional[Coupon],
    product: ProductRef,
    usage: CouponUsageCounts,
    now: datetime,
    options: Optional[CouponCheckOptions] = None
) -> Optional[CouponErrorCode]:
    """按固定顺序校验，返回第一个失败项；全部通过返回None"""
    options = options or CouponCheckOptions()

    error = check_coupon_state(coupon, product.product_id, usage, now)
    if error is not None:
        return error
    if options.check_sale and product.is_on_sale and not coupon.allow_on_sale:
        return CouponErrorCode.NOT_ON_SALE
    if coupon.min_purchase is not None and product.effective_price < coupon.min_purchase:
        return CouponErrorCode.MIN_PURCHASE
    if (
        options.check_currency
        and coupon.coupon_type == CouponType.FIXED
        and coupon.currency
        and coupon.currency != product.currency
    ):
        return CouponErrorCode.CURRENCY_MISMATCH
    return None


def compute_discount(coupon_type: CouponType, value: Decimal, original: Decimal, currency: str) -> DiscountBreakdown:
    """
    计算折扣金额

    百分比券: discount = round2(original * value / 100)
    固定金额券: discount = min(value, original)
    final = max(0, original - discount)
    """
    original = round2(original)
    if coupon_type == CouponType.PERCENTAGE:
        discount_amount = round2(original * Decimal(value) / Decimal("100"))
    else:
        discount_amount = round2(min(Decimal(value), original))

    final = max(ZERO, original - discount_amount)
    return DiscountBreakdown(
        original=original,
        discount_amount=discount_amount,
        final=round2(final),
        currency=currency
    )


def summarize_coupon(coupon: Coupon, default_currency: str = "EUR") -> CouponSummary:
    return CouponSummary(
        coupon_id=coupon.coupon_id,
        code=coupon.code,
        coupon_type=coupon.coupon_type,
        value=coupon.value,
        currency=coupon.currency,
        allow_on_sale=coupon.allow_on_sale,
        discount_label=coupon.discount_label(default_currency)
    )


def validate_and_price(
    coupon: Optional[Coupon],
    product: ProductRef,
    usage: CouponUsageCounts,
    now: Optional[datetime] = None,
    options: Optional[CouponCheckOptions] = None
) -> CouponValidation:
    """校验优惠券并计算折后价格"""
    now = now or datetime.now()
    error = check_eligibility(coupon, product, usage, now, options)
    if error is not None:
        return CouponValidation.failure(error)

    return CouponValidation(
        is_valid=True,
        coupon=summarize_coupon(coupon),
        discount=compute_discount(coupon.coupon_type, coupon.value, product.effective_price, product.currency)
    )


def _blocked_by_sale(coupon: Coupon, product: ProductRef) -> bool:
    return product.is_on_sale and not coupon.allow_on_sale


def resolve_promotions(
    coupons: Iterable[Coupon],
    products: Iterable[ProductRef],
    default_currency: str = "EUR"
) -> Dict[str, CouponPromotion]:
    """
    为每个商品挑选一张展示用优惠券

    优先选择指定了该商品的券，其次是全局券；商品促销中时跳过不允许叠加的券。
    """
    coupon_list: List[Coupon] = list(coupons)
    specific = [c for c in coupon_list if not c.is_global]
    global_coupons = [c for c in coupon_list if c.is_global]

    promotions: Dict[str, CouponPromotion] = {}
    for product in products:
        chosen = next(
            (c for c in specific if product.product_id in c.product_ids and not _blocked_by_sale(c, product)),
            None
        )
        if chosen is None:
            chosen = next((c for c in global_coupons if not _blocked_by_sale(c, product)), None)
        if chosen is None:
            continue
        promotions[product.product_id] = CouponPromotion(
            product_id=product.product_id,
            coupon_type=chosen.coupon_type,
            value=chosen.value,
            currency=chosen.currency,
            discount_label=chosen.discount_label(default_currency)
        )
    return promotions
