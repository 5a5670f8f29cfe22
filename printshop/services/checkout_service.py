"""
结账服务
下单前使用同一折扣引擎复核优惠券，支付成功后根据会话元数据记录核销
"""

import logging
from decimal import Decimal
from typing import Dict, Optional

from printshop.api.exceptions import BusinessException
from printshop.models.checkout import CheckoutPreparation
from printshop.models.coupon import CouponRedemption
from printshop.services.coupon_engine import round2
from printshop.services.coupon_service import CouponService

logger = logging.getLogger(__name__)


class CheckoutService:
    """结账业务服务"""

    def __init__(self, coupon_service: CouponService):
        self.coupon_service = coupon_service

    async def prepare_checkout(
        self,
        product_id: str,
        email: Optional[str] = None,
        coupon_code: Optional[str] = None,
        locale: Optional[str] = None
    ) -> CheckoutPreparation:
        """计算应付金额，优惠券无效时拒绝结账"""
        product = await self.coupon_service.get_product_ref(product_id, locale)
        if product is None:
            raise BusinessException("PRODUCT_NOT_FOUND", "Product not found", 404)
        if not product.published:
            raise BusinessException("PRODUCT_NOT_AVAILABLE", "Product is not available")

        original = round2(product.effective_price)
        discount_amount = Decimal("0.00")
        final = original
        coupon_id = code = None

        if coupon_code and coupon_code.strip():
            validation = await self.coupon_service.validate_coupon(coupon_code, product_id, email, locale)
            if not validation.is_valid:
                raise BusinessException("COUPON_INVALID", validation.error_message or validation.error_code.value)
            discount_amount = validation.discount.discount_amount
            final = validation.discount.final
            coupon_id = validation.coupon.coupon_id
            code = validation.coupon.code

        metadata = {"productId": product.product_id}
        if coupon_id:
            metadata.update({
                "couponId": coupon_id,
                "originalPrice": str(original),
                "discountAmount": str(discount_amount),
            })

        logger.info(f"结账准备 商品 {product_id} 金额 {final} {product.currency} (优惠券: {code or '-'})")
        return CheckoutPreparation(
            product_id=product.product_id,
            product_name=product.name,
            currency=product.currency,
            original_price=original,
            discount_amount=discount_amount,
            final_price=final,
            amount_cents=int(final * 100),
            coupon_id=coupon_id,
            coupon_code=code,
            metadata=metadata
        )

    async def record_paid_session(self, metadata: Dict[str, str], email: str, stripe_session: Optional[str] = None) -> bool:
        """
        支付成功回调: 会话带有优惠券时记录一次使用

        返回是否记录了核销
        """
        coupon_id = metadata.get("couponId")
        if not coupon_id:
            return False

        original = round2(Decimal(metadata.get("originalPrice") or "0"))
        discount_amount = round2(Decimal(metadata.get("discountAmount") or "0"))
        await self.coupon_service.record_redemption(CouponRedemption(
            coupon_id=coupon_id,
            email=email,
            original_price=original,
            discount_amount=discount_amount,
            final_price=max(Decimal("0.00"), original - discount_amount),
            stripe_session=stripe_session
        ))
        return True
