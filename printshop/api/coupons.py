"""
优惠券接口
"""

from typing import Dict, Optional

from fastapi import APIRouter, Depends, Query

from printshop.api.deps import get_coupon_service, get_customer_email
from printshop.models.coupon import CouponPromotion, CouponValidateRequest, CouponValidation
from printshop.services.coupon_service import CouponService

router = APIRouter(prefix="/coupons", tags=["优惠券"])


@router.post("/validate", response_model=CouponValidation)
async def validate_coupon(
    payload: CouponValidateRequest,
    caller_email: Optional[str] = Depends(get_customer_email),
    coupon_service: CouponService = Depends(get_coupon_service),
):
    """商品页优惠券预览，校验失败也返回200和错误码"""
    return await coupon_service.validate_coupon(
        payload.code,
        payload.product_id,
        email=payload.email or caller_email,
        locale=payload.locale
    )


@router.get("/promotions", response_model=Dict[str, CouponPromotion])
async def list_promotions(
    product_ids: str = Query("", description="逗号分隔的商品ID"),
    coupon_service: CouponService = Depends(get_coupon_service),
):
    ids = [pid.strip() for pid in product_ids.split(",") if pid.strip()]
    return await coupon_service.get_promotions(ids)
