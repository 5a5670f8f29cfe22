from typing import Optional

from fastapi import APIRouter, Depends

from printshop.api.deps import get_checkout_service, get_customer_email
from printshop.models.checkout import CheckoutPreparation, CheckoutRequest
from printshop.services.checkout_service import CheckoutService

router = APIRouter(prefix="/checkout", tags=["结账"])


@router.post("/prepare", response_model=CheckoutPreparation)
async def prepare_checkout(
    payload: CheckoutRequest,
    caller_email: Optional[str] = Depends(get_customer_email),
    checkout_service: CheckoutService = Depends(get_checkout_service),
):
    """复核优惠券并返回支付金额"""
    return await checkout_service.prepare_checkout(
        payload.product_id,
        email=payload.email or caller_email,
        coupon_code=payload.coupon_code,
        locale=payload.locale
    )
