"""
优惠券折扣引擎测试
"""

import pytest
from decimal import Decimal
from datetime import datetime, timedelta

from printshop.models.coupon import (
    Coupon,
    CouponCheckOptions,
    CouponErrorCode,
    CouponType,
    CouponUsageCounts,
)
from printshop.models.product import ProductRef
from printshop.services.coupon_engine import (
    check_coupon_state,
    compute_discount,
    resolve_promotions,
    round2,
    validate_and_price,
)

NOW = datetime(2026, 3, 1, 12, 0, 0)


def make_coupon(**overrides) -> Coupon:
    values = {
        "coupon_id": "c1",
        "code": "save10",
        "coupon_type": CouponType.PERCENTAGE,
        "value": Decimal("10"),
        "starts_at": NOW - timedelta(days=1),
        "expires_at": NOW + timedelta(days=1),
    }
    values.update(overrides)
    return Coupon(**values)


def make_product(**overrides) -> ProductRef:
    values = {"product_id": "p1", "price": Decimal("100.00"), "currency": "EUR"}
    values.update(overrides)
    return ProductRef(**values)


NO_USAGE = CouponUsageCounts(total=0, user=0)


class TestValidationOrder:
    """校验顺序: 第一个失败项生效"""

    def test_missing_coupon(self):
        result = validate_and_price(None, make_product(), NO_USAGE, NOW)
        assert result.is_valid is False
        assert result.error_code == CouponErrorCode.NOT_FOUND

    def test_inactive_wins_over_expired(self):
        coupon = make_coupon(active=False, starts_at=NOW - timedelta(days=10), expires_at=NOW - timedelta(days=5))
        assert validate_and_price(coupon, make_product(), NO_USAGE, NOW).error_code == CouponErrorCode.INACTIVE

    def test_not_started(self):
        coupon = make_coupon(starts_at=NOW + timedelta(hours=1), expires_at=None)
        assert validate_and_price(coupon, make_product(), NO_USAGE, NOW).error_code == CouponErrorCode.NOT_STARTED

    def test_expired_at_exact_boundary(self):
        coupon = make_coupon(expires_at=NOW)
        assert validate_and_price(coupon, make_product(), NO_USAGE, NOW).error_code == CouponErrorCode.EXPIRED

    def test_starts_at_exact_boundary_is_valid(self):
        coupon = make_coupon(starts_at=NOW)
        assert validate_and_price(coupon, make_product(), NO_USAGE, NOW).is_valid is True

    def test_max_uses_wins_over_user_limit(self):
        coupon = make_coupon(max_uses=5, per_user_limit=1)
        usage = CouponUsageCounts(total=5, user=1)
        assert validate_and_price(coupon, make_product(), usage, NOW).error_code == CouponErrorCode.MAX_USES

    def test_user_limit(self):
        coupon = make_coupon(per_user_limit=1)
        usage = CouponUsageCounts(total=1, user=1)
        assert validate_and_price(coupon, make_product(), usage, NOW).error_code == CouponErrorCode.USER_LIMIT

    def test_user_limit_skipped_for_unknown_customer(self):
        coupon = make_coupon(per_user_limit=1)
        usage = CouponUsageCounts(total=3, user=None)
        assert validate_and_price(coupon, make_product(), usage, NOW).is_valid is True

    def test_user_limit_zero_means_unlimited(self):
        coupon = make_coupon(per_user_limit=0)
        usage = CouponUsageCounts(total=3, user=3)
        assert validate_and_price(coupon, make_product(), usage, NOW).is_valid is True

    def test_wrong_product(self):
        coupon = make_coupon(product_ids=["p2"])
        assert validate_and_price(coupon, make_product(), NO_USAGE, NOW).error_code == CouponErrorCode.WRONG_PRODUCT

    def test_not_on_sale(self):
        product = make_product(price=Decimal("50.00"), sale_price=Decimal("40.00"), on_sale=True)
        result = validate_and_price(make_coupon(allow_on_sale=False), product, NO_USAGE, NOW)
        assert result.error_code == CouponErrorCode.NOT_ON_SALE

    def test_on_sale_flag_without_sale_price_is_not_a_sale(self):
        product = make_product(on_sale=True, sale_price=None)
        assert validate_and_price(make_coupon(), product, NO_USAGE, NOW).is_valid is True

    def test_min_purchase_uses_effective_price(self):
        product = make_product(price=Decimal("60.00"), sale_price=Decimal("45.00"), on_sale=True)
        coupon = make_coupon(allow_on_sale=True, min_purchase=Decimal("50.00"))
        assert validate_and_price(coupon, product, NO_USAGE, NOW).error_code == CouponErrorCode.MIN_PURCHASE

    def test_currency_mismatch_for_fixed_coupon(self):
        coupon = make_coupon(coupon_type=CouponType.FIXED, value=Decimal("5"), currency="BGN")
        assert validate_and_price(coupon, make_product(), NO_USAGE, NOW).error_code == CouponErrorCode.CURRENCY_MISMATCH

    def test_percentage_coupon_ignores_currency(self):
        coupon = make_coupon(currency="BGN")
        assert validate_and_price(coupon, make_product(), NO_USAGE, NOW).is_valid is True

    def test_options_disable_sale_and_currency_checks(self):
        product = make_product(sale_price=Decimal("80.00"), on_sale=True)
        coupon = make_coupon(coupon_type=CouponType.FIXED, value=Decimal("5"), currency="BGN")
        options = CouponCheckOptions(check_sale=False, check_currency=False)
        assert validate_and_price(coupon, product, NO_USAGE, NOW, options).is_valid is True

    def test_coupon_state_checks_need_only_product_id(self):
        assert check_coupon_state(make_coupon(), "any", NO_USAGE, NOW) is None
        assert check_coupon_state(make_coupon(product_ids=["p2"]), "p1", NO_USAGE, NOW) == CouponErrorCode.WRONG_PRODUCT
        expired = make_coupon(expires_at=NOW - timedelta(hours=1))
        assert check_coupon_state(expired, "p2", NO_USAGE, NOW) == CouponErrorCode.EXPIRED


class TestPricing:
    """折扣计算"""

    def test_percentage_discount(self):
        result = validate_and_price(make_coupon(), make_product(), NO_USAGE, NOW)
        assert result.discount.original == Decimal("100.00")
        assert result.discount.discount_amount == Decimal("10.00")
        assert result.discount.final == Decimal("90.00")
        assert result.discount.currency == "EUR"
        assert result.coupon.code == "SAVE10"
        assert result.coupon.discount_label == "10%"

    def test_percentage_rounds_half_up(self):
        breakdown = compute_discount(CouponType.PERCENTAGE, Decimal("15"), Decimal("0.30"), "EUR")
        # 0.30 * 15% = 0.045 -> 0.05
        assert breakdown.discount_amount == Decimal("0.05")
        assert breakdown.final == Decimal("0.25")

    def test_fixed_discount_capped_at_price(self):
        breakdown = compute_discount(CouponType.FIXED, Decimal("30"), Decimal("20.00"), "EUR")
        assert breakdown.discount_amount == Decimal("20.00")
        assert breakdown.final == Decimal("0.00")

    def test_hundred_percent_gives_zero(self):
        breakdown = compute_discount(CouponType.PERCENTAGE, Decimal("100"), Decimal("49.99"), "EUR")
        assert breakdown.final == Decimal("0.00")

    def test_sale_price_is_the_original(self):
        product = make_product(price=Decimal("50.00"), sale_price=Decimal("40.00"), on_sale=True)
        result = validate_and_price(make_coupon(allow_on_sale=True), product, NO_USAGE, NOW)
        assert result.discount.original == Decimal("40.00")
        assert result.discount.final == Decimal("36.00")

    @pytest.mark.parametrize("price,value", [
        (Decimal("0.01"), Decimal("1")),
        (Decimal("19.99"), Decimal("33")),
        (Decimal("1234.56"), Decimal("7.5")),
        (Decimal("10.00"), Decimal("0")),
    ])
    def test_percentage_bounds(self, price, value):
        breakdown = compute_discount(CouponType.PERCENTAGE, value, price, "EUR")
        assert Decimal("0") <= breakdown.discount_amount <= breakdown.original
        assert breakdown.final == breakdown.original - breakdown.discount_amount

    def test_round2(self):
        assert round2(Decimal("2.675")) == Decimal("2.68")
        assert round2(Decimal("2")) == Decimal("2.00")


class TestPromotions:
    """商品卡片促销券选择"""

    def test_specific_coupon_preferred_over_global(self):
        global_coupon = make_coupon(coupon_id="g", code="ALL5", value=Decimal("5"))
        specific = make_coupon(coupon_id="s", code="VASE20", value=Decimal("20"), product_ids=["p1"])
        promotions = resolve_promotions([global_coupon, specific], [make_product(), make_product(product_id="p2")])

        assert promotions["p1"].discount_label == "20%"
        assert promotions["p2"].discount_label == "5%"

    def test_sale_products_skip_coupons_not_allowed_on_sale(self):
        blocked = make_coupon(coupon_id="g", code="ALL5", value=Decimal("5"))
        allowed = make_coupon(
            coupon_id="f", code="FLAT3", coupon_type=CouponType.FIXED, value=Decimal("3.50"),
            currency="EUR", allow_on_sale=True
        )
        product = make_product(sale_price=Decimal("80.00"), on_sale=True)
        promotions = resolve_promotions([blocked, allowed], [product])

        assert promotions["p1"].discount_label == "3.5 EUR"

    def test_no_coupon_no_promotion(self):
        product = make_product(sale_price=Decimal("80.00"), on_sale=True)
        assert resolve_promotions([make_coupon()], [product]) == {}
