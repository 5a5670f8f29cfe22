"""
路由测试 - FastAPI TestClient + 依赖覆盖
"""

import pytest
from decimal import Decimal
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient

from printshop.api.deps import get_checkout_service, get_coupon_service, get_quote_service
from printshop.api.exceptions import QuoteNotFoundError, QuoteValidationError
from printshop.core.config import settings
from printshop.main import app
from printshop.models.checkout import CheckoutPreparation
from printshop.models.coupon import CouponErrorCode, CouponValidation
from printshop.models.quote import LocalizedQuoteMessage, QuoteAction, QuoteRequest, QuoteStatus, QuoteSubmitResult
from printshop.services.checkout_service import CheckoutService
from printshop.services.coupon_service import CouponService
from printshop.services.quote_service import QuoteService

CUSTOMER = {"X-User-Email": "maria@example.com"}


def sample_quote(**overrides) -> QuoteRequest:
    values = {
        "quote_id": "quote_001",
        "quote_number": "QUO-AB12@D4D",
        "name": "Maria",
        "email": "maria@example.com",
        "status": QuoteStatus.QUOTED,
        "quoted_price": Decimal("49.99"),
    }
    values.update(overrides)
    return QuoteRequest(**values)


@pytest.fixture
def quote_service():
    return AsyncMock(spec=QuoteService)


@pytest.fixture
def coupon_service():
    return AsyncMock(spec=CouponService)


@pytest.fixture
def checkout_service():
    return AsyncMock(spec=CheckoutService)


@pytest.fixture
def client(quote_service, coupon_service, checkout_service):
    app.dependency_overrides[get_quote_service] = lambda: quote_service
    app.dependency_overrides[get_coupon_service] = lambda: coupon_service
    app.dependency_overrides[get_checkout_service] = lambda: checkout_service
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestCouponRoutes:

    def test_validate_failure_is_200_with_code(self, client, coupon_service):
        coupon_service.validate_coupon.return_value = CouponValidation(
            is_valid=False, error_code=CouponErrorCode.EXPIRED, error_message="This coupon has expired"
        )

        response = client.post("/coupons/validate", json={"code": "OLD", "product_id": "prod_001"}, headers=CUSTOMER)

        assert response.status_code == 200
        assert response.json()["error_code"] == "EXPIRED"
        assert coupon_service.validate_coupon.await_args.kwargs["email"] == "maria@example.com"

    def test_promotions_split_ids(self, client, coupon_service):
        coupon_service.get_promotions.return_value = {}

        response = client.get("/coupons/promotions", params={"product_ids": "a, b,,c"})

        assert response.status_code == 200
        coupon_service.get_promotions.assert_awaited_once_with(["a", "b", "c"])


class TestQuoteRoutes:

    def test_submit_multipart(self, client, quote_service):
        quote_service.submit_quote.return_value = QuoteSubmitResult(quote_id="quote_001", quote_number="QUO-AB12@D4D")

        response = client.post(
            "/quotes",
            data={"name": "Maria", "email": "maria@example.com"},
            files={"file": ("part.stl", b"solid part", "application/octet-stream")}
        )

        assert response.status_code == 201
        assert response.json()["quote_number"] == "QUO-AB12@D4D"
        submission, attachment = quote_service.submit_quote.await_args.args
        assert submission.name == "Maria"
        assert attachment.filename == "part.stl"
        assert attachment.size == 10

    def test_submit_empty_file_is_ignored(self, client, quote_service):
        quote_service.submit_quote.return_value = QuoteSubmitResult(quote_id="quote_001", quote_number="QUO-AB12@D4D")

        response = client.post(
            "/quotes",
            data={"name": "Maria", "email": "maria@example.com"},
            files={"file": ("part.stl", b"", "application/octet-stream")}
        )

        assert response.status_code == 201
        _, attachment = quote_service.submit_quote.await_args.args
        assert attachment is None

    def test_submit_oversized_file_not_buffered(self, client, quote_service, monkeypatch):
        monkeypatch.setattr(settings, "max_upload_size_mb", 0)
        quote_service.submit_quote.return_value = QuoteSubmitResult(quote_id="quote_001", quote_number="QUO-AB12@D4D")

        client.post(
            "/quotes",
            data={"name": "Maria", "email": "maria@example.com"},
            files={"file": ("part.stl", b"solid part", "application/octet-stream")}
        )

        _, attachment = quote_service.submit_quote.await_args.args
        assert attachment.size == 10
        assert attachment.content == b""

    def test_submit_validation_error(self, client, quote_service):
        quote_service.submit_quote.side_effect = QuoteValidationError("INVALID_EMAIL", "Invalid email address")

        response = client.post("/quotes", data={"name": "Maria", "email": "nope"})

        assert response.status_code == 400
        assert response.json() == {"error": "INVALID_EMAIL", "message": "Invalid email address"}

    def test_respond_uses_caller_header(self, client, quote_service):
        quote_service.respond_to_quote.return_value = sample_quote(status=QuoteStatus.PENDING, user_response="45?")

        response = client.post(
            "/quotes/respond",
            json={"quote_id": "quote_001", "action": "counter_offer", "message": "45?"},
            headers=CUSTOMER
        )

        assert response.status_code == 200
        assert response.json()["display_status"] == "counter_offer"
        quote_service.respond_to_quote.assert_awaited_once_with(
            "quote_001", "maria@example.com", QuoteAction.COUNTER_OFFER, "45?"
        )

    def test_respond_without_caller_is_not_found(self, client, quote_service):
        response = client.post("/quotes/respond", json={"quote_id": "quote_001", "action": "accept"})

        assert response.status_code == 404
        assert response.json()["message"] == "Quote not found or cannot be responded to"
        quote_service.respond_to_quote.assert_not_awaited()

    def test_respond_not_found(self, client, quote_service):
        quote_service.respond_to_quote.side_effect = QuoteNotFoundError()

        response = client.post("/quotes/respond", json={"quote_id": "quote_001", "action": "accept"}, headers=CUSTOMER)

        assert response.status_code == 404

    def test_respond_unknown_action(self, client):
        response = client.post("/quotes/respond", json={"quote_id": "quote_001", "action": "haggle"}, headers=CUSTOMER)

        assert response.status_code == 422

    def test_messages_staff_access(self, client, quote_service):
        quote_service.list_messages.return_value = [
            LocalizedQuoteMessage(
                message_id=1, sender_type="user", lines=["Offer accepted"], created_at="2026-01-01T10:00:00"
            )
        ]

        response = client.get(
            "/quotes/quote_001/messages",
            params={"locale": "en"},
            headers={"X-Admin-Key": settings.admin_api_key}
        )

        assert response.status_code == 200
        assert response.json()[0]["lines"] == ["Offer accepted"]
        quote_service.list_messages.assert_awaited_once_with("quote_001", None, is_staff=True, locale="en")


class TestAdminRoutes:

    def test_requires_admin_key(self, client, quote_service):
        response = client.get("/admin/quotes", headers={"X-Admin-Key": "wrong"})

        assert response.status_code == 401
        quote_service.list_quotes.assert_not_awaited()

    def test_list_with_display_filter(self, client, quote_service):
        quote_service.list_quotes.return_value = [sample_quote(status=QuoteStatus.PENDING, user_response="45?")]

        response = client.get(
            "/admin/quotes",
            params={"status": "counter_offer"},
            headers={"X-Admin-Key": settings.admin_api_key}
        )

        assert response.status_code == 200
        assert response.json()[0]["display_status"] == "counter_offer"
        quote_service.list_quotes.assert_awaited_once_with("counter_offer")

    def test_set_offer(self, client, quote_service):
        quote_service.admin_set_offer.return_value = sample_quote()

        response = client.put(
            "/admin/quotes/quote_001",
            json={"status": "quoted", "quoted_price": "49.99", "coupon_id": "coupon_001"},
            headers={"X-Admin-Key": settings.admin_api_key}
        )

        assert response.status_code == 200
        quote_id, update, locale = quote_service.admin_set_offer.await_args.args
        assert quote_id == "quote_001"
        assert update.quoted_price == Decimal("49.99")
        assert update.coupon_id == "coupon_001"


class TestCheckoutRoutes:

    def test_prepare(self, client, checkout_service):
        checkout_service.prepare_checkout.return_value = CheckoutPreparation(
            product_id="prod_001",
            currency="EUR",
            original_price=Decimal("25.00"),
            discount_amount=Decimal("0.00"),
            final_price=Decimal("25.00"),
            amount_cents=2500,
            metadata={"productId": "prod_001"}
        )

        response = client.post("/checkout/prepare", json={"product_id": "prod_001"}, headers=CUSTOMER)

        assert response.status_code == 200
        assert response.json()["amount_cents"] == 2500
        assert checkout_service.prepare_checkout.await_args.kwargs["email"] == "maria@example.com"


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
