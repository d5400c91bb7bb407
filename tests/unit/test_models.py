"""
Unit tests for Pydantic models.

Covers request validation (mandatory fields, partial updates, null handling)
and the pagination block of list responses.
"""

import pytest
from decimal import Decimal
from pydantic import ValidationError

from storefront.models.input import (
    CreateAwardRequest,
    CreateInvoiceRequest,
    CreateOrderRequest,
    CreateSiteThemeRequest,
    UpdateAwardRequest,
    UpdateInvoiceRequest,
    UpdateLeadRequest,
    UpdateSiteThemeRequest,
)
from storefront.models.output import build_pagination


class TestCreateAwardRequest:

    def test_minimal_request(self):
        request = CreateAwardRequest(subject="Best Design")

        assert request.subject == "Best Design"
        assert request.company is None
        assert request.date is None

    def test_iso_date(self):
        request = CreateAwardRequest(subject="Best Design", date="2024-03-01T00:00:00Z")

        assert request.date.year == 2024
        assert request.date.month == 3

    @pytest.mark.parametrize("subject", ["", None])
    def test_subject_required(self, subject):
        with pytest.raises(ValidationError):
            CreateAwardRequest(subject=subject)


class TestPartialUpdates:

    def test_only_sent_fields_are_dumped(self):
        request = UpdateAwardRequest.model_validate({"company": "ACME"})

        assert request.model_dump(exclude_unset=True) == {"company": "ACME"}

    def test_nullable_field_can_be_cleared(self):
        request = UpdateAwardRequest.model_validate({"company": None})

        assert request.model_dump(exclude_unset=True) == {"company": None}

    def test_mandatory_column_cannot_be_nulled(self):
        with pytest.raises(ValidationError):
            UpdateAwardRequest.model_validate({"subject": None})

        with pytest.raises(ValidationError):
            UpdateLeadRequest.model_validate({"email": None})

    def test_nested_detail_partial(self):
        request = UpdateInvoiceRequest.model_validate({"invoice_details": {"city": "Izmir"}})

        assert request.model_dump(exclude_unset=True) == {"invoice_details": {"city": "Izmir"}}


class TestCreateOrderRequest:

    def test_defaults(self):
        request = CreateOrderRequest.model_validate({
            "user_id": 1,
            "order_details": [{"product_id": 2, "price_id": 3}],
        })

        assert request.order_status == "order_start"
        assert request.order_details[0].quantity == 1
        assert request.order_details[0].total_price is None

    def test_decimal_total_price(self):
        request = CreateOrderRequest.model_validate({
            "user_id": 1,
            "order_details": [{"product_id": 2, "price_id": 3, "quantity": 2, "total_price": "99.80"}],
        })

        assert request.order_details[0].total_price == Decimal("99.80")

    def test_quantity_must_be_positive(self):
        with pytest.raises(ValidationError):
            CreateOrderRequest.model_validate({
                "user_id": 1,
                "order_details": [{"product_id": 2, "price_id": 3, "quantity": 0}],
            })

    def test_order_details_must_be_array(self):
        with pytest.raises(ValidationError) as exc_info:
            CreateOrderRequest.model_validate({"user_id": 1, "order_details": {"product_id": 2}})

        assert exc_info.value.errors()[0]["type"] == "missing"


class TestOtherRequests:

    def test_invoice_requires_details_object(self):
        with pytest.raises(ValidationError):
            CreateInvoiceRequest.model_validate({"user_id": 1, "order_id": 2})

    def test_theme_defaults(self):
        request = CreateSiteThemeRequest.model_validate({"theme_no": "T-1"})

        assert request.is_exclusive is False
        assert request.theme_details == []

    def test_theme_detail_upsert_entries(self):
        request = UpdateSiteThemeRequest.model_validate({
            "theme_details": [{"theme_detail_id": 5, "title": "Hero"}, {"title": "Footer"}],
        })

        dumped = request.model_dump(exclude_unset=True)["theme_details"]
        assert dumped == [{"theme_detail_id": 5, "title": "Hero"}, {"title": "Footer"}]


class TestBuildPagination:

    @pytest.mark.parametrize("total,limit,total_pages", [
        (0, 10, 0),
        (1, 10, 1),
        (10, 10, 1),
        (11, 10, 2),
        (25, 7, 4),
    ])
    def test_total_pages_is_ceiling(self, total, limit, total_pages):
        pagination = build_pagination(total, page=1, limit=limit)

        assert pagination.totalPages == total_pages
        assert pagination.model_dump() == {"total": total, "page": 1, "limit": limit, "totalPages": total_pages}
