"""
Output models for API responses using Pydantic.

Models are built straight from ORM rows (``from_attributes``) and dumped with
``mode='json'``. Nested relation fields must be eager-loaded by the service
that fetched the row.
"""

import math
from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class OrmModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class PaginationOutput(BaseModel):
    """Pagination block of list responses."""

    total: Annotated[int, Field(ge=0, description='Rows matching the filters')]
    page: Annotated[int, Field(ge=1)]
    limit: Annotated[int, Field(ge=1)]
    totalPages: Annotated[int, Field(ge=0, description='ceil(total / limit)')]


def build_pagination(total: int, page: int, limit: int) -> PaginationOutput:
    return PaginationOutput(total=total, page=page, limit=limit, totalPages=math.ceil(total / limit))


class UserOutput(OrmModel):
    user_id: int
    email: str
    full_name: str | None = None
    created_at: datetime | None = None


class AwardOutput(OrmModel):
    """Award of a user."""

    id: int
    user_id: int
    subject: str
    company: str | None = None
    date: datetime | None = None
    lang: str | None = None


class ProductOutput(OrmModel):
    product_id: int
    name: str
    sku: str | None = None


class ProductPricingOutput(OrmModel):
    price_id: int
    product_id: int
    price: Decimal
    currency: str


class ProductBundleOutput(OrmModel):
    bundle_id: int
    name: str


class BundleProductOutput(OrmModel):
    """Bundle membership row with its product and bundle."""

    bp_id: int
    bundle_id: int
    product_id: int
    product: ProductOutput
    bundle: ProductBundleOutput


class OrderDetailOutput(OrmModel):
    detail_id: int
    order_id: int
    product_id: int
    price_id: int
    quantity: int
    total_price: Decimal | None = None
    product: ProductOutput
    pricing: ProductPricingOutput


class OrderSummaryOutput(OrmModel):
    """Order columns without relations, nested inside invoices."""

    order_id: int
    order_no: str | None = None
    user_id: int
    order_status: str
    promotion_code: str | None = None
    order_date: datetime
    notification_sent: bool


class InvoiceSummaryOutput(OrmModel):
    """Invoice columns without relations, nested inside orders."""

    invoice_id: int
    invoice_no: str | None = None
    order_id: int
    user_id: int
    invoice_type: str
    invoice_date: datetime


class OrderOutput(OrderSummaryOutput):
    """Order with its user, lines and invoices."""

    user: UserOutput
    order_details: list[OrderDetailOutput]
    invoices: list[InvoiceSummaryOutput]


class InvoiceDetailOutput(OrmModel):
    detail_id: int
    invoice_id: int
    name_or_firm: str | None = None
    surname_or_tax_office: str | None = None
    identify_or_tax_number: str | None = None
    address: str | None = None
    district: str | None = None
    city: str | None = None
    country: str | None = None
    country_code: str | None = None
    phone: str | None = None


class InvoiceOutput(InvoiceSummaryOutput):
    """Invoice with its order and detail rows."""

    order: OrderSummaryOutput
    invoice_details: list[InvoiceDetailOutput]


class UserSiteOutput(OrmModel):
    site_id: int
    user_id: int
    domain: str | None = None
    site_name: str | None = None


class LeadOutput(OrmModel):
    """Lead with the site it was captured on."""

    lead_id: int
    site_id: int
    name: str
    email: str
    phone: str | None = None
    message: str | None = None
    status: str
    created_at: datetime
    updated_at: datetime
    site: UserSiteOutput


class ThemeDetailOutput(OrmModel):
    theme_detail_id: int
    theme_id: int
    title: str | None = None
    description: str | None = None
    preview_url: str | None = None
    sort_order: int


class SiteThemeOutput(OrmModel):
    """Site theme with its detail entries."""

    theme_id: int
    theme_no: str
    is_exclusive: bool
    theme_details: list[ThemeDetailOutput]
