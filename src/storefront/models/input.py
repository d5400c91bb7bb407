"""
Input models for request validation using Pydantic.

Create models declare the mandatory fields of each resource; update models
are fully optional and are applied with ``model_dump(exclude_unset=True)`` so
only the fields present in the request are merged into the stored row.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, Field, field_validator
from pydantic_core import PydanticCustomError


def _reject_null(value: Any, field: str) -> Any:
    if value is None:
        raise ValueError(f'{field} cannot be null')
    return value


# Awards

class CreateAwardRequest(BaseModel):
    """Request model for creating an award of a user."""

    subject: Annotated[str, Field(
        min_length=1,
        max_length=255,
        description='Award subject',
        examples=['Best Design 2024']
    )]

    company: Annotated[str | None, Field(
        max_length=255,
        description='Company that granted the award'
    )] = None

    date: Annotated[datetime | None, Field(
        description='Date the award was granted (ISO 8601)'
    )] = None

    lang: Annotated[str | None, Field(
        max_length=10,
        examples=['en', 'tr']
    )] = None


class UpdateAwardRequest(BaseModel):
    """Request model for updating an award; every field is optional."""

    subject: Annotated[str | None, Field(min_length=1, max_length=255)] = None
    company: Annotated[str | None, Field(max_length=255)] = None
    date: datetime | None = None
    lang: Annotated[str | None, Field(max_length=10)] = None

    @field_validator('subject')
    @classmethod
    def validate_subject(cls, v: str | None) -> str:
        return _reject_null(v, 'subject')


# Bundle products

class CreateBundleProductRequest(BaseModel):
    """Request model for adding a product to a bundle."""

    bundle_id: Annotated[int, Field(description='Bundle the product belongs to', examples=[1])]
    product_id: Annotated[int, Field(description='Product placed in the bundle', examples=[42])]


class UpdateBundleProductRequest(BaseModel):
    """Request model for moving a bundle product to another bundle or product."""

    bundle_id: int | None = None
    product_id: int | None = None

    @field_validator('bundle_id', 'product_id')
    @classmethod
    def validate_not_null(cls, v: int | None, info) -> int:
        return _reject_null(v, info.field_name)


# Orders

class OrderDetailRequest(BaseModel):
    """One line of a new order."""

    product_id: int
    price_id: int

    quantity: Annotated[int, Field(
        ge=1,
        description='Number of units ordered'
    )] = 1

    total_price: Annotated[Decimal | None, Field(
        ge=0,
        description='Line total as charged'
    )] = None


class CreateOrderRequest(BaseModel):
    """Request model for creating an order together with its lines."""

    user_id: Annotated[int, Field(description='Ordering user', examples=[1])]

    order_details: Annotated[list[OrderDetailRequest], Field(
        description='Order lines, created in the same transaction as the order'
    )]

    order_no: Annotated[str | None, Field(max_length=64)] = None

    order_status: Annotated[str, Field(
        min_length=1,
        max_length=32
    )] = 'order_start'

    promotion_code: Annotated[str | None, Field(max_length=64)] = None

    @field_validator('order_details', mode='before')
    @classmethod
    def validate_order_details_array(cls, v: Any) -> Any:
        # anything but an array is reported the same way as a missing field
        if not isinstance(v, list):
            raise PydanticCustomError('missing', 'order_details must be an array')
        return v


class UpdateOrderRequest(BaseModel):
    """Request model for updating the mutable fields of an order."""

    order_status: Annotated[str | None, Field(min_length=1, max_length=32)] = None
    promotion_code: Annotated[str | None, Field(max_length=64)] = None
    notification_sent: bool | None = None

    @field_validator('order_status', 'notification_sent')
    @classmethod
    def validate_not_null(cls, v: Any, info) -> Any:
        return _reject_null(v, info.field_name)


# Invoices

class InvoiceDetailRequest(BaseModel):
    """Billing party of an invoice."""

    name_or_firm: Annotated[str | None, Field(max_length=255)] = None
    surname_or_tax_office: Annotated[str | None, Field(max_length=255)] = None
    identify_or_tax_number: Annotated[str | None, Field(max_length=64)] = None
    address: str | None = None
    district: Annotated[str | None, Field(max_length=128)] = None
    city: Annotated[str | None, Field(max_length=128)] = None
    country: Annotated[str | None, Field(max_length=128)] = None
    country_code: Annotated[str | None, Field(max_length=8)] = None
    phone: Annotated[str | None, Field(max_length=32)] = None


class CreateInvoiceRequest(BaseModel):
    """Request model for invoicing an order."""

    user_id: int
    order_id: int
    invoice_details: InvoiceDetailRequest

    # Checked case-insensitively by the invoice service
    invoice_type: Annotated[str | None, Field(
        description='individual or corporate; defaults to individual',
        examples=['individual', 'corporate']
    )] = None

    invoice_no: Annotated[str | None, Field(max_length=64)] = None


class UpdateInvoiceRequest(BaseModel):
    """Request model for updating an invoice and its detail row."""

    invoice_type: str | None = None
    invoice_no: Annotated[str | None, Field(max_length=64)] = None
    invoice_details: InvoiceDetailRequest | None = None

    @field_validator('invoice_type', 'invoice_details')
    @classmethod
    def validate_not_null(cls, v: Any, info) -> Any:
        return _reject_null(v, info.field_name)


# Leads

class CreateLeadRequest(BaseModel):
    """Request model for a lead captured by a site's contact form."""

    site_id: int
    name: Annotated[str, Field(min_length=1, max_length=255)]
    email: Annotated[str, Field(min_length=1, max_length=255, examples=['jane@example.com'])]
    phone: Annotated[str | None, Field(max_length=32)] = None
    message: str | None = None
    status: Annotated[str, Field(min_length=1, max_length=32)] = 'new'


class UpdateLeadRequest(BaseModel):
    """Request model for updating a lead."""

    name: Annotated[str | None, Field(min_length=1, max_length=255)] = None
    email: Annotated[str | None, Field(min_length=1, max_length=255)] = None
    phone: Annotated[str | None, Field(max_length=32)] = None
    message: str | None = None
    status: Annotated[str | None, Field(min_length=1, max_length=32)] = None

    @field_validator('name', 'email', 'status')
    @classmethod
    def validate_not_null(cls, v: Any, info) -> Any:
        return _reject_null(v, info.field_name)


# Site themes

class ThemeDetailRequest(BaseModel):
    """Detail entry of a site theme."""

    title: Annotated[str | None, Field(max_length=255)] = None
    description: str | None = None
    preview_url: Annotated[str | None, Field(max_length=512)] = None
    sort_order: int = 0


class ThemeDetailUpsertRequest(BaseModel):
    """Detail entry sent with a theme update; with an id it updates, without it inserts."""

    theme_detail_id: int | None = None
    title: Annotated[str | None, Field(max_length=255)] = None
    description: str | None = None
    preview_url: Annotated[str | None, Field(max_length=512)] = None
    sort_order: int | None = None

    @field_validator('sort_order')
    @classmethod
    def validate_sort_order(cls, v: int | None) -> int:
        return _reject_null(v, 'sort_order')


class CreateSiteThemeRequest(BaseModel):
    """Request model for creating a site theme with optional detail entries."""

    theme_no: Annotated[str, Field(min_length=1, max_length=64, examples=['T-100'])]
    is_exclusive: bool = False
    theme_details: list[ThemeDetailRequest] = Field(default_factory=list)


class UpdateSiteThemeRequest(BaseModel):
    """Request model for updating a site theme and upserting its details."""

    theme_no: Annotated[str | None, Field(min_length=1, max_length=64)] = None
    is_exclusive: bool | None = None
    theme_details: list[ThemeDetailUpsertRequest] | None = None

    @field_validator('theme_no', 'is_exclusive', 'theme_details')
    @classmethod
    def validate_not_null(cls, v: Any, info) -> Any:
        return _reject_null(v, info.field_name)
