"""
SQLAlchemy ORM mapping of the storefront schema.

The schema itself is owned by the database (migrations live outside this
repository); these classes only describe it. Foreign keys do not cascade,
dependent rows are removed explicitly by the services.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    user_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True)
    full_name: Mapped[Optional[str]] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)


class Award(Base):
    __tablename__ = "awards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.user_id"), index=True)
    subject: Mapped[str] = mapped_column(String(255))
    company: Mapped[Optional[str]] = mapped_column(String(255))
    date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    lang: Mapped[Optional[str]] = mapped_column(String(10))


class Product(Base):
    __tablename__ = "products"

    product_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    sku: Mapped[Optional[str]] = mapped_column(String(64))


class ProductPricing(Base):
    __tablename__ = "products_pricing"

    price_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.product_id"), index=True)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    currency: Mapped[str] = mapped_column(String(3), default="USD")


class ProductBundle(Base):
    __tablename__ = "product_bundles"

    bundle_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255))


class BundleProduct(Base):
    __tablename__ = "bundle_products"
    __table_args__ = (UniqueConstraint("bundle_id", "product_id", name="uq_bundle_products_bundle_product"),)

    bp_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    bundle_id: Mapped[int] = mapped_column(ForeignKey("product_bundles.bundle_id"))
    product_id: Mapped[int] = mapped_column(ForeignKey("products.product_id"))

    product: Mapped[Product] = relationship(lazy="raise")
    bundle: Mapped[ProductBundle] = relationship(lazy="raise")


class Order(Base):
    __tablename__ = "orders"

    order_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_no: Mapped[Optional[str]] = mapped_column(String(64), unique=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.user_id"), index=True)
    order_status: Mapped[str] = mapped_column(String(32), default="order_start")
    promotion_code: Mapped[Optional[str]] = mapped_column(String(64))
    order_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    notification_sent: Mapped[bool] = mapped_column(Boolean, default=False)

    user: Mapped[User] = relationship(lazy="raise")
    order_details: Mapped[List["OrderDetail"]] = relationship(
        lazy="raise", order_by="OrderDetail.detail_id"
    )
    invoices: Mapped[List["Invoice"]] = relationship(
        lazy="raise", order_by="Invoice.invoice_id", viewonly=True
    )


class OrderDetail(Base):
    __tablename__ = "order_details"

    detail_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.order_id"), index=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.product_id"))
    price_id: Mapped[int] = mapped_column(ForeignKey("products_pricing.price_id"))
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    total_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2))

    product: Mapped[Product] = relationship(lazy="raise")
    pricing: Mapped[ProductPricing] = relationship(lazy="raise")


class Invoice(Base):
    __tablename__ = "invoices"

    invoice_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    invoice_no: Mapped[Optional[str]] = mapped_column(String(64), unique=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.order_id"), index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.user_id"), index=True)
    invoice_type: Mapped[str] = mapped_column(String(16), default="individual")
    invoice_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    order: Mapped[Order] = relationship(lazy="raise")
    invoice_details: Mapped[List["InvoiceDetail"]] = relationship(
        lazy="raise", order_by="InvoiceDetail.detail_id"
    )


class InvoiceDetail(Base):
    __tablename__ = "invoice_details"

    detail_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    invoice_id: Mapped[int] = mapped_column(ForeignKey("invoices.invoice_id"), index=True)
    name_or_firm: Mapped[Optional[str]] = mapped_column(String(255))
    surname_or_tax_office: Mapped[Optional[str]] = mapped_column(String(255))
    identify_or_tax_number: Mapped[Optional[str]] = mapped_column(String(64))
    address: Mapped[Optional[str]] = mapped_column(Text)
    district: Mapped[Optional[str]] = mapped_column(String(128))
    city: Mapped[Optional[str]] = mapped_column(String(128))
    country: Mapped[Optional[str]] = mapped_column(String(128))
    country_code: Mapped[Optional[str]] = mapped_column(String(8))
    phone: Mapped[Optional[str]] = mapped_column(String(32))


class UserSite(Base):
    __tablename__ = "user_sites"

    site_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.user_id"), index=True)
    domain: Mapped[Optional[str]] = mapped_column(String(255))
    site_name: Mapped[Optional[str]] = mapped_column(String(255))


class Lead(Base):
    __tablename__ = "site_mdl_leads"

    lead_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    site_id: Mapped[int] = mapped_column(ForeignKey("user_sites.site_id"), index=True)
    name: Mapped[str] = mapped_column(String(255))
    email: Mapped[str] = mapped_column(String(255))
    phone: Mapped[Optional[str]] = mapped_column(String(32))
    message: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(32), default="new")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    site: Mapped[UserSite] = relationship(lazy="raise")


class SiteTheme(Base):
    __tablename__ = "def_site_themes"

    theme_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    theme_no: Mapped[str] = mapped_column(String(64), unique=True)
    is_exclusive: Mapped[bool] = mapped_column(Boolean, default=False)

    theme_details: Mapped[List["ThemeDetail"]] = relationship(
        lazy="raise", order_by="ThemeDetail.theme_detail_id"
    )


class ThemeDetail(Base):
    __tablename__ = "theme_details"

    theme_detail_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    theme_id: Mapped[int] = mapped_column(ForeignKey("def_site_themes.theme_id"), index=True)
    title: Mapped[Optional[str]] = mapped_column(String(255))
    description: Mapped[Optional[str]] = mapped_column(Text)
    preview_url: Mapped[Optional[str]] = mapped_column(String(512))
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
