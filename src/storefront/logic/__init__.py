"""
Business Logic Layer Module.

One service class per resource. Services receive the process wide
``Database`` at construction, run each operation inside a single
transaction, perform the existence checks the handlers report as 404/400,
and record business metrics.
"""

from storefront.logic.award_service import AwardService
from storefront.logic.bundle_product_service import BundleProductService
from storefront.logic.invoice_service import InvoiceService
from storefront.logic.lead_service import LeadService
from storefront.logic.order_service import OrderService
from storefront.logic.site_theme_service import SiteThemeService

__all__ = [
    "AwardService",
    "BundleProductService",
    "InvoiceService",
    "LeadService",
    "OrderService",
    "SiteThemeService",
]
