"""Business logic for invoices and their billing detail rows."""

from typing import List, Optional, Tuple

from aws_lambda_powertools.metrics import MetricUnit
from sqlalchemy.orm import selectinload

from storefront.dal import Database, UnitOfWork
from storefront.dal.tables import Invoice, InvoiceDetail, Order, utc_now
from storefront.handlers.utils.errors import InvalidInputError, ResourceNotFoundError
from storefront.handlers.utils.observability import logger, metrics, tracer
from storefront.handlers.utils.request_params import Pagination
from storefront.models.input import CreateInvoiceRequest, UpdateInvoiceRequest
from storefront.models.output import InvoiceOutput, PaginationOutput, build_pagination

INVOICE_NOT_FOUND = 'Invoice not found'
INVOICE_TYPES = ('individual', 'corporate')
DEFAULT_INVOICE_TYPE = 'individual'

LOAD_OPTIONS = (selectinload(Invoice.order), selectinload(Invoice.invoice_details))


def normalize_invoice_type(invoice_type: Optional[str]) -> str:
    """
    Lower-case and validate an invoice type; empty means the default.

    Raises:
        InvalidInputError: If the type is not individual or corporate
    """
    if not invoice_type:
        return DEFAULT_INVOICE_TYPE
    normalized = invoice_type.strip().lower()
    if normalized not in INVOICE_TYPES:
        raise InvalidInputError(f"Invalid invoice_type. Must be one of: {', '.join(INVOICE_TYPES)}")
    return normalized


class InvoiceService:
    """Invoices always carry one detail row describing the billed party."""

    def __init__(self, database: Database):
        self.db = database

    def _load(self, uow: UnitOfWork, invoice_id: int) -> Optional[InvoiceOutput]:
        invoice = uow.get(Invoice, invoice_id, options=LOAD_OPTIONS)
        return InvoiceOutput.model_validate(invoice) if invoice is not None else None

    @tracer.capture_method
    def list_invoices(
        self,
        pagination: Pagination,
        user_id: Optional[int] = None,
        order_id: Optional[int] = None,
        invoice_no: Optional[str] = None,
    ) -> Tuple[List[InvoiceOutput], PaginationOutput]:
        with self.db.transaction() as uow:
            invoices, total = uow.find_all(
                Invoice,
                filters={'user_id': user_id, 'order_id': order_id, 'invoice_no': invoice_no},
                order_by=[Invoice.invoice_date.desc(), Invoice.invoice_id.desc()],
                offset=pagination.offset,
                limit=pagination.limit,
                options=LOAD_OPTIONS,
            )
            items = [InvoiceOutput.model_validate(invoice) for invoice in invoices]
        return items, build_pagination(total, pagination.page, pagination.limit)

    @tracer.capture_method
    def get_invoice(self, invoice_id: int) -> InvoiceOutput:
        with self.db.transaction() as uow:
            output = self._load(uow, invoice_id)
        if output is None:
            raise ResourceNotFoundError(INVOICE_NOT_FOUND)
        return output

    @tracer.capture_method
    def create_invoice(self, request: CreateInvoiceRequest) -> InvoiceOutput:
        """
        Invoice an order; the invoice and its detail row are written together.

        Raises:
            InvalidInputError: If the invoice type is unknown
            ResourceNotFoundError: If the order does not exist
        """
        invoice_type = normalize_invoice_type(request.invoice_type)

        with self.db.transaction() as uow:
            if not uow.exists(Order, request.order_id):
                raise ResourceNotFoundError('Order not found')

            invoice = uow.insert(
                Invoice,
                user_id=request.user_id,
                order_id=request.order_id,
                invoice_type=invoice_type,
                invoice_no=request.invoice_no,
                invoice_date=utc_now(),
            )
            uow.insert(InvoiceDetail, invoice_id=invoice.invoice_id, **request.invoice_details.model_dump())
            output = self._load(uow, invoice.invoice_id)

        logger.info('Invoice created', extra={
            'invoice_id': output.invoice_id,
            'order_id': output.order_id,
            'invoice_type': invoice_type,
        })
        metrics.add_metric(name='InvoiceCreated', unit=MetricUnit.Count, value=1)
        return output

    @tracer.capture_method
    def update_invoice(self, invoice_id: int, request: UpdateInvoiceRequest) -> InvoiceOutput:
        values = request.model_dump(exclude_unset=True)
        detail_values = values.pop('invoice_details', None) or {}
        if 'invoice_type' in values:
            values['invoice_type'] = normalize_invoice_type(values['invoice_type'])

        with self.db.transaction() as uow:
            if not uow.exists(Invoice, invoice_id):
                raise ResourceNotFoundError(INVOICE_NOT_FOUND)
            detail = uow.find_first(InvoiceDetail, InvoiceDetail.invoice_id == invoice_id)
            if detail is None:
                raise ResourceNotFoundError('Invoice details not found')

            uow.update(Invoice, invoice_id, values)
            uow.update(InvoiceDetail, detail.detail_id, detail_values)
            output = self._load(uow, invoice_id)

        logger.info('Invoice updated', extra={
            'invoice_id': invoice_id,
            'fields': sorted(values),
            'detail_fields': sorted(detail_values),
        })
        return output

    @tracer.capture_method
    def delete_invoice(self, invoice_id: int) -> None:
        with self.db.transaction() as uow:
            if not uow.exists(Invoice, invoice_id):
                raise ResourceNotFoundError(INVOICE_NOT_FOUND)
            uow.delete_many(InvoiceDetail, InvoiceDetail.invoice_id == invoice_id)
            uow.delete(Invoice, invoice_id)

        logger.info('Invoice deleted', extra={'invoice_id': invoice_id})
        metrics.add_metric(name='InvoiceDeleted', unit=MetricUnit.Count, value=1)
