"""
Business Logic Layer for Order Management.

An order is created together with its lines in one transaction, and deleted
together with its lines, its invoices and their detail rows. Every referenced
user, product and price is checked before anything is written so the caller
gets a precise 404 instead of a generic constraint error.
"""

from typing import List, Optional, Tuple

from aws_lambda_powertools.metrics import MetricUnit
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from storefront.dal import Database, UnitOfWork
from storefront.dal.tables import (
    Invoice,
    InvoiceDetail,
    Order,
    OrderDetail,
    Product,
    ProductPricing,
    User,
    utc_now,
)
from storefront.handlers.utils.errors import ResourceNotFoundError
from storefront.handlers.utils.observability import logger, metrics, tracer
from storefront.handlers.utils.request_params import Pagination
from storefront.models.input import CreateOrderRequest, UpdateOrderRequest
from storefront.models.output import OrderOutput, PaginationOutput, build_pagination

ORDER_NOT_FOUND = 'Order not found'

LOAD_OPTIONS = (
    selectinload(Order.user),
    selectinload(Order.order_details).selectinload(OrderDetail.product),
    selectinload(Order.order_details).selectinload(OrderDetail.pricing),
    selectinload(Order.invoices),
)


class OrderService:
    """Business logic service for order management."""

    def __init__(self, database: Database):
        self.db = database

    def _load(self, uow: UnitOfWork, order_id: int) -> Optional[OrderOutput]:
        order = uow.get(Order, order_id, options=LOAD_OPTIONS)
        return OrderOutput.model_validate(order) if order is not None else None

    @tracer.capture_method
    def list_orders(
        self,
        pagination: Pagination,
        user_id: Optional[int] = None,
        order_status: Optional[str] = None,
        order_no: Optional[str] = None,
    ) -> Tuple[List[OrderOutput], PaginationOutput]:
        """
        List orders, newest first.

        Args:
            pagination: Requested page
            user_id: Only orders of this user
            order_status: Only orders in this status
            order_no: Only the order with this number

        Returns:
            The page of orders and its pagination block
        """
        with self.db.transaction() as uow:
            orders, total = uow.find_all(
                Order,
                filters={'user_id': user_id, 'order_status': order_status, 'order_no': order_no},
                order_by=[Order.order_date.desc(), Order.order_id.desc()],
                offset=pagination.offset,
                limit=pagination.limit,
                options=LOAD_OPTIONS,
            )
            items = [OrderOutput.model_validate(order) for order in orders]
        return items, build_pagination(total, pagination.page, pagination.limit)

    @tracer.capture_method
    def get_order(self, order_id: int) -> OrderOutput:
        with self.db.transaction() as uow:
            output = self._load(uow, order_id)
        if output is None:
            raise ResourceNotFoundError(ORDER_NOT_FOUND)
        return output

    @tracer.capture_method
    def create_order(self, request: CreateOrderRequest) -> OrderOutput:
        """
        Create an order and its lines atomically.

        Raises:
            ResourceNotFoundError: If the user, a product, or a price of that
                product does not exist
        """
        with self.db.transaction() as uow:
            if not uow.exists(User, request.user_id):
                raise ResourceNotFoundError('User not found')

            for detail in request.order_details:
                if not uow.exists(Product, detail.product_id):
                    raise ResourceNotFoundError(f'Product with ID {detail.product_id} not found')
                pricing = uow.find_first(
                    ProductPricing,
                    ProductPricing.price_id == detail.price_id,
                    ProductPricing.product_id == detail.product_id,
                )
                if pricing is None:
                    raise ResourceNotFoundError(
                        f'Price not found for product_id: {detail.product_id} and price_id: {detail.price_id}'
                    )

            order = uow.insert(
                Order,
                user_id=request.user_id,
                order_no=request.order_no,
                order_status=request.order_status,
                promotion_code=request.promotion_code,
                order_date=utc_now(),
                notification_sent=False,
            )
            for detail in request.order_details:
                uow.insert(OrderDetail, order_id=order.order_id, **detail.model_dump())

            output = self._load(uow, order.order_id)

        logger.info('Order created', extra={
            'order_id': output.order_id,
            'user_id': output.user_id,
            'line_count': len(output.order_details),
        })
        metrics.add_metric(name='OrderCreated', unit=MetricUnit.Count, value=1)
        return output

    @tracer.capture_method
    def update_order(self, order_id: int, request: UpdateOrderRequest) -> OrderOutput:
        values = request.model_dump(exclude_unset=True)
        with self.db.transaction() as uow:
            if not uow.exists(Order, order_id):
                raise ResourceNotFoundError(ORDER_NOT_FOUND)
            uow.update(Order, order_id, values)
            output = self._load(uow, order_id)

        logger.info('Order updated', extra={'order_id': order_id, 'fields': sorted(values)})
        return output

    @tracer.capture_method
    def delete_order(self, order_id: int) -> None:
        """Delete the order with its lines, invoices and invoice details."""
        with self.db.transaction() as uow:
            if not uow.exists(Order, order_id):
                raise ResourceNotFoundError(ORDER_NOT_FOUND)

            invoice_ids = select(Invoice.invoice_id).where(Invoice.order_id == order_id)
            lines = uow.delete_many(OrderDetail, OrderDetail.order_id == order_id)
            uow.delete_many(InvoiceDetail, InvoiceDetail.invoice_id.in_(invoice_ids))
            invoices = uow.delete_many(Invoice, Invoice.order_id == order_id)
            uow.delete(Order, order_id)

        logger.info('Order deleted', extra={'order_id': order_id, 'lines': lines, 'invoices': invoices})
        metrics.add_metric(name='OrderDeleted', unit=MetricUnit.Count, value=1)
