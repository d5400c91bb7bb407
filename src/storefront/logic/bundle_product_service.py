"""Business logic for bundle membership of products."""

from typing import List, Optional, Tuple

from aws_lambda_powertools.metrics import MetricUnit
from sqlalchemy.orm import selectinload

from storefront.dal import Database, UnitOfWork
from storefront.dal.tables import BundleProduct, Product, ProductBundle
from storefront.handlers.utils.errors import InvalidInputError, ResourceNotFoundError
from storefront.handlers.utils.observability import logger, metrics, tracer
from storefront.handlers.utils.request_params import Pagination
from storefront.models.input import CreateBundleProductRequest, UpdateBundleProductRequest
from storefront.models.output import BundleProductOutput, PaginationOutput, build_pagination

BUNDLE_PRODUCT_NOT_FOUND = 'Bundle product not found'

LOAD_OPTIONS = (selectinload(BundleProduct.product), selectinload(BundleProduct.bundle))


class BundleProductService:
    """Membership rows are unique per (bundle_id, product_id); the database enforces it."""

    def __init__(self, database: Database):
        self.db = database

    def _load(self, uow: UnitOfWork, bp_id: int) -> BundleProductOutput:
        return BundleProductOutput.model_validate(uow.get(BundleProduct, bp_id, options=LOAD_OPTIONS))

    @tracer.capture_method
    def list_bundle_products(
        self,
        pagination: Pagination,
        bundle_id: Optional[int] = None,
        product_id: Optional[int] = None,
    ) -> Tuple[List[BundleProductOutput], PaginationOutput]:
        with self.db.transaction() as uow:
            rows, total = uow.find_all(
                BundleProduct,
                filters={'bundle_id': bundle_id, 'product_id': product_id},
                order_by=[BundleProduct.bp_id.asc()],
                offset=pagination.offset,
                limit=pagination.limit,
                options=LOAD_OPTIONS,
            )
            items = [BundleProductOutput.model_validate(row) for row in rows]
        return items, build_pagination(total, pagination.page, pagination.limit)

    @tracer.capture_method
    def get_bundle_product(self, bp_id: int) -> BundleProductOutput:
        with self.db.transaction() as uow:
            row = uow.get(BundleProduct, bp_id, options=LOAD_OPTIONS)
            if row is None:
                raise ResourceNotFoundError(BUNDLE_PRODUCT_NOT_FOUND)
            return BundleProductOutput.model_validate(row)

    @tracer.capture_method
    def create_bundle_product(self, request: CreateBundleProductRequest) -> BundleProductOutput:
        with self.db.transaction() as uow:
            if not uow.exists(ProductBundle, request.bundle_id):
                raise InvalidInputError('Bundle not found')
            if not uow.exists(Product, request.product_id):
                raise InvalidInputError('Product not found')

            row = uow.insert(BundleProduct, bundle_id=request.bundle_id, product_id=request.product_id)
            output = self._load(uow, row.bp_id)

        logger.info('Bundle product created', extra={'bp_id': output.bp_id, 'bundle_id': output.bundle_id})
        metrics.add_metric(name='BundleProductCreated', unit=MetricUnit.Count, value=1)
        return output

    @tracer.capture_method
    def update_bundle_product(self, bp_id: int, request: UpdateBundleProductRequest) -> BundleProductOutput:
        values = request.model_dump(exclude_unset=True)
        with self.db.transaction() as uow:
            if not uow.exists(BundleProduct, bp_id):
                raise ResourceNotFoundError(BUNDLE_PRODUCT_NOT_FOUND)
            if 'bundle_id' in values and not uow.exists(ProductBundle, values['bundle_id']):
                raise InvalidInputError('Referenced bundle does not exist')
            if 'product_id' in values and not uow.exists(Product, values['product_id']):
                raise InvalidInputError('Referenced product does not exist')

            uow.update(BundleProduct, bp_id, values)
            output = self._load(uow, bp_id)

        logger.info('Bundle product updated', extra={'bp_id': bp_id, 'fields': sorted(values)})
        return output

    @tracer.capture_method
    def delete_bundle_product(self, bp_id: int) -> None:
        # A missing row surfaces as a NOT_FOUND constraint violation
        with self.db.transaction() as uow:
            uow.delete(BundleProduct, bp_id)

        logger.info('Bundle product deleted', extra={'bp_id': bp_id})
        metrics.add_metric(name='BundleProductDeleted', unit=MetricUnit.Count, value=1)
