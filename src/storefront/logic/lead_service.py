"""Business logic for leads captured on user sites."""

from typing import List, Optional, Tuple

from aws_lambda_powertools.metrics import MetricUnit
from sqlalchemy.orm import selectinload

from storefront.dal import Database
from storefront.dal.tables import Lead, UserSite, utc_now
from storefront.handlers.utils.errors import ResourceNotFoundError
from storefront.handlers.utils.observability import logger, metrics, tracer
from storefront.handlers.utils.request_params import Pagination
from storefront.models.input import CreateLeadRequest, UpdateLeadRequest
from storefront.models.output import LeadOutput, PaginationOutput, build_pagination

LEAD_NOT_FOUND = 'Lead not found'

LOAD_OPTIONS = (selectinload(Lead.site),)


class LeadService:

    def __init__(self, database: Database):
        self.db = database

    @tracer.capture_method
    def list_leads(
        self,
        pagination: Pagination,
        site_id: Optional[int] = None,
        status: Optional[str] = None,
    ) -> Tuple[List[LeadOutput], PaginationOutput]:
        with self.db.transaction() as uow:
            leads, total = uow.find_all(
                Lead,
                filters={'site_id': site_id, 'status': status},
                order_by=[Lead.created_at.desc(), Lead.lead_id.desc()],
                offset=pagination.offset,
                limit=pagination.limit,
                options=LOAD_OPTIONS,
            )
            items = [LeadOutput.model_validate(lead) for lead in leads]
        return items, build_pagination(total, pagination.page, pagination.limit)

    @tracer.capture_method
    def get_lead(self, lead_id: int) -> LeadOutput:
        with self.db.transaction() as uow:
            lead = uow.get(Lead, lead_id, options=LOAD_OPTIONS)
            if lead is None:
                raise ResourceNotFoundError(LEAD_NOT_FOUND)
            return LeadOutput.model_validate(lead)

    @tracer.capture_method
    def create_lead(self, request: CreateLeadRequest) -> LeadOutput:
        with self.db.transaction() as uow:
            if not uow.exists(UserSite, request.site_id):
                raise ResourceNotFoundError('Site not found')

            now = utc_now()
            lead = uow.insert(Lead, created_at=now, updated_at=now, **request.model_dump())
            output = LeadOutput.model_validate(uow.get(Lead, lead.lead_id, options=LOAD_OPTIONS))

        logger.info('Lead created', extra={'lead_id': output.lead_id, 'site_id': output.site_id})
        metrics.add_metric(name='LeadCreated', unit=MetricUnit.Count, value=1)
        return output

    @tracer.capture_method
    def update_lead(self, lead_id: int, request: UpdateLeadRequest) -> LeadOutput:
        values = request.model_dump(exclude_unset=True)
        with self.db.transaction() as uow:
            if not uow.exists(Lead, lead_id):
                raise ResourceNotFoundError(LEAD_NOT_FOUND)
            uow.update(Lead, lead_id, {**values, 'updated_at': utc_now()})
            output = LeadOutput.model_validate(uow.get(Lead, lead_id, options=LOAD_OPTIONS))

        logger.info('Lead updated', extra={'lead_id': lead_id, 'fields': sorted(values)})
        return output

    @tracer.capture_method
    def delete_lead(self, lead_id: int) -> None:
        with self.db.transaction() as uow:
            if not uow.exists(Lead, lead_id):
                raise ResourceNotFoundError(LEAD_NOT_FOUND)
            uow.delete(Lead, lead_id)

        logger.info('Lead deleted', extra={'lead_id': lead_id})
        metrics.add_metric(name='LeadDeleted', unit=MetricUnit.Count, value=1)
