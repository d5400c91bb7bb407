"""Business logic for the awards a user has received."""

from typing import List

from aws_lambda_powertools.metrics import MetricUnit

from storefront.dal import Database
from storefront.dal.tables import Award
from storefront.handlers.utils.errors import ResourceNotFoundError
from storefront.handlers.utils.observability import logger, metrics, tracer
from storefront.models.input import CreateAwardRequest, UpdateAwardRequest
from storefront.models.output import AwardOutput

AWARD_NOT_FOUND = 'Award not found'


class AwardService:
    """Awards are always addressed through the owning user."""

    def __init__(self, database: Database):
        self.db = database

    @tracer.capture_method
    def list_awards(self, user_id: int) -> List[AwardOutput]:
        with self.db.transaction() as uow:
            awards, _ = uow.find_all(Award, filters={'user_id': user_id}, order_by=[Award.id.asc()])
            return [AwardOutput.model_validate(award) for award in awards]

    @tracer.capture_method
    def get_award(self, user_id: int, award_id: int) -> AwardOutput:
        with self.db.transaction() as uow:
            award = uow.find_first(Award, Award.id == award_id, Award.user_id == user_id)
            if award is None:
                raise ResourceNotFoundError(AWARD_NOT_FOUND)
            return AwardOutput.model_validate(award)

    @tracer.capture_method
    def create_award(self, user_id: int, request: CreateAwardRequest) -> AwardOutput:
        with self.db.transaction() as uow:
            award = uow.insert(Award, user_id=user_id, **request.model_dump())
            output = AwardOutput.model_validate(uow.get(Award, award.id))

        logger.info('Award created', extra={'award_id': output.id, 'user_id': user_id})
        metrics.add_metric(name='AwardCreated', unit=MetricUnit.Count, value=1)
        return output

    @tracer.capture_method
    def update_award(self, user_id: int, award_id: int, request: UpdateAwardRequest) -> AwardOutput:
        values = request.model_dump(exclude_unset=True)
        with self.db.transaction() as uow:
            if uow.find_first(Award, Award.id == award_id, Award.user_id == user_id) is None:
                raise ResourceNotFoundError(AWARD_NOT_FOUND)
            uow.update(Award, award_id, values)
            output = AwardOutput.model_validate(uow.get(Award, award_id))

        logger.info('Award updated', extra={'award_id': award_id, 'fields': sorted(values)})
        return output

    @tracer.capture_method
    def delete_award(self, user_id: int, award_id: int) -> None:
        with self.db.transaction() as uow:
            if uow.find_first(Award, Award.id == award_id, Award.user_id == user_id) is None:
                raise ResourceNotFoundError(AWARD_NOT_FOUND)
            uow.delete(Award, award_id)

        logger.info('Award deleted', extra={'award_id': award_id, 'user_id': user_id})
        metrics.add_metric(name='AwardDeleted', unit=MetricUnit.Count, value=1)
