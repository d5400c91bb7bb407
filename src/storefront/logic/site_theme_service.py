"""
Business logic for site themes.

A theme owns an ordered list of detail entries. Updates upsert those
entries: an entry with ``theme_detail_id`` patches that detail (which must
belong to the theme), an entry without one is inserted.
"""

from typing import Any, Dict, List, Optional, Tuple

from aws_lambda_powertools.metrics import MetricUnit
from sqlalchemy.orm import selectinload

from storefront.dal import Database, UnitOfWork
from storefront.dal.tables import SiteTheme, ThemeDetail
from storefront.handlers.utils.errors import ResourceNotFoundError
from storefront.handlers.utils.observability import logger, metrics, tracer
from storefront.handlers.utils.request_params import Pagination
from storefront.models.input import CreateSiteThemeRequest, UpdateSiteThemeRequest
from storefront.models.output import PaginationOutput, SiteThemeOutput, build_pagination

THEME_NOT_FOUND = 'Theme not found'

LOAD_OPTIONS = (selectinload(SiteTheme.theme_details),)


class SiteThemeService:
    """Business logic service for site themes and their details."""

    def __init__(self, database: Database):
        self.db = database

    def _load(self, uow: UnitOfWork, theme_id: int) -> Optional[SiteThemeOutput]:
        theme = uow.get(SiteTheme, theme_id, options=LOAD_OPTIONS)
        return SiteThemeOutput.model_validate(theme) if theme is not None else None

    @tracer.capture_method
    def list_themes(
        self,
        pagination: Pagination,
        is_exclusive: Optional[bool] = None,
        theme_no: Optional[str] = None,
    ) -> Tuple[List[SiteThemeOutput], PaginationOutput]:
        with self.db.transaction() as uow:
            themes, total = uow.find_all(
                SiteTheme,
                filters={'is_exclusive': is_exclusive, 'theme_no': theme_no},
                order_by=[SiteTheme.theme_id.asc()],
                offset=pagination.offset,
                limit=pagination.limit,
                options=LOAD_OPTIONS,
            )
            items = [SiteThemeOutput.model_validate(theme) for theme in themes]
        return items, build_pagination(total, pagination.page, pagination.limit)

    @tracer.capture_method
    def get_theme(self, theme_id: int) -> SiteThemeOutput:
        with self.db.transaction() as uow:
            output = self._load(uow, theme_id)
        if output is None:
            raise ResourceNotFoundError(THEME_NOT_FOUND)
        return output

    @tracer.capture_method
    def create_theme(self, request: CreateSiteThemeRequest) -> SiteThemeOutput:
        with self.db.transaction() as uow:
            theme = uow.insert(SiteTheme, theme_no=request.theme_no, is_exclusive=request.is_exclusive)
            for detail in request.theme_details:
                uow.insert(ThemeDetail, theme_id=theme.theme_id, **detail.model_dump())
            output = self._load(uow, theme.theme_id)

        logger.info('Site theme created', extra={
            'theme_id': output.theme_id,
            'theme_no': output.theme_no,
            'detail_count': len(output.theme_details),
        })
        metrics.add_metric(name='SiteThemeCreated', unit=MetricUnit.Count, value=1)
        return output

    def _upsert_detail(self, uow: UnitOfWork, theme_id: int, values: Dict[str, Any]) -> None:
        detail_id = values.pop('theme_detail_id', None)
        if detail_id is None:
            uow.insert(ThemeDetail, theme_id=theme_id, **values)
            return

        owned = uow.find_first(
            ThemeDetail,
            ThemeDetail.theme_detail_id == detail_id,
            ThemeDetail.theme_id == theme_id,
        )
        if owned is None:
            raise ResourceNotFoundError('Theme detail not found')
        uow.update(ThemeDetail, detail_id, values)

    @tracer.capture_method
    def update_theme(self, theme_id: int, request: UpdateSiteThemeRequest) -> SiteThemeOutput:
        values = request.model_dump(exclude_unset=True)
        details = values.pop('theme_details', None) or []

        with self.db.transaction() as uow:
            if not uow.exists(SiteTheme, theme_id):
                raise ResourceNotFoundError(THEME_NOT_FOUND)
            uow.update(SiteTheme, theme_id, values)
            for detail_values in details:
                self._upsert_detail(uow, theme_id, detail_values)
            output = self._load(uow, theme_id)

        logger.info('Site theme updated', extra={
            'theme_id': theme_id,
            'fields': sorted(values),
            'details_upserted': len(details),
        })
        return output

    @tracer.capture_method
    def delete_theme(self, theme_id: int) -> None:
        with self.db.transaction() as uow:
            if not uow.exists(SiteTheme, theme_id):
                raise ResourceNotFoundError(THEME_NOT_FOUND)
            uow.delete_many(ThemeDetail, ThemeDetail.theme_id == theme_id)
            uow.delete(SiteTheme, theme_id)

        logger.info('Site theme deleted', extra={'theme_id': theme_id})
        metrics.add_metric(name='SiteThemeDeleted', unit=MetricUnit.Count, value=1)
