"""
Site theme handlers.

Routes:
    GET    /site-themes?isExclusive=&themeNo=&page=&limit=  -> get_site_themes
    GET    /site-themes/{themeId}                           -> get_site_theme
    POST   /site-themes                                     -> create_site_theme
    PUT    /site-themes/{themeId}                           -> update_site_theme
    DELETE /site-themes/{themeId}                           -> delete_site_theme
"""

from typing import Any, Dict

from aws_lambda_powertools.utilities.typing import LambdaContext

from storefront.dal import get_database
from storefront.handlers.utils.api_handler import api_handler
from storefront.handlers.utils.errors import ConstraintKind
from storefront.handlers.utils.request_params import (
    parse_bool_filter,
    parse_json_body,
    parse_pagination,
    parse_request,
    path_params,
    query_params,
    require_id,
)
from storefront.handlers.utils.responses import format_json_response
from storefront.logic.site_theme_service import THEME_NOT_FOUND, SiteThemeService
from storefront.models.input import CreateSiteThemeRequest, UpdateSiteThemeRequest

site_theme_service = SiteThemeService(get_database())

CONSTRAINT_MESSAGES = {
    ConstraintKind.UNIQUE: 'Theme number already exists',
    ConstraintKind.NOT_FOUND: THEME_NOT_FOUND,
}


@api_handler
def get_site_themes(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    query = query_params(event)
    pagination = parse_pagination(query)

    themes, page = site_theme_service.list_themes(
        pagination,
        is_exclusive=parse_bool_filter(query.get('isExclusive')),
        theme_no=query.get('themeNo') or None,
    )
    return format_json_response({
        'themes': [theme.model_dump(mode='json') for theme in themes],
        'pagination': page.model_dump(),
    })


@api_handler
def get_site_theme(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    theme_id = require_id(path_params(event).get('themeId'), 'theme')
    theme = site_theme_service.get_theme(theme_id)
    return format_json_response({'theme': theme.model_dump(mode='json')})


@api_handler(constraint_messages=CONSTRAINT_MESSAGES)
def create_site_theme(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    request = parse_request(CreateSiteThemeRequest, parse_json_body(event), missing_message='theme_no is required')
    theme = site_theme_service.create_theme(request)
    return format_json_response({'theme': theme.model_dump(mode='json')}, status_code=201)


@api_handler(constraint_messages=CONSTRAINT_MESSAGES)
def update_site_theme(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    theme_id = require_id(path_params(event).get('themeId'), 'theme')
    request = parse_request(UpdateSiteThemeRequest, parse_json_body(event))
    theme = site_theme_service.update_theme(theme_id, request)
    return format_json_response({'theme': theme.model_dump(mode='json')})


@api_handler(constraint_messages=CONSTRAINT_MESSAGES)
def delete_site_theme(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    theme_id = require_id(path_params(event).get('themeId'), 'theme')
    site_theme_service.delete_theme(theme_id)
    return format_json_response({'message': 'Theme and related details deleted successfully'})
