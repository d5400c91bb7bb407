"""
Lead handlers.

Routes:
    GET    /leads?siteId=&status=&page=&limit=  -> get_leads
    GET    /leads/{leadId}                      -> get_lead
    POST   /leads                               -> create_lead
    PUT    /leads/{leadId}                      -> update_lead
    DELETE /leads/{leadId}                      -> delete_lead
"""

from typing import Any, Dict

from aws_lambda_powertools.utilities.typing import LambdaContext

from storefront.dal import get_database
from storefront.handlers.utils.api_handler import api_handler
from storefront.handlers.utils.errors import ConstraintKind
from storefront.handlers.utils.request_params import (
    parse_id,
    parse_json_body,
    parse_pagination,
    parse_request,
    path_params,
    query_params,
    require_id,
)
from storefront.handlers.utils.responses import format_json_response
from storefront.logic.lead_service import LEAD_NOT_FOUND, LeadService
from storefront.models.input import CreateLeadRequest, UpdateLeadRequest

lead_service = LeadService(get_database())

CONSTRAINT_MESSAGES = {
    ConstraintKind.FOREIGN_KEY: 'Site not found',
    ConstraintKind.NOT_FOUND: LEAD_NOT_FOUND,
}


@api_handler
def get_leads(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    query = query_params(event)
    site_id = parse_id(query.get('siteId'), 'site')
    pagination = parse_pagination(query)

    leads, page = lead_service.list_leads(pagination, site_id=site_id, status=query.get('status') or None)
    return format_json_response({
        'leads': [lead.model_dump(mode='json') for lead in leads],
        'pagination': page.model_dump(),
    })


@api_handler
def get_lead(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    lead_id = require_id(path_params(event).get('leadId'), 'lead')
    lead = lead_service.get_lead(lead_id)
    return format_json_response({'lead': lead.model_dump(mode='json')})


@api_handler(constraint_messages=CONSTRAINT_MESSAGES)
def create_lead(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    request = parse_request(
        CreateLeadRequest,
        parse_json_body(event),
        missing_message='site_id, name and email are required',
    )
    lead = lead_service.create_lead(request)
    return format_json_response({'lead': lead.model_dump(mode='json')}, status_code=201)


@api_handler(constraint_messages=CONSTRAINT_MESSAGES)
def update_lead(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    lead_id = require_id(path_params(event).get('leadId'), 'lead')
    request = parse_request(UpdateLeadRequest, parse_json_body(event))
    lead = lead_service.update_lead(lead_id, request)
    return format_json_response({'lead': lead.model_dump(mode='json')})


@api_handler(constraint_messages=CONSTRAINT_MESSAGES)
def delete_lead(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    lead_id = require_id(path_params(event).get('leadId'), 'lead')
    lead_service.delete_lead(lead_id)
    return format_json_response({'message': 'Lead deleted successfully'})
