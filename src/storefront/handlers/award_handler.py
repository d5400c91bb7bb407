"""
Award handlers.

Routes:
    GET    /awards/{userId}            -> get_awards
    GET    /awards/{userId}/{awardId}  -> get_award
    POST   /awards/{userId}            -> create_award
    PUT    /awards/{userId}/{awardId}  -> update_award
    DELETE /awards/{userId}/{awardId}  -> delete_award
"""

from typing import Any, Dict

from aws_lambda_powertools.utilities.typing import LambdaContext

from storefront.dal import get_database
from storefront.handlers.utils.api_handler import api_handler
from storefront.handlers.utils.errors import ConstraintKind
from storefront.handlers.utils.request_params import parse_json_body, parse_request, path_params, require_id
from storefront.handlers.utils.responses import format_json_response
from storefront.logic.award_service import AWARD_NOT_FOUND, AwardService
from storefront.models.input import CreateAwardRequest, UpdateAwardRequest

award_service = AwardService(get_database())

CONSTRAINT_MESSAGES = {
    ConstraintKind.FOREIGN_KEY: 'Referenced user does not exist',
    ConstraintKind.NOT_FOUND: AWARD_NOT_FOUND,
}


def _award_path(event: Dict[str, Any]) -> tuple:
    params = path_params(event)
    return require_id(params.get('userId'), 'user'), require_id(params.get('awardId'), 'award')


@api_handler
def get_awards(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    user_id = require_id(path_params(event).get('userId'), 'user')
    awards = award_service.list_awards(user_id)
    return format_json_response({'awards': [award.model_dump(mode='json') for award in awards]})


@api_handler
def get_award(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    user_id, award_id = _award_path(event)
    award = award_service.get_award(user_id, award_id)
    return format_json_response({'award': award.model_dump(mode='json')})


@api_handler(constraint_messages=CONSTRAINT_MESSAGES)
def create_award(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    user_id = require_id(path_params(event).get('userId'), 'user')
    request = parse_request(CreateAwardRequest, parse_json_body(event), missing_message='Subject is required')
    award = award_service.create_award(user_id, request)
    return format_json_response({'award': award.model_dump(mode='json')}, status_code=201)


@api_handler(constraint_messages=CONSTRAINT_MESSAGES)
def update_award(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    user_id, award_id = _award_path(event)
    request = parse_request(UpdateAwardRequest, parse_json_body(event))
    award = award_service.update_award(user_id, award_id, request)
    return format_json_response({'award': award.model_dump(mode='json')})


@api_handler(constraint_messages=CONSTRAINT_MESSAGES)
def delete_award(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    user_id, award_id = _award_path(event)
    award_service.delete_award(user_id, award_id)
    return format_json_response({'message': 'Award deleted successfully'})
