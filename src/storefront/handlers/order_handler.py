"""
Order handlers.

Routes:
    GET    /orders?userId=&orderStatus=&orderNo=&page=&limit=  -> get_orders
    GET    /orders/{orderId}                                   -> get_order
    POST   /orders                                             -> create_order
    PUT    /orders/{orderId}                                   -> update_order
    DELETE /orders/{orderId}                                   -> delete_order
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
from storefront.logic.order_service import ORDER_NOT_FOUND, OrderService
from storefront.models.input import CreateOrderRequest, UpdateOrderRequest

order_service = OrderService(get_database())

CONSTRAINT_MESSAGES = {ConstraintKind.NOT_FOUND: ORDER_NOT_FOUND}


@api_handler
def get_orders(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    query = query_params(event)
    user_id = parse_id(query.get('userId'), 'user')
    pagination = parse_pagination(query)

    orders, page = order_service.list_orders(
        pagination,
        user_id=user_id,
        order_status=query.get('orderStatus') or None,
        order_no=query.get('orderNo') or None,
    )
    return format_json_response({
        'orders': [order.model_dump(mode='json') for order in orders],
        'pagination': page.model_dump(),
    })


@api_handler
def get_order(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    order_id = require_id(path_params(event).get('orderId'), 'order')
    order = order_service.get_order(order_id)
    return format_json_response({'order': order.model_dump(mode='json')})


@api_handler(constraint_messages=CONSTRAINT_MESSAGES)
def create_order(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    request = parse_request(
        CreateOrderRequest,
        parse_json_body(event),
        missing_message='user_id and order_details array are required',
    )
    order = order_service.create_order(request)
    return format_json_response({'order': order.model_dump(mode='json')}, status_code=201)


@api_handler(constraint_messages=CONSTRAINT_MESSAGES)
def update_order(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    order_id = require_id(path_params(event).get('orderId'), 'order')
    request = parse_request(UpdateOrderRequest, parse_json_body(event))
    order = order_service.update_order(order_id, request)
    return format_json_response({'order': order.model_dump(mode='json')})


@api_handler(constraint_messages=CONSTRAINT_MESSAGES)
def delete_order(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    order_id = require_id(path_params(event).get('orderId'), 'order')
    order_service.delete_order(order_id)
    return format_json_response({'message': 'Order and related records deleted successfully'})
