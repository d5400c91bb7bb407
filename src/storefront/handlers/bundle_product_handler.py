"""
Bundle product handlers.

Routes:
    GET    /bundle-products?bundleId=&productId=&page=&limit=  -> get_bundle_products
    GET    /bundle-products/{bpId}                             -> get_bundle_product
    POST   /bundle-products                                    -> create_bundle_product
    PUT    /bundle-products/{bpId}                             -> update_bundle_product
    DELETE /bundle-products/{bpId}                             -> delete_bundle_product
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
from storefront.logic.bundle_product_service import BUNDLE_PRODUCT_NOT_FOUND, BundleProductService
from storefront.models.input import CreateBundleProductRequest, UpdateBundleProductRequest

bundle_product_service = BundleProductService(get_database())

CONSTRAINT_MESSAGES = {
    ConstraintKind.UNIQUE: 'This bundle product combination already exists',
    ConstraintKind.FOREIGN_KEY: 'Referenced bundle or product does not exist',
    ConstraintKind.NOT_FOUND: BUNDLE_PRODUCT_NOT_FOUND,
}


@api_handler
def get_bundle_products(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    query = query_params(event)
    bundle_id = parse_id(query.get('bundleId'), 'bundle')
    product_id = parse_id(query.get('productId'), 'product')
    pagination = parse_pagination(query)

    items, page = bundle_product_service.list_bundle_products(pagination, bundle_id=bundle_id, product_id=product_id)
    return format_json_response({
        'bundleProducts': [item.model_dump(mode='json') for item in items],
        'pagination': page.model_dump(),
    })


@api_handler
def get_bundle_product(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    bp_id = require_id(path_params(event).get('bpId'), 'bundle product')
    bundle_product = bundle_product_service.get_bundle_product(bp_id)
    return format_json_response({'bundleProduct': bundle_product.model_dump(mode='json')})


@api_handler(constraint_messages=CONSTRAINT_MESSAGES)
def create_bundle_product(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    request = parse_request(
        CreateBundleProductRequest,
        parse_json_body(event),
        missing_message='bundle_id and product_id are required',
    )
    bundle_product = bundle_product_service.create_bundle_product(request)
    return format_json_response({'bundleProduct': bundle_product.model_dump(mode='json')}, status_code=201)


@api_handler(constraint_messages=CONSTRAINT_MESSAGES)
def update_bundle_product(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    bp_id = require_id(path_params(event).get('bpId'), 'bundle product')
    request = parse_request(UpdateBundleProductRequest, parse_json_body(event))
    bundle_product = bundle_product_service.update_bundle_product(bp_id, request)
    return format_json_response({
        'message': 'Bundle product updated successfully',
        'bundleProduct': bundle_product.model_dump(mode='json'),
    })


@api_handler(constraint_messages=CONSTRAINT_MESSAGES)
def delete_bundle_product(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    bp_id = require_id(path_params(event).get('bpId'), 'bundle product')
    bundle_product_service.delete_bundle_product(bp_id)
    return format_json_response({'message': 'Bundle product deleted successfully'})
