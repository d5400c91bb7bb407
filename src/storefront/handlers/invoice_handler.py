"""
Invoice handlers.

Routes:
    GET    /invoices?userId=&orderId=&invoiceNo=&page=&limit=  -> get_invoices
    GET    /invoices/{invoiceId}                               -> get_invoice
    POST   /invoices                                           -> create_invoice
    PUT    /invoices/{invoiceId}                               -> update_invoice
    DELETE /invoices/{invoiceId}                               -> delete_invoice
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
from storefront.logic.invoice_service import INVOICE_NOT_FOUND, InvoiceService
from storefront.models.input import CreateInvoiceRequest, UpdateInvoiceRequest

invoice_service = InvoiceService(get_database())

CONSTRAINT_MESSAGES = {ConstraintKind.NOT_FOUND: INVOICE_NOT_FOUND}


@api_handler
def get_invoices(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    query = query_params(event)
    user_id = parse_id(query.get('userId'), 'user')
    order_id = parse_id(query.get('orderId'), 'order')
    pagination = parse_pagination(query)

    invoices, page = invoice_service.list_invoices(
        pagination,
        user_id=user_id,
        order_id=order_id,
        invoice_no=query.get('invoiceNo') or None,
    )
    return format_json_response({
        'invoices': [invoice.model_dump(mode='json') for invoice in invoices],
        'pagination': page.model_dump(),
    })


@api_handler
def get_invoice(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    invoice_id = require_id(path_params(event).get('invoiceId'), 'invoice')
    invoice = invoice_service.get_invoice(invoice_id)
    return format_json_response({'invoice': invoice.model_dump(mode='json')})


@api_handler(constraint_messages=CONSTRAINT_MESSAGES)
def create_invoice(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    request = parse_request(
        CreateInvoiceRequest,
        parse_json_body(event),
        missing_message='user_id, order_id and invoice_details are required',
    )
    invoice = invoice_service.create_invoice(request)
    return format_json_response({'invoice': invoice.model_dump(mode='json')}, status_code=201)


@api_handler(constraint_messages=CONSTRAINT_MESSAGES)
def update_invoice(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    invoice_id = require_id(path_params(event).get('invoiceId'), 'invoice')
    request = parse_request(UpdateInvoiceRequest, parse_json_body(event))
    invoice = invoice_service.update_invoice(invoice_id, request)
    return format_json_response({'invoice': invoice.model_dump(mode='json')})


@api_handler(constraint_messages=CONSTRAINT_MESSAGES)
def delete_invoice(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    invoice_id = require_id(path_params(event).get('invoiceId'), 'invoice')
    invoice_service.delete_invoice(invoice_id)
    return format_json_response({'message': 'Invoice and related details deleted successfully'})
