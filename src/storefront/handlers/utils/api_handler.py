"""
Lambda entry point decorator for the REST handlers.

``api_handler`` attaches the Powertools logger context, tracer and metrics
flush to a handler function and turns every exception it raises into a
formatted error response, so an entry point never fails the invocation.
"""

import functools
from typing import Any, Callable, Dict, Mapping, Optional

from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext

from storefront.handlers.models.env_vars import get_handler_env_vars
from storefront.handlers.utils.errors import BaseServiceError, ConstraintKind, classify_error
from storefront.handlers.utils.observability import logger, metrics, tracer
from storefront.handlers.utils.responses import format_json_response

Handler = Callable[[Dict[str, Any], LambdaContext], Dict[str, Any]]


@tracer.capture_method
def log_error_metrics(error: BaseException, status_code: int) -> None:
    """Record error metrics and trace annotations for a failed request."""
    metrics.add_metric(name="ErrorCount", unit=MetricUnit.Count, value=1)

    if isinstance(error, BaseServiceError):
        metrics.add_metric(name=f"Error{error.category.value}Count", unit=MetricUnit.Count, value=1)
        tracer.put_annotation("error_code", error.error_code)
        tracer.put_metadata("error_details", error.to_dict())
    else:
        metrics.add_metric(name="UnexpectedError", unit=MetricUnit.Count, value=1)
        tracer.put_annotation("error_code", "INTERNAL_SERVER_ERROR")

    tracer.put_annotation("status_code", status_code)


def error_response(
    error: BaseException,
    handler_name: str,
    constraint_messages: Optional[Mapping[ConstraintKind, str]] = None,
) -> Dict[str, Any]:
    """
    Classify, log and format an exception raised by a handler.

    Args:
        error: The exception raised by the handler body
        handler_name: Name of the entry point, for the log record
        constraint_messages: Resource specific messages per constraint kind

    Returns:
        Formatted API Gateway error response
    """
    include_details = get_handler_env_vars().expose_error_details
    status_code, body = classify_error(error, include_details=include_details, constraint_messages=constraint_messages)

    if status_code >= 500:
        logger.exception("Unexpected error in handler", extra={
            "handler": handler_name,
            "error": str(error),
            "error_type": error.__class__.__name__,
        })
    else:
        logger.warning("Request rejected", extra={
            "handler": handler_name,
            "status_code": status_code,
            "error": body["error"],
            "error_code": getattr(error, "error_code", None),
        })

    log_error_metrics(error, status_code)
    return format_json_response(body, status_code=status_code)


def api_handler(
    func: Optional[Handler] = None,
    *,
    constraint_messages: Optional[Mapping[ConstraintKind, str]] = None,
):
    """
    Wrap a Lambda entry point with observability and error classification.

    Usable bare (``@api_handler``) or with resource specific constraint
    messages (``@api_handler(constraint_messages={...})``).
    """
    if func is None:
        return functools.partial(api_handler, constraint_messages=constraint_messages)

    @logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
    @tracer.capture_lambda_handler
    @metrics.log_metrics(capture_cold_start_metric=True)
    @functools.wraps(func)
    def wrapper(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
        try:
            return func(event, context)
        except Exception as e:
            return error_response(e, func.__name__, constraint_messages)

    return wrapper
