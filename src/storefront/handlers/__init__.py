"""
AWS Lambda Handlers Module.

One module per resource; every public function is a Lambda entry point
taking an API Gateway REST proxy event and returning a proxy response.
Entry points parse the request, call the resource service and format the
result, and are wrapped by ``api_handler`` for logging, tracing, metrics
and error classification.
"""

from storefront.handlers.utils.observability import logger, metrics, tracer

__all__ = [
    "logger",
    "tracer",
    "metrics",
]
