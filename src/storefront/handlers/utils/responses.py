"""API Gateway proxy response helpers."""

import json
from typing import Any, Dict, Optional

from storefront.handlers.models.env_vars import get_handler_env_vars


def format_json_response(
    payload: Any,
    status_code: int = 200,
    headers: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """
    Create a standardized API Gateway proxy response.

    Args:
        payload: JSON serializable response payload
        status_code: HTTP status code
        headers: Extra headers merged over the defaults

    Returns:
        ``{"statusCode", "headers", "body"}`` envelope
    """
    env_vars = get_handler_env_vars()

    default_headers = {
        "Content-Type": "application/json",
        "Access-Control-Allow-Origin": env_vars.CORS_ALLOW_ORIGIN,
        "Access-Control-Allow-Headers": env_vars.CORS_ALLOW_HEADERS,
        "Access-Control-Allow-Methods": env_vars.CORS_ALLOW_METHODS,
    }

    if headers:
        default_headers.update(headers)

    return {
        "statusCode": status_code,
        "headers": default_headers,
        "body": json.dumps(payload),
    }
