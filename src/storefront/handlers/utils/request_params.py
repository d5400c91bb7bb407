"""
Request parsing for API Gateway proxy events.

Converts path/query string parameters into typed values and request bodies
into validated Pydantic models. Every failure is raised as
``InvalidInputError`` so the handler decorator reports it as a 400.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from storefront.handlers.models.env_vars import get_handler_env_vars
from storefront.handlers.utils.errors import InvalidInputError

T = TypeVar('T', bound=BaseModel)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10

# Upper bound of the 32-bit INTEGER id columns
MAX_INT = 2_147_483_647

_DIGITS = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class Pagination:
    """Requested page of a list endpoint."""

    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def _to_int(value: str) -> Optional[int]:
    """Parse plain ASCII digits within the INTEGER column range; anything else is None."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    if not _DIGITS.fullmatch(value):
        return None
    parsed = int(value)
    return parsed if parsed <= MAX_INT else None


def parse_id(value: Optional[str], field: str) -> Optional[int]:
    """
    Parse an optional numeric identifier.

    Args:
        value: Raw path or query string value
        field: Human readable field name used in the error message

    Returns:
        The parsed identifier, or None when the value is absent

    Raises:
        InvalidInputError: If the value is present but not an integer
    """
    if value is None or value == "":
        return None

    parsed = _to_int(value)
    if parsed is None:
        raise InvalidInputError(f"Invalid {field} ID")
    return parsed


def require_id(value: Optional[str], field: str) -> int:
    """Parse a mandatory numeric identifier; absence is also invalid."""
    parsed = parse_id(value, field)
    if parsed is None:
        raise InvalidInputError(f"Invalid {field} ID")
    return parsed


def parse_bool_filter(value: Optional[str]) -> Optional[bool]:
    """``"true"`` is True, any other present value is False, absent is None."""
    if value is None:
        return None
    return value.strip().lower() == "true"


def path_params(event: Mapping[str, Any]) -> Dict[str, str]:
    return event.get("pathParameters") or {}


def query_params(event: Mapping[str, Any]) -> Dict[str, str]:
    return event.get("queryStringParameters") or {}


def parse_pagination(query: Mapping[str, str]) -> Pagination:
    """
    Read ``page`` and ``limit`` from the query string.

    Raises:
        InvalidInputError: If page < 1, limit < 1, limit above MAX_PAGE_LIMIT
            when one is configured, or either value is not an integer
    """
    max_limit = get_handler_env_vars().MAX_PAGE_LIMIT

    raw_page = query.get("page")
    page = DEFAULT_PAGE if raw_page in (None, "") else _to_int(raw_page)
    if page is None or page < 1:
        raise InvalidInputError("Invalid page parameter")

    raw_limit = query.get("limit")
    limit = DEFAULT_LIMIT if raw_limit in (None, "") else _to_int(raw_limit)
    if limit is None or limit < 1 or (max_limit is not None and limit > max_limit):
        raise InvalidInputError("Invalid limit parameter")

    return Pagination(page=page, limit=limit)


def parse_json_body(event: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Decode the JSON object in the event body.

    Raises:
        InvalidInputError: If the body is missing, not JSON, or not an object
    """
    raw_body = event.get("body")
    if not raw_body:
        raise InvalidInputError("Request body is required")

    try:
        body = json.loads(raw_body)
    except (TypeError, ValueError):
        raise InvalidInputError("Invalid JSON in request body")

    if not isinstance(body, dict):
        raise InvalidInputError("Invalid JSON in request body")
    return body


def _is_missing(error: Mapping[str, Any]) -> bool:
    # only top-level fields; null and empty string count as absent
    if len(error["loc"]) != 1:
        return False
    return error["type"] == "missing" or error.get("input") is None or error.get("input") == ""


def parse_request(model: Type[T], body: Dict[str, Any], missing_message: Optional[str] = None) -> T:
    """
    Validate a decoded body against a request model.

    Args:
        model: Pydantic request model
        body: Decoded JSON object
        missing_message: Message used when a mandatory field is absent

    Raises:
        InvalidInputError: With ``missing_message`` when a mandatory field is
            missing, otherwise with field level details
    """
    try:
        return model.model_validate(body)
    except ValidationError as e:
        field_errors = [
            {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
            for error in e.errors()
        ]
        if missing_message and any(_is_missing(error) for error in e.errors()):
            raise InvalidInputError(missing_message)
        raise InvalidInputError("Invalid request body", field_errors=field_errors)
