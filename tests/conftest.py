"""
Pytest configuration and shared fixtures for the storefront API.

Handlers and services run against an in-memory SQLite database that is
created empty for every test. The environment is configured at import time,
before any ``storefront`` module is imported by a test module.
"""

import json
import os
from decimal import Decimal
from typing import Any, Callable, Dict, Optional
from unittest.mock import Mock

import pytest

os.environ.update({
    "AWS_DEFAULT_REGION": "us-east-1",
    "AWS_REGION": "us-east-1",
    "AWS_ACCESS_KEY_ID": "test",
    "AWS_SECRET_ACCESS_KEY": "test",
    "ENVIRONMENT": "test",
    "DATABASE_URL": "sqlite+pysqlite:///:memory:",
    "POWERTOOLS_SERVICE_NAME": "test-storefront",
    "POWERTOOLS_METRICS_NAMESPACE": "TestStorefront",
    "LOG_LEVEL": "DEBUG",
    "POWERTOOLS_TRACE_DISABLED": "true",  # Disable X-Ray in tests
    "LAMBDA_ENV_MODELER_DISABLE_CACHE": "true",
})

from storefront.dal import Database, get_database  # noqa: E402
from storefront.dal.tables import (  # noqa: E402
    Product,
    ProductBundle,
    ProductPricing,
    User,
    UserSite,
)


# Database fixtures
@pytest.fixture
def database() -> Database:
    """Process wide database with a freshly created schema."""
    db = get_database()
    db.create_schema()
    yield db
    db.drop_schema()


@pytest.fixture
def seed(database: Database) -> Dict[str, int]:
    """
    Reference rows most resource tests need.

    Two users, two products with one price each (plus a second price for the
    first product), two bundles and one site.
    """
    with database.transaction() as uow:
        alice = uow.insert(User, email="alice@example.com", full_name="Alice Johnson")
        bob = uow.insert(User, email="bob@example.com", full_name="Bob Wilson")
        keyboard = uow.insert(Product, name="Keyboard", sku="KB-1")
        mouse = uow.insert(Product, name="Mouse", sku="MS-1")
        keyboard_price = uow.insert(ProductPricing, product_id=keyboard.product_id, price=Decimal("49.90"), currency="USD")
        keyboard_sale = uow.insert(ProductPricing, product_id=keyboard.product_id, price=Decimal("39.90"), currency="USD")
        mouse_price = uow.insert(ProductPricing, product_id=mouse.product_id, price=Decimal("19.90"), currency="USD")
        starter = uow.insert(ProductBundle, name="Starter")
        office = uow.insert(ProductBundle, name="Office")
        site = uow.insert(UserSite, user_id=alice.user_id, domain="alice.example.com", site_name="Alice")

        return {
            "user_id": alice.user_id,
            "other_user_id": bob.user_id,
            "product_id": keyboard.product_id,
            "other_product_id": mouse.product_id,
            "price_id": keyboard_price.price_id,
            "sale_price_id": keyboard_sale.price_id,
            "other_price_id": mouse_price.price_id,
            "bundle_id": starter.bundle_id,
            "other_bundle_id": office.bundle_id,
            "site_id": site.site_id,
        }


# API Gateway fixtures
@pytest.fixture
def api_event() -> Callable[..., Dict[str, Any]]:
    """Factory for API Gateway REST proxy events."""

    def build(
        path: Optional[Dict[str, Any]] = None,
        query: Optional[Dict[str, Any]] = None,
        body: Any = None,
        method: str = "GET",
    ) -> Dict[str, Any]:
        if body is not None and not isinstance(body, str):
            body = json.dumps(body)
        return {
            "httpMethod": method,
            "path": "/test",
            "headers": {"Content-Type": "application/json"},
            "body": body,
            "requestContext": {
                "requestId": "test-request-id-123",
                "accountId": "123456789012",
                "stage": "test",
                "httpMethod": method,
            },
            "pathParameters": {k: str(v) for k, v in path.items()} if path is not None else None,
            "queryStringParameters": {k: str(v) for k, v in query.items()} if query is not None else None,
            "isBase64Encoded": False,
        }

    return build


@pytest.fixture
def lambda_context():
    """Create a mock Lambda context for testing."""
    context = Mock()
    context.function_name = "test-lambda-function"
    context.function_version = "1"
    context.invoked_function_arn = "arn:aws:lambda:us-east-1:123456789012:function:test-lambda-function"
    context.memory_limit_in_mb = 512
    context.get_remaining_time_in_millis = lambda: 30000
    context.aws_request_id = "test-request-id-123"
    context.log_group_name = "/aws/lambda/test-lambda-function"
    context.log_stream_name = "2024/01/01/[$LATEST]test123"
    return context


@pytest.fixture
def invoke(lambda_context) -> Callable[..., Dict[str, Any]]:
    """Call a handler and decode its JSON body into ``response["json"]``."""

    def call(handler: Callable, event: Dict[str, Any]) -> Dict[str, Any]:
        response = handler(event, lambda_context)
        response["json"] = json.loads(response["body"])
        return response

    return call


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "e2e: End-to-end tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "e2e" in str(item.fspath):
            item.add_marker(pytest.mark.e2e)


# End-to-end fixtures
@pytest.fixture
def integration_client():
    """HTTP client for a deployed stage; tests are skipped when API_BASE_URL is unset."""
    import httpx

    base_url = os.environ.get("API_BASE_URL")
    if not base_url:
        pytest.skip("API_BASE_URL is not set")

    with httpx.Client(base_url=base_url, timeout=30.0) as client:
        yield client
