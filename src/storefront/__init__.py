"""
Storefront API service.

Lambda handlers for awards, bundle products, orders, invoices, leads and
site themes, laid out in three layers:

- handlers: API Gateway entry points, request parsing and error responses
- logic: business rules and multi-statement units of work
- dal: SQLAlchemy engine, sessions and table mappings
- models: Pydantic request and response models
"""

__version__ = "1.0.0"
