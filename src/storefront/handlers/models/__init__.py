"""Configuration models for the Lambda handlers."""

from storefront.handlers.models.env_vars import StorefrontEnvVars, get_handler_env_vars

__all__ = [
    "StorefrontEnvVars",
    "get_handler_env_vars",
]
