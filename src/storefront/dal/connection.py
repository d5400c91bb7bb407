"""
Database URL resolution.

``DATABASE_URL`` wins when it is set; otherwise the URL is assembled from an
RDS-style Secrets Manager secret
(``{"engine", "host", "port", "username", "password", "dbname"}``).
"""

import json
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import ClientError
from sqlalchemy.engine import URL, make_url

from storefront.handlers.models.env_vars import StorefrontEnvVars
from storefront.handlers.utils.observability import logger, tracer

# RDS secret "engine" values to SQLAlchemy drivers
DRIVERS = {
    "postgres": "postgresql+psycopg2",
    "postgresql": "postgresql+psycopg2",
    "aurora-postgresql": "postgresql+psycopg2",
}


class DatabaseConfigurationError(Exception):
    """Raised when no usable database location is configured."""


@tracer.capture_method
def fetch_database_secret(secret_id: str, region_name: str, client: Optional[Any] = None) -> Dict[str, Any]:
    """Read and decode the JSON credentials secret."""
    client = client or boto3.client('secretsmanager', region_name=region_name)
    try:
        response = client.get_secret_value(SecretId=secret_id)
    except ClientError as e:
        error_code = e.response['Error']['Code']
        logger.error('Could not read database secret', extra={'secret_id': secret_id, 'error_code': error_code})
        raise DatabaseConfigurationError(f"Database secret {secret_id} could not be read: {error_code}") from e

    try:
        secret = json.loads(response['SecretString'])
    except (KeyError, TypeError, ValueError) as e:
        raise DatabaseConfigurationError(f"Database secret {secret_id} is not a JSON string") from e

    if not isinstance(secret, dict):
        raise DatabaseConfigurationError(f"Database secret {secret_id} is not a JSON object")
    return secret


def url_from_secret(secret: Dict[str, Any]) -> URL:
    engine = str(secret.get('engine', 'postgres')).lower()
    drivername = DRIVERS.get(engine)
    if drivername is None:
        raise DatabaseConfigurationError(f"Unsupported database engine in secret: {engine}")

    missing = [key for key in ('host', 'username', 'password') if not secret.get(key)]
    if missing:
        raise DatabaseConfigurationError(f"Database secret is missing: {', '.join(missing)}")

    return URL.create(
        drivername=drivername,
        username=secret['username'],
        password=secret['password'],
        host=secret['host'],
        port=int(secret['port']) if secret.get('port') else None,
        database=secret.get('dbname'),
    )


def resolve_database_url(env_vars: StorefrontEnvVars, secrets_client: Optional[Any] = None) -> URL:
    """
    Work out the SQLAlchemy URL from configuration.

    Raises:
        DatabaseConfigurationError: If neither DATABASE_URL nor DATABASE_SECRET_ARN resolves
    """
    if env_vars.DATABASE_URL:
        return make_url(env_vars.DATABASE_URL)

    if env_vars.DATABASE_SECRET_ARN:
        secret = fetch_database_secret(env_vars.DATABASE_SECRET_ARN, env_vars.AWS_REGION, client=secrets_client)
        url = url_from_secret(secret)
        logger.info('Database URL resolved from secret', extra={'host': url.host, 'database': url.database})
        return url

    raise DatabaseConfigurationError('Either DATABASE_URL or DATABASE_SECRET_ARN must be set')
