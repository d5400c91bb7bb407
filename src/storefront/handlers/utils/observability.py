"""
Shared observability instances for the storefront Lambda handlers.

Every handler module, service and the data access layer log, trace and emit
metrics through these three Powertools objects so that a single invocation
produces one correlated log stream, one X-Ray segment and one EMF blob.
"""

from aws_lambda_powertools.logging import Logger
from aws_lambda_powertools.metrics import Metrics
from aws_lambda_powertools.tracing import Tracer

# Metrics namespace for business KPIs
METRICS_NAMESPACE = 'Storefront'

# JSON output format, service name can be set by environment variable "POWERTOOLS_SERVICE_NAME"
logger: Logger = Logger()

# Disabled by setting POWERTOOLS_TRACE_DISABLED to "true"
tracer: Tracer = Tracer()

# Service dimension comes from POWERTOOLS_SERVICE_NAME
metrics = Metrics(namespace=METRICS_NAMESPACE)
