from .exceptions import *
from .base_client import BaseClient
from .utils import *

__all__ = [
    "BaseClient",
    "MetricsCollectorException",
    "ExternalInvocationError",
    "UnsupportedMetricError",
    "MalformedResponseError",
    "ConfigurationException",
    "DataValidationException",
    "setup_logging",
    "parse_duration_ms",
    "gather_with_concurrency",
]
