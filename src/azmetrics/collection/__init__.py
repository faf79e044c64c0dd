from .intervals import quantize, SUPPORTED_INTERVALS
from .metric_names import resolve, describe_metric, supported_metrics, RESOURCE_TYPE_METRICS
from .orchestrator import CollectionOrchestrator

__all__ = [
    "quantize",
    "SUPPORTED_INTERVALS",
    "resolve",
    "describe_metric",
    "supported_metrics",
    "RESOURCE_TYPE_METRICS",
    "CollectionOrchestrator"
]
