"""Mapping of logical metrics to Azure Monitor metric names per resource type."""

from typing import Dict, List

from azmetrics.core.exceptions import UnsupportedMetricError
from azmetrics.core.models import MetricType

_VM_METRICS = {
    MetricType.CPU: "Percentage CPU",
    MetricType.RAM: "Available Memory Bytes",
    MetricType.MEMORY_PERCENT: "Available Memory Percentage",
    MetricType.DISK: "OS Disk IOPS Consumed Percentage",
}

RESOURCE_TYPE_METRICS: Dict[str, Dict[MetricType, str]] = {
    "Microsoft.Compute/virtualMachines": dict(_VM_METRICS),
    "Microsoft.Compute/virtualMachineScaleSets": dict(_VM_METRICS),
    "Microsoft.ContainerService/managedClusters": {
        MetricType.CPU: "node_cpu_usage_percentage",
        MetricType.MEMORY_PERCENT: "node_memory_working_set_percentage",
        MetricType.DISK: "node_disk_usage_percentage",
    },
    "Microsoft.Web/serverFarms": {
        MetricType.CPU: "CpuPercentage",
        MetricType.MEMORY_PERCENT: "MemoryPercentage",
    },
    "Microsoft.DBforPostgreSQL/flexibleServers": {
        MetricType.CPU: "cpu_percent",
        MetricType.MEMORY_PERCENT: "memory_percent",
        MetricType.DISK: "storage_percent",
    },
}

METRIC_DESCRIPTIONS: Dict[MetricType, List[str]] = {
    MetricType.CPU: [
        'CPU metrics are "Percent CPU" used.',
        "A high maximum means there isn't a lot of headroom during peak load.",
        "A low mean means the resource might be over provisioned and is costing more money than it needs to be.",
    ],
    MetricType.RAM: [
        'RAM metrics are "Available GB".',
        "A low minimum means there isn't a lot of headroom during peak load.",
        "A high mean means the resource might be over provisioned and is costing more money than it needs to be.",
    ],
    MetricType.MEMORY_PERCENT: [
        "Memory metrics are a percentage as reported by the resource type.",
        "Compare the peak against the mean to judge headroom.",
    ],
    MetricType.DISK: [
        "Disk metrics are a percentage of the provisioned disk capacity or throughput.",
        "Sustained high values suggest the disk tier is too small.",
    ],
}


def resolve(resource_type: str, metric: MetricType) -> str:
    """Return the Azure Monitor metric name, or raise UnsupportedMetricError."""
    metrics = RESOURCE_TYPE_METRICS.get(resource_type)
    if metrics is None:
        raise UnsupportedMetricError(resource_type, _metric_value(metric))
    try:
        return metrics[metric]
    except KeyError:
        raise UnsupportedMetricError(resource_type, _metric_value(metric), supported_metrics(resource_type))


def supported_metrics(resource_type: str) -> List[str]:
    return [metric.value for metric in RESOURCE_TYPE_METRICS.get(resource_type, {})]


def describe_metric(metric: MetricType) -> List[str]:
    """Operator-facing notes on how to read a metric."""
    return list(METRIC_DESCRIPTIONS.get(metric, []))


def _metric_value(metric) -> str:
    return metric.value if isinstance(metric, MetricType) else str(metric)
