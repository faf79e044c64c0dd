from .client_factory import AzureClientFactory
from .cli_client import AzureCliClient
from .resource_client import ResourceClient
from .monitor_client import MonitorClient


__all__ = [
    "AzureClientFactory",
    "AzureCliClient",
    "ResourceClient",
    "MonitorClient"
]
