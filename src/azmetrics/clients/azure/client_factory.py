# src/azmetrics/clients/azure/client_factory.py
"""Azure client factory for wiring az-backed clients from settings."""

from typing import Dict, Any, Optional
import structlog

from .cli_client import AzureCliClient
from .resource_client import ResourceClient
from .monitor_client import MonitorClient

logger = structlog.get_logger(__name__)


class AzureClientFactory:
    """Factory for creating clients that share one az runner."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.cli_path = config.get("cli_path") or "az"
        self.subscription_id = config.get("subscription_id")
        self.timeout_seconds = config.get("command_timeout_seconds")

        self._cli: Optional[AzureCliClient] = None
        self.logger = logger.bind(factory="azure")

    def create_cli_client(self) -> AzureCliClient:
        """Create (once) the az runner."""
        if self._cli is None:
            self._cli = AzureCliClient(
                cli_path=self.cli_path,
                subscription_id=self.subscription_id,
                timeout_seconds=self.timeout_seconds,
                config=self.config
            )
            self.logger.debug(
                "Created Azure CLI client",
                cli_path=self.cli_path,
                subscription_id=self.subscription_id
            )
        return self._cli

    def create_resource_client(self) -> ResourceClient:
        return ResourceClient(self.create_cli_client(), self.config)

    def create_monitor_client(self) -> MonitorClient:
        return MonitorClient(self.create_cli_client(), self.config)
