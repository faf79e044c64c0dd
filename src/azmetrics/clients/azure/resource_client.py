"""Azure resource listing through `az resource list`."""

import re
from typing import Dict, Any, List, Optional, Pattern, Union
import structlog

from azmetrics.core.base_client import BaseClient
from azmetrics.core.exceptions import ConfigurationException, MalformedResponseError
from azmetrics.core.models import Resource
from .cli_client import AzureCliClient

logger = structlog.get_logger(__name__)


def compile_name_filter(pattern: Optional[Union[str, Pattern]]) -> Optional[Pattern]:
    """Compile a resource-name regex; empty means no filtering."""
    if not pattern:
        return None
    if isinstance(pattern, re.Pattern):
        return pattern
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ConfigurationException(f"Invalid resource name filter '{pattern}': {e}", {"filter": pattern})


class ResourceClient(BaseClient):
    """Client for enumerating Azure resources."""

    def __init__(self, cli: AzureCliClient, config: Optional[Dict[str, Any]] = None):
        super().__init__(config, "ResourceClient")
        self.cli = cli

    async def connect(self) -> None:
        if not self.cli.is_connected:
            await self.cli.connect()
        self._connected = True

    async def health_check(self) -> bool:
        return await self.cli.health_check()

    async def list_resources(self, resource_type: str, scope: Optional[str] = None,
                             name_pattern: Optional[Union[str, Pattern]] = None) -> List[Resource]:
        """
        List resources of one type, optionally inside a resource group.

        `name_pattern` is matched anywhere in the resource name
        (case-sensitive). Provider order is kept.
        """
        name_filter = compile_name_filter(name_pattern)

        args = ["resource", "list", "--resource-type", resource_type]
        if scope:
            args.extend(["--resource-group", scope])

        payload = await self.cli.run_json(args)
        command = [self.cli.cli_path, *args]

        if not isinstance(payload, list):
            raise MalformedResponseError(command, f"expected a JSON array, got {type(payload).__name__}")

        resources = []
        for index, entry in enumerate(payload):
            if not isinstance(entry, dict) or not isinstance(entry.get("id"), str) or not isinstance(entry.get("name"), str):
                raise MalformedResponseError(command, f"entry {index} has no string 'id' and 'name'")
            if name_filter and not name_filter.search(entry["name"]):
                continue
            resources.append(Resource(id=entry["id"], name=entry["name"]))

        self.logger.info(
            f"Discovered {len(resources)} resources",
            resource_type=resource_type,
            resource_group=scope,
            listed=len(payload),
            filter=name_filter.pattern if name_filter else None
        )
        return resources
