# src/azmetrics/clients/azure/monitor_client.py
"""Azure Monitor client - raw time series through `az monitor metrics list`."""

from typing import Dict, Any, List, Optional
from datetime import datetime, timezone
import structlog
from pydantic import ValidationError

from azmetrics.core.base_client import BaseClient
from azmetrics.core.exceptions import MalformedResponseError
from azmetrics.core.models import RawDataPoint, TimeWindow, ensure_utc
from .cli_client import AzureCliClient

logger = structlog.get_logger(__name__)

AGGREGATIONS = ["Average", "Minimum", "Maximum"]


def format_timestamp(value: datetime) -> str:
    """ISO-8601 timestamp in UTC with explicit offset."""
    return ensure_utc(value).astimezone(timezone.utc).isoformat()


class MonitorClient(BaseClient):
    """Client for querying Azure Monitor metrics for one resource at a time."""

    def __init__(self, cli: AzureCliClient, config: Optional[Dict[str, Any]] = None):
        super().__init__(config, "MonitorClient")
        self.cli = cli

    async def connect(self) -> None:
        if not self.cli.is_connected:
            await self.cli.connect()
        self._connected = True

    async def health_check(self) -> bool:
        return await self.cli.health_check()

    def build_query_args(self, resource_id: str, metric_name: str,
                         window: TimeWindow, interval: str) -> List[str]:
        return [
            "monitor", "metrics", "list",
            "--resource", resource_id,
            "--metric", metric_name,
            "--start-time", format_timestamp(window.start),
            "--end-time", format_timestamp(window.end),
            "--interval", interval,
            "--aggregation", *AGGREGATIONS,
        ]

    async def fetch_series(self, resource_id: str, metric_name: str,
                           window: TimeWindow, interval: str) -> Optional[List[RawDataPoint]]:
        """
        Fetch the raw data points of one metric for one resource.

        Returns None when the response carries no time series at all, and a
        (possibly empty) list of points otherwise.
        """
        args = self.build_query_args(resource_id, metric_name, window, interval)
        payload = await self.cli.run_json(args)
        return self.parse_series(payload, [self.cli.cli_path, *args], resource_id)

    def parse_series(self, payload: Any, command: List[str],
                     resource_id: str = "") -> Optional[List[RawDataPoint]]:
        """Validate the shape of a metrics response and extract the first series."""
        if not isinstance(payload, dict):
            raise MalformedResponseError(command, f"expected a JSON object, got {type(payload).__name__}")

        metrics = payload.get("value")
        if not isinstance(metrics, list):
            raise MalformedResponseError(command, "'value' is missing or not an array")
        if not metrics:
            raise MalformedResponseError(command, "'value' is empty")

        metric = metrics[0]
        if not isinstance(metric, dict):
            raise MalformedResponseError(command, "'value[0]' is not an object")

        timeseries = metric.get("timeseries")
        if timeseries is None:
            return None
        if not isinstance(timeseries, list):
            raise MalformedResponseError(command, "'timeseries' is not an array")
        if not timeseries:
            return None
        if len(timeseries) > 1:
            self.logger.warning(
                "Metrics response contains more than one time series, using the first",
                resource_id=resource_id,
                series_count=len(timeseries)
            )

        series = timeseries[0]
        if not isinstance(series, dict):
            raise MalformedResponseError(command, "'timeseries[0]' is not an object")

        data = series.get("data")
        if data is None:
            return None
        if not isinstance(data, list):
            raise MalformedResponseError(command, "'timeseries[0].data' is not an array")

        points = []
        for index, raw in enumerate(data):
            if not isinstance(raw, dict):
                raise MalformedResponseError(command, f"data point {index} is not an object")
            try:
                points.append(RawDataPoint.model_validate(raw))
            except ValidationError as e:
                raise MalformedResponseError(
                    command, f"data point {index} is invalid: {e.errors()[0].get('msg')}",
                    {"point": raw}
                )

        self.logger.debug(f"Collected {len(points)} data points", resource_id=resource_id)
        return points
