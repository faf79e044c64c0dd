import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, List

import pytest

from azmetrics.core.models import TimeWindow


def metrics_payload(*series: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Shape of `az monitor metrics list` output."""
    return {
        "cost": 0,
        "interval": "PT5M",
        "value": [
            {
                "name": {"value": "Percentage CPU", "localizedValue": "Percentage CPU"},
                "timeseries": [{"data": list(points), "metadatavalues": []} for points in series],
                "unit": "Percent",
            }
        ],
    }


class FakeAzureCli:
    """Stands in for AzureCliClient and answers from canned payloads."""

    def __init__(self):
        self.cli_path = "az"
        self.is_connected = True
        self.calls: List[List[str]] = []
        self.resources: Any = []
        self.series: Dict[str, Any] = {}
        self.delays: Dict[str, float] = {}
        self.in_flight = 0
        self.max_in_flight = 0

    async def connect(self):
        self.is_connected = True

    async def health_check(self):
        return True

    async def run_json(self, args, scoped=True):
        args = list(args)
        self.calls.append(args)

        if args[:2] == ["resource", "list"]:
            if isinstance(self.resources, Exception):
                raise self.resources
            return self.resources

        if args[:3] == ["monitor", "metrics", "list"]:
            resource_id = args[args.index("--resource") + 1]
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            try:
                await asyncio.sleep(self.delays.get(resource_id, 0))
            finally:
                self.in_flight -= 1
            response = self.series[resource_id]
            if isinstance(response, Exception):
                raise response
            return response

        raise AssertionError(f"unexpected az call: {args}")

    def metric_calls(self) -> List[List[str]]:
        return [call for call in self.calls if call[:3] == ["monitor", "metrics", "list"]]


@pytest.fixture
def fake_cli():
    return FakeAzureCli()


@pytest.fixture
def window():
    return TimeWindow(
        start=datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc),
        end=datetime(2024, 1, 2, 0, 0, tzinfo=timezone.utc),
        step_ms=5 * 60 * 1000,
    )
