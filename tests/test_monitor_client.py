from datetime import datetime, timezone

import pytest

from azmetrics.clients.azure.monitor_client import MonitorClient, format_timestamp
from azmetrics.core.exceptions import MalformedResponseError
from azmetrics.core.models import RawDataPoint

from conftest import metrics_payload

RESOURCE_ID = "/subscriptions/sub/resourceGroups/rg/providers/Microsoft.Compute/virtualMachines/web-1"
COMMAND = ["az", "monitor", "metrics", "list"]


class TestFetchSeries:
    @pytest.mark.asyncio
    async def test_command_arguments(self, fake_cli, window):
        fake_cli.series[RESOURCE_ID] = metrics_payload([])
        await MonitorClient(fake_cli).fetch_series(RESOURCE_ID, "Percentage CPU", window, "5m")

        assert fake_cli.calls[0] == [
            "monitor", "metrics", "list",
            "--resource", RESOURCE_ID,
            "--metric", "Percentage CPU",
            "--start-time", "2024-01-01T00:00:00+00:00",
            "--end-time", "2024-01-02T00:00:00+00:00",
            "--interval", "5m",
            "--aggregation", "Average", "Minimum", "Maximum",
        ]

    @pytest.mark.asyncio
    async def test_parses_points(self, fake_cli, window):
        fake_cli.series[RESOURCE_ID] = metrics_payload([
            {"timeStamp": "2024-01-01T00:00:00+00:00", "average": 12.5, "minimum": 3.0, "maximum": 40.0},
            {"timeStamp": "2024-01-01T00:05:00Z"},
        ])
        points = await MonitorClient(fake_cli).fetch_series(RESOURCE_ID, "Percentage CPU", window, "5m")

        assert len(points) == 2
        assert points[0].average == 12.5
        assert points[0].timestamp == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert points[1].average is None and points[1].minimum is None and points[1].maximum is None


class TestParseSeries:
    def parse(self, fake_cli, payload):
        return MonitorClient(fake_cli).parse_series(payload, COMMAND, RESOURCE_ID)

    def test_empty_value_is_malformed(self, fake_cli):
        with pytest.raises(MalformedResponseError) as exc_info:
            self.parse(fake_cli, {"value": []})
        assert "'value' is empty" in str(exc_info.value)

    def test_missing_timeseries_is_no_series(self, fake_cli):
        assert self.parse(fake_cli, {"value": [{"name": {"value": "x"}}]}) is None

    def test_empty_timeseries_is_no_series(self, fake_cli):
        assert self.parse(fake_cli, {"value": [{"timeseries": []}]}) is None

    def test_missing_data_is_no_series(self, fake_cli):
        assert self.parse(fake_cli, {"value": [{"timeseries": [{"metadatavalues": []}]}]}) is None

    def test_empty_data_is_empty_series(self, fake_cli):
        assert self.parse(fake_cli, metrics_payload([])) == []

    def test_multiple_series_uses_first(self, fake_cli):
        payload = metrics_payload(
            [{"timeStamp": "2024-01-01T00:00:00Z", "average": 1}],
            [{"timeStamp": "2024-01-01T00:00:00Z", "average": 2}],
        )
        points = self.parse(fake_cli, payload)
        assert [p.average for p in points] == [1]

    @pytest.mark.parametrize("payload", [
        [],
        "text",
        {},
        {"value": {"timeseries": []}},
        {"value": ["not-an-object"]},
        {"value": [{"timeseries": {"data": []}}]},
        {"value": [{"timeseries": ["not-an-object"]}]},
        {"value": [{"timeseries": [{"data": {"average": 1}}]}]},
    ])
    def test_structural_mismatch(self, fake_cli, payload):
        with pytest.raises(MalformedResponseError):
            self.parse(fake_cli, payload)

    @pytest.mark.parametrize("raw_point", [
        "2024-01-01T00:00:00Z",
        {"average": 1},
        {"timeStamp": "yesterday", "average": 1},
        {"timeStamp": "2024-01-01T00:00:00Z", "average": "high"},
    ])
    def test_invalid_points(self, fake_cli, raw_point):
        with pytest.raises(MalformedResponseError):
            self.parse(fake_cli, metrics_payload([raw_point]))

    def test_returns_raw_points(self, fake_cli):
        points = self.parse(fake_cli, metrics_payload([{"timeStamp": "2024-01-01T00:00:00Z", "maximum": 7}]))
        assert isinstance(points[0], RawDataPoint)
        assert points[0].maximum == 7


class TestFormatTimestamp:
    def test_naive_is_utc(self):
        assert format_timestamp(datetime(2024, 3, 1, 12, 30)) == "2024-03-01T12:30:00+00:00"

    def test_aware_converted_to_utc(self):
        from datetime import timedelta
        tz = timezone(timedelta(hours=2))
        assert format_timestamp(datetime(2024, 3, 1, 14, 30, tzinfo=tz)) == "2024-03-01T12:30:00+00:00"
