import json

import pytest
from click.testing import CliRunner

from azmetrics import cli
from azmetrics.clients.azure.monitor_client import MonitorClient
from azmetrics.clients.azure.resource_client import ResourceClient
from azmetrics.core.exceptions import ConfigurationException, ExternalInvocationError

from conftest import metrics_payload

WINDOW_ARGS = ["--start", "2024-01-01T00:00:00Z", "--end", "2024-01-02T00:00:00Z", "--step", "7m"]


class FakeFactory:
    def __init__(self, fake_cli):
        self.fake_cli = fake_cli
        self.clients = []

    def create_resource_client(self):
        client = ResourceClient(self.fake_cli)
        self.clients.append(client)
        return client

    def create_monitor_client(self):
        client = MonitorClient(self.fake_cli)
        self.clients.append(client)
        return client


@pytest.fixture
def factory(fake_cli):
    return FakeFactory(fake_cli)


@pytest.fixture
def runner(monkeypatch, factory):
    monkeypatch.delenv("AZURE_RESOURCE_GROUP", raising=False)
    monkeypatch.delenv("COLLECTION_METRIC", raising=False)
    monkeypatch.setattr(cli, "AzureClientFactory", lambda config: factory)
    return CliRunner()


class TestCollectCommand:
    def test_writes_labeled_series(self, runner, fake_cli, tmp_path):
        fake_cli.resources = [{"id": "/vms/web-1", "name": "web-1"}, {"id": "/vms/db-1", "name": "db-1"}]
        fake_cli.series["/vms/web-1"] = metrics_payload([
            {"timeStamp": "2024-01-01T00:00:00Z", "average": 4_000_000_000},
        ])
        output = tmp_path / "out" / "series.json"

        result = runner.invoke(cli.collect, WINDOW_ARGS + [
            "--metric", "ram", "--filter", "^web", "-g", "my-rg", "--output", str(output),
        ])

        assert result.exit_code == 0, result.output
        assert json.loads(output.read_text()) == {"web-1": [["2024-01-01T00:00:00+00:00", 4.0]]}

        listing = fake_cli.calls[0]
        assert listing[listing.index("--resource-group") + 1] == "my-rg"
        query = fake_cli.metric_calls()[0]
        assert query[query.index("--interval") + 1] == "5m"
        assert query[query.index("--metric") + 1] == "Available Memory Bytes"

    def test_failure_exits_non_zero(self, runner, fake_cli, tmp_path):
        fake_cli.resources = [{"id": "/vms/web-1", "name": "web-1"}]
        fake_cli.series["/vms/web-1"] = ExternalInvocationError(
            ["az", "monitor", "metrics", "list"], 1, "", "ERROR: throttled"
        )
        output = tmp_path / "series.json"

        result = runner.invoke(cli.collect, WINDOW_ARGS + ["--output", str(output)])

        assert result.exit_code == 1
        assert "ERROR: throttled" in result.output
        assert not output.exists()

    def test_unsupported_metric_exits_non_zero(self, runner, fake_cli):
        result = runner.invoke(cli.collect, WINDOW_ARGS + [
            "--resource-type", "Microsoft.Web/serverFarms", "--metric", "ram",
        ])
        assert result.exit_code == 1
        assert fake_cli.calls == []

    def test_bad_timestamp_is_usage_error(self, runner):
        result = runner.invoke(cli.collect, ["--start", "last tuesday"])
        assert result.exit_code == 2

    def test_bad_step_is_usage_error(self, runner):
        result = runner.invoke(cli.collect, WINDOW_ARGS[:4] + ["--step", "often"])
        assert result.exit_code == 2

    def test_reversed_window(self, runner, fake_cli):
        result = runner.invoke(cli.collect, [
            "--start", "2024-01-02T00:00:00Z", "--end", "2024-01-01T00:00:00Z",
        ])
        assert result.exit_code == 1
        assert fake_cli.calls == []

    def test_clients_connected_for_run_and_released(self, runner, fake_cli, factory):
        fake_cli.resources = [{"id": "/vms/web-1", "name": "web-1"}]
        fake_cli.series["/vms/web-1"] = metrics_payload([])

        result = runner.invoke(cli.collect, WINDOW_ARGS)

        assert result.exit_code == 0, result.output
        assert [type(c) for c in factory.clients] == [ResourceClient, MonitorClient]
        assert not any(client.is_connected for client in factory.clients)

    def test_missing_cli_exits_non_zero(self, runner, fake_cli):
        async def missing():
            raise ConfigurationException("Azure CLI 'az' not found on PATH")

        fake_cli.is_connected = False
        fake_cli.connect = missing

        result = runner.invoke(cli.collect, WINDOW_ARGS)

        assert result.exit_code == 1
        assert "not found on PATH" in result.output
        assert fake_cli.calls == []


class TestDescribeQuery:
    def test_mentions_metric_and_interval(self):
        window = cli.build_window("2024-01-01T00:00:00Z", "2024-01-02T00:00:00Z", "1h", 24)
        text = cli.describe_query(cli.MetricType.CPU, window)
        assert text.startswith("Querying cpu stats from Mon Jan 01 2024")
        assert text.endswith("using an interval of 1h")

    def test_default_start_from_hours(self):
        window = cli.build_window(None, "2024-01-02T00:00:00Z", "5m", 6)
        assert (window.end - window.start).total_seconds() == 6 * 3600
