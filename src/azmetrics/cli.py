# src/azmetrics/cli.py
"""Utilization metrics CLI - collect one metric for many Azure resources."""

import asyncio
import click
import json
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional
import structlog

from azmetrics.clients.azure.client_factory import AzureClientFactory
from azmetrics.collection.intervals import quantize
from azmetrics.collection.metric_names import describe_metric
from azmetrics.collection.orchestrator import CollectionOrchestrator
from azmetrics.config.settings import Settings
from azmetrics.core.exceptions import DataValidationException, MetricsCollectorException
from azmetrics.core.models import MetricType, TimeWindow, series_to_json
from azmetrics.core.utils import parse_duration_ms, setup_logging

logger = structlog.get_logger(__name__)


class ProgressLine:
    """Single overwritable progress line on stderr."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    def __call__(self, completed: int, total: int) -> None:
        if self.enabled:
            click.echo(f"\r\033[KFetching data… ({completed} / {total} queries completed)", nl=False, err=True)

    def clear(self) -> None:
        if self.enabled:
            click.echo("\r\033[K", nl=False, err=True)


def parse_timestamp(value: str, option: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise click.BadParameter(f"'{value}' is not an ISO-8601 timestamp", param_hint=option)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def build_window(start: Optional[str], end: Optional[str], step: str, default_hours: int) -> TimeWindow:
    end_time = parse_timestamp(end, "--end") if end else datetime.now(timezone.utc)
    start_time = parse_timestamp(start, "--start") if start else end_time - timedelta(hours=default_hours)
    try:
        step_ms = parse_duration_ms(step)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--step")
    return TimeWindow.create(start_time, end_time, step_ms)


def describe_query(metric: MetricType, window: TimeWindow) -> str:
    start, end = window.start, window.end
    return (
        f"Querying {metric.value} stats from {start:%a %b %d %Y} @ {start:%H:%M:%S %Z} "
        f"to {end:%a %b %d %Y} @ {end:%H:%M:%S %Z} using an interval of {quantize(window.step_ms)}"
    )


@click.command()
@click.option('--start', default=None, help='Window start (ISO-8601). Defaults to --end minus COLLECTION_DEFAULT_HOURS')
@click.option('--end', default=None, help='Window end (ISO-8601). Defaults to now')
@click.option('--step', default=None, help='Sampling step, e.g. 5m, 1h or milliseconds')
@click.option('--resource-group', '-g', default=None, help='Passed through to `az resource list`')
@click.option('--resource-type', '-t', default=None, help='Azure resource type (default: virtual machines)')
@click.option('--metric', '-m', type=click.Choice([m.value for m in MetricType]), default=None,
              help='Logical metric to collect')
@click.option('--filter', 'name_filter', default=None, help='RegEx to match resource names')
@click.option('--max-concurrency', type=click.IntRange(min=1), default=None,
              help='Maximum number of metric queries in flight (default: unbounded)')
@click.option('--output', '-o', default=None, help='Output JSON file path (default: stdout)')
@click.option('--verbose', '-v', is_flag=True, help='Explain how to read the metric')
@click.option('--debug', is_flag=True, help='Enable debug logging')
def collect(start, end, step, resource_group, resource_type, metric, name_filter,
            max_concurrency, output, verbose, debug):
    """
    Collect a utilization metric for every matching Azure resource.

    Resources are listed with `az resource list` and one
    `az monitor metrics list` query runs per resource. The result is a JSON
    object mapping resource names to [timestamp, value] pairs.

    Example:
        azmetrics --resource-group my-rg --metric ram --step 15m --filter '^web'
    """
    settings = Settings.create_from_env()
    log_level = "DEBUG" if debug or settings.debug else settings.log_level.value
    setup_logging(settings.log_config_path, log_level=log_level)

    collection = settings.collection
    metric_type = MetricType(metric) if metric else collection.metric

    try:
        window = build_window(start, end, step or collection.default_step, collection.default_hours)
    except DataValidationException as e:
        click.echo(f"❌ Invalid time window: {e.message}", err=True)
        sys.exit(1)

    async def run_collection() -> int:
        factory = AzureClientFactory(settings.azure.model_dump())

        click.echo(describe_query(metric_type, window), err=True)
        if verbose:
            for line in describe_metric(metric_type):
                click.echo(f"  {line}", err=True)

        progress = ProgressLine(enabled=sys.stderr.isatty() or verbose)
        try:
            async with factory.create_resource_client() as resource_client, \
                    factory.create_monitor_client() as monitor_client:
                orchestrator = CollectionOrchestrator(
                    resource_client,
                    monitor_client,
                    max_concurrency=max_concurrency or collection.max_concurrency
                )
                result = await orchestrator.run(
                    window,
                    resource_group=resource_group or settings.azure.resource_group,
                    resource_type=resource_type or collection.resource_type,
                    metric=metric_type,
                    name_pattern=name_filter or collection.name_filter,
                    on_progress=progress
                )
        except MetricsCollectorException as e:
            click.echo(f"❌ {e.message} ❌", err=True)
            return 1
        finally:
            progress.clear()

        if not result.ok:
            click.echo(f"❌ {result.error} ❌", err=True)
            for stream in ("stdout", "stderr"):
                if result.details.get(stream):
                    click.echo(result.details[stream], err=True)
            return 1

        payload = json.dumps(series_to_json(result.data), indent=2)
        if output:
            output_path = Path(output)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(payload)
            click.echo(f"✅ {len(result.data)} series saved to: {output_path}", err=True)
        else:
            click.echo(payload)
        return 0

    exit_code = asyncio.run(run_collection())
    sys.exit(exit_code)


if __name__ == '__main__':
    collect()
