"""Collection orchestrator: list resources, fetch every series concurrently, report progress."""

from typing import Callable, Optional, Pattern, Union
import structlog
from datetime import datetime, timezone

from azmetrics.clients.azure.monitor_client import MonitorClient
from azmetrics.clients.azure.resource_client import ResourceClient
from azmetrics.config.settings import DEFAULT_RESOURCE_TYPE
from azmetrics.core.exceptions import (
    ConfigurationException,
    MetricsCollectorException,
    UnsupportedMetricError,
)
from azmetrics.core.models import (
    CollectionResult,
    CollectionStatus,
    LabeledSeriesMap,
    MetricType,
    ProgressState,
    Resource,
    TimeWindow,
)
from azmetrics.core.utils import gather_with_concurrency
from azmetrics.mappers.datapoint_mapper import DataPointMapper
from .intervals import quantize
from .metric_names import resolve

logger = structlog.get_logger(__name__)

ProgressCallback = Callable[[int, int], None]


class CollectionOrchestrator:
    """
    Collects one metric for every matching resource.

    Listing and metric resolution run first; afterwards one query per
    resource is started concurrently. The first failing query aborts the
    whole run and cancels the queries still in flight.
    """

    def __init__(self,
                 resource_client: ResourceClient,
                 monitor_client: MonitorClient,
                 max_concurrency: Optional[int] = None):
        if max_concurrency is not None and max_concurrency < 1:
            raise ConfigurationException(
                "max_concurrency must be at least 1",
                {"max_concurrency": max_concurrency}
            )
        self.resource_client = resource_client
        self.monitor_client = monitor_client
        self.max_concurrency = max_concurrency
        self.progress = ProgressState()
        self.logger = logger.bind(orchestrator="collection")

    async def collect(self,
                      window: TimeWindow,
                      resource_group: Optional[str] = None,
                      resource_type: str = DEFAULT_RESOURCE_TYPE,
                      metric: Union[MetricType, str] = MetricType.CPU,
                      name_pattern: Optional[Union[str, Pattern]] = None,
                      on_progress: Optional[ProgressCallback] = None) -> LabeledSeriesMap:
        """Collect a labeled series map; raises on the first error."""
        start_time = datetime.now(timezone.utc)
        metric = self._coerce_metric(metric, resource_type)

        interval = quantize(window.step_ms)
        metric_name = resolve(resource_type, metric)

        self.logger.info(
            f"Querying {metric.value} stats using an interval of {interval}",
            metric_name=metric_name,
            resource_type=resource_type,
            resource_group=resource_group,
            start=window.start.isoformat(),
            end=window.end.isoformat()
        )

        resources = await self.resource_client.list_resources(resource_type, resource_group, name_pattern)

        self.progress = ProgressState(total=len(resources))
        self._emit_progress(on_progress)

        mapper = DataPointMapper(metric)
        data: LabeledSeriesMap = {}

        async def collect_resource(resource: Resource) -> None:
            raw_series = await self.monitor_client.fetch_series(resource.id, metric_name, window, interval)
            if raw_series is not None:
                data[resource.name] = mapper.map_series(raw_series)
            self.progress.advance()
            self._emit_progress(on_progress)

        await gather_with_concurrency(
            [collect_resource(resource) for resource in resources],
            max_concurrency=self.max_concurrency
        )

        duration = (datetime.now(timezone.utc) - start_time).total_seconds()
        self.logger.info(
            f"Collection completed in {duration:.2f}s",
            resources=len(resources),
            series=len(data),
            points=sum(len(points) for points in data.values())
        )
        return data

    async def run(self, window: TimeWindow, **kwargs) -> CollectionResult:
        """Like `collect`, but report failures as a CollectionResult instead of raising."""
        try:
            data = await self.collect(window, **kwargs)
        except MetricsCollectorException as e:
            self.logger.error("Collection failed", error_kind=e.error_kind, error=e.message)
            return CollectionResult(
                status=CollectionStatus.FAILED,
                error_kind=e.error_kind,
                error=e.message,
                details=e.details,
                resources_total=self.progress.total,
                resources_completed=self.progress.completed
            )

        return CollectionResult(
            status=CollectionStatus.SUCCESS,
            data=data,
            resources_total=self.progress.total,
            resources_completed=self.progress.completed
        )

    def _emit_progress(self, on_progress: Optional[ProgressCallback]) -> None:
        self.logger.debug("Progress", completed=self.progress.completed, total=self.progress.total)
        if on_progress:
            on_progress(self.progress.completed, self.progress.total)

    @staticmethod
    def _coerce_metric(metric: Union[MetricType, str], resource_type: str) -> MetricType:
        if isinstance(metric, MetricType):
            return metric
        try:
            return MetricType(metric)
        except ValueError:
            raise UnsupportedMetricError(resource_type, str(metric))
