"""Data point mapping utilities."""

from typing import Iterable, List, Optional
import structlog

from azmetrics.core.models import MetricType, NormalizedPoint, RawDataPoint

logger = structlog.get_logger(__name__)

BYTES_PER_GB = 1_000_000_000


class DataPointMapper:
    """Maps raw Azure Monitor data points to (timestamp, value) pairs."""

    def __init__(self, metric: MetricType):
        self.metric = metric

    def map_series(self, raw_points: Iterable[RawDataPoint]) -> List[NormalizedPoint]:
        """Reduce and convert every point, dropping points without a value."""
        series = []
        dropped = 0
        for point in raw_points:
            value = self.reduce_value(point)
            if value is None:
                dropped += 1
                continue
            series.append(NormalizedPoint(point.timestamp, self.transform_value(value)))

        if dropped:
            logger.debug("Dropped data points without a value", dropped=dropped, kept=len(series))
        return series

    @staticmethod
    def reduce_value(point: RawDataPoint) -> Optional[float]:
        """Prefer average, then minimum, then maximum."""
        for value in (point.average, point.minimum, point.maximum):
            if value is not None:
                return value
        return None

    def transform_value(self, value: float) -> float:
        if self.metric == MetricType.RAM:
            # Available bytes, transform to GB
            return value / BYTES_PER_GB
        return value
