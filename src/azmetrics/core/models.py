"""
Metrics Collection Data Models
Data models for time windows, resources, raw and normalized metric points
"""

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from typing import List, Optional, Dict, Any, NamedTuple
from datetime import datetime, timezone
from enum import Enum

from azmetrics.core.exceptions import DataValidationException


class MetricType(str, Enum):
    """Logical metric kinds a caller can request."""
    CPU = "cpu"
    RAM = "ram"
    MEMORY_PERCENT = "memory_percent"
    DISK = "disk"


class CollectionStatus(str, Enum):
    """Outcome of a collection run."""
    SUCCESS = "success"
    FAILED = "failed"


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class TimeWindow(BaseModel):
    """Caller-supplied query window."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime
    step_ms: int = Field(..., description="Requested sampling step in milliseconds")

    @field_validator('start', 'end')
    @classmethod
    def validate_timezone(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @field_validator('step_ms')
    @classmethod
    def validate_step(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("step must be positive")
        return v

    @model_validator(mode='after')
    def validate_order(self) -> "TimeWindow":
        if self.start >= self.end:
            raise ValueError("start must be before end")
        return self

    @classmethod
    def create(cls, start: datetime, end: datetime, step_ms: int) -> "TimeWindow":
        """Build a window, converting validation errors to DataValidationException."""
        try:
            return cls(start=start, end=end, step_ms=step_ms)
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first.get("loc", ())) or "window"
            raise DataValidationException(field, first.get("input"), first.get("msg", str(e)))


class SupportedInterval(BaseModel):
    """Sampling interval accepted by `az monitor metrics list`."""

    model_config = ConfigDict(frozen=True)

    display: str
    duration_ms: int


class Resource(BaseModel):
    """Azure resource as listed by `az resource list`."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str

    def __hash__(self):
        return hash(self.id)

    def __eq__(self, other):
        if not isinstance(other, Resource):
            return NotImplemented
        return self.id == other.id


class RawDataPoint(BaseModel):
    """Single data point of an Azure Monitor time series."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    timestamp: datetime = Field(..., alias="timeStamp")
    average: Optional[float] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None


class NormalizedPoint(NamedTuple):
    timestamp: datetime
    value: float


LabeledSeriesMap = Dict[str, List[NormalizedPoint]]


class ProgressState(BaseModel):
    """Completion counter for a collection run."""

    completed: int = 0
    total: int = Field(0, ge=0)

    def advance(self) -> int:
        if self.completed >= self.total:
            raise ValueError(f"progress already complete ({self.completed} / {self.total})")
        self.completed += 1
        return self.completed


class CollectionResult(BaseModel):
    """Tagged outcome handed back to the caller instead of exiting."""

    status: CollectionStatus
    data: Dict[str, List[NormalizedPoint]] = Field(default_factory=dict)
    error_kind: Optional[str] = None
    error: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)
    resources_total: int = 0
    resources_completed: int = 0

    @property
    def ok(self) -> bool:
        return self.status == CollectionStatus.SUCCESS


def series_to_json(data: LabeledSeriesMap) -> Dict[str, List[List[Any]]]:
    """Render a labeled series map as JSON-friendly lists."""
    return {
        label: [[point.timestamp.isoformat(), point.value] for point in points]
        for label, points in data.items()
    }
