"""Custom exceptions for the metrics collector."""

from typing import Optional, Dict, Any, Sequence


class MetricsCollectorException(Exception):
    """Base exception for the metrics collector."""

    error_kind = "unknown"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ExternalInvocationError(MetricsCollectorException):
    """Raised when an `az` invocation exits non-zero."""

    error_kind = "external_invocation"

    def __init__(self, command: Sequence[str], returncode: int, stdout: str = "", stderr: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(
            f"Command failed: '{' '.join(self.command)}' (exit code {returncode})",
            {"returncode": returncode, "stdout": stdout, "stderr": stderr},
        )


class UnsupportedMetricError(MetricsCollectorException):
    """Raised when a metric has no native name for a resource type."""

    error_kind = "unsupported_metric"

    def __init__(self, resource_type: str, metric: str, supported: Optional[Sequence[str]] = None):
        self.resource_type = resource_type
        self.metric = metric
        self.supported = list(supported or [])
        message = f"Metric '{metric}' is not supported for resource type '{resource_type}'"
        if self.supported:
            message += f" (supported: {', '.join(self.supported)})"
        super().__init__(message, {"supported": self.supported})


class MalformedResponseError(MetricsCollectorException):
    """Raised when `az` output does not have the expected structure."""

    error_kind = "malformed_response"

    def __init__(self, command: Sequence[str], message: str, details: Optional[Dict[str, Any]] = None):
        self.command = list(command)
        super().__init__(f"Unexpected output from '{' '.join(self.command)}': {message}", details)


class ConfigurationException(MetricsCollectorException):
    """Raised when configuration is invalid."""

    error_kind = "configuration"


class DataValidationException(MetricsCollectorException):
    """Raised when data validation fails."""

    error_kind = "data_validation"

    def __init__(self, field: str, value: Any, message: str):
        self.field = field
        self.value = value
        super().__init__(f"Validation failed for {field}: {message}")
