"""Metrics collection for loader operations."""

from dataclasses import dataclass, field
from typing import ClassVar


@dataclass
class LoaderMetrics:
    """Metrics for loader fetches.

    Singleton class that tracks request counts per connector and status,
    bytes received, failures and time spent.
    """

    requests_total: dict[str, dict[int, int]] = field(default_factory=dict)
    failures_total: dict[str, int] = field(default_factory=dict)
    bytes_total: int = 0
    duration_ms_total: float = 0.0
    request_count: int = 0

    _instance: ClassVar["LoaderMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "LoaderMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_request(
        self, connector: str, status_code: int, bytes_received: int
    ) -> None:
        """Record a completed fetch.

        Args:
            connector: Connector kind that served the fetch.
            status_code: HTTP status code.
            bytes_received: Number of body bytes received.
        """
        by_status = self.requests_total.setdefault(connector, {})
        by_status[status_code] = by_status.get(status_code, 0) + 1
        self.bytes_total += bytes_received
        self.request_count += 1

    def record_failure(self, error_type: str) -> None:
        """Record a failed fetch by error type name."""
        self.failures_total[error_type] = self.failures_total.get(error_type, 0) + 1

    def record_duration(self, duration_ms: float) -> None:
        self.duration_ms_total += duration_ms

    def to_dict(self) -> dict[str, object]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "requests_total": {
                connector: dict(by_status)
                for connector, by_status in self.requests_total.items()
            },
            "failures_total": dict(self.failures_total),
            "bytes_total": self.bytes_total,
            "duration_ms_total": self.duration_ms_total,
            "request_count": self.request_count,
        }

    @property
    def avg_duration_ms(self) -> float:
        """Calculate average fetch duration in milliseconds."""
        if self.request_count == 0:
            return 0.0
        return self.duration_ms_total / self.request_count
