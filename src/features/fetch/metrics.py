"""Metrics collection for the HTTP fetch layer."""

from dataclasses import dataclass, field
from typing import ClassVar

from src.features.fetch.models import FetchErrorClass


@dataclass
class FetchMetrics:
    """Metrics for fetch chains.

    Singleton class that tracks hop counts, redirects of both kinds,
    failures by class and decoded bytes.
    """

    http_hops_total: dict[int, int] = field(default_factory=dict)
    redirects_total: int = 0
    meta_refresh_total: int = 0
    failures_total: dict[str, int] = field(default_factory=dict)
    successes_total: int = 0
    bytes_total: int = 0
    duration_ms_total: float = 0.0
    chain_count: int = 0

    _instance: ClassVar["FetchMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "FetchMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_hop(self, status_code: int) -> None:
        """Record a response received for one hop."""
        self.http_hops_total[status_code] = (
            self.http_hops_total.get(status_code, 0) + 1
        )

    def record_redirect(self) -> None:
        """Record a followed protocol redirect."""
        self.redirects_total += 1

    def record_meta_refresh(self) -> None:
        """Record a followed meta-refresh redirect."""
        self.meta_refresh_total += 1

    def record_success(self, bytes_received: int) -> None:
        """Record a chain that produced text.

        Args:
            bytes_received: Size of the decompressed body.
        """
        self.successes_total += 1
        self.bytes_total += bytes_received

    def record_failure(self, error_class: FetchErrorClass) -> None:
        """Record a failed chain.

        Args:
            error_class: Classification of the failure.
        """
        key = error_class.value
        self.failures_total[key] = self.failures_total.get(key, 0) + 1

    def record_duration(self, duration_ms: float) -> None:
        """Record the wall time of one chain."""
        self.duration_ms_total += duration_ms
        self.chain_count += 1

    def to_dict(self) -> dict[str, int | float | dict[str, int] | dict[int, int]]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "http_hops_total": dict(self.http_hops_total),
            "redirects_total": self.redirects_total,
            "meta_refresh_total": self.meta_refresh_total,
            "failures_total": dict(self.failures_total),
            "successes_total": self.successes_total,
            "bytes_total": self.bytes_total,
            "duration_ms_total": self.duration_ms_total,
            "chain_count": self.chain_count,
            "avg_duration_ms": self.avg_duration_ms,
        }

    @property
    def avg_duration_ms(self) -> float:
        """Calculate average chain duration."""
        if self.chain_count == 0:
            return 0.0
        return self.duration_ms_total / self.chain_count
