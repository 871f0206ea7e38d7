"""
swatchkit Metrics Collection
In-process metrics collection for extraction monitoring and performance tracking.
"""
import time
from collections import defaultdict, Counter
from contextlib import contextmanager
from threading import Lock
from typing import Any, Dict, List, Optional

from loguru import logger

from swatchkit.config import config


class MetricsCollector:
    """Simple in-process metrics collector."""

    def __init__(self, enabled: bool = True):
        """Initialize metrics collector."""
        self.enabled = enabled
        self._lock = Lock()
        self._counters: Dict[str, int] = Counter()
        self._timings: Dict[str, List[float]] = defaultdict(list)
        self._sample_counts: List[int] = []
        self._start_time = time.time()

    def increment(self, name: str, amount: int = 1):
        """Increment a named counter."""
        if not self.enabled:
            return
        with self._lock:
            self._counters[name] += amount

    def increment_extraction_count(self):
        """Increment total extraction counter."""
        self.increment("extractions_total")

    def increment_degenerate_count(self):
        """Increment counter of extractions that skipped clustering."""
        self.increment("extractions_degenerate_total")

    def increment_empty_count(self):
        """Increment counter of extractions with no opaque pixels."""
        self.increment("extractions_empty_total")

    def increment_kmeans_outcome(self, converged: bool):
        """Increment k-means termination counter."""
        if converged:
            self.increment("kmeans_converged_total")
        else:
            self.increment("kmeans_iteration_cap_total")

    def increment_failure_count(self, error_type: str):
        """Increment failure counter by error type."""
        self.increment(f"extraction_failed_total_{error_type}")

    def record_timing(self, operation: str, duration_ms: float):
        """Record timing for an operation."""
        if not self.enabled:
            return
        with self._lock:
            self._timings[f"{operation}_duration_ms"].append(duration_ms)

    def record_sample_count(self, count: int):
        """Record number of distinct samples fed to the pipeline."""
        if not self.enabled:
            return
        with self._lock:
            self._sample_counts.append(count)

    def get_counters(self) -> Dict[str, int]:
        """Get current counter values."""
        with self._lock:
            return dict(self._counters)

    def get_timing_stats(self) -> Dict[str, Dict[str, float]]:
        """Get timing statistics."""
        with self._lock:
            stats = {}
            for operation, timings in self._timings.items():
                if timings:
                    stats[operation] = self._describe(timings)
            return stats

    def get_sample_count_stats(self) -> Dict[str, float]:
        """Get sample count statistics."""
        with self._lock:
            if not self._sample_counts:
                return {}
            return self._describe(self._sample_counts)

    def get_uptime_seconds(self) -> float:
        """Get collector uptime in seconds."""
        return time.time() - self._start_time

    def get_summary(self) -> Dict[str, Any]:
        """Get complete metrics summary."""
        return {
            "uptime_seconds": self.get_uptime_seconds(),
            "counters": self.get_counters(),
            "timing_stats": self.get_timing_stats(),
            "sample_count_stats": self.get_sample_count_stats()
        }

    def reset(self):
        """Reset all metrics (for testing)."""
        with self._lock:
            self._counters.clear()
            self._timings.clear()
            self._sample_counts.clear()
            self._start_time = time.time()

    @classmethod
    def _describe(cls, data: List[float]) -> Dict[str, float]:
        return {
            "count": len(data),
            "mean": sum(data) / len(data),
            "min": min(data),
            "max": max(data),
            "p50": cls._percentile(data, 50),
            "p95": cls._percentile(data, 95)
        }

    @staticmethod
    def _percentile(data: List[float], percentile: int) -> float:
        """Calculate percentile of data."""
        if not data:
            return 0.0

        sorted_data = sorted(data)
        k = (len(sorted_data) - 1) * percentile / 100
        f = int(k)
        c = k - f

        if f + 1 < len(sorted_data):
            return sorted_data[f] + c * (sorted_data[f + 1] - sorted_data[f])
        else:
            return sorted_data[f]


# Global metrics instance
_metrics: Optional[MetricsCollector] = None


def get_metrics() -> MetricsCollector:
    """Get or create global metrics collector."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector(enabled=config.METRICS_ENABLED)
    return _metrics


def reset_metrics():
    """Reset global metrics (for testing)."""
    global _metrics
    if _metrics is not None:
        _metrics.reset()


@contextmanager
def performance_monitor(operation_name: str, **context):
    """Context manager recording the duration of a pipeline stage."""
    start_time = time.perf_counter()
    error_msg = None

    try:
        yield
    except Exception as e:
        error_msg = str(e)
        raise
    finally:
        duration_ms = (time.perf_counter() - start_time) * 1000
        get_metrics().record_timing(operation_name, duration_ms)

        if error_msg:
            logger.error(f"Operation {operation_name} failed after {duration_ms:.1f}ms: {error_msg}")
        else:
            logger.debug(f"Operation {operation_name} completed in {duration_ms:.1f}ms {context}")
