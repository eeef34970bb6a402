"""Performance monitoring and profiling utilities."""

import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Optional

import psutil

from .logger import get_logger

logger = get_logger(__name__)


@dataclass
class PerformanceMetrics:
    """Container for performance measurements."""

    operation: str
    duration_seconds: float
    memory_mb: float
    items_processed: int = 0
    throughput: float = 0.0  # items/second


class PerformanceMonitor:
    """Record wall time and resident memory deltas per named operation."""

    def __init__(self, enabled: bool = False):
        self.metrics: Dict[str, list[PerformanceMetrics]] = {}
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    def enable(self) -> None:
        """Enable performance monitoring."""
        self._enabled = True
        logger.info("Performance monitoring enabled")

    def disable(self) -> None:
        """Disable performance monitoring."""
        self._enabled = False
        logger.info("Performance monitoring disabled")

    @contextmanager
    def measure(self, operation: str, items_count: int = 0):
        """Context manager for measuring operation performance.

        Args:
            operation: Name of the operation being measured
            items_count: Number of items processed (for throughput calculation)

        Example:
            >>> monitor = PerformanceMonitor(enabled=True)
            >>> with monitor.measure("naive[200]", items_count=1):
            ...     matmul_naive(a, b)
        """
        if not self._enabled:
            yield
            return

        process = psutil.Process()
        start_memory = process.memory_info().rss / 1024 / 1024  # MB
        start_time = time.perf_counter()

        try:
            yield
        finally:
            duration = time.perf_counter() - start_time
            memory_delta = process.memory_info().rss / 1024 / 1024 - start_memory
            throughput = items_count / duration if duration > 0 and items_count > 0 else 0.0

            metric = PerformanceMetrics(
                operation=operation,
                duration_seconds=duration,
                memory_mb=memory_delta,
                items_processed=items_count,
                throughput=throughput
            )
            self.metrics.setdefault(operation, []).append(metric)

            log_msg = (
                f"Performance [{operation}]: "
                f"duration={duration:.3f}s, "
                f"memory={memory_delta:+.1f}MB"
            )
            if items_count > 0:
                log_msg += f", throughput={throughput:.1f} items/s"
            logger.debug(log_msg)

    def last(self, operation: str) -> Optional[PerformanceMetrics]:
        """Return the most recent measurement of an operation, if any."""
        recorded = self.metrics.get(operation)
        if not recorded:
            return None
        return recorded[-1]

    def get_summary(self, operation: Optional[str] = None) -> Dict:
        """Get performance summary statistics.

        Args:
            operation: Optional specific operation to summarize

        Returns:
            Dictionary with summary statistics
        """
        if operation:
            metrics = self.metrics.get(operation, [])
        else:
            metrics = [m for ms in self.metrics.values() for m in ms]

        if not metrics:
            return {}

        total_duration = sum(m.duration_seconds for m in metrics)
        metrics_with_items = [m for m in metrics if m.items_processed > 0]
        avg_throughput = 0.0
        if metrics_with_items:
            avg_throughput = sum(m.throughput for m in metrics_with_items) / len(metrics_with_items)

        return {
            'count': len(metrics),
            'total_duration': total_duration,
            'avg_duration': total_duration / len(metrics),
            'min_duration': min(m.duration_seconds for m in metrics),
            'max_duration': max(m.duration_seconds for m in metrics),
            'avg_memory_mb': sum(m.memory_mb for m in metrics) / len(metrics),
            'total_items': sum(m.items_processed for m in metrics),
            'avg_throughput': avg_throughput
        }

    def clear(self) -> None:
        """Clear all recorded metrics."""
        self.metrics.clear()
        logger.debug("Performance metrics cleared")

    def export_to_dict(self) -> Dict:
        """Export all metrics to dictionary format."""
        return {
            operation: [
                {
                    'duration_seconds': m.duration_seconds,
                    'memory_mb': m.memory_mb,
                    'items_processed': m.items_processed,
                    'throughput': m.throughput
                }
                for m in metrics
            ]
            for operation, metrics in self.metrics.items()
        }


# Global monitor instance
_monitor = PerformanceMonitor()


def get_performance_monitor() -> PerformanceMonitor:
    """Get global performance monitor instance."""
    return _monitor
