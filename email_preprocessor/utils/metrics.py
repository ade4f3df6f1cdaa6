"""
Metrics Collection Module
Tracks preprocessing throughput and failures
"""

from collections import Counter, deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Deque, Dict


@dataclass
class PreprocessingMetrics:
    """
    In-process counters for the preprocessing pipeline.

    Nothing is persisted; export get_summary() periodically if the numbers
    need to outlive the process.
    """

    # Records decoded per source type ("gmail", "eml", "outlook")
    records_decoded: Counter = field(default_factory=Counter)

    # Failures per error class name
    errors_count: Counter = field(default_factory=Counter)

    # Bounded so long-running workers don't grow without limit
    processing_time_ms: Deque[float] = field(default_factory=lambda: deque(maxlen=1000))

    start_time: datetime = field(default_factory=datetime.now)

    def record_decoded(self, source: str):
        self.records_decoded[source] += 1

    def record_error(self, error_type: str):
        """
        Record that a message failed to preprocess.

        Args:
            error_type: Error class name (e.g., "DecodeError", "ProcessError")
        """
        self.errors_count[error_type] += 1

    def record_processing_time(self, time_ms: float):
        self.processing_time_ms.append(time_ms)

    def get_summary(self) -> Dict:
        """
        Get a summary of all metrics.

        Returns:
            Dictionary suitable for logging or export
        """
        stats = {}
        if self.processing_time_ms:
            sorted_times = sorted(self.processing_time_ms)
            n = len(sorted_times)
            stats = {
                "avg_ms": sum(sorted_times) / n,
                "min_ms": sorted_times[0],
                "max_ms": sorted_times[-1],
                "p50_ms": sorted_times[n // 2],
                "p95_ms": sorted_times[int(n * 0.95)] if n > 1 else sorted_times[0],
            }

        return {
            "uptime_seconds": (datetime.now() - self.start_time).total_seconds(),
            "records_decoded": dict(self.records_decoded),
            "total_decoded": sum(self.records_decoded.values()),
            "errors": dict(self.errors_count),
            "processing_time_stats": stats,
            "sample_count": len(self.processing_time_ms),
        }

    def reset(self):
        """Start a new collection window"""
        self.records_decoded.clear()
        self.errors_count.clear()
        self.processing_time_ms.clear()
        self.start_time = datetime.now()
