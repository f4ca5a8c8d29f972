"""
Processing metrics collection
"""

import logging
import threading
import time
from typing import Callable, Optional

from ..config import Settings
from ..core import ProcessingStats
from ..utils.memory_utils import get_memory_mb


def _monotonic_ms() -> int:
    return int(time.monotonic() * 1000)


class MetricsCollector:
    """Accumulate per-frame outcomes and publish ProcessingStats periodically.

    Counters are updated from the worker thread; readers only see the last
    published snapshot.
    """

    def __init__(self,
                 nominal_fps: float = 30.0,
                 interval_ms: int = 1000,
                 error_rate_threshold: float = 0.1,
                 dropped_frames_threshold: float = 30,
                 clock: Optional[Callable[[], int]] = None,
                 memory_probe: Optional[Callable[[], float]] = None):
        """
        Initialize collector

        Args:
            nominal_fps: Expected input frame rate for the dropped-frame estimate
            interval_ms: Minimum time between published snapshots
            error_rate_threshold: Error rate above which a warning is logged
            dropped_frames_threshold: Dropped frames per second above which a warning is logged
            clock: Millisecond clock, monotonic by default
            memory_probe: Returns memory usage in MB, psutil by default
        """
        self.nominal_fps = nominal_fps
        self.interval_ms = interval_ms
        self.error_rate_threshold = error_rate_threshold
        self.dropped_frames_threshold = dropped_frames_threshold
        self.clock = clock or _monotonic_ms
        self.memory_probe = memory_probe or get_memory_mb
        self.logger = logging.getLogger(__name__)

        self._lock = threading.Lock()
        self._stats = ProcessingStats()
        self.reset()

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> 'MetricsCollector':
        return cls(
            nominal_fps=settings.nominal_fps,
            interval_ms=settings.metrics_interval_ms,
            error_rate_threshold=settings.error_rate_threshold,
            dropped_frames_threshold=settings.dropped_frames_threshold,
            **kwargs
        )

    def reset(self):
        """Restart counting from now"""
        now = self.clock()
        with self._lock:
            self._start_time = now
            self._last_update = now
            self._frames_at_last_update = 0
            self._dropped_at_last_update = 0
            self._total_frames = 0
            self._successes = 0
            self._errors = 0
            self._channel_dropped = 0
            self._last_processing_ms = 0.0
            self._total_processing_ms = 0.0
            self._stats = ProcessingStats()

    def record_frame(self, processing_time_ms: float, success: bool = True) -> Optional[ProcessingStats]:
        """
        Record one processed frame

        Args:
            processing_time_ms: Wall time spent on the frame
            success: False when the frame surfaced an error

        Returns:
            Newly published stats if the update interval elapsed
        """
        with self._lock:
            self._total_frames += 1
            if success:
                self._successes += 1
            else:
                self._errors += 1
            self._last_processing_ms = processing_time_ms
            self._total_processing_ms += processing_time_ms

        return self.maybe_update()

    def record_dropped(self, count: int = 1):
        """Record frames discarded before processing"""
        with self._lock:
            self._channel_dropped += count

    def maybe_update(self, now: Optional[int] = None) -> Optional[ProcessingStats]:
        """Publish a snapshot when the interval has elapsed"""
        now = self.clock() if now is None else now
        if now - self._last_update < self.interval_ms:
            return None
        return self.update(now)

    def update(self, now: Optional[int] = None) -> ProcessingStats:
        """Recompute and publish stats unconditionally"""
        now = self.clock() if now is None else now

        with self._lock:
            window_s = max(now - self._last_update, 0) / 1000.0
            elapsed_s = max(now - self._start_time, 0) / 1000.0
            total = self._total_frames
            outcomes = self._successes + self._errors

            window_frames = total - self._frames_at_last_update
            frame_rate = window_frames / window_s if window_s > 0 else 0.0

            expected = int(elapsed_s * self.nominal_fps)
            dropped = max(expected - total, self._channel_dropped, 0)
            window_dropped = max(dropped - self._dropped_at_last_update, 0)

            error_rate = self._errors / outcomes if outcomes else 0.0
            success_rate = self._successes / outcomes if outcomes else 0.0
            average = self._total_processing_ms / total if total else 0.0
            dropped_per_second = window_dropped / window_s if window_s > 0 else 0.0

            warning = (error_rate > self.error_rate_threshold or
                       dropped_per_second > self.dropped_frames_threshold)

            self._last_update = now
            self._frames_at_last_update = total
            self._dropped_at_last_update = dropped

            stats = ProcessingStats(
                frame_rate=frame_rate,
                processing_time_ms=self._last_processing_ms,
                success_rate=success_rate,
                error_rate=error_rate,
                average_processing_time_ms=average,
                total_frames=total,
                dropped_frames=dropped,
                memory_usage_mb=self.memory_probe(),
                performance_warning=warning
            )
            self._stats = stats

        if warning:
            self.logger.warning(f"Performance warning: error rate {error_rate:.1%}, "
                                f"{dropped_per_second:.1f} dropped frames/s, "
                                f"{frame_rate:.1f} fps")
        return stats

    @property
    def stats(self) -> ProcessingStats:
        """Last published snapshot"""
        return self._stats
