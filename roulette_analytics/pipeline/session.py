"""
Tracking session: worker thread consuming detector output
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional, Union

import numpy as np

from ..config import Settings
from ..core import (
    Sample, PredictionResult, Predictor, Detector, SimulationRepository,
    InvalidStateError, FrameProcessingError
)
from ..prediction import LandingPredictor
from ..tracking import KinematicsFilter, PositionSmoother
from .buffers import FrameBuffer, FrameBufferPool
from .channel import FrameChannel
from .metrics import MetricsCollector
from .retry import RetryPolicy, FATAL_ERRORS
from .scheduler import PredictionScheduler

# Worker wake-up period while the channel is idle
POLL_INTERVAL_S = 0.1


@dataclass
class _PendingFrame:
    """Raw frame waiting for detection on the worker"""
    buffer: FrameBuffer
    timestamp: int


class TrackingSession:
    """Run the kinematics, scheduling and prediction pipeline.

    Producers call ``submit`` with detector samples, or ``submit_frame``
    with raw frames when a detector is configured. A single worker thread
    drains a bounded channel that drops the oldest entry when full.
    ``process_sample`` runs the same pipeline synchronously for replays.
    """

    def __init__(self,
                 predictor: Optional[Predictor] = None,
                 repository: Optional[SimulationRepository] = None,
                 settings: Optional[Settings] = None,
                 detector: Optional[Detector] = None,
                 kinematics: Optional[KinematicsFilter] = None,
                 clock: Optional[Callable[[], int]] = None,
                 metrics: Optional[MetricsCollector] = None,
                 retry_policy: Optional[RetryPolicy] = None):
        """
        Initialize session

        Args:
            predictor: Landing predictor, physics model by default
            repository: Persistence for emitted predictions
            settings: Application settings
            detector: Turns raw frames into samples for submit_frame
            kinematics: Kinematics filter, built from settings by default
            clock: Millisecond wall clock for the scheduler
            metrics: Metrics collector, built from settings by default
            retry_policy: Retries detector and predictor calls, built from settings by default
        """
        self.settings = settings or Settings()
        self.detector = detector
        self.logger = logging.getLogger(__name__)

        if kinematics is None:
            smoother = None
            if self.settings.enable_position_smoothing:
                smoother = PositionSmoother.for_ball_diameter(self.settings.ball_diameter)
            kinematics = KinematicsFilter(smoother)
        self.kinematics = kinematics

        self.retry_policy = retry_policy or RetryPolicy.from_settings(self.settings)
        self.scheduler = PredictionScheduler(
            predictor or LandingPredictor(self.settings),
            repository=repository,
            settings=self.settings,
            clock=clock,
            retry_policy=self.retry_policy
        )
        self.metrics = metrics or MetricsCollector.from_settings(self.settings)
        self.buffer_pool = FrameBufferPool(self.settings.buffer_pool_size)

        self._channel: Optional[FrameChannel] = None
        self._worker: Optional[threading.Thread] = None
        self._stopped = threading.Event()
        self._stopped.set()
        self._lifecycle_lock = threading.Lock()
        self.last_error: Optional[str] = None

    @property
    def is_running(self) -> bool:
        return self.scheduler.is_active

    @property
    def state(self):
        return self.scheduler.state

    # Lifecycle

    def start(self, run_worker: bool = True):
        """
        Start tracking

        Args:
            run_worker: Spawn the worker thread; replays drive
                process_sample directly and pass False
        """
        with self._lifecycle_lock:
            if self.is_running:
                raise InvalidStateError("Session already running")

            self._stopped.clear()
            self.last_error = None
            self.kinematics.reset()
            self.metrics.reset()
            self.scheduler.start()

            if run_worker:
                self._channel = FrameChannel(self.settings.channel_capacity, on_drop=self._on_drop)
                self._worker = threading.Thread(
                    target=self._run, args=(self._channel,),
                    name="roulette-tracking-worker", daemon=True
                )
                self._worker.start()

        self.logger.info(f"Tracking session started (worker={'on' if run_worker else 'off'})")

    def stop(self, timeout: Optional[float] = 5.0):
        """Stop tracking, discarding queued frames; safe to call repeatedly"""
        with self._lifecycle_lock:
            if self._stopped.is_set():
                return
            self._stopped.set()
            self.scheduler.stop()

            channel, worker = self._channel, self._worker
            self._channel = None
            self._worker = None

        if channel is not None:
            discarded = channel.close()
            for item in discarded:
                self._discard(item)
            if discarded:
                self.logger.debug(f"Discarded {len(discarded)} queued items on stop")

        if worker is not None and worker is not threading.current_thread():
            worker.join(timeout)
            if worker.is_alive():
                self.logger.warning("Tracking worker did not stop in time")

        self.metrics.update()
        self.logger.info("Tracking session stopped")

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()

    # Producer API

    def submit(self, sample: Sample) -> bool:
        """
        Queue a detector sample

        Returns:
            True if an older queued item was dropped to make room
        """
        return self._require_channel().put(sample)

    def submit_frame(self, frame: np.ndarray, timestamp: int) -> bool:
        """
        Queue a raw frame for detection on the worker

        The frame is copied into a pooled buffer, so the caller may reuse it.
        """
        if self.detector is None:
            raise InvalidStateError("No detector configured for raw frames")

        channel = self._require_channel()
        buffer = self.buffer_pool.copy_in(frame)
        try:
            return channel.put(_PendingFrame(buffer, timestamp))
        except InvalidStateError:
            self.buffer_pool.release(buffer)
            raise

    def _require_channel(self) -> FrameChannel:
        channel = self._channel
        if channel is None or channel.closed:
            raise InvalidStateError("Session is not running")
        return channel

    # Processing

    def process_sample(self, sample: Sample, now_ms: Optional[int] = None) -> Optional[PredictionResult]:
        """
        Run one sample through the pipeline on the calling thread

        Args:
            sample: Detector output
            now_ms: Frame time for rate limiting; the session clock when omitted

        Returns:
            The emitted prediction, if any
        """
        if not self.is_running:
            raise InvalidStateError("Session is not running")
        return self._measure(lambda: self._process(sample, now_ms))

    def _run(self, channel: FrameChannel):
        self.logger.debug("Tracking worker running")

        while not self._stopped.is_set():
            item = channel.get(timeout=POLL_INTERVAL_S)
            if item is None:
                if channel.closed:
                    break
                continue

            if isinstance(item, _PendingFrame):
                self._measure(lambda: self._process_frame(item))
            else:
                self._measure(lambda: self._process(item, None))

        self.logger.debug("Tracking worker exiting")

    def _measure(self, step: Callable[[], Optional[PredictionResult]]) -> Optional[PredictionResult]:
        start = time.perf_counter()
        success = False
        try:
            result = step()
            success = True
            return result
        except FATAL_ERRORS as e:
            if self._stopped.is_set():
                self.logger.debug(f"Frame abandoned during shutdown: {e!r}")
            else:
                self._fail(f"Fatal processing error: {e!r}")
        except FrameProcessingError as e:
            self.last_error = str(e)
            self.scheduler.report_error(str(e))
        finally:
            self.metrics.record_frame((time.perf_counter() - start) * 1000.0, success)
        return None

    def _process_frame(self, item: _PendingFrame) -> Optional[PredictionResult]:
        with self.buffer_pool.holding(item.buffer) as frame:
            sample = self.retry_policy.run(
                lambda: self.detector.detect(frame, item.timestamp), self._stopped
            )
        return self._process(sample, item.timestamp)

    def _process(self, sample: Sample, now_ms: Optional[int]) -> Optional[PredictionResult]:
        # The scheduler retries the predictor call itself
        ball, wheel = self.kinematics.update(sample)
        return self.scheduler.on_frame(ball, wheel, now_ms)

    def _fail(self, message: str):
        self.last_error = message
        self.stop(timeout=0)
        self.scheduler.report_error(message)

    def _on_drop(self, item: Union[Sample, _PendingFrame]):
        self._discard(item)
        self.metrics.record_dropped()

    def _discard(self, item: Union[Sample, _PendingFrame]):
        if isinstance(item, _PendingFrame) and not item.buffer.released:
            self.buffer_pool.release(item.buffer)
