"""
Prediction scheduling: readiness gating, rate limiting and tracking state
"""

import logging
import threading
import time
from collections import deque
from typing import Callable, Deque, List, Optional

from ..config import Settings
from ..core import (
    BallState, WheelState, PredictionResult, Predictor, SimulationRepository,
    TrackingState, Idle, Running, BallNotFound, WheelNotFound, Predicting, Success, Error
)
from .retry import RetryPolicy

StateListener = Callable[[TrackingState], None]
ResultListener = Callable[[PredictionResult], None]


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


class PredictionScheduler:
    """Decide when to invoke the predictor and publish its results.

    At most one predictor call runs at a time, and consecutive calls are
    separated by more than ``prediction_interval_ms``. Persistence and
    listener callbacks run outside the lock.
    """

    def __init__(self,
                 predictor: Predictor,
                 repository: Optional[SimulationRepository] = None,
                 settings: Optional[Settings] = None,
                 clock: Optional[Callable[[], int]] = None,
                 retry_policy: Optional[RetryPolicy] = None):
        """
        Initialize scheduler

        Args:
            predictor: Landing predictor invoked for ready frames
            repository: Receives every emitted prediction
            settings: Readiness thresholds and rate limit
            clock: Millisecond wall clock used when callers pass no timestamp
            retry_policy: Retries failed predictor calls; failures propagate
                unretried when omitted
        """
        self.predictor = predictor
        self.repository = repository
        self.settings = settings or Settings()
        self.clock = clock or _wall_clock_ms
        self.retry_policy = retry_policy
        self.logger = logging.getLogger(__name__)

        self._lock = threading.Lock()
        self._active = threading.Event()
        # Set on stop to abort a pending retry backoff
        self._cancelled = threading.Event()
        self._state_lock = threading.Lock()
        self._state: TrackingState = Idle()
        self._last_prediction_time: Optional[int] = None
        self._started_at: Optional[int] = None
        self._tracking_frames = 0
        self._recent: Deque[PredictionResult] = deque(maxlen=self.settings.recent_results_limit)

        self._state_listeners: List[StateListener] = []
        self._result_listeners: List[ResultListener] = []

    # Lifecycle

    @property
    def is_active(self) -> bool:
        return self._active.is_set()

    def start(self, now: Optional[int] = None):
        """
        Enter Running; restarting an active scheduler is a no-op

        Args:
            now: Start time in ms; defaults to the time of the first frame
        """
        if self._active.is_set():
            return
        self._started_at = now
        self._tracking_frames = 0
        self._cancelled.clear()
        self._active.set()
        self._set_state(Running())
        self.logger.info("Prediction scheduler started")

    def stop(self):
        """Leave the active state; safe to call repeatedly"""
        if not self._active.is_set():
            return
        self._active.clear()
        self._cancelled.set()
        self._set_state(Idle(), force=True)
        self.logger.info("Prediction scheduler stopped")

    # Observers

    def add_state_listener(self, listener: StateListener):
        self._state_listeners.append(listener)

    def add_result_listener(self, listener: ResultListener):
        self._result_listeners.append(listener)

    @property
    def state(self) -> TrackingState:
        return self._state

    @property
    def tracking_frames(self) -> int:
        """Consecutive frames with both ball and wheel detected"""
        return self._tracking_frames

    @property
    def last_prediction_time(self) -> Optional[int]:
        return self._last_prediction_time

    @property
    def recent_results(self) -> List[PredictionResult]:
        """Most recent emitted predictions, oldest first"""
        return list(self._recent)

    def report_error(self, message: str):
        """Surface a processing failure; recovered by the next good frame"""
        self.logger.error(f"Tracking error: {message}")
        self._set_state(Error(message), force=True)

    # Frame handling

    def on_frame(self,
                 ball: BallState,
                 wheel: WheelState,
                 now: Optional[int] = None) -> Optional[PredictionResult]:
        """
        Process one frame's filtered states

        Args:
            ball: Current ball state
            wheel: Current wheel state
            now: Frame time in ms; the scheduler clock when omitted

        Returns:
            The emitted prediction, or None if nothing was emitted
        """
        if not self._active.is_set():
            return None

        if not ball.is_detected:
            self._tracking_frames = 0
            self._set_state(BallNotFound())
            return None

        if not wheel.is_valid:
            self._tracking_frames = 0
            self._set_state(WheelNotFound())
            return None

        self._tracking_frames += 1
        if not isinstance(self._state, Running):
            self._set_state(Running())

        now = self.clock() if now is None else now
        if self._started_at is None:
            self._started_at = now
        if not self.is_ready(ball, wheel, now):
            return None

        result = self._predict_rate_limited(ball, wheel, now)
        if result is None or result.is_withheld:
            return None

        if not self._emit(result, now):
            return None
        return result

    def is_ready(self, ball: BallState, wheel: WheelState, now: int) -> bool:
        """Check that the inputs are inside the reliable operating envelope"""
        settings = self.settings

        if ball.confidence < settings.confidence_threshold:
            return False
        if not settings.min_ball_velocity <= ball.velocity <= settings.max_reliable_ball_velocity:
            return False
        if not settings.min_wheel_speed <= wheel.speed <= settings.max_reliable_wheel_speed:
            return False
        if self._tracking_frames < settings.min_tracking_frames:
            return False
        if self._started_at is not None and now - self._started_at < settings.prediction_delay_ms:
            return False
        return True

    def _predict_rate_limited(self,
                              ball: BallState,
                              wheel: WheelState,
                              now: int) -> Optional[PredictionResult]:
        with self._lock:
            # Re-checked under the lock; stop() may have raced the caller
            if not self._active.is_set():
                return None

            last = self._last_prediction_time
            if last is not None and now - last <= self.settings.prediction_interval_ms:
                return None

            result = self._call_predictor(ball, wheel)
            self._last_prediction_time = now

        return result

    def _call_predictor(self, ball: BallState, wheel: WheelState) -> PredictionResult:
        if self.retry_policy is None:
            return self.predictor.predict(ball, wheel)
        return self.retry_policy.run(lambda: self.predictor.predict(ball, wheel), self._cancelled)

    def _emit(self, result: PredictionResult, now: int) -> bool:
        # A stop that raced the predictor call discards the result
        if not self._active.is_set():
            self.logger.debug(f"Discarding prediction {result.predicted_number} after stop")
            return False

        self._set_state(Predicting(time_remaining_ms=result.time_to_landing_ms))

        self._persist(result, now)
        self._recent.append(result)

        for listener in list(self._result_listeners):
            try:
                listener(result)
            except Exception as e:
                self.logger.warning(f"Result listener failed: {e}")

        self._set_state(Success(result=result))
        self.logger.info(f"Predicted pocket {result.predicted_number} "
                         f"({result.confidence:.0f}%, {result.time_to_landing_ms}ms to landing)")
        return True

    def _persist(self, result: PredictionResult, now: int):
        if self.repository is None:
            return
        try:
            self.repository.insert(result.predicted_number, result.confidence, now)
        except Exception as e:
            self.logger.warning(f"Failed to persist prediction: {e}")

    def _set_state(self, state: TrackingState, force: bool = False):
        """Apply a transition; only forced ones land while inactive"""
        with self._state_lock:
            if not force and not self._active.is_set():
                return
            if state == self._state:
                return
            self._state = state

        for listener in list(self._state_listeners):
            try:
                listener(state)
            except Exception as e:
                self.logger.warning(f"State listener failed: {e}")
