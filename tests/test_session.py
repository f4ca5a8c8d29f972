"""Tests for the tracking session."""

import threading

import numpy as np
import pytest

from roulette_analytics.config import Settings
from roulette_analytics.core import (
    Detector, Predictor, PredictionResult, Point2D, Sample, BallDetection, WheelDetection,
    InvalidStateError, Error, Success, Idle
)
from roulette_analytics.io import InMemorySimulationRepository
from roulette_analytics.pipeline import RetryPolicy, TrackingSession

from .helpers import make_sample, moving_samples


class FrameDetector(Detector):
    """Reads the ball x coordinate and wheel angle out of the first two pixels."""

    def __init__(self):
        self.calls = 0

    def detect(self, frame, timestamp):
        self.calls += 1
        return Sample(
            timestamp=timestamp,
            ball=BallDetection(Point2D(float(frame[0, 0]), 0.0), timestamp),
            wheel=WheelDetection(float(frame[0, 1]), timestamp)
        )


class FailingPredictor(Predictor):
    def __init__(self, error, failures=None):
        self.error = error
        self.failures = failures
        self.calls = 0

    def predict(self, ball, wheel):
        self.calls += 1
        if self.failures is None or self.calls <= self.failures:
            raise self.error("predictor failure")
        return PredictionResult(5, 70.0, 1000)


@pytest.fixture
def repository():
    return InMemorySimulationRepository()


def test_synchronous_replay(repository):
    session = TrackingSession(repository=repository)
    session.start(run_worker=False)

    results = [session.process_sample(s, now_ms=s.timestamp) for s in moving_samples(4, step_ms=600)]
    session.stop()

    # The first frame has no velocity yet; later frames are 600ms apart
    emitted = [r for r in results if r is not None]
    assert results[0] is None
    assert len(emitted) == 3
    assert [r.timestamp for r in repository.all()] == [600, 1200, 1800]


def test_rate_limited_replay(repository):
    session = TrackingSession(repository=repository)
    session.start(run_worker=False)

    for sample in moving_samples(5, step_ms=300):
        session.process_sample(sample, now_ms=sample.timestamp)
    session.stop()

    # Ready from 300ms on; predictions at 300 and 900, 600 and 1200 are within the interval
    assert [r.timestamp for r in repository.all()] == [300, 900]


def test_missing_ball_sets_state():
    session = TrackingSession()
    session.start(run_worker=False)

    session.process_sample(make_sample(0, wheel_angle=0.0), now_ms=0)

    assert session.state.status.value == "ball_not_found"
    session.stop()


def test_process_sample_requires_running_session():
    session = TrackingSession()

    with pytest.raises(InvalidStateError):
        session.process_sample(make_sample(0, ball_x=0.0, wheel_angle=0.0))


def test_transient_failure_surfaces_error_then_recovers():
    predictor = FailingPredictor(RuntimeError, failures=2)
    session = TrackingSession(predictor=predictor, retry_policy=RetryPolicy(max_retries=1, initial_delay_ms=0))
    session.start(run_worker=False)
    samples = moving_samples(3, step_ms=600)

    session.process_sample(samples[0], now_ms=samples[0].timestamp)
    assert session.process_sample(samples[1], now_ms=samples[1].timestamp) is None
    assert isinstance(session.state, Error)
    assert session.is_running

    result = session.process_sample(samples[2], now_ms=samples[2].timestamp)
    assert result == PredictionResult(5, 70.0, 1000)
    assert isinstance(session.state, Success)

    stats = session.metrics.update()
    assert stats.total_frames == 3
    assert stats.error_rate == pytest.approx(1 / 3)
    session.stop()


def test_transient_failure_counts_each_frame_once():
    predictor = FailingPredictor(RuntimeError, failures=1)
    session = TrackingSession(
        predictor=predictor,
        settings=Settings(min_tracking_frames=3),
        retry_policy=RetryPolicy(max_retries=1, initial_delay_ms=0)
    )
    session.start(run_worker=False)

    results = [session.process_sample(s, now_ms=s.timestamp) for s in moving_samples(3, step_ms=600)]

    assert results[-1] == PredictionResult(5, 70.0, 1000)
    assert predictor.calls == 2
    assert session.scheduler.tracking_frames == 3
    assert isinstance(session.state, Success)
    session.stop()


def test_fatal_failure_stops_session():
    predictor = FailingPredictor(MemoryError)
    session = TrackingSession(predictor=predictor)
    session.start(run_worker=False)

    for sample in moving_samples(2, step_ms=600):
        session.process_sample(sample, now_ms=sample.timestamp)

    assert predictor.calls == 1
    assert not session.is_running
    assert isinstance(session.state, Error)
    assert "MemoryError" in session.last_error


def test_worker_processes_submitted_samples(repository):
    session = TrackingSession(repository=repository)
    emitted = threading.Event()
    session.scheduler.add_result_listener(lambda result: emitted.set())

    session.start()
    for sample in moving_samples(2, step_ms=600):
        session.submit(sample)

    assert emitted.wait(timeout=5.0)
    session.stop()

    assert len(repository.all()) == 1
    assert isinstance(session.state, Idle)


def test_submit_frame_runs_detector_and_releases_buffers(repository):
    detector = FrameDetector()
    session = TrackingSession(repository=repository, detector=detector)
    emitted = threading.Event()
    session.scheduler.add_result_listener(lambda result: emitted.set())

    frame = np.zeros((2, 2), dtype=np.uint8)
    session.start()
    session.submit_frame(frame, 0)
    frame[0, 0] = 30
    frame[0, 1] = 6
    session.submit_frame(frame, 600)

    assert emitted.wait(timeout=5.0)
    session.stop()

    assert detector.calls == 2
    assert session.buffer_pool.in_use == 0
    assert len(repository.all()) == 1


def test_submit_frame_requires_detector():
    session = TrackingSession()
    session.start()
    try:
        with pytest.raises(InvalidStateError):
            session.submit_frame(np.zeros((2, 2)), 0)
    finally:
        session.stop()


def test_stop_is_idempotent_and_closes_submission():
    session = TrackingSession()
    session.start()
    session.stop()
    session.stop()

    with pytest.raises(InvalidStateError):
        session.submit(make_sample(0, ball_x=0.0, wheel_angle=0.0))
    assert not session.is_running


def test_stop_before_start_is_a_no_op():
    session = TrackingSession()
    session.stop()

    assert isinstance(session.state, Idle)


def test_start_twice_is_rejected():
    session = TrackingSession()
    session.start(run_worker=False)
    try:
        with pytest.raises(InvalidStateError):
            session.start(run_worker=False)
    finally:
        session.stop()


def test_stop_discards_queued_frames():
    settings = Settings(channel_capacity=4)
    blocker = threading.Event()

    class BlockingDetector(FrameDetector):
        def detect(self, frame, timestamp):
            blocker.wait(timeout=5.0)
            return super().detect(frame, timestamp)

    session = TrackingSession(settings=settings, detector=BlockingDetector())
    session.start()
    for t in range(4):
        session.submit_frame(np.zeros((2, 2), dtype=np.uint8), t)

    blocker.set()
    session.stop()

    assert session.buffer_pool.in_use == 0


def test_context_manager():
    with TrackingSession() as session:
        assert session.is_running
    assert not session.is_running


def test_position_smoothing_enabled_from_settings():
    session = TrackingSession(settings=Settings(enable_position_smoothing=True))

    assert session.kinematics.smoother is not None
    assert session.kinematics.smoother.measurement_std == pytest.approx(10.0)
