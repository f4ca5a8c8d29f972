"""Tests for the physics landing predictor."""

import math

import pytest

from roulette_analytics.config import Settings
from roulette_analytics.core import WHEEL_LAYOUT, NO_PREDICTION, Point2D
from roulette_analytics.prediction import LandingPredictor, pocket_at_angle

from .helpers import make_ball, make_wheel


@pytest.fixture
def predictor():
    return LandingPredictor()


def test_slow_ball_is_withheld(predictor):
    result = predictor.predict(make_ball(velocity=0.5), make_wheel())

    assert result.predicted_number == NO_PREDICTION
    assert result.confidence == 0.0
    assert result.time_to_landing_ms == 0
    assert result.is_withheld


@pytest.mark.parametrize("rotation_speed", [0.05, -0.05, 0.0])
def test_stalled_wheel_is_withheld(predictor, rotation_speed):
    result = predictor.predict(make_ball(), make_wheel(rotation_speed=rotation_speed))

    assert result.is_withheld


def test_counter_clockwise_wheel_is_predicted(predictor):
    result = predictor.predict(make_ball(), make_wheel(rotation_speed=-10.0))

    assert not result.is_withheld
    assert result.predicted_number in WHEEL_LAYOUT


def test_fast_ball_time_and_confidence(predictor):
    """velocity 200: t = 400π/200 ≈ 6.283s, ball penalty wins over time penalty."""
    ball = make_ball(velocity=200.0)

    assert predictor.time_to_landing(ball) == pytest.approx(2 * math.pi)

    result = predictor.predict(ball, make_wheel())
    assert result.time_to_landing_ms == 6283
    assert result.confidence == pytest.approx(80.0)


def test_first_matching_penalty_only(predictor):
    """Ball 150 and wheel 60 both exceed limits; only one 0.8 factor applies."""
    result = predictor.predict(make_ball(velocity=150.0), make_wheel(rotation_speed=60.0))

    assert result.confidence == pytest.approx(80.0)


def test_fast_wheel_penalty(predictor):
    result = predictor.predict(make_ball(velocity=50.0), make_wheel(rotation_speed=60.0))

    assert result.confidence == pytest.approx(80.0)


def test_long_horizon_penalty(predictor):
    """velocity 50 gives t ≈ 25s, beyond the reliable window."""
    result = predictor.predict(make_ball(velocity=50.0), make_wheel(rotation_speed=10.0))

    assert result.confidence == pytest.approx(70.0)


def test_full_confidence_on_small_wheel():
    predictor = LandingPredictor(Settings(wheel_diameter=100.0))
    ball = make_ball(velocity=50.0)

    assert predictor.time_to_landing(ball) == pytest.approx(math.pi)
    assert predictor.predict(ball, make_wheel()).confidence == pytest.approx(100.0)


def test_known_landing_pocket(predictor):
    """t = 8π s, wheel turns to 80π° ≈ 251.3°, slot index 25."""
    result = predictor.predict(make_ball(velocity=50.0), make_wheel(angle=0.0, rotation_speed=10.0))

    assert result.predicted_number == WHEEL_LAYOUT[25] == 14
    assert result.time_to_landing_ms == 25133


def test_wheel_angle_at_landing_wraps(predictor):
    angle = predictor.wheel_angle_at_landing(make_wheel(angle=350.0, rotation_speed=20.0), 1.0)

    assert angle == pytest.approx(10.0)


def test_landing_position_wraps_in_radians(predictor):
    ball = make_ball(velocity=100.0, x=1.0, y=3.0)
    position = predictor.landing_position(ball, 1.0)

    assert position.x == pytest.approx((1.0 + 95.0) % (2 * math.pi))
    assert position.y == 3.0
    assert 0.0 <= position.x < 2 * math.pi


@pytest.mark.parametrize("angle,number", [
    (0.0, 0),
    (10.0, 32),
    (359.99, 26),
    (-1.0, 26),
    (720.0, 0),
])
def test_pocket_at_angle(angle, number):
    assert pocket_at_angle(angle) == number


@pytest.mark.parametrize("velocity,speed", [(1.0, 0.1), (99.0, 49.0), (300.0, -700.0), (7.5, 3.3)])
def test_valid_inputs_stay_in_range(predictor, velocity, speed):
    result = predictor.predict(make_ball(velocity=velocity), make_wheel(rotation_speed=speed, angle=123.0))

    assert 0 <= result.predicted_number <= 36
    assert 0.0 <= result.confidence <= 100.0
    assert result.time_to_landing_ms > 0


def test_prediction_is_deterministic(predictor):
    ball = make_ball(velocity=42.0, x=0.3)
    wheel = make_wheel(angle=77.0, rotation_speed=-13.0)

    assert predictor.predict(ball, wheel) == predictor.predict(ball, wheel)


def test_thresholds_come_from_settings():
    predictor = LandingPredictor(Settings(min_ball_velocity=10.0))

    assert predictor.predict(make_ball(velocity=5.0), make_wheel()).is_withheld
    assert not LandingPredictor().predict(make_ball(velocity=5.0), make_wheel()).is_withheld


def test_landing_point_is_a_point(predictor):
    assert isinstance(predictor.landing_position(make_ball(), 0.5), Point2D)
