"""
Physics-based landing prediction
"""

import math
import logging
from typing import Optional

from ..config import Settings
from ..core import BallState, WheelState, PredictionResult, Point2D, Predictor
from ..core.constants import (
    WHEEL_LAYOUT, POCKET_COUNT, MAX_CONFIDENCE,
    BALL_VELOCITY_PENALTY, WHEEL_SPEED_PENALTY, PREDICTION_TIME_PENALTY
)
from ..core.models import clamp_confidence


def pocket_at_angle(angle: float) -> int:
    """Map a wheel angle in degrees to the pocket number under it"""
    normalized = angle % 360.0
    index = int(math.floor((normalized / 360.0) * POCKET_COUNT))
    # Guards against rounding up to 360 for tiny negative angles
    index = min(index, POCKET_COUNT - 1)
    return WHEEL_LAYOUT[index]


class LandingPredictor(Predictor):
    """Kinematic landing model.

    The ball is assumed to travel a half-circumference-scaled arc before
    dropping, decelerated by a fixed friction factor. The wheel is
    extrapolated linearly at its current rotation speed.
    """

    def __init__(self, settings: Optional[Settings] = None):
        """
        Initialize predictor

        Args:
            settings: Calibration constants; defaults are used when omitted
        """
        self.settings = settings or Settings()
        self.logger = logging.getLogger(__name__)

    def predict(self, ball: BallState, wheel: WheelState) -> PredictionResult:
        """
        Predict landing pocket

        Args:
            ball: Current ball state
            wheel: Current wheel state

        Returns:
            Prediction, or a withheld result (-1) if ball or wheel is too slow
        """
        if not self.is_valid_input(ball, wheel):
            return PredictionResult.withheld()

        time_to_landing = self.time_to_landing(ball)
        landing_position = self.landing_position(ball, time_to_landing)
        wheel_angle = self.wheel_angle_at_landing(wheel, time_to_landing)
        predicted_number = pocket_at_angle(wheel_angle)
        confidence = self.confidence(ball, wheel, time_to_landing)

        self.logger.debug(
            f"Landing in {time_to_landing:.3f}s at ({landing_position.x:.3f}, {landing_position.y:.1f}), "
            f"wheel angle {wheel_angle:.1f} -> pocket {predicted_number} ({confidence:.0f}%)"
        )

        return PredictionResult(
            predicted_number=predicted_number,
            confidence=confidence,
            time_to_landing_ms=int(round(time_to_landing * 1000))
        )

    def is_valid_input(self, ball: BallState, wheel: WheelState) -> bool:
        """Below these speeds the ball or wheel is stopped or noise-dominated"""
        return (ball.velocity >= self.settings.min_ball_velocity and
                abs(wheel.rotation_speed) >= self.settings.min_wheel_speed)

    def time_to_landing(self, ball: BallState) -> float:
        """Seconds until the ball drops"""
        return (self.settings.wheel_radius * math.pi) / ball.velocity

    def landing_position(self, ball: BallState, time_to_landing: float) -> Point2D:
        """Ball coordinate at landing, tracked in radians along x"""
        decayed_velocity = ball.velocity * self.settings.friction_factor
        x = (ball.position.x + decayed_velocity * time_to_landing) % (2 * math.pi)
        return Point2D(x, ball.position.y)

    def wheel_angle_at_landing(self, wheel: WheelState, time_to_landing: float) -> float:
        """Wheel angle at landing, assuming constant rotation speed"""
        return (wheel.angle + wheel.rotation_speed * time_to_landing) % 360.0

    def confidence(self, ball: BallState, wheel: WheelState, time_to_landing: float) -> float:
        """Apply the first matching degradation factor"""
        if ball.velocity > self.settings.max_reliable_ball_velocity:
            factor = BALL_VELOCITY_PENALTY
        elif abs(wheel.rotation_speed) > self.settings.max_reliable_wheel_speed:
            factor = WHEEL_SPEED_PENALTY
        elif time_to_landing > self.settings.prediction_window_s:
            factor = PREDICTION_TIME_PENALTY
        else:
            factor = 1.0

        return clamp_confidence(MAX_CONFIDENCE * factor)
