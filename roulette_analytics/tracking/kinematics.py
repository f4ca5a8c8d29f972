"""
Kinematics filter turning raw detector output into ball and wheel states
"""

import logging
from dataclasses import replace
from typing import Optional, Tuple

from ..core import BallState, WheelState, Point2D, Sample
from .smoothing import PositionSmoother


def unwrap_angle_delta(delta: float) -> float:
    """Fold an angular difference across the 0/360 boundary into [-180, 180]"""
    if delta > 180.0:
        delta -= 360.0
    if delta < -180.0:
        delta += 360.0
    return delta


def _clamp_unit(value: Optional[float]) -> float:
    if value is None:
        return 1.0
    return max(0.0, min(1.0, float(value)))


class KinematicsFilter:
    """Validate detections and estimate instantaneous velocities.

    Keeps only the last valid ball and wheel state. A missing detection
    never raises: the previous state is returned with zero confidence.
    """

    def __init__(self, smoother: Optional[PositionSmoother] = None):
        """
        Initialize filter

        Args:
            smoother: Optional Kalman smoother applied to ball positions
        """
        self.smoother = smoother
        self.logger = logging.getLogger(__name__)

        self._last_ball: Optional[BallState] = None
        self._last_wheel: Optional[WheelState] = None

    @property
    def last_ball(self) -> Optional[BallState]:
        return self._last_ball

    @property
    def last_wheel(self) -> Optional[WheelState]:
        return self._last_wheel

    def update_ball(self,
                    position: Optional[Point2D],
                    timestamp: int,
                    confidence: Optional[float] = None) -> BallState:
        """
        Update ball state from a detector observation

        Args:
            position: Detected position, None when the ball was not found
            timestamp: Observation time in ms
            confidence: Detector confidence, defaults to 1.0

        Returns:
            New ball state
        """
        previous = self._last_ball

        if position is None:
            self.logger.debug(f"Ball not detected at {timestamp}")
            if previous is None:
                return BallState(timestamp=timestamp)
            return replace(previous, confidence=0.0)

        if self.smoother is not None:
            position = self.smoother.update(position, timestamp)

        velocity = 0.0
        if previous is not None:
            delta_time = (timestamp - previous.timestamp) / 1000.0
            if delta_time > 0:
                velocity = position.distance_to(previous.position) / delta_time

        state = BallState(
            position=position,
            velocity=velocity,
            confidence=_clamp_unit(confidence),
            timestamp=timestamp
        )
        self._last_ball = state
        return state

    def update_wheel(self,
                     angle: Optional[float],
                     timestamp: int,
                     confidence: Optional[float] = None) -> WheelState:
        """
        Update wheel state from a detector observation

        Args:
            angle: Detected wheel angle in degrees, None when not found
            timestamp: Observation time in ms
            confidence: Detector confidence, defaults to 1.0

        Returns:
            New wheel state with signed rotation speed in deg/s
        """
        previous = self._last_wheel

        if angle is None:
            self.logger.debug(f"Wheel not detected at {timestamp}")
            if previous is None:
                return WheelState(timestamp=timestamp)
            return replace(previous, confidence=0.0)

        angle = angle % 360.0

        rotation_speed = 0.0
        if previous is not None:
            delta_time = (timestamp - previous.timestamp) / 1000.0
            if delta_time > 0:
                delta_angle = unwrap_angle_delta(angle - previous.angle)
                rotation_speed = delta_angle / delta_time

        state = WheelState(
            angle=angle,
            rotation_speed=rotation_speed,
            confidence=_clamp_unit(confidence),
            timestamp=timestamp
        )
        self._last_wheel = state
        return state

    def update(self, sample: Sample) -> Tuple[BallState, WheelState]:
        """Update both states from one detector sample"""
        if sample.ball is not None:
            ball = self.update_ball(sample.ball.position, sample.ball.timestamp, sample.ball.confidence)
        else:
            ball = self.update_ball(None, sample.timestamp)

        if sample.wheel is not None:
            wheel = self.update_wheel(sample.wheel.angle, sample.wheel.timestamp, sample.wheel.confidence)
        else:
            wheel = self.update_wheel(None, sample.timestamp)

        return ball, wheel

    def reset(self):
        """Forget the last known states"""
        self._last_ball = None
        self._last_wheel = None
        if self.smoother is not None:
            self.smoother.reset()
        self.logger.debug("Kinematics filter reset")
