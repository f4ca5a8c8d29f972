"""
Kalman filter for ball position smoothing
"""

import numpy as np
from typing import Optional

from filterpy.kalman import KalmanFilter
from filterpy.common import Q_discrete_white_noise

from ..core import Point2D


class PositionSmoother:
    """Constant-velocity Kalman filter over raw ball positions"""

    def __init__(self, measurement_std: float = 10.0, process_var: float = 50.0):
        """
        Initialize Kalman filter

        Args:
            measurement_std: Detector position noise (distance units)
            process_var: Acceleration noise variance
        """
        self.measurement_std = measurement_std
        self.process_var = process_var

        # State is [x, vx, y, vy]
        self.kf = KalmanFilter(dim_x=4, dim_z=2)
        self.kf.H = np.array([
            [1, 0, 0, 0],
            [0, 0, 1, 0]
        ], dtype=float)
        self.kf.R = np.eye(2) * measurement_std ** 2

        self.last_timestamp: Optional[int] = None

    @classmethod
    def for_ball_diameter(cls, ball_diameter: float) -> 'PositionSmoother':
        """Use half a ball diameter as the measurement noise"""
        return cls(measurement_std=ball_diameter / 2.0)

    def update(self, position: Point2D, timestamp: int) -> Point2D:
        """Fold a measurement in and return the smoothed position"""
        z = np.array([position.x, position.y], dtype=float)

        if self.last_timestamp is None:
            self.kf.x = np.array([z[0], 0.0, z[1], 0.0])
            self.kf.P = np.eye(4) * 100.0
            self.last_timestamp = timestamp
            return position

        dt = (timestamp - self.last_timestamp) / 1000.0
        self.last_timestamp = timestamp

        if dt > 0:
            self._set_transition(dt)
            self.kf.predict()

        self.kf.update(z)
        return self.get_state()

    def get_state(self) -> Point2D:
        """Get current position estimate"""
        return Point2D(float(self.kf.x[0]), float(self.kf.x[2]))

    def reset(self):
        self.last_timestamp = None

    def _set_transition(self, dt: float):
        """Rebuild F and Q for the elapsed time step"""
        self.kf.F = np.array([
            [1, dt, 0, 0],
            [0, 1, 0, 0],
            [0, 0, 1, dt],
            [0, 0, 0, 1]
        ], dtype=float)
        self.kf.Q = Q_discrete_white_noise(dim=2, dt=dt, var=self.process_var, block_size=2)
