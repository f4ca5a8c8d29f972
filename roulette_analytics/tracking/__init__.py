"""
Ball and wheel kinematics tracking
"""

from .kinematics import KinematicsFilter, unwrap_angle_delta
from .smoothing import PositionSmoother

__all__ = ['KinematicsFilter', 'unwrap_angle_delta', 'PositionSmoother']
