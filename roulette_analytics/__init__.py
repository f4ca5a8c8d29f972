"""
Roulette Analytics

Real-time landing prediction for a spinning European roulette wheel:
- Ball and wheel kinematics from per-frame detections
- Physics-based landing prediction
- Rate-limited prediction scheduling with tracking state
- Accuracy statistics over recorded predictions
"""

__version__ = "1.0.0"

# Import main components for easy access
from .core import (
    Point2D, Sample, BallState, WheelState, PredictionResult,
    SimulationRecord, ProcessingStats, WHEEL_LAYOUT
)

from .config import Settings
from .tracking import KinematicsFilter
from .prediction import LandingPredictor, ClassifierPredictor
from .pipeline import PredictionScheduler, TrackingSession
from .analytics import StatisticsAggregator

__all__ = [
    # Core models
    'Point2D', 'Sample', 'BallState', 'WheelState', 'PredictionResult',
    'SimulationRecord', 'ProcessingStats', 'WHEEL_LAYOUT',

    # Components
    'Settings',
    'KinematicsFilter',
    'LandingPredictor', 'ClassifierPredictor',
    'PredictionScheduler', 'TrackingSession',
    'StatisticsAggregator',

    # Version
    '__version__'
]
