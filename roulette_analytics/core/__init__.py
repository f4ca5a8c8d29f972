"""
Core domain models and interfaces for roulette analytics
"""

from .models import (
    Point2D, BallDetection, WheelDetection, Sample, BallState, WheelState,
    PredictionResult, SimulationRecord, ProcessingStats,
    TrackingStatus, TrackingState, Idle, Running, BallNotFound, WheelNotFound,
    Predicting, Success, Error
)
from .interfaces import Predictor, Detector, SimulationRepository
from .exceptions import (
    RouletteAnalyticsError, InvalidStateError, FrameProcessingError,
    RepositoryError, ConfigurationError
)
from .constants import WHEEL_LAYOUT, POCKET_COUNT, NO_PREDICTION

__all__ = [
    # Models
    'Point2D', 'BallDetection', 'WheelDetection', 'Sample', 'BallState', 'WheelState',
    'PredictionResult', 'SimulationRecord', 'ProcessingStats',
    'TrackingStatus', 'TrackingState', 'Idle', 'Running', 'BallNotFound', 'WheelNotFound',
    'Predicting', 'Success', 'Error',
    # Interfaces
    'Predictor', 'Detector', 'SimulationRepository',
    # Exceptions
    'RouletteAnalyticsError', 'InvalidStateError', 'FrameProcessingError',
    'RepositoryError', 'ConfigurationError',
    # Constants
    'WHEEL_LAYOUT', 'POCKET_COUNT', 'NO_PREDICTION'
]
