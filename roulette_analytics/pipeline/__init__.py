"""
Real-time processing pipeline for roulette tracking
"""

from .scheduler import PredictionScheduler
from .retry import RetryPolicy
from .metrics import MetricsCollector
from .buffers import FrameBuffer, FrameBufferPool
from .channel import FrameChannel
from .session import TrackingSession

__all__ = [
    'PredictionScheduler', 'RetryPolicy', 'MetricsCollector',
    'FrameBuffer', 'FrameBufferPool', 'FrameChannel', 'TrackingSession'
]
