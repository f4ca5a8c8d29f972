"""
Core data models for roulette analytics
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from .constants import MAX_CONFIDENCE, NO_PREDICTION


@dataclass(frozen=True)
class Point2D:
    """Planar coordinate in frame-pixel or wheel-polar space"""
    x: float = 0.0
    y: float = 0.0

    def distance_to(self, other: 'Point2D') -> float:
        """Euclidean distance to another point"""
        return math.hypot(self.x - other.x, self.y - other.y)

    def to_dict(self) -> Dict[str, float]:
        return {'x': self.x, 'y': self.y}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Point2D':
        return cls(x=float(data['x']), y=float(data['y']))


@dataclass(frozen=True)
class BallDetection:
    """Single ball observation reported by the detector"""
    position: Point2D
    timestamp: int  # ms epoch
    confidence: Optional[float] = None


@dataclass(frozen=True)
class WheelDetection:
    """Single wheel observation reported by the detector"""
    angle: float  # degrees
    timestamp: int  # ms epoch
    confidence: Optional[float] = None


@dataclass(frozen=True)
class Sample:
    """Detector output for one frame; either side may be missing"""
    timestamp: int
    ball: Optional[BallDetection] = None
    wheel: Optional[WheelDetection] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        data: Dict[str, Any] = {'timestamp': self.timestamp, 'ball': None, 'wheel': None}
        if self.ball is not None:
            data['ball'] = {
                'position': self.ball.position.to_dict(),
                'timestamp': self.ball.timestamp,
                'confidence': self.ball.confidence
            }
        if self.wheel is not None:
            data['wheel'] = {
                'angle': self.wheel.angle,
                'timestamp': self.wheel.timestamp,
                'confidence': self.wheel.confidence
            }
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Sample':
        """Build a sample from its JSON form; detection timestamps default to the frame's"""
        timestamp = int(data['timestamp'])
        ball = None
        wheel = None

        ball_data = data.get('ball')
        if ball_data:
            ball = BallDetection(
                position=Point2D.from_dict(ball_data['position']),
                timestamp=int(ball_data.get('timestamp', timestamp)),
                confidence=ball_data.get('confidence')
            )

        wheel_data = data.get('wheel')
        if wheel_data:
            wheel = WheelDetection(
                angle=float(wheel_data['angle']),
                timestamp=int(wheel_data.get('timestamp', timestamp)),
                confidence=wheel_data.get('confidence')
            )

        return cls(timestamp=timestamp, ball=ball, wheel=wheel)


@dataclass(frozen=True)
class BallState:
    """Filtered ball kinematics.

    A confidence of 0 means the ball was not detected this frame; position
    and velocity are then carried over from the last valid state.
    """
    position: Point2D = field(default_factory=Point2D)
    velocity: float = 0.0
    confidence: float = 0.0
    timestamp: int = 0

    @property
    def is_detected(self) -> bool:
        return self.confidence > 0.0


@dataclass(frozen=True)
class WheelState:
    """Filtered wheel kinematics. Rotation speed is signed by direction."""
    angle: float = 0.0
    rotation_speed: float = 0.0
    confidence: float = 0.0
    timestamp: int = 0

    @property
    def is_valid(self) -> bool:
        """Validity only depends on detection, not on rotation direction"""
        return self.confidence > 0.0

    @property
    def speed(self) -> float:
        """Rotation speed magnitude in deg/s"""
        return abs(self.rotation_speed)

    @property
    def direction(self) -> int:
        """+1 for increasing angle, -1 for decreasing, 0 when stopped"""
        if self.rotation_speed > 0:
            return 1
        if self.rotation_speed < 0:
            return -1
        return 0


@dataclass(frozen=True)
class PredictionResult:
    """Predicted landing pocket with heuristic confidence (0-100)"""
    predicted_number: int
    confidence: float
    time_to_landing_ms: int = 0

    @classmethod
    def withheld(cls) -> 'PredictionResult':
        """Result returned when inputs are outside the operating envelope"""
        return cls(predicted_number=NO_PREDICTION, confidence=0.0, time_to_landing_ms=0)

    @property
    def is_withheld(self) -> bool:
        return self.predicted_number == NO_PREDICTION

    def to_dict(self) -> Dict[str, Any]:
        return {
            'predicted_number': self.predicted_number,
            'confidence': self.confidence,
            'time_to_landing_ms': self.time_to_landing_ms
        }


@dataclass(frozen=True)
class SimulationRecord:
    """Persisted prediction; actual_number is filled in once the outcome is known"""
    id: int
    timestamp: int
    predicted_number: int
    confidence: float
    actual_number: Optional[int] = None

    @property
    def is_resolved(self) -> bool:
        return self.actual_number is not None

    @property
    def is_correct(self) -> bool:
        return self.is_resolved and self.predicted_number == self.actual_number

    @property
    def absolute_error(self) -> Optional[int]:
        """Numeric distance between predicted and actual number"""
        if not self.is_resolved:
            return None
        return abs(self.predicted_number - self.actual_number)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'timestamp': self.timestamp,
            'predicted_number': self.predicted_number,
            'actual_number': self.actual_number,
            'confidence': self.confidence
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SimulationRecord':
        actual = data.get('actual_number')
        return cls(
            id=int(data['id']),
            timestamp=int(data['timestamp']),
            predicted_number=int(data['predicted_number']),
            confidence=float(data.get('confidence', 0.0)),
            actual_number=int(actual) if actual is not None else None
        )


@dataclass(frozen=True)
class ProcessingStats:
    """Rolling pipeline telemetry, recomputed every metrics tick"""
    frame_rate: float = 0.0
    processing_time_ms: float = 0.0
    success_rate: float = 0.0
    error_rate: float = 0.0
    average_processing_time_ms: float = 0.0
    total_frames: int = 0
    dropped_frames: int = 0
    memory_usage_mb: float = 0.0
    performance_warning: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.__dict__)


class TrackingStatus(Enum):
    """Tag of a tracking state"""
    IDLE = "idle"
    RUNNING = "running"
    BALL_NOT_FOUND = "ball_not_found"
    WHEEL_NOT_FOUND = "wheel_not_found"
    PREDICTING = "predicting"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class TrackingState:
    """Base of the tracking lifecycle states"""

    @property
    def status(self) -> TrackingStatus:
        raise NotImplementedError


@dataclass(frozen=True)
class Idle(TrackingState):
    @property
    def status(self) -> TrackingStatus:
        return TrackingStatus.IDLE


@dataclass(frozen=True)
class Running(TrackingState):
    @property
    def status(self) -> TrackingStatus:
        return TrackingStatus.RUNNING


@dataclass(frozen=True)
class BallNotFound(TrackingState):
    @property
    def status(self) -> TrackingStatus:
        return TrackingStatus.BALL_NOT_FOUND


@dataclass(frozen=True)
class WheelNotFound(TrackingState):
    @property
    def status(self) -> TrackingStatus:
        return TrackingStatus.WHEEL_NOT_FOUND


@dataclass(frozen=True)
class Predicting(TrackingState):
    time_remaining_ms: int = 0

    @property
    def status(self) -> TrackingStatus:
        return TrackingStatus.PREDICTING


@dataclass(frozen=True)
class Success(TrackingState):
    result: PredictionResult = field(default_factory=PredictionResult.withheld)

    @property
    def status(self) -> TrackingStatus:
        return TrackingStatus.SUCCESS


@dataclass(frozen=True)
class Error(TrackingState):
    message: str = ""

    @property
    def status(self) -> TrackingStatus:
        return TrackingStatus.ERROR


def clamp_confidence(value: float, upper: float = MAX_CONFIDENCE) -> float:
    """Clamp a confidence into [0, upper]"""
    return max(0.0, min(upper, value))
