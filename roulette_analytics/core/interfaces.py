"""
Abstract interfaces for roulette analytics components
"""

from abc import ABC, abstractmethod
from typing import List, Optional

import numpy as np

from .models import BallState, WheelState, PredictionResult, Sample, SimulationRecord


class Predictor(ABC):
    """Abstract interface for landing prediction"""

    @abstractmethod
    def predict(self, ball: BallState, wheel: WheelState) -> PredictionResult:
        """Predict the landing pocket; returns a withheld result on invalid input"""
        pass


class Detector(ABC):
    """Abstract interface for the external ball/wheel detector"""

    @abstractmethod
    def detect(self, frame: np.ndarray, timestamp: int) -> Sample:
        """Locate ball and wheel in a single frame"""
        pass


class SimulationRepository(ABC):
    """Abstract interface for prediction persistence"""

    @abstractmethod
    def insert(self, predicted_number: int, confidence: float, timestamp: int) -> SimulationRecord:
        """Append a new record and return it with its assigned id"""
        pass

    @abstractmethod
    def update_actual_number(self, record_id: int, actual_number: int) -> None:
        """Set the observed outcome of a record"""
        pass

    @abstractmethod
    def delete_older_than(self, timestamp: int) -> int:
        """Delete records older than timestamp; returns the number removed"""
        pass

    @abstractmethod
    def get(self, record_id: int) -> Optional[SimulationRecord]:
        """Get a single record"""
        pass

    @abstractmethod
    def all(self) -> List[SimulationRecord]:
        """All records in chronological order"""
        pass

    @abstractmethod
    def delete_all(self) -> None:
        """Remove every record"""
        pass
