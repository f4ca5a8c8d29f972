"""
Classifier-backed landing prediction
"""

import logging
from typing import Any, Optional, Tuple

import numpy as np

from ..config import Settings
from ..core import BallState, WheelState, PredictionResult, Predictor, WHEEL_LAYOUT
from ..core.models import clamp_confidence
from ..io.serialization import PickleSerializer
from .landing import LandingPredictor

FEATURE_NAMES = ('ball_x', 'ball_y', 'ball_velocity', 'wheel_angle', 'wheel_speed')


def build_features(ball: BallState, wheel: WheelState) -> np.ndarray:
    """Five-feature row consumed by classifier predictors"""
    return np.array([[
        ball.position.x,
        ball.position.y,
        ball.velocity,
        wheel.angle,
        wheel.rotation_speed
    ]], dtype=float)


class ClassifierPredictor(Predictor):
    """Predict pockets with a fitted scikit-learn style classifier.

    The estimator must expose ``predict_proba`` and ``classes_``; classes
    are pocket numbers. Time to landing still comes from the physics model.
    """

    def __init__(self, estimator: Any, settings: Optional[Settings] = None):
        """
        Initialize classifier predictor

        Args:
            estimator: Fitted classifier over the five kinematic features
            settings: Validity thresholds and landing model calibration
        """
        if not hasattr(estimator, 'predict_proba'):
            raise TypeError("Estimator must implement predict_proba")

        self.estimator = estimator
        self.settings = settings or Settings()
        self.physics = LandingPredictor(self.settings)
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_file(cls, filepath: str, settings: Optional[Settings] = None) -> 'ClassifierPredictor':
        """Load a pickled estimator"""
        estimator = PickleSerializer.load(filepath)
        return cls(estimator, settings)

    def save(self, filepath: str):
        """Pickle the fitted estimator for from_file"""
        PickleSerializer.save(self.estimator, filepath)

    def predict(self, ball: BallState, wheel: WheelState) -> PredictionResult:
        if not self.physics.is_valid_input(ball, wheel):
            return PredictionResult.withheld()

        number, confidence = self.classify(ball, wheel)
        if number not in WHEEL_LAYOUT:
            self.logger.warning(f"Classifier returned unknown pocket {number}")
            return PredictionResult.withheld()

        time_to_landing = self.physics.time_to_landing(ball)
        return PredictionResult(
            predicted_number=number,
            confidence=confidence,
            time_to_landing_ms=int(round(time_to_landing * 1000))
        )

    def classify(self, ball: BallState, wheel: WheelState) -> Tuple[int, float]:
        """Return (pocket, confidence 0-100) for the most probable class"""
        probabilities = self.estimator.predict_proba(build_features(ball, wheel))[0]
        best = int(np.argmax(probabilities))
        number = int(self.estimator.classes_[best])
        confidence = clamp_confidence(float(probabilities[best]) * 100.0)
        return number, confidence
