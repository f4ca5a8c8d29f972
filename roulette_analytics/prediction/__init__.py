"""
Landing predictors
"""

from .landing import LandingPredictor, pocket_at_angle
from .classifier import ClassifierPredictor, build_features, FEATURE_NAMES

__all__ = ['LandingPredictor', 'pocket_at_angle', 'ClassifierPredictor', 'build_features', 'FEATURE_NAMES']
