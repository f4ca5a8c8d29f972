"""
Data serialization utilities
"""

import json
import pickle
from enum import Enum
from typing import Any
from pathlib import Path

import numpy as np


class NumpyJsonEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy types and domain models"""

    def default(self, obj):
        if isinstance(obj, np.integer):
            return int(obj)
        elif isinstance(obj, np.floating):
            return float(obj)
        elif isinstance(obj, np.ndarray):
            return obj.tolist()
        elif isinstance(obj, set):
            return sorted(obj)
        elif isinstance(obj, Enum):
            return obj.value
        elif hasattr(obj, 'to_dict'):
            return obj.to_dict()
        return super().default(obj)


class PickleSerializer:
    """Pickle serialization utilities, used for fitted predictor models"""

    @staticmethod
    def save(data: Any, filepath: str):
        """Save data to pickle file"""
        Path(filepath).parent.mkdir(parents=True, exist_ok=True)

        with open(filepath, 'wb') as f:
            pickle.dump(data, f)

    @staticmethod
    def load(filepath: str) -> Any:
        """Load data from pickle file"""
        with open(filepath, 'rb') as f:
            return pickle.load(f)
