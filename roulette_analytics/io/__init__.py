"""
Serialization, streaming and persistence
"""

from .serialization import NumpyJsonEncoder, PickleSerializer
from .streaming import StreamingWriter, StreamingReader
from .repository import InMemorySimulationRepository, JsonlSimulationRepository, sweep_retention

__all__ = [
    'NumpyJsonEncoder', 'PickleSerializer',
    'StreamingWriter', 'StreamingReader',
    'InMemorySimulationRepository', 'JsonlSimulationRepository', 'sweep_retention'
]
