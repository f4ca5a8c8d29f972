"""
Utility functions
"""

from .logging_utils import setup_logging
from .memory_utils import get_memory_mb

__all__ = ['setup_logging', 'get_memory_mb']
