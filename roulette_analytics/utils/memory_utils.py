"""Memory usage utilities for roulette analytics"""

import psutil


def get_memory_mb() -> float:
    """Resident memory of this process in MB"""
    return psutil.Process().memory_info().rss / 1024 / 1024
