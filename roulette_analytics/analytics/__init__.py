"""
Prediction statistics
"""

from .statistics import (
    StatisticsAggregator, StatsSummary, ExtendedStats, StatisticsReport, TimeRange,
    summarize, extended_stats, max_consecutive_correct, number_frequencies,
    accuracy_series, window, for_time_range, process
)

__all__ = [
    'StatisticsAggregator', 'StatsSummary', 'ExtendedStats', 'StatisticsReport', 'TimeRange',
    'summarize', 'extended_stats', 'max_consecutive_correct', 'number_frequencies',
    'accuracy_series', 'window', 'for_time_range', 'process'
]
