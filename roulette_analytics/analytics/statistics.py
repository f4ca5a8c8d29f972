"""
Prediction accuracy statistics over historical records
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..core import SimulationRecord
from ..core.constants import SHORT_WINDOW, LONG_WINDOW, HOT_COLD_COUNT, MS_PER_DAY


class TimeRange(Enum):
    """Reporting periods"""
    LAST_24H = "24h"
    LAST_WEEK = "week"
    LAST_MONTH = "month"
    ALL_TIME = "all"

    @property
    def millis(self) -> int:
        """Period length in ms; 0 for all time"""
        return {
            TimeRange.LAST_24H: MS_PER_DAY,
            TimeRange.LAST_WEEK: 7 * MS_PER_DAY,
            TimeRange.LAST_MONTH: 30 * MS_PER_DAY,
            TimeRange.ALL_TIME: 0
        }[self]


@dataclass(frozen=True)
class StatsSummary:
    """Accuracy summary for a set of records"""
    total_predictions: int = 0
    correct_predictions: int = 0
    resolved_predictions: int = 0
    accuracy: float = 0.0
    average_error: float = 0.0

    def to_dict(self) -> Dict:
        return dict(self.__dict__)


@dataclass(frozen=True)
class ExtendedStats:
    """Outcome distribution and streak statistics"""
    most_common_number: Optional[int] = None
    least_common_number: Optional[int] = None
    max_consecutive_correct: int = 0
    total_predictions: int = 0
    number_frequencies: Dict[int, int] = field(default_factory=dict)
    average_confidence: float = 0.0
    confidence_std: float = 0.0
    win_rate: float = 0.0

    def hot_numbers(self, count: int = HOT_COLD_COUNT) -> List[int]:
        """Most frequent outcomes, smaller numbers first on ties"""
        ranked = sorted(self.number_frequencies.items(), key=lambda item: (-item[1], item[0]))
        return [number for number, _ in ranked[:count]]

    def cold_numbers(self, count: int = HOT_COLD_COUNT) -> List[int]:
        """Least frequent observed outcomes, smaller numbers first on ties"""
        ranked = sorted(self.number_frequencies.items(), key=lambda item: (item[1], item[0]))
        return [number for number, _ in ranked[:count]]

    def to_dict(self) -> Dict:
        data = dict(self.__dict__)
        data['number_frequencies'] = {str(k): v for k, v in sorted(self.number_frequencies.items())}
        data['hot_numbers'] = self.hot_numbers()
        data['cold_numbers'] = self.cold_numbers()
        return data


@dataclass(frozen=True)
class StatisticsReport:
    """Everything the statistics screen shows"""
    accuracy_series: List[float]
    prediction_pairs: List[Tuple[int, Optional[int]]]
    last_100: StatsSummary
    last_1000: StatsSummary
    overall: StatsSummary
    extended: ExtendedStats

    def to_dict(self) -> Dict:
        return {
            'accuracy_series': list(self.accuracy_series),
            'prediction_pairs': [list(pair) for pair in self.prediction_pairs],
            'last_100': self.last_100.to_dict(),
            'last_1000': self.last_1000.to_dict(),
            'overall': self.overall.to_dict(),
            'extended': self.extended.to_dict()
        }


def summarize(records: Sequence[SimulationRecord]) -> StatsSummary:
    """
    Compute accuracy summary

    Accuracy counts every record, unresolved ones as misses. The average
    error only considers records whose outcome is known.

    Args:
        records: Records in chronological order

    Returns:
        Summary, all zeros for an empty input
    """
    total = len(records)
    if total == 0:
        return StatsSummary()

    resolved = [r for r in records if r.is_resolved]
    correct = sum(1 for r in resolved if r.is_correct)
    errors = [r.absolute_error for r in resolved]

    return StatsSummary(
        total_predictions=total,
        correct_predictions=correct,
        resolved_predictions=len(resolved),
        accuracy=correct / total * 100.0,
        average_error=float(np.mean(errors)) if errors else 0.0
    )


def max_consecutive_correct(records: Sequence[SimulationRecord]) -> int:
    """
    Longest streak over adjacent record pairs

    A pair of two correct records extends the current streak by one; a pair
    whose second record alone is correct restarts it at one; any other pair
    resets it. A single correct record therefore only counts once paired.
    """
    best = 0
    current = 0
    for first, second in zip(records, records[1:]):
        if first.is_correct and second.is_correct:
            current += 1
            best = max(best, current)
        elif second.is_correct:
            current = 1
        else:
            current = 0
    return best


def number_frequencies(records: Sequence[SimulationRecord]) -> Dict[int, int]:
    """Occurrences of each actual number among resolved records"""
    return dict(Counter(r.actual_number for r in records if r.is_resolved))


def extended_stats(records: Sequence[SimulationRecord]) -> ExtendedStats:
    """
    Compute outcome distribution and streak statistics

    Args:
        records: Records in chronological order

    Returns:
        Extended stats; most/least common are None without resolved records
    """
    if not records:
        return ExtendedStats()

    frequencies = number_frequencies(records)
    most_common = None
    least_common = None
    if frequencies:
        # Ties go to the smallest number
        most_common = min(frequencies, key=lambda n: (-frequencies[n], n))
        least_common = min(frequencies, key=lambda n: (frequencies[n], n))

    confidences = np.array([r.confidence for r in records], dtype=float)
    resolved = sum(frequencies.values())
    correct = sum(1 for r in records if r.is_correct)

    return ExtendedStats(
        most_common_number=most_common,
        least_common_number=least_common,
        max_consecutive_correct=max_consecutive_correct(records),
        total_predictions=len(records),
        number_frequencies=frequencies,
        average_confidence=float(confidences.mean()),
        confidence_std=float(confidences.std()),
        win_rate=correct / resolved * 100.0 if resolved else 0.0
    )


def accuracy_series(records: Sequence[SimulationRecord]) -> List[float]:
    """Running accuracy (%) after each resolved record"""
    series = []
    correct = 0
    resolved = 0
    for record in records:
        if not record.is_resolved:
            continue
        resolved += 1
        if record.is_correct:
            correct += 1
        series.append(correct / resolved * 100.0)
    return series


def window(records: Sequence[SimulationRecord], size: int) -> List[SimulationRecord]:
    """Last `size` records"""
    if size <= 0:
        return []
    return list(records[-size:])


def for_time_range(records: Sequence[SimulationRecord],
                   time_range: TimeRange,
                   now: int) -> List[SimulationRecord]:
    """Records whose timestamp falls inside the period ending at now"""
    if time_range is TimeRange.ALL_TIME:
        return list(records)
    cutoff = now - time_range.millis
    return [r for r in records if r.timestamp >= cutoff]


def process(records: Sequence[SimulationRecord]) -> StatisticsReport:
    """
    Build the full statistics report

    Every window is computed from its own slice of the input, which is
    never mutated.
    """
    records = tuple(records)

    return StatisticsReport(
        accuracy_series=accuracy_series(records),
        prediction_pairs=[(r.predicted_number, r.actual_number) for r in records],
        last_100=summarize(window(records, SHORT_WINDOW)),
        last_1000=summarize(window(records, LONG_WINDOW)),
        overall=summarize(records),
        extended=extended_stats(records)
    )


class StatisticsAggregator:
    """Stateless facade grouping the statistics functions"""

    summarize = staticmethod(summarize)
    extended_stats = staticmethod(extended_stats)
    max_consecutive_correct = staticmethod(max_consecutive_correct)
    window = staticmethod(window)
    for_time_range = staticmethod(for_time_range)
    process = staticmethod(process)
