"""Tests for prediction statistics."""

import pytest

from roulette_analytics.analytics import (
    StatisticsAggregator, TimeRange, summarize, extended_stats, max_consecutive_correct,
    accuracy_series, window, for_time_range, process
)
from roulette_analytics.core import SimulationRecord
from roulette_analytics.core.constants import MS_PER_DAY


def record(predicted, actual=None, timestamp=0, confidence=70.0, record_id=0):
    return SimulationRecord(
        id=record_id,
        timestamp=timestamp,
        predicted_number=predicted,
        confidence=confidence,
        actual_number=actual
    )


def outcomes(pattern):
    """'C' is a correct prediction, 'W' a wrong one, '?' unresolved."""
    records = []
    for i, mark in enumerate(pattern):
        if mark == 'C':
            records.append(record(5, 5, timestamp=i, record_id=i))
        elif mark == 'W':
            records.append(record(5, 6, timestamp=i, record_id=i))
        else:
            records.append(record(5, None, timestamp=i, record_id=i))
    return records


def test_streak_is_pair_windowed():
    assert max_consecutive_correct(outcomes("CCCWC")) == 2


@pytest.mark.parametrize("pattern,expected", [
    ("", 0),
    ("C", 0),
    ("CC", 1),
    ("WCWC", 0),
    ("CWCC", 2),
    ("CCCCC", 4),
    ("C?CC", 2),
    ("WCCC", 3),
])
def test_streak_patterns(pattern, expected):
    assert max_consecutive_correct(outcomes(pattern)) == expected


def test_summarize_excludes_unresolved_from_error():
    records = [record(10, 12), record(3, 3), record(7, None)]

    summary = summarize(records)

    assert summary.total_predictions == 3
    assert summary.resolved_predictions == 2
    assert summary.correct_predictions == 1
    assert summary.accuracy == pytest.approx(100 / 3)
    assert summary.average_error == pytest.approx(1.0)


def test_summarize_empty():
    summary = summarize([])

    assert summary.total_predictions == 0
    assert summary.accuracy == 0.0
    assert summary.average_error == 0.0


def test_summarize_is_idempotent():
    records = outcomes("CWC?W")

    assert summarize(records) == summarize(records)
    assert records == outcomes("CWC?W")


def test_extended_stats_frequencies_and_ties():
    records = [record(1, 17), record(1, 4), record(1, 17), record(1, 4), record(1, 30), record(1, None)]

    stats = extended_stats(records)

    assert stats.number_frequencies == {17: 2, 4: 2, 30: 1}
    assert stats.most_common_number == 4
    assert stats.least_common_number == 30
    assert stats.total_predictions == 6
    assert stats.hot_numbers() == [4, 17, 30]
    assert stats.cold_numbers() == [30, 4, 17]


def test_extended_stats_confidence_and_win_rate():
    records = [record(5, 5, confidence=80.0), record(5, 6, confidence=60.0), record(5, None, confidence=70.0)]

    stats = extended_stats(records)

    assert stats.average_confidence == pytest.approx(70.0)
    assert stats.confidence_std == pytest.approx((200 / 3) ** 0.5)
    assert stats.win_rate == pytest.approx(50.0)


def test_extended_stats_without_resolved_records():
    stats = extended_stats([record(5)])

    assert stats.most_common_number is None
    assert stats.least_common_number is None
    assert stats.win_rate == 0.0
    assert extended_stats([]).total_predictions == 0


def test_hot_numbers_limited_to_five():
    records = [record(0, n) for n in range(8)]

    assert len(extended_stats(records).hot_numbers()) == 5


def test_accuracy_series():
    assert accuracy_series(outcomes("CW?C")) == pytest.approx([100.0, 50.0, 200 / 3])


def test_window_takes_latest():
    records = outcomes("WWWCC")

    assert window(records, 2) == records[-2:]
    assert window(records, 10) == records
    assert window(records, 0) == []


def test_for_time_range():
    now = 40 * MS_PER_DAY
    records = [
        record(1, timestamp=now - 35 * MS_PER_DAY),
        record(1, timestamp=now - 10 * MS_PER_DAY),
        record(1, timestamp=now - 3 * MS_PER_DAY),
        record(1, timestamp=now - 1000),
    ]

    assert len(for_time_range(records, TimeRange.LAST_24H, now)) == 1
    assert len(for_time_range(records, TimeRange.LAST_WEEK, now)) == 2
    assert len(for_time_range(records, TimeRange.LAST_MONTH, now)) == 3
    assert len(for_time_range(records, TimeRange.ALL_TIME, now)) == 4


def test_process_windows():
    records = outcomes("W" * 950 + "C" * 100)

    report = process(records)

    assert report.overall.total_predictions == 1050
    assert report.last_1000.total_predictions == 1000
    assert report.last_100.accuracy == pytest.approx(100.0)
    assert report.overall.correct_predictions == 100
    # The W-C boundary pair starts the streak at one
    assert report.extended.max_consecutive_correct == 100
    assert len(report.prediction_pairs) == 1050
    assert report.prediction_pairs[0] == (5, 6)
    assert len(report.accuracy_series) == 1050


def test_report_to_dict():
    data = process(outcomes("CCW")).to_dict()

    assert data['overall']['correct_predictions'] == 2
    assert data['extended']['hot_numbers'] == [5, 6]
    assert data['extended']['number_frequencies'] == {'5': 2, '6': 1}


def test_aggregator_facade():
    records = outcomes("CCCWC")

    assert StatisticsAggregator.max_consecutive_correct(records) == 2
    assert StatisticsAggregator.summarize(records) == summarize(records)
