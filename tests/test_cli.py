"""Tests for the command-line interface."""

import json

import pytest
from click.testing import CliRunner

from roulette_analytics.apps.cli import cli
from roulette_analytics.io import JsonlSimulationRepository, StreamingWriter
from roulette_analytics.core.constants import MS_PER_DAY

from .helpers import moving_samples


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def samples_file(tmp_path):
    path = str(tmp_path / "samples.jsonl")
    with StreamingWriter(path) as writer:
        writer.write_all(s.to_dict() for s in moving_samples(4, step_ms=600))
    return path


def test_replay_persists_predictions(runner, samples_file, tmp_path):
    records = str(tmp_path / "records.jsonl")
    output = str(tmp_path / "predictions.jsonl")

    result = runner.invoke(cli, ['replay', samples_file, '--records', records, '--output', output])

    assert result.exit_code == 0, result.output
    assert "Frames processed: 4" in result.output
    assert "Predictions emitted: 3" in result.output
    assert len(JsonlSimulationRepository(records).all()) == 3
    with open(output) as f:
        assert [json.loads(line)['timestamp'] for line in f] == [600, 1200, 1800]


def test_replay_rejects_bad_samples(runner, tmp_path):
    path = tmp_path / "bad.jsonl"
    path.write_text('{"ball": null}\n')

    result = runner.invoke(cli, ['replay', str(path)])

    assert result.exit_code != 0
    assert "Invalid sample file" in result.output


def test_resolve_and_stats(runner, tmp_path):
    records = str(tmp_path / "records.jsonl")
    repository = JsonlSimulationRepository(records)
    repository.insert(17, 70.0, 1000)
    repository.insert(4, 80.0, 2000)

    resolved = runner.invoke(cli, ['resolve', records, '1', '17'])
    assert resolved.exit_code == 0, resolved.output
    assert "(correct)" in resolved.output

    result = runner.invoke(cli, ['--log-level', 'WARNING', 'stats', records, '--json'])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data['summary']['total_predictions'] == 2
    assert data['summary']['correct_predictions'] == 1
    assert data['summary']['accuracy'] == pytest.approx(50.0)
    assert data['extended']['most_common_number'] == 17


def test_stats_text_output(runner, tmp_path):
    records = str(tmp_path / "records.jsonl")
    JsonlSimulationRepository(records).insert(5, 70.0, 1000)

    result = runner.invoke(cli, ['stats', records, '--window', '10'])

    assert result.exit_code == 0, result.output
    assert "=== Prediction Summary ===" in result.output
    assert "Predictions: 1 (0 resolved)" in result.output


def test_resolve_unknown_record(runner, tmp_path):
    records = str(tmp_path / "records.jsonl")
    JsonlSimulationRepository(records).insert(5, 70.0, 1000)

    result = runner.invoke(cli, ['resolve', records, '42', '5'])

    assert result.exit_code != 0
    assert "No record with id 42" in result.output


def test_sweep(runner, tmp_path):
    records = str(tmp_path / "records.jsonl")
    now = 40 * MS_PER_DAY
    repository = JsonlSimulationRepository(records)
    repository.insert(1, 70.0, now - 35 * MS_PER_DAY)
    repository.insert(2, 70.0, now - MS_PER_DAY)

    result = runner.invoke(cli, ['sweep', records, '--now', str(now)])

    assert result.exit_code == 0, result.output
    assert "Removed 1 records older than 30 days" in result.output
    assert len(JsonlSimulationRepository(records).all()) == 1
