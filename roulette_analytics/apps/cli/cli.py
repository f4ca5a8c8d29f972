"""
Command-line interface implementation
"""

import json
import time

import click

from ...analytics import TimeRange, summarize, extended_stats, window, for_time_range
from ...config import Settings
from ...core import RouletteAnalyticsError
from ...io import (
    StreamingReader, StreamingWriter, InMemorySimulationRepository,
    JsonlSimulationRepository, sweep_retention
)
from ...pipeline import TrackingSession
from ...utils import setup_logging


def _load_settings(config_path):
    try:
        return Settings.load(config_path)
    except RouletteAnalyticsError as e:
        raise click.ClickException(str(e))


def _open_repository(records_path):
    try:
        return JsonlSimulationRepository(records_path)
    except RouletteAnalyticsError as e:
        raise click.ClickException(str(e))


@click.group()
@click.option('--log-level', default='INFO', help='Logging level')
@click.option('--log-file', default=None, type=click.Path(), help='Also write logs to this file')
def cli(log_level, log_file):
    """Roulette Analytics CLI"""
    setup_logging(level=log_level, log_file=log_file)


@cli.command()
@click.argument('samples_path', type=click.Path(exists=True))
@click.option('--records', default=None, type=click.Path(), help='Append emitted predictions to this records file')
@click.option('--config', 'config_path', default=None, type=click.Path(exists=True), help='Settings JSON file')
@click.option('--output', default=None, type=click.Path(), help='Write emitted predictions as JSON Lines')
def replay(samples_path, records, config_path, output):
    """Replay recorded detector samples through the prediction pipeline"""

    settings = _load_settings(config_path)
    repository = _open_repository(records) if records else InMemorySimulationRepository()

    session = TrackingSession(repository=repository, settings=settings)
    writer = StreamingWriter(output) if output else None
    emitted = 0
    frames = 0

    click.echo(f"Replaying samples: {samples_path}")

    session.start(run_worker=False)
    try:
        if writer:
            writer.open()
        for sample in StreamingReader(samples_path).read_samples():
            frames += 1
            result = session.process_sample(sample, now_ms=sample.timestamp)
            if result is None:
                if not session.is_running:
                    break
                continue

            emitted += 1
            click.echo(f"[{sample.timestamp}] pocket {result.predicted_number:>2} "
                       f"confidence {result.confidence:.0f}% "
                       f"landing in {result.time_to_landing_ms}ms")
            if writer:
                writer.write({'timestamp': sample.timestamp, **result.to_dict()})
    except (ValueError, KeyError) as e:
        raise click.ClickException(f"Invalid sample file: {e}")
    finally:
        session.stop()
        if writer:
            writer.close()

    click.echo(f"\nReplay complete!")
    click.echo(f"Frames processed: {frames}")
    click.echo(f"Predictions emitted: {emitted}")
    if session.last_error:
        click.echo(f"Last error: {session.last_error}")
    if records:
        click.echo(f"Records saved to: {records}")


@cli.command()
@click.argument('records_path', type=click.Path(exists=True))
@click.option('--window', 'window_size', default=None, type=int, help='Only the last N records')
@click.option('--range', 'time_range', type=click.Choice([r.value for r in TimeRange]),
              default=TimeRange.ALL_TIME.value, help='Reporting period')
@click.option('--now', default=None, type=int, help='Reference time in ms (defaults to current time)')
@click.option('--json', 'as_json', is_flag=True, help='Print JSON instead of text')
def stats(records_path, window_size, time_range, now, as_json):
    """Show prediction statistics"""

    records = _open_repository(records_path).all()
    now = now if now is not None else int(time.time() * 1000)
    records = for_time_range(records, TimeRange(time_range), now)
    if window_size is not None:
        records = window(records, window_size)

    summary = summarize(records)
    extended = extended_stats(records)

    if as_json:
        click.echo(json.dumps({'summary': summary.to_dict(), 'extended': extended.to_dict()}, indent=2))
        return

    click.echo("=== Prediction Summary ===")
    click.echo(f"Predictions: {summary.total_predictions} ({summary.resolved_predictions} resolved)")
    click.echo(f"Correct: {summary.correct_predictions}")
    click.echo(f"Accuracy: {summary.accuracy:.1f}%")
    click.echo(f"Average error: {summary.average_error:.2f}")
    click.echo(f"\nOutcomes:")
    click.echo(f"  Most common: {extended.most_common_number}")
    click.echo(f"  Least common: {extended.least_common_number}")
    click.echo(f"  Hot numbers: {extended.hot_numbers()}")
    click.echo(f"  Cold numbers: {extended.cold_numbers()}")
    click.echo(f"  Longest correct streak: {extended.max_consecutive_correct}")
    click.echo(f"  Average confidence: {extended.average_confidence:.1f}")


@cli.command()
@click.argument('records_path', type=click.Path(exists=True))
@click.argument('record_id', type=int)
@click.argument('number', type=click.IntRange(0, 36))
def resolve(records_path, record_id, number):
    """Record the actual outcome of a prediction"""

    repository = _open_repository(records_path)
    try:
        repository.update_actual_number(record_id, number)
    except RouletteAnalyticsError as e:
        raise click.ClickException(str(e))

    record = repository.get(record_id)
    verdict = "correct" if record.is_correct else "wrong"
    click.echo(f"Record {record_id}: predicted {record.predicted_number}, actual {number} ({verdict})")


@cli.command()
@click.argument('records_path', type=click.Path(exists=True))
@click.option('--days', default=None, type=int, help='Retention window in days')
@click.option('--now', default=None, type=int, help='Reference time in ms (defaults to current time)')
@click.option('--config', 'config_path', default=None, type=click.Path(exists=True), help='Settings JSON file')
def sweep(records_path, days, now, config_path):
    """Delete records older than the retention window"""

    settings = _load_settings(config_path)
    days = days if days is not None else settings.retention_days
    now = now if now is not None else int(time.time() * 1000)

    repository = _open_repository(records_path)
    try:
        removed = sweep_retention(repository, now, days)
    except (RouletteAnalyticsError, ValueError) as e:
        raise click.ClickException(str(e))

    click.echo(f"Removed {removed} records older than {days} days")


if __name__ == '__main__':
    cli()
