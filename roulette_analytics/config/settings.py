"""
Settings management
"""

import os
from dataclasses import dataclass, asdict, fields
from typing import Optional
import json
from pathlib import Path

from ..core import constants
from ..core.exceptions import ConfigurationError

ENV_PREFIX = "ROULETTE_"
CONFIG_ENV_VAR = "ROULETTE_CONFIG"


@dataclass
class Settings:
    """Application settings, passed explicitly to the components that need them"""

    # Geometry
    wheel_diameter: float = constants.WHEEL_RADIUS * 2
    ball_diameter: float = 20.0

    # Landing model
    friction_factor: float = constants.FRICTION_FACTOR
    min_ball_velocity: float = constants.MIN_BALL_VELOCITY
    min_wheel_speed: float = constants.MIN_WHEEL_SPEED
    max_reliable_ball_velocity: float = constants.MAX_RELIABLE_BALL_VELOCITY
    max_reliable_wheel_speed: float = constants.MAX_RELIABLE_WHEEL_SPEED
    prediction_window_s: float = constants.MAX_RELIABLE_PREDICTION_TIME

    # Scheduling
    confidence_threshold: float = constants.MIN_BALL_CONFIDENCE
    min_tracking_frames: int = 1
    prediction_delay_ms: int = 0
    prediction_interval_ms: int = constants.PREDICTION_INTERVAL_MS
    recent_results_limit: int = constants.RECENT_RESULTS_LIMIT

    # Retry
    max_retries: int = constants.FRAME_RETRY_COUNT
    retry_initial_delay_ms: int = constants.FRAME_RETRY_DELAY_MS
    retry_max_delay_ms: int = constants.MAX_RETRY_DELAY_MS

    # Metrics
    nominal_fps: float = constants.DEFAULT_FPS
    metrics_interval_ms: int = constants.METRICS_UPDATE_INTERVAL_MS
    error_rate_threshold: float = constants.ERROR_RATE_THRESHOLD
    dropped_frames_threshold: float = constants.DROPPED_FRAMES_THRESHOLD

    # Pipeline resources
    channel_capacity: int = constants.FRAME_CHANNEL_CAPACITY
    buffer_pool_size: int = constants.FRAME_BUFFER_POOL_SIZE
    enable_position_smoothing: bool = False

    # Persistence
    retention_days: int = constants.RETENTION_DAYS

    # Logging
    log_level: str = "INFO"
    log_dir: Optional[str] = None

    @property
    def wheel_radius(self) -> float:
        return self.wheel_diameter / 2.0

    def validate(self) -> 'Settings':
        """Check value ranges; raises ConfigurationError"""
        if self.wheel_diameter <= 0:
            raise ConfigurationError(f"wheel_diameter must be positive, got {self.wheel_diameter}")
        if self.ball_diameter <= 0:
            raise ConfigurationError(f"ball_diameter must be positive, got {self.ball_diameter}")
        if not 0.0 < self.friction_factor <= 1.0:
            raise ConfigurationError(f"friction_factor must be in (0, 1], got {self.friction_factor}")
        if not 0.0 <= self.confidence_threshold <= 1.0:
            raise ConfigurationError(
                f"confidence_threshold must be in [0, 1], got {self.confidence_threshold}"
            )
        if self.min_tracking_frames < 1:
            raise ConfigurationError("min_tracking_frames must be at least 1")
        if self.min_ball_velocity > self.max_reliable_ball_velocity:
            raise ConfigurationError("min_ball_velocity exceeds max_reliable_ball_velocity")
        if self.min_wheel_speed > self.max_reliable_wheel_speed:
            raise ConfigurationError("min_wheel_speed exceeds max_reliable_wheel_speed")
        if self.max_retries < 0:
            raise ConfigurationError("max_retries must not be negative")
        if self.channel_capacity < 1:
            raise ConfigurationError("channel_capacity must be at least 1")
        if self.buffer_pool_size < 0:
            raise ConfigurationError("buffer_pool_size must not be negative")
        if self.nominal_fps <= 0:
            raise ConfigurationError("nominal_fps must be positive")
        return self

    @classmethod
    def from_file(cls, filepath: str) -> 'Settings':
        """Load settings from JSON file"""
        with open(filepath, 'r') as f:
            data = json.load(f)

        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown settings: {', '.join(sorted(unknown))}")

        return cls(**data).validate()

    @classmethod
    def from_env(cls) -> 'Settings':
        """Load settings from environment variables"""
        settings = cls()

        # Override from environment
        for field in settings.__dataclass_fields__:
            env_key = f"{ENV_PREFIX}{field.upper()}"
            if env_key in os.environ:
                value = os.environ[env_key]
                # Convert types
                field_type = settings.__dataclass_fields__[field].type
                try:
                    if field_type in (int, 'int'):
                        value = int(value)
                    elif field_type in (float, 'float'):
                        value = float(value)
                    elif field_type in (bool, 'bool'):
                        value = value.lower() in ('true', '1', 'yes')
                except ValueError as e:
                    raise ConfigurationError(f"Invalid value for {env_key}: {value}") from e
                setattr(settings, field, value)

        return settings.validate()

    @classmethod
    def load(cls, filepath: Optional[str] = None) -> 'Settings':
        """Resolve settings from an explicit file, the config env var, or the environment"""
        config_file = filepath or os.environ.get(CONFIG_ENV_VAR)
        if config_file and os.path.exists(config_file):
            return cls.from_file(config_file)
        if filepath:
            raise ConfigurationError(f"Settings file not found: {filepath}")
        return cls.from_env()

    def to_dict(self) -> dict:
        return asdict(self)

    def save(self, filepath: str):
        """Save settings to JSON file"""
        Path(filepath).parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)
