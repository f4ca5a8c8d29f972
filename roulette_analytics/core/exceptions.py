"""
Exception hierarchy for roulette analytics
"""


class RouletteAnalyticsError(Exception):
    """Base class for all package errors"""


class InvalidStateError(RouletteAnalyticsError):
    """Operation attempted on a component in the wrong lifecycle state.

    Treated as fatal by the retry policy.
    """


class FrameProcessingError(RouletteAnalyticsError):
    """Per-frame processing failed after all retries"""

    def __init__(self, message: str, attempts: int = 0):
        super().__init__(message)
        self.attempts = attempts


class RepositoryError(RouletteAnalyticsError):
    """Persistence collaborator failed"""


class ConfigurationError(RouletteAnalyticsError):
    """Invalid settings"""
