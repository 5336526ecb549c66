"""Project-wide exception types."""

class VolDashboardError(Exception):
    """Base exception for all dashboard errors."""


class DataSourceError(VolDashboardError):
    """Raised when market data retrieval or payload checks fail."""


class InsufficientDataError(DataSourceError):
    """Raised when a sample is too small or malformed to normalize."""


class ConfigError(VolDashboardError):
    """Raised when configuration is missing or malformed."""


class ConfigValidationError(ConfigError):
    """Raised when validation fails for supplied configuration."""


class DependencyError(VolDashboardError):
    """Raised when a requested component or dependency is unavailable."""
