"""Exception types raised by ScanBoard."""


class ScanboardError(Exception):
    """Base class for ScanBoard errors."""


class ApiError(ScanboardError):
    """The scan-report backend could not be reached or answered badly."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ConfigError(ScanboardError, ValueError):
    """Invalid ScanBoard configuration."""
