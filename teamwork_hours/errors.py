"""Exceptions raised by teamwork_hours.

Everything derives from TeamworkHoursError so the CLI can catch a single type
and print a readable message instead of a traceback.
"""

from __future__ import annotations


class TeamworkHoursError(Exception):
    """Base class for all errors of this package."""


class InvalidInput(TeamworkHoursError, ValueError):
    """Bad hours, date or duration value supplied by the user."""


class ConfigError(TeamworkHoursError):
    """Settings file missing required data or not parseable."""


class AuthenticationError(TeamworkHoursError):
    """Teamwork rejected the credentials, or none are available."""


class ApiError(TeamworkHoursError):
    """Teamwork answered with an unexpected status or payload."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class SubmissionError(TeamworkHoursError):
    """A single time entry could not be created."""

    def __init__(self, message: str, entry_date=None):
        super().__init__(message)
        self.entry_date = entry_date
