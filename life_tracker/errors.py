"""Exception types shared by the trackers and their collaborators."""

from __future__ import annotations


class TrackerError(Exception):
    """Base class for every failure a tracker reports to the user."""


class ValidationError(TrackerError):
    """Raised before any request is issued when form input is unusable."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class StoreError(TrackerError):
    """A select/insert/update/delete against the persistence backend failed."""


class AuthError(TrackerError):
    """An operation needed a signed-in user and there was none."""
