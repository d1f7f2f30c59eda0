# taskdesk error types
# Rev 0.2.0

from __future__ import annotations
from typing import Optional


class TaskdeskError(Exception):
    """Base for everything the client raises on purpose."""


class GatewayError(TaskdeskError):
    """Transport failure or non-2xx answer from the REST API."""

    def __init__(self, status: Optional[int], message: str, *, url: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.message = message
        self.url = url

    def __str__(self) -> str:
        if self.status is None:
            return self.message
        return f"{self.message} (HTTP {self.status})"


class ValidationError(TaskdeskError):
    """A form field is missing or invalid; raised before any network call."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class MissingIdError(TaskdeskError):
    """A mutation was attempted on an entity with no id."""
