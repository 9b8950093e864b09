"""
Custom exception classes for the guild client.

These provide a hierarchy of typed exceptions for better error handling.
"""

from __future__ import annotations


class GuildClientError(Exception):
    """Base exception for guild client errors."""

    pass


class ConfigError(GuildClientError):
    """Exception raised for configuration-related errors."""

    pass


class ValidationError(GuildClientError):
    """Exception raised when input fails a local check before any request is made."""

    pass


class InvalidSessionTransition(GuildClientError):
    """Exception raised when the session state machine is driven illegally."""

    pass


class RequestError(GuildClientError):
    """
    Raised by the request pipeline for every failed call.

    ``user_message`` is display-ready. ``status`` is the HTTP status, or None
    when the request never produced a response (timeout, connection error).
    """

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.user_message = message
        self.status = status

    @property
    def is_client_error(self) -> bool:
        return self.status is not None and 400 <= self.status < 500

    @property
    def is_server_error(self) -> bool:
        return self.status is not None and self.status >= 500

    def __repr__(self) -> str:
        return f"RequestError({self.user_message!r}, status={self.status!r})"
