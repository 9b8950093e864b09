"""
Navigation hook used when the session expires.

The client has no router of its own; the UI hands in a callback that moves
the user to a path, and keeps ``current_path`` up to date.
"""

from __future__ import annotations

from collections.abc import Callable

from utils.logging import get_logger

logger = get_logger(__name__)


class Navigator:
    """Tracks the current UI path and forwards redirect requests to the UI."""

    def __init__(
        self,
        on_redirect: Callable[[str], None] | None = None,
        current_path: str = "/",
        entry_path: str = "/",
        registration_path: str = "/register",
    ) -> None:
        self._on_redirect = on_redirect
        self.current_path = current_path
        self.entry_path = entry_path
        self.registration_path = registration_path

    def on_entry_flow(self) -> bool:
        """True on the entry or registration page, where expiry must not redirect."""
        return self.current_path in (self.entry_path, self.registration_path)

    def redirect_to_entry(self) -> bool:
        """
        Send the user to the entry page unless they are already in the entry flow.

        Returns:
            True if a redirect was issued.
        """
        if self.on_entry_flow():
            logger.debug("Session expired on %s; not redirecting", self.current_path)
            return False

        logger.info("Redirecting to %s after session expiry", self.entry_path)
        self.current_path = self.entry_path
        if self._on_redirect is not None:
            self._on_redirect(self.entry_path)
        return True
