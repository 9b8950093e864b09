"""
Base class for services that talk to the guild backend.

Every API service gets the shared request pipeline and session store, a
once-only ``initialize`` / idempotent ``shutdown`` pair, a health entry and
the rule for adopting an identity carried by a response.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from services.request_pipeline import unwrap_payload
from utils.logging import get_logger
from utils.types import Identity

if TYPE_CHECKING:
    from services.request_pipeline import RequestPipeline
    from services.session_state import SessionStore


class BaseService:
    """
    Common plumbing for client services.

    Subclasses override ``_initialize_impl`` / ``_shutdown_impl`` when they
    have startup or teardown work; most have none.
    """

    def __init__(self, name: str, pipeline: RequestPipeline, session: SessionStore) -> None:
        self.name = name
        self.pipeline = pipeline
        self.session = session
        self.logger = get_logger(f"services.{name}")
        self._initialized = False
        self._init_lock = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Run startup work once; concurrent callers wait for the first."""
        async with self._init_lock:
            if self._initialized:
                return
            try:
                await self._initialize_impl()
            except Exception:
                self.logger.exception("%s service failed to start", self.name)
                raise
            self._initialized = True
            self.logger.debug("%s service ready", self.name)

    async def shutdown(self) -> None:
        """Run teardown work; failures are logged and swallowed."""
        if not self._initialized:
            return
        self._initialized = False
        try:
            await self._shutdown_impl()
        except Exception:
            self.logger.exception("%s service failed to shut down cleanly", self.name)

    async def _initialize_impl(self) -> None:
        return None

    async def _shutdown_impl(self) -> None:
        return None

    def adopt_identity(self, response: Any, *, allow_bare: bool = False) -> Identity | None:
        """
        Replace the session identity with one carried by ``response``.

        Responses normally wrap the identity in a ``payload`` envelope; pass
        ``allow_bare`` for endpoints that return the identity itself.

        Returns:
            The adopted identity, or None when the response carried none.
        """
        if isinstance(response, dict) and "payload" in response:
            candidate = unwrap_payload(response)
        elif allow_bare:
            candidate = response
        else:
            return None

        identity = Identity.from_payload(candidate)
        if identity is not None:
            self.session.set_authenticated(identity)
        return identity

    async def health_check(self) -> dict[str, Any]:
        return {
            "service": self.name,
            "initialized": self._initialized,
            "status": "healthy" if self._initialized else "not_initialized",
        }
