"""
Service Container

Builds the client's object graph (transport, session, pipeline, services) and
manages its lifecycle.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from config.config_loader import ClientSettings, ConfigLoader
from helpers.http_helper import HTTPClient
from services.action_dispatcher import ActionDispatcher, Confirmer
from services.archive_service import ArchiveService
from services.auth_service import AuthService
from services.base import BaseService
from services.guild_service import GuildService
from services.member_cache import MemberListCache
from services.navigation import Navigator
from services.request_pipeline import RequestPipeline, Transport
from services.session_state import SessionStore
from services.user_service import UserService
from utils.logging import get_logger


class ServiceContainer:
    """
    Central container for the client's services.

    One container is one independent client: it owns its own session store,
    so tests (or multiple accounts) can run side by side.
    """

    def __init__(
        self,
        settings: ClientSettings | None = None,
        transport: Transport | None = None,
        on_redirect: Callable[[str], None] | None = None,
        confirm: Confirmer | None = None,
        current_path: str = "/",
    ) -> None:
        self.logger = get_logger("services.container")
        self.settings = settings or ClientSettings.from_config(ConfigLoader.load_config())

        self._http: HTTPClient | None = None
        if transport is None:
            self._http = HTTPClient(
                self.settings.base_url,
                timeout=self.settings.timeout_seconds,
                concurrency=self.settings.concurrency,
                allow_ip_cookies=self.settings.allow_ip_cookies,
            )
            transport = self._http
        self.transport = transport

        self.session = SessionStore()
        self.navigator = Navigator(
            on_redirect=on_redirect,
            current_path=current_path,
            entry_path=self.settings.entry_path,
            registration_path=self.settings.registration_path,
        )
        self.pipeline = RequestPipeline(
            transport,
            self.session,
            self.navigator,
            renewal_path=self.settings.renewal_path,
        )
        self.member_cache = MemberListCache()

        self.auth = AuthService(
            self.pipeline,
            self.session,
            self.member_cache,
            clear_credentials=self._http.clear_cookies if self._http else None,
        )
        self.guild = GuildService(self.pipeline, self.session, self.member_cache)
        self.user = UserService(self.pipeline, self.session, self.navigator)
        self.archive = ArchiveService(self.pipeline, self.session)
        self.dispatcher = ActionDispatcher(
            self.pipeline, self.session, self.member_cache, confirm=confirm
        )
        self._initialized = False

    def get_all_services(self) -> list[BaseService]:
        return [self.auth, self.guild, self.user, self.archive]

    async def initialize(self) -> None:
        """Start the session lifecycle and bootstrap the identity."""
        if self._initialized:
            self.logger.warning("ServiceContainer already initialized")
            return

        self.session.init()
        self.logger.info("Initializing services", extra={"path": self.settings.base_url})
        try:
            # AuthService first: it settles the session out of LOADING
            for service in self.get_all_services():
                await service.initialize()
        except Exception as e:
            self.logger.exception("Failed to initialize services", exc_info=e)
            raise

        self._initialized = True
        self.logger.info(
            "Services initialized (session %s)", self.session.status.value
        )

    async def cleanup(self) -> None:
        """Shut services down in reverse order and release the transport."""
        for service in reversed(self.get_all_services()):
            await service.shutdown()

        if self._http is not None:
            await self._http.close()

        self.member_cache.invalidate()
        self.session.teardown()
        self._initialized = False
        self.logger.info("Services cleaned up")

    async def health_check(self) -> dict[str, Any]:
        services = [await s.health_check() for s in self.get_all_services()]
        report: dict[str, Any] = {
            "session": self.session.status.value,
            "pipeline": self.pipeline.get_health_status(),
            "services": services,
            "config": ConfigLoader.get_config_status(),
        }
        if self._http is not None:
            report["http"] = self._http.get_health_status()
        return report

    async def __aenter__(self) -> ServiceContainer:
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.cleanup()
