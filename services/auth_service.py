"""Service handling profile bootstrap, login, registration and logout."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from helpers.validation import validate_nickname
from services.base import BaseService
from services.request_pipeline import unwrap_payload
from utils.errors import RequestError
from utils.types import Identity

if TYPE_CHECKING:
    from services.member_cache import MemberListCache
    from services.request_pipeline import RequestPipeline
    from services.session_state import SessionStore

PROFILE_PATH = "/auth/profile"
LOGIN_PATH = "/auth/login"
TEST_LOGIN_PATH = "/auth/test/login"
REGISTER_PATH = "/auth/google/register"
LOGOUT_PATH = "/auth/logout"


class AuthService(BaseService):
    """
    Owns the session's authentication transitions.

    ``initialize`` bootstraps the identity from the profile endpoint, moving
    the session out of LOADING. Every successful login-type call replaces the
    identity wholesale.
    """

    def __init__(
        self,
        pipeline: RequestPipeline,
        session: SessionStore,
        member_cache: MemberListCache,
        clear_credentials: Callable[[], None] | None = None,
    ) -> None:
        super().__init__("auth", pipeline, session)
        self._member_cache = member_cache
        self._clear_credentials = clear_credentials

    async def _initialize_impl(self) -> None:
        await self.load_profile()

    async def load_profile(self) -> Identity | None:
        """
        Fetch the current identity and settle the session.

        Any failure (no cookie, expired session, server error) leaves the
        session UNAUTHENTICATED; nothing is raised.
        """
        try:
            response = await self.pipeline.get(PROFILE_PATH)
        except RequestError as e:
            self.logger.info(
                "Profile bootstrap failed: %s", e.user_message, extra={"status": e.status}
            )
            self.session.set_unauthenticated()
            return None

        identity = Identity.from_payload(unwrap_payload(response))
        if identity is None:
            self.session.set_unauthenticated()
            return None

        self.session.set_authenticated(identity)
        self.logger.info(
            "Profile loaded",
            extra={"user_id": identity.user_id, "guild_id": identity.guild_id},
        )
        return identity

    async def login(self, test_id: str) -> Identity | None:
        """Sign in with a test account id; the endpoint returns the identity unwrapped."""
        response = await self.pipeline.post(LOGIN_PATH, {"testId": test_id})
        return self._signed_in(response, allow_bare=True)

    async def test_login(self, nickname: str, password: str) -> Identity | None:
        response = await self.pipeline.post(
            TEST_LOGIN_PATH, {"nickname": nickname, "password": password}
        )
        return self._signed_in(response)

    async def register(self, nickname: str) -> Identity | None:
        """
        Finish first-time signup with the chosen nickname.

        The pending-registration cookie is sent automatically.

        Raises:
            ValidationError: nickname has spaces or special characters.
            RequestError: backend rejected the registration.
        """
        validate_nickname(nickname)
        response = await self.pipeline.post(REGISTER_PATH, {"nickname": nickname})
        return self._signed_in(response)

    async def logout(self) -> None:
        """Sign out on the server, then forget everything locally."""
        try:
            await self.pipeline.delete(LOGOUT_PATH)
        finally:
            if self._clear_credentials is not None:
                self._clear_credentials()
            self._member_cache.invalidate()
            self.session.set_unauthenticated()
            self.logger.info("Logged out")

    def _signed_in(self, response: object, *, allow_bare: bool = False) -> Identity | None:
        identity = self.adopt_identity(response, allow_bare=allow_bare)
        if identity is None:
            self.logger.warning("Sign-in response carried no identity")
            return None
        self._member_cache.invalidate()
        self.logger.info(
            "Signed in",
            extra={"user_id": identity.user_id, "guild_id": identity.guild_id},
        )
        return identity
