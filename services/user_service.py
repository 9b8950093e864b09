"""Service for the user's own profile: nickname and tag."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from helpers.error_messages import format_user_success
from helpers.validation import validate_nickname, validate_tag
from services.base import BaseService
from services.request_pipeline import unwrap_payload
from utils.errors import RequestError

if TYPE_CHECKING:
    from services.navigation import Navigator
    from services.request_pipeline import RequestPipeline
    from services.session_state import SessionStore


class UserService(BaseService):
    """
    Profile reads and edits.

    The identity the session holds is issued at login, so a changed nickname
    or tag only shows up after signing in again: a successful edit ends the
    local session and sends the user to the entry page.
    """

    def __init__(
        self,
        pipeline: RequestPipeline,
        session: SessionStore,
        navigator: Navigator | None = None,
    ) -> None:
        super().__init__("user", pipeline, session)
        self._navigator = navigator

    async def get_profile(self) -> Any:
        return unwrap_payload(await self.pipeline.get("/user"))

    async def update_nickname(self, nickname: str) -> str:
        validate_nickname(nickname)
        await self.pipeline.patch("/user/nickname", {"nickname": nickname})
        return self._require_relogin("NICKNAME_UPDATED")

    async def check_tag(self, tag: str) -> tuple[bool, str]:
        """Same contract as GuildService.check_tag, for the personal tag."""
        validate_tag(tag)
        try:
            await self.pipeline.post("/user/check-tag", {"tag": tag})
        except RequestError as e:
            if e.is_client_error:
                return False, e.user_message
            raise
        return True, format_user_success("TAG_AVAILABLE")

    async def update_tag(self, tag: str) -> str:
        validate_tag(tag)
        await self.pipeline.patch("/user/tag", {"tag": tag})
        return self._require_relogin("TAG_UPDATED")

    def _require_relogin(self, code: str) -> str:
        self.session.set_unauthenticated()
        if self._navigator is not None:
            self._navigator.redirect_to_entry()
        self.logger.info("Profile changed; signed out for re-login")
        return f"{format_user_success(code)}\n{format_user_success('RELOGIN_REQUIRED')}"
