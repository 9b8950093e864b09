"""Service for guild lookups, membership changes and guild settings."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from helpers.error_messages import format_user_success
from helpers.permissions_helper import available_actions_for
from helpers.validation import validate_tag
from services.base import BaseService
from services.request_pipeline import unwrap_payload
from utils.errors import RequestError
from utils.types import GuildMember, Identity, ManagementAction

if TYPE_CHECKING:
    from services.member_cache import MemberListCache
    from services.request_pipeline import RequestPipeline
    from services.session_state import SessionStore

GUILD_PATH = "/guild"
MEMBERS_PATH = "/guild/members"
JOIN_PATH = "/guild/join"
NOTICE_PATH = "/guild/management/notice"
CHECK_TAG_PATH = "/guild/management/check-tag"
TAG_PATH = "/guild/management/tag"


class GuildService(BaseService):
    """Guild data and non-role guild operations for the signed-in user."""

    def __init__(
        self,
        pipeline: RequestPipeline,
        session: SessionStore,
        member_cache: MemberListCache,
    ) -> None:
        super().__init__("guild", pipeline, session)
        self._member_cache = member_cache

    async def get_guild(self) -> Any:
        """Guild lounge data (name, notice, tag, ...) for the user's guild."""
        return unwrap_payload(await self.pipeline.get(GUILD_PATH))

    async def list_members(self, *, refresh: bool = False) -> list[GuildMember]:
        """
        Members of the user's guild, served from the list-view cache when possible.

        Entries with an unknown role are dropped with a warning.
        """
        guild_id = self.session.identity.guild_id if self.session.identity else None
        if not refresh:
            cached = self._member_cache.get(guild_id)
            if cached is not None:
                return cached

        response = unwrap_payload(await self.pipeline.get(MEMBERS_PATH))
        raw_members = response if isinstance(response, list) else []

        members: list[GuildMember] = []
        for raw in raw_members:
            member = GuildMember.from_payload(raw) if isinstance(raw, dict) else None
            if member is None:
                self.logger.warning("Skipping malformed member entry", extra={"guild_id": guild_id})
                continue
            members.append(member)

        self._member_cache.put(guild_id, members)
        self.logger.debug(
            "Loaded %s guild members", len(members), extra={"guild_id": guild_id}
        )
        return members

    def manageable_actions(self, member: GuildMember) -> list[ManagementAction]:
        """Actions the signed-in user may perform on ``member``, in display order."""
        return available_actions_for(self.session.identity, member)

    async def create_guild(self, name: str) -> Identity | None:
        """Found a guild; the response carries the creator's new identity (now MASTER)."""
        response = await self.pipeline.post(GUILD_PATH, {"name": name})
        return self._membership_changed(response, "created")

    async def join_guild(self, code: str) -> Identity | None:
        """Join a guild with an invite code."""
        response = await self.pipeline.post(JOIN_PATH, {"code": code})
        return self._membership_changed(response, "joined")

    async def update_notice(self, notice: str) -> str:
        await self.pipeline.patch(NOTICE_PATH, {"notice": notice})
        self.logger.info("Guild notice updated")
        return format_user_success("NOTICE_UPDATED")

    async def check_tag(self, tag: str) -> tuple[bool, str]:
        """
        Ask whether a guild tag is free.

        Returns:
            (available, message). A 4xx answer means "taken" and carries the
            server's message.

        Raises:
            ValidationError: tag fails the local format check.
            RequestError: server or network failure.
        """
        validate_tag(tag)
        try:
            await self.pipeline.post(CHECK_TAG_PATH, {"tag": tag})
        except RequestError as e:
            if e.is_client_error:
                return False, e.user_message
            raise
        return True, format_user_success("TAG_AVAILABLE")

    async def update_tag(self, tag: str) -> str:
        validate_tag(tag)
        await self.pipeline.patch(TAG_PATH, {"tag": tag})
        self._member_cache.invalidate()
        self.logger.info("Guild tag updated")
        return format_user_success("TAG_UPDATED")

    def _membership_changed(self, response: Any, verb: str) -> Identity | None:
        identity = self.adopt_identity(response)
        self._member_cache.invalidate()
        self.logger.info(
            "Guild %s",
            verb,
            extra={"guild_id": identity.guild_id if identity else None},
        )
        return identity
