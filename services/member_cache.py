"""In-memory cache of the guild member list for the currently open list view."""

from __future__ import annotations

from utils.logging import get_logger
from utils.types import GuildMember

logger = get_logger(__name__)


class MemberListCache:
    """
    Holds at most one member list per guild.

    Entries live only until the next management action; ``invalidate`` is
    called after every successful action so the next read refetches.
    """

    def __init__(self) -> None:
        self._entries: dict[str | None, list[GuildMember]] = {}
        self.invalidations = 0

    def get(self, guild_id: str | None) -> list[GuildMember] | None:
        members = self._entries.get(guild_id)
        return list(members) if members is not None else None

    def put(self, guild_id: str | None, members: list[GuildMember]) -> None:
        self._entries[guild_id] = list(members)

    def invalidate(self, guild_id: str | None = None) -> None:
        """Drop one guild's list, or everything when guild_id is None."""
        if guild_id is None:
            self._entries.clear()
        else:
            self._entries.pop(guild_id, None)
        self.invalidations += 1
        logger.debug("Member list cache invalidated", extra={"guild_id": guild_id})

    def __len__(self) -> int:
        return len(self._entries)
