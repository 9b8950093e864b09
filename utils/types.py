"""
Type definitions and common data structures for the guild client.

Roles arrive from the backend as loosely-cased strings; ``Role.parse`` is the
single place they are normalized. Everything past the ingestion boundary
works with the enum.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, NamedTuple


class Role(Enum):
    """Guild role, ordered by rank (MASTER highest)."""

    MASTER = "master"
    SUBMASTER = "submaster"
    MANAGER = "manager"
    MEMBER = "member"

    @property
    def rank(self) -> int:
        return _ROLE_RANK[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Role):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Role):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Role):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Role):
            return NotImplemented
        return self.rank >= other.rank

    @classmethod
    def parse(cls, raw: Any) -> Role | None:
        """
        Normalize a wire value into a Role.

        Accepts Role instances and strings in any case ("MASTER", "master").
        Anything else, including None and unknown names, yields None.
        """
        if isinstance(raw, Role):
            return raw
        if not isinstance(raw, str):
            return None
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return None


_ROLE_RANK = {
    Role.MEMBER: 0,
    Role.MANAGER: 1,
    Role.SUBMASTER: 2,
    Role.MASTER: 3,
}


class ManagementAction(Enum):
    """Guild-management operations an actor can perform on a target member."""

    DELEGATE_MASTER = "DELEGATE_MASTER"
    APPOINT_SUBMASTER = "APPOINT_SUBMASTER"
    DELEGATE_SUBMASTER = "DELEGATE_SUBMASTER"
    APPOINT_MANAGER = "APPOINT_MANAGER"
    DEMOTE_MANAGER = "DEMOTE_MANAGER"
    KICK = "KICK"


class SessionStatus(Enum):
    """Authentication status of the client session."""

    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


def _first_present(data: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


@dataclass(frozen=True)
class Identity:
    """The authenticated user as reported by the backend."""

    user_id: str
    guild_id: str | None = None
    role: Role | None = None
    user_role: str | None = None  # account level: "admin" or "user"

    @classmethod
    def from_payload(cls, data: Any) -> Identity | None:
        """
        Build an Identity from a profile/login payload.

        Returns None when the payload does not look like an identity (not a
        mapping, or no user id), so callers can pass arbitrary responses.
        """
        if not isinstance(data, dict):
            return None
        user_id = _first_present(data, "sub", "userId", "user_id")
        if user_id is None:
            return None
        guild_id = _first_present(data, "guildId", "guild_id")
        return cls(
            user_id=str(user_id),
            guild_id=str(guild_id) if guild_id is not None else None,
            role=Role.parse(_first_present(data, "guildRole", "role")),
            user_role=_first_present(data, "userRole", "user_role"),
        )


@dataclass(frozen=True)
class GuildMember:
    """A member row from the guild member list."""

    user_id: str
    nickname: str
    tag: str
    role: Role
    full_name: str | None = None

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> GuildMember | None:
        """Parse one member entry; entries without a user id or known role are dropped."""
        role = Role.parse(data.get("role"))
        user_id = data.get("userId")
        if role is None or user_id is None:
            return None
        return cls(
            user_id=str(user_id),
            nickname=str(data.get("nickname", "")),
            tag=str(data.get("tag", "")),
            role=role,
            full_name=data.get("fullName"),
        )


class DispatchOutcome(NamedTuple):
    """Result of dispatching a management action."""

    status: str  # completed, refused, cancelled or expired
    message: str | None = None
    identity: Identity | None = None

    @property
    def completed(self) -> bool:
        return self.status == "completed"
