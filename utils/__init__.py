"""
Utilities Package

Common utilities and data types for the guild client.

``utils.logging`` is not re-exported here: it depends on the config package,
which itself imports ``utils.errors``.
"""

from .errors import (
    ConfigError,
    GuildClientError,
    InvalidSessionTransition,
    RequestError,
    ValidationError,
)
from .types import (
    DispatchOutcome,
    GuildMember,
    Identity,
    ManagementAction,
    Role,
    SessionStatus,
)

__all__ = [
    "ConfigError",
    "DispatchOutcome",
    "GuildClientError",
    "GuildMember",
    "Identity",
    "InvalidSessionTransition",
    "ManagementAction",
    "RequestError",
    "Role",
    "SessionStatus",
    "ValidationError",
]
