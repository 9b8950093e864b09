"""
Services package for the guild client.

Session state, the authenticated request pipeline, the management-action
dispatcher and the API services built on top of them.
"""

from .action_dispatcher import ActionDispatcher
from .archive_service import ArchiveService
from .auth_service import AuthService
from .base import BaseService
from .guild_service import GuildService
from .member_cache import MemberListCache
from .navigation import Navigator
from .request_pipeline import RequestPipeline
from .service_container import ServiceContainer
from .session_state import SessionStore
from .user_service import UserService

__all__ = [
    "ActionDispatcher",
    "ArchiveService",
    "AuthService",
    "BaseService",
    "GuildService",
    "MemberListCache",
    "Navigator",
    "RequestPipeline",
    "ServiceContainer",
    "SessionStore",
    "UserService",
]
