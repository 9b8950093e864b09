"""Dispatches guild-management actions (delegate, appoint, demote, kick)."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable

from helpers.error_messages import (
    action_label,
    format_confirmation,
    format_user_error,
    format_user_success,
)
from helpers.permissions_helper import allowed_actions
from services.member_cache import MemberListCache
from services.request_pipeline import RequestPipeline
from services.session_state import SessionStore
from utils.log_context import get_context_extra
from utils.logging import get_logger
from utils.types import DispatchOutcome, GuildMember, Identity, ManagementAction, Role

logger = get_logger(__name__)

Confirmer = Callable[[str], "bool | Awaitable[bool]"]

_A = ManagementAction

# (method, path) per action; both submaster actions share one endpoint.
ACTION_ENDPOINTS: dict[ManagementAction, tuple[str, str]] = {
    _A.DELEGATE_MASTER: ("PATCH", "/guild/management/master"),
    _A.APPOINT_SUBMASTER: ("PATCH", "/guild/management/submaster"),
    _A.DELEGATE_SUBMASTER: ("PATCH", "/guild/management/submaster"),
    _A.APPOINT_MANAGER: ("POST", "/guild/management/managers"),
    _A.DEMOTE_MANAGER: ("PATCH", "/guild/management/managers"),
    _A.KICK: ("PATCH", "/guild/management/kick"),
}


def resolve_endpoint(action: ManagementAction) -> tuple[str, str]:
    return ACTION_ENDPOINTS[action]


def _approve(_prompt: str) -> bool:
    return True


class ActionDispatcher:
    """
    Sends one management action on behalf of the signed-in actor.

    The permission matrix is checked again here even though the UI only
    renders permitted controls. Request failures propagate as
    ``RequestError``; local refusals and declined confirmations come back as
    a ``DispatchOutcome`` without any network call.
    """

    def __init__(
        self,
        pipeline: RequestPipeline,
        session: SessionStore,
        member_cache: MemberListCache,
        confirm: Confirmer | None = None,
    ) -> None:
        self._pipeline = pipeline
        self._session = session
        self._member_cache = member_cache
        self._confirm = confirm or _approve

    async def dispatch(
        self,
        action: ManagementAction,
        target: GuildMember,
        actor_role: Role | str | None = None,
    ) -> DispatchOutcome:
        """
        Perform ``action`` on ``target``.

        Args:
            action: The management action.
            target: Member the action applies to.
            actor_role: Role of the actor; defaults to the session identity's role.

        Returns:
            DispatchOutcome with status "completed", "refused", "cancelled"
            or "expired" (this call failed to renew the session).

        Raises:
            RequestError: When the backend rejects the action.
        """
        actor = self._session.identity
        extra = get_context_extra(action=action.value, target_id=target.user_id)

        if not self._session.is_authenticated or actor is None:
            logger.warning("Management action refused: not authenticated", extra=extra)
            return DispatchOutcome("refused", format_user_error("NOT_AUTHENTICATED"))

        if actor.user_id == target.user_id:
            logger.warning("Management action refused: self target", extra=extra)
            return DispatchOutcome("refused", format_user_error("SELF_TARGET"))

        role = Role.parse(actor_role) if actor_role is not None else actor.role
        if action not in allowed_actions(role, target.role):
            logger.warning(
                "Management action refused: %s may not %s a %s",
                role.value if role else None,
                action.value,
                target.role.value,
                extra=extra,
            )
            return DispatchOutcome(
                "refused", format_user_error("NOT_ALLOWED", action=action_label(action))
            )

        if not await self._confirmed(format_confirmation(target.nickname, action)):
            logger.debug("Management action cancelled by actor", extra=extra)
            return DispatchOutcome("cancelled")

        method, path = resolve_endpoint(action)
        result = await self._pipeline.call(path, method, {"targetId": target.user_id})
        if result.expired:
            logger.warning("Management action abandoned: session expired", extra=extra)
            return DispatchOutcome("expired", format_user_error("NOT_AUTHENTICATED"))
        response = result.body

        renewed: Identity | None = None
        if isinstance(response, dict) and "payload" in response:
            renewed = Identity.from_payload(response["payload"])
            if renewed is not None:
                self._session.set_authenticated(renewed)

        self._member_cache.invalidate()
        logger.info("Management action completed", extra=extra)
        return DispatchOutcome("completed", format_user_success("ACTION_DONE"), renewed)

    async def _confirmed(self, prompt: str) -> bool:
        result = self._confirm(prompt)
        if inspect.isawaitable(result):
            result = await result
        return bool(result)
