"""Guild-management authorization matrix.

Single canonical table answering "which management actions may an actor of
role X perform on a member of role Y". UI code uses it to decide which
controls to render; the action dispatcher consults it again before sending
anything. The backend enforces the same rules.

    - PERMISSION_MATRIX
    - allowed_actions
    - can_perform
    - available_actions_for
"""

from __future__ import annotations

from utils.types import GuildMember, Identity, ManagementAction, Role

_A = ManagementAction

# Keyed by (actor, target). Any pair not listed grants nothing, which covers
# MANAGER/MEMBER actors, MASTER targets, and SUBMASTER acting on SUBMASTER.
PERMISSION_MATRIX: dict[tuple[Role, Role], frozenset[ManagementAction]] = {
    (Role.MASTER, Role.SUBMASTER): frozenset({_A.DELEGATE_MASTER, _A.KICK}),
    (Role.MASTER, Role.MANAGER): frozenset(
        {_A.APPOINT_SUBMASTER, _A.DEMOTE_MANAGER, _A.KICK}
    ),
    (Role.MASTER, Role.MEMBER): frozenset({_A.APPOINT_MANAGER, _A.KICK}),
    (Role.SUBMASTER, Role.MANAGER): frozenset(
        {_A.DELEGATE_SUBMASTER, _A.DEMOTE_MANAGER, _A.KICK}
    ),
    (Role.SUBMASTER, Role.MEMBER): frozenset({_A.APPOINT_MANAGER, _A.KICK}),
}

# Order in which controls are presented; KICK always last.
DISPLAY_ORDER: tuple[ManagementAction, ...] = (
    _A.DELEGATE_MASTER,
    _A.APPOINT_SUBMASTER,
    _A.DELEGATE_SUBMASTER,
    _A.APPOINT_MANAGER,
    _A.DEMOTE_MANAGER,
    _A.KICK,
)

_NONE: frozenset[ManagementAction] = frozenset()


def allowed_actions(
    actor_role: Role | str | None, target_role: Role | str | None
) -> frozenset[ManagementAction]:
    """Return the actions an actor may perform on a target. Never raises."""
    actor = Role.parse(actor_role)
    target = Role.parse(target_role)
    if actor is None or target is None:
        return _NONE
    return PERMISSION_MATRIX.get((actor, target), _NONE)


def can_perform(
    actor_role: Role | str | None,
    target_role: Role | str | None,
    action: ManagementAction,
) -> bool:
    return action in allowed_actions(actor_role, target_role)


def available_actions_for(
    actor: Identity | None, member: GuildMember
) -> list[ManagementAction]:
    """
    Ordered actions to offer for ``member`` in the manage dialog.

    Self-management is never offered, and an actor without a guild role gets
    nothing.
    """
    if actor is None or actor.role is None or actor.user_id == member.user_id:
        return []
    permitted = allowed_actions(actor.role, member.role)
    return [action for action in DISPLAY_ORDER if action in permitted]
