"""
Session state store.

Holds the client's authentication status and the current identity. One
instance per client process, injected into everything that reads or writes
it; tests build their own.

Transitions:
    LOADING -> AUTHENTICATED | UNAUTHENTICATED   (profile bootstrap)
    AUTHENTICATED -> UNAUTHENTICATED             (logout, expired session)
    UNAUTHENTICATED -> AUTHENTICATED             (login, registration)
    AUTHENTICATED -> AUTHENTICATED               (identity replaced by an action response)

LOADING is only ever the initial state.
"""

from __future__ import annotations

from collections.abc import Callable

from utils.errors import InvalidSessionTransition
from utils.logging import get_logger
from utils.types import Identity, Role, SessionStatus

logger = get_logger(__name__)

SessionListener = Callable[[SessionStatus, Identity | None], None]


class SessionStore:
    """Authentication status plus identity, replaced wholesale on every write."""

    def __init__(self) -> None:
        self._status = SessionStatus.LOADING
        self._identity: Identity | None = None
        self._listeners: list[SessionListener] = []

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def init(self) -> None:
        """Start (or restart) the process-level lifecycle in LOADING."""
        self._status = SessionStatus.LOADING
        self._identity = None
        logger.debug("Session initialized (loading)")

    def teardown(self) -> None:
        """Drop the identity and all listeners."""
        self._status = SessionStatus.UNAUTHENTICATED
        self._identity = None
        self._listeners.clear()
        logger.debug("Session torn down")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def is_loading(self) -> bool:
        return self._status is SessionStatus.LOADING

    @property
    def is_authenticated(self) -> bool:
        return self._status is SessionStatus.AUTHENTICATED

    @property
    def role(self) -> Role | None:
        return self._identity.role if self._identity else None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def set_authenticated(self, identity: Identity) -> None:
        """Enter AUTHENTICATED, replacing any previous identity."""
        if not isinstance(identity, Identity):
            raise InvalidSessionTransition(
                f"set_authenticated requires an Identity, got {type(identity).__name__}"
            )
        previous = self._identity
        self._status = SessionStatus.AUTHENTICATED
        self._identity = identity
        if previous is not None and previous.role != identity.role:
            logger.info(
                "Session role changed from %s to %s",
                previous.role.value if previous.role else None,
                identity.role.value if identity.role else None,
                extra={"user_id": identity.user_id, "guild_id": identity.guild_id},
            )
        else:
            logger.debug(
                "Session authenticated",
                extra={"user_id": identity.user_id, "guild_id": identity.guild_id},
            )
        self._notify()

    def set_unauthenticated(self) -> None:
        """Enter UNAUTHENTICATED and forget the identity."""
        was = self._status
        self._status = SessionStatus.UNAUTHENTICATED
        self._identity = None
        if was is not SessionStatus.UNAUTHENTICATED:
            logger.info("Session cleared (was %s)", was.value)
        self._notify()

    def mark_loading(self) -> None:
        """Only legal while still in the initial LOADING state."""
        if self._status is not SessionStatus.LOADING:
            raise InvalidSessionTransition(
                f"Cannot re-enter loading from {self._status.value}"
            )

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a change listener; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._status, self._identity)
            except Exception:
                logger.exception("Session listener failed")
