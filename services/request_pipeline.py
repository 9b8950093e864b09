"""
Authenticated request pipeline.

Every backend call goes through ``RequestPipeline.execute``. The pipeline:

- sends the request with the ambient session cookie (held by the transport)
- parses success bodies, treating 204 / empty / malformed bodies as ``None``
- on a first 401, renews the credential once via the renewal endpoint and
  retries the original request once
- on a failed renewal, clears the session, redirects to the entry page
  (except during the entry/registration flow) and returns ``None``
- on a 401 for the retry itself, clears the session the same way but raises
- turns every other failure into a ``RequestError`` with a display-ready
  message

Renewal is single-flight per pipeline: concurrent calls that hit 401 at the
same time wait on one shared renewal request, then each retries on its own.
"""

from __future__ import annotations

import asyncio
import json
from enum import Enum
from typing import Any, NamedTuple, Protocol

from helpers.error_messages import GENERIC_REQUEST_FAILURE, NETWORK_FAILURE
from helpers.http_helper import TransportError, TransportResponse
from services.navigation import Navigator
from services.session_state import SessionStore
from utils.errors import RequestError
from utils.log_context import call_scope, get_context_extra
from utils.logging import get_logger

logger = get_logger(__name__)

HTTP_NO_CONTENT = 204
HTTP_UNAUTHORIZED = 401


class Transport(Protocol):
    async def request(
        self, method: str, path: str, body: Any = None
    ) -> TransportResponse: ...


class CallResult(NamedTuple):
    """Parsed body of one logical call, flagged when the call expired the session."""

    body: Any
    expired: bool = False


# ---------------------------------------------------------------------------
# Body helpers
# ---------------------------------------------------------------------------


def parse_json_body(text: str | None) -> Any:
    """Parse a response body; empty or invalid JSON yields None."""
    if not text or not text.strip():
        return None
    try:
        return json.loads(text)
    except ValueError:
        return None


def extract_error_message(data: Any) -> str:
    """
    Pull a display message out of an error body.

    ``{"message": ["A", "B"]}`` -> "A, B"; ``{"message": "A"}`` -> "A";
    anything else -> the generic failure message.
    """
    message = data.get("message") if isinstance(data, dict) else None
    if isinstance(message, list):
        joined = ", ".join(str(part) for part in message)
        return joined or GENERIC_REQUEST_FAILURE
    if isinstance(message, str) and message:
        return message
    return GENERIC_REQUEST_FAILURE


def unwrap_payload(value: Any) -> Any:
    """Return ``value["payload"]`` for an envelope, the value itself otherwise."""
    if isinstance(value, dict) and "payload" in value:
        return value["payload"]
    return value


# ---------------------------------------------------------------------------
# Per-call renewal protocol
# ---------------------------------------------------------------------------


class RenewalState(Enum):
    FRESH = "fresh"
    RENEWED = "renewed"


class RenewalProtocol:
    """
    Renewal bookkeeping for one logical call.

    The only transition is FRESH -> RENEWED; taking it twice is a bug and
    raises, so a call can never renew more than once.
    """

    def __init__(self) -> None:
        self.state = RenewalState.FRESH

    @property
    def can_renew(self) -> bool:
        return self.state is RenewalState.FRESH

    def mark_renewed(self) -> None:
        if self.state is RenewalState.RENEWED:
            raise RuntimeError("Credential renewal already attempted for this call")
        self.state = RenewalState.RENEWED


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class RequestPipeline:
    """Wraps every backend call with session renewal and error normalization."""

    def __init__(
        self,
        transport: Transport,
        session: SessionStore,
        navigator: Navigator,
        renewal_path: str = "/auth/refresh",
    ) -> None:
        self._transport = transport
        self._session = session
        self._navigator = navigator
        self._renewal_path = renewal_path
        self._renewal: asyncio.Future[bool] | None = None

        self._call_count = 0
        self._renewal_count = 0
        self._expired_count = 0

    async def execute(self, path: str, method: str = "GET", body: Any = None) -> Any:
        """
        Run one logical call and return its parsed body.

        Args:
            path: Backend path, e.g. "/guild/members".
            method: HTTP method.
            body: JSON-serializable body, or None.

        Returns:
            The parsed JSON body, or None for 204 / empty / malformed success
            bodies and for an irrecoverably expired session.

        Raises:
            RequestError: For any non-2xx outcome other than a failed renewal,
                and for network failures (status None).
        """
        return (await self.call(path, method, body)).body

    async def call(self, path: str, method: str = "GET", body: Any = None) -> CallResult:
        """
        Like ``execute``, but reports whether this call expired the session.

        Callers that must tell "succeeded with no body" apart from "session
        expired" use this instead of reading the shared session state, which
        a concurrent call may have changed.
        """
        method = method.upper()
        self._call_count += 1

        with call_scope():
            protocol = RenewalProtocol()
            while True:
                response = await self._send(method, path, body)

                if response.ok:
                    return CallResult(self._parse_success(response))

                if response.status == HTTP_UNAUTHORIZED:
                    if protocol.can_renew:
                        protocol.mark_renewed()
                        logger.info(
                            "Session credential rejected; renewing",
                            extra=get_context_extra(method, path, response.status),
                        )
                        if await self._renew():
                            continue
                        self._expire_session()
                        return CallResult(None, expired=True)

                    # Rejected again right after a successful renewal
                    error = self._to_error(method, path, response)
                    self._expire_session()
                    raise error

                raise self._to_error(method, path, response)

    async def get(self, path: str) -> Any:
        return await self.execute(path, "GET")

    async def post(self, path: str, body: Any = None) -> Any:
        return await self.execute(path, "POST", body)

    async def patch(self, path: str, body: Any = None) -> Any:
        return await self.execute(path, "PATCH", body)

    async def delete(self, path: str, body: Any = None) -> Any:
        return await self.execute(path, "DELETE", body)

    def get_health_status(self) -> dict[str, Any]:
        return {
            "total_calls": self._call_count,
            "total_renewals": self._renewal_count,
            "total_expirations": self._expired_count,
            "renewal_in_flight": self._renewal is not None,
        }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _send(self, method: str, path: str, body: Any) -> TransportResponse:
        try:
            return await self._transport.request(method, path, body)
        except TransportError as e:
            logger.warning(
                f"Request failed without a response: {e}",
                extra=get_context_extra(method, path),
            )
            raise RequestError(NETWORK_FAILURE, status=None) from e

    @staticmethod
    def _parse_success(response: TransportResponse) -> Any:
        if response.status == HTTP_NO_CONTENT:
            return None
        return parse_json_body(response.text)

    def _to_error(
        self, method: str, path: str, response: TransportResponse
    ) -> RequestError:
        message = extract_error_message(parse_json_body(response.text) or {})
        log = logger.error if response.status >= 500 else logger.warning
        log(
            f"Request failed: {message}",
            extra=get_context_extra(method, path, response.status),
        )
        return RequestError(message, status=response.status)

    async def _renew(self) -> bool:
        """Join the in-flight renewal, or start one."""
        if self._renewal is None:
            self._renewal = asyncio.ensure_future(self._perform_renewal())
        else:
            logger.debug("Joining in-flight credential renewal")
        # One waiter being cancelled must not cancel the shared renewal
        return await asyncio.shield(self._renewal)

    async def _perform_renewal(self) -> bool:
        self._renewal_count += 1
        try:
            response = await self._transport.request("PATCH", self._renewal_path, None)
        except TransportError as e:
            logger.warning(f"Credential renewal failed without a response: {e}")
            return False
        finally:
            self._renewal = None

        if response.ok:
            logger.info("Credential renewed", extra=get_context_extra(status=response.status))
            return True
        logger.warning(
            "Credential renewal rejected",
            extra=get_context_extra("PATCH", self._renewal_path, response.status),
        )
        return False

    def _expire_session(self) -> None:
        self._expired_count += 1
        logger.warning("Session expired; clearing identity")
        self._session.set_unauthenticated()
        self._navigator.redirect_to_entry()
