"""
End-to-end tests of the pipeline over real HTTP.

An aiohttp.web backend on 127.0.0.1 issues httpOnly-style cookies; the
client's cookie jar must carry them, and an expired access cookie must be
renewed transparently through the refresh endpoint.
"""

from __future__ import annotations

import asyncio

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from helpers.http_helper import HTTPClient, TransportError
from services.auth_service import AuthService
from services.member_cache import MemberListCache
from services.navigation import Navigator
from services.request_pipeline import RequestPipeline
from services.session_state import SessionStore
from utils.errors import RequestError
from utils.types import Role

PROFILE = {"sub": "u1", "userRole": "user", "guildId": "g1", "guildRole": "MASTER"}


def _backend(counters: dict[str, int]) -> web.Application:
    async def login(request: web.Request) -> web.Response:
        body = await request.json()
        resp = web.json_response({**PROFILE, "sub": body["testId"]}, status=201)
        # Access cookie is already stale; only the refresh cookie is good
        resp.set_cookie("access_token", "stale", httponly=True)
        resp.set_cookie("refresh_token", "r1", httponly=True)
        return resp

    async def profile(request: web.Request) -> web.Response:
        counters["profile"] += 1
        if request.cookies.get("access_token") != "fresh":
            return web.json_response({"message": "Unauthorized"}, status=401)
        return web.json_response({"payload": PROFILE})

    async def refresh(request: web.Request) -> web.Response:
        counters["refresh"] += 1
        if request.cookies.get("refresh_token") != "r1":
            return web.json_response({"message": "Unauthorized"}, status=401)
        resp = web.json_response({})
        resp.set_cookie("access_token", "fresh", httponly=True)
        return resp

    async def nickname(request: web.Request) -> web.Response:
        return web.json_response(
            {"message": ["닉네임은 필수입니다", "닉네임이 너무 깁니다"]}, status=400
        )

    async def logout(request: web.Request) -> web.Response:
        return web.Response(status=204)

    async def slow(request: web.Request) -> web.Response:
        await asyncio.sleep(1)
        return web.json_response({})

    app = web.Application()
    app.router.add_post("/auth/login", login)
    app.router.add_get("/auth/profile", profile)
    app.router.add_patch("/auth/refresh", refresh)
    app.router.add_patch("/user/nickname", nickname)
    app.router.add_delete("/auth/logout", logout)
    app.router.add_get("/slow", slow)
    return app


@pytest.fixture
def counters() -> dict[str, int]:
    return {"profile": 0, "refresh": 0}


@pytest_asyncio.fixture()
async def server(counters):
    server = TestServer(_backend(counters))
    await server.start_server()
    try:
        yield server
    finally:
        await server.close()


@pytest_asyncio.fixture()
async def http(server):
    client = HTTPClient(str(server.make_url("")), timeout=5, concurrency=2)
    try:
        yield client
    finally:
        await client.close()


@pytest.fixture
def stack(http):
    session = SessionStore()
    session.init()
    redirects: list[str] = []
    navigator = Navigator(on_redirect=redirects.append, current_path="/guild")
    pipeline = RequestPipeline(http, session, navigator)
    auth = AuthService(pipeline, session, MemberListCache(), clear_credentials=http.clear_cookies)
    return session, pipeline, auth, redirects


@pytest.mark.asyncio
async def test_cookie_renewal_round_trip(stack, counters, http) -> None:
    session, _pipeline, auth, redirects = stack

    await auth.login("tester")
    identity = await auth.load_profile()

    assert identity.role is Role.MASTER
    assert session.is_authenticated
    assert counters == {"profile": 2, "refresh": 1}
    assert redirects == []
    assert http.get_health_status()["cookies"] == 2


@pytest.mark.asyncio
async def test_without_cookies_session_expires(stack, counters) -> None:
    session, pipeline, _auth, redirects = stack
    session.set_unauthenticated()

    assert await pipeline.get("/auth/profile") is None
    assert counters == {"profile": 1, "refresh": 1}
    assert redirects == ["/"]


@pytest.mark.asyncio
async def test_logout_forgets_cookies(stack, counters) -> None:
    session, pipeline, auth, _redirects = stack
    await auth.login("tester")

    await auth.logout()

    assert not session.is_authenticated
    assert await pipeline.get("/auth/profile") is None
    assert counters["refresh"] == 1


@pytest.mark.asyncio
async def test_validation_messages_are_joined(stack) -> None:
    _session, pipeline, _auth, _redirects = stack

    with pytest.raises(RequestError) as exc_info:
        await pipeline.patch("/user/nickname", {"nickname": ""})

    assert exc_info.value.user_message == "닉네임은 필수입니다, 닉네임이 너무 깁니다"
    assert exc_info.value.status == 400


@pytest.mark.asyncio
async def test_unknown_route_falls_back_to_generic_message(stack) -> None:
    _session, pipeline, _auth, _redirects = stack

    with pytest.raises(RequestError) as exc_info:
        await pipeline.get("/does-not-exist")

    assert exc_info.value.status == 404
    assert exc_info.value.user_message == "API 요청에 실패했습니다."


@pytest.mark.asyncio
async def test_timeout_raises_transport_error(server) -> None:
    client = HTTPClient(str(server.make_url("")), timeout=0.1)
    try:
        with pytest.raises(TransportError):
            await client.request("GET", "/slow")
        assert client.get_health_status()["total_errors"] == 1
    finally:
        await client.close()
