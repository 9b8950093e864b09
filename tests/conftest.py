import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path for CI environments where
# Python might not automatically include it.
PROJECT_ROOT = Path(__file__).parent.parent.resolve()
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from config.config_loader import ClientSettings, ConfigLoader
from services.action_dispatcher import ActionDispatcher
from services.member_cache import MemberListCache
from services.navigation import Navigator
from services.request_pipeline import RequestPipeline
from services.session_state import SessionStore
from tests.factories import ScriptedTransport, make_identity


@pytest.fixture(autouse=True)
def reset_config_loader():
    """Keep ConfigLoader's class-level state from leaking between tests."""
    ConfigLoader.reset()
    yield
    ConfigLoader.reset()


@pytest.fixture
def settings() -> ClientSettings:
    return ClientSettings(base_url="http://api.test", timeout_seconds=5, concurrency=4)


@pytest.fixture
def transport() -> ScriptedTransport:
    return ScriptedTransport()


@pytest.fixture
def session() -> SessionStore:
    store = SessionStore()
    store.init()
    return store


@pytest.fixture
def authed_session(session: SessionStore) -> SessionStore:
    """Session signed in as the MASTER of guild-1."""
    session.set_authenticated(make_identity())
    return session


@pytest.fixture
def redirects() -> list[str]:
    return []


@pytest.fixture
def navigator(redirects: list[str]) -> Navigator:
    """Navigator parked on the guild lounge, recording redirects."""
    return Navigator(on_redirect=redirects.append, current_path="/guild")


@pytest.fixture
def pipeline(transport, session, navigator) -> RequestPipeline:
    return RequestPipeline(transport, session, navigator)


@pytest.fixture
def member_cache() -> MemberListCache:
    return MemberListCache()


@pytest.fixture
def prompts() -> list[str]:
    return []


@pytest.fixture
def dispatcher(pipeline, session, member_cache, prompts) -> ActionDispatcher:
    def _confirm(prompt: str) -> bool:
        prompts.append(prompt)
        return True

    return ActionDispatcher(pipeline, session, member_cache, confirm=_confirm)
