"""
Test Factories Module

Centralized factory functions for creating test objects: config dicts and
files, a scripted HTTP transport, and identity/member builders.
"""

from .config_factories import (
    make_config,
    temp_config_file,
)
from .http_factories import (
    ScriptedTransport,
    make_response,
    network_failure,
)
from .model_factories import (
    identity_payload,
    make_identity,
    make_member,
    member_payload,
)

__all__ = [
    "ScriptedTransport",
    "identity_payload",
    "make_config",
    "make_identity",
    "make_member",
    "make_response",
    "member_payload",
    "network_failure",
    "temp_config_file",
]
