"""
Config Factories

Config mappings shaped like ``config/config.yaml`` and throwaway YAML files
for exercising ``ConfigLoader``.
"""

from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

if TYPE_CHECKING:
    from collections.abc import Iterator


def make_config(
    base_url: str = "http://api.test",
    timeout_seconds: float = 5,
    concurrency: int = 4,
    logging_level: str = "INFO",
    session: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build a client config mapping.

    Examples:
        make_config(concurrency=1)
        make_config(session={"entry_path": "/home"})
    """
    config: dict[str, Any] = {
        "api": {
            "base_url": base_url,
            "timeout_seconds": timeout_seconds,
            "concurrency": concurrency,
            "allow_ip_cookies": True,
        },
        "logging": {"level": logging_level},
    }
    if session is not None:
        config["session"] = dict(session)
    return config


@contextlib.contextmanager
def temp_config_file(
    config: dict[str, Any] | None = None,
    content: str | None = None,
) -> Iterator[str]:
    """
    Yield the path of a temporary YAML file, deleted afterwards.

    ``content`` is written verbatim (for broken-file cases); otherwise
    ``config`` (or ``make_config()``) is dumped as YAML.
    """
    fd, path = tempfile.mkstemp(prefix="client-config-", suffix=".yaml")
    with os.fdopen(fd, "w", encoding="utf-8") as fh:
        if content is not None:
            fh.write(content)
        else:
            yaml.safe_dump(config if config is not None else make_config(), fh)
    try:
        yield path
    finally:
        with contextlib.suppress(OSError):
            Path(path).unlink()
