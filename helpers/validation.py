"""
Local input checks run before nickname/tag requests are sent.

Mirrors the rules the signup and profile forms enforce: Hangul syllables,
ASCII letters and digits only; tags are 1-8 characters, nicknames 2-10.
"""

from __future__ import annotations

import re

from helpers.error_messages import format_user_error
from utils.errors import ValidationError

# Applied with fullmatch: a trailing newline must not slip through
_ALLOWED = re.compile(r"[가-힣a-zA-Z0-9]+")

MAX_TAG_LENGTH = 8
MIN_NICKNAME_LENGTH = 2
MAX_NICKNAME_LENGTH = 10


def validate_tag(tag: str) -> str:
    """
    Check a guild or user tag.

    Raises:
        ValidationError: empty, longer than MAX_TAG_LENGTH, or with disallowed characters.
    """
    if not isinstance(tag, str) or not 1 <= len(tag) <= MAX_TAG_LENGTH:
        raise ValidationError(format_user_error("INVALID_TAG"))
    if not _ALLOWED.fullmatch(tag):
        raise ValidationError(format_user_error("INVALID_TAG"))
    return tag


def validate_nickname(nickname: str) -> str:
    """
    Check a nickname.

    Raises:
        ValidationError: outside MIN/MAX_NICKNAME_LENGTH, or containing
            whitespace/special characters.
    """
    if not isinstance(nickname, str):
        raise ValidationError(format_user_error("INVALID_NICKNAME"))
    if not MIN_NICKNAME_LENGTH <= len(nickname) <= MAX_NICKNAME_LENGTH:
        raise ValidationError(format_user_error("NICKNAME_LENGTH"))
    if not _ALLOWED.fullmatch(nickname):
        raise ValidationError(format_user_error("INVALID_NICKNAME"))
    return nickname
