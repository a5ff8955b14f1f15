"""Validation utilities for TinyLink."""

import re

from pydantic import HttpUrl, TypeAdapter, ValidationError

from tinylink.exceptions import InvalidURL


_web_url = TypeAdapter(HttpUrl)


def validate_web_url(url: str) -> str:
    """Check that url is an absolute http/https URL.

    The URL is stored as the caller wrote it (minus surrounding
    whitespace); pydantic's HttpUrl is only used to judge it, since
    its normalised form adds trailing slashes.

    Raises:
        InvalidURL: if url is missing, not a string, or not a web URL
    """
    if not url or not isinstance(url, str):
        raise InvalidURL(url, "url is required")

    url = url.strip()
    # HttpUrl drops tabs and newlines before parsing, so check the raw text
    if any(c.isspace() or ord(c) < 0x20 or c == "\x7f" for c in url):
        raise InvalidURL(url)

    try:
        _web_url.validate_python(url)
    except ValidationError as exc:
        raise InvalidURL(url) from exc

    return url


CODE_MIN_LENGTH = 6
CODE_MAX_LENGTH = 8
CODE_PATTERN = re.compile(rf"[A-Za-z0-9]{{{CODE_MIN_LENGTH},{CODE_MAX_LENGTH}}}")


def is_valid_code(code: str) -> bool:
    """True iff code is 6 to 8 ASCII letters or digits (case-sensitive)."""
    return isinstance(code, str) and CODE_PATTERN.fullmatch(code) is not None
