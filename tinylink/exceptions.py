"""
Errors raised by the link registry and code generator.

The HTTP layer maps these onto status codes (see api/v1/errors.py);
nothing below this module knows about HTTP.
"""


class TinyLinkError(Exception):
    """Base class for every error the core raises"""


class InvalidInput(TinyLinkError):
    """Malformed URL or code, detected before any storage access"""


class InvalidCode(InvalidInput):
    def __init__(self, code: str):
        super().__init__("code must match [A-Za-z0-9]{6,8}")
        self.code = code


class InvalidURL(InvalidInput):
    def __init__(self, url: str, reason: str = "invalid url"):
        super().__init__(reason)
        self.url = url


class CodeConflict(TinyLinkError):
    def __init__(self, code: str, message: str = "code already exists"):
        super().__init__(message)
        self.code = code


class CodeSpaceExhausted(CodeConflict):
    """No unused code was found within the configured number of attempts"""

    def __init__(self, attempts: int):
        super().__init__(
            code="",
            message=f"Could not generate unique code after {attempts} attempts",
        )
        self.attempts = attempts


class NotFound(TinyLinkError):
    def __init__(self, code: str):
        super().__init__("not found")
        self.code = code


class StorageUnavailable(TinyLinkError):
    """The storage backend could not be reached or the operation did not complete"""
