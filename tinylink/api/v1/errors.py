import logging

from fastapi import HTTPException, status

from tinylink.exceptions import (
    CodeConflict,
    InvalidInput,
    NotFound,
    StorageUnavailable,
    TinyLinkError,
)


logger = logging.getLogger(__name__)


def to_http_error(exc: TinyLinkError) -> HTTPException:
    """Map a core error onto the HTTP status the API promises"""
    if isinstance(exc, InvalidInput):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, CodeConflict):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, NotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="not found")
    if isinstance(exc, StorageUnavailable):
        logger.error("Storage unavailable: %s", exc)
    else:
        logger.exception("Unexpected core error: %s", exc)
    # Storage details stay in the logs
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error"
    )
