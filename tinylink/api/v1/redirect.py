from fastapi import APIRouter, Depends, status
from fastapi.responses import RedirectResponse
from tinylink.api.v1.errors import to_http_error
from tinylink.dependencies import get_link_service
from tinylink.exceptions import TinyLinkError
from tinylink.services.link_service import LinkService

router = APIRouter(tags=["redirect"])


@router.get("/{code}")
async def redirect_to_url(
    code: str,
    link_service: LinkService = Depends(get_link_service)
):
    """
    Redirect to the link's URL.

    The click is counted in storage before responding, so stats read
    right after a redirect already include it.
    """
    try:
        link = await link_service.resolve_redirect(code)
    except TinyLinkError as exc:
        raise to_http_error(exc) from exc

    return RedirectResponse(url=link.url, status_code=status.HTTP_302_FOUND)
