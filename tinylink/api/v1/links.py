from typing import List

from fastapi import APIRouter, Depends, status
from tinylink.api.v1.errors import to_http_error
from tinylink.dependencies import get_link_service
from tinylink.exceptions import TinyLinkError
from tinylink.schemas.link import LinkCreate, LinkResponse
from tinylink.services.link_service import LinkService

router = APIRouter(prefix="/links", tags=["links"])


@router.get("", response_model=List[LinkResponse])
async def list_links(link_service: LinkService = Depends(get_link_service)):
    """List all links, newest first"""
    try:
        return await link_service.list_links()
    except TinyLinkError as exc:
        raise to_http_error(exc) from exc


@router.post("", response_model=LinkResponse, status_code=status.HTTP_201_CREATED)
async def create_link(
    link_data: LinkCreate,
    link_service: LinkService = Depends(get_link_service)
):
    """Create a link (custom code optional)"""
    try:
        return await link_service.create_link(link_data.url, code=link_data.code)
    except TinyLinkError as exc:
        raise to_http_error(exc) from exc


@router.get("/{code}", response_model=LinkResponse)
async def get_link(
    code: str,
    link_service: LinkService = Depends(get_link_service)
):
    """Get a link and its click stats"""
    try:
        return await link_service.get_link(code)
    except TinyLinkError as exc:
        raise to_http_error(exc) from exc


@router.delete("/{code}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_link(
    code: str,
    link_service: LinkService = Depends(get_link_service)
):
    """Delete a link permanently"""
    try:
        await link_service.delete_link(code)
    except TinyLinkError as exc:
        raise to_http_error(exc) from exc
