"""Saved landing page endpoints"""

import re
from fastapi import APIRouter, Depends, Response
from landify_api.api.deps import get_page_store
from landify_api.core.page_store import PageStore
from landify_api.models.errors import ApplicationError, ErrorCode
from landify_api.models.schemas import PageRequest
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


def _not_found(page_id: str) -> ApplicationError:
    return ApplicationError(code=ErrorCode.NOT_FOUND, message=f"Landing page not found: {page_id}")


@router.post("/pages", status_code=201)
async def save_page(request: PageRequest, store: PageStore = Depends(get_page_store)) -> dict:
    page_id = store.save(request.business_data, request.content)
    return {"id": page_id}


@router.get("/pages")
async def list_pages(store: PageStore = Depends(get_page_store)) -> dict:
    return {"pages": [page.to_wire() for page in store.list_all()]}


@router.get("/pages/{page_id}")
async def get_page(page_id: str, store: PageStore = Depends(get_page_store)) -> dict:
    page = store.get(page_id)
    if page is None:
        raise _not_found(page_id)
    return page.to_wire()


@router.put("/pages/{page_id}")
async def update_page(page_id: str, request: PageRequest, store: PageStore = Depends(get_page_store)) -> dict:
    if not store.update(page_id, request.business_data, request.content):
        raise _not_found(page_id)
    return store.get(page_id).to_wire()


@router.delete("/pages/{page_id}", status_code=204)
async def delete_page(page_id: str, store: PageStore = Depends(get_page_store)) -> Response:
    if not store.delete(page_id):
        raise _not_found(page_id)
    return Response(status_code=204)


@router.get("/pages/{page_id}/html")
async def download_page_html(page_id: str, store: PageStore = Depends(get_page_store)) -> Response:
    """The page's HTML document as a file download"""
    page = store.get(page_id)
    if page is None:
        raise _not_found(page_id)
    slug = re.sub(r"[^a-z0-9]+", "-", page.business_data.name.lower()).strip("-") or "landing-page"
    return Response(
        content=page.content.html_document,
        media_type="text/html",
        headers={
            "Content-Disposition": f'attachment; filename="{slug}.html"',
            "X-Content-Type-Options": "nosniff",
        },
    )
