"""
Content dashboard: one table of articles and photographs, newest first.

The page is rendered server-side from a fresh fetch on every request. Delete
buttons are shown only to principals holding `content:delete`, and the delete
endpoint checks the same capability before calling the owning API.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from archive_cms import messages
from archive_cms.auth import CONTENT_DELETE, Principal, get_optional_principal, require_capability
from archive_cms.content import (
    CONTENT_KINDS,
    ArticleItem,
    PhotographItem,
    effective_date,
    secondary_text,
)
from archive_cms.content_client import ContentApiClient, ContentApiError
from archive_cms.errors import NotFound
from archive_cms.feed import ContentFeed, load_content_feed
from archive_cms.schemas import ContentFeedEnvelope

logger = logging.getLogger(__name__)

router = APIRouter(tags=["dashboard"])

TEMPLATES = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


def get_content_client() -> ContentApiClient:
    return ContentApiClient.from_env()


def format_date(value: Optional[datetime]) -> str:
    if value is None:
        return messages.NOT_PUBLISHED
    return value.strftime("%Y/%m/%d")


def _row(item: ArticleItem | PhotographItem, can_delete: bool) -> dict[str, Any]:
    item_id = quote(item.id, safe="")
    return {
        "key": item.display_key,
        "kind": item.kind,
        "label": messages.KIND_LABELS[item.kind],
        "title": item.title,
        "secondary": secondary_text(item),
        "author": item.author,
        "date": format_date(effective_date(item)),
        "updated": format_date(item.updated_at),
        "update_url": f"/dashboard/update/{item.kind}/{item_id}",
        "delete_url": f"/dashboard/{item.kind}/{item_id}/delete" if can_delete else None,
        "confirm": messages.delete_confirm(item.kind, item.title),
    }


async def _render_dashboard(
    request: Request,
    client: ContentApiClient,
    principal: Optional[Principal],
    *,
    notice: Optional[str] = None,
    error: Optional[str] = None,
    status_code: int = 200,
):
    feed: ContentFeed = await load_content_feed(client)
    can_delete = principal is not None and principal.can(CONTENT_DELETE)

    context = {
        "title": messages.DASHBOARD_TITLE,
        "state": feed.state,
        "notice": notice,
        "error": error or feed.error,
        "rows": [_row(item, can_delete) for item in feed.items],
        "empty_text": messages.NO_CONTENT,
    }
    return TEMPLATES.TemplateResponse(request, "dashboard.html", context, status_code=status_code)


@router.get("/dashboard")
async def dashboard(
    request: Request,
    notice: Optional[str] = None,
    principal: Optional[Principal] = Depends(get_optional_principal),
    client: ContentApiClient = Depends(get_content_client),
):
    notice_text = messages.delete_succeeded(notice) if notice in CONTENT_KINDS else None
    return await _render_dashboard(request, client, principal, notice=notice_text)


@router.get("/api/dashboard/contents", response_model=ContentFeedEnvelope)
async def dashboard_contents(client: ContentApiClient = Depends(get_content_client)):
    feed = await load_content_feed(client)
    return {"success": feed.state == "ready", "data": feed.items, "error": feed.error}


@router.post("/dashboard/{kind}/{item_id:path}/delete")
async def delete_content(
    request: Request,
    kind: str,
    item_id: str,
    principal: Principal = Depends(require_capability(CONTENT_DELETE)),
    client: ContentApiClient = Depends(get_content_client),
):
    if kind not in CONTENT_KINDS:
        raise NotFound(messages.NOT_FOUND)

    try:
        result = await client.delete_record(kind, item_id, access_token=principal.token)
    except ContentApiError as e:
        logger.warning("Delete %s %s failed: %s", kind, item_id, e)
        return await _render_dashboard(
            request, client, principal, error=messages.delete_failed(None), status_code=502
        )

    if not result.get("success"):
        logger.info("Delete %s %s rejected: %s", kind, item_id, result.get("error"))
        return await _render_dashboard(
            request, client, principal, error=messages.delete_failed(result.get("error")), status_code=502
        )

    logger.info("%s %s deleted by %s", kind, item_id, principal.subject)
    return RedirectResponse(url=f"/dashboard?notice={kind}", status_code=303)
