from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError

from archive_cms import messages
from archive_cms.content import ArticleItem, PhotographItem, merge_by_updated, tag_records
from archive_cms.content_client import ContentApiClient, ContentApiError

logger = logging.getLogger(__name__)

# idle -> loading -> ready | errored
STATES: list[str] = ["idle", "loading", "ready", "errored"]

_TRANSITIONS: dict[str, list[str]] = {
    "idle": ["loading"],
    "loading": ["ready", "errored"],
    "ready": ["loading"],
    "errored": ["loading"],
}


class FeedStateError(Exception):
    """Raised when the feed is moved through an invalid state transition."""


@dataclass
class ContentFeed:
    state: str = "idle"
    items: List[ArticleItem | PhotographItem] = field(default_factory=list)
    error: Optional[str] = None

    def transition(self, to_state: str) -> None:
        if to_state not in _TRANSITIONS.get(self.state, []):
            raise FeedStateError(f"Transition not allowed: {self.state} -> {to_state}")
        self.state = to_state

    @property
    def is_empty(self) -> bool:
        return self.state == "ready" and not self.items


@dataclass(frozen=True)
class _SourceResult:
    items: List[ArticleItem | PhotographItem]
    failed: bool  # fetch/parse failure, as opposed to an unsuccessful envelope


async def _load_source(client: ContentApiClient, kind: str) -> _SourceResult:
    try:
        envelope = await client.list_records(kind)
    except ContentApiError as e:
        logger.warning("Could not load %s list: %s", kind, e)
        return _SourceResult(items=[], failed=True)

    if not envelope.get("success"):
        logger.info("%s list reported failure: %s", kind, envelope.get("error"))
        return _SourceResult(items=[], failed=False)

    try:
        return _SourceResult(items=tag_records(kind, envelope["data"]), failed=False)
    except (PydanticValidationError, TypeError) as e:
        logger.warning("Malformed %s records: %s", kind, e)
        return _SourceResult(items=[], failed=True)


async def load_content_feed(client: ContentApiClient, feed: ContentFeed | None = None) -> ContentFeed:
    """
    Fetch articles and photographs together and merge them newest first.

    Each source fails on its own: an unsuccessful envelope contributes no
    items, a fetch/parse failure contributes no items and sets the banner.
    The feed only ends `errored` when nothing could be shown because of such
    a failure.
    """
    feed = feed or ContentFeed()
    feed.transition("loading")
    feed.items = []
    feed.error = None

    articles, photographs = await asyncio.gather(
        _load_source(client, "article"),
        _load_source(client, "photograph"),
    )

    feed.items = merge_by_updated(articles.items, photographs.items)
    if articles.failed or photographs.failed:
        feed.error = messages.CONTENT_LOAD_FAILED

    if feed.error and not feed.items:
        feed.transition("errored")
    else:
        feed.transition("ready")
    return feed
