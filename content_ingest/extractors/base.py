"""Base class and shared helpers for platform extractors.

Every extractor works the same way over a fetched profile page:

  1. Try each container strategy in order; the first selector that
     matches at least one element defines the post cards.
  2. For every card, walk the per-field selector chains (title, link,
     author, content) and take the first non-empty hit.
  3. Drop cards missing a title or link, or whose content fails the
     minimum length gate. Everything else becomes a NormalizedPost.

Subclasses only declare selectors and their platform's base URL.
"""

from __future__ import annotations

import logging
import math
import re
from abc import ABC
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterator, Optional, Sequence
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup, Tag

from content_ingest.models import Author, Metrics, NormalizedPost, Platform, utcnow
from content_ingest.urls import derive_post_id, normalize_url

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 200
EXCERPT_LENGTH = 300
FALLBACK_CONTENT_LENGTH = 1000
DEFAULT_AUTHOR = "Unknown Author"

_HASHTAG = re.compile(r"#(\w+)")
_NON_DIGIT = re.compile(r"[^\d]")


@dataclass(frozen=True)
class SelectorStrategy:
    """One candidate CSS selector for locating post containers."""

    selector: str

    def try_extract(self, doc: Tag) -> Optional[list[Tag]]:
        matches = doc.select(self.selector)
        return matches or None


# ── Field helpers ──────────────────────────────────────────────────────────


def first_text(container: Tag, selectors: Sequence[str]) -> str:
    """Text of the first element matched by the first selector that has any."""
    for selector in selectors:
        el = container.select_one(selector)
        if el is None:
            continue
        text = el.get_text(" ", strip=True)
        if text:
            return text
    return ""


def joined_text(container: Tag, selectors: Sequence[str]) -> str:
    """Concatenated text of all elements matched by the first productive selector."""
    for selector in selectors:
        parts = [el.get_text(" ", strip=True) for el in container.select(selector)]
        text = " ".join(p for p in parts if p)
        if text:
            return text
    return ""


def first_attr(container: Tag, selectors: Sequence[str], attr: str) -> str:
    for selector in selectors:
        el = container.select_one(selector)
        if el is not None and el.get(attr):
            return str(el.get(attr)).strip()
    return ""


def extract_tags(text: str) -> list[str]:
    """Hashtags (#word) in `text`, deduplicated, in order of appearance."""
    return list(dict.fromkeys(_HASHTAG.findall(text)))


def extract_number(text: str) -> int:
    """Strip non-digits and parse; 0 when nothing numeric remains."""
    digits = _NON_DIGIT.sub("", text or "")
    return int(digits) if digits else 0


def estimate_reading_time(text: str) -> int:
    """Minutes to read `text` at 200 words per minute, rounded up."""
    return math.ceil(len(text.split()) / WORDS_PER_MINUTE)


def parse_published_at(value: str) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp from a <time datetime=...> attribute."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def username_from_link(profile_link: str) -> Optional[str]:
    """Best-effort handle from a profile link.

    https://medium.com/@uniswap  -> uniswap
    https://mirror.xyz/dao.eth   -> dao.eth
    https://team.medium.com      -> team
    """
    try:
        parts = urlsplit(profile_link)
    except ValueError:
        return None
    segments = [s for s in parts.path.split("/") if s]
    if segments:
        return segments[0].lstrip("@") or None
    host = parts.hostname or ""
    labels = host.split(".")
    if len(labels) > 2 and labels[0] != "www":
        return labels[0]
    return None


# ── Extractor ──────────────────────────────────────────────────────────────


class BaseExtractor(ABC):
    """Turns a fetched profile page into NormalizedPost records."""

    platform: Platform
    base_url: str

    container_strategies: tuple[SelectorStrategy, ...] = ()
    title_selectors: tuple[str, ...] = ("h1, h2, h3",)
    link_selectors: tuple[str, ...] = ("a[href]",)
    author_selectors: tuple[str, ...] = ()
    avatar_selectors: tuple[str, ...] = ()
    content_selectors: tuple[str, ...] = ("p",)
    clap_selectors: tuple[str, ...] = ()
    comment_selectors: tuple[str, ...] = ()

    def __init__(self, min_content_length: int = 10):
        self.min_content_length = min_content_length

    @property
    def name(self) -> str:
        return self.platform.value

    def find_containers(self, doc: Tag) -> list[Tag]:
        """Apply container strategies in order; first non-empty match wins."""
        for strategy in self.container_strategies:
            matches = strategy.try_extract(doc)
            if matches:
                logger.debug(
                    "[%s] %d containers via %r", self.name, len(matches), strategy.selector
                )
                return matches
        return []

    def extract(self, html: str, profile_link: str, max_posts: int) -> Iterator[NormalizedPost]:
        """Yield at most `max_posts` posts from `html`, in document order.

        A card that raises while being parsed is logged and skipped; the
        remaining cards are still processed.
        """
        if max_posts <= 0:
            return

        soup = BeautifulSoup(html, "html.parser")
        yielded = 0

        for container in self.find_containers(soup):
            try:
                post = self.parse_container(container, profile_link)
            except Exception as exc:
                logger.error("[%s] Error parsing post from %s: %s", self.name, profile_link, exc)
                continue

            if post is None:
                continue

            yield post
            yielded += 1
            if yielded >= max_posts:
                return

    def parse_container(self, container: Tag, profile_link: str) -> Optional[NormalizedPost]:
        """Build a post from one card, or None if it fails a quality check."""
        title = first_text(container, self.title_selectors)
        link = first_attr(container, self.link_selectors, "href")
        if not title or not link:
            return None

        if not link.startswith("http"):
            link = urljoin(self.base_url, link)
        url = normalize_url(link)

        content = joined_text(container, self.content_selectors)
        if not content:
            content = container.get_text(" ", strip=True)[:FALLBACK_CONTENT_LENGTH]

        if len(content.strip()) < self.min_content_length:
            logger.warning("[%s] Skipping post with insufficient content: %s", self.name, title)
            return None

        full_text = container.get_text(" ", strip=True)
        published = parse_published_at(first_attr(container, ("time[datetime]",), "datetime"))

        return NormalizedPost(
            post_id=derive_post_id(url),
            title=title,
            content=content,
            excerpt=content[:EXCERPT_LENGTH],
            url=url,
            platform=self.platform,
            author=Author(
                name=first_text(container, self.author_selectors) or DEFAULT_AUTHOR,
                username=username_from_link(profile_link),
                profile_url=profile_link,
                avatar_url=first_attr(container, self.avatar_selectors, "src") or None,
            ),
            published_at=published or utcnow(),
            tags=extract_tags(full_text),
            metrics=Metrics(
                claps=extract_number(first_text(container, self.clap_selectors)),
                comments=extract_number(first_text(container, self.comment_selectors)),
            ),
            featured_image=first_attr(container, ("img[src]",), "src") or None,
            reading_time=estimate_reading_time(content),
        )
