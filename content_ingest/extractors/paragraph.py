"""Paragraph (paragraph.xyz) extractor."""

from __future__ import annotations

from content_ingest.extractors.base import BaseExtractor, SelectorStrategy
from content_ingest.models import Platform

BASE_URL = "https://paragraph.xyz"


class ParagraphExtractor(BaseExtractor):
    platform = Platform.PARAGRAPH
    base_url = BASE_URL

    container_strategies = (
        SelectorStrategy("article"),
        SelectorStrategy(".post"),
        SelectorStrategy("[data-testid='post']"),
    )
    title_selectors = (
        "h1, h2, h3",
        "[data-testid='post-title']",
    )
    author_selectors = (
        ".author",
        "[data-testid='author']",
    )
    content_selectors = (
        "p",
        ".post-content p",
    )
