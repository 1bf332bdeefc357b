"""Mirror (mirror.xyz) extractor.

Mirror profile pages list entries as post cards tagged with
data-testid="post-card"; some themes only emit a .post-card class or
plain <article> elements. Mirror exposes no engagement counts in the
listing markup, so metrics stay at zero.
"""

from __future__ import annotations

from content_ingest.extractors.base import BaseExtractor, SelectorStrategy
from content_ingest.models import Platform

BASE_URL = "https://mirror.xyz"


class MirrorExtractor(BaseExtractor):
    platform = Platform.MIRROR
    base_url = BASE_URL

    container_strategies = (
        SelectorStrategy("[data-testid='post-card']"),
        SelectorStrategy(".post-card"),
        SelectorStrategy("article"),
    )
    title_selectors = (
        "h1, h2, h3",
        "[data-testid='post-title']",
        ".post-title",
    )
    author_selectors = (
        "[data-testid='author-name']",
        ".author-name",
    )
    content_selectors = (
        "p",
        ".post-content p",
    )
