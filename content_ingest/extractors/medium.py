"""Medium profile/publication extractor.

Medium renders profile pages with React and the markup has drifted a
few times, so each field has a fallback chain:

  - Post cards: <article data-testid="post-preview"> on current pages,
    bare <article> on older publication pages, and .postArticle on the
    legacy stream layout.
  - Titles are the first heading; the legacy layout uses .graf--title.
  - Clap counts live in [data-testid="clapCount"] when rendered at all.

Relative links (/@user/slug-abc123) resolve against medium.com, and the
URL normalizer drops Medium query strings entirely.
"""

from __future__ import annotations

from content_ingest.extractors.base import BaseExtractor, SelectorStrategy
from content_ingest.models import Platform

BASE_URL = "https://medium.com"


class MediumExtractor(BaseExtractor):
    platform = Platform.MEDIUM
    base_url = BASE_URL

    container_strategies = (
        SelectorStrategy("article[data-testid='post-preview']"),
        SelectorStrategy("article"),
        SelectorStrategy("[data-testid='post-preview']"),
        SelectorStrategy(".postArticle"),
    )
    title_selectors = (
        "h1, h2, h3",
        "[data-testid='post-preview-title']",
        ".graf--title",
    )
    link_selectors = (
        "a[href]",
        "[data-testid='post-preview-link']",
    )
    author_selectors = (
        "[data-testid='authorName']",
        ".graf--author",
        ".postMetaInline-authorLockup",
    )
    avatar_selectors = ("img[data-testid='authorPhoto']",)
    content_selectors = (
        "p",
        "[data-testid='post-preview'] p",
        ".post-content p",
        ".section-content p",
    )
    clap_selectors = ("[data-testid='clapCount']",)
    comment_selectors = ("[data-testid='responsesCount']",)
