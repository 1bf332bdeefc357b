"""Ingestion orchestrator: scrape, deduplicate and persist posts.

This is the core pipeline:
  1. Resolve the company and its profile link for a platform
  2. Fetch the profile page and run the platform extractor over it
  3. Drop posts that fail the content gate or already exist
  4. Persist the rest, one post at a time (with error isolation)

`run_all` repeats that for every active company and platform, pausing
between companies so third-party sites don't rate-limit us.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from content_ingest.config import PipelineConfig
from content_ingest.errors import (
    CompanyNotFoundError,
    DuplicateRecordError,
    FetchError,
    MissingLinkError,
)
from content_ingest.extractors import get_extractor, resolve_platform
from content_ingest.fetch import FetchClient
from content_ingest.models import Company, IngestionRecord, Platform
from content_ingest.storage import Database

logger = logging.getLogger(__name__)


class IngestionPipeline:
    """Orchestrates content ingestion for one company or all of them."""

    def __init__(
        self,
        config: PipelineConfig,
        db: Database,
        fetch_client: Optional[FetchClient] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        self.db = db
        self.fetch_client = fetch_client or FetchClient.from_config(config)
        self._sleep = sleep

    # ------------------------------------------------------------------
    # Single company / platform
    # ------------------------------------------------------------------

    def ingest(
        self,
        company_name: str,
        platform: Platform | str,
        max_posts: Optional[int] = None,
        raise_on_fetch_error: bool = False,
    ) -> list[IngestionRecord]:
        """Scrape one company's profile on one platform and save new posts.

        Raises CompanyNotFoundError if the company is missing or inactive
        and MissingLinkError if it has no link for `platform`. A failed
        fetch yields an empty list unless `raise_on_fetch_error` is set.
        """
        platform = resolve_platform(platform)
        company = self.db.companies.find_by_name(company_name)
        if company is None or not company.active:
            raise CompanyNotFoundError(company_name)

        return self._ingest_platform(
            company,
            platform,
            max_posts if max_posts is not None else self.config.default_max_posts,
            raise_on_fetch_error=raise_on_fetch_error,
        )

    def _ingest_platform(
        self,
        company: Company,
        platform: Platform,
        max_posts: int,
        raise_on_fetch_error: bool = False,
    ) -> list[IngestionRecord]:
        link = company.link_for(platform)
        if not link:
            raise MissingLinkError(company.name, platform.value)

        try:
            html = self.fetch_client.fetch(link)
        except FetchError as exc:
            if raise_on_fetch_error:
                raise
            logger.warning("[%s] %s fetch failed, treating as 0 posts: %s", company.name, platform.value, exc)
            return []

        extractor = get_extractor(platform, self.config.min_content_length)
        saved: list[IngestionRecord] = []

        for post in extractor.extract(html, link, max_posts):
            if len(post.content.strip()) < self.config.min_content_length:
                logger.warning("[%s] Skipping post %s - insufficient content", company.name, post.post_id)
                continue

            try:
                if self.db.records.exists(post.post_id, post.url):
                    logger.debug("[%s] Post %s already exists (by postId or URL), skipping", company.name, post.post_id)
                    continue

                record = self.db.records.insert(
                    IngestionRecord(company_name=company.name, platform=platform, post=post)
                )
            except DuplicateRecordError:
                # Lost a race with a concurrent run; the post is stored either way
                logger.debug("[%s] Post %s inserted concurrently, skipping", company.name, post.post_id)
                continue
            except Exception as exc:
                logger.error("[%s] Error saving post %s: %s", company.name, post.post_id, exc)
                continue

            saved.append(record)
            logger.info("[%s] Saved post %s (%s)", company.name, post.post_id, post.url)

        logger.info("[%s] Scraped and saved %d %s posts", company.name, len(saved), platform.value)
        return saved

    # ------------------------------------------------------------------
    # Batch
    # ------------------------------------------------------------------

    def run_all(self, max_posts_per_company: Optional[int] = None) -> list[IngestionRecord]:
        """Ingest every active company across all its platforms.

        Companies run sequentially with `company_delay_seconds` between
        them. Each company (and each platform within it) runs in
        isolation: if one fails, the others continue. Never raises.
        """
        max_posts = (
            max_posts_per_company
            if max_posts_per_company is not None
            else self.config.default_max_posts
        )

        try:
            companies = self.db.companies.list_active()
        except Exception as exc:
            logger.error("Could not list active companies: %s", exc)
            return []

        logger.info("Starting batch run over %d active companies (max %d posts each)", len(companies), max_posts)

        all_saved: list[IngestionRecord] = []
        stats: dict[str, int] = {}

        for index, company in enumerate(companies):
            if index > 0 and self.config.company_delay_seconds > 0:
                self._sleep(self.config.company_delay_seconds)

            try:
                saved = self._ingest_company(company, max_posts)
            except Exception as exc:
                logger.error("[%s] FAILED: %s", company.name, exc)
                stats[company.name] = 0
                continue

            all_saved.extend(saved)
            stats[company.name] = len(saved)

        logger.info("Batch run complete: %d new records", len(all_saved))
        self._log_stats(stats)
        return all_saved

    def _ingest_company(self, company: Company, max_posts: int) -> list[IngestionRecord]:
        platforms = company.platforms
        if not platforms:
            logger.info("[%s] No platform links configured, skipping", company.name)
            return []

        saved: list[IngestionRecord] = []
        for platform in platforms:
            try:
                saved.extend(self._ingest_platform(company, platform, max_posts))
            except Exception as exc:
                logger.error("[%s] %s FAILED: %s", company.name, platform.value, exc)
        return saved

    def _log_stats(self, stats: dict[str, int]) -> None:
        logger.info("=== Ingestion Summary ===")
        for name, count in stats.items():
            logger.info("  %s: %d new posts", name, count)

    def close(self) -> None:
        self.fetch_client.close()

    def __enter__(self) -> IngestionPipeline:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
