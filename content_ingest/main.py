"""Entry point for the content ingestion pipeline.

Usage:
    python -m content_ingest.main                      # one batch run over all active companies
    python -m content_ingest.main --config my.yaml     # use custom config
    python -m content_ingest.main --seed               # upsert companies from config first
    python -m content_ingest.main --company Uniswap --platform medium
    python -m content_ingest.main --schedule           # run the recurring jobs until interrupted
    python -m content_ingest.main --dry-run            # list what would be scraped
"""

from __future__ import annotations

import argparse
import logging
import sys

from content_ingest.config import PipelineConfig, load_config
from content_ingest.errors import IngestError
from content_ingest.ingestion import IngestionPipeline
from content_ingest.models import Company, Platform
from content_ingest.scheduler import IngestionScheduler
from content_ingest.storage import Database


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the pipeline."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Content ingestion pipeline: scrape Medium, Mirror and "
        "Paragraph posts for monitored companies."
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--db",
        type=str,
        default=None,
        help="Override the SQLite database path (default: from config)",
    )
    parser.add_argument(
        "--seed",
        action="store_true",
        help="Upsert the companies listed in config into the directory",
    )
    parser.add_argument(
        "--company",
        type=str,
        default=None,
        help="Scrape a single company (requires --platform)",
    )
    parser.add_argument(
        "--platform",
        choices=[p.value for p in Platform],
        default=None,
        help="Platform to scrape for --company",
    )
    parser.add_argument(
        "--max-posts",
        type=int,
        default=None,
        help="Cap per company/platform (default: from config)",
    )
    parser.add_argument(
        "--schedule",
        action="store_true",
        help="Start the recurring jobs and block until interrupted",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List active companies and platforms without scraping",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug-level logging",
    )
    return parser.parse_args(argv)


def seed_companies(config: PipelineConfig, db: Database) -> int:
    for entry in config.companies:
        db.companies.add(
            Company(
                name=entry.name,
                medium_link=entry.medium or None,
                mirror_link=entry.mirror or None,
                paragraph_link=entry.paragraph or None,
                active=entry.active,
            )
        )
    return len(config.companies)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    config = load_config(args.config)
    log_level = "DEBUG" if args.verbose else config.log_level
    setup_logging(log_level)

    logger = logging.getLogger(__name__)

    if args.company and not args.platform:
        logger.error("--company requires --platform")
        return 1

    db_path = args.db or config.db_path
    with Database(db_path) as db:
        if args.seed:
            count = seed_companies(config, db)
            logger.info("Seeded %d companies into %s", count, db_path)

        if args.dry_run:
            logger.info("=== Dry Run ===")
            for company in db.companies.list_active():
                platforms = ", ".join(p.value for p in company.platforms) or "none"
                logger.info("  %s (platforms: %s)", company.name, platforms)
            logger.info("Dry run complete, no scraping performed.")
            return 0

        if args.schedule and not config.schedule.enabled:
            logger.warning("--schedule given but schedule.enabled is false in config, nothing to run")
            return 0

        pipeline = IngestionPipeline(config, db)

        if args.schedule:
            IngestionScheduler(config, pipeline).run_forever()
            return 0

        with pipeline:
            if args.company:
                try:
                    saved = pipeline.ingest(
                        args.company,
                        args.platform,
                        args.max_posts,
                        raise_on_fetch_error=True,
                    )
                except IngestError as exc:
                    logger.error("%s", exc)
                    return 1
            else:
                saved = pipeline.run_all(args.max_posts)

        if not saved:
            logger.warning("No new posts saved. Check your company links and network.")
        else:
            logger.info("Done! %d new posts saved to %s", len(saved), db_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
