"""Configuration loader for the content ingestion pipeline.

Reads config.yaml and returns typed configuration objects that the
orchestrator, fetch client, extractors and scheduler consume.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.yaml"


@dataclass
class CompanyConfig:
    """A monitored company as declared in config (used for seeding)."""

    name: str
    medium: str = ""
    mirror: str = ""
    paragraph: str = ""
    active: bool = True


@dataclass
class ScheduleConfig:
    """Cadence of the recurring jobs."""

    enabled: bool = True
    fetch_interval_minutes: int = 10
    fetch_max_posts: int = 3  # per company/platform on scheduled runs
    cleanup_at: str = "02:00"  # daily, HH:MM
    retention_days: int = 0  # 0 keeps processed records forever


@dataclass
class PipelineConfig:
    """Top-level pipeline configuration."""

    companies: list[CompanyConfig] = field(default_factory=list)
    db_path: str = "data/content.db"
    log_level: str = "INFO"
    company_delay_seconds: float = 2.0  # backpressure between companies
    request_timeout_seconds: float = 30.0
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )
    min_content_length: int = 10
    default_max_posts: int = 5
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)


def load_config(path: Path | str | None = None) -> PipelineConfig:
    """Load and validate the pipeline configuration from a YAML file."""
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH

    if not config_path.exists():
        logger.warning("Config file not found at %s, using defaults", config_path)
        return PipelineConfig()

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    if not raw:
        return PipelineConfig()

    companies = []
    for entry in raw.get("companies", []):
        companies.append(
            CompanyConfig(
                name=entry["name"],
                medium=entry.get("medium") or "",
                mirror=entry.get("mirror") or "",
                paragraph=entry.get("paragraph") or "",
                active=entry.get("active", True),
            )
        )

    sched_raw = raw.get("schedule", {}) or {}
    schedule = ScheduleConfig(
        enabled=sched_raw.get("enabled", True),
        fetch_interval_minutes=sched_raw.get("fetch_interval_minutes", 10),
        fetch_max_posts=sched_raw.get("fetch_max_posts", 3),
        cleanup_at=str(sched_raw.get("cleanup_at", "02:00")),
        retention_days=sched_raw.get("retention_days", 0),
    )

    delay = raw.get("company_delay_seconds", 2.0)
    if delay <= 0:
        logger.warning(
            "company_delay_seconds=%s disables rate-limit backpressure", delay
        )

    return PipelineConfig(
        companies=companies,
        db_path=raw.get("db_path", "data/content.db"),
        log_level=raw.get("log_level", "INFO"),
        company_delay_seconds=delay,
        request_timeout_seconds=raw.get("request_timeout_seconds", 30.0),
        user_agent=raw.get("user_agent", PipelineConfig.user_agent),
        min_content_length=raw.get("min_content_length", 10),
        default_max_posts=raw.get("default_max_posts", 5),
        schedule=schedule,
    )
