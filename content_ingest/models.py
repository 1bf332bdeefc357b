"""Data models for the content ingestion pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Platform(str, Enum):
    """Publishing platforms we know how to scrape."""

    MEDIUM = "medium"
    MIRROR = "mirror"
    PARAGRAPH = "paragraph"


@dataclass
class Author:
    name: str = "Unknown Author"
    username: Optional[str] = None
    profile_url: Optional[str] = None
    avatar_url: Optional[str] = None


@dataclass
class Metrics:
    """Engagement counters. Unknown values are stored as 0."""

    claps: int = 0
    views: int = 0
    comments: int = 0
    shares: int = 0

    def __post_init__(self) -> None:
        for name in ("claps", "views", "comments", "shares"):
            if getattr(self, name) < 0:
                raise ValueError(f"metric {name} must be non-negative")


@dataclass
class NormalizedPost:
    """A single scraped post, independent of how it is stored.

    `post_id` is derived from the normalized `url`, so the pair is the
    dedup key used by the content store.
    """

    post_id: str
    title: str
    content: str
    url: str
    platform: Platform
    author: Author = field(default_factory=Author)
    excerpt: Optional[str] = None
    published_at: datetime = field(default_factory=utcnow)
    tags: list[str] = field(default_factory=list)
    metrics: Metrics = field(default_factory=Metrics)
    featured_image: Optional[str] = None
    reading_time: Optional[int] = None

    def to_dict(self) -> dict:
        """Serialize to a JSON-friendly dictionary."""
        d = asdict(self)
        d["platform"] = self.platform.value
        d["published_at"] = self.published_at.isoformat()
        return d

    @classmethod
    def from_dict(cls, d: dict) -> NormalizedPost:
        return cls(
            post_id=d["post_id"],
            title=d["title"],
            content=d["content"],
            url=d["url"],
            platform=Platform(d["platform"]),
            author=Author(**d.get("author", {})),
            excerpt=d.get("excerpt"),
            published_at=datetime.fromisoformat(d["published_at"]),
            tags=list(d.get("tags") or []),
            metrics=Metrics(**d.get("metrics", {})),
            featured_image=d.get("featured_image"),
            reading_time=d.get("reading_time"),
        )

    def __repr__(self) -> str:
        return (
            f"NormalizedPost(post_id={self.post_id!r}, title={self.title!r}, "
            f"platform={self.platform.value!r})"
        )


@dataclass
class IngestionRecord:
    """A NormalizedPost persisted on behalf of one company/platform.

    Only `processed` and `processed_at` change after insert, and only a
    downstream consumer changes them.
    """

    company_name: str
    platform: Platform
    post: NormalizedPost
    processed: bool = False
    fetched_at: datetime = field(default_factory=utcnow)
    processed_at: Optional[datetime] = None
    id: Optional[int] = None


@dataclass
class Company:
    """A monitored company and its per-platform profile links."""

    name: str
    medium_link: Optional[str] = None
    mirror_link: Optional[str] = None
    paragraph_link: Optional[str] = None
    active: bool = True

    def link_for(self, platform: Platform) -> Optional[str]:
        link = {
            Platform.MEDIUM: self.medium_link,
            Platform.MIRROR: self.mirror_link,
            Platform.PARAGRAPH: self.paragraph_link,
        }[platform]
        return link or None

    @property
    def platforms(self) -> list[Platform]:
        """Platforms this company has a profile link for, in enum order."""
        return [p for p in Platform if self.link_for(p)]
