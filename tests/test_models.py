"""Tests for the data models."""

from datetime import datetime, timezone

import pytest

from content_ingest.models import Author, Company, Metrics, NormalizedPost, Platform


def _post(**overrides) -> NormalizedPost:
    fields = dict(
        post_id="abc123",
        title="Hello",
        content="Some long enough content",
        url="https://mirror.xyz/dao.eth/hello",
        platform=Platform.MIRROR,
    )
    fields.update(overrides)
    return NormalizedPost(**fields)


def test_post_defaults():
    post = _post()
    assert post.author.name == "Unknown Author"
    assert post.metrics == Metrics(0, 0, 0, 0)
    assert post.tags == []
    assert post.published_at.tzinfo is not None


def test_metrics_reject_negative_values():
    with pytest.raises(ValueError):
        Metrics(claps=-1)


def test_post_dict_round_trip():
    post = _post(
        author=Author(name="DAO", username="dao.eth"),
        published_at=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        tags=["defi"],
        metrics=Metrics(claps=4),
        reading_time=1,
    )
    d = post.to_dict()
    assert d["platform"] == "mirror"
    assert d["published_at"] == "2024-05-01T12:00:00+00:00"
    assert NormalizedPost.from_dict(d) == post


def test_company_links_and_platforms():
    company = Company(
        name="Uniswap",
        medium_link="https://medium.com/@uniswap",
        paragraph_link="",
    )
    assert company.link_for(Platform.MEDIUM) == "https://medium.com/@uniswap"
    assert company.link_for(Platform.PARAGRAPH) is None
    assert company.link_for(Platform.MIRROR) is None
    assert company.platforms == [Platform.MEDIUM]


def test_platform_values():
    assert Platform("paragraph") is Platform.PARAGRAPH
    with pytest.raises(ValueError):
        Platform("substack")
