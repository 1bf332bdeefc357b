"""Shared fixtures for the ingestion tests."""

from __future__ import annotations

import pytest

from content_ingest.config import PipelineConfig
from content_ingest.models import Company
from content_ingest.storage import Database


@pytest.fixture
def db(tmp_path):
    with Database(str(tmp_path / "content.db")) as database:
        yield database


@pytest.fixture
def config() -> PipelineConfig:
    return PipelineConfig(company_delay_seconds=2.0, default_max_posts=5)


@pytest.fixture
def uniswap(db) -> Company:
    return db.companies.add(
        Company(
            name="Uniswap",
            medium_link="https://medium.com/@uniswap",
            mirror_link="https://mirror.xyz/uniswap.eth",
        )
    )
