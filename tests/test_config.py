"""Tests for configuration loading."""

import tempfile

import yaml

from content_ingest.config import load_config, PipelineConfig


def test_load_default_config():
    """Loading the project's config.yaml should work."""
    config = load_config()
    assert isinstance(config, PipelineConfig)
    assert len(config.companies) > 0
    assert config.company_delay_seconds > 0


def test_load_missing_file():
    """Missing config file returns defaults."""
    config = load_config("/nonexistent/path.yaml")
    assert isinstance(config, PipelineConfig)
    assert len(config.companies) == 0
    assert config.company_delay_seconds == 2.0
    assert config.min_content_length == 10
    assert config.schedule.fetch_interval_minutes == 10


def test_custom_config():
    """A custom config with one company and a schedule should parse correctly."""
    data = {
        "db_path": "test.db",
        "log_level": "DEBUG",
        "company_delay_seconds": 5,
        "request_timeout_seconds": 10,
        "schedule": {"fetch_interval_minutes": 30, "cleanup_at": "03:15", "retention_days": 7},
        "companies": [
            {
                "name": "TestCo",
                "mirror": "https://mirror.xyz/testco.eth",
            }
        ],
    }

    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        yaml.dump(data, f)
        f.flush()
        config = load_config(f.name)

    assert config.db_path == "test.db"
    assert config.log_level == "DEBUG"
    assert config.company_delay_seconds == 5
    assert config.request_timeout_seconds == 10
    assert config.schedule.fetch_interval_minutes == 30
    assert config.schedule.cleanup_at == "03:15"
    assert config.schedule.retention_days == 7
    assert config.schedule.fetch_max_posts == 3
    assert len(config.companies) == 1
    assert config.companies[0].name == "TestCo"
    assert config.companies[0].mirror == "https://mirror.xyz/testco.eth"
    assert config.companies[0].medium == ""
    assert config.companies[0].active is True
