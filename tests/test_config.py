from __future__ import annotations

import json

import pytest

from sitegraph import CrawlConfig, load_config
from sitegraph.constants import DEFAULT_MAX_CONCURRENCY, DEFAULT_USER_AGENT


def test_defaults_match_static_constants():
    config = CrawlConfig()
    assert config.max_concurrency == DEFAULT_MAX_CONCURRENCY == 100
    assert config.user_agent == DEFAULT_USER_AGENT
    assert config.retries == 0
    assert config.rate_limit_seconds == 0.0


def test_headers_always_carry_user_agent():
    config = CrawlConfig(user_agent="Agent/2", default_headers={"User-Agent": "ignored", "X-Test": "1"})
    assert config.headers() == {"User-Agent": "Agent/2", "X-Test": "1"}


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_concurrency": 0},
        {"timeout_seconds": 0},
        {"retries": -1},
        {"retry_backoff_seconds": -0.1},
        {"rate_limit_seconds": -1},
        {"user_agent": "  "},
    ],
)
def test_invalid_values_are_rejected(kwargs):
    with pytest.raises(ValueError):
        CrawlConfig(**kwargs)


def test_from_dict_coerces_and_rejects_unknown_keys():
    config = CrawlConfig.from_dict({"max_concurrency": "8", "timeout_seconds": "2.5"})
    assert config.max_concurrency == 8
    assert config.timeout_seconds == 2.5

    with pytest.raises(ValueError, match="Unknown config keys"):
        CrawlConfig.from_dict({"max_depth": 3})

    with pytest.raises(ValueError, match="Invalid int"):
        CrawlConfig.from_dict({"retries": "many"})


def test_yaml_config_file_is_loaded(tmp_path):
    path = tmp_path / "crawl.yaml"
    path.write_text("max_concurrency: 12\nrate_limit_seconds: 0.25\n", encoding="utf-8")

    config = load_config(path)

    assert config.max_concurrency == 12
    assert config.rate_limit_seconds == 0.25
    assert config.timeout_seconds == CrawlConfig().timeout_seconds


def test_json_config_round_trips_through_to_dict(tmp_path):
    path = tmp_path / "crawl.json"
    path.write_text(json.dumps(CrawlConfig(max_concurrency=3).to_dict()), encoding="utf-8")

    assert load_config(path) == CrawlConfig(max_concurrency=3)


def test_unsupported_config_suffix(tmp_path):
    path = tmp_path / "crawl.toml"
    path.write_text("", encoding="utf-8")
    with pytest.raises(ValueError, match="Unsupported config suffix"):
        load_config(path)
