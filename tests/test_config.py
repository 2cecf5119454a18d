# File: tests/test_config.py
import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from site_mapper.config import CrawlerConfig, build_config, has_site_url, load_config, read_config_data
from site_mapper.errors import ConfigError


def write_file(tmp_path: Path, content: str, suffix: str) -> Path:
    path = tmp_path / f"config{suffix}"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "content,suffix,expect_exc",
    [
        ("site_url: http://example.com\n", ".yaml", None),
        ("siteURL: http://example.com\nmax_pages: 5\n", ".yml", None),
        (json.dumps({"site_url": "http://example.com", "timeout": 3}), ".json", None),
        ("{}", ".json", ConfigError),
        ("site_url: example.com\n", ".yaml", ConfigError),
        ("site_url: ftp://example.com/\n", ".yaml", ConfigError),
        ("site_url: http://example.com\nwordlists: {}\n", ".yaml", ConfigError),
        ("- just\n- a list\n", ".yaml", ConfigError),
        ("key: [unclosed\n", ".yaml", ConfigError),
        ("{not json", ".json", ConfigError),
        ("site_url = 'http://example.com'", ".toml", ConfigError),
    ],
)
def test_load_config_variants(tmp_path, content, suffix, expect_exc):
    cfg_path = write_file(tmp_path, content, suffix)
    if expect_exc:
        with pytest.raises(expect_exc):
            load_config(cfg_path)
    else:
        cfg = load_config(cfg_path)
        assert isinstance(cfg, CrawlerConfig)
        assert str(cfg.site_url) == "http://example.com/"


def test_defaults():
    cfg = CrawlerConfig(site_url="https://example.com")
    assert cfg.user_agent == "SiteMapperBot/1.0"
    assert cfg.default_crawl_delay == 1
    assert cfg.robots_max_age == 3600
    assert cfg.max_pages is None
    assert cfg.host == "example.com"


def test_host_keeps_explicit_port():
    assert CrawlerConfig(site_url="http://LocalHost:8080/x").host == "localhost:8080"
    assert CrawlerConfig(site_url="https://example.com:443/").host == "example.com"


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "nope.yaml")


def test_default_file_is_optional(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert read_config_data(None) == {}
    cfg = load_config(None, site_url="http://example.com")
    assert cfg.host == "example.com"


def test_default_file_is_used(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "configs").mkdir()
    (tmp_path / "configs" / "default.yaml").write_text("site_url: http://default.test\n", encoding="utf-8")
    assert load_config(None).host == "default.test"


def test_overrides_win_and_none_is_ignored():
    data = {"siteURL": "http://file.test", "max_pages": 10}
    cfg = build_config(data, site_url="http://cli.test", max_pages=None, output_dir=Path("out"))
    assert cfg.host == "cli.test"
    assert cfg.max_pages == 10
    assert cfg.output_dir == Path("out")


def test_has_site_url():
    assert has_site_url({"site_url": "http://a"})
    assert has_site_url({"siteURL": "http://a"})
    assert not has_site_url({"site_url": ""})
    assert not has_site_url({})


def test_config_is_frozen():
    cfg = CrawlerConfig(site_url="http://example.com")
    with pytest.raises(ValidationError):
        cfg.max_pages = 3
