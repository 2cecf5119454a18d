# === FILE: site_mapper/config.py ===
"""
Loading and validation of the SiteMapper configuration.
Pydantic describes the schema; YAML or JSON files and CLI/env overrides feed it.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    ValidationError,
    field_validator,
)

from site_mapper.errors import ConfigError


class CrawlerConfig(BaseModel):
    """Settings for one crawl."""
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    site_url: HttpUrl = Field(..., alias="siteURL", description="Crawl root (seed URL).")
    user_agent: str = Field("SiteMapperBot/1.0", min_length=1, description="User-Agent header.")
    timeout: float = Field(10.0, gt=0, description="Timeout of a single request (seconds).")
    rate_limit: float = Field(1.0, gt=0, description="Upper bound of requests per second.")
    retry_times: int = Field(2, ge=0, description="Retries on 429/5xx responses.")
    retry_backoff: float = Field(1.0, ge=0, description="Base of the exponential retry backoff (seconds).")
    max_pages: Optional[int] = Field(None, ge=1, description="Stop after this many pages.")
    default_crawl_delay: int = Field(1, ge=0, description="Crawl-delay used when robots.txt has none.")
    robots_dir: Path = Field(Path("."), description="Where robots.txt copies are kept.")
    robots_max_age: float = Field(3600.0, gt=0, description="Freshness window of a robots.txt copy (seconds).")
    output_dir: Path = Field(Path("."), description="Where the sitemap is written.")

    @field_validator("site_url", mode="before")
    def _strip_whitespace(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @property
    def host(self) -> str:
        """``host[:port]`` of the seed URL, lower-cased."""
        host = (self.site_url.host or "").lower()
        port = self.site_url.port
        default_port = 443 if self.site_url.scheme == "https" else 80
        if port is not None and port != default_port:
            return f"{host}:{port}"
        return host


DEFAULT_CONFIG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def read_config_data(path: Union[str, Path, None]) -> Dict[str, Any]:
    """
    Reads the raw settings mapping from a YAML or JSON file.
    Without ``path`` the default file is used when it exists, otherwise ``{}``.
    """
    if path is None:
        if not DEFAULT_CONFIG.is_file():
            return {}
        path_obj = DEFAULT_CONFIG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise ConfigError(f"Config file not found: {path_obj}")

    suffix = path_obj.suffix.lower()
    try:
        if suffix in (".yaml", ".yml"):
            return _read_yaml(path_obj)
        if suffix == ".json":
            return _read_json(path_obj)
    except OSError as exc:
        raise ConfigError(f"Cannot read config {path_obj}: {exc}") from exc
    raise ConfigError(f"Unsupported config format: {suffix}")


def has_site_url(data: Dict[str, Any]) -> bool:
    return bool(data.get("site_url") or data.get("siteURL"))


def build_config(data: Dict[str, Any], **overrides: Any) -> CrawlerConfig:
    """Validates ``data`` updated with every override that is not None."""
    merged = dict(data)
    for key, value in overrides.items():
        if value is None:
            continue
        if key == "site_url":
            merged.pop("siteURL", None)
        merged[key] = value
    try:
        return CrawlerConfig(**merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def load_config(path: Union[str, Path, None] = None, **overrides: Any) -> CrawlerConfig:
    """
    Reads YAML or JSON, applies the overrides and returns a validated CrawlerConfig.
    Raises ConfigError when the file or the resulting settings are invalid.
    """
    return build_config(read_config_data(path), **overrides)
