"""Configuration loading and validation for docnav."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from docnav.errors import ConfigError
from docnav.utils.pub_utils import HTML_EXTENSION_STYLES, LATEST_VERSION_SEGMENT_STRATEGIES

DEFAULT_CONFIG_PATH = "docnav.yml"
DEFAULT_MANIFEST_PATH = "docnav-manifest.yml"


@dataclass
class SiteSettings:
    """Site-wide settings."""

    title: Optional[str] = None
    url: Optional[str] = None
    start_page: Optional[str] = None


@dataclass
class UrlSettings:
    """How published URLs are spelled."""

    html_extension_style: str = "default"
    latest_version_segment: Optional[str] = None
    latest_prerelease_version_segment: Optional[str] = None
    latest_version_segment_strategy: Optional[str] = None


@dataclass
class UiSettings:
    """Settings consumed by the page model."""

    default_layout: str = "default"


@dataclass
class DocnavConfig:
    """Complete docnav configuration."""

    version: str = "1.0"
    site: SiteSettings = field(default_factory=SiteSettings)
    urls: UrlSettings = field(default_factory=UrlSettings)
    ui: UiSettings = field(default_factory=UiSettings)
    manifest: str = DEFAULT_MANIFEST_PATH


def get_default_config() -> DocnavConfig:
    """Return the default docnav configuration."""
    return DocnavConfig()


def _section(data: dict[str, Any], name: str, config_file: Optional[str]) -> dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigError(
            f"'{name}' must be a mapping",
            file=config_file,
            error_type="config_invalid",
        )
    return value


def _parse_site(site_dict: dict[str, Any]) -> SiteSettings:
    """Parse site settings."""
    url = site_dict.get("url")
    return SiteSettings(
        title=site_dict.get("title"),
        url=str(url) if url is not None else None,
        start_page=site_dict.get("start_page"),
    )


def _optional_str(value: Any) -> Optional[str]:
    return str(value) if value is not None else None


def _parse_urls(urls_dict: dict[str, Any]) -> UrlSettings:
    return UrlSettings(
        html_extension_style=urls_dict.get("html_extension_style", "default"),
        latest_version_segment=_optional_str(urls_dict.get("latest_version_segment")),
        latest_prerelease_version_segment=_optional_str(urls_dict.get("latest_prerelease_version_segment")),
        latest_version_segment_strategy=urls_dict.get("latest_version_segment_strategy"),
    )


def _parse_ui(ui_dict: dict[str, Any]) -> UiSettings:
    return UiSettings(default_layout=ui_dict.get("default_layout", "default"))


def validate_config(config: DocnavConfig, config_file: Optional[str] = None) -> None:
    """Validate configuration values.

    Args:
        config: Configuration to validate.
        config_file: Path to config file for error messages.

    Raises:
        ConfigError: If configuration is invalid.
    """
    style = config.urls.html_extension_style
    if style not in HTML_EXTENSION_STYLES:
        raise ConfigError(
            f"Invalid html_extension_style '{style}'. Must be one of: {', '.join(HTML_EXTENSION_STYLES)}",
            file=config_file,
            error_type="config_invalid",
        )
    strategy = config.urls.latest_version_segment_strategy
    if strategy is not None and strategy not in LATEST_VERSION_SEGMENT_STRATEGIES:
        raise ConfigError(
            f"Invalid latest_version_segment_strategy '{strategy}'. "
            f"Must be one of: {', '.join(LATEST_VERSION_SEGMENT_STRATEGIES)}",
            file=config_file,
            error_type="config_invalid",
        )
    url = config.site.url
    if url and not (url.startswith("/") or url.startswith("http://") or url.startswith("https://")):
        raise ConfigError(
            f"Invalid site url '{url}': must be an absolute http(s) URL or start with '/'",
            file=config_file,
            error_type="config_invalid",
        )


def load_config(config_path: Path | str) -> DocnavConfig:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to the docnav.yml file.

    Returns:
        DocnavConfig with loaded values merged with defaults.

    Raises:
        ConfigError: If the file exists but contains invalid configuration.
    """
    config_path = Path(config_path)
    config_file = str(config_path)

    defaults = get_default_config()

    if not config_path.exists():
        return defaults

    try:
        content = config_path.read_text()
        if not content.strip():
            return defaults

        data = yaml.safe_load(content)
        if not data:
            return defaults
        if not isinstance(data, dict):
            raise ConfigError(
                "Top-level docnav config must be a mapping",
                file=config_file,
                error_type="config_invalid",
            )

    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML: {e}",
            file=config_file,
            error_type="config_invalid",
        )

    config = DocnavConfig(
        version=str(data.get("version", defaults.version)),
        site=_parse_site(_section(data, "site", config_file)),
        urls=_parse_urls(_section(data, "urls", config_file)),
        ui=_parse_ui(_section(data, "ui", config_file)),
        manifest=data.get("manifest", defaults.manifest),
    )

    validate_config(config, config_file)

    return config
