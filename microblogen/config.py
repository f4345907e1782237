"""Build configuration using Pydantic Settings for automatic env var support.

Values come from (highest precedence first): an optional JSON config file,
process environment variables, a ``.env`` file in the working directory,
and the defaults below. The resulting :class:`BuildSettings` is built once
and passed explicitly to every pipeline component.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import AliasChoices, Field, ValidationError, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from microblogen import jsonutil
from microblogen.errors import ConfigError
from microblogen.log import get_logger

logger = get_logger(__name__)

CONFIG_FILE_NAME = "config.json"

DEFAULT_PAGE_SHOW_LIMIT = 10
DEFAULT_LATEST_ARTICLES = 5
DEFAULT_MAX_WORKERS = 8
DEFAULT_EXPORT_PATH = Path("./output")
DEFAULT_RESOURCES_PATH = Path("./resources")

_POSITIVE_DEFAULTS = {
    "articles_per_page": ("PAGE_SHOW_LIMIT", DEFAULT_PAGE_SHOW_LIMIT),
    "latest_articles": ("LATEST_ARTICLES", DEFAULT_LATEST_ARTICLES),
}

# Keys accepted in config.json, mapped onto settings field names.
_CONFIG_FILE_KEYS = {
    "APIkey": "api_key",
    "serviceDomain": "service_domain",
    "exportPath": "export_path",
    "resourcesPath": "resources_path",
    "staticPath": "static_path",
    "templatePath": "templates_path",
    "templatesPath": "templates_path",
    "pageShowLimit": "articles_per_page",
    "latestArticles": "latest_articles",
    "timezone": "timezone",
    "categoryTagName": "category_tag_name",
    "maxWorkers": "max_workers",
}


def _env(*names: str) -> AliasChoices:
    return AliasChoices(*names)


@dataclass(frozen=True)
class PathSettings:
    """Resolved filesystem locations for one build."""

    export: Path
    resources: Path
    static: Path
    templates: Path
    blog_templates: Path
    singles_templates: Path
    components: Path


class BuildSettings(BaseSettings):
    """Settings for one site build."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    api_key: str = Field(validation_alias=_env("MICROCMS_API_KEY", "api_key"))
    service_domain: str = Field(validation_alias=_env("SERVICE_DOMAIN", "service_domain"))

    articles_per_page: int = Field(
        default=DEFAULT_PAGE_SHOW_LIMIT,
        validation_alias=_env("PAGE_SHOW_LIMIT", "articles_per_page"),
    )
    latest_articles: int = Field(
        default=DEFAULT_LATEST_ARTICLES,
        validation_alias=_env("LATEST_ARTICLES", "latest_articles"),
    )
    timezone: str = Field(default="UTC", validation_alias=_env("TIMEZONE", "timezone"))
    category_tag_name: str = Field(
        default="Category",
        validation_alias=_env("CATEGORY_TAG_NAME", "category_tag_name"),
    )
    max_workers: int = Field(
        default=DEFAULT_MAX_WORKERS,
        ge=1,
        validation_alias=_env("MAX_WORKERS", "max_workers"),
    )
    request_timeout: float = Field(
        default=30.0,
        gt=0,
        validation_alias=_env("REQUEST_TIMEOUT", "request_timeout"),
    )

    export_path: Path = Field(
        default=DEFAULT_EXPORT_PATH, validation_alias=_env("EXPORT_PATH", "export_path")
    )
    resources_path: Path = Field(
        default=DEFAULT_RESOURCES_PATH,
        validation_alias=_env("RESOURCES_PATH", "resources_path"),
    )
    static_path: Path | None = Field(
        default=None, validation_alias=_env("STATIC_PATH", "static_path")
    )
    templates_path: Path | None = Field(
        default=None, validation_alias=_env("TEMPLATES_PATH", "TEMPLATE_PATH", "templates_path")
    )
    blog_templates_path: Path | None = Field(
        default=None, validation_alias=_env("BLOG_TEMPLATES_PATH", "blog_templates_path")
    )
    singles_templates_path: Path | None = Field(
        default=None,
        validation_alias=_env("SINGLES_TEMPLATES_PATH", "singles_templates_path"),
    )
    components_path: Path | None = Field(
        default=None, validation_alias=_env("COMPONENTS_PATH", "components_path")
    )

    @field_validator("articles_per_page", "latest_articles", mode="before")
    @classmethod
    def _positive_or_default(cls, v: Any, info: ValidationInfo) -> int:
        env_name, default = _POSITIVE_DEFAULTS[info.field_name]
        try:
            value = int(v)
        except (TypeError, ValueError):
            value = 0
        if value <= 0:
            logger.warning(
                "%s is %r which is not a positive integer; using default %d",
                env_name,
                v,
                default,
            )
            return default
        return value

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Invalid timezone: {v}") from exc
        return v

    @field_validator("api_key", "service_domain")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def paths(self) -> PathSettings:
        templates = self.templates_path or self.resources_path / "templates"
        return PathSettings(
            export=self.export_path,
            resources=self.resources_path,
            static=self.static_path or self.resources_path / "static",
            templates=templates,
            blog_templates=self.blog_templates_path or templates / "blog",
            singles_templates=self.singles_templates_path or templates / "singles",
            components=self.components_path or templates / "components",
        )

    def describe(self) -> dict[str, str]:
        """Loggable view of the effective settings, credentials redacted."""
        paths = self.paths
        return {
            "service_domain": self.service_domain,
            "api_key": "***" if self.api_key else "",
            "export_path": str(paths.export),
            "resources_path": str(paths.resources),
            "articles_per_page": str(self.articles_per_page),
            "latest_articles": str(self.latest_articles),
            "timezone": self.timezone,
            "category_tag_name": self.category_tag_name,
            "max_workers": str(self.max_workers),
        }


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        raw = jsonutil.loads(path.read_bytes())
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    except ValueError as exc:
        raise ConfigError(f"Config file {path} is not valid JSON: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")

    values: dict[str, Any] = {}
    for key, value in raw.items():
        field_name = _CONFIG_FILE_KEYS.get(key)
        if field_name is None:
            logger.warning("Ignoring unknown config key %s in %s", key, path)
            continue
        if value in (None, ""):
            continue
        values[field_name] = value
    return values


def load_settings(config_file: Path | None = None, **overrides: Any) -> BuildSettings:
    """Build and validate settings.

    Args:
        config_file: Explicit JSON config file. When omitted, ``config.json``
            in the working directory is used if it exists.
        **overrides: Field values taking precedence over every other source.

    Raises:
        ConfigError: A required value is missing or a value is invalid.
    """
    values: dict[str, Any] = {}
    if config_file is None:
        candidate = Path.cwd() / CONFIG_FILE_NAME
        if candidate.is_file():
            config_file = candidate
    if config_file is not None:
        logger.info("Loading settings from %s", config_file)
        values.update(_read_config_file(Path(config_file)))
    values.update(overrides)

    try:
        return BuildSettings(**values)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'settings'}: {err['msg']}"
            for err in exc.errors()
        )
        raise ConfigError(f"Invalid configuration: {problems}") from exc


__all__ = [
    "BuildSettings",
    "CONFIG_FILE_NAME",
    "DEFAULT_LATEST_ARTICLES",
    "DEFAULT_PAGE_SHOW_LIMIT",
    "PathSettings",
    "load_settings",
]
