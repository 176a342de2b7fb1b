"""Configuration management using pydantic-settings."""

import json
from dataclasses import dataclass, field, replace
from typing import Any, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .query import (
    DefaultFilter,
    DefaultSort,
    FilterSpec,
    SortSpec,
    parse_filter,
    parse_sorts,
)


class ConfigurationError(ValueError):
    """Raised when client configuration cannot be used."""


class MissingTokenError(ConfigurationError):
    """Raised when no Notion token was given and NOTION_TOKEN is unset."""


def parse_option_value(raw: Optional[str]) -> Any:
    """
    Decode a sorts/filter option given as text (environment or command line).

    Empty means "not set", ``true``/``false`` are booleans, JSON lists and
    objects are decoded, and anything else is returned as-is (a preset name).

    Raises:
        ConfigurationError: If the value looks like JSON but does not parse
    """
    if raw is None:
        return None
    value = raw.strip()
    if not value:
        return None
    lowered = value.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    if value[0] in "[{":
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON option value {value!r}: {e}")
    return value


@dataclass(frozen=True)
class NotionConfig:
    """Resolved options for one NotionClient."""
    database_id: str
    token: Optional[str] = None
    sorts: SortSpec = field(default_factory=DefaultSort)
    filter: FilterSpec = field(default_factory=DefaultFilter)

    @classmethod
    def from_options(
        cls,
        database_id: str,
        token: Optional[str] = None,
        sorts: Any = None,
        filter: Any = None,
    ) -> "NotionConfig":
        """
        Build a config from raw option values.

        Args:
            database_id: Notion database to query
            token: Integration token (NOTION_TOKEN is used when omitted)
            sorts: None/True, False, a preset name, or a list of sort rules
            filter: None/True, False, or a Notion filter object

        Returns:
            NotionConfig with sorts and filter decided once

        Raises:
            ConfigurationError: If sorts or filter has an unsupported shape
        """
        try:
            sort_spec = parse_sorts(sorts)
            filter_spec = parse_filter(filter)
        except TypeError as e:
            raise ConfigurationError(str(e)) from e
        return cls(
            database_id=database_id,
            token=token or None,
            sorts=sort_spec,
            filter=filter_spec,
        )

    def with_token(self, token: str) -> "NotionConfig":
        """Return a copy carrying the given token."""
        return replace(self, token=token)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="NOTION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Notion API
    token: str = Field(
        default="",
        description="Notion integration token",
    )
    database_id: str = Field(
        default="",
        description="Database whose pages are published",
    )
    api_base: str = Field(
        default="https://api.notion.com/v1",
        description="Notion API base URL",
    )
    api_version: str = Field(
        default="2022-06-28",
        description="Value sent in the Notion-Version header",
    )
    timeout: float = Field(
        default=30.0,
        description="HTTP timeout in seconds",
    )

    # Query options
    sorts: str = Field(
        default="",
        description="Sort preset name, 'true'/'false', or a JSON list of sort rules",
    )
    filter: str = Field(
        default="",
        description="'true'/'false' or a JSON filter object",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Root log level for the command-line entry point",
    )

    def is_configured(self) -> bool:
        """Check if a token and a database are configured."""
        return bool(self.token and self.database_id)

    def to_notion_config(self) -> NotionConfig:
        """Build a NotionConfig from the environment."""
        return NotionConfig.from_options(
            database_id=self.database_id,
            token=self.token,
            sorts=parse_option_value(self.sorts),
            filter=parse_option_value(self.filter),
        )
