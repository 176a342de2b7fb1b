"""Fetch Notion database pages and convert them to markdown."""

from .client import DOWNLOAD_CONCURRENCY, NotionClient
from .config import ConfigurationError, MissingTokenError, NotionConfig, Settings
from .query import SortPreset, resolve_filter, resolve_sorts
from .upstream import CatalogEntry, DocDetail

__all__ = [
    "CatalogEntry",
    "ConfigurationError",
    "DOWNLOAD_CONCURRENCY",
    "DocDetail",
    "MissingTokenError",
    "NotionClient",
    "NotionConfig",
    "Settings",
    "SortPreset",
    "resolve_filter",
    "resolve_sorts",
]
