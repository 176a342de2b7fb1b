"""Upstream integration module initialization."""

from .base import (
    CatalogEntry,
    DatabaseSource,
    DocDetail,
    MarkdownConverter,
    MdBlock,
    to_epoch_ms,
)
from .notion import NotionAPI
from .properties import normalize_properties

__all__ = [
    "CatalogEntry",
    "DatabaseSource",
    "DocDetail",
    "MarkdownConverter",
    "MdBlock",
    "NotionAPI",
    "normalize_properties",
    "to_epoch_ms",
]
