"""Data classes and protocols shared by the Notion client layers."""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol

from .properties import normalize_properties


def to_epoch_ms(timestamp: str) -> int:
    """Convert a Notion ISO-8601 timestamp to Unix epoch milliseconds."""
    dt = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    return int(round(dt.timestamp() * 1000))


@dataclass
class CatalogEntry:
    """One database page summary with normalized properties."""
    id: str
    properties: Dict[str, Any]
    raw_properties: Dict[str, Any] = field(default_factory=dict)
    created_time: str = ""
    last_edited_time: str = ""
    url: str = ""

    @property
    def title(self) -> str:
        return self.properties.get("title") or ""

    @classmethod
    def from_page(cls, page: Dict[str, Any]) -> "CatalogEntry":
        """Build an entry from a page object returned by a database query."""
        raw = page.get("properties", {})
        return cls(
            id=page["id"],
            properties=normalize_properties(raw),
            raw_properties=raw,
            created_time=page.get("created_time", ""),
            last_edited_time=page.get("last_edited_time", ""),
            url=page.get("url", ""),
        )


@dataclass
class DocDetail:
    """A downloaded page: markdown body plus metadata."""
    id: str
    doc_id: str
    properties: Dict[str, Any]
    body: str
    body_original: str
    updated: int  # last edit, Unix epoch milliseconds

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class MdBlock:
    """Markdown rendered for one block, with its rendered children."""
    type: str
    block_id: str
    parent: str
    children: List["MdBlock"] = field(default_factory=list)


class BlockSource(Protocol):
    """Anything that can list the children of a Notion block."""

    async def list_block_children(self, block_id: str) -> List[Dict[str, Any]]:
        ...


class DatabaseSource(BlockSource, Protocol):
    """Protocol for the Notion REST layer used by NotionClient."""

    async def query_database(
        self,
        database_id: str,
        filter: Optional[Dict[str, Any]] = None,
        sorts: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        """Run one database query and return the raw response."""
        ...

    async def close(self) -> None:
        """Close client resources."""
        ...


class MarkdownConverter(Protocol):
    """Protocol for block-tree to markdown conversion."""

    async def page_to_markdown(self, page_id: str) -> List[MdBlock]:
        ...

    def to_markdown_string(self, blocks: List[MdBlock]) -> str:
        ...
