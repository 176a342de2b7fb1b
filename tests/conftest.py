"""Shared fixtures for notion-publish tests."""

import asyncio
import os
from typing import Any, Dict, List, Optional

import pytest

from notion_publish.upstream import MdBlock


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate tests from NOTION_* variables and any local .env file."""
    for name in list(os.environ):
        if name.startswith("NOTION_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def rich(text: str, **annotations) -> List[Dict[str, Any]]:
    return [{"type": "text", "plain_text": text, "annotations": annotations}]


def make_page(
    page_id: str,
    title: str = "Untitled",
    status: str = "已发布",
    last_edited_time: str = "2024-01-02T03:04:05.000Z",
) -> Dict[str, Any]:
    """A page object as returned by a database query."""
    return {
        "object": "page",
        "id": page_id,
        "created_time": "2024-01-01T00:00:00.000Z",
        "last_edited_time": last_edited_time,
        "url": f"https://www.notion.so/{page_id}",
        "properties": {
            "title": {"id": "title", "type": "title", "title": rich(title)},
            "status": {"id": "s", "type": "select", "select": {"name": status}},
        },
    }


class FakeAPI:
    """In-memory stand-in for NotionAPI."""

    def __init__(self, results: Optional[List[Dict[str, Any]]] = None):
        self.results = results or []
        self.queries: List[Dict[str, Any]] = []
        self.closed = False

    async def query_database(self, database_id, filter=None, sorts=None):
        self.queries.append({"database_id": database_id, "filter": filter, "sorts": sorts})
        return {"object": "list", "results": self.results, "has_more": False}

    async def list_block_children(self, block_id):
        return []

    async def close(self):
        self.closed = True


class FakeConverter:
    """Markdown converter that tracks how many pages are converting at once."""

    def __init__(self, delay: float = 0.01, fail_on: Optional[str] = None):
        self.delay = delay
        self.fail_on = fail_on
        self.in_flight = 0
        self.max_in_flight = 0
        self.started: List[str] = []
        self.finished: List[str] = []

    async def page_to_markdown(self, page_id):
        self.started.append(page_id)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if page_id == self.fail_on:
                raise RuntimeError(f"download failed for {page_id}")
        finally:
            self.in_flight -= 1
        self.finished.append(page_id)
        return [MdBlock(type="paragraph", block_id=f"{page_id}-b", parent=f"body of {page_id}")]

    def to_markdown_string(self, blocks):
        return "\n\n".join(block.parent for block in blocks)


@pytest.fixture
def page_factory():
    return make_page


@pytest.fixture
def rich_text():
    return rich
