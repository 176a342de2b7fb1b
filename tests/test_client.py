"""Tests for NotionClient catalog fetching and batch downloads."""

import httpx
import pytest

from conftest import FakeAPI, FakeConverter, make_page
from notion_publish import DOWNLOAD_CONCURRENCY, MissingTokenError, NotionClient, NotionConfig
from notion_publish.upstream import CatalogEntry, NotionAPI


def make_client(results=None, converter=None, **options) -> NotionClient:
    config = NotionConfig.from_options(database_id="db1", token="secret", **options)
    return NotionClient(config, api=FakeAPI(results), converter=converter or FakeConverter())


def entries(*ids):
    return [CatalogEntry.from_page(make_page(page_id, title=f"Doc {page_id}")) for page_id in ids]


def test_missing_token_raises():
    config = NotionConfig.from_options(database_id="db1")
    with pytest.raises(MissingTokenError):
        NotionClient(config, api=FakeAPI(), converter=FakeConverter())


def test_token_falls_back_to_environment(monkeypatch):
    monkeypatch.setenv("NOTION_TOKEN", "env-token")
    client = NotionClient(NotionConfig.from_options(database_id="db1"), converter=FakeConverter())

    assert client.config.token == "env-token"
    assert isinstance(client.api, NotionAPI)
    assert client.api.client.headers["Authorization"] == "Bearer env-token"


def test_explicit_token_wins(monkeypatch):
    monkeypatch.setenv("NOTION_TOKEN", "env-token")
    client = make_client()
    assert client.config.token == "secret"


@pytest.mark.asyncio
async def test_get_page_list_uses_resolved_query_and_replaces_catalog():
    client = make_client(results=[make_page("a", title="A"), make_page("b", title="B")])
    client.catalog = entries("stale")

    catalog = await client.get_page_list()

    assert [entry.id for entry in catalog] == ["a", "b"]
    assert catalog[0].properties == {"title": "A", "status": "已发布"}
    assert client.catalog is catalog
    assert client.api.queries == [
        {
            "database_id": "db1",
            "filter": {"property": "status", "select": {"equals": "已发布"}},
            "sorts": [{"timestamp": "created_time", "direction": "descending"}],
        }
    ]


@pytest.mark.asyncio
async def test_get_page_list_without_sort_or_filter():
    client = make_client(sorts=False, filter=False)
    assert await client.get_page_list() == []
    assert client.api.queries[0]["filter"] is None
    assert client.api.queries[0]["sorts"] is None


@pytest.mark.asyncio
async def test_get_page_list_with_preset():
    client = make_client(sorts="updateTimeAsc")
    await client.get_page_list()
    assert client.api.queries[0]["sorts"] == [
        {"timestamp": "last_edited_time", "direction": "ascending"}
    ]


@pytest.mark.asyncio
async def test_query_errors_propagate():
    class BrokenAPI(FakeAPI):
        async def query_database(self, database_id, filter=None, sorts=None):
            raise httpx.ConnectError("boom")

    config = NotionConfig.from_options(database_id="db1", token="secret")
    client = NotionClient(config, api=BrokenAPI(), converter=FakeConverter())
    with pytest.raises(httpx.ConnectError):
        await client.get_page_list()


@pytest.mark.asyncio
async def test_download_builds_doc_detail():
    client = make_client()
    (entry,) = entries("p1")

    doc = await client.download(entry)

    assert doc.id == "p1"
    assert doc.doc_id == "p1"
    assert doc.body == "body of p1"
    assert doc.body_original == doc.body
    assert doc.properties["title"] == "Doc p1"
    assert doc.updated == 1704164645000


@pytest.mark.asyncio
async def test_batch_download_filters_by_ids():
    converter = FakeConverter()
    client = make_client(converter=converter)

    docs = await client.get_page_detail_list(entries("A", "B", "C"), ["B"])

    assert [doc.id for doc in docs] == ["B"]
    assert converter.started == ["B"]


@pytest.mark.asyncio
async def test_batch_download_without_intersection_downloads_nothing(caplog):
    converter = FakeConverter()
    client = make_client(converter=converter)

    with caplog.at_level("INFO", logger="notion_publish.client"):
        docs = await client.get_page_detail_list(entries("A", "B"), ["Z"])

    assert docs == []
    assert converter.started == []
    assert "no pages to download" in caplog.text


@pytest.mark.asyncio
async def test_batch_download_with_no_candidates():
    converter = FakeConverter()
    client = make_client(converter=converter)
    assert await client.get_page_detail_list([], None) == []
    assert converter.started == []


@pytest.mark.asyncio
async def test_empty_id_list_downloads_everything():
    client = make_client()
    docs = await client.get_page_detail_list(entries("A", "B"), [])
    assert sorted(doc.id for doc in docs) == ["A", "B"]


@pytest.mark.asyncio
async def test_batch_download_caps_concurrency():
    converter = FakeConverter(delay=0.02)
    client = make_client(converter=converter)
    ids = [f"p{i}" for i in range(12)]

    docs = await client.get_page_detail_list(entries(*ids), None)

    assert DOWNLOAD_CONCURRENCY == 5
    assert converter.max_in_flight == 5
    assert sorted(doc.id for doc in docs) == sorted(ids)


@pytest.mark.asyncio
async def test_batch_download_failure_propagates():
    converter = FakeConverter(fail_on="p3")
    client = make_client(converter=converter)

    with pytest.raises(RuntimeError, match="p3"):
        await client.get_page_detail_list(entries(*[f"p{i}" for i in range(8)]), None)

    assert converter.in_flight == 0


@pytest.mark.asyncio
async def test_close_closes_api():
    async with make_client() as client:
        pass
    assert client.api.closed


@pytest.mark.asyncio
async def test_single_id_string_is_not_split_into_characters():
    converter = FakeConverter()
    client = make_client(converter=converter)

    docs = await client.get_page_detail_list(entries("ab", "a", "b"), "ab")

    assert [doc.id for doc in docs] == ["ab"]
    assert converter.started == ["ab"]
