"""Notion database client: catalog query and markdown downloads."""

import logging
from typing import Iterable, List, Optional

from .config import MissingTokenError, NotionConfig, Settings
from .markdown import NotionToMarkdown
from .pool import bounded_gather
from .query import resolve_filter, resolve_sorts
from .upstream import (
    CatalogEntry,
    DatabaseSource,
    DocDetail,
    MarkdownConverter,
    NotionAPI,
    to_epoch_ms,
)

logger = logging.getLogger(__name__)

# Maximum number of pages downloaded at the same time
DOWNLOAD_CONCURRENCY = 5


class NotionClient:
    """Fetches a Notion database catalog and downloads pages as markdown."""

    def __init__(
        self,
        config: NotionConfig,
        api: Optional[DatabaseSource] = None,
        converter: Optional[MarkdownConverter] = None,
        concurrency: int = DOWNLOAD_CONCURRENCY,
    ):
        """
        Initialize the client.

        Args:
            config: Database and query options
            api: Notion REST client (created from the token when omitted)
            converter: Markdown converter (created over ``api`` when omitted)
            concurrency: Maximum simultaneous page downloads

        Raises:
            MissingTokenError: If neither config.token nor NOTION_TOKEN is set
        """
        settings = Settings()
        token = config.token or settings.token
        if not token:
            raise MissingTokenError(
                "Missing Notion token: pass a token or set NOTION_TOKEN"
            )

        self.config = config.with_token(token)
        self.api = api or NotionAPI(
            token=token,
            api_base=settings.api_base,
            notion_version=settings.api_version,
            timeout=settings.timeout,
        )
        self.n2m = converter or NotionToMarkdown(self.api)
        self.concurrency = concurrency
        self.catalog: List[CatalogEntry] = []

    async def get_page_list(self) -> List[CatalogEntry]:
        """
        Query the database once and normalize every returned page.

        The result also replaces ``self.catalog``.

        Returns:
            Catalog entries in the order Notion returned them
        """
        filter = resolve_filter(self.config.filter)
        sorts = resolve_sorts(self.config.sorts)
        logger.debug(
            f"Querying database {self.config.database_id}: filter={filter}, sorts={sorts}"
        )

        response = await self.api.query_database(
            self.config.database_id,
            filter=filter,
            sorts=sorts,
        )
        catalog = [CatalogEntry.from_page(page) for page in response.get("results", [])]

        self.catalog = catalog
        logger.info(f"Fetched {len(catalog)} pages from database {self.config.database_id}")
        return catalog

    async def download(self, page: CatalogEntry) -> DocDetail:
        """
        Convert one page to markdown.

        Args:
            page: Catalog entry to download

        Returns:
            DocDetail with the markdown body and last edit time in epoch ms
        """
        blocks = await self.n2m.page_to_markdown(page.id)
        body = self.n2m.to_markdown_string(blocks)
        return DocDetail(
            id=page.id,
            doc_id=page.id,
            properties=page.properties,
            body=body,
            body_original=body,
            updated=to_epoch_ms(page.last_edited_time),
        )

    async def get_page_detail_list(
        self,
        cached_pages: List[CatalogEntry],
        ids: Optional[Iterable[str]] = None,
    ) -> List[DocDetail]:
        """
        Download a subset of already fetched catalog entries.

        Args:
            cached_pages: Catalog entries to choose from
            ids: Page IDs to download; all pages when empty or None

        Returns:
            Downloaded documents in completion order
        """
        pages = list(cached_pages)
        if isinstance(ids, str):
            ids = [ids]
        wanted = set(ids or ())
        if wanted:
            kept = []
            for page in pages:
                if page.id in wanted:
                    kept.append(page)
                else:
                    logger.info(f"Skipping download: {page.title}")
            pages = kept

        if not pages:
            logger.info("Skipping: no pages to download")
            return []

        async def fetch(page: CatalogEntry) -> DocDetail:
            doc = await self.download(page)
            logger.info(f"Downloaded: {doc.properties.get('title', doc.id)}")
            return doc

        docs = await bounded_gather(self.concurrency, pages, fetch)
        logger.info(f"Downloaded {len(docs)} documents")
        return docs

    async def close(self) -> None:
        """Close the underlying API client."""
        await self.api.close()

    async def __aenter__(self) -> "NotionClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
