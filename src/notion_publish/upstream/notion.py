"""Notion REST API client."""

import httpx
from typing import Optional, Dict, Any, List


class NotionAPI:
    """Client for the Notion public API."""

    def __init__(
        self,
        token: str,
        api_base: str = "https://api.notion.com/v1",
        notion_version: str = "2022-06-28",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Notion client.

        Args:
            token: Integration token
            api_base: API base URL
            notion_version: Value of the Notion-Version header
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.api_base = api_base.rstrip("/")
        self.token = token
        self.client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {self.token}",
                "Notion-Version": notion_version,
                "Content-Type": "application/json",
            },
        )

    async def query_database(
        self,
        database_id: str,
        filter: Optional[Dict[str, Any]] = None,
        sorts: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        """
        Query a database once. Only the first page of results is returned.

        Args:
            database_id: Database ID
            filter: Notion filter object (omitted when None)
            sorts: Notion sort rules (omitted when None)

        Returns:
            Raw query response with ``results``
        """
        payload: Dict[str, Any] = {}
        if filter is not None:
            payload["filter"] = filter
        if sorts is not None:
            payload["sorts"] = sorts

        response = await self.client.post(
            f"{self.api_base}/databases/{database_id}/query",
            json=payload,
        )
        response.raise_for_status()
        return response.json()

    async def list_block_children(self, block_id: str) -> List[Dict[str, Any]]:
        """
        List all direct children of a block, following cursors.

        Args:
            block_id: Block or page ID

        Returns:
            Child block objects in document order
        """
        blocks: List[Dict[str, Any]] = []
        cursor: Optional[str] = None

        while True:
            params: Dict[str, Any] = {"page_size": 100}
            if cursor:
                params["start_cursor"] = cursor

            response = await self.client.get(
                f"{self.api_base}/blocks/{block_id}/children",
                params=params,
            )
            response.raise_for_status()

            data = response.json()
            blocks.extend(data.get("results", []))

            cursor = data.get("next_cursor")
            if not data.get("has_more") or not cursor:
                break

        return blocks

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> "NotionAPI":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
