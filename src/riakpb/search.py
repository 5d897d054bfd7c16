"""Riak PBC Search Operations

Yokozuna schemas and indexes, and search queries.
"""

from typing import TYPE_CHECKING, Optional

from .types import MessageCode, SearchQuery, SearchResult, YokozunaIndex, YokozunaSchema
from .wire import (
    parse_index_get_resp,
    parse_schema_get_resp,
    parse_search_query_resp,
    render_index_delete_req,
    render_index_get_req,
    render_index_put_req,
    render_schema_get_req,
    render_schema_put_req,
    render_search_query_req,
    to_bytes,
)

if TYPE_CHECKING:
    from .client import RiakClient


class SearchOperations:
    """Search operations mixin for RiakClient."""

    def __init__(self, client: "RiakClient"):
        self._client = client

    async def set_schema(self, name: str | bytes, content: str | bytes) -> None:
        """Create or replace a search schema.

        Example:
            with open("schema.xml", "rb") as f:
                await client.search.set_schema("people", f.read())
        """
        await self._client._exchange(
            MessageCode.YOKOZUNA_SCHEMA_PUT_REQ,
            MessageCode.PUT_RESP,
            render_schema_put_req(YokozunaSchema(name=to_bytes(name), content=to_bytes(content))),
        )

    async def get_schema(self, name: str | bytes) -> bytes:
        """Get the content of a search schema.

        Returns:
            The schema content, empty if the server sent none.
        """
        data = await self._client._exchange(
            MessageCode.YOKOZUNA_SCHEMA_GET_REQ,
            MessageCode.YOKOZUNA_SCHEMA_GET_RESP,
            render_schema_get_req(name),
        )
        return parse_schema_get_resp(data).content or b""

    async def set_index(self, index: YokozunaIndex) -> None:
        """Create a search index.

        Example:
            await client.search.set_index(YokozunaIndex(name=b"people", schema=b"people"))
        """
        await self._client._exchange(
            MessageCode.YOKOZUNA_INDEX_PUT_REQ,
            MessageCode.PUT_RESP,
            render_index_put_req(index),
        )

    async def get_index(self, name: Optional[str | bytes] = None) -> list[YokozunaIndex]:
        """Get one search index, or every index when name is None."""
        data = await self._client._exchange(
            MessageCode.YOKOZUNA_INDEX_GET_REQ,
            MessageCode.YOKOZUNA_INDEX_GET_RESP,
            render_index_get_req(name),
        )
        return parse_index_get_resp(data)

    async def delete_index(self, name: str | bytes) -> None:
        """Delete a search index."""
        await self._client._exchange(
            MessageCode.YOKOZUNA_INDEX_DELETE_REQ,
            MessageCode.DEL_RESP,
            render_index_delete_req(name),
        )

    async def query(self, query: SearchQuery) -> SearchResult:
        """Run a search query.

        Example:
            result = await client.search.query(SearchQuery(q=b"name_s:Alice*", index=b"people"))
            for doc in result.docs:
                print(doc[b"_yz_rk"][0])
        """
        data = await self._client._exchange(
            MessageCode.SEARCH_QUERY_REQ,
            MessageCode.SEARCH_QUERY_RESP,
            render_search_query_req(query),
        )
        return parse_search_query_resp(data)
