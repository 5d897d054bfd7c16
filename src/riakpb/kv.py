"""Riak PBC KV Operations

Object store, fetch and delete, and preference list lookup.
"""

from typing import TYPE_CHECKING, Optional

from .types import (
    DeleteObjectReq,
    FetchObjectReq,
    FetchObjectResp,
    MessageCode,
    PreflistItem,
    StoreObjectReq,
    StoreObjectResp,
)
from .wire import (
    parse_get_resp,
    parse_preflist_resp,
    parse_put_resp,
    render_del_req,
    render_get_req,
    render_preflist_req,
    render_put_req,
)

if TYPE_CHECKING:
    from .client import RiakClient


class KVOperations:
    """KV operations mixin for RiakClient."""

    def __init__(self, client: "RiakClient"):
        self._client = client

    async def store_object(self, req: StoreObjectReq) -> StoreObjectResp:
        """Store an object.

        Args:
            req: Bucket, optional key, content and write options.

        Returns:
            StoreObjectResp. content and vclock are only filled when
            return_body or return_head was set; key is filled when the
            server generated it.

        Example:
            await client.kv.store_object(StoreObjectReq(
                bucket=b"users",
                key=b"alice",
                content=ObjectContent(value=b'{"age": 30}', content_type=b"application/json"),
            ))
        """
        data = await self._client._exchange(
            MessageCode.PUT_REQ,
            MessageCode.PUT_RESP,
            render_put_req(req),
        )
        return parse_put_resp(data)

    async def fetch_object(self, req: FetchObjectReq) -> FetchObjectResp:
        """Fetch an object.

        Returns:
            FetchObjectResp with one content entry per sibling; content is
            empty when the key does not exist.

        Example:
            resp = await client.kv.fetch_object(FetchObjectReq(bucket=b"users", key=b"alice"))
            if resp.content:
                print(resp.content[0].value)
        """
        data = await self._client._exchange(
            MessageCode.GET_REQ,
            MessageCode.GET_RESP,
            render_get_req(req),
        )
        return parse_get_resp(data)

    async def delete_object(self, req: DeleteObjectReq) -> None:
        """Delete an object. Deleting a missing key succeeds."""
        await self._client._exchange(
            MessageCode.DEL_REQ,
            MessageCode.DEL_RESP,
            render_del_req(req),
        )

    async def fetch_preflist(
        self,
        bucket: str | bytes,
        key: str | bytes,
        bucket_type: Optional[str | bytes] = None,
    ) -> list[PreflistItem]:
        """Get the partitions and nodes responsible for a bucket/key.

        Example:
            for item in await client.kv.fetch_preflist("users", "alice"):
                print(item.partition, item.node, item.is_primary)
        """
        data = await self._client._exchange(
            MessageCode.GET_BUCKET_KEY_PREFLIST_REQ,
            MessageCode.GET_BUCKET_KEY_PREFLIST_RESP,
            render_preflist_req(bucket, key, bucket_type),
        )
        return parse_preflist_resp(data)
