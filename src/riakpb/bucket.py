"""Riak PBC Bucket Operations

Bucket and bucket type properties, and bucket/key listings.
"""

from typing import TYPE_CHECKING, Optional

from .streams import BucketStream, KeyStream
from .types import BucketProps, MessageCode
from .wire import (
    parse_get_bucket_resp,
    render_get_bucket_req,
    render_get_bucket_type_req,
    render_reset_bucket_req,
    render_set_bucket_req,
    render_set_bucket_type_req,
)

if TYPE_CHECKING:
    from .client import RiakClient


class BucketOperations:
    """Bucket operations mixin for RiakClient."""

    def __init__(self, client: "RiakClient"):
        self._client = client

    async def stream_buckets(self, bucket_type: Optional[str | bytes] = None) -> BucketStream:
        """Start listing bucket names on a dedicated connection.

        Args:
            bucket_type: Only list buckets of this bucket type.

        Returns:
            A BucketStream; nothing is sent until its first batch is read.

        Example:
            async with await client.bucket.stream_buckets() as stream:
                async for buckets in stream:
                    print(buckets)
        """
        connection = await self._client._open_stream_connection()
        return BucketStream(connection, bucket_type)

    async def list_buckets(self, bucket_type: Optional[str | bytes] = None) -> list[bytes]:
        """List every bucket name.

        Example:
            buckets = await client.bucket.list_buckets()
        """
        async with await self.stream_buckets(bucket_type) as stream:
            return await stream.all()

    async def stream_keys(
        self,
        bucket: str | bytes,
        bucket_type: Optional[str | bytes] = None,
    ) -> KeyStream:
        """Start listing the keys of a bucket on a dedicated connection.

        Args:
            bucket: Bucket whose keys are listed.
            bucket_type: Bucket type of the bucket.

        Returns:
            A KeyStream; nothing is sent until its first batch is read.
        """
        connection = await self._client._open_stream_connection()
        return KeyStream(connection, bucket, bucket_type)

    async def list_keys(
        self,
        bucket: str | bytes,
        bucket_type: Optional[str | bytes] = None,
    ) -> list[bytes]:
        """List every key of a bucket.

        Example:
            keys = await client.bucket.list_keys("users")
        """
        async with await self.stream_keys(bucket, bucket_type) as stream:
            return await stream.all()

    async def set_properties(
        self,
        bucket: str | bytes,
        props: BucketProps,
        bucket_type: Optional[str | bytes] = None,
    ) -> None:
        """Set properties of a bucket. Fields left as None are not changed.

        Example:
            await client.bucket.set_properties("users", BucketProps(n_val=3, allow_mult=True))
        """
        await self._client._exchange(
            MessageCode.SET_BUCKET_REQ,
            MessageCode.SET_BUCKET_RESP,
            render_set_bucket_req(bucket, props, bucket_type),
        )

    async def get_properties(
        self,
        bucket: str | bytes,
        bucket_type: Optional[str | bytes] = None,
    ) -> BucketProps:
        """Get properties of a bucket.

        Example:
            props = await client.bucket.get_properties("users")
            print(props.n_val)
        """
        data = await self._client._exchange(
            MessageCode.GET_BUCKET_REQ,
            MessageCode.GET_BUCKET_RESP,
            render_get_bucket_req(bucket, bucket_type),
        )
        return parse_get_bucket_resp(data)

    async def set_type_properties(self, bucket_type: str | bytes, props: BucketProps) -> None:
        """Set properties of a bucket type."""
        await self._client._exchange(
            MessageCode.SET_BUCKET_TYPE_REQ,
            MessageCode.SET_BUCKET_RESP,
            render_set_bucket_type_req(bucket_type, props),
        )

    async def get_type_properties(self, bucket_type: str | bytes) -> BucketProps:
        """Get properties of a bucket type."""
        data = await self._client._exchange(
            MessageCode.GET_BUCKET_TYPE_REQ,
            MessageCode.GET_BUCKET_RESP,
            render_get_bucket_type_req(bucket_type),
        )
        return parse_get_bucket_resp(data)

    async def reset(self, bucket_type: str | bytes, bucket: str | bytes) -> None:
        """Reset a bucket's properties to the defaults of its bucket type.

        Example:
            await client.bucket.reset("default", "users")
        """
        await self._client._exchange(
            MessageCode.RESET_BUCKET_REQ,
            MessageCode.RESET_BUCKET_RESP,
            render_reset_bucket_req(bucket_type, bucket),
        )
