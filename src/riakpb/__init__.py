"""Riak PBC Python SDK

An async Python client for the Riak protocol buffers API.

Example:
    import asyncio
    from riakpb import FetchObjectReq, ObjectContent, RiakClient, StoreObjectReq

    async def main():
        async with RiakClient("localhost:8087") as client:
            await client.ping()

            # KV operations
            await client.kv.store_object(StoreObjectReq(
                bucket=b"users", key=b"alice", content=ObjectContent(value=b"Alice"),
            ))
            resp = await client.kv.fetch_object(FetchObjectReq(bucket=b"users", key=b"alice"))
            print(f"Got: {resp.content[0].value}")

            # Listings
            keys = await client.bucket.list_keys("users")

    asyncio.run(main())
"""

from .client import RiakClient
from .connection import Connection
from .exceptions import (
    ConnectionFailedError,
    ConnectionTimeoutError,
    InvalidEndpointError,
    InvalidFrameError,
    NotConnectedError,
    ProtocolError,
    RiakError,
    SchemaError,
    ServerError,
    StreamBrokenError,
    TransportError,
    UnexpectedEofError,
    UnexpectedMessageCodeError,
)
from .streams import BucketStream, KeyStream, ReplyStream
from .types import (
    DEFAULT_TIMEOUT,
    # Bucket types
    BucketProps,
    CommitHook,
    ModFun,
    ReplMode,
    # Object types
    DeleteObjectReq,
    FetchObjectReq,
    FetchObjectResp,
    Link,
    ObjectContent,
    Pair,
    StoreObjectReq,
    StoreObjectResp,
    # Server types
    MessageCode,
    PreflistItem,
    ServerInfo,
    # Search types
    SearchQuery,
    SearchResult,
    YokozunaIndex,
    YokozunaSchema,
)

__version__ = "0.1.0"

__all__ = [
    # Client
    "RiakClient",
    "Connection",
    # Streams
    "ReplyStream",
    "BucketStream",
    "KeyStream",
    # Exceptions
    "RiakError",
    "TransportError",
    "InvalidEndpointError",
    "ConnectionFailedError",
    "ConnectionTimeoutError",
    "NotConnectedError",
    "UnexpectedEofError",
    "StreamBrokenError",
    "ProtocolError",
    "InvalidFrameError",
    "UnexpectedMessageCodeError",
    "SchemaError",
    "ServerError",
    # Types
    "DEFAULT_TIMEOUT",
    "MessageCode",
    "ServerInfo",
    "PreflistItem",
    # Bucket types
    "BucketProps",
    "CommitHook",
    "ModFun",
    "ReplMode",
    # Object types
    "ObjectContent",
    "Link",
    "Pair",
    "StoreObjectReq",
    "StoreObjectResp",
    "FetchObjectReq",
    "FetchObjectResp",
    "DeleteObjectReq",
    # Search types
    "YokozunaIndex",
    "YokozunaSchema",
    "SearchQuery",
    "SearchResult",
]
