"""Riak PBC Streams

Streamed listings (buckets, keys). The server answers one streaming request
with a run of reply frames, the last of which carries done=true.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Optional

from .connection import Connection
from .exceptions import RiakError, StreamBrokenError, TransportError
from .types import MessageCode
from .wire import (
    parse_list_buckets_resp,
    parse_list_keys_resp,
    render_list_buckets_req,
    render_list_keys_req,
)

logger = logging.getLogger("riakpb.stream")


class ReplyStream:
    """Delivers the batches of one streamed reply, in order.

    The stream owns its connection, which is closed once the terminal batch
    has been returned. After any failure the connection is reconnected and
    the stream refuses further reads.

    Example:
        async with await client.bucket.stream_keys("users") as stream:
            async for keys in stream:
                print(keys)
    """

    def __init__(
        self,
        connection: Connection,
        request_code: MessageCode,
        response_code: MessageCode,
        build_request: Callable[[], bytes],
        parse_reply: Callable[[bytes], tuple[list[bytes], bool]],
    ):
        self._connection = connection
        self._request_code = request_code
        self._response_code = response_code
        self._build_request = build_request
        self._parse_reply = parse_reply

        self._first_request_made = False
        self._done = False
        self._broken = False

    @property
    def connection(self) -> Connection:
        return self._connection

    @property
    def done(self) -> bool:
        """True once the terminal batch has been delivered."""
        return self._done

    async def next_batch(self) -> Optional[list[bytes]]:
        """Fetch the next batch, or None once the stream has ended.

        The terminal batch is returned like any other and may carry data.

        Raises:
            StreamBrokenError: If an earlier call failed or was cancelled.
        """
        if self._broken:
            raise StreamBrokenError("Stream failed earlier and cannot be resumed")
        if self._done:
            return None

        try:
            if not self._first_request_made:
                await self._connection.send(self._request_code, self._build_request())
                self._first_request_made = True

            data = await self._connection.receive(self._response_code)
            batch, done = self._parse_reply(data)
        except RiakError as e:
            self._broken = True
            await self._recover(e)
            raise
        except asyncio.CancelledError:
            # A read cut short leaves the socket mid-frame.
            self._broken = True
            raise

        self._done = done
        if done:
            await self._connection.close()

        return batch

    async def _recover(self, error: RiakError) -> None:
        """Reconnect after a failure; a failed reconnect replaces the error."""
        logger.debug(f"[riakpb] stream failed ({error}), reconnecting")
        try:
            await self._connection.reconnect()
        except TransportError as reconnect_error:
            logger.debug(f"[riakpb] stream reconnect failed: {reconnect_error}")
            raise reconnect_error from error

    async def all(self) -> list[bytes]:
        """Collect every remaining batch into one list."""
        items: list[bytes] = []
        async for batch in self:
            items.extend(batch)
        return items

    async def close(self) -> None:
        """Close the stream's connection."""
        await self._connection.close()

    def __aiter__(self) -> "ReplyStream":
        return self

    async def __anext__(self) -> list[bytes]:
        batch = await self.next_batch()
        if batch is None:
            raise StopAsyncIteration
        return batch

    async def __aenter__(self) -> "ReplyStream":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


def _timeout_ms(connection: Connection) -> int:
    # Riak reads the listing timeout in milliseconds, not seconds.
    return int(connection.timeout * 1000)


class BucketStream(ReplyStream):
    """Stream of bucket names."""

    def __init__(self, connection: Connection, bucket_type: Optional[str | bytes] = None):
        super().__init__(
            connection,
            MessageCode.LIST_BUCKETS_REQ,
            MessageCode.LIST_BUCKETS_RESP,
            lambda: render_list_buckets_req(_timeout_ms(connection), bucket_type),
            parse_list_buckets_resp,
        )


class KeyStream(ReplyStream):
    """Stream of the keys in one bucket."""

    def __init__(
        self,
        connection: Connection,
        bucket: str | bytes,
        bucket_type: Optional[str | bytes] = None,
    ):
        self.bucket = bucket
        self.bucket_type = bucket_type
        super().__init__(
            connection,
            MessageCode.LIST_KEYS_REQ,
            MessageCode.LIST_KEYS_RESP,
            lambda: render_list_keys_req(bucket, _timeout_ms(connection), bucket_type),
            parse_list_keys_resp,
        )
