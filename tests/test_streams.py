"""Reply stream tests."""

import asyncio

import pytest

from fake_riak import FakeSession, answer
from riakpb import schema
from riakpb.connection import Connection
from riakpb.exceptions import (
    ConnectionFailedError,
    SchemaError,
    ServerError,
    StreamBrokenError,
    UnexpectedEofError,
)
from riakpb.streams import BucketStream, KeyStream
from riakpb.types import MessageCode
from riakpb.wire import encode_frame, render_error_resp

pytestmark = pytest.mark.asyncio


def keys_batch(keys: list[bytes], done: bool = False) -> tuple[int, bytes]:
    message = schema.RpbListKeysResp(keys=keys)
    if done:
        message.done = True
    return MessageCode.LIST_KEYS_RESP, message.SerializeToString()


def buckets_batch(buckets: list[bytes], done: bool = False) -> tuple[int, bytes]:
    message = schema.RpbListBucketsResp(buckets=buckets)
    if done:
        message.done = True
    return MessageCode.LIST_BUCKETS_RESP, message.SerializeToString()


class TestKeyStream:
    """Tests for streamed key listing."""

    async def test_batches_in_order(self, riak_server) -> None:
        batches = [keys_batch([b"a", b"b"]), keys_batch([b"c"]), keys_batch([b"d"], done=True)]

        async with riak_server(answer(batches)) as server:
            connection = await Connection.open("127.0.0.1", server.port, 5)
            stream = KeyStream(connection, "users")

            assert await stream.next_batch() == [b"a", b"b"]
            assert await stream.next_batch() == [b"c"]
            assert not stream.done
            assert await stream.next_batch() == [b"d"]
            assert stream.done
            assert await stream.next_batch() is None
            assert await stream.next_batch() is None

        assert len(server.requests) == 1
        request = schema.RpbListKeysReq.FromString(server.requests[0].payload)
        assert server.requests[0].code == MessageCode.LIST_KEYS_REQ
        assert request.bucket == b"users"
        assert request.timeout == 5000
        assert not request.HasField("type")

    async def test_connection_closed_after_terminal_batch(self, riak_server) -> None:
        async with riak_server(answer([keys_batch([], done=True)])) as server:
            connection = await Connection.open("127.0.0.1", server.port, 5)
            stream = KeyStream(connection, b"users")

            assert await stream.next_batch() == []
            assert not connection.is_connected

    async def test_nothing_sent_before_first_read(self, riak_server) -> None:
        async with riak_server(answer([keys_batch([b"a"], done=True)])) as server:
            connection = await Connection.open("127.0.0.1", server.port, 5)
            stream = KeyStream(connection, b"users", bucket_type=b"maps")

            assert server.requests == []
            assert await stream.all() == [b"a"]

        assert schema.RpbListKeysReq.FromString(server.requests[0].payload).type == b"maps"

    async def test_async_for(self, riak_server) -> None:
        batches = [keys_batch([b"a"]), keys_batch([b"b"], done=True)]

        async with riak_server(answer(batches)) as server:
            connection = await Connection.open("127.0.0.1", server.port, 5)
            seen = [batch async for batch in KeyStream(connection, b"users")]

        assert seen == [[b"a"], [b"b"]]

    async def test_context_manager_closes(self, riak_server) -> None:
        async with riak_server(answer()) as server:
            connection = await Connection.open("127.0.0.1", server.port, 5)
            async with KeyStream(connection, b"users"):
                pass

            assert not connection.is_connected


class TestBucketStream:
    """Tests for streamed bucket listing."""

    async def test_all(self, riak_server) -> None:
        batches = [buckets_batch([b"a"]), buckets_batch([b"b", b"c"], done=True)]

        async with riak_server(answer(batches)) as server:
            connection = await Connection.open("127.0.0.1", server.port, 60)
            assert await BucketStream(connection).all() == [b"a", b"b", b"c"]

        request = schema.RpbListBucketsReq.FromString(server.requests[0].payload)
        assert server.requests[0].code == MessageCode.LIST_BUCKETS_REQ
        assert request.stream is True
        assert request.timeout == 60_000

    async def test_final_batch_with_data(self, riak_server) -> None:
        async with riak_server(answer([buckets_batch([b"only"], done=True)])) as server:
            connection = await Connection.open("127.0.0.1", server.port, 5)
            stream = BucketStream(connection, "maps")

            assert await stream.next_batch() == [b"only"]
            assert await stream.next_batch() is None


class TestStreamFailure:
    """Tests for failures in the middle of a stream."""

    async def test_parse_failure_reconnects(self, riak_server) -> None:
        batches = [keys_batch([b"a"]), (MessageCode.LIST_KEYS_RESP, b"\x0a\x09trunc")]

        async with riak_server(answer(batches), answer()) as server:
            connection = await Connection.open("127.0.0.1", server.port, 5)
            stream = KeyStream(connection, b"users")

            assert await stream.next_batch() == [b"a"]
            with pytest.raises(SchemaError):
                await stream.next_batch()

            await server.wait_connections(2)
            assert connection.is_connected

            with pytest.raises(StreamBrokenError):
                await stream.next_batch()

            await stream.close()

    async def test_server_error_mid_stream(self, riak_server) -> None:
        batches = [keys_batch([b"a"]), (MessageCode.ERROR_RESP, render_error_resp(1, b"overload"))]

        async with riak_server(answer(batches), answer()) as server:
            connection = await Connection.open("127.0.0.1", server.port, 5)
            stream = KeyStream(connection, b"users")

            with pytest.raises(ServerError, match="overload"):
                await stream.all()

            await server.wait_connections(2)
            await stream.close()

    async def test_reconnect_failure_replaces_error(self, riak_server) -> None:
        async def bad_reply_then_shut_down(session: FakeSession) -> None:
            await session.recv_frame()
            session.server.stop_listening()
            await session.send_frame(MessageCode.LIST_KEYS_RESP, b"\xff")
            await session.wait_closed()

        async with riak_server(bad_reply_then_shut_down) as server:
            connection = await Connection.open("127.0.0.1", server.port, 5)
            stream = KeyStream(connection, b"users")

            with pytest.raises(ConnectionFailedError) as exc_info:
                await stream.next_batch()

            with pytest.raises(StreamBrokenError):
                await stream.next_batch()

        assert isinstance(exc_info.value.__cause__, SchemaError)

    async def test_eof_mid_stream(self, riak_server) -> None:
        async def hang_up_after_first(session: FakeSession) -> None:
            await session.recv_frame()
            code, payload = keys_batch([b"a"])
            await session.send_frame(code, payload)

        async with riak_server(hang_up_after_first, answer()) as server:
            connection = await Connection.open("127.0.0.1", server.port, 5)
            stream = KeyStream(connection, b"users")

            with pytest.raises(UnexpectedEofError):
                await stream.all()

            await server.wait_connections(2)
            await stream.close()

    async def test_cancelled_read_breaks_stream(self, riak_server) -> None:
        async def length_prefix_only(session: FakeSession) -> None:
            await session.recv_frame()
            frame = encode_frame(*keys_batch([b"a"], done=True))
            await session.send_raw(frame[:4])
            await session.wait_closed()

        async with riak_server(length_prefix_only) as server:
            connection = await Connection.open("127.0.0.1", server.port, 5)
            stream = KeyStream(connection, b"users")

            with pytest.raises(asyncio.TimeoutError):
                await asyncio.wait_for(stream.next_batch(), 0.1)

            with pytest.raises(StreamBrokenError):
                await stream.next_batch()

            await stream.close()
