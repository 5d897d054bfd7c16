"""Client tests: lifecycle and every named operation."""

import pytest

from fake_riak import FakeSession, MemoryRiak, answer
from riakpb import (
    BucketProps,
    ConnectionFailedError,
    DeleteObjectReq,
    FetchObjectReq,
    NotConnectedError,
    ObjectContent,
    ProtocolError,
    RiakClient,
    SchemaError,
    SearchQuery,
    ServerError,
    StoreObjectReq,
    YokozunaIndex,
)
from riakpb import schema
from riakpb.types import MessageCode
from riakpb.wire import render_error_resp

pytestmark = pytest.mark.asyncio

SCHEMA_XML = b"""<?xml version="1.0" encoding="UTF-8" ?>
<schema name="schedule" version="1.5">
  <fields><field name="_yz_id" type="_yz_str" indexed="true" stored="true" required="true"/></fields>
  <uniqueKey>_yz_id</uniqueKey>
</schema>
"""


class TestLifecycle:
    """Tests for connect, close and reconnect."""

    async def test_not_connected(self) -> None:
        client = RiakClient("localhost:8087")

        with pytest.raises(NotConnectedError):
            await client.ping()

    async def test_connect_refused(self, refused_endpoint: str) -> None:
        with pytest.raises(ConnectionFailedError):
            await RiakClient(refused_endpoint, timeout=5).connect()

    async def test_context_manager(self, riak_server) -> None:
        async with riak_server(answer()) as server:
            async with RiakClient(server.endpoint) as client:
                assert client.is_connected

            assert not client.is_connected

    async def test_reconnect(self, riak_server) -> None:
        async with riak_server(answer(), answer((MessageCode.PING_RESP, b""))) as server:
            async with RiakClient(server.endpoint) as client:
                await client.reconnect()
                await client.ping()

            assert server.connections == 2

    async def test_set_timeout_applies_to_streams(self, riak_server) -> None:
        node = MemoryRiak()

        async with riak_server(fallback=node) as server:
            async with RiakClient(server.endpoint) as client:
                client.set_timeout(30)
                await client.bucket.list_buckets()

        request = schema.RpbListBucketsReq.FromString(server.requests[-1].payload)
        assert request.timeout == 30_000


class TestScenarios:
    """End-to-end scenarios against a scripted node."""

    async def test_ping(self, riak_server) -> None:
        async with riak_server(answer((MessageCode.PING_RESP, b""))) as server:
            async with RiakClient(server.endpoint) as client:
                assert await client.ping() is None

        assert server.requests[0].code == MessageCode.PING_REQ
        assert server.requests[0].payload == b""

    async def test_server_info(self, riak_server) -> None:
        async with riak_server(fallback=MemoryRiak()) as server:
            async with RiakClient(server.endpoint) as client:
                info = await client.server_info()

        assert info.node == "riak@127.0.0.1"
        assert info.server_version == "2.9.10"

    async def test_error_resp_intercepted(self, riak_server) -> None:
        error = (MessageCode.ERROR_RESP, render_error_resp(42, b"bad"))

        async with riak_server(answer(error)) as server:
            async with RiakClient(server.endpoint) as client:
                with pytest.raises(ServerError) as exc_info:
                    await client.ping()

        assert exc_info.value.code == 42
        assert exc_info.value.data == b"bad"

    async def test_store_then_fetch(self, riak_server) -> None:
        async with riak_server(fallback=MemoryRiak()) as server:
            async with RiakClient(server.endpoint) as client:
                await client.kv.store_object(
                    StoreObjectReq(bucket=b"testbucket", key=b"k", content=ObjectContent(value=b"hello"))
                )
                resp = await client.kv.fetch_object(FetchObjectReq(bucket=b"testbucket", key=b"k"))

        assert resp.content[0].value == b"hello"
        assert resp.vclock == b"vclock"

    async def test_list_buckets_streaming(self, riak_server) -> None:
        batches = [
            (MessageCode.LIST_BUCKETS_RESP, schema.RpbListBucketsResp(buckets=[b"a", b"b"]).SerializeToString()),
            (MessageCode.LIST_BUCKETS_RESP, schema.RpbListBucketsResp(buckets=[b"c"]).SerializeToString()),
            (MessageCode.LIST_BUCKETS_RESP, schema.RpbListBucketsResp(done=True).SerializeToString()),
        ]

        async with riak_server(answer(), answer(batches)) as server:
            async with RiakClient(server.endpoint) as client:
                stream = await client.bucket.stream_buckets()
                assert await stream.all() == [b"a", b"b", b"c"]

    async def test_preflist(self, riak_server) -> None:
        async with riak_server(fallback=MemoryRiak()) as server:
            async with RiakClient(server.endpoint) as client:
                items = await client.kv.fetch_preflist(b"bucket", b"key")

        assert len(items) == 3
        assert any(item.is_primary for item in items)
        assert all(item.node for item in items)
        assert all(-(2**63) <= item.partition < 2**63 for item in items)

    async def test_schema_round_trip(self, riak_server) -> None:
        async with riak_server(fallback=MemoryRiak()) as server:
            async with RiakClient(server.endpoint) as client:
                await client.search.set_schema(b"schedule", SCHEMA_XML)
                assert await client.search.get_schema(b"schedule") == SCHEMA_XML

        assert server.requests[0].code == MessageCode.YOKOZUNA_SCHEMA_PUT_REQ


class TestKV:
    """Tests for object operations."""

    async def test_delete_then_fetch(self, riak_server) -> None:
        async with riak_server(fallback=MemoryRiak()) as server:
            async with RiakClient(server.endpoint) as client:
                content = ObjectContent(value=b"v")
                await client.kv.store_object(StoreObjectReq(bucket=b"b", key=b"k", content=content))
                await client.kv.delete_object(DeleteObjectReq(bucket=b"b", key=b"k"))
                resp = await client.kv.fetch_object(FetchObjectReq(bucket=b"b", key=b"k"))

        assert resp.content == []
        assert resp.vclock is None

    async def test_store_without_key(self, riak_server) -> None:
        async with riak_server(fallback=MemoryRiak()) as server:
            async with RiakClient(server.endpoint) as client:
                resp = await client.kv.store_object(StoreObjectReq(bucket=b"b", content=ObjectContent(value=b"v")))

        assert resp.key == b"generated1"
        assert resp.content == []

    async def test_store_return_body(self, riak_server) -> None:
        async with riak_server(fallback=MemoryRiak()) as server:
            async with RiakClient(server.endpoint) as client:
                req = StoreObjectReq(
                    bucket=b"b",
                    key=b"k",
                    content=ObjectContent(value=b"v", content_type=b"text/plain"),
                    return_body=True,
                )
                resp = await client.kv.store_object(req)

        assert resp.content[0].content_type == b"text/plain"
        assert resp.vclock == b"vclock"

    async def test_unexpected_reply_code(self, riak_server) -> None:
        async with riak_server(answer((MessageCode.PUT_RESP, b""))) as server:
            async with RiakClient(server.endpoint) as client:
                with pytest.raises(ProtocolError):
                    await client.kv.fetch_object(FetchObjectReq(bucket=b"b", key=b"k"))

    async def test_invalid_request_not_sent(self, riak_server) -> None:
        async with riak_server(answer()) as server:
            async with RiakClient(server.endpoint) as client:
                with pytest.raises(SchemaError):
                    await client.kv.fetch_object(FetchObjectReq(bucket=b"b", key=b"k", r=-1))

        assert server.requests == []

    async def test_empty_reply_frame(self, riak_server) -> None:
        async def length_one(session: FakeSession) -> None:
            await session.recv_frame()
            await session.send_raw(b"\x00\x00\x00\x01\x0e")
            await session.wait_closed()

        async with riak_server(length_one) as server:
            async with RiakClient(server.endpoint) as client:
                assert await client.kv.delete_object(DeleteObjectReq(bucket=b"b", key=b"k")) is None


class TestBuckets:
    """Tests for bucket operations."""

    async def test_set_then_get_properties(self, riak_server) -> None:
        async with riak_server(fallback=MemoryRiak()) as server:
            async with RiakClient(server.endpoint) as client:
                await client.bucket.set_properties("users", BucketProps(allow_mult=True, n_val=5))
                props = await client.bucket.get_properties("users")

        assert props.allow_mult is True
        assert props.n_val == 5
        assert props.last_write_wins is None

    async def test_reset(self, riak_server) -> None:
        async with riak_server(fallback=MemoryRiak()) as server:
            async with RiakClient(server.endpoint) as client:
                await client.bucket.set_properties("users", BucketProps(n_val=5))
                await client.bucket.reset("default", "users")
                props = await client.bucket.get_properties("users")

        assert props.n_val == 3

    async def test_bucket_type_properties_codes(self, riak_server) -> None:
        props = schema.RpbGetBucketResp()
        props.props.datatype = b"map"
        replies = [(MessageCode.SET_BUCKET_RESP, b""), (MessageCode.GET_BUCKET_RESP, props.SerializeToString())]

        async with riak_server(answer(*replies)) as server:
            async with RiakClient(server.endpoint) as client:
                await client.bucket.set_type_properties("maps", BucketProps(datatype=b"map"))
                result = await client.bucket.get_type_properties("maps")

        assert result.datatype == b"map"
        assert [frame.code for frame in server.requests] == [
            MessageCode.SET_BUCKET_TYPE_REQ,
            MessageCode.GET_BUCKET_TYPE_REQ,
        ]

    async def test_list_keys(self, riak_server) -> None:
        node = MemoryRiak(batch_size=2)

        async with riak_server(fallback=node) as server:
            async with RiakClient(server.endpoint) as client:
                for key in (b"a", b"b", b"c"):
                    await client.kv.store_object(
                        StoreObjectReq(bucket=b"users", key=key, content=ObjectContent(value=b""))
                    )
                assert await client.bucket.list_keys("users") == [b"a", b"b", b"c"]
                assert await client.bucket.list_buckets() == [b"users"]
                assert client.is_connected

        assert server.connections == 3

    async def test_stream_keys_batches(self, riak_server) -> None:
        node = MemoryRiak(batch_size=2)

        async with riak_server(fallback=node) as server:
            async with RiakClient(server.endpoint) as client:
                for key in (b"a", b"b", b"c"):
                    await client.kv.store_object(
                        StoreObjectReq(bucket=b"users", key=key, content=ObjectContent(value=b""))
                    )
                async with await client.bucket.stream_keys("users") as stream:
                    batches = [batch async for batch in stream]

        assert batches == [[b"a", b"b"], [b"c"], []]


class TestSearch:
    """Tests for search operations."""

    async def test_get_missing_schema(self, riak_server) -> None:
        async with riak_server(fallback=MemoryRiak()) as server:
            async with RiakClient(server.endpoint) as client:
                with pytest.raises(ServerError, match="notfound"):
                    await client.search.get_schema("missing")

    async def test_index_operations_reply_codes(self, riak_server) -> None:
        indexes = schema.RpbYokozunaIndexGetResp()
        indexes.index.add(name=b"people", schema=b"_yz_default", n_val=3)
        replies = [
            (MessageCode.PUT_RESP, b""),
            (MessageCode.YOKOZUNA_INDEX_GET_RESP, indexes.SerializeToString()),
            (MessageCode.DEL_RESP, b""),
        ]

        async with riak_server(answer(*replies)) as server:
            async with RiakClient(server.endpoint) as client:
                await client.search.set_index(YokozunaIndex(name=b"people", schema=b"_yz_default"))
                found = await client.search.get_index("people")
                await client.search.delete_index("people")

        assert found == [YokozunaIndex(name=b"people", schema=b"_yz_default", n_val=3)]
        assert [frame.code for frame in server.requests] == [56, 54, 57]

    async def test_query(self, riak_server) -> None:
        resp = schema.RpbSearchQueryResp(num_found=1, max_score=0.5)
        resp.docs.add().fields.add(key=b"_yz_rk", value=b"alice")

        async with riak_server(answer((MessageCode.SEARCH_QUERY_RESP, resp.SerializeToString()))) as server:
            async with RiakClient(server.endpoint) as client:
                result = await client.search.query(SearchQuery(q=b"*:*", index=b"people"))

        assert result.docs == [{b"_yz_rk": [b"alice"]}]
        assert result.num_found == 1
        assert server.requests[0].code == MessageCode.SEARCH_QUERY_REQ
