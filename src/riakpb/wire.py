"""Riak PBC Wire Protocol

Frame encoding/decoding and conversion between the client's value records
and protocol buffer payloads.

Frame: [total_len:u32 big-endian][code:u8][payload], where total_len counts
the code byte and the payload but not itself.
"""

import functools
import struct
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Optional

from google.protobuf.message import DecodeError, EncodeError, Message

from . import schema
from .exceptions import InvalidFrameError, SchemaError
from .types import (
    FRAME_HEADER_SIZE,
    LENGTH_PREFIX_SIZE,
    MAX_PAYLOAD_SIZE,
    BucketProps,
    CommitHook,
    DeleteObjectReq,
    FetchObjectReq,
    FetchObjectResp,
    Link,
    ModFun,
    ObjectContent,
    Pair,
    PreflistItem,
    ReplMode,
    SearchQuery,
    SearchResult,
    ServerInfo,
    StoreObjectReq,
    StoreObjectResp,
    YokozunaIndex,
    YokozunaSchema,
)

LENGTH_PREFIX_FORMAT = ">I"
FRAME_HEADER_FORMAT = ">IB"

MAX_UINT32 = 0xFFFFFFFF


def to_bytes(value: str | bytes) -> bytes:
    """Encode names and keys given as str to UTF-8 bytes."""
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    raise TypeError(f"Expected str or bytes, got {type(value).__name__}")


def _optional_bytes(value: Optional[str | bytes]) -> Optional[bytes]:
    return None if value is None else to_bytes(value)


# =============================================================================
# Frames
# =============================================================================


@dataclass
class RawFrame:
    """A decoded frame: message code and opaque payload."""

    code: int
    payload: bytes


def encode_frame(code: int, payload: bytes = b"") -> bytes:
    """Serialize a frame into wire format.

    Args:
        code: Message code (0-255).
        payload: Serialized record, possibly empty.

    Returns:
        Length prefix, code byte and payload, ready to write.

    Raises:
        ValueError: If code is not a u8 or payload cannot be length-prefixed.
    """
    if not 0 <= code <= 0xFF:
        raise ValueError(f"Message code out of range: {code}")
    if len(payload) > MAX_PAYLOAD_SIZE:
        raise ValueError(f"Payload too large: {len(payload)} > {MAX_PAYLOAD_SIZE}")

    return struct.pack(FRAME_HEADER_FORMAT, len(payload) + 1, code) + payload


def parse_length_prefix(data: bytes) -> int:
    """Parse the 4-byte length prefix of a frame.

    Returns:
        Total length of the rest of the frame (code byte + payload).

    Raises:
        InvalidFrameError: If data is too short or the length is zero.
    """
    if len(data) < LENGTH_PREFIX_SIZE:
        raise InvalidFrameError(f"Length prefix too short: {len(data)} < {LENGTH_PREFIX_SIZE}")

    total_len = struct.unpack(LENGTH_PREFIX_FORMAT, data[:LENGTH_PREFIX_SIZE])[0]
    if total_len < 1:
        raise InvalidFrameError("Frame length must include the message code byte")

    return total_len


def decode_frame(data: bytes) -> RawFrame:
    """Parse one complete frame.

    Raises:
        InvalidFrameError: If the frame is truncated or malformed.
    """
    total_len = parse_length_prefix(data)

    if len(data) < FRAME_HEADER_SIZE:
        raise InvalidFrameError(f"Frame too short: {len(data)} < {FRAME_HEADER_SIZE}")

    expected_size = LENGTH_PREFIX_SIZE + total_len
    if len(data) < expected_size:
        raise InvalidFrameError(f"Frame incomplete: {len(data)} < {expected_size}")

    return RawFrame(code=data[LENGTH_PREFIX_SIZE], payload=data[FRAME_HEADER_SIZE:expected_size])


# =============================================================================
# Record Helpers
# =============================================================================


def _serializes(record: str) -> Callable[[Callable[..., Message]], Callable[..., bytes]]:
    """Turn a function building a protobuf message into one returning its bytes.

    Missing required fields and out-of-range or mistyped values surface as
    SchemaError.
    """

    def decorate(build: Callable[..., Message]) -> Callable[..., bytes]:
        @functools.wraps(build)
        def render(*args: Any, **kwargs: Any) -> bytes:
            try:
                return build(*args, **kwargs).SerializeToString()
            except (EncodeError, ValueError, TypeError) as e:
                raise SchemaError(f"Failed to serialize {record}: {e}") from e

        return render

    return decorate


def _parse(message_class: type, data: bytes) -> Any:
    """Parse data into message_class, checking required fields."""
    message = message_class()
    name = message_class.DESCRIPTOR.name
    try:
        message.ParseFromString(data)
    except DecodeError as e:
        raise SchemaError(f"Failed to parse {name}: {e}") from e

    if not message.IsInitialized():
        missing = ", ".join(message.FindInitializationErrors())
        raise SchemaError(f"Failed to parse {name}: missing required fields: {missing}")

    return message


def _copy_to_message(message: Message, record: Any, fields: tuple[tuple[str, str], ...]) -> None:
    """Set each message field whose record attribute is not None."""
    for attr, field_name in fields:
        value = getattr(record, attr)
        if value is not None:
            if isinstance(value, str):
                value = value.encode("utf-8")
            setattr(message, field_name, value)


def _optional(message: Message, field_name: str) -> Any:
    """Value of an optional field, or None if the field is unset."""
    return getattr(message, field_name) if message.HasField(field_name) else None


# =============================================================================
# Errors
# =============================================================================


def parse_error_resp(data: bytes) -> tuple[int, bytes]:
    """Parse an RpbErrorResp payload.

    Returns:
        Tuple of (errcode, errmsg).
    """
    message = _parse(schema.RpbErrorResp, data)
    return message.errcode, message.errmsg


@_serializes("RpbErrorResp")
def render_error_resp(code: int, data: bytes) -> Message:
    """Serialize an RpbErrorResp payload."""
    return schema.RpbErrorResp(errcode=code, errmsg=data)


# =============================================================================
# Server
# =============================================================================


def parse_server_info_resp(data: bytes) -> ServerInfo:
    """Parse an RpbGetServerInfoResp payload; names are decoded leniently."""
    message = _parse(schema.RpbGetServerInfoResp, data)
    return ServerInfo(
        node=message.node.decode("utf-8", errors="replace"),
        server_version=message.server_version.decode("utf-8", errors="replace"),
    )


# =============================================================================
# Bucket Properties
# =============================================================================

_BUCKET_PROPS_SCALARS = (
    "n_val",
    "allow_mult",
    "last_write_wins",
    "has_precommit",
    "has_postcommit",
    "old_vclock",
    "young_vclock",
    "big_vclock",
    "small_vclock",
    "pr",
    "r",
    "w",
    "pw",
    "dw",
    "rw",
    "basic_quorum",
    "notfound_ok",
    "backend",
    "search",
    "repl",
    "search_index",
    "datatype",
    "consistent",
    "write_once",
    "hll_precision",
    "ttl",
)


def _modfun_to_message(modfun: ModFun, message: Message) -> None:
    message.module = to_bytes(modfun.module)
    message.function = to_bytes(modfun.function)


def _modfun_from_message(message: Message) -> ModFun:
    return ModFun(module=message.module, function=message.function)


def _hooks_to_message(hooks: list[CommitHook], repeated: Any) -> None:
    for hook in hooks:
        hook_message = repeated.add()
        if hook.modfun is not None:
            _modfun_to_message(hook.modfun, hook_message.modfun)
        if hook.name is not None:
            hook_message.name = to_bytes(hook.name)


def _hooks_from_message(repeated: Any) -> list[CommitHook]:
    return [
        CommitHook(
            modfun=_modfun_from_message(hook.modfun) if hook.HasField("modfun") else None,
            name=_optional(hook, "name"),
        )
        for hook in repeated
    ]


def bucket_props_to_message(props: BucketProps, message: Message) -> None:
    """Copy every set property into an RpbBucketProps message."""
    _copy_to_message(message, props, tuple((name, name) for name in _BUCKET_PROPS_SCALARS))

    _hooks_to_message(props.precommit, message.precommit)
    _hooks_to_message(props.postcommit, message.postcommit)

    if props.chash_keyfun is not None:
        _modfun_to_message(props.chash_keyfun, message.chash_keyfun)
    if props.linkfun is not None:
        _modfun_to_message(props.linkfun, message.linkfun)


def bucket_props_from_message(message: Message) -> BucketProps:
    """Build BucketProps from an RpbBucketProps message."""
    props = BucketProps(**{name: _optional(message, name) for name in _BUCKET_PROPS_SCALARS})

    if props.repl is not None:
        props.repl = ReplMode(props.repl)

    props.precommit = _hooks_from_message(message.precommit)
    props.postcommit = _hooks_from_message(message.postcommit)

    if message.HasField("chash_keyfun"):
        props.chash_keyfun = _modfun_from_message(message.chash_keyfun)
    if message.HasField("linkfun"):
        props.linkfun = _modfun_from_message(message.linkfun)

    return props


@_serializes("RpbGetBucketReq")
def render_get_bucket_req(bucket: str | bytes, bucket_type: Optional[str | bytes] = None) -> Message:
    message = schema.RpbGetBucketReq(bucket=to_bytes(bucket))
    if bucket_type is not None:
        message.type = to_bytes(bucket_type)
    return message


@_serializes("RpbSetBucketReq")
def render_set_bucket_req(
    bucket: str | bytes,
    props: BucketProps,
    bucket_type: Optional[str | bytes] = None,
) -> Message:
    message = schema.RpbSetBucketReq(bucket=to_bytes(bucket))
    bucket_props_to_message(props, message.props)
    # props is required even when no property is set
    message.props.SetInParent()
    if bucket_type is not None:
        message.type = to_bytes(bucket_type)
    return message


@_serializes("RpbGetBucketTypeReq")
def render_get_bucket_type_req(bucket_type: str | bytes) -> Message:
    return schema.RpbGetBucketTypeReq(type=to_bytes(bucket_type))


@_serializes("RpbSetBucketTypeReq")
def render_set_bucket_type_req(bucket_type: str | bytes, props: BucketProps) -> Message:
    message = schema.RpbSetBucketTypeReq(type=to_bytes(bucket_type))
    bucket_props_to_message(props, message.props)
    message.props.SetInParent()
    return message


@_serializes("RpbResetBucketReq")
def render_reset_bucket_req(bucket_type: str | bytes, bucket: str | bytes) -> Message:
    return schema.RpbResetBucketReq(type=to_bytes(bucket_type), bucket=to_bytes(bucket))


def parse_get_bucket_resp(data: bytes) -> BucketProps:
    """Parse an RpbGetBucketResp payload."""
    message = _parse(schema.RpbGetBucketResp, data)
    return bucket_props_from_message(message.props)


# =============================================================================
# Listing
# =============================================================================


@_serializes("RpbListBucketsReq")
def render_list_buckets_req(
    timeout_ms: Optional[int] = None,
    bucket_type: Optional[str | bytes] = None,
) -> Message:
    """Serialize a streaming RpbListBucketsReq."""
    message = schema.RpbListBucketsReq(stream=True)
    if timeout_ms is not None:
        message.timeout = min(timeout_ms, MAX_UINT32)
    if bucket_type is not None:
        message.type = to_bytes(bucket_type)
    return message


def parse_list_buckets_resp(data: bytes) -> tuple[list[bytes], bool]:
    """Parse an RpbListBucketsResp payload.

    Returns:
        Tuple of (buckets, done).
    """
    message = _parse(schema.RpbListBucketsResp, data)
    return list(message.buckets), message.done


@_serializes("RpbListKeysReq")
def render_list_keys_req(
    bucket: str | bytes,
    timeout_ms: Optional[int] = None,
    bucket_type: Optional[str | bytes] = None,
) -> Message:
    message = schema.RpbListKeysReq(bucket=to_bytes(bucket))
    if timeout_ms is not None:
        message.timeout = min(timeout_ms, MAX_UINT32)
    if bucket_type is not None:
        message.type = to_bytes(bucket_type)
    return message


def parse_list_keys_resp(data: bytes) -> tuple[list[bytes], bool]:
    """Parse an RpbListKeysResp payload.

    Returns:
        Tuple of (keys, done).
    """
    message = _parse(schema.RpbListKeysResp, data)
    return list(message.keys), message.done


# =============================================================================
# Objects
# =============================================================================

_CONTENT_FIELDS = (
    ("content_type", "content_type"),
    ("charset", "charset"),
    ("content_encoding", "content_encoding"),
    ("vtag", "vtag"),
    ("last_mod", "last_mod"),
    ("last_mod_usecs", "last_mod_usecs"),
    ("deleted", "deleted"),
    ("ttl", "ttl"),
)

_PUT_REQ_FIELDS = (
    ("key", "key"),
    ("vclock", "vclock"),
    ("w", "w"),
    ("dw", "dw"),
    ("return_body", "return_body"),
    ("pw", "pw"),
    ("if_not_modified", "if_not_modified"),
    ("if_none_match", "if_none_match"),
    ("return_head", "return_head"),
    ("timeout", "timeout"),
    ("asis", "asis"),
    ("sloppy_quorum", "sloppy_quorum"),
    ("n_val", "n_val"),
    ("bucket_type", "type"),
)

_GET_REQ_FIELDS = (
    ("r", "r"),
    ("pr", "pr"),
    ("basic_quorum", "basic_quorum"),
    ("notfound_ok", "notfound_ok"),
    ("if_modified", "if_modified"),
    ("head", "head"),
    ("deletedvclock", "deletedvclock"),
    ("timeout", "timeout"),
    ("sloppy_quorum", "sloppy_quorum"),
    ("n_val", "n_val"),
    ("bucket_type", "type"),
)

_DEL_REQ_FIELDS = (
    ("rw", "rw"),
    ("vclock", "vclock"),
    ("r", "r"),
    ("w", "w"),
    ("pr", "pr"),
    ("pw", "pw"),
    ("dw", "dw"),
    ("timeout", "timeout"),
    ("sloppy_quorum", "sloppy_quorum"),
    ("n_val", "n_val"),
    ("bucket_type", "type"),
)


def _pairs_to_message(pairs: list[Pair], repeated: Any) -> None:
    for pair in pairs:
        pair_message = repeated.add(key=to_bytes(pair.key))
        if pair.value is not None:
            pair_message.value = to_bytes(pair.value)


def _pairs_from_message(repeated: Any) -> list[Pair]:
    return [Pair(key=pair.key, value=_optional(pair, "value")) for pair in repeated]


def content_to_message(content: ObjectContent, message: Message) -> None:
    """Copy an ObjectContent into an RpbContent message."""
    message.value = to_bytes(content.value)
    _copy_to_message(message, content, _CONTENT_FIELDS)

    for link in content.links:
        link_message = message.links.add()
        _copy_to_message(link_message, link, (("bucket", "bucket"), ("key", "key"), ("tag", "tag")))

    _pairs_to_message(content.usermeta, message.usermeta)
    _pairs_to_message(content.indexes, message.indexes)


def content_from_message(message: Message) -> ObjectContent:
    """Build an ObjectContent from an RpbContent message."""
    content = ObjectContent(value=message.value)
    for attr, field_name in _CONTENT_FIELDS:
        setattr(content, attr, _optional(message, field_name))

    content.links = [
        Link(
            bucket=_optional(link, "bucket"),
            key=_optional(link, "key"),
            tag=_optional(link, "tag"),
        )
        for link in message.links
    ]
    content.usermeta = _pairs_from_message(message.usermeta)
    content.indexes = _pairs_from_message(message.indexes)

    return content


@_serializes("RpbPutReq")
def render_put_req(req: StoreObjectReq) -> Message:
    message = schema.RpbPutReq(bucket=to_bytes(req.bucket))
    content_to_message(req.content, message.content)
    _copy_to_message(message, req, _PUT_REQ_FIELDS)
    return message


def parse_put_resp(data: bytes) -> StoreObjectResp:
    """Parse an RpbPutResp payload. An empty payload is an empty response."""
    message = _parse(schema.RpbPutResp, data)
    return StoreObjectResp(
        content=[content_from_message(content) for content in message.content],
        vclock=_optional(message, "vclock"),
        key=_optional(message, "key"),
    )


@_serializes("RpbGetReq")
def render_get_req(req: FetchObjectReq) -> Message:
    message = schema.RpbGetReq(bucket=to_bytes(req.bucket), key=to_bytes(req.key))
    _copy_to_message(message, req, _GET_REQ_FIELDS)
    return message


def parse_get_resp(data: bytes) -> FetchObjectResp:
    """Parse an RpbGetResp payload. A missing key yields no content."""
    message = _parse(schema.RpbGetResp, data)
    return FetchObjectResp(
        content=[content_from_message(content) for content in message.content],
        vclock=_optional(message, "vclock"),
        unchanged=_optional(message, "unchanged"),
    )


@_serializes("RpbDelReq")
def render_del_req(req: DeleteObjectReq) -> Message:
    message = schema.RpbDelReq(bucket=to_bytes(req.bucket), key=to_bytes(req.key))
    _copy_to_message(message, req, _DEL_REQ_FIELDS)
    return message


# =============================================================================
# Preflist
# =============================================================================


@_serializes("RpbGetBucketKeyPreflistReq")
def render_preflist_req(
    bucket: str | bytes,
    key: str | bytes,
    bucket_type: Optional[str | bytes] = None,
) -> Message:
    message = schema.RpbGetBucketKeyPreflistReq(bucket=to_bytes(bucket), key=to_bytes(key))
    if bucket_type is not None:
        message.type = to_bytes(bucket_type)
    return message


def parse_preflist_resp(data: bytes) -> list[PreflistItem]:
    """Parse an RpbGetBucketKeyPreflistResp payload."""
    message = _parse(schema.RpbGetBucketKeyPreflistResp, data)
    return [
        PreflistItem(
            partition=item.partition,
            node=item.node.decode("utf-8", errors="replace"),
            is_primary=item.primary,
        )
        for item in message.preflist
    ]


# =============================================================================
# Yokozuna
# =============================================================================


def _index_from_message(message: Message) -> YokozunaIndex:
    return YokozunaIndex(
        name=message.name,
        schema=_optional(message, "schema"),
        n_val=_optional(message, "n_val"),
    )


@_serializes("RpbYokozunaSchemaPutReq")
def render_schema_put_req(yz_schema: YokozunaSchema) -> Message:
    message = schema.RpbYokozunaSchemaPutReq()
    message.schema.name = to_bytes(yz_schema.name)
    if yz_schema.content is not None:
        message.schema.content = to_bytes(yz_schema.content)
    return message


@_serializes("RpbYokozunaSchemaGetReq")
def render_schema_get_req(name: str | bytes) -> Message:
    return schema.RpbYokozunaSchemaGetReq(name=to_bytes(name))


def parse_schema_get_resp(data: bytes) -> YokozunaSchema:
    """Parse an RpbYokozunaSchemaGetResp payload."""
    message = _parse(schema.RpbYokozunaSchemaGetResp, data)
    return YokozunaSchema(
        name=message.schema.name,
        content=_optional(message.schema, "content"),
    )


@_serializes("RpbYokozunaIndexPutReq")
def render_index_put_req(index: YokozunaIndex, timeout_ms: Optional[int] = None) -> Message:
    message = schema.RpbYokozunaIndexPutReq()
    message.index.name = to_bytes(index.name)
    _copy_to_message(message.index, index, (("schema", "schema"), ("n_val", "n_val")))
    if timeout_ms is not None:
        message.timeout = min(timeout_ms, MAX_UINT32)
    return message


@_serializes("RpbYokozunaIndexGetReq")
def render_index_get_req(name: Optional[str | bytes] = None) -> Message:
    """Serialize an index lookup; without a name every index is returned."""
    message = schema.RpbYokozunaIndexGetReq()
    if name is not None:
        message.name = to_bytes(name)
    return message


def parse_index_get_resp(data: bytes) -> list[YokozunaIndex]:
    """Parse an RpbYokozunaIndexGetResp payload."""
    message = _parse(schema.RpbYokozunaIndexGetResp, data)
    return [_index_from_message(index) for index in message.index]


@_serializes("RpbYokozunaIndexDeleteReq")
def render_index_delete_req(name: str | bytes) -> Message:
    return schema.RpbYokozunaIndexDeleteReq(name=to_bytes(name))


# =============================================================================
# Search
# =============================================================================

_SEARCH_QUERY_FIELDS = (
    ("rows", "rows"),
    ("start", "start"),
    ("sort", "sort"),
    ("filter", "filter"),
    ("df", "df"),
    ("op", "op"),
    ("presort", "presort"),
)


@_serializes("RpbSearchQueryReq")
def render_search_query_req(query: SearchQuery) -> Message:
    message = schema.RpbSearchQueryReq(q=to_bytes(query.q), index=to_bytes(query.index))
    _copy_to_message(message, query, _SEARCH_QUERY_FIELDS)
    message.fl.extend(to_bytes(name) for name in query.fl)
    return message


def parse_search_query_resp(data: bytes) -> SearchResult:
    """Parse an RpbSearchQueryResp payload.

    Each document maps a field name to all of its values, in reply order.
    """
    message = _parse(schema.RpbSearchQueryResp, data)
    docs = []
    for doc in message.docs:
        fields: dict[bytes, list[bytes]] = {}
        for pair in doc.fields:
            fields.setdefault(pair.key, []).append(pair.value)
        docs.append(fields)
    return SearchResult(
        docs=docs,
        max_score=_optional(message, "max_score"),
        num_found=_optional(message, "num_found"),
    )
