"""Riak PBC Types

Core types, constants, and data classes for the Riak Protocol Buffers client.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional


# =============================================================================
# Protocol Constants
# =============================================================================

DEFAULT_TIMEOUT: int = 3600  # seconds
LENGTH_PREFIX_SIZE: int = 4
FRAME_HEADER_SIZE: int = LENGTH_PREFIX_SIZE + 1  # length + message code
MAX_FRAME_LENGTH: int = 0xFFFFFFFF  # u32 total length (code byte + payload)
MAX_PAYLOAD_SIZE: int = MAX_FRAME_LENGTH - 1


# =============================================================================
# Enums
# =============================================================================


class MessageCode(IntEnum):
    """Message codes for Riak PBC frames.

    Some responses are shared between requests: GET_BUCKET_TYPE_REQ is
    answered with GET_BUCKET_RESP, SET_BUCKET_TYPE_REQ with SET_BUCKET_RESP,
    the Yokozuna put requests with PUT_RESP and YOKOZUNA_INDEX_DELETE_REQ
    with DEL_RESP.
    """

    ERROR_RESP = 0
    PING_REQ = 1
    PING_RESP = 2
    GET_SERVER_INFO_REQ = 7
    GET_SERVER_INFO_RESP = 8

    # Objects
    GET_REQ = 9
    GET_RESP = 10
    PUT_REQ = 11
    PUT_RESP = 12
    DEL_REQ = 13
    DEL_RESP = 14

    # Listing (streamed)
    LIST_BUCKETS_REQ = 15
    LIST_BUCKETS_RESP = 16
    LIST_KEYS_REQ = 17
    LIST_KEYS_RESP = 18

    # Bucket properties
    GET_BUCKET_REQ = 19
    GET_BUCKET_RESP = 20
    SET_BUCKET_REQ = 21
    SET_BUCKET_RESP = 22

    # Search
    SEARCH_QUERY_REQ = 27
    SEARCH_QUERY_RESP = 28

    # Bucket reset / bucket types
    RESET_BUCKET_REQ = 29
    RESET_BUCKET_RESP = 30
    GET_BUCKET_TYPE_REQ = 31
    SET_BUCKET_TYPE_REQ = 32

    # Preflist
    GET_BUCKET_KEY_PREFLIST_REQ = 33
    GET_BUCKET_KEY_PREFLIST_RESP = 34

    # Yokozuna
    YOKOZUNA_INDEX_GET_REQ = 54
    YOKOZUNA_INDEX_GET_RESP = 55
    YOKOZUNA_INDEX_PUT_REQ = 56
    YOKOZUNA_INDEX_DELETE_REQ = 57
    YOKOZUNA_SCHEMA_GET_REQ = 58
    YOKOZUNA_SCHEMA_GET_RESP = 59
    YOKOZUNA_SCHEMA_PUT_REQ = 60


def code_name(code: int) -> str:
    """Get a printable name for a message code, known or not."""
    try:
        return MessageCode(code).name
    except ValueError:
        return f"UNKNOWN({code})"


class ReplMode(IntEnum):
    """Replication mode of a bucket (RpbBucketProps.RpbReplMode)."""

    FALSE = 0
    REALTIME = 1
    FULLSYNC = 2
    TRUE = 3


# =============================================================================
# Server Types
# =============================================================================


@dataclass
class ServerInfo:
    """Node name and server version reported by the server."""

    node: str
    server_version: str


@dataclass
class PreflistItem:
    """A partition responsible for a bucket/key, and the node that owns it."""

    partition: int
    node: str
    is_primary: bool


# =============================================================================
# Bucket Types
# =============================================================================


@dataclass
class ModFun:
    """An Erlang module/function pair."""

    module: bytes
    function: bytes


@dataclass
class CommitHook:
    """A pre- or post-commit hook, either an Erlang modfun or a named hook."""

    modfun: Optional[ModFun] = None
    name: Optional[bytes] = None


@dataclass
class BucketProps:
    """Properties of a bucket or bucket type.

    Fields left as None are not sent to (or were not returned by) the server.
    """

    n_val: Optional[int] = None
    allow_mult: Optional[bool] = None
    last_write_wins: Optional[bool] = None
    precommit: list[CommitHook] = field(default_factory=list)
    has_precommit: Optional[bool] = None
    postcommit: list[CommitHook] = field(default_factory=list)
    has_postcommit: Optional[bool] = None
    chash_keyfun: Optional[ModFun] = None
    linkfun: Optional[ModFun] = None
    old_vclock: Optional[int] = None
    young_vclock: Optional[int] = None
    big_vclock: Optional[int] = None
    small_vclock: Optional[int] = None
    pr: Optional[int] = None
    r: Optional[int] = None
    w: Optional[int] = None
    pw: Optional[int] = None
    dw: Optional[int] = None
    rw: Optional[int] = None
    basic_quorum: Optional[bool] = None
    notfound_ok: Optional[bool] = None
    backend: Optional[bytes] = None
    search: Optional[bool] = None
    repl: Optional[ReplMode] = None
    search_index: Optional[bytes] = None
    datatype: Optional[bytes] = None
    consistent: Optional[bool] = None
    write_once: Optional[bool] = None
    hll_precision: Optional[int] = None
    ttl: Optional[int] = None


# =============================================================================
# Object Types
# =============================================================================


@dataclass
class Link:
    """A link from an object to another bucket/key."""

    bucket: Optional[bytes] = None
    key: Optional[bytes] = None
    tag: Optional[bytes] = None


@dataclass
class Pair:
    """A key/value pair (user metadata, secondary index entry, search field)."""

    key: bytes
    value: Optional[bytes] = None


@dataclass
class ObjectContent:
    """The value stored for a key, and its metadata. One per sibling."""

    value: bytes
    content_type: Optional[bytes] = None
    charset: Optional[bytes] = None
    content_encoding: Optional[bytes] = None
    vtag: Optional[bytes] = None
    links: list[Link] = field(default_factory=list)
    last_mod: Optional[int] = None
    last_mod_usecs: Optional[int] = None
    usermeta: list[Pair] = field(default_factory=list)
    indexes: list[Pair] = field(default_factory=list)
    deleted: Optional[bool] = None
    ttl: Optional[int] = None


@dataclass
class StoreObjectReq:
    """Request to store an object. Without a key the server assigns one."""

    bucket: bytes
    content: ObjectContent
    key: Optional[bytes] = None
    vclock: Optional[bytes] = None
    w: Optional[int] = None
    dw: Optional[int] = None
    return_body: Optional[bool] = None
    pw: Optional[int] = None
    if_not_modified: Optional[bool] = None
    if_none_match: Optional[bool] = None
    return_head: Optional[bool] = None
    timeout: Optional[int] = None
    asis: Optional[bool] = None
    sloppy_quorum: Optional[bool] = None
    n_val: Optional[int] = None
    bucket_type: Optional[bytes] = None


@dataclass
class StoreObjectResp:
    """Result of storing an object.

    content and vclock are only populated when return_body or return_head
    was requested; key is set when the server generated the key.
    """

    content: list[ObjectContent] = field(default_factory=list)
    vclock: Optional[bytes] = None
    key: Optional[bytes] = None


@dataclass
class FetchObjectReq:
    """Request to fetch an object."""

    bucket: bytes
    key: bytes
    r: Optional[int] = None
    pr: Optional[int] = None
    basic_quorum: Optional[bool] = None
    notfound_ok: Optional[bool] = None
    if_modified: Optional[bytes] = None  # vclock; reply is "unchanged" if it matches
    head: Optional[bool] = None
    deletedvclock: Optional[bool] = None
    timeout: Optional[int] = None
    sloppy_quorum: Optional[bool] = None
    n_val: Optional[int] = None
    bucket_type: Optional[bytes] = None


@dataclass
class FetchObjectResp:
    """Result of fetching an object.

    content holds every sibling and is empty when the key was not found.
    """

    content: list[ObjectContent] = field(default_factory=list)
    vclock: Optional[bytes] = None
    unchanged: Optional[bool] = None


@dataclass
class DeleteObjectReq:
    """Request to delete an object."""

    bucket: bytes
    key: bytes
    rw: Optional[int] = None
    vclock: Optional[bytes] = None
    r: Optional[int] = None
    w: Optional[int] = None
    pr: Optional[int] = None
    pw: Optional[int] = None
    dw: Optional[int] = None
    timeout: Optional[int] = None
    sloppy_quorum: Optional[bool] = None
    n_val: Optional[int] = None
    bucket_type: Optional[bytes] = None


# =============================================================================
# Search Types
# =============================================================================


@dataclass
class YokozunaIndex:
    """A search index definition."""

    name: bytes
    schema: Optional[bytes] = None
    n_val: Optional[int] = None


@dataclass
class YokozunaSchema:
    """A search schema (Solr schema XML)."""

    name: bytes
    content: Optional[bytes] = None


@dataclass
class SearchQuery:
    """A search query against an index."""

    q: bytes
    index: bytes
    rows: Optional[int] = None
    start: Optional[int] = None
    sort: Optional[bytes] = None
    filter: Optional[bytes] = None
    df: Optional[bytes] = None  # default field
    op: Optional[bytes] = None  # default operator ("and" / "or")
    fl: list[bytes] = field(default_factory=list)  # field list to return
    presort: Optional[bytes] = None


@dataclass
class SearchResult:
    """Result of a search query. Each doc maps field names to their values."""

    docs: list[dict[bytes, list[bytes]]] = field(default_factory=list)
    max_score: Optional[float] = None
    num_found: Optional[int] = None
