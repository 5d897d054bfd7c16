"""Riak PBC Schema

Protocol buffer records of the Riak PBC API (riak.proto, riak_kv.proto,
riak_search.proto and riak_yokozuna.proto), limited to the messages this
client exchanges.

The records are declared here as descriptor tables and turned into message
classes with the protobuf runtime, so no protoc step is needed. Field
numbers, labels and types follow the upstream .proto files exactly.
"""

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

_F = descriptor_pb2.FieldDescriptorProto

OPTIONAL = _F.LABEL_OPTIONAL
REQUIRED = _F.LABEL_REQUIRED
REPEATED = _F.LABEL_REPEATED

BYTES = _F.TYPE_BYTES
UINT32 = _F.TYPE_UINT32
INT64 = _F.TYPE_INT64
BOOL = _F.TYPE_BOOL
FLOAT = _F.TYPE_FLOAT
MESSAGE = _F.TYPE_MESSAGE
ENUM = _F.TYPE_ENUM

PACKAGE = "riak"

# (name, number, label, type, type name for messages/enums)
_MESSAGES: dict[str, list[tuple]] = {
    # riak.proto
    "RpbErrorResp": [
        ("errmsg", 1, REQUIRED, BYTES),
        ("errcode", 2, REQUIRED, UINT32),
    ],
    "RpbGetServerInfoResp": [
        ("node", 1, OPTIONAL, BYTES),
        ("server_version", 2, OPTIONAL, BYTES),
    ],
    "RpbPair": [
        ("key", 1, REQUIRED, BYTES),
        ("value", 2, OPTIONAL, BYTES),
    ],
    "RpbGetBucketReq": [
        ("bucket", 1, REQUIRED, BYTES),
        ("type", 2, OPTIONAL, BYTES),
    ],
    "RpbGetBucketResp": [
        ("props", 1, REQUIRED, MESSAGE, "RpbBucketProps"),
    ],
    "RpbSetBucketReq": [
        ("bucket", 1, REQUIRED, BYTES),
        ("props", 2, REQUIRED, MESSAGE, "RpbBucketProps"),
        ("type", 3, OPTIONAL, BYTES),
    ],
    "RpbResetBucketReq": [
        ("bucket", 1, REQUIRED, BYTES),
        ("type", 2, OPTIONAL, BYTES),
    ],
    "RpbGetBucketTypeReq": [
        ("type", 1, REQUIRED, BYTES),
    ],
    "RpbSetBucketTypeReq": [
        ("type", 1, REQUIRED, BYTES),
        ("props", 2, REQUIRED, MESSAGE, "RpbBucketProps"),
    ],
    "RpbModFun": [
        ("module", 1, REQUIRED, BYTES),
        ("function", 2, REQUIRED, BYTES),
    ],
    "RpbCommitHook": [
        ("modfun", 1, OPTIONAL, MESSAGE, "RpbModFun"),
        ("name", 2, OPTIONAL, BYTES),
    ],
    "RpbBucketProps": [
        ("n_val", 1, OPTIONAL, UINT32),
        ("allow_mult", 2, OPTIONAL, BOOL),
        ("last_write_wins", 3, OPTIONAL, BOOL),
        ("precommit", 4, REPEATED, MESSAGE, "RpbCommitHook"),
        ("has_precommit", 5, OPTIONAL, BOOL),
        ("postcommit", 6, REPEATED, MESSAGE, "RpbCommitHook"),
        ("has_postcommit", 7, OPTIONAL, BOOL),
        ("chash_keyfun", 8, OPTIONAL, MESSAGE, "RpbModFun"),
        ("linkfun", 9, OPTIONAL, MESSAGE, "RpbModFun"),
        ("old_vclock", 10, OPTIONAL, UINT32),
        ("young_vclock", 11, OPTIONAL, UINT32),
        ("big_vclock", 12, OPTIONAL, UINT32),
        ("small_vclock", 13, OPTIONAL, UINT32),
        ("pr", 14, OPTIONAL, UINT32),
        ("r", 15, OPTIONAL, UINT32),
        ("w", 16, OPTIONAL, UINT32),
        ("pw", 17, OPTIONAL, UINT32),
        ("dw", 18, OPTIONAL, UINT32),
        ("rw", 19, OPTIONAL, UINT32),
        ("basic_quorum", 20, OPTIONAL, BOOL),
        ("notfound_ok", 21, OPTIONAL, BOOL),
        ("backend", 22, OPTIONAL, BYTES),
        ("search", 23, OPTIONAL, BOOL),
        ("repl", 24, OPTIONAL, ENUM, "RpbBucketProps.RpbReplMode"),
        ("search_index", 25, OPTIONAL, BYTES),
        ("datatype", 26, OPTIONAL, BYTES),
        ("consistent", 27, OPTIONAL, BOOL),
        ("write_once", 28, OPTIONAL, BOOL),
        ("hll_precision", 29, OPTIONAL, UINT32),
        ("ttl", 30, OPTIONAL, UINT32),
    ],
    # riak_kv.proto
    "RpbGetReq": [
        ("bucket", 1, REQUIRED, BYTES),
        ("key", 2, REQUIRED, BYTES),
        ("r", 3, OPTIONAL, UINT32),
        ("pr", 4, OPTIONAL, UINT32),
        ("basic_quorum", 5, OPTIONAL, BOOL),
        ("notfound_ok", 6, OPTIONAL, BOOL),
        ("if_modified", 7, OPTIONAL, BYTES),
        ("head", 8, OPTIONAL, BOOL),
        ("deletedvclock", 9, OPTIONAL, BOOL),
        ("timeout", 10, OPTIONAL, UINT32),
        ("sloppy_quorum", 11, OPTIONAL, BOOL),
        ("n_val", 12, OPTIONAL, UINT32),
        ("type", 13, OPTIONAL, BYTES),
    ],
    "RpbGetResp": [
        ("content", 1, REPEATED, MESSAGE, "RpbContent"),
        ("vclock", 2, OPTIONAL, BYTES),
        ("unchanged", 3, OPTIONAL, BOOL),
    ],
    "RpbPutReq": [
        ("bucket", 1, REQUIRED, BYTES),
        ("key", 2, OPTIONAL, BYTES),
        ("vclock", 3, OPTIONAL, BYTES),
        ("content", 4, REQUIRED, MESSAGE, "RpbContent"),
        ("w", 5, OPTIONAL, UINT32),
        ("dw", 6, OPTIONAL, UINT32),
        ("return_body", 7, OPTIONAL, BOOL),
        ("pw", 8, OPTIONAL, UINT32),
        ("if_not_modified", 9, OPTIONAL, BOOL),
        ("if_none_match", 10, OPTIONAL, BOOL),
        ("return_head", 11, OPTIONAL, BOOL),
        ("timeout", 12, OPTIONAL, UINT32),
        ("asis", 13, OPTIONAL, BOOL),
        ("sloppy_quorum", 14, OPTIONAL, BOOL),
        ("n_val", 15, OPTIONAL, UINT32),
        ("type", 16, OPTIONAL, BYTES),
    ],
    "RpbPutResp": [
        ("content", 1, REPEATED, MESSAGE, "RpbContent"),
        ("vclock", 2, OPTIONAL, BYTES),
        ("key", 3, OPTIONAL, BYTES),
    ],
    "RpbDelReq": [
        ("bucket", 1, REQUIRED, BYTES),
        ("key", 2, REQUIRED, BYTES),
        ("rw", 3, OPTIONAL, UINT32),
        ("vclock", 4, OPTIONAL, BYTES),
        ("r", 5, OPTIONAL, UINT32),
        ("w", 6, OPTIONAL, UINT32),
        ("pr", 7, OPTIONAL, UINT32),
        ("pw", 8, OPTIONAL, UINT32),
        ("dw", 9, OPTIONAL, UINT32),
        ("timeout", 10, OPTIONAL, UINT32),
        ("sloppy_quorum", 11, OPTIONAL, BOOL),
        ("n_val", 12, OPTIONAL, UINT32),
        ("type", 13, OPTIONAL, BYTES),
    ],
    "RpbListBucketsReq": [
        ("timeout", 1, OPTIONAL, UINT32),
        ("stream", 2, OPTIONAL, BOOL),
        ("type", 3, OPTIONAL, BYTES),
    ],
    "RpbListBucketsResp": [
        ("buckets", 1, REPEATED, BYTES),
        ("done", 2, OPTIONAL, BOOL),
    ],
    "RpbListKeysReq": [
        ("bucket", 1, REQUIRED, BYTES),
        ("timeout", 2, OPTIONAL, UINT32),
        ("type", 3, OPTIONAL, BYTES),
    ],
    "RpbListKeysResp": [
        ("keys", 1, REPEATED, BYTES),
        ("done", 2, OPTIONAL, BOOL),
    ],
    "RpbContent": [
        ("value", 1, REQUIRED, BYTES),
        ("content_type", 2, OPTIONAL, BYTES),
        ("charset", 3, OPTIONAL, BYTES),
        ("content_encoding", 4, OPTIONAL, BYTES),
        ("vtag", 5, OPTIONAL, BYTES),
        ("links", 6, REPEATED, MESSAGE, "RpbLink"),
        ("last_mod", 7, OPTIONAL, UINT32),
        ("last_mod_usecs", 8, OPTIONAL, UINT32),
        ("usermeta", 9, REPEATED, MESSAGE, "RpbPair"),
        ("indexes", 10, REPEATED, MESSAGE, "RpbPair"),
        ("deleted", 11, OPTIONAL, BOOL),
        ("ttl", 12, OPTIONAL, UINT32),
    ],
    "RpbLink": [
        ("bucket", 1, OPTIONAL, BYTES),
        ("key", 2, OPTIONAL, BYTES),
        ("tag", 3, OPTIONAL, BYTES),
    ],
    "RpbGetBucketKeyPreflistReq": [
        ("bucket", 1, REQUIRED, BYTES),
        ("key", 2, REQUIRED, BYTES),
        ("type", 3, OPTIONAL, BYTES),
    ],
    "RpbGetBucketKeyPreflistResp": [
        ("preflist", 1, REPEATED, MESSAGE, "RpbBucketKeyPreflistItem"),
    ],
    "RpbBucketKeyPreflistItem": [
        ("partition", 1, REQUIRED, INT64),
        ("node", 2, REQUIRED, BYTES),
        ("primary", 3, REQUIRED, BOOL),
    ],
    # riak_search.proto
    "RpbSearchDoc": [
        ("fields", 1, REPEATED, MESSAGE, "RpbPair"),
    ],
    "RpbSearchQueryReq": [
        ("q", 1, REQUIRED, BYTES),
        ("index", 2, REQUIRED, BYTES),
        ("rows", 3, OPTIONAL, UINT32),
        ("start", 4, OPTIONAL, UINT32),
        ("sort", 5, OPTIONAL, BYTES),
        ("filter", 6, OPTIONAL, BYTES),
        ("df", 7, OPTIONAL, BYTES),
        ("op", 8, OPTIONAL, BYTES),
        ("fl", 9, REPEATED, BYTES),
        ("presort", 10, OPTIONAL, BYTES),
    ],
    "RpbSearchQueryResp": [
        ("docs", 1, REPEATED, MESSAGE, "RpbSearchDoc"),
        ("max_score", 2, OPTIONAL, FLOAT),
        ("num_found", 3, OPTIONAL, UINT32),
    ],
    # riak_yokozuna.proto
    "RpbYokozunaIndex": [
        ("name", 1, REQUIRED, BYTES),
        ("schema", 2, OPTIONAL, BYTES),
        ("n_val", 3, OPTIONAL, UINT32),
    ],
    "RpbYokozunaIndexGetReq": [
        ("name", 1, OPTIONAL, BYTES),
    ],
    "RpbYokozunaIndexGetResp": [
        ("index", 1, REPEATED, MESSAGE, "RpbYokozunaIndex"),
    ],
    "RpbYokozunaIndexPutReq": [
        ("index", 1, REQUIRED, MESSAGE, "RpbYokozunaIndex"),
        ("timeout", 2, OPTIONAL, UINT32),
    ],
    "RpbYokozunaIndexDeleteReq": [
        ("name", 1, REQUIRED, BYTES),
    ],
    "RpbYokozunaSchema": [
        ("name", 1, REQUIRED, BYTES),
        ("content", 2, OPTIONAL, BYTES),
    ],
    "RpbYokozunaSchemaPutReq": [
        ("schema", 1, REQUIRED, MESSAGE, "RpbYokozunaSchema"),
    ],
    "RpbYokozunaSchemaGetReq": [
        ("name", 1, REQUIRED, BYTES),
    ],
    "RpbYokozunaSchemaGetResp": [
        ("schema", 1, REQUIRED, MESSAGE, "RpbYokozunaSchema"),
    ],
}

# Enums nested in a message: {message: {enum: [(value name, number)]}}
_NESTED_ENUMS: dict[str, dict[str, list[tuple[str, int]]]] = {
    "RpbBucketProps": {
        "RpbReplMode": [("FALSE", 0), ("REALTIME", 1), ("FULLSYNC", 2), ("TRUE", 3)],
    },
}


def _build_file() -> descriptor_pb2.FileDescriptorProto:
    """Assemble the FileDescriptorProto for every record above."""
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="riakpb/riak.proto",
        package=PACKAGE,
        syntax="proto2",
    )

    for message_name, fields in _MESSAGES.items():
        message_proto = file_proto.message_type.add(name=message_name)

        for enum_name, values in _NESTED_ENUMS.get(message_name, {}).items():
            enum_proto = message_proto.enum_type.add(name=enum_name)
            for value_name, number in values:
                enum_proto.value.add(name=value_name, number=number)

        for field_def in fields:
            name, number, label, field_type = field_def[:4]
            field_proto = message_proto.field.add(
                name=name,
                number=number,
                label=label,
                type=field_type,
            )
            if len(field_def) > 4:
                field_proto.type_name = f".{PACKAGE}.{field_def[4]}"

    return file_proto


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_build_file().SerializeToString())


def _message_class(name: str) -> type:
    return message_factory.GetMessageClass(_pool.FindMessageTypeByName(f"{PACKAGE}.{name}"))


RpbErrorResp = _message_class("RpbErrorResp")
RpbGetServerInfoResp = _message_class("RpbGetServerInfoResp")
RpbPair = _message_class("RpbPair")
RpbGetBucketReq = _message_class("RpbGetBucketReq")
RpbGetBucketResp = _message_class("RpbGetBucketResp")
RpbSetBucketReq = _message_class("RpbSetBucketReq")
RpbResetBucketReq = _message_class("RpbResetBucketReq")
RpbGetBucketTypeReq = _message_class("RpbGetBucketTypeReq")
RpbSetBucketTypeReq = _message_class("RpbSetBucketTypeReq")
RpbModFun = _message_class("RpbModFun")
RpbCommitHook = _message_class("RpbCommitHook")
RpbBucketProps = _message_class("RpbBucketProps")

RpbGetReq = _message_class("RpbGetReq")
RpbGetResp = _message_class("RpbGetResp")
RpbPutReq = _message_class("RpbPutReq")
RpbPutResp = _message_class("RpbPutResp")
RpbDelReq = _message_class("RpbDelReq")
RpbListBucketsReq = _message_class("RpbListBucketsReq")
RpbListBucketsResp = _message_class("RpbListBucketsResp")
RpbListKeysReq = _message_class("RpbListKeysReq")
RpbListKeysResp = _message_class("RpbListKeysResp")
RpbContent = _message_class("RpbContent")
RpbLink = _message_class("RpbLink")
RpbGetBucketKeyPreflistReq = _message_class("RpbGetBucketKeyPreflistReq")
RpbGetBucketKeyPreflistResp = _message_class("RpbGetBucketKeyPreflistResp")
RpbBucketKeyPreflistItem = _message_class("RpbBucketKeyPreflistItem")

RpbSearchDoc = _message_class("RpbSearchDoc")
RpbSearchQueryReq = _message_class("RpbSearchQueryReq")
RpbSearchQueryResp = _message_class("RpbSearchQueryResp")

RpbYokozunaIndex = _message_class("RpbYokozunaIndex")
RpbYokozunaIndexGetReq = _message_class("RpbYokozunaIndexGetReq")
RpbYokozunaIndexGetResp = _message_class("RpbYokozunaIndexGetResp")
RpbYokozunaIndexPutReq = _message_class("RpbYokozunaIndexPutReq")
RpbYokozunaIndexDeleteReq = _message_class("RpbYokozunaIndexDeleteReq")
RpbYokozunaSchema = _message_class("RpbYokozunaSchema")
RpbYokozunaSchemaPutReq = _message_class("RpbYokozunaSchemaPutReq")
RpbYokozunaSchemaGetReq = _message_class("RpbYokozunaSchemaGetReq")
RpbYokozunaSchemaGetResp = _message_class("RpbYokozunaSchemaGetResp")
