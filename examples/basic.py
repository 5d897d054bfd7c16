#!/usr/bin/env python3
"""Basic example of using the Riak PBC Python SDK.

This example demonstrates:
- Connecting to a Riak node
- Object operations (store, fetch, delete)
- Bucket properties and key listing
"""

import asyncio
import sys

from riakpb import (
    BucketProps,
    DeleteObjectReq,
    FetchObjectReq,
    ObjectContent,
    RiakClient,
    RiakError,
    StoreObjectReq,
)


async def kv_example(client: RiakClient) -> None:
    """Demonstrate object operations."""
    print("\n=== Object Operations ===\n")

    # Store a value
    print("Storing users/alice = 'Alice'")
    await client.kv.store_object(
        StoreObjectReq(
            bucket=b"users",
            key=b"alice",
            content=ObjectContent(value=b"Alice", content_type=b"text/plain"),
        )
    )

    # Store without a key; the server assigns one
    resp = await client.kv.store_object(
        StoreObjectReq(bucket=b"users", content=ObjectContent(value=b"Anonymous"))
    )
    print(f"Server assigned key {resp.key!r}")

    # Fetch a value
    resp = await client.kv.fetch_object(FetchObjectReq(bucket=b"users", key=b"alice"))
    for content in resp.content:
        print(f"Got users/alice = '{content.value.decode()}'")

    # Fetch a missing key
    resp = await client.kv.fetch_object(FetchObjectReq(bucket=b"users", key=b"nobody"))
    if not resp.content:
        print("users/nobody not found (expected)")

    # Where does it live?
    for item in await client.kv.fetch_preflist("users", "alice"):
        role = "primary" if item.is_primary else "fallback"
        print(f"  partition {item.partition} on {item.node} ({role})")

    # Delete
    print("\nDeleting users/alice")
    await client.kv.delete_object(DeleteObjectReq(bucket=b"users", key=b"alice"))


async def bucket_example(client: RiakClient) -> None:
    """Demonstrate bucket operations."""
    print("\n=== Bucket Operations ===\n")

    await client.bucket.set_properties("users", BucketProps(allow_mult=True))
    props = await client.bucket.get_properties("users")
    print(f"users: n_val={props.n_val} allow_mult={props.allow_mult}")

    print("\nListing keys of 'users'")
    async with await client.bucket.stream_keys("users") as stream:
        async for keys in stream:
            for key in keys:
                print(f"  {key.decode()}")

    buckets = await client.bucket.list_buckets()
    print(f"\n{len(buckets)} buckets")


async def main() -> None:
    """Main entry point."""
    # Default to localhost:8087, or use command line argument
    endpoint = sys.argv[1] if len(sys.argv) > 1 else "localhost:8087"

    print(f"Connecting to Riak at {endpoint}...")

    try:
        async with RiakClient(endpoint, timeout=10, debug=False) as client:
            await client.ping()
            info = await client.server_info()
            print(f"Connected to {info.node} ({info.server_version})")

            await kv_example(client)
            await bucket_example(client)

            print("\n=== Done ===")

    except RiakError as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
