"""Shared fixtures."""

import pytest

from fake_riak import FakeRiakServer, unused_endpoint


@pytest.fixture
def riak_server() -> type[FakeRiakServer]:
    return FakeRiakServer


@pytest.fixture
def refused_endpoint() -> str:
    """An endpoint on localhost that refuses connections."""
    return unused_endpoint()
