"""Riak PBC Client

Async client for connecting to Riak nodes over the protocol buffers API.
"""

import logging

from .connection import Connection
from .exceptions import InvalidEndpointError, NotConnectedError
from .types import DEFAULT_TIMEOUT, MessageCode, ServerInfo
from .wire import parse_server_info_resp

logger = logging.getLogger("riakpb")


class RiakClient:
    """Async client for a Riak node.

    One client owns one connection and runs one operation at a time; use one
    client per task for concurrency. Listings open their own connection.

    Example:
        async with RiakClient("localhost:8087") as client:
            await client.ping()
            keys = await client.bucket.list_keys("users")
    """

    def __init__(
        self,
        endpoint: str,
        *,
        timeout: int = DEFAULT_TIMEOUT,
        debug: bool = False,
    ):
        """Initialize Riak client.

        Args:
            endpoint: Server endpoint in "host:port" format.
            timeout: Connect, send and receive timeout in seconds.
            debug: Enable debug logging.
        """
        self._endpoint = endpoint
        self._timeout = self._check_timeout(timeout)
        self._connection: Connection | None = None

        # Parse endpoint
        self._host, self._port = self._parse_endpoint(endpoint)

        from .bucket import BucketOperations
        from .kv import KVOperations
        from .search import SearchOperations

        self.bucket = BucketOperations(self)
        self.kv = KVOperations(self)
        self.search = SearchOperations(self)

        if debug:
            logging.basicConfig(level=logging.DEBUG)
            logger.setLevel(logging.DEBUG)

    @staticmethod
    def _parse_endpoint(endpoint: str) -> tuple[str, int]:
        """Parse endpoint string into host and port."""
        parts = endpoint.rsplit(":", 1)
        if len(parts) != 2 or not parts[0]:
            raise InvalidEndpointError(f"Invalid endpoint format: {endpoint} (expected host:port)")

        host = parts[0]
        try:
            port = int(parts[1])
        except ValueError as e:
            raise InvalidEndpointError(f"Invalid port: {parts[1]}") from e

        if port < 1 or port > 65535:
            raise InvalidEndpointError(f"Port out of range: {port}")

        # Handle IPv6 addresses in brackets
        if host.startswith("[") and host.endswith("]"):
            host = host[1:-1]

        return host, port

    @staticmethod
    def _check_timeout(timeout: int) -> int:
        if isinstance(timeout, bool) or not isinstance(timeout, int):
            raise TypeError(f"Timeout must be whole seconds: {timeout!r}")
        if timeout <= 0:
            raise ValueError(f"Timeout must be positive: {timeout}")
        return timeout

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def timeout(self) -> int:
        """Timeout in seconds for the client's connection and new streams."""
        return self._timeout

    @property
    def is_connected(self) -> bool:
        """Check if client is connected."""
        return self._connection is not None and self._connection.is_connected

    async def connect(self) -> "RiakClient":
        """Connect to the server.

        Returns:
            Self for method chaining.

        Raises:
            ConnectionFailedError: If connection fails.
            ConnectionTimeoutError: If connecting takes longer than the timeout.
        """
        self._connection = await Connection.open(self._host, self._port, self._timeout)
        return self

    async def close(self) -> None:
        """Close the connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    async def reconnect(self) -> None:
        """Drop the current socket and connect again with the same settings."""
        if self._connection is None:
            await self.connect()
        else:
            await self._connection.reconnect()

    def set_timeout(self, timeout: int) -> None:
        """Change the timeout for later I/O and for streams opened afterwards."""
        self._timeout = self._check_timeout(timeout)
        if self._connection is not None:
            self._connection.timeout = self._timeout

    async def __aenter__(self) -> "RiakClient":
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    async def _exchange(
        self,
        request_code: MessageCode,
        response_code: MessageCode,
        payload: bytes = b"",
    ) -> bytes:
        """Send a request on the client connection and return the reply payload.

        Raises:
            NotConnectedError: If connect() has not been called.
        """
        if self._connection is None:
            raise NotConnectedError("Not connected to server")
        return await self._connection.exchange(request_code, response_code, payload)

    async def _open_stream_connection(self) -> Connection:
        """Open a dedicated connection for a streamed listing."""
        return await Connection.open(self._host, self._port, self._timeout)

    async def ping(self) -> None:
        """Check that the server answers.

        Example:
            await client.ping()
        """
        await self._exchange(MessageCode.PING_REQ, MessageCode.PING_RESP)

    async def server_info(self) -> ServerInfo:
        """Get the node name and server version.

        Example:
            info = await client.server_info()
            print(f"{info.node} runs {info.server_version}")
        """
        data = await self._exchange(
            MessageCode.GET_SERVER_INFO_REQ,
            MessageCode.GET_SERVER_INFO_RESP,
        )
        return parse_server_info_resp(data)
