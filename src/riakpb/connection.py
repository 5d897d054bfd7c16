"""Riak PBC Connection

Framed transport over one TCP socket: send a frame, receive a frame with a
code check, exchange a request for its reply.
"""

import asyncio
import logging

from .exceptions import (
    ConnectionFailedError,
    ConnectionTimeoutError,
    NotConnectedError,
    ServerError,
    UnexpectedEofError,
    UnexpectedMessageCodeError,
)
from .types import LENGTH_PREFIX_SIZE, MessageCode, code_name
from .wire import encode_frame, parse_error_resp, parse_length_prefix

logger = logging.getLogger("riakpb")


class Connection:
    """One open socket to a Riak node.

    Every connect, send and receive waits at most `timeout` seconds. A
    connection carries one request/reply exchange (or one stream) at a time.
    """

    def __init__(self, host: str, port: int, timeout: float):
        self._host = host
        self._port = port
        self._timeout = timeout

        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None

    @classmethod
    async def open(cls, host: str, port: int, timeout: float) -> "Connection":
        """Open a connection to host:port.

        Raises:
            ConnectionFailedError: If the address cannot be resolved or reached.
            ConnectionTimeoutError: If connecting takes longer than timeout.
        """
        connection = cls(host, port, timeout)
        await connection.connect()
        return connection

    @property
    def peer(self) -> tuple[str, int]:
        """Host and port this connection talks to."""
        return self._host, self._port

    @property
    def timeout(self) -> float:
        """Timeout in seconds for each connect, send and receive."""
        return self._timeout

    @timeout.setter
    def timeout(self, value: float) -> None:
        self._timeout = value

    @property
    def is_connected(self) -> bool:
        """Check if the socket is open."""
        return self._writer is not None and not self._writer.is_closing()

    async def connect(self) -> None:
        """Open the socket to the stored address."""
        try:
            self._reader, self._writer = await asyncio.wait_for(
                asyncio.open_connection(self._host, self._port),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as e:
            raise ConnectionTimeoutError(f"Connection timeout: {self._host}:{self._port}") from e
        except OSError as e:
            raise ConnectionFailedError(
                f"Connection failed: {self._host}:{self._port} - {e}"
            ) from e

        logger.debug(f"[riakpb] Connected to {self._host}:{self._port}")

    async def close(self) -> None:
        """Close the socket. Closing a closed connection does nothing."""
        if self._writer:
            writer = self._writer
            self._writer = None
            self._reader = None
            writer.close()
            try:
                await writer.wait_closed()
            except OSError:
                pass
            logger.debug(f"[riakpb] Disconnected from {self._host}:{self._port}")

    async def reconnect(self) -> None:
        """Close any open socket and open a fresh one to the same address."""
        await self.close()
        logger.debug(f"[riakpb] Reconnecting to {self._host}:{self._port}")
        await self.connect()

    async def send(self, code: int, payload: bytes = b"") -> None:
        """Write one frame and flush it.

        Raises:
            NotConnectedError: If the connection is closed.
            ConnectionTimeoutError: If the flush does not complete in time.
            ConnectionFailedError: On socket errors.
        """
        frame = encode_frame(code, payload)

        if not self.is_connected or self._writer is None:
            raise NotConnectedError("Not connected to server")

        logger.debug(f"[riakpb] -> {code_name(code)} {len(payload)} bytes")

        try:
            self._writer.write(frame)
            await asyncio.wait_for(self._writer.drain(), timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise ConnectionTimeoutError(f"Timed out sending {code_name(code)}") from e
        except OSError as e:
            raise ConnectionFailedError(f"Failed to send {code_name(code)}: {e}") from e

    async def _read(self, size: int, what: str) -> bytes:
        assert self._reader is not None
        try:
            return await asyncio.wait_for(self._reader.readexactly(size), timeout=self._timeout)
        except asyncio.IncompleteReadError as e:
            raise UnexpectedEofError(f"Connection closed while reading {what}") from e
        except asyncio.TimeoutError as e:
            raise ConnectionTimeoutError(f"Timed out reading {what}") from e
        except OSError as e:
            raise ConnectionFailedError(f"Failed reading {what}: {e}") from e

    async def receive(self, expected_code: int) -> bytes:
        """Read one frame and return its payload.

        Args:
            expected_code: The only non-error code accepted for this reply.

        Raises:
            ServerError: If the server replied with an error frame.
            UnexpectedMessageCodeError: If the reply carries any other code.
            InvalidFrameError: If the frame declares a zero length.
            UnexpectedEofError: If the connection closes mid-frame.
        """
        if not self.is_connected or self._reader is None:
            raise NotConnectedError("Not connected to server")

        total_len = parse_length_prefix(await self._read(LENGTH_PREFIX_SIZE, "frame length"))
        body = await self._read(total_len, "frame body")
        code, payload = body[0], body[1:]

        logger.debug(f"[riakpb] <- {code_name(code)} {len(payload)} bytes")

        if code == MessageCode.ERROR_RESP:
            raise ServerError(*parse_error_resp(payload))

        if code != expected_code:
            raise UnexpectedMessageCodeError(expected_code, code)

        return payload

    async def exchange(self, request_code: int, response_code: int, payload: bytes = b"") -> bytes:
        """Send one request frame and return the payload of its reply.

        Errors propagate unchanged; the connection is not reconnected.
        """
        await self.send(request_code, payload)
        return await self.receive(response_code)
