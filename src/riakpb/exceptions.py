"""Riak PBC Exceptions

Exception classes for Riak client errors.

Every operation either returns its result or raises one of three disjoint
kinds: TransportError (socket, address resolution, framing), SchemaError
(a payload that cannot be encoded or decoded), or ServerError (the server
answered with an error frame).
"""


class RiakError(Exception):
    """Base exception for all Riak client errors."""

    pass


# =============================================================================
# Transport Errors
# =============================================================================


class TransportError(RiakError):
    """Base class for socket and address-resolution failures."""

    pass


class InvalidEndpointError(TransportError):
    """Invalid endpoint format."""

    pass


class ConnectionFailedError(TransportError):
    """Failed to establish or use the connection to the server."""

    pass


class ConnectionTimeoutError(TransportError):
    """A connect, send or receive did not complete within the timeout."""

    pass


class NotConnectedError(TransportError):
    """Connection is not open."""

    pass


class UnexpectedEofError(TransportError):
    """Unexpected end of stream while reading from server."""

    pass


class StreamBrokenError(TransportError):
    """A stream was used again after it failed."""

    pass


# =============================================================================
# Protocol Errors
# =============================================================================


class ProtocolError(TransportError):
    """Base class for frames that violate the PBC framing rules."""

    pass


class InvalidFrameError(ProtocolError):
    """Frame header declares an impossible length."""

    pass


class UnexpectedMessageCodeError(ProtocolError):
    """Reply carried neither the expected code nor an error code."""

    expected: int
    actual: int

    def __init__(self, expected: int, actual: int):
        from .types import code_name

        super().__init__(
            f"Unexpected message code: expected {code_name(expected)}, "
            f"got {code_name(actual)}"
        )
        self.expected = expected
        self.actual = actual


# =============================================================================
# Schema Errors
# =============================================================================


class SchemaError(RiakError):
    """A record could not be serialized, or a payload could not be parsed."""

    pass


# =============================================================================
# Server Errors
# =============================================================================


class ServerError(RiakError):
    """The server replied with an error frame.

    code and data are exactly what the server sent; data is usually UTF-8
    text but is kept as raw bytes.
    """

    code: int
    data: bytes

    def __init__(self, code: int, data: bytes = b""):
        self.code = code
        self.data = data
        super().__init__(f"received code {code}, error was: {self.message}")

    @property
    def message(self) -> str:
        """Error text decoded leniently from data."""
        return self.data.decode("utf-8", errors="replace")

    def __reduce__(self) -> tuple[type, tuple[int, bytes]]:
        return (type(self), (self.code, self.data))

