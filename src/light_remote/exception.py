"""Exceptions module."""


class TransportError(Exception):
    """Raised by a transport adapter when the link cannot be used."""


class SessionError(Exception):
    """Base class for failures reported by the session manager."""


class TransportUnavailable(SessionError):
    """Raised when the transport adapter is missing or disabled."""


class ConnectFailed(SessionError):
    """Raised when the transport could not open a connection."""


class NotConnected(SessionError):
    """Raised when a command is sent outside the connected state."""


class WriteFailed(SessionError):
    """Raised when the transport rejects or fails a write."""


class ReconnectDeclined(SessionError):
    """Raised when replacing an active session was not confirmed."""
