"""
Error types raised by the mailbox scan.

Decoding problems and messages without enough flight evidence are not
errors; they simply produce empty output.
"""


class PlanemailError(Exception):
    """Base class for all planemail errors."""


class ConfigError(PlanemailError):
    """Missing or unreadable configuration (e.g. credentials.json)."""


class TransportError(PlanemailError):
    """A mailbox listing or fetch call failed."""

    def __init__(self, message, status=None):
        super().__init__(message)
        self.status = status


class MessageNotFound(TransportError):
    """The message id no longer exists in the mailbox."""


class AuthExpired(TransportError):
    """The stored credential is stale and needs re-authentication."""
