"""Exception types raised by the state store and the PVR adapters."""

from __future__ import annotations


class WantarrError(Exception):
    """Base class for every error Wantarr raises on purpose."""


class ConfigError(WantarrError):
    """Raised when a configuration file is missing or invalid."""


class StateIOError(WantarrError, OSError):
    """Raised when a database file cannot be read or written."""


class StateDecodeError(WantarrError, ValueError):
    """Raised when a database file exists but does not hold a valid item mapping."""


class PvrInitError(WantarrError):
    """Raised when version negotiation with a PVR fails."""


class PvrNotInitializedError(WantarrError, RuntimeError):
    """Raised when a PVR is queried before init() succeeded."""


class BackendUnreachableError(WantarrError):
    """Raised on timeouts and connection failures talking to a PVR."""


class BackendResponseError(WantarrError):
    """Raised when a PVR answers with a bad status or an unexpected payload."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status
