"""Error types raised by biobridge."""

from typing import Any


class BioBridgeError(Exception):
    """Base class for all biobridge errors."""

    pass


class TransportError(BioBridgeError):
    """Raised when a remote resource cannot be fetched (network failure or HTTP error status)."""

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message)
        self.url = url


class FormatError(BioBridgeError, ValueError):
    """Raised when a fetched row or response body does not have the expected shape."""

    def __init__(self, message: str, source: str | None = None, line_number: int | None = None):
        super().__init__(message)
        self.source = source
        self.line_number = line_number


class UnresolvableReferenceError(BioBridgeError, ValueError):
    """Raised when input cannot be turned into an entity reference with an identifier."""

    def __init__(self, message: str, value: Any = None):
        super().__init__(message)
        self.value = value


class InsufficientDataError(UnresolvableReferenceError):
    """Raised when an entity reference lacks the fields needed to identify its dataset."""

    pass


class DatasetNotFoundError(BioBridgeError, LookupError):
    """Raised when no catalog dataset matches the provided key/value(s)."""

    def __init__(self, key: str, value: Any):
        super().__init__(f"Could not find a BridgeDb-supported dataset for any of the provided {key} values: {value!r}")
        self.key = key
        self.value = value
