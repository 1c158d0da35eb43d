"""Identifier resolution and cross-reference lookup against BridgeDb."""

from .bridgedb import BridgeDb
from .core.catalog import Dataset
from .exceptions import (
    BioBridgeError,
    DatasetNotFoundError,
    FormatError,
    InsufficientDataError,
    TransportError,
    UnresolvableReferenceError,
)

__all__ = [
    "BioBridgeError",
    "BridgeDb",
    "Dataset",
    "DatasetNotFoundError",
    "FormatError",
    "InsufficientDataError",
    "TransportError",
    "UnresolvableReferenceError",
]
