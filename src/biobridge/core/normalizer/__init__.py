"""Reference normalization module for parsing IRIs and partial references."""

from .normalizer import ReferenceNormalizer

__all__ = ["ReferenceNormalizer"]
