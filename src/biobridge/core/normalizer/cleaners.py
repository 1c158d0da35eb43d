"""Text cleaning functions used for loose (normalized) matching."""

import re
from collections.abc import Iterable
from typing import Any
from urllib.parse import unquote


def normalize_text(value: Any) -> str:
    """Fold case and remove all whitespace, e.g. 'Entrez Gene' -> 'entrezgene'."""
    return re.sub(r"\s+", "", str(value)).casefold()


def normalize_text_list(values: Iterable[Any]) -> list[str]:
    """Normalize every value, keeping input order."""
    return [normalize_text(value) for value in values]


def clean_path_segment(segment: str) -> str:
    """Decode a percent-encoded URL path segment, e.g. 'Homo%20sapiens' -> 'Homo sapiens'."""
    return unquote(segment).strip()
