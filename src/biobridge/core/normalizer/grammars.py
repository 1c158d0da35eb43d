"""IRI grammars recognized when parsing entity references."""

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .cleaners import clean_path_segment

# Fields inspected for IRIs, in this order ('_input' holds a raw string passed to the normalizer)
IRI_FIELDS = ("_input", "id", "xrefs_url", "identifier", "xrefs")


@dataclass(frozen=True)
class IriGrammar:
    """A named IRI shape and the function that extracts reference fields from a match."""

    name: str
    pattern: re.Pattern
    extract: Callable[[re.Match, str], dict[str, Any]]

    def parse(self, value: Any) -> dict[str, Any] | None:
        """Return the extracted fields if value is a string with this shape, else None."""
        if not isinstance(value, str):
            return None
        match = self.pattern.match(value.strip())
        if match is None:
            return None
        return self.extract(match, value.strip())


def _extract_identifiers_org(match: re.Match, iri: str) -> dict[str, Any]:
    return {
        "preferred_prefix": clean_path_segment(match["prefix"]),
        "identifier": clean_path_segment(match["identifier"]),
        "id": iri,
    }


def _extract_xrefs_url(match: re.Match, iri: str) -> dict[str, Any]:
    return {
        "organism": clean_path_segment(match["organism"]),
        "system_code": clean_path_segment(match["system_code"]),
        "identifier": clean_path_segment(match["identifier"]),
        "xrefs_url": iri,
    }


IDENTIFIERS_ORG_GRAMMAR = IriGrammar(
    name="identifiers.org",
    pattern=re.compile(r"^https?://identifiers\.org/(?P<prefix>[^/]+)/(?P<identifier>[^/?#]+)/?$", re.IGNORECASE),
    extract=_extract_identifiers_org,
)

XREFS_URL_GRAMMAR = IriGrammar(
    name="xrefs-service",
    pattern=re.compile(
        r"^https?://.+/(?P<organism>[^/]+)/xrefs/(?P<system_code>[^/]+)/(?P<identifier>[^?#]+?)/?$", re.IGNORECASE
    ),
    extract=_extract_xrefs_url,
)

# Tried in this order; each grammar contributes the fields parsed from the first field it matches
DEFAULT_GRAMMARS = (IDENTIFIERS_ORG_GRAMMAR, XREFS_URL_GRAMMAR)
