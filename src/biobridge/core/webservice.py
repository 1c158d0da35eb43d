"""
Client for the BridgeDb webservice endpoints used by biobridge.

Wraps the xrefs, attributeSearch, and xrefExists endpoints. Responses are tab-delimited
and are fetched through the shared HTTP session.
"""

import logging
from urllib.parse import quote

import requests

from ..config import BRIDGEDB_API_URL
from ..exceptions import FormatError
from ..utils import EntityReference, bridgedb_request, create_session, iter_tsv_rows

NULL_VALUE = "null"


def build_xrefs_url(api_url: str, organism: str, system_code: str, identifier: str) -> str:
    """Build the xrefs lookup URL for one identifier (each path segment percent-encoded)."""
    return f"{api_url}/{_segment(organism)}/xrefs/{_segment(system_code)}/{_segment(identifier)}"


def _segment(value: str) -> str:
    return quote(str(value), safe="")


class BridgeDbWebservice:
    """Thin client for the BridgeDb REST webservice."""

    def __init__(self, base_url: str | None = None, session: requests.Session | None = None):
        self.base_url = (base_url if base_url else BRIDGEDB_API_URL).rstrip("/")
        self.session = session if session is not None else create_session()

    def xrefs_url(self, organism: str, system_code: str, identifier: str) -> str:
        return build_xrefs_url(self.base_url, organism, system_code, identifier)

    def xrefs(self, organism: str, system_code: str, identifier: str) -> list[EntityReference]:
        """
        Get the cross-references BridgeDb knows for one identifier.

        Args:
            organism: Organism name (Latin or English)
            system_code: BridgeDb system code of the identifier's dataset (e.g., 'L')
            identifier: Bare identifier (e.g., '1234')

        Returns:
            List of {identifier, db} dicts, in response order

        Raises:
            TransportError: If the webservice cannot be reached or returns an error status
            FormatError: If a row has fewer than two fields or a blank identifier
        """
        url = self.xrefs_url(organism, system_code, identifier)
        logging.info(f"Fetching xrefs from {url}")
        xrefs = []
        for line_number, row in enumerate(iter_tsv_rows(self.session, url), start=1):
            if len(row) < 2 or not row[0].strip():
                raise FormatError(
                    f"Xref row {line_number} from {url} should have an identifier and a db: {row!r}",
                    source=url,
                    line_number=line_number,
                )
            xrefs.append({"identifier": row[0], "db": row[1]})
        logging.debug(f"Got {len(xrefs)} xrefs for {system_code}:{identifier}")
        return xrefs

    def attribute_search(self, organism: str, term: str) -> list[EntityReference]:
        """
        Search BridgeDb for identifiers whose attributes (e.g., symbol) match a term.

        Args:
            organism: Organism name (Latin or English)
            term: Search term (e.g., 'Nfkb1')

        Returns:
            List of dicts with identifier, db, and display_name (fields sent as "null" are left out)
        """
        url = f"{self.base_url}/{_segment(organism)}/attributeSearch/{_segment(term)}"
        logging.info(f"Searching BridgeDb attributes at {url}")
        results = []
        for row in iter_tsv_rows(self.session, url):
            fields = dict(zip(("identifier", "db", "display_name"), row))
            results.append({key: value for key, value in fields.items() if value and value != NULL_VALUE})
        return results

    def xref_exists(self, organism: str, system_code: str, identifier: str) -> bool:
        """Check whether BridgeDb knows the identifier in the given dataset."""
        url = f"{self.base_url}/{_segment(organism)}/xrefExists/{_segment(system_code)}/{_segment(identifier)}"
        response = bridgedb_request(self.session, url)
        return response.text.strip() == "true"
