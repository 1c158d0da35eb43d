"""Fetches the raw tab-delimited catalog feed."""

import logging
from collections.abc import Iterator

import requests

from ...utils import create_session, iter_tsv_rows
from .models import CATALOG_LAYOUTS


class CatalogFetcher:
    """Streams raw rows of a catalog feed. Retries are the session's concern, not this class's."""

    def __init__(self, session: requests.Session | None = None, layout: str = "dataset"):
        if layout not in CATALOG_LAYOUTS:
            raise ValueError(f"Invalid catalog layout '{layout}'. Must be one of: {list(CATALOG_LAYOUTS)}")
        self._session = session if session is not None else create_session()
        self.layout = layout

    @property
    def arity(self) -> int:
        return len(CATALOG_LAYOUTS[self.layout])

    def iter_rows(self, url: str) -> Iterator[list[str]]:
        """
        Lazily fetch and split the feed at url.

        Args:
            url: Location of the tab-delimited feed

        Yields:
            One list of string fields per row

        Raises:
            TransportError: On network failure or error status
            FormatError: If a row does not have the layout's number of columns
        """
        logging.info(f"Fetching {self.layout} catalog from {url}")
        yield from iter_tsv_rows(self._session, url, arity=self.arity)
