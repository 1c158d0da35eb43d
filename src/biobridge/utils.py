"""
Utility functions for biobridge.

Provides logging setup, small list/text helpers, and the HTTP transport shared by the
catalog fetcher and the webservice client.
"""

import csv
import io
import logging
from collections.abc import Iterable, Iterator
from typing import Any, TypeGuard, cast

import pandas as pd
import requests
import requests_cache
from requests.adapters import HTTPAdapter
from urllib3 import Retry

from .config import (
    HTTP_CACHE_EXPIRE_AFTER,
    HTTP_RETRY_DELAY,
    HTTP_RETRY_LIMIT,
    HTTP_TIMEOUT,
    LOG_LEVEL,
    TSV_CHUNK_SIZE,
)
from .exceptions import FormatError, TransportError

# Type alias for entity reference records
# Structure: {field_name: value}, where 'identifier' plus at least one identifying field are expected
EntityReference = dict[str, Any]

# Widest row accepted from a tab-delimited response with no fixed arity
TSV_MAX_FIELDS = 16


def setup_logging():
    """Configure logging based on LOG_LEVEL in config.py."""
    if not logging.getLogger().hasHandlers():  # Skip setup if it's already been done
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        level = LOG_LEVEL.upper()

        if level not in valid_levels:
            print(f"Invalid log level '{LOG_LEVEL}', defaulting to INFO")
            level = "INFO"

        logging.basicConfig(
            level=getattr(logging, level), format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )


def text_is_not_empty(value: Any) -> TypeGuard[str]:
    """Check if a name/text field value is a valid non-empty string."""
    return isinstance(value, str) and value.strip() != ""


def is_present(value: Any) -> bool:
    """True unless the value is None, NaN, or an empty string/collection."""
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return len(value) > 0
    if isinstance(value, str):
        return value != ""
    return bool(pd.notnull(value))


def omit_empty(record: dict[str, Any]) -> dict[str, Any]:
    """Drop fields whose values are empty strings, NaN, None, or empty collections."""
    return {key: value for key, value in record.items() if is_present(value)}


def to_list(
    item: str | Iterable[str] | int | Iterable[int] | float | Iterable[float] | None,
) -> list[str | int | float]:
    if item is None:
        return []
    elif isinstance(item, list):
        return cast(list[str | int | float], item)
    elif isinstance(item, (str, int, float)):
        return [item]
    else:
        return list(item)


def create_session(retry_limit: int | None = None, retry_delay: float | None = None) -> requests.Session:
    """
    Create an HTTP session with an in-memory response cache and retry logic.

    The cache lives only as long as the process (nothing is written to disk).

    Args:
        retry_limit: Number of retries for failed GET requests (default: config.HTTP_RETRY_LIMIT)
        retry_delay: Backoff factor in seconds between retries (default: config.HTTP_RETRY_DELAY)

    Returns:
        Configured session
    """
    session = requests_cache.CachedSession(
        cache_name="biobridge_http",
        backend="memory",
        expire_after=HTTP_CACHE_EXPIRE_AFTER,
    )

    # Add retry logic
    retry_strategy = Retry(
        total=HTTP_RETRY_LIMIT if retry_limit is None else retry_limit,
        backoff_factor=HTTP_RETRY_DELAY if retry_delay is None else retry_delay,
        status_forcelist=[500, 502, 503, 504],
        allowed_methods=["GET"],
    )
    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def bridgedb_request(session: requests.Session, url: str) -> requests.Response:
    """
    Internal helper for making GET requests against BridgeDb resources.

    Args:
        session: HTTP session to use
        url: Full URL to fetch

    Returns:
        Response with a successful status code

    Raises:
        TransportError: If the request fails or the server returns a 4xx/5xx status
    """
    try:
        response = session.get(url, timeout=HTTP_TIMEOUT)
        response.raise_for_status()
        return response
    except requests.exceptions.HTTPError as e:
        logging.error(f"BridgeDb HTTP error ({url}): {e}", exc_info=True)
        raise TransportError(f"HTTP error fetching {url}: {e}", url=url) from e
    except requests.exceptions.RequestException as e:
        logging.error(f"BridgeDb request failed ({url}): {e}", exc_info=True)
        raise TransportError(f"Request failed for {url}: {e}", url=url) from e


def iter_tsv_rows(session: requests.Session, url: str, arity: int | None = None) -> Iterator[list[str]]:
    """
    Lazily fetch a tab-delimited resource and yield its rows.

    The body is decoded as UTF-8 whatever charset the server declares, and parsed with
    pandas in chunks of TSV_CHUNK_SIZE rows.

    Args:
        session: HTTP session to use
        url: URL of the tab-delimited resource
        arity: Required number of fields per row (None to accept up to TSV_MAX_FIELDS)

    Yields:
        Each non-blank row as a list of string fields

    Raises:
        TransportError: If the resource cannot be fetched
        FormatError: If a row does not have the required number of fields, or the body is not UTF-8 TSV
    """
    response = bridgedb_request(session, url)
    content = response.content
    if not content.strip():
        return

    # One spare column so that a row with a single extra field is still reported with its line number
    width = arity + 1 if arity is not None else TSV_MAX_FIELDS
    expected = str(arity) if arity is not None else f"at most {TSV_MAX_FIELDS}"

    def reject_wide_row(bad_line: list[str]) -> list[str] | None:
        raise FormatError(f"Row of {url} has {len(bad_line)} fields, expected {expected}: {bad_line!r}", source=url)

    line_number = 0
    try:
        with pd.read_csv(
            io.BytesIO(content),
            sep="\t",
            header=None,
            names=list(range(width)),
            index_col=False,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=False,
            quoting=csv.QUOTE_NONE,
            encoding="utf-8",
            engine="python",
            on_bad_lines=reject_wide_row,
            chunksize=TSV_CHUNK_SIZE,
        ) as reader:
            for chunk in reader:
                for cells in chunk.itertuples(index=False, name=None):
                    line_number += 1
                    # Missing trailing fields come back as NaN
                    row = [cell for cell in cells if pd.notna(cell)]
                    if not "".join(row).strip():
                        continue
                    if arity is not None and len(row) != arity:
                        raise FormatError(
                            f"Row {line_number} of {url} has {len(row)} fields, expected {arity}: {row!r}",
                            source=url,
                            line_number=line_number,
                        )
                    yield row
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        logging.error(f"Could not parse {url} as UTF-8 TSV: {e}")
        raise FormatError(f"Could not parse {url} as UTF-8 TSV: {e}", source=url, line_number=line_number + 1) from e
