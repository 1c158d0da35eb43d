"""One catalog feed wired to its fetcher, builder and the shared cache."""

import requests

from ...config import DATASETS_METADATA_URL
from .builder import CatalogBuilder
from .cache import CatalogCache
from .fetcher import CatalogFetcher
from .models import Dataset


class DatasetCatalog:
    """Lazily-loaded, memoized collection of all datasets described by one feed."""

    def __init__(
        self,
        url: str | None = None,
        layout: str = "dataset",
        cache: CatalogCache | None = None,
        session: requests.Session | None = None,
    ):
        self.url = url if url else DATASETS_METADATA_URL
        self.layout = layout
        self.cache = cache if cache is not None else CatalogCache.shared()
        self.fetcher = CatalogFetcher(session=session, layout=layout)
        self.builder = CatalogBuilder(layout=layout)

    @property
    def catalog_name(self) -> str:
        # Same feed and layout share one cache entry, whichever DatasetCatalog asks
        return f"{self.layout}:{self.url}"

    def datasets(self) -> tuple[Dataset, ...]:
        """All datasets in feed order (fetched and built at most once per cache)."""
        return self.cache.get_all(self.catalog_name, self._fetch_and_build)

    def _fetch_and_build(self) -> list[Dataset]:
        return self.builder.build(self.fetcher.iter_rows(self.url))
