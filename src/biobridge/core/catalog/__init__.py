"""Dataset catalog: fetching, building and memoizing the BridgeDb datasets feed."""

from .builder import CatalogBuilder
from .cache import CatalogCache, CatalogState
from .catalog import DatasetCatalog
from .fetcher import CatalogFetcher
from .models import Dataset

__all__ = ["CatalogBuilder", "CatalogCache", "CatalogFetcher", "CatalogState", "Dataset", "DatasetCatalog"]
