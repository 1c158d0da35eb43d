"""
Main BridgeDb module for identifier resolution and cross-reference lookup.

Provides the BridgeDb class, which wires the dataset catalog, reference normalizer,
dataset resolver, enrichment pipeline, and xref aggregator together.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

import pandas as pd
import requests

from .config import BRIDGEDB_API_URL, DATASETS_METADATA_URL
from .core.aggregator import DisplayGroup, XrefAggregator
from .core.catalog import CatalogCache, Dataset, DatasetCatalog
from .core.context import add_context
from .core.enrichment import EnrichmentPipeline
from .core.normalizer import ReferenceNormalizer
from .core.organism import BaseOrganismLookup, YamlOrganismLookup
from .core.resolver import DatasetResolver
from .core.webservice import BridgeDbWebservice
from .exceptions import DatasetNotFoundError, InsufficientDataError
from .utils import EntityReference, create_session, is_present, setup_logging

setup_logging()


class BridgeDb:
    """
    Resolves entity references against BridgeDb and looks up their cross-references.

    Pipeline:
    1. Normalization - parse IRIs / partial references into entity reference dicts
    2. Resolution - find the dataset each reference belongs to
    3. Enrichment - add dataset metadata, organism, xrefs URL, and context
    4. Aggregation - fetch, enrich, and organize cross-references
    """

    def __init__(
        self,
        api_url: str | None = None,
        datasets_url: str | None = None,
        catalog_layout: str = "dataset",
        cache: CatalogCache | None = None,
        session: requests.Session | None = None,
        organism_lookup: BaseOrganismLookup | None = None,
        preferred_prefixes: list[str] | None = None,
    ):
        # Instantiate the components (should only be done once, up front)
        self.api_url = (api_url if api_url else BRIDGEDB_API_URL).rstrip("/")
        self.session = session if session is not None else create_session()
        self.catalog = DatasetCatalog(
            url=datasets_url if datasets_url else DATASETS_METADATA_URL,
            layout=catalog_layout,
            cache=cache,
            session=self.session,
        )
        self.normalizer = ReferenceNormalizer()
        self.resolver = DatasetResolver(self.catalog, preferred_prefixes=preferred_prefixes)
        self.organism_lookup = organism_lookup if organism_lookup is not None else YamlOrganismLookup()
        self.pipeline = EnrichmentPipeline(self.normalizer, self.resolver, self.organism_lookup, api_url=self.api_url)
        self.webservice = BridgeDbWebservice(base_url=self.api_url, session=self.session)
        self.aggregator = XrefAggregator(self.pipeline, self.resolver, self.webservice)

    # ------------------------------------- Entity references --------------------------------------- #

    def enrich(
        self, item: str | Mapping[str, Any] | pd.Series, options: dict[str, bool] | None = None
    ) -> EntityReference:
        """Enrich one entity reference (see EnrichmentPipeline.enrich())."""
        return self.pipeline.enrich(item, options)

    def enrich_many(
        self, items: Iterable[str | Mapping[str, Any]] | pd.DataFrame, options: dict[str, bool] | None = None
    ) -> list[EntityReference] | pd.DataFrame:
        """Enrich several entity references (DataFrame in, DataFrame out)."""
        return self.pipeline.enrich_many(items, options)

    def exists(self, system_code: str, identifier: str, organism: str) -> bool:
        """
        Check whether BridgeDb knows an identifier in a dataset.

        Args:
            system_code: BridgeDb system code (e.g., 'L')
            identifier: Bare identifier (e.g., '1234')
            organism: Organism name (Latin or English)

        Returns:
            True if the identifier exists
        """
        return self.webservice.xref_exists(organism, system_code, identifier)

    def search_by_attribute(self, attribute: str, organism: str) -> list[EntityReference]:
        """
        Find entity references whose attributes (e.g., gene symbol) match a search term.

        Args:
            attribute: Search term (e.g., 'Nfkb1')
            organism: Organism name (Latin or English)

        Returns:
            Entity references enriched with dataset metadata and context, in response order
        """
        if not is_present(organism):
            raise ValueError("An organism is required to search by attribute")

        results = []
        for hit in self.webservice.attribute_search(organism, attribute):
            try:
                reference = self.pipeline.enrich_with_dataset(hit)
            except (DatasetNotFoundError, InsufficientDataError):
                logging.debug(f"Attribute search hit with unknown db {hit.get('db')!r}; keeping it as returned")
                reference = dict(hit)
            reference.setdefault("organism", organism)
            results.append(add_context(reference))
        return results

    # ------------------------------------- Cross-references --------------------------------------- #

    def get_xrefs(
        self, item: str | Mapping[str, Any] | pd.Series, options: dict[str, Any] | None = None
    ) -> list[EntityReference] | list[DisplayGroup]:
        """Get the cross-references of an entity reference (see XrefAggregator.aggregate())."""
        return self.aggregator.aggregate(item, options)

    def get_xrefs_many(
        self, items: Iterable[str | Mapping[str, Any]] | pd.DataFrame, options: dict[str, Any] | None = None
    ) -> list[list[EntityReference] | list[DisplayGroup]] | pd.Series:
        """Get the cross-references of several entity references (DataFrame in, Series out)."""
        return self.aggregator.aggregate_many(items, options)

    def map(self, item: str | Mapping[str, Any] | pd.Series, target_prefix: str) -> list[EntityReference]:
        """Map an entity reference to its equivalents in the dataset with the given preferred prefix."""
        return self.aggregator.map_to_prefix(item, target_prefix)

    # ------------------------------------- Datasets --------------------------------------- #

    def query_datasets(self, **args: Any) -> list[Dataset]:
        """Find datasets (see DatasetResolver.query())."""
        return self.resolver.query(**args)

    def get_dataset(self, **args: Any) -> Dataset:
        """Get the best-ranked dataset matching the arguments (see DatasetResolver.query())."""
        return self.resolver.get(**args)

    def convert_preferred_prefix_to_system_code(self, preferred_prefix: str) -> str:
        return self.resolver.convert_preferred_prefix_to_system_code(preferred_prefix)
