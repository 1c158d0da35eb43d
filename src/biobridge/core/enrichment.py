"""
Entity reference enrichment module.

Runs raw input through normalization, dataset resolution, organism lookup, xrefs URL
construction, and context annotation to produce a fully enriched entity reference.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

import pandas as pd

from ..config import BRIDGEDB_API_URL
from ..exceptions import InsufficientDataError
from ..utils import EntityReference, is_present, to_list
from .catalog import Dataset
from .catalog.models import IDENTIFIERS_ORG_IRI_ROOT
from .context import add_context
from .normalizer import ReferenceNormalizer
from .organism import BaseOrganismLookup
from .resolver import DatasetResolver
from .webservice import build_xrefs_url

# Stages that run unless switched off
DEFAULT_OPTIONS = {
    "organism": True,
    "data_source": True,
    "xrefs_url": True,
    "context": True,
}

# Fields that let a reference be tied to a dataset
IDENTIFYING_FIELDS = ("db", "preferred_prefix", "alternate_prefix", "system_code", "xrefs_url")

# Dataset fields copied onto a reference by the data-source stage
DATASET_FIELDS_TO_ADD = ("gpml_type", "biopax_type", "db", "is_primary", "preferred_prefix", "alternate_prefix")


class EnrichmentPipeline:
    """
    Enriches entity references with BridgeDb metadata.

    Stages run in a fixed order because later stages use fields added by earlier ones:
    normalize -> validate -> data_source -> organism -> xrefs_url -> context
    """

    def __init__(
        self,
        normalizer: ReferenceNormalizer,
        resolver: DatasetResolver,
        organism_lookup: BaseOrganismLookup,
        api_url: str | None = None,
    ):
        self.normalizer = normalizer
        self.resolver = resolver
        self.organism_lookup = organism_lookup
        self.api_url = (api_url if api_url else BRIDGEDB_API_URL).rstrip("/")

    def enrich(
        self, item: str | Mapping[str, Any] | pd.Series, options: dict[str, bool] | None = None
    ) -> EntityReference:
        """
        Enrich a single entity reference.

        Args:
            item: IRI/identifier string, or partial reference (dict or Series) with an identifier
                and at least one of db, preferred_prefix, alternate_prefix, system_code, xrefs_url
            options: Stage switches, merged over DEFAULT_OPTIONS
                - 'organism': attach the organism name
                - 'data_source': attach dataset metadata and the canonical identifiers.org IRI
                - 'xrefs_url': append the BridgeDb xrefs URL to the 'xrefs' list
                - 'context': attach the JSON-LD @context

        Returns:
            New enriched entity reference

        Raises:
            ValueError: If options contains an unknown key
            UnresolvableReferenceError: If no identifier can be established
            InsufficientDataError: If the reference has no identifying field
            DatasetNotFoundError: If data_source is on and no dataset matches
        """
        options = self._resolve_options(options)
        reference = self.normalizer.normalize(item)
        self.validate(reference)

        dataset = self.add_data_source(reference) if options["data_source"] else None
        if options["organism"]:
            self.add_organism(reference, dataset)
        if options["xrefs_url"]:
            self.add_xrefs_url(reference)
        if options["context"]:
            add_context(reference)

        logging.debug(f"Enriched reference: {reference}")
        return reference

    def enrich_with_dataset(self, item: str | Mapping[str, Any] | pd.Series) -> EntityReference:
        """Normalize and add dataset metadata only (no organism, xrefs URL, or context)."""
        return self.enrich(item, options={"organism": False, "xrefs_url": False, "context": False})

    def enrich_many(
        self,
        items: Iterable[str | Mapping[str, Any]] | pd.DataFrame,
        options: dict[str, bool] | None = None,
    ) -> list[EntityReference] | pd.DataFrame:
        """
        Enrich several entity references, preserving input order.

        Args:
            items: List of references, or DataFrame whose rows are references
            options: Stage switches (see enrich())

        Returns:
            List of enriched references, or a DataFrame (same index) if a DataFrame was provided
        """
        if isinstance(items, pd.DataFrame):
            logging.info(f"Enriching {len(items)} entity references")
            enriched = [self.enrich(row, options) for _, row in items.iterrows()]
            return pd.DataFrame(enriched, index=items.index)

        return [self.enrich(item, options) for item in items]

    # ------------------------------------- Stages --------------------------------------- #

    @staticmethod
    def validate(reference: EntityReference):
        """Fail fast unless the reference has an identifier plus at least one identifying field."""
        if not is_present(reference.get("identifier")) or not any(
            is_present(reference.get(field)) for field in IDENTIFYING_FIELDS
        ):
            raise InsufficientDataError(
                f"Not enough data to identify the dataset of entity reference {reference!r}. "
                f"Needs an identifier plus at least one of: {list(IDENTIFYING_FIELDS)}",
                value=reference,
            )

    def add_data_source(self, reference: EntityReference) -> Dataset:
        """
        Merge the reference's dataset metadata into it (in place) and set its canonical IRI.

        Returns:
            The resolved dataset
        """
        match = self.resolver.match_reference(reference)
        dataset = match.dataset
        for field in DATASET_FIELDS_TO_ADD:
            value = dataset.name if field == "db" else getattr(dataset, field)
            if is_present(value):
                reference[field] = list(value) if isinstance(value, tuple) else value

        self._add_identifiers_iri(reference)
        return dataset

    def add_organism(self, reference: EntityReference, dataset: Dataset | None = None):
        organism = self.organism_lookup.get_by_entity_reference(reference, dataset)
        if organism is None:
            logging.debug(f"Could not determine organism for {reference.get('identifier')}")
            return
        reference["organism"] = organism.latin

    def add_xrefs_url(self, reference: EntityReference):
        """Append the BridgeDb xrefs URL to reference['xrefs'], keeping any existing entries."""
        organism = reference.get("organism")
        alternate_prefix = to_list(reference.get("alternate_prefix"))
        identifier = reference.get("identifier")
        if not is_present(organism) or not alternate_prefix or not is_present(identifier):
            logging.warning(
                f"Cannot add BridgeDb xrefs URL to {identifier!r}: "
                f"organism, alternate_prefix, and identifier are all required"
            )
            return

        xrefs_url = build_xrefs_url(self.api_url, organism, alternate_prefix[0], identifier)
        xrefs = to_list(reference.get("xrefs"))
        if xrefs_url not in xrefs:
            xrefs = xrefs + [xrefs_url]
        reference["xrefs"] = xrefs

    # ------------------------------------- Helper methods --------------------------------------- #

    @staticmethod
    def _resolve_options(options: dict[str, bool] | None) -> dict[str, bool]:
        options = options or {}
        invalid_keys = set(options).difference(DEFAULT_OPTIONS)
        if invalid_keys:
            raise ValueError(
                f"Invalid enrichment option(s): {invalid_keys}. Valid options are: {list(DEFAULT_OPTIONS)}"
            )
        return {**DEFAULT_OPTIONS, **options}

    @staticmethod
    def _add_identifiers_iri(reference: EntityReference):
        preferred_prefix = reference.get("preferred_prefix")
        if not is_present(preferred_prefix):
            logging.debug(f"No preferred prefix for {reference.get('identifier')}; not adding identifiers.org IRI")
            return

        previous_id = reference.get("id")
        if is_present(previous_id) and "identifiers.org" not in previous_id:
            same_as = to_list(reference.get("same_as"))
            if previous_id not in same_as:
                same_as = same_as + [previous_id]
            reference["same_as"] = same_as

        reference["id"] = f"{IDENTIFIERS_ORG_IRI_ROOT}{preferred_prefix}/{reference['identifier']}"
