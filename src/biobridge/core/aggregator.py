"""
Cross-reference aggregation module.

Fetches the xrefs BridgeDb knows for an entity reference, enriches each with dataset
metadata, and optionally formats them as display groups with the caller's own
identifier pinned first.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

import pandas as pd

from ..exceptions import DatasetNotFoundError, FormatError, InsufficientDataError, TransportError
from ..utils import EntityReference, is_present, to_list
from .context import add_context
from .enrichment import EnrichmentPipeline
from .resolver import DatasetResolver
from .webservice import BridgeDbWebservice

DEFAULT_AGGREGATE_OPTIONS: dict[str, Any] = {
    "format": None,  # None for the flat enriched list, or 'display'
    "context": True,  # Flat format only
}

# Display list item: {title, text, priority, uri?}
ListItem = dict[str, Any]
# Display group: {key, values: [ListItem, ...]}
DisplayGroup = dict[str, Any]


class XrefAggregator:
    """Gets and organizes the cross-references of an entity reference."""

    def __init__(self, pipeline: EnrichmentPipeline, resolver: DatasetResolver, webservice: BridgeDbWebservice):
        self.pipeline = pipeline
        self.resolver = resolver
        self.webservice = webservice

    def aggregate(
        self, item: str | Mapping[str, Any] | pd.Series, options: dict[str, Any] | None = None
    ) -> list[EntityReference] | list[DisplayGroup]:
        """
        Get the cross-references of an entity reference.

        Args:
            item: Entity reference input (see EnrichmentPipeline.enrich())
            options: Merged over DEFAULT_AGGREGATE_OPTIONS
                - 'format': 'display' for grouped list items, None for enriched references
                - 'context': attach @context to each enriched reference (flat format)

        Returns:
            Flat list of enriched xrefs, or display groups (the specified reference's group
            first, with the specified identifier first within it)

        Raises:
            ValueError: If options contains an unknown key or an unsupported format
            UnresolvableReferenceError / DatasetNotFoundError: If the specified reference itself
                cannot be resolved (xref service failures never raise)
        """
        options = self._resolve_options(options)
        specified = self.pipeline.enrich(item, options={"xrefs_url": False, "context": False})
        self._add_display_fields(specified)

        xrefs = self._get_xrefs(specified)
        if xrefs is None:
            # Degraded result: only what the caller specified
            if options["format"] == "display":
                return [self._specified_group(specified)]
            return [add_context(specified) if options["context"] else specified]

        if options["format"] == "display":
            return self.format_for_display(xrefs, specified)

        if options["context"]:
            xrefs = [add_context(xref) for xref in xrefs]
        return xrefs

    def aggregate_many(
        self,
        items: Iterable[str | Mapping[str, Any]] | pd.DataFrame,
        options: dict[str, Any] | None = None,
    ) -> list[list[EntityReference] | list[DisplayGroup]] | pd.Series:
        """
        Get the cross-references of several entity references, preserving input order.

        Args:
            items: List of references, or DataFrame whose rows are references
            options: Aggregation options (see aggregate())

        Returns:
            One aggregate() result per item, or a Series of them (same index) if a DataFrame was provided
        """
        if isinstance(items, pd.DataFrame):
            logging.info(f"Getting xrefs for {len(items)} entity references")
            results = [self.aggregate(row, options) for _, row in items.iterrows()]
            return pd.Series(results, index=items.index, dtype=object)

        return [self.aggregate(item, options) for item in items]

    def map_to_prefix(self, item: str | Mapping[str, Any] | pd.Series, target_prefix: str) -> list[EntityReference]:
        """
        Get the xrefs of an entity reference that belong to the dataset with the given preferred prefix.

        Args:
            item: Entity reference input
            target_prefix: Preferred prefix of the target dataset (e.g., 'ncbigene')

        Returns:
            Matching enriched xrefs (may be empty)
        """
        if not is_present(target_prefix):
            raise ValueError("A target prefix is required to map an entity reference")
        xrefs = self.aggregate(item, options={"context": False})
        return [xref for xref in xrefs if xref.get("preferred_prefix") == target_prefix]

    def format_for_display(self, xrefs: list[EntityReference], specified: EntityReference) -> list[DisplayGroup]:
        """
        Group enriched xrefs into display groups, best priority first.

        List items are sorted by descending priority then case-insensitive title and grouped by
        title (in order of first appearance). The specified reference's group and entry are then
        moved to the front.
        """
        list_items = sorted(
            (self._to_list_item(xref) for xref in xrefs),
            key=lambda list_item: (-list_item["priority"], list_item["title"].casefold()),
        )

        groups: dict[str, list[ListItem]] = dict()
        for list_item in list_items:
            groups.setdefault(list_item["title"], []).append(list_item)
        display_groups = [{"key": title, "values": values} for title, values in groups.items()]

        if len(display_groups) < 2:
            return [self._specified_group(specified)]
        return self._pin_specified(display_groups, specified)

    # ------------------------------------- Helper methods --------------------------------------- #

    def _get_xrefs(self, specified: EntityReference) -> list[EntityReference] | None:
        """Fetch and enrich the specified reference's xrefs (None if they cannot be fetched)."""
        organism = specified.get("organism")
        alternate_prefix = to_list(specified.get("alternate_prefix"))
        if not is_present(organism) or not alternate_prefix:
            logging.warning(
                f"Cannot look up xrefs for {specified.get('identifier')!r} without an organism and system code"
            )
            return None

        try:
            rows = self.webservice.xrefs(organism, alternate_prefix[0], specified["identifier"])
        except (TransportError, FormatError) as e:
            logging.warning(f"Xref lookup failed for {specified['identifier']!r}; returning it alone: {e}")
            return None

        xrefs = []
        for row in rows:
            if not is_present(row.get("identifier")):
                logging.warning(f"Dropping xref of {specified['identifier']!r} with no identifier: {row!r}")
                continue
            xrefs.append(self._enrich_xref(row))
        return xrefs

    def _enrich_xref(self, row: EntityReference) -> EntityReference:
        xref = dict(row)
        try:
            dataset = self.pipeline.add_data_source(xref)
        except (DatasetNotFoundError, InsufficientDataError):
            logging.debug(f"Xref db {xref.get('db')!r} matches no catalog dataset; keeping it as returned")
            xref["priority"] = 0
            return xref

        xref["priority"] = self.resolver.priority(dataset)
        if dataset.linkout_pattern:
            xref["linkout_pattern"] = dataset.linkout_pattern
        return xref

    def _add_display_fields(self, reference: EntityReference):
        try:
            dataset = self.resolver.resolve_by_reference(reference)
        except DatasetNotFoundError:
            reference.setdefault("priority", 0)
            return
        reference.setdefault("priority", self.resolver.priority(dataset))
        if dataset.linkout_pattern:
            reference.setdefault("linkout_pattern", dataset.linkout_pattern)

    @staticmethod
    def _to_list_item(reference: EntityReference) -> ListItem:
        identifier = reference["identifier"]
        list_item = {
            "title": reference.get("db") or "",
            "text": identifier,
            "priority": reference.get("priority", 0),
        }
        if is_present(reference.get("linkout_pattern")):
            list_item["uri"] = reference["linkout_pattern"].replace("$id", identifier)
        return list_item

    def _specified_group(self, specified: EntityReference) -> DisplayGroup:
        list_item = self._to_list_item(specified)
        return {"key": list_item["title"], "values": [list_item]}

    def _pin_specified(self, display_groups: list[DisplayGroup], specified: EntityReference) -> list[DisplayGroup]:
        specified_db = specified.get("db") or ""
        specified_identifier = specified["identifier"]

        specified_group = next((group for group in display_groups if group["key"] == specified_db), None)
        if specified_group is None:
            logging.debug(f"Specified db {specified_db!r} not among xrefs; adding it")
            specified_group = self._specified_group(specified)
        else:
            display_groups.remove(specified_group)

        values = specified_group["values"]
        specified_item = next((value for value in values if value["text"] == specified_identifier), None)
        if specified_item is None:
            specified_item = self._to_list_item(specified)
        else:
            values.remove(specified_item)
        values.insert(0, specified_item)

        return [specified_group] + display_groups

    @staticmethod
    def _resolve_options(options: dict[str, Any] | None) -> dict[str, Any]:
        options = options or {}
        invalid_keys = set(options).difference(DEFAULT_AGGREGATE_OPTIONS)
        if invalid_keys:
            raise ValueError(
                f"Invalid aggregation option(s): {invalid_keys}. "
                f"Valid options are: {list(DEFAULT_AGGREGATE_OPTIONS)}"
            )
        options = {**DEFAULT_AGGREGATE_OPTIONS, **options}
        if options["format"] not in (None, "display"):
            raise ValueError(f"Invalid format '{options['format']}'. Must be one of: [None, 'display']")
        return options
