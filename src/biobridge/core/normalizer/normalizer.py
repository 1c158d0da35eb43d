"""
Reference normalization module for turning raw input into entity reference records.

Accepts identifiers.org IRIs, BridgeDb xrefs URLs, or partial reference dicts, and
fills in whatever fields those IRIs imply. Uses only the provided input (no lookups).
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

import pandas as pd

from ...exceptions import UnresolvableReferenceError
from ...utils import EntityReference, is_present, to_list
from .grammars import DEFAULT_GRAMMARS, IRI_FIELDS, IriGrammar

RAW_INPUT_FIELD = "_input"


class ReferenceNormalizer:
    """
    Normalizes heterogeneous reference input into an EntityReference dict.

    Fields parsed from IRIs never overwrite fields the caller supplied.
    """

    def __init__(self, grammars: Iterable[IriGrammar] | None = None):
        self.grammars = tuple(grammars) if grammars is not None else DEFAULT_GRAMMARS

    def normalize(self, item: str | Mapping[str, Any] | pd.Series) -> EntityReference:
        """
        Normalize one input into an entity reference.

        Args:
            item: IRI/identifier string, or a partial reference (dict or named Series)

        Returns:
            New entity reference dict (the input is not modified)

        Raises:
            UnresolvableReferenceError: If the input is neither a string nor a mapping,
                or no identifier can be established
        """
        if isinstance(item, str):
            reference: EntityReference = {RAW_INPUT_FIELD: item}
        elif isinstance(item, pd.Series):
            reference = {key: value for key, value in item.to_dict().items() if is_present(value)}
        elif isinstance(item, Mapping):
            reference = dict(item)
        else:
            raise UnresolvableReferenceError(
                f"Not enough data provided to identify the specified entity reference: {item!r}", value=item
            )

        for grammar in self.grammars:
            matched_field, parsed = self._parse_first_match(grammar, reference)
            if parsed:
                logging.debug(f"Parsed {grammar.name} IRI in field '{matched_field}' into {parsed}")
                if matched_field == "identifier":
                    # The identifier field held a whole IRI; keep only its bare identifier part
                    reference["identifier"] = parsed["identifier"]
                # Caller-supplied fields win
                for key, value in parsed.items():
                    reference.setdefault(key, value)

        raw_input = reference.pop(RAW_INPUT_FIELD, None)
        if "identifier" not in reference and raw_input is not None:
            reference["identifier"] = raw_input.strip()

        if not is_present(reference.get("identifier")):
            raise UnresolvableReferenceError(
                f"Could not establish an identifier for the specified entity reference: {item!r}", value=item
            )

        return reference

    def normalize_many(
        self, items: Iterable[str | Mapping[str, Any]] | pd.Series | pd.DataFrame
    ) -> list[EntityReference]:
        """Normalize several inputs, keeping input order. DataFrame rows are treated as references."""
        if isinstance(items, pd.DataFrame):
            return [self.normalize(row) for _, row in items.iterrows()]
        return [self.normalize(item) for item in items]

    @staticmethod
    def _parse_first_match(
        grammar: IriGrammar, reference: EntityReference
    ) -> tuple[str | None, dict[str, Any] | None]:
        """Return (field name, parsed fields) for the first IRI field matching the grammar."""
        for field_name in IRI_FIELDS:
            for value in to_list(reference.get(field_name)):
                parsed = grammar.parse(value)
                if parsed is not None:
                    return field_name, parsed
        return None, None
