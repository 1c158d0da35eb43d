"""
Catalog building module for turning raw feed rows into Dataset records.

Derives canonical IRIs, classifies each dataset's biological type, and builds
IRI/identifier patterns. Pure transform: nothing is fetched or validated here.
"""

import logging
import re
from collections.abc import Iterable
from typing import Any

import numpy as np
import pandas as pd

from ...exceptions import FormatError
from .models import (
    CATALOG_LAYOUTS,
    GENE_PRODUCT_PREFIXES,
    IDENTIFIERS_ORG_IRI_ROOT,
    MIRIAM_URN_MARKER,
    TYPE_CLASSIFICATIONS,
    Dataset,
    strip_pattern_anchors,
)

ID_PLACEHOLDER = "$id"


class CatalogBuilder:
    """Builds Dataset records from raw catalog rows, preserving row order."""

    def __init__(self, layout: str = "dataset"):
        if layout not in CATALOG_LAYOUTS:
            raise ValueError(f"Invalid catalog layout '{layout}'. Must be one of: {list(CATALOG_LAYOUTS)}")
        self.layout = layout
        self.columns = CATALOG_LAYOUTS[layout]

    def build(self, rows: Iterable[list[str]]) -> list[Dataset]:
        """
        Build one Dataset per raw row.

        Args:
            rows: Raw rows, each a list of string fields in the layout's column order

        Returns:
            Datasets in feed order
        """
        logging.debug("Beginning catalog build step..")
        df = pd.DataFrame(list(rows), columns=list(self.columns), dtype=object)

        # Represent every kind of 'empty' cell consistently, so one notnull() check drops them all
        df = df.where(df != "", np.nan)

        datasets = [self._build_dataset(record) for record in df.to_dict("records")]
        logging.info(f"Built {len(datasets)} datasets from {self.layout} catalog")
        return datasets

    def _build_dataset(self, record: dict[str, Any]) -> Dataset:
        """Apply the per-row derivation steps to one raw record."""
        fields = {key: value for key, value in record.items() if pd.notnull(value)}

        same_as: list[str] = []
        fields.update(self._derive_uri_patterns(fields, same_as))
        fields.update(self._derive_preferred_prefix(fields.pop("root_urn", None), same_as))
        fields.update(self._classify_type(fields.get("bridgedb_type"), fields.get("preferred_prefix")))

        system_code = fields.get("system_code")
        if not system_code:
            raise FormatError(f"Catalog row has no system code: {record!r}")
        datasource_name = fields.get("datasource_name")
        name = fields.get("name", datasource_name)
        db = tuple(dict.fromkeys(value for value in (datasource_name, fields.get("name")) if value))

        fields.update(
            {
                "system_code": system_code,
                "name": name,
                "db": db,
                "is_primary": fields.get("is_primary") == "1",
                "alternate_prefix": (system_code,),
                "same_as": tuple(same_as),
            }
        )
        return Dataset(**fields)

    @staticmethod
    def _derive_uri_patterns(fields: dict[str, Any], same_as: list[str]) -> dict[str, str]:
        """Build uri_regex_pattern and example_resource from the linkout pattern."""
        linkout_pattern = fields.get("linkout_pattern")
        if not linkout_pattern or ID_PLACEHOLDER not in linkout_pattern:
            return {}

        before, _, after = linkout_pattern.partition(ID_PLACEHOLDER)
        identifier_group = f"({strip_pattern_anchors(fields.get('identifier_pattern'))})"
        derived = {"uri_regex_pattern": f"{re.escape(before)}{identifier_group}{re.escape(after)}"}

        example_identifier = fields.get("example_identifier")
        if example_identifier:
            derived["example_resource"] = linkout_pattern.replace(ID_PLACEHOLDER, example_identifier)

        # The linkout pattern ends with the identifier, so everything before it names the whole namespace
        if linkout_pattern.endswith(ID_PLACEHOLDER):
            same_as.append(before)

        return derived

    @staticmethod
    def _derive_preferred_prefix(root_urn: str | None, same_as: list[str]) -> dict[str, str]:
        """Take the identifiers.org prefix (and canonical IRI) from a MIRIAM root URN."""
        if not root_urn or MIRIAM_URN_MARKER not in root_urn:
            return {}

        preferred_prefix = root_urn.split(MIRIAM_URN_MARKER, 1)[1]
        same_as.append(root_urn)
        return {
            "preferred_prefix": preferred_prefix,
            "id": f"{IDENTIFIERS_ORG_IRI_ROOT}{preferred_prefix}/",
        }

    @staticmethod
    def _classify_type(bridgedb_type: str | None, preferred_prefix: str | None) -> dict[str, Any]:
        """Map bridgedb_type to GPML/BioPAX types and subject tags (absent when unclassified)."""
        if preferred_prefix in GENE_PRODUCT_PREFIXES:
            bridgedb_type_key = "gene"
        else:
            bridgedb_type_key = bridgedb_type

        classification = TYPE_CLASSIFICATIONS.get(bridgedb_type_key) if bridgedb_type_key else None
        if classification is None:
            return {}

        gpml_type, biopax_type, subject = classification
        classified: dict[str, Any] = {"subject": subject}
        if gpml_type:
            classified["gpml_type"] = gpml_type
        if biopax_type:
            classified["biopax_type"] = biopax_type
        return classified
