"""Dataset record and the fixed tables used to build it from the catalog feed."""

import logging
import re
from dataclasses import asdict, dataclass
from functools import lru_cache
from typing import Any

from ...utils import omit_empty

IDENTIFIERS_ORG_IRI_ROOT = "http://identifiers.org/"
MIRIAM_URN_MARKER = "urn:miriam:"

# Column layouts of the two feed variants (column position -> field name)
DATASOURCE_COLUMNS = (
    "datasource_name",
    "system_code",
    "main_url",
    "linkout_pattern",
    "example_identifier",
    "bridgedb_type",
    "organism",
    "is_primary",
    "root_urn",
    "identifier_pattern",
)
DATASET_COLUMNS = DATASOURCE_COLUMNS + ("name",)

CATALOG_LAYOUTS = {
    "datasource": DATASOURCE_COLUMNS,
    "dataset": DATASET_COLUMNS,
}

# bridgedb_type -> (gpml_type, biopax_type, subject tags)
TYPE_CLASSIFICATIONS: dict[str, tuple[str | None, str | None, tuple[str, ...]]] = {
    "gene": ("GeneProduct", "DnaReference", ("gpml:GeneProduct", "biopax:DnaReference")),
    "probe": ("GeneProduct", "DnaReference", ("gpml:GeneProduct", "biopax:DnaReference")),
    "rna": ("Rna", "RnaReference", ("gpml:Rna", "biopax:RnaReference")),
    "protein": ("Protein", "ProteinReference", ("gpml:Protein", "biopax:ProteinReference")),
    "metabolite": ("Metabolite", "SmallMoleculeReference", ("gpml:Metabolite", "biopax:SmallMoleculeReference")),
    "pathway": ("Pathway", "Pathway", ("gpml:Pathway", "biopax:Pathway")),
    "ontology": (None, None, ("owl:Ontology",)),
    "interaction": (None, None, ("biopax:Interaction",)),
}

# Datasets with this preferred prefix are classified as gene products whatever their bridgedb_type
GENE_PRODUCT_PREFIXES = {"go"}


@lru_cache(maxsize=None)
def compile_pattern(pattern: str) -> re.Pattern | None:
    """Compile a feed-supplied regular expression, returning None if it is malformed."""
    try:
        return re.compile(pattern)
    except re.error as e:
        logging.debug(f"Ignoring malformed pattern {pattern!r}: {e}")
        return None


def strip_pattern_anchors(identifier_pattern: str | None) -> str:
    """Remove a leading '^' and trailing '$' so the pattern can be embedded in a larger one."""
    pattern = identifier_pattern or ".*"
    return pattern.removeprefix("^").removesuffix("$")


@dataclass(frozen=True)
class Dataset:
    """
    An identifier namespace (BridgeDb data source), built once from one catalog feed row.

    Absent fields are None (or empty tuples); to_dict() drops them entirely.
    """

    system_code: str
    name: str | None = None
    datasource_name: str | None = None
    db: tuple[str, ...] = ()
    main_url: str | None = None
    linkout_pattern: str | None = None
    uri_regex_pattern: str | None = None
    example_identifier: str | None = None
    example_resource: str | None = None
    bridgedb_type: str | None = None
    organism: str | None = None
    is_primary: bool = False
    identifier_pattern: str | None = None
    preferred_prefix: str | None = None
    alternate_prefix: tuple[str, ...] = ()
    gpml_type: str | None = None
    biopax_type: str | None = None
    subject: tuple[str, ...] = ()
    id: str | None = None
    same_as: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Return the present fields as a plain dict (tuples become lists)."""
        record = {key: list(value) if isinstance(value, tuple) else value for key, value in asdict(self).items()}
        return omit_empty(record)

    def get_field(self, key: str) -> list[Any]:
        """Return a field's value(s) as a list, for set-style matching."""
        if key not in self.__dataclass_fields__:
            raise ValueError(f"Unknown dataset field '{key}'. Valid fields are: {list(self.__dataclass_fields__)}")
        value = getattr(self, key)
        if value is None:
            return []
        if isinstance(value, tuple):
            return list(value)
        return [value]

    def matches_identifier(self, identifier: str) -> bool:
        """Test an identifier against identifier_pattern (absent pattern matches anything)."""
        if not self.identifier_pattern:
            return True
        compiled = compile_pattern(self.identifier_pattern)
        return compiled is not None and compiled.search(identifier) is not None

    def matches_resource(self, iri: str) -> bool:
        """Test an IRI against uri_regex_pattern (absent pattern never matches)."""
        if not self.uri_regex_pattern:
            return False
        compiled = compile_pattern(self.uri_regex_pattern)
        return compiled is not None and compiled.search(iri) is not None
