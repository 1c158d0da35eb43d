"""Semantic context annotation for entity references."""

import copy
from typing import Any

from ..utils import EntityReference

CONTEXT_FIELD = "@context"

# Maps the reference fields produced by biobridge to the vocabularies they come from
JSONLD_CONTEXT: dict[str, Any] = {
    "@vocab": "http://vocabularies.bridgedb.org/ops#",
    "biopax": "http://www.biopax.org/release/biopax-level3.owl#",
    "gpml": "http://vocabularies.wikipathways.org/gpml#",
    "idot": "http://identifiers.org/idot/",
    "owl": "http://www.w3.org/2002/07/owl#",
    "id": "@id",
    "identifier": "schema:identifier",
    "schema": "http://schema.org/",
    "db": "biopax:db",
    "organism": "biopax:organism",
    "preferred_prefix": "idot:preferredPrefix",
    "alternate_prefix": "idot:alternatePrefix",
    "system_code": "http://vocabularies.bridgedb.org/ops#systemCode",
    "gpml_type": {"@id": "gpml:Type", "@type": "@vocab"},
    "biopax_type": {"@id": "@type", "@type": "@vocab"},
    "is_primary": "http://vocabularies.bridgedb.org/ops#isPrimary",
    "same_as": {"@id": "owl:sameAs", "@type": "@id", "@container": "@set"},
    "xrefs": {"@id": "biopax:xref", "@type": "@id", "@container": "@set"},
    "xrefs_url": {"@id": "biopax:xref", "@type": "@id"},
}


def add_context(reference: EntityReference) -> EntityReference:
    """Attach a private copy of the JSON-LD context to a reference (in place), returning it."""
    reference[CONTEXT_FIELD] = copy.deepcopy(JSONLD_CONTEXT)
    return reference
