import json

from biobridge.bridgedb import BridgeDb


bridgedb = BridgeDb()

# Define an entity reference with a database name and an identifier
item = {"db": "Entrez Gene", "identifier": "4292", "organism": "Human"}

# Print out the original entity reference
print(f"\nOriginal entity reference:")
print(json.dumps(item, indent=2))

# Enrich it with dataset metadata, organism, and xrefs URL
enriched_item = bridgedb.enrich(item, options={"context": False})

# Print the enriched entity reference
print(f"\nEnriched entity reference:")
print(json.dumps(enriched_item, indent=2))

# IRIs work too
print(f"\nEnriched identifiers.org IRI:")
print(json.dumps(bridgedb.enrich("http://identifiers.org/hmdb/HMDB0000122", options={"context": False}), indent=2))
