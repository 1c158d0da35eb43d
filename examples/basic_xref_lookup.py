import json

from biobridge.bridgedb import BridgeDb


bridgedb = BridgeDb()

item = {"db": "Entrez Gene", "identifier": "4292", "organism": "Human"}

# Cross-references grouped for display (the specified identifier always comes first)
display_groups = bridgedb.get_xrefs(item, options={"format": "display"})
print(f"\nXrefs for {item['db']}:{item['identifier']} ({len(display_groups)} databases):")
for group in display_groups:
    print(f"  {group['key']}: {', '.join(value['text'] for value in group['values'])}")

# Map the gene to its Ensembl identifiers
ensembl_xrefs = bridgedb.map(item, "ensembl")
print(f"\nEnsembl identifiers:")
print(json.dumps([xref["identifier"] for xref in ensembl_xrefs], indent=2))

# Look up genes by symbol
hits = bridgedb.search_by_attribute("MLH1", organism="Human")
print(f"\nAttribute search hits for MLH1: {len(hits)}")

# Several references at once (results come back in input order)
batch = [item, {"db": "HMDB", "identifier": "HMDB0000122", "organism": "Human"}]
for reference, xrefs in zip(batch, bridgedb.get_xrefs_many(batch, options={"context": False})):
    print(f"{reference['db']}:{reference['identifier']} has {len(xrefs)} xrefs")
