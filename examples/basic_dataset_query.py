from biobridge.bridgedb import BridgeDb

bridgedb = BridgeDb()

# All datasets, preferred ones first
datasets = bridgedb.query_datasets()
print(f"\nBridgeDb knows {len(datasets)} datasets. Top 10:")
for dataset in datasets[:10]:
    print(f"  {dataset.system_code:>4}  {dataset.preferred_prefix or '-':<15} {dataset.name}")

# Which dataset does this IRI belong to?
dataset = bridgedb.get_dataset(example_resource="http://www.ncbi.nlm.nih.gov/gene/4292")
print(f"\nDataset for the NCBI Gene linkout: {dataset.name} (system code {dataset.system_code})")
