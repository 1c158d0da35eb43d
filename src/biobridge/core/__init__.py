"""Core components: catalog, normalization, resolution, enrichment, and xref aggregation."""
