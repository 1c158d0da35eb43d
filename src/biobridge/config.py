"""
Configuration settings for biobridge.

Customize these values to change webservice endpoints, HTTP behavior, and logging.
Each value can also be overridden with a BIOBRIDGE_* environment variable (or a .env file).
"""

import os

from dotenv import load_dotenv

load_dotenv()  # Load environmental variables (overrides)


# BridgeDb webservice configuration
# Set to http://localhost:8183 to use a local BridgeDb webservice instance
BRIDGEDB_API_URL = os.getenv("BIOBRIDGE_API_URL", "https://webservice.bridgedb.org").rstrip("/")

# Tab-delimited feed describing every dataset (identifier namespace) BridgeDb knows about
DATASETS_METADATA_URL = os.getenv(
    "BIOBRIDGE_DATASETS_METADATA_URL",
    "https://raw.githubusercontent.com/bridgedb/BridgeDb/master/org.bridgedb.bio/resources/org/bridgedb/bio/datasources.tsv",
)

# HTTP behavior (retries happen in the session's transport adapter, not in callers)
HTTP_RETRY_LIMIT = int(os.getenv("BIOBRIDGE_HTTP_RETRY_LIMIT", "2"))
HTTP_RETRY_DELAY = float(os.getenv("BIOBRIDGE_HTTP_RETRY_DELAY", "3"))  # seconds (backoff factor)
HTTP_TIMEOUT = float(os.getenv("BIOBRIDGE_HTTP_TIMEOUT", "30"))  # seconds
HTTP_CACHE_EXPIRE_AFTER = int(os.getenv("BIOBRIDGE_HTTP_CACHE_EXPIRE_AFTER", "3600"))  # seconds, in-memory only

# Rows parsed per chunk when reading tab-delimited responses
TSV_CHUNK_SIZE = int(os.getenv("BIOBRIDGE_TSV_CHUNK_SIZE", "500"))

# Datasets that sort first when several datasets are valid (in this order)
PREFERRED_PREFIXES = [
    prefix.strip()
    for prefix in os.getenv(
        "BIOBRIDGE_PREFERRED_PREFIXES", "ensembl,ncbigene,chebi,cas,hmdb,uniprot,kegg.compound"
    ).split(",")
    if prefix.strip()
]

# Level of logging messages to display (DEBUG, INFO, WARNING, ERROR, or CRITICAL)
LOG_LEVEL = os.getenv("BIOBRIDGE_LOG_LEVEL", "INFO")
