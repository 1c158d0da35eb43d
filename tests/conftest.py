import pytest

from biobridge.core.catalog import CatalogBuilder, Dataset
from biobridge.core.enrichment import EnrichmentPipeline
from biobridge.core.normalizer import ReferenceNormalizer
from biobridge.core.organism import YamlOrganismLookup
from biobridge.core.resolver import DatasetResolver
from biobridge.utils import setup_logging

# Setup logging once for all tests
setup_logging()

API_URL = "https://webservice.bridgedb.org"

PREFERRED_PREFIXES = ["ensembl", "ncbigene", "chebi", "cas", "hmdb", "uniprot", "kegg.compound"]

# fmt: off
# Rows in the (11-column) dataset layout of the BridgeDb datasources feed
DATASET_ROWS = [
    [
        "Entrez Gene", "L", "http://www.ncbi.nlm.nih.gov/gene", "http://www.ncbi.nlm.nih.gov/gene/$id",
        "100010", "gene", "", "1", "urn:miriam:ncbigene", r"^\d+$", "NCBI Gene",
    ],
    [
        "Ensembl", "En", "http://www.ensembl.org", "http://www.ensembl.org/id/$id",
        "ENSG00000139618", "gene", "", "1", "urn:miriam:ensembl", r"^ENS[A-Z]*[FPTG]\d{11}$", "Ensembl",
    ],
    [
        "HMDB", "Ch", "http://www.hmdb.ca/", "http://www.hmdb.ca/metabolites/$id",
        "HMDB0000001", "metabolite", "", "1", "urn:miriam:hmdb", r"^HMDB\d+$", "HMDB",
    ],
    [
        "Uniprot-TrEMBL", "S", "http://www.uniprot.org/", "http://www.uniprot.org/uniprot/$id",
        "P62158", "protein", "", "1", "urn:miriam:uniprot", r"^[OPQ][0-9][A-Z0-9]{3}[0-9]$", "UniProtKB/TrEMBL",
    ],
    [
        "Affy", "X", "http://www.affymetrix.com/", "https://www.affymetrix.com/LinkServlet?probeset=$id",
        "1851_s_at", "probe", "", "0", "", "", "Affymetrix Probeset",
    ],
    [
        "Gramene Arabidopsis", "EG", "http://www.gramene.org/",
        "http://www.gramene.org/Arabidopsis_thaliana/Gene/Summary?g=$id",
        "ATMG01360-TAIR-G", "gene", "Arabidopsis thaliana", "1", "", "", "Gramene Arabidopsis",
    ],
    ["Broken", "Bx", "", "", "", "", "", "0", "", "[unclosed", "Broken Pattern"],
    [
        "GeneOntology", "T", "http://www.ebi.ac.uk/QuickGO/", "http://www.ebi.ac.uk/QuickGO/GTerm?id=$id",
        "GO:0006915", "ontology", "", "0", "urn:miriam:go", r"^GO:\d{7}$", "Gene Ontology",
    ],
    [
        "WikiPathways", "Wp", "http://www.wikipathways.org/", "http://www.wikipathways.org/instance/$id",
        "WP100", "pathway", "", "1", "urn:miriam:wikipathways", r"WP\d{1,5}", "WikiPathways",
    ],
]
# fmt: on


class StubCatalog:
    """Stands in for DatasetCatalog, serving prebuilt datasets without any HTTP."""

    def __init__(self, datasets: list[Dataset]):
        self._datasets = tuple(datasets)
        self.calls = 0

    def datasets(self) -> tuple[Dataset, ...]:
        self.calls += 1
        return self._datasets


@pytest.fixture(scope="session")
def dataset_rows() -> list[list[str]]:
    return [list(row) for row in DATASET_ROWS]


@pytest.fixture(scope="session")
def datasets() -> list[Dataset]:
    return CatalogBuilder(layout="dataset").build(DATASET_ROWS)


@pytest.fixture
def stub_catalog(datasets) -> StubCatalog:
    return StubCatalog(datasets)


@pytest.fixture
def resolver(stub_catalog) -> DatasetResolver:
    return DatasetResolver(stub_catalog, preferred_prefixes=PREFERRED_PREFIXES)


@pytest.fixture(scope="session")
def organism_lookup() -> YamlOrganismLookup:
    return YamlOrganismLookup()


@pytest.fixture
def pipeline(resolver, organism_lookup) -> EnrichmentPipeline:
    return EnrichmentPipeline(ReferenceNormalizer(), resolver, organism_lookup, api_url=API_URL)
