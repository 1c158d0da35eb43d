"""Tests for the CatalogBuilder class and the Dataset record."""

import pytest

from biobridge.core.catalog import CatalogBuilder, Dataset
from biobridge.exceptions import FormatError
from biobridge.utils import is_present


def _by_code(datasets: list[Dataset], system_code: str) -> Dataset:
    return next(dataset for dataset in datasets if dataset.system_code == system_code)


class TestCatalogBuilder:
    """Tests for CatalogBuilder.build()."""

    def test_preserves_feed_order(self, datasets, dataset_rows):
        """One dataset per row, in feed order."""
        assert [dataset.system_code for dataset in datasets] == [row[1] for row in dataset_rows]

    def test_no_empty_values(self, datasets):
        """Built datasets never carry empty strings, NaN, or None."""
        for dataset in datasets:
            record = dataset.to_dict()
            assert all(is_present(value) for value in record.values()), record

    def test_miriam_urn_derives_preferred_prefix(self, datasets):
        """A urn:miriam root URN gives the preferred prefix, canonical id, and a same_as link."""
        entrez = _by_code(datasets, "L")
        assert entrez.preferred_prefix == "ncbigene"
        assert entrez.id == "http://identifiers.org/ncbigene/"
        assert "urn:miriam:ncbigene" in entrez.same_as

    def test_missing_root_urn_leaves_fields_absent(self, datasets):
        """Without a root URN there is no preferred prefix or id (absent, not empty)."""
        affy = _by_code(datasets, "X")
        assert affy.preferred_prefix is None
        assert "preferred_prefix" not in affy.to_dict()
        assert "id" not in affy.to_dict()

    def test_alternate_prefix_seeded_with_system_code(self, datasets):
        """alternate_prefix is never empty and starts with the system code."""
        for dataset in datasets:
            assert dataset.alternate_prefix[0] == dataset.system_code

    def test_is_primary_flag(self, datasets):
        assert _by_code(datasets, "L").is_primary is True
        assert _by_code(datasets, "X").is_primary is False

    def test_names_and_db(self, datasets):
        """name is the official name; db holds the feed name then the official name."""
        entrez = _by_code(datasets, "L")
        assert entrez.name == "NCBI Gene"
        assert entrez.datasource_name == "Entrez Gene"
        assert entrez.db == ("Entrez Gene", "NCBI Gene")

        ensembl = _by_code(datasets, "En")
        assert ensembl.db == ("Ensembl",)

    def test_uri_patterns(self, datasets):
        """The linkout pattern yields a URI regex, an example resource, and a namespace same_as link."""
        hmdb = _by_code(datasets, "Ch")
        assert hmdb.example_resource == "http://www.hmdb.ca/metabolites/HMDB0000001"
        assert hmdb.matches_resource("http://www.hmdb.ca/metabolites/HMDB0000001")
        assert not hmdb.matches_resource("http://www.ncbi.nlm.nih.gov/gene/1234")
        assert "http://www.hmdb.ca/metabolites/" in hmdb.same_as

    def test_linkout_with_query_string(self, datasets):
        """'$id' in the middle of a pattern: no namespace link, but the regex still matches."""
        gramene = _by_code(datasets, "EG")
        assert gramene.same_as == ()
        assert gramene.matches_resource("http://www.gramene.org/Arabidopsis_thaliana/Gene/Summary?g=AT1G01010")

    @pytest.mark.parametrize(
        "system_code, gpml_type, biopax_type",
        [
            ("L", "GeneProduct", "DnaReference"),
            ("X", "GeneProduct", "DnaReference"),
            ("Ch", "Metabolite", "SmallMoleculeReference"),
            ("S", "Protein", "ProteinReference"),
            ("Wp", "Pathway", "Pathway"),
        ],
    )
    def test_type_classification(self, datasets, system_code, gpml_type, biopax_type):
        dataset = _by_code(datasets, system_code)
        assert dataset.gpml_type == gpml_type
        assert dataset.biopax_type == biopax_type

    def test_go_prefix_classified_as_gene_product(self, datasets):
        """The 'go' preferred prefix overrides its bridgedb_type."""
        go = _by_code(datasets, "T")
        assert go.gpml_type == "GeneProduct"
        assert go.biopax_type == "DnaReference"

    def test_unclassified_type_has_no_type_fields(self, datasets):
        broken = _by_code(datasets, "Bx")
        record = broken.to_dict()
        assert "gpml_type" not in record
        assert "biopax_type" not in record
        assert "subject" not in record

    def test_subject_only_classification(self):
        """Ontology and interaction types only get subject tags."""
        row = ["Reactome Interaction", "Ri", "", "", "", "interaction", "", "0", "", "", "Reactome Interaction"]
        (dataset,) = CatalogBuilder().build([row])
        assert dataset.subject == ("biopax:Interaction",)
        assert dataset.gpml_type is None

    def test_single_species_dataset_keeps_organism(self, datasets):
        assert _by_code(datasets, "EG").organism == "Arabidopsis thaliana"

    def test_datasource_layout(self, dataset_rows):
        """The 10-column layout uses the feed name as the dataset name."""
        builder = CatalogBuilder(layout="datasource")
        (dataset,) = builder.build([dataset_rows[0][:10]])
        assert dataset.name == "Entrez Gene"
        assert dataset.db == ("Entrez Gene",)
        assert dataset.preferred_prefix == "ncbigene"

    def test_invalid_layout(self):
        with pytest.raises(ValueError, match="Invalid catalog layout"):
            CatalogBuilder(layout="xml")

    def test_missing_system_code(self, dataset_rows):
        row = list(dataset_rows[0])
        row[1] = ""
        with pytest.raises(FormatError, match="no system code"):
            CatalogBuilder().build([row])


class TestDataset:
    """Tests for Dataset helper methods."""

    def test_malformed_pattern_never_matches(self, datasets):
        """A pattern that does not compile is kept as-is and treated as never-matching."""
        broken = _by_code(datasets, "Bx")
        assert broken.identifier_pattern == "[unclosed"
        assert broken.matches_identifier("anything") is False

    def test_absent_pattern_matches_anything(self, datasets):
        assert _by_code(datasets, "X").matches_identifier("1851_s_at") is True

    def test_matches_identifier(self, datasets):
        entrez = _by_code(datasets, "L")
        assert entrez.matches_identifier("1234")
        assert not entrez.matches_identifier("ENSG00000139618")

    def test_get_field(self, datasets):
        entrez = _by_code(datasets, "L")
        assert entrez.get_field("db") == ["Entrez Gene", "NCBI Gene"]
        assert entrez.get_field("system_code") == ["L"]
        assert _by_code(datasets, "X").get_field("preferred_prefix") == []

    def test_get_unknown_field(self, datasets):
        with pytest.raises(ValueError, match="Unknown dataset field"):
            datasets[0].get_field("color")

    def test_dataset_is_immutable(self, datasets):
        with pytest.raises(AttributeError):
            datasets[0].name = "Other"  # type: ignore[misc]
