"""Tests for the XrefAggregator class (webservice mocked)."""

from unittest.mock import MagicMock

import pandas as pd
import pytest

from biobridge.core.aggregator import XrefAggregator
from biobridge.core.context import CONTEXT_FIELD
from biobridge.core.webservice import BridgeDbWebservice
from biobridge.exceptions import DatasetNotFoundError, FormatError, TransportError

SPECIFIED = {"db": "HMDB", "identifier": "HMDB0000001", "organism": "Human"}

XREF_ROWS = [
    {"identifier": "HMDB0000001", "db": "HMDB"},
    {"identifier": "1234", "db": "Entrez Gene"},
    {"identifier": "ENSG00000139618", "db": "Ensembl"},
]


@pytest.fixture
def webservice():
    return MagicMock(spec=BridgeDbWebservice)


@pytest.fixture
def aggregator(pipeline, resolver, webservice):
    return XrefAggregator(pipeline, resolver, webservice)


class TestAggregateFlat:

    def test_enriched_xrefs(self, aggregator, webservice):
        webservice.xrefs.return_value = [dict(row) for row in XREF_ROWS]

        xrefs = aggregator.aggregate(SPECIFIED)

        webservice.xrefs.assert_called_once_with("Homo sapiens", "Ch", "HMDB0000001")
        assert [xref["db"] for xref in xrefs] == ["HMDB", "NCBI Gene", "Ensembl"]
        assert [xref["preferred_prefix"] for xref in xrefs] == ["hmdb", "ncbigene", "ensembl"]
        assert [xref["priority"] for xref in xrefs] == [5, 8, 9]
        assert xrefs[1]["linkout_pattern"] == "http://www.ncbi.nlm.nih.gov/gene/$id"
        assert all(CONTEXT_FIELD in xref for xref in xrefs)

    def test_without_context(self, aggregator, webservice):
        webservice.xrefs.return_value = [dict(row) for row in XREF_ROWS]
        xrefs = aggregator.aggregate(SPECIFIED, options={"context": False})
        assert not any(CONTEXT_FIELD in xref for xref in xrefs)

    def test_unknown_xref_db_kept_with_zero_priority(self, aggregator, webservice):
        webservice.xrefs.return_value = [{"identifier": "X123", "db": "Mystery DB"}]
        (xref,) = aggregator.aggregate(SPECIFIED, options={"context": False})
        assert xref == {"identifier": "X123", "db": "Mystery DB", "priority": 0}

    def test_unresolvable_specified_reference_raises(self, aggregator):
        with pytest.raises(DatasetNotFoundError):
            aggregator.aggregate({"db": "Not A Database", "identifier": "1", "organism": "Human"})


class TestAggregateDisplay:

    def test_specified_reference_pinned_first(self, aggregator, webservice):
        webservice.xrefs.return_value = [dict(row) for row in XREF_ROWS]

        groups = aggregator.aggregate(SPECIFIED, options={"format": "display"})

        assert [group["key"] for group in groups] == ["HMDB", "Ensembl", "NCBI Gene"]
        assert groups[0]["values"][0] == {
            "title": "HMDB",
            "text": "HMDB0000001",
            "priority": 5,
            "uri": "http://www.hmdb.ca/metabolites/HMDB0000001",
        }

    def test_specified_identifier_first_within_group(self, aggregator, webservice):
        webservice.xrefs.return_value = [
            {"identifier": "HMDB0000002", "db": "HMDB"},
            {"identifier": "HMDB0000001", "db": "HMDB"},
            {"identifier": "1234", "db": "Entrez Gene"},
        ]

        groups = aggregator.aggregate(SPECIFIED, options={"format": "display"})

        assert groups[0]["key"] == "HMDB"
        assert [value["text"] for value in groups[0]["values"]] == ["HMDB0000001", "HMDB0000002"]

    def test_sorted_by_priority_then_title(self, aggregator, webservice):
        """Equal priorities are ordered by case-insensitive title."""
        webservice.xrefs.return_value = [
            {"identifier": "HMDB0000001", "db": "HMDB"},
            {"identifier": "b", "db": "zeta db"},
            {"identifier": "a", "db": "Alpha DB"},
            {"identifier": "1234", "db": "Entrez Gene"},
        ]

        groups = aggregator.aggregate(SPECIFIED, options={"format": "display"})

        assert [group["key"] for group in groups] == ["HMDB", "NCBI Gene", "Alpha DB", "zeta db"]

    def test_specified_missing_from_results_is_added(self, aggregator, webservice):
        webservice.xrefs.return_value = [
            {"identifier": "1234", "db": "Entrez Gene"},
            {"identifier": "ENSG00000139618", "db": "Ensembl"},
        ]

        groups = aggregator.aggregate(SPECIFIED, options={"format": "display"})

        assert groups[0]["key"] == "HMDB"
        assert groups[0]["values"][0]["text"] == "HMDB0000001"
        assert len(groups) == 3

    def test_single_group_result(self, aggregator, webservice):
        """Fewer than two groups: only the specified reference is shown."""
        webservice.xrefs.return_value = [{"identifier": "HMDB0000002", "db": "HMDB"}]

        groups = aggregator.aggregate(SPECIFIED, options={"format": "display"})

        assert len(groups) == 1
        assert groups[0]["values"] == [
            {"title": "HMDB", "text": "HMDB0000001", "priority": 5, "uri": "http://www.hmdb.ca/metabolites/HMDB0000001"}
        ]

    def test_invalid_format(self, aggregator):
        with pytest.raises(ValueError, match="Invalid format"):
            aggregator.aggregate(SPECIFIED, options={"format": "table"})


class TestAggregateDegraded:
    """Xref service failures never raise."""

    @pytest.mark.parametrize("error", [TransportError("service down"), FormatError("bad row")])
    def test_display(self, aggregator, webservice, error):
        webservice.xrefs.side_effect = error

        groups = aggregator.aggregate(SPECIFIED, options={"format": "display"})

        assert len(groups) == 1
        assert groups[0]["key"] == "HMDB"
        assert groups[0]["values"][0]["text"] == "HMDB0000001"

    def test_flat(self, aggregator, webservice):
        webservice.xrefs.side_effect = TransportError("service down")

        (reference,) = aggregator.aggregate(SPECIFIED)

        assert reference["identifier"] == "HMDB0000001"
        assert reference["db"] == "HMDB"

    def test_no_organism(self, aggregator, webservice):
        """Without an organism the xrefs cannot be looked up at all."""
        groups = aggregator.aggregate({"db": "HMDB", "identifier": "HMDB0000001"}, options={"format": "display"})

        webservice.xrefs.assert_not_called()
        assert groups[0]["values"][0]["text"] == "HMDB0000001"


class TestMapToPrefix:

    def test_map(self, aggregator, webservice):
        webservice.xrefs.return_value = [dict(row) for row in XREF_ROWS]

        xrefs = aggregator.map_to_prefix(SPECIFIED, "ncbigene")

        assert [xref["identifier"] for xref in xrefs] == ["1234"]
        assert CONTEXT_FIELD not in xrefs[0]

    def test_target_required(self, aggregator):
        with pytest.raises(ValueError):
            aggregator.map_to_prefix(SPECIFIED, "")


class TestMalformedXrefRows:
    """Rows the xref service should not send, but might."""

    def test_blank_db_kept_with_zero_priority(self, aggregator, webservice):
        webservice.xrefs.return_value = [{"identifier": "1234", "db": ""}, dict(XREF_ROWS[0])]

        xrefs = aggregator.aggregate(SPECIFIED, options={"context": False})

        assert xrefs[0] == {"identifier": "1234", "db": "", "priority": 0}
        assert xrefs[1]["preferred_prefix"] == "hmdb"

    def test_blank_db_display(self, aggregator, webservice):
        webservice.xrefs.return_value = [{"identifier": "1234", "db": ""}, dict(XREF_ROWS[0])]

        groups = aggregator.aggregate(SPECIFIED, options={"format": "display"})

        assert [group["key"] for group in groups] == ["HMDB", ""]
        assert groups[1]["values"] == [{"title": "", "text": "1234", "priority": 0}]

    def test_blank_identifier_dropped(self, aggregator, webservice):
        webservice.xrefs.return_value = [{"identifier": "", "db": "Ensembl"}] + [dict(row) for row in XREF_ROWS]

        xrefs = aggregator.aggregate(SPECIFIED, options={"context": False})

        assert [xref["identifier"] for xref in xrefs] == ["HMDB0000001", "1234", "ENSG00000139618"]


class TestAggregateMany:

    def test_list_keeps_input_order(self, aggregator, webservice):
        def xrefs_for(organism, system_code, identifier):
            return [{"identifier": identifier, "db": "HMDB"}, {"identifier": "1234", "db": "Entrez Gene"}]

        webservice.xrefs.side_effect = xrefs_for
        items = [SPECIFIED, {"db": "HMDB", "identifier": "HMDB0000002", "organism": "Human"}]

        results = aggregator.aggregate_many(items, options={"context": False})

        assert [result[0]["identifier"] for result in results] == ["HMDB0000001", "HMDB0000002"]

    def test_dataframe_in_series_out(self, aggregator, webservice):
        webservice.xrefs.return_value = [dict(row) for row in XREF_ROWS]
        df = pd.DataFrame(
            {"db": ["HMDB", "Entrez Gene"], "identifier": ["HMDB0000001", "1234"], "organism": ["Human", "Human"]},
            index=["a", "b"],
        )

        results = aggregator.aggregate_many(df, options={"format": "display"})

        assert isinstance(results, pd.Series)
        assert list(results.index) == ["a", "b"]
        assert results["a"][0]["key"] == "HMDB"
        assert results["b"][0]["key"] == "NCBI Gene"

    def test_degraded_item_does_not_affect_others(self, aggregator, webservice):
        webservice.xrefs.side_effect = [TransportError("service down"), [dict(row) for row in XREF_ROWS]]

        results = aggregator.aggregate_many([SPECIFIED, SPECIFIED], options={"context": False})

        assert len(results[0]) == 1
        assert len(results[1]) == 3
