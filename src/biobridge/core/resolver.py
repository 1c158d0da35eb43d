"""
Dataset resolution module for finding the dataset an entity reference belongs to.

Matches reference fields against the catalog (exact first, then normalized), and ranks
datasets when several are valid.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Literal, Protocol

from ..config import PREFERRED_PREFIXES
from ..exceptions import DatasetNotFoundError, InsufficientDataError
from ..utils import EntityReference, is_present, to_list
from .catalog import Dataset
from .normalizer.cleaners import normalize_text_list

MatchTier = Literal["exact", "normalized"]

# Reference fields that can identify a dataset, most precise first
REFERENCE_KEY_PRIORITY = ("preferred_prefix", "alternate_prefix", "db", "system_code")

# Dataset fields accepted by query(), tried in this order
QUERY_KEY_PRIORITY = ("id", "preferred_prefix", "datasource_name", "alternate_prefix", "name", "db", "system_code")
QUERY_PATTERN_ARGS = ("example_resource", "example_identifier")


class SupportsDatasets(Protocol):
    def datasets(self) -> tuple[Dataset, ...]: ...


@dataclass(frozen=True)
class DatasetMatch:
    """A resolved dataset, plus which key and which matching tier found it."""

    dataset: Dataset
    key: str
    tier: MatchTier


class DatasetResolver:
    """Resolves partial entity references and key/value lookups to catalog datasets."""

    def __init__(self, catalog: SupportsDatasets, preferred_prefixes: list[str] | None = None):
        self.catalog = catalog
        self.preferred_prefixes = list(preferred_prefixes) if preferred_prefixes is not None else PREFERRED_PREFIXES

    # ------------------------------------- Key lookups --------------------------------------- #

    def resolve_by_key(self, key: str, value: Any) -> Dataset:
        """
        Resolve a key/value(s) lookup to a single dataset.

        Args:
            key: Dataset field to match (e.g., 'db', 'preferred_prefix', 'system_code')
            value: Value or list of values; any overlap with the dataset's field counts as a match

        Returns:
            First matching dataset in catalog order

        Raises:
            DatasetNotFoundError: If neither the exact nor the normalized pass finds a match
        """
        return self.match_by_key(key, value).dataset

    def match_by_key(self, key: str, value: Any) -> DatasetMatch:
        """Like resolve_by_key, but also report which tier matched."""
        match = self._find_first(self.catalog.datasets(), key, value)
        if match is None:
            logging.debug(f"No dataset found for {key}={value!r}")
            raise DatasetNotFoundError(key, value)
        return match

    def resolve_by_reference(self, reference: EntityReference) -> Dataset:
        """Resolve the dataset for an entity reference (see match_reference)."""
        return self.match_reference(reference).dataset

    def match_reference(self, reference: EntityReference) -> DatasetMatch:
        """
        Resolve the dataset for an entity reference using its most precise identifying field.

        Args:
            reference: Entity reference with at least one of preferred_prefix, alternate_prefix, db, system_code

        Returns:
            DatasetMatch naming the reference field that was used

        Raises:
            InsufficientDataError: If the reference has none of the identifying fields
            DatasetNotFoundError: If the chosen field matches no dataset
        """
        for key in REFERENCE_KEY_PRIORITY:
            if is_present(reference.get(key)):
                match = self.match_by_key(key, reference[key])
                logging.debug(f"Resolved dataset '{match.dataset.name}' via {match.key} ({match.tier} match)")
                return match

        raise InsufficientDataError(
            f"Entity reference has none of the fields {list(REFERENCE_KEY_PRIORITY)} needed to identify "
            f"its dataset: {reference!r}",
            value=reference,
        )

    def convert_preferred_prefix_to_system_code(self, preferred_prefix: str) -> str:
        return self.resolve_by_key("preferred_prefix", preferred_prefix).system_code

    # ------------------------------------- Query / ranking --------------------------------------- #

    def query(self, **args: Any) -> list[Dataset]:
        """
        Find datasets matching at least one of the provided arguments, best-ranked first.

        Args:
            **args: Any of id, preferred_prefix, datasource_name, alternate_prefix, name, db, system_code
                (tried in that order; the first one with matches wins), or example_resource /
                example_identifier (tested against the datasets' patterns if no key matched).
                No arguments returns every dataset.

        Returns:
            Matching datasets in ranking order (may be empty)
        """
        provided = {key: value for key, value in args.items() if is_present(value)}
        invalid_keys = set(provided).difference(QUERY_KEY_PRIORITY + QUERY_PATTERN_ARGS)
        if invalid_keys:
            raise ValueError(
                f"Invalid dataset query argument(s): {invalid_keys}. "
                f"Valid options are: {list(QUERY_KEY_PRIORITY + QUERY_PATTERN_ARGS)}"
            )

        ranked = self.rank(self.catalog.datasets())
        if not provided:
            return ranked

        for key in QUERY_KEY_PRIORITY:
            if key in provided:
                matches = self._find_all(ranked, key, provided[key])
                if matches:
                    return matches

        pattern_filters: list[Callable[[Dataset], bool]] = []
        if "example_resource" in provided:
            pattern_filters.append(lambda dataset: dataset.matches_resource(provided["example_resource"]))
        if "example_identifier" in provided:
            pattern_filters.append(
                lambda dataset: bool(dataset.identifier_pattern)
                and dataset.matches_identifier(provided["example_identifier"])
            )
        for pattern_filter in pattern_filters:
            matches = [dataset for dataset in ranked if pattern_filter(dataset)]
            if matches:
                return matches

        return []

    def get(self, **args: Any) -> Dataset:
        """Return the best-ranked dataset matching query(**args)."""
        matches = self.query(**args)
        if not matches:
            raise DatasetNotFoundError(", ".join(args) or "query", args)
        return matches[0]

    def rank(self, datasets: Iterable[Dataset]) -> list[Dataset]:
        """
        Sort datasets by preference: allow-listed prefixes first (in list order), then primary
        datasets, then datasets with any preferred prefix, then by preferred prefix.
        """
        return sorted(datasets, key=self._ranking_key)

    def priority(self, dataset: Dataset) -> int:
        """Display priority for a dataset (higher = more preferred)."""
        if dataset.preferred_prefix in self.preferred_prefixes:
            return 2 + len(self.preferred_prefixes) - self.preferred_prefixes.index(dataset.preferred_prefix)
        return 1 if dataset.is_primary else 0

    def _ranking_key(self, dataset: Dataset) -> tuple[int, int, int, int, str]:
        prefix = dataset.preferred_prefix
        is_preferred = prefix in self.preferred_prefixes
        return (
            0 if is_preferred else 1,
            self.preferred_prefixes.index(prefix) if is_preferred else 0,
            0 if dataset.is_primary else 1,
            0 if prefix else 1,
            prefix or "",
        )

    # ------------------------------------- Helper methods --------------------------------------- #

    @classmethod
    def _find_first(cls, datasets: Iterable[Dataset], key: str, value: Any) -> DatasetMatch | None:
        datasets = list(datasets)
        exact = cls._filter_exact(datasets, key, value)
        if exact:
            return DatasetMatch(exact[0], key, "exact")
        normalized = cls._filter_normalized(datasets, key, value)
        if normalized:
            return DatasetMatch(normalized[0], key, "normalized")
        return None

    @classmethod
    def _find_all(cls, datasets: list[Dataset], key: str, value: Any) -> list[Dataset]:
        return cls._filter_exact(datasets, key, value) or cls._filter_normalized(datasets, key, value)

    @staticmethod
    def _filter_exact(datasets: list[Dataset], key: str, value: Any) -> list[Dataset]:
        wanted = set(to_list(value))
        return [dataset for dataset in datasets if wanted.intersection(dataset.get_field(key))]

    @staticmethod
    def _filter_normalized(datasets: list[Dataset], key: str, value: Any) -> list[Dataset]:
        # Both sides are normalized: the provided values and each candidate's own field values
        wanted = set(normalize_text_list(to_list(value)))
        return [
            dataset for dataset in datasets if wanted.intersection(normalize_text_list(dataset.get_field(key)))
        ]
