"""Organism name lookup used to enrich entity references."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

import yaml

from ..utils import EntityReference, text_is_not_empty
from .catalog import Dataset
from .normalizer.cleaners import normalize_text

ORGANISMS_FILE = Path(__file__).with_name("organisms.yaml")


@dataclass(frozen=True)
class Organism:
    latin: str
    english: str


class BaseOrganismLookup(ABC):

    @abstractmethod
    def normalize(self, name: str) -> Organism | None:
        """
        Look up an organism by any of its names.

        Args:
            name: Latin or English organism name (case/whitespace-insensitive)

        Returns:
            Matching Organism, or None if the name is not recognized
        """
        pass

    def get_by_entity_reference(self, reference: EntityReference, dataset: Dataset | None = None) -> Organism | None:
        """
        Determine the organism of an entity reference.

        Uses the reference's own organism field first, then the organism of its dataset
        (for single-organism datasets).

        Args:
            reference: Entity reference
            dataset: The reference's resolved dataset, if known

        Returns:
            Organism, or None if it cannot be determined
        """
        for candidate in (reference.get("organism"), dataset.organism if dataset else None):
            if text_is_not_empty(candidate):
                organism = self.normalize(candidate)
                if organism:
                    return organism
                logging.warning(f"Organism '{candidate}' is not recognized")
        return None


class YamlOrganismLookup(BaseOrganismLookup):
    """Organism lookup backed by the bundled organisms.yaml table."""

    def __init__(self, path: Path | None = None):
        self.path = path if path else ORGANISMS_FILE
        with open(self.path) as organisms_file:
            entries = yaml.safe_load(organisms_file) or []

        self.organisms = [Organism(latin=entry["latin"], english=entry["english"]) for entry in entries]
        self._name_to_organism: dict[str, Organism] = dict()
        for entry, organism in zip(entries, self.organisms):
            for name in [entry["latin"], entry["english"], *entry.get("aliases", [])]:
                self._name_to_organism.setdefault(normalize_text(name), organism)
        logging.debug(f"Loaded {len(self.organisms)} organisms from {self.path}")

    def normalize(self, name: str) -> Organism | None:
        """Implements BaseOrganismLookup.normalize"""
        return self._name_to_organism.get(normalize_text(name))
