"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of IndexSmith, licensed under the MIT License.
See LICENSE file for details.
"""

"""Index candidates proposed by the heuristic engine."""

from dataclasses import dataclass, field
from enum import Enum

from indexsmith.index_score import IndexScore
from indexsmith.schema import EntityDescriptor, PropertyDescriptor


class IndexCandidateSource(str, Enum):
    """The source that suggested an index candidate."""

    HEURISTIC = "heuristic"
    EXPLICIT_ATTRIBUTE = "explicit-attribute"
    COMPOSITE_ATTRIBUTE = "composite-attribute"

    @property
    def is_explicit(self) -> bool:
        """Explicitly requested candidates bypass the score threshold."""
        return self in (IndexCandidateSource.EXPLICIT_ATTRIBUTE, IndexCandidateSource.COMPOSITE_ATTRIBUTE)


@dataclass
class IndexCandidate:
    """A proposed index, with properties in key-column order."""

    entity: EntityDescriptor
    properties: tuple[PropertyDescriptor, ...]
    score: IndexScore = field(default_factory=IndexScore)
    is_unique: bool = False
    custom_name: str | None = None
    source: IndexCandidateSource = IndexCandidateSource.HEURISTIC

    def __post_init__(self):
        """Freeze the property list and reject empty candidates."""
        self.properties = tuple(self.properties)
        if not self.properties:
            raise ValueError("An index candidate needs at least one property")

    @property
    def is_composite(self) -> bool:
        return len(self.properties) > 1

    @property
    def property_names(self) -> list[str]:
        return [p.name for p in self.properties]

    @property
    def column_names(self) -> list[str]:
        return [p.storage_name for p in self.properties]

    @property
    def index_name(self) -> str:
        """The custom name, or ``IX_<table>_<col1>_<col2>...`` in key order."""
        if self.custom_name:
            return self.custom_name
        return f"IX_{self.entity.storage_name}_{'_'.join(self.column_names)}"

    def __repr__(self) -> str:
        return (
            f"IndexCandidate({self.index_name!r}, source={self.source.value}, "
            f"score={self.score.total_score})"
        )
