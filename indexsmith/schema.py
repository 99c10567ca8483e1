"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of IndexSmith, licensed under the MIT License.
See LICENSE file for details.
"""

"""
Schema snapshot types consumed by the heuristic engine.

Descriptors are immutable facts about one entity (table) and its properties
(columns), built once per analysis pass by a reflection layer such as
:mod:`indexsmith.schema_reflection`. Explicit index markers are plain fields
here so the engine never has to inspect the host model itself.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum

from indexsmith.exceptions import InvalidCompositeDeclarationError


class PropertyType(str, Enum):
    """Semantic storage type of a property."""

    BOOLEAN = "boolean"
    BYTE = "byte"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT = "float"
    DOUBLE = "double"
    DECIMAL = "decimal"
    DATETIME = "datetime"
    DATETIME_OFFSET = "datetime_offset"
    DATE = "date"
    TIME = "time"
    DURATION = "duration"
    UUID = "uuid"
    STRING = "string"
    ENUM = "enum"
    BINARY = "binary"
    OTHER = "other"


@dataclass(frozen=True)
class AutoIndexMarker:
    """Forces an index on a property regardless of its heuristic score."""

    index_name: str | None = None
    is_unique: bool = False


@dataclass(frozen=True)
class CompositeIndexDeclaration:
    """Explicit request for a composite index on an entity, in key order."""

    property_names: tuple[str, ...]
    index_name: str | None = None
    is_unique: bool = False

    def __post_init__(self):
        """Normalize the property names and require at least two of them."""
        names = tuple(self.property_names or ())
        if len(names) < 2:
            raise InvalidCompositeDeclarationError(
                "Composite index requires at least two properties.",
            )
        object.__setattr__(self, "property_names", names)


@dataclass(frozen=True)
class PropertyDescriptor:
    """Column-level facts about one property."""

    name: str
    property_type: PropertyType = PropertyType.OTHER
    column_name: str | None = None
    nullable: bool = True
    max_length: int | None = None
    is_primary_key: bool = False
    is_foreign_key: bool = False
    auto_index: AutoIndexMarker | None = None
    no_auto_index: bool = False

    @property
    def storage_name(self) -> str:
        return self.column_name or self.name

    @property
    def is_string(self) -> bool:
        return self.property_type is PropertyType.STRING

    @property
    def is_enum(self) -> bool:
        return self.property_type is PropertyType.ENUM


@dataclass(frozen=True)
class EntityDescriptor:
    """
    Table-level facts about one entity.

    Attributes
    ----------
        name: Entity name
        table_name: Resolved storage name (defaults to the entity name)
        properties: Properties in declaration order
        foreign_keys: Property-name groups, one per foreign key
        existing_indexes: Property-name sequences of indexes that already exist
        composite_indexes: Explicit composite index declarations
        is_owned: Owned entities share their owner's table and are not analyzed
        has_primary_key: Keyless entities are not analyzed

    """

    name: str
    properties: tuple[PropertyDescriptor, ...] = ()
    table_name: str | None = None
    foreign_keys: tuple[tuple[str, ...], ...] = ()
    existing_indexes: tuple[tuple[str, ...], ...] = ()
    composite_indexes: tuple[CompositeIndexDeclaration, ...] = ()
    is_owned: bool = False
    has_primary_key: bool = True
    _by_name: dict[str, PropertyDescriptor] = field(
        init=False, repr=False, compare=False, hash=False,
    )

    def __post_init__(self):
        """Freeze collection fields into tuples and build the name lookup."""
        object.__setattr__(self, "properties", tuple(self.properties))
        object.__setattr__(self, "foreign_keys", tuple(tuple(fk) for fk in self.foreign_keys))
        object.__setattr__(
            self, "existing_indexes", tuple(tuple(idx) for idx in self.existing_indexes),
        )
        object.__setattr__(self, "composite_indexes", tuple(self.composite_indexes))
        object.__setattr__(self, "_by_name", {p.name: p for p in self.properties})

    @property
    def storage_name(self) -> str:
        return self.table_name or self.name

    @property
    def is_analyzable(self) -> bool:
        """Owned and keyless entities are left out of index analysis."""
        return not self.is_owned and self.has_primary_key

    def find_property(self, name: str) -> PropertyDescriptor | None:
        return self._by_name.get(name)

    def is_foreign_key_property(self, prop: PropertyDescriptor) -> bool:
        return prop.is_foreign_key or any(prop.name in fk for fk in self.foreign_keys)

    def has_index_on(self, property_names: Sequence[str]) -> bool:
        """Return True if an existing index covers exactly these properties, in order."""
        wanted = tuple(property_names)
        return any(existing == wanted for existing in self.existing_indexes)

    def with_existing_index(self, property_names: Iterable[str]) -> "EntityDescriptor":
        """Return a copy of this snapshot that also records the given index."""
        return EntityDescriptor(
            name=self.name,
            properties=self.properties,
            table_name=self.table_name,
            foreign_keys=self.foreign_keys,
            existing_indexes=(*self.existing_indexes, tuple(property_names)),
            composite_indexes=self.composite_indexes,
            is_owned=self.is_owned,
            has_primary_key=self.has_primary_key,
        )
