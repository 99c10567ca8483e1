"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of IndexSmith, licensed under the MIT License.
See LICENSE file for details.
"""

"""
Build entity descriptors from SQLAlchemy schema metadata.

Tables can come from declarative models or from reflecting a live database.
Explicit index markers are read from the ``info`` dictionaries SQLAlchemy
already carries on columns and tables:

    Column("email", String(120), info={"auto_index": {"is_unique": True}})
    Column("notes", String(200), info={"no_auto_index": True})
    Table("orders", metadata, ...,
          info={"composite_auto_indexes": [
              {"property_names": ["customer_id", "placed_on"], "index_name": "ix_recent"},
          ]})

``Table.info["owned"] = True`` keeps a table out of the analysis.
"""

from typing import Any

from sqlalchemy import (
    BigInteger,
    Boolean,
    Date,
    DateTime,
    Double,
    Enum,
    Float,
    Integer,
    Interval,
    LargeBinary,
    MetaData,
    Numeric,
    SmallInteger,
    String,
    Table,
    Time,
    Uuid,
    create_engine,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.types import TypeEngine

from indexsmith.core.logging import get_logger
from indexsmith.exceptions import SchemaReflectionError
from indexsmith.schema import (
    AutoIndexMarker,
    CompositeIndexDeclaration,
    EntityDescriptor,
    PropertyDescriptor,
    PropertyType,
)

logger = get_logger(__name__)

AUTO_INDEX_KEY = "auto_index"
NO_AUTO_INDEX_KEY = "no_auto_index"
COMPOSITE_AUTO_INDEXES_KEY = "composite_auto_indexes"
OWNED_KEY = "owned"

# Subclasses come before their bases (Enum is a String, Double a Float, Float a Numeric)
_TYPE_MAP: tuple[tuple[type[TypeEngine], PropertyType], ...] = (
    (Boolean, PropertyType.BOOLEAN),
    (Enum, PropertyType.ENUM),
    (BigInteger, PropertyType.INT64),
    (SmallInteger, PropertyType.INT16),
    (Integer, PropertyType.INT32),
    (Double, PropertyType.DOUBLE),
    (Float, PropertyType.FLOAT),
    (Numeric, PropertyType.DECIMAL),
    (Date, PropertyType.DATE),
    (Time, PropertyType.TIME),
    (Interval, PropertyType.DURATION),
    (Uuid, PropertyType.UUID),
    (String, PropertyType.STRING),
    (LargeBinary, PropertyType.BINARY),
)


def map_column_type(column_type: TypeEngine) -> PropertyType:
    """Map a SQLAlchemy column type onto a PropertyType."""
    if isinstance(column_type, DateTime):
        return PropertyType.DATETIME_OFFSET if column_type.timezone else PropertyType.DATETIME

    for sa_type, property_type in _TYPE_MAP:
        if isinstance(column_type, sa_type):
            return property_type

    return PropertyType.OTHER


def _auto_index_marker(value: Any) -> AutoIndexMarker | None:
    if not value:
        return None
    if isinstance(value, AutoIndexMarker):
        return value
    if isinstance(value, dict):
        return AutoIndexMarker(
            index_name=value.get("index_name"),
            is_unique=bool(value.get("is_unique", False)),
        )
    return AutoIndexMarker()


def _composite_declarations(values: Any) -> tuple[CompositeIndexDeclaration, ...]:
    declarations = []
    for value in values or ():
        if isinstance(value, CompositeIndexDeclaration):
            declarations.append(value)
        else:
            declarations.append(
                CompositeIndexDeclaration(
                    property_names=tuple(value["property_names"]),
                    index_name=value.get("index_name"),
                    is_unique=bool(value.get("is_unique", False)),
                ),
            )
    return tuple(declarations)


def describe_table(table: Table, name: str | None = None) -> EntityDescriptor:
    """
    Build an entity descriptor for one table.

    Property names are the column keys; storage names are the column names.

    Args:
        table: The SQLAlchemy table
        name: Optional entity name (defaults to the table name)

    Returns:
        An immutable snapshot of the table

    """
    fk_column_keys = {fk.parent.key for fk in table.foreign_keys}

    properties = []
    for column in table.columns:
        property_type = map_column_type(column.type)
        max_length = getattr(column.type, "length", None) if property_type is PropertyType.STRING else None
        properties.append(
            PropertyDescriptor(
                name=column.key,
                column_name=column.name,
                property_type=property_type,
                nullable=bool(column.nullable),
                max_length=max_length,
                is_primary_key=column.primary_key,
                is_foreign_key=column.key in fk_column_keys,
                auto_index=_auto_index_marker(column.info.get(AUTO_INDEX_KEY)),
                no_auto_index=bool(column.info.get(NO_AUTO_INDEX_KEY, False)),
            ),
        )

    foreign_keys = tuple(
        tuple(element.parent.key for element in constraint.elements)
        for constraint in table.foreign_key_constraints
    )
    existing_indexes = tuple(
        tuple(column.key for column in index.columns)
        for index in table.indexes
    )

    return EntityDescriptor(
        name=name or table.name,
        table_name=table.name,
        properties=tuple(properties),
        foreign_keys=foreign_keys,
        existing_indexes=existing_indexes,
        composite_indexes=_composite_declarations(table.info.get(COMPOSITE_AUTO_INDEXES_KEY)),
        is_owned=bool(table.info.get(OWNED_KEY, False)),
        has_primary_key=len(table.primary_key.columns) > 0,
    )


def describe_metadata(metadata: MetaData) -> list[EntityDescriptor]:
    """Build descriptors for every table in dependency order."""
    return [describe_table(table) for table in metadata.sorted_tables]


def reflect_database(engine_or_url: Engine | str) -> tuple[MetaData, list[EntityDescriptor]]:
    """
    Reflect a database and describe its tables.

    Args:
        engine_or_url: SQLAlchemy engine or connection URL

    Returns:
        The reflected metadata and one descriptor per table

    Raises:
        SchemaReflectionError: If the database cannot be reflected

    """
    metadata = MetaData()
    try:
        engine = create_engine(engine_or_url) if isinstance(engine_or_url, str) else engine_or_url
        metadata.reflect(bind=engine)
    except SQLAlchemyError as e:
        raise SchemaReflectionError(f"Failed to reflect database schema: {e!s}") from e

    logger.debug(f"Reflected {len(metadata.tables)} tables from {engine.dialect.name}")
    return metadata, describe_metadata(metadata)
