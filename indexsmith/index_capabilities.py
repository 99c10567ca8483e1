"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of IndexSmith, licensed under the MIT License.
See LICENSE file for details.
"""

"""
SQL Server index capabilities and constraints.

The checks here are a conservative capacity estimate based on declared column
types and lengths. They do not emulate SQL Server exactly: an index that passes
may still be rejected by the engine (for example because of row overflow
settings), and types of unknown size are counted as zero bytes.
"""

from collections.abc import Iterable, Sequence

from indexsmith.schema import PropertyDescriptor, PropertyType

MAX_CLUSTERED_INDEX_KEY_LENGTH = 900
MAX_NONCLUSTERED_INDEX_KEY_LENGTH = 1700
MAX_KEY_COLUMNS = 16

DEFAULT_STRING_LENGTH = 450
BYTES_PER_CHARACTER = 2

_FIXED_BYTE_SIZES: dict[PropertyType, int] = {
    PropertyType.BOOLEAN: 1,
    PropertyType.BYTE: 1,
    PropertyType.INT16: 2,
    PropertyType.INT32: 4,
    PropertyType.INT64: 8,
    PropertyType.FLOAT: 4,
    PropertyType.DOUBLE: 8,
    PropertyType.DECIMAL: 17,
    PropertyType.DATETIME: 8,
    PropertyType.DATETIME_OFFSET: 10,
    PropertyType.DATE: 3,
    PropertyType.TIME: 5,
    PropertyType.DURATION: 8,
    PropertyType.UUID: 16,
    # stored as the underlying int
    PropertyType.ENUM: 4,
}

_INDEXABLE_TYPES = frozenset(_FIXED_BYTE_SIZES) | {PropertyType.STRING}

ColumnSpec = tuple[PropertyType, int | None]


def is_indexable_type(property_type: PropertyType) -> bool:
    """Return True if a column of this type can be part of an index key."""
    return property_type in _INDEXABLE_TYPES


def estimate_column_byte_size(property_type: PropertyType, max_length: int | None = None) -> int:
    """
    Estimate the key bytes a column of this type occupies.

    Strings are counted as nvarchar, two bytes per character, using 450
    characters when no length is declared. Unknown types count as 0.
    """
    if property_type is PropertyType.STRING:
        return (max_length or DEFAULT_STRING_LENGTH) * BYTES_PER_CHARACTER
    return _FIXED_BYTE_SIZES.get(property_type, 0)


def columns_for(properties: Iterable[PropertyDescriptor]) -> list[ColumnSpec]:
    """Build validator input from property descriptors."""
    return [(p.property_type, p.max_length) for p in properties]


def validate_index_key(
    columns: Sequence[ColumnSpec],
    is_clustered: bool = False,
) -> tuple[bool, str | None]:
    """
    Validate whether a set of columns can form an index key.

    Args:
        columns: (type, max_length) pairs in key order
        is_clustered: Whether to apply the clustered key length limit

    Returns:
        (True, None) when the key fits, otherwise (False, reason)

    """
    column_list = list(columns)

    if len(column_list) > MAX_KEY_COLUMNS:
        return False, f"Index exceeds maximum of {MAX_KEY_COLUMNS} key columns"

    total_byte_size = sum(
        estimate_column_byte_size(property_type, max_length)
        for property_type, max_length in column_list
    )
    max_key_length = MAX_CLUSTERED_INDEX_KEY_LENGTH if is_clustered else MAX_NONCLUSTERED_INDEX_KEY_LENGTH

    if total_byte_size > max_key_length:
        return False, f"Index key size ({total_byte_size} bytes) exceeds maximum ({max_key_length} bytes)"

    return True, None
