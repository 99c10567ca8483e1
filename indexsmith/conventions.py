"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of IndexSmith, licensed under the MIT License.
See LICENSE file for details.
"""

"""
Apply automatic indexes to SQLAlchemy metadata.

The convention runs the heuristic engine over every table of a ``MetaData``
object and attaches an ``Index`` for each candidate that passes capacity
validation and is not already indexed. Only the in-memory schema is changed;
emitting DDL or migrations is left to the caller (``metadata.create_all`` or a
migration tool).
"""

from collections.abc import Sequence

from sqlalchemy import Index, MetaData, Table

from indexsmith.core.config import AutoIndexConfig
from indexsmith.core.logging import ErrorTracker, correlation_id, get_logger
from indexsmith.diagnostics import AutoIndexLogger
from indexsmith.exceptions import ConfigurationError
from indexsmith.heuristic_engine import HeuristicEngine
from indexsmith.heuristic_rules import IndexHeuristicRule
from indexsmith.index_candidate import IndexCandidate
from indexsmith.index_capabilities import columns_for, validate_index_key
from indexsmith.schema import EntityDescriptor
from indexsmith.schema_reflection import describe_table

logger = get_logger(__name__)

DUPLICATE_INDEX_DETAIL = "An index on these columns already exists"


class AutoIndexConvention:
    """Adds heuristic and explicitly requested indexes to SQLAlchemy tables."""

    def __init__(
        self,
        config: AutoIndexConfig,
        rules: Sequence[IndexHeuristicRule] | None = None,
        diagnostic_logger: AutoIndexLogger | None = None,
    ):
        if config is None:
            raise ConfigurationError("An AutoIndexConfig is required to apply automatic indexes")
        self.config = config
        self.engine = HeuristicEngine(config, rules)
        self.diagnostics = diagnostic_logger or AutoIndexLogger(config)
        self.error_tracker = ErrorTracker(logger)

    def apply(self, metadata: MetaData) -> AutoIndexLogger:
        """
        Analyze every table in the metadata and attach the qualifying indexes.

        A failure on one table is logged and tracked; the remaining tables are
        still processed.

        Args:
            metadata: The schema to extend

        Returns:
            The diagnostic logger holding every decision of this run

        """
        with correlation_id():
            for table in metadata.sorted_tables:
                with self.error_tracker.track_errors(context={"table": table.name}, reraise=False):
                    try:
                        entity = describe_table(table)
                        if entity.is_analyzable:
                            self.apply_to_table(table, entity)
                    except Exception as e:
                        self.diagnostics.log_error(f"Error processing table {table.name}", e)
                        raise

            if self.config.enable_diagnostics:
                logger.info(self.diagnostics.get_summary())

        return self.diagnostics

    def apply_to_table(self, table: Table, entity: EntityDescriptor | None = None) -> list[Index]:
        """
        Analyze one table and attach the qualifying indexes.

        Args:
            table: The table to extend
            entity: Descriptor of the table; built from the table when omitted

        Returns:
            The indexes that were created

        """
        entity = entity or describe_table(table)
        created = []
        for candidate in self.engine.analyze_entity(entity):
            index = self._try_create_index(table, entity, candidate)
            if index is not None:
                created.append(index)
                # Later candidates of this run must see the new index as existing
                entity = entity.with_existing_index(candidate.property_names)
        return created

    def _try_create_index(
        self, table: Table, entity: EntityDescriptor, candidate: IndexCandidate,
    ) -> Index | None:
        is_valid, error = validate_index_key(columns_for(candidate.properties))
        if not is_valid:
            self.diagnostics.log_skip(candidate, error)
            self.diagnostics.log_decision(candidate, False, detail=error)
            return None

        if entity.has_index_on(candidate.property_names):
            self.diagnostics.log_decision(candidate, False, detail=DUPLICATE_INDEX_DETAIL)
            return None

        columns = [table.c[name] for name in candidate.property_names]
        index = Index(candidate.index_name, *columns, unique=candidate.is_unique)

        self.diagnostics.log_decision(candidate, True)
        return index


def apply_auto_indexes(
    metadata: MetaData,
    config: AutoIndexConfig | None = None,
    rules: Sequence[IndexHeuristicRule] | None = None,
) -> AutoIndexLogger:
    """
    Attach automatic indexes to every table in the metadata.

    Args:
        metadata: The schema to extend
        config: Scoring configuration. Defaults to AutoIndexConfig()
        rules: Optional rule list replacing the defaults

    Returns:
        The diagnostic logger holding every decision

    """
    return AutoIndexConvention(config or AutoIndexConfig(), rules).apply(metadata)
