"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of IndexSmith, licensed under the MIT License.
See LICENSE file for details.
"""

"""
Heuristic rules that score entity properties for indexing.

Each rule inspects one property against the configuration and returns at most
one score contribution. Rules may also propose composite candidates for a whole
entity; such candidates carry a fixed score and are never produced by
re-running the single-property rules.

Points used by the default rules:

    Exclusion   -100  audit columns and unbounded/over-long strings
    ForeignKey   +40
    TenantId     +40  plus TenantId + soft delete composite (80)
    SoftDelete   +30
    EnumState    +25

The exclusion penalty outweighs every realistic combination of positive
rules, so an excluded property never reaches a usable threshold.
"""

from abc import ABC, abstractmethod

from indexsmith.core.config import AutoIndexConfig
from indexsmith.index_candidate import IndexCandidate, IndexCandidateSource
from indexsmith.index_score import IndexScore, ScoreContribution
from indexsmith.schema import EntityDescriptor, PropertyDescriptor

EXCLUSION_PENALTY = -100
FOREIGN_KEY_POINTS = 40
TENANT_ID_POINTS = 40
SOFT_DELETE_POINTS = 30
ENUM_STATE_POINTS = 25
COMPOSITE_BONUS_POINTS = 10

STATE_NAME_SUFFIXES = ("status", "state", "type")


class IndexHeuristicRule(ABC):
    """Base class for heuristic rules that evaluate properties for indexing."""

    rule_name: str = ""

    @abstractmethod
    def evaluate(
        self,
        prop: PropertyDescriptor,
        entity: EntityDescriptor,
        config: AutoIndexConfig,
    ) -> ScoreContribution | None:
        """
        Evaluate whether this rule applies to the given property.

        Args:
        ----
            prop: The property to evaluate
            entity: The entity containing the property
            config: The current configuration

        Returns:
        -------
            A score contribution, or None if the rule doesn't apply

        """

    def identify_composite_indexes(
        self,
        entity: EntityDescriptor,
        config: AutoIndexConfig,
    ) -> list[IndexCandidate]:
        """Identify composite index candidates for the whole entity."""
        return []

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class ExclusionHeuristicRule(IndexHeuristicRule):
    """Penalizes properties that should not be indexed."""

    rule_name = "Exclusion"

    def evaluate(self, prop, entity, config):
        if config.is_excluded_name(prop.name):
            return ScoreContribution(self.rule_name, EXCLUSION_PENALTY, "Property matches exclusion pattern")

        # Unbounded or long strings make poor (or impossible) index keys
        if prop.is_string and (
            prop.max_length is None or prop.max_length > config.max_indexable_string_length
        ):
            return ScoreContribution(
                self.rule_name, EXCLUSION_PENALTY, "String property exceeds maximum indexable length",
            )

        return None


class ForeignKeyHeuristicRule(IndexHeuristicRule):
    """Scores foreign key properties."""

    rule_name = "ForeignKey"

    def evaluate(self, prop, entity, config):
        if not config.enable_foreign_key_indexes:
            return None

        if entity.is_foreign_key_property(prop):
            return ScoreContribution(self.rule_name, FOREIGN_KEY_POINTS, "Property is a foreign key")

        return None


class SoftDeleteHeuristicRule(IndexHeuristicRule):
    """Scores soft delete indicator properties."""

    rule_name = "SoftDelete"

    def evaluate(self, prop, entity, config):
        if not config.enable_soft_delete_indexes:
            return None

        if config.is_soft_delete_name(prop.name):
            return ScoreContribution(self.rule_name, SOFT_DELETE_POINTS, "Property is a soft delete indicator")

        return None


class EnumStateHeuristicRule(IndexHeuristicRule):
    """Scores enum properties and properties named like state columns."""

    rule_name = "EnumState"

    def evaluate(self, prop, entity, config):
        if not config.enable_enum_indexes:
            return None

        if prop.is_enum:
            return ScoreContribution(self.rule_name, ENUM_STATE_POINTS, "Property is an enum")

        if prop.name.casefold().endswith(STATE_NAME_SUFFIXES):
            return ScoreContribution(
                self.rule_name, ENUM_STATE_POINTS, "Property appears to be a state indicator",
            )

        return None


class TenantIdHeuristicRule(IndexHeuristicRule):
    """Scores tenant identifiers and proposes the tenant + soft delete composite."""

    rule_name = "TenantId"

    def evaluate(self, prop, entity, config):
        if not config.enable_tenant_indexes:
            return None

        if config.is_tenant_id_name(prop.name):
            return ScoreContribution(self.rule_name, TENANT_ID_POINTS, "Property is a tenant identifier")

        return None

    def identify_composite_indexes(self, entity, config):
        if not (
            config.enable_composite_indexes
            and config.enable_tenant_indexes
            and config.enable_soft_delete_indexes
        ):
            return []

        tenant_property = next(
            (p for p in entity.properties if config.is_tenant_id_name(p.name)), None,
        )
        if tenant_property is None:
            return []

        soft_delete_property = next(
            (p for p in entity.properties if config.is_soft_delete_name(p.name)), None,
        )
        if soft_delete_property is None:
            return []

        score = IndexScore()
        score.add_contribution("TenantId", TENANT_ID_POINTS)
        score.add_contribution("SoftDelete", SOFT_DELETE_POINTS)
        score.add_contribution("CompositeBonus", COMPOSITE_BONUS_POINTS)

        return [
            IndexCandidate(
                entity=entity,
                properties=(tenant_property, soft_delete_property),
                score=score,
                source=IndexCandidateSource.HEURISTIC,
            ),
        ]


def get_default_rules() -> tuple[IndexHeuristicRule, ...]:
    """Return the default rules, in evaluation order."""
    return (
        ExclusionHeuristicRule(),
        ForeignKeyHeuristicRule(),
        TenantIdHeuristicRule(),
        SoftDeleteHeuristicRule(),
        EnumStateHeuristicRule(),
    )
