"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of IndexSmith, licensed under the MIT License.
See LICENSE file for details.
"""

"""
Engine that evaluates entity properties and produces index candidates.

Candidates come from four places, in this order:

1. composite index declarations on the entity (always kept),
2. properties carrying an explicit auto-index marker (always kept),
3. the remaining non-key properties, scored by every rule,
4. entity-level composite detection by the rules.

Heuristic candidates are kept only when they reach the score threshold. The
engine does not deduplicate; checking for existing indexes belongs to whoever
applies the candidates.
"""

from collections.abc import Sequence

from indexsmith.core.config import AutoIndexConfig
from indexsmith.core.logging import context_extra, get_logger
from indexsmith.exceptions import ConfigurationError
from indexsmith.heuristic_rules import IndexHeuristicRule, get_default_rules
from indexsmith.index_candidate import IndexCandidate, IndexCandidateSource
from indexsmith.index_score import IndexScore
from indexsmith.schema import EntityDescriptor

logger = get_logger(__name__)

EXPLICIT_ATTRIBUTE_RULE = "ExplicitAttribute"
EXPLICIT_ATTRIBUTE_POINTS = 100


class HeuristicEngine:
    """
    Scores the properties of an entity and returns qualifying index candidates.

    The engine keeps no state between calls, so one instance can analyze
    entities from several threads as long as the configuration and rules are
    left untouched.
    """

    def __init__(
        self,
        config: AutoIndexConfig,
        rules: Sequence[IndexHeuristicRule] | None = None,
    ):
        """
        Initialize the engine.

        Args:
            config: Scoring configuration (required)
            rules: Rules to evaluate, in order. Defaults to get_default_rules()

        Raises:
            ConfigurationError: If no configuration is given

        """
        if config is None:
            raise ConfigurationError("An AutoIndexConfig is required to build a HeuristicEngine")
        self.config = config
        self.rules: tuple[IndexHeuristicRule, ...] = tuple(
            get_default_rules() if rules is None else rules,
        )

    def analyze_entity(self, entity: EntityDescriptor) -> list[IndexCandidate]:
        """
        Analyze an entity and return all qualifying index candidates.

        Args:
            entity: Snapshot of the entity to analyze

        Returns:
            Candidates in generation order

        """
        candidates: list[IndexCandidate] = []
        candidates.extend(self._composite_attribute_candidates(entity))
        candidates.extend(self._explicit_attribute_candidates(entity))
        candidates.extend(self._heuristic_candidates(entity))
        candidates.extend(self._composite_heuristic_candidates(entity))

        threshold = self.config.score_threshold
        accepted = [
            c for c in candidates
            if c.source.is_explicit or c.score.meets_threshold(threshold)
        ]

        if self.config.enable_diagnostics:
            logger.debug(
                f"Analyzed {entity.name}: {len(accepted)} of {len(candidates)} candidates "
                f"meet threshold {threshold}",
                extra=context_extra({"entity": entity.name, "table": entity.storage_name}),
            )

        return accepted

    def _composite_attribute_candidates(self, entity: EntityDescriptor) -> list[IndexCandidate]:
        candidates = []
        for declaration in entity.composite_indexes:
            properties = [entity.find_property(name) for name in declaration.property_names]

            # Partial composites are never emitted
            if any(p is None for p in properties):
                continue

            score = IndexScore()
            score.add_contribution(
                EXPLICIT_ATTRIBUTE_RULE, EXPLICIT_ATTRIBUTE_POINTS, "Composite index explicitly requested",
            )
            candidates.append(
                IndexCandidate(
                    entity=entity,
                    properties=tuple(properties),
                    score=score,
                    is_unique=declaration.is_unique,
                    custom_name=declaration.index_name,
                    source=IndexCandidateSource.COMPOSITE_ATTRIBUTE,
                ),
            )
        return candidates

    def _explicit_attribute_candidates(self, entity: EntityDescriptor) -> list[IndexCandidate]:
        candidates = []
        for prop in entity.properties:
            if prop.no_auto_index or prop.auto_index is None:
                continue

            score = IndexScore()
            score.add_contribution(
                EXPLICIT_ATTRIBUTE_RULE, EXPLICIT_ATTRIBUTE_POINTS, "Index explicitly requested",
            )
            candidates.append(
                IndexCandidate(
                    entity=entity,
                    properties=(prop,),
                    score=score,
                    is_unique=prop.auto_index.is_unique,
                    custom_name=prop.auto_index.index_name,
                    source=IndexCandidateSource.EXPLICIT_ATTRIBUTE,
                ),
            )
        return candidates

    def _heuristic_candidates(self, entity: EntityDescriptor) -> list[IndexCandidate]:
        candidates = []
        for prop in entity.properties:
            if prop.no_auto_index or prop.auto_index is not None:
                continue

            # Primary keys are already indexed
            if prop.is_primary_key:
                continue

            score = IndexScore()
            for rule in self.rules:
                contribution = rule.evaluate(prop, entity, self.config)
                if contribution is not None:
                    score.add_contribution(contribution.rule_name, contribution.points, contribution.reason)

            if score.total_score > 0:
                candidates.append(
                    IndexCandidate(
                        entity=entity,
                        properties=(prop,),
                        score=score,
                        source=IndexCandidateSource.HEURISTIC,
                    ),
                )
        return candidates

    def _composite_heuristic_candidates(self, entity: EntityDescriptor) -> list[IndexCandidate]:
        candidates = []
        for rule in self.rules:
            candidates.extend(rule.identify_composite_indexes(entity, self.config))
        return candidates


def analyze_entity(
    entity: EntityDescriptor,
    config: AutoIndexConfig,
    rules: Sequence[IndexHeuristicRule] | None = None,
) -> list[IndexCandidate]:
    """
    Analyze one entity with a throwaway engine.

    Args:
        entity: Snapshot of the entity to analyze
        config: Scoring configuration
        rules: Optional rule list replacing the defaults

    Returns:
        Qualifying index candidates

    """
    return HeuristicEngine(config, rules).analyze_entity(entity)
