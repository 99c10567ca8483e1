"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of IndexSmith, licensed under the MIT License.
See LICENSE file for details.
"""

"""
Diagnostics for index decisions.

Every candidate that goes through the applier ends up as one
:class:`AutoIndexDecision`. Decisions are always recorded; they are only written
to the log when diagnostics are enabled in the configuration.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from indexsmith.core.config import AutoIndexConfig
from indexsmith.core.logging import context_extra, get_logger
from indexsmith.exceptions import ConfigurationError
from indexsmith.index_candidate import IndexCandidate, IndexCandidateSource
from indexsmith.index_score import IndexScore

LOG_PREFIX = "[IndexSmith]"


@dataclass(frozen=True)
class AutoIndexDecision:
    """A decision made about whether to create an index."""

    entity_name: str
    table_name: str
    property_names: tuple[str, ...]
    column_names: tuple[str, ...]
    index_name: str
    was_created: bool
    score: IndexScore = field(compare=False)
    threshold: int
    source: IndexCandidateSource
    detail: str | None = None

    @property
    def reason(self) -> str:
        """Why the index was created or skipped."""
        total = self.score.total_score
        if self.was_created:
            if self.source.is_explicit:
                return f"Explicitly requested ({self.source.value}), score {total}"
            return f"Score {total} >= threshold {self.threshold}"
        if self.detail:
            return self.detail
        return f"Score {total} < threshold {self.threshold}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "entity_name": self.entity_name,
            "table_name": self.table_name,
            "property_names": list(self.property_names),
            "column_names": list(self.column_names),
            "index_name": self.index_name,
            "was_created": self.was_created,
            "threshold": self.threshold,
            "source": self.source.value,
            "reason": self.reason,
            "score": self.score.to_dict(),
        }

    def __str__(self) -> str:
        columns = ", ".join(self.column_names)
        status = "CREATED" if self.was_created else "SKIPPED"
        return f"{LOG_PREFIX} {self.table_name}({columns}) - {status}\n  {self.score}\n  Source: {self.source.value}"


class AutoIndexLogger:
    """Records index decisions and, when diagnostics are enabled, logs them."""

    def __init__(self, config: AutoIndexConfig, logger: logging.Logger | None = None):
        if config is None:
            raise ConfigurationError("An AutoIndexConfig is required to record index decisions")
        self.config = config
        self.logger = logger or get_logger("indexsmith.diagnostics")
        self._decisions: list[AutoIndexDecision] = []

    @property
    def decisions(self) -> tuple[AutoIndexDecision, ...]:
        return tuple(self._decisions)

    @property
    def created(self) -> list[AutoIndexDecision]:
        return [d for d in self._decisions if d.was_created]

    @property
    def skipped(self) -> list[AutoIndexDecision]:
        return [d for d in self._decisions if not d.was_created]

    @property
    def _enabled(self) -> bool:
        return self.config.enable_diagnostics and self.logger is not None

    def log_decision(
        self, candidate: IndexCandidate, was_created: bool, detail: str | None = None,
    ) -> AutoIndexDecision:
        """
        Record whether a candidate was turned into an index.

        Args:
            candidate: The candidate that was considered
            was_created: Whether the index was created
            detail: Optional explanation for a skipped candidate

        Returns:
            The recorded decision

        """
        decision = AutoIndexDecision(
            entity_name=candidate.entity.name,
            table_name=candidate.entity.storage_name,
            property_names=tuple(candidate.property_names),
            column_names=tuple(candidate.column_names),
            index_name=candidate.index_name,
            was_created=was_created,
            score=candidate.score,
            threshold=self.config.score_threshold,
            source=candidate.source,
            detail=detail,
        )
        self._decisions.append(decision)

        if self._enabled:
            extra = context_extra({"index_name": decision.index_name, "reason": decision.reason})
            if was_created:
                self.logger.info(str(decision), extra=extra)
            else:
                self.logger.debug(str(decision), extra=extra)

        return decision

    def log_skip(self, candidate: IndexCandidate, error: str) -> None:
        """Log a candidate that failed capacity validation."""
        if self._enabled:
            self.logger.warning(
                f"{LOG_PREFIX} Skipping index {candidate.index_name}: {error}",
                extra=context_extra({"entity": candidate.entity.name}),
            )

    def log_error(self, message: str, exception: BaseException | None = None) -> None:
        """Log an error that occurred during indexing."""
        if self._enabled:
            self.logger.error(f"{LOG_PREFIX} Error: {message}", exc_info=exception)

    def get_summary(self) -> str:
        created = len(self.created)
        skipped = len(self.skipped)
        return f"{LOG_PREFIX} Summary: {created} indexes created, {skipped} candidates skipped"

    def to_report(self) -> dict[str, Any]:
        """Build a JSON-serializable report of every decision."""
        return {
            "threshold": self.config.score_threshold,
            "created_count": len(self.created),
            "skipped_count": len(self.skipped),
            "summary": self.get_summary(),
            "decisions": [d.to_dict() for d in self._decisions],
        }
