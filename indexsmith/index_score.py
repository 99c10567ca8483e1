"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of IndexSmith, licensed under the MIT License.
See LICENSE file for details.
"""

"""Score model for index candidates."""

from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(frozen=True)
class ScoreContribution:
    """A single signed contribution to an index score."""

    rule_name: str
    points: int
    reason: str | None = None


class IndexScore:
    """
    Calculated score for an index candidate.

    Contributions are kept in the order they were added. Adding the same rule
    twice counts it twice. The total is always computed from the contribution
    list.
    """

    def __init__(self, contributions: list[ScoreContribution] | None = None) -> None:
        self._contributions: list[ScoreContribution] = list(contributions or [])

    @property
    def contributions(self) -> tuple[ScoreContribution, ...]:
        return tuple(self._contributions)

    @property
    def total_score(self) -> int:
        return sum(c.points for c in self._contributions)

    @property
    def rule_names(self) -> list[str]:
        return [c.rule_name for c in self._contributions]

    def add_contribution(self, rule_name: str, points: int, reason: str | None = None) -> None:
        """Add a score contribution from a rule."""
        self._contributions.append(ScoreContribution(rule_name, points, reason))

    def meets_threshold(self, threshold: int) -> bool:
        """Return True if the total score meets or exceeds the threshold."""
        return self.total_score >= threshold

    def to_dict(self) -> dict:
        return {
            "total_score": self.total_score,
            "contributions": [
                {"rule_name": c.rule_name, "points": c.points, "reason": c.reason}
                for c in self._contributions
            ],
        }

    def __iter__(self) -> Iterator[ScoreContribution]:
        return iter(self._contributions)

    def __len__(self) -> int:
        return len(self._contributions)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IndexScore):
            return NotImplemented
        return self._contributions == other._contributions

    __hash__ = None

    def __repr__(self) -> str:
        return f"IndexScore({self._contributions!r})"

    def __str__(self) -> str:
        rules = ", ".join(
            f"{c.rule_name}({c.points:+d})" if c.points else f"{c.rule_name}(0)"
            for c in self._contributions
        )
        return f"Score: {self.total_score} | Rules: {rules}"
