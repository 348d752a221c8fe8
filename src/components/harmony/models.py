"""
Harmony checker input/output models and tunables.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from src.domain.entities import Reference, SectionMapping

IssueType = Literal[
    "color_clash",
    "typography_mismatch",
    "spacing_inconsistent",
    "insufficient_data",
]
Severity = Literal["low", "medium", "high"]


# --- Configuration ---


@dataclass(frozen=True)
class HarmonyWeights:
    """Share of each dimension in the overall score. Sums to 1.0."""

    color: float = 0.4
    typography: float = 0.35
    spacing: float = 0.25


@dataclass(frozen=True)
class HarmonyThresholds:
    """
    Score cut-offs, named after the severity assigned below them.

    A pair scoring under `high` is a high-severity problem, under `medium`
    a medium one, under `low` a low one (high < medium < low).
    """

    high: int = 60
    medium: int = 75
    low: int = 85


@dataclass(frozen=True)
class ColorTunables:
    # Weighted HSL distance (0-1) above which two palettes clash
    clash_distance: float = 0.2
    # Distance at which the pair score reaches 0
    max_distance: float = 0.5
    # Each step past clash_distance raises severity by one level
    severity_step: float = 0.1
    hue_weight: float = 0.6
    saturation_weight: float = 0.2
    lightness_weight: float = 0.2
    # Pair score when either side has no parseable colors
    neutral_score: int = 50


@dataclass(frozen=True)
class TypographyTunables:
    # Relative size deviation that halves a scale step's similarity
    scale_tolerance: float = 0.2
    font_weight: float = 0.6
    scale_weight: float = 0.4
    # Pair score below which a mismatch is reported
    mismatch_score: int = 70


@dataclass(frozen=True)
class SpacingTunables:
    # Relative deviation that halves a spacing value's similarity
    value_tolerance: float = 0.25
    # Pair score below which an inconsistency is reported
    inconsistent_score: int = 60
    # Pair score when neither side has any spacing data
    neutral_score: int = 50


@dataclass(frozen=True)
class HarmonyConfig:
    """Harmony configuration from rules."""

    default_weights: HarmonyWeights = field(default_factory=HarmonyWeights)
    thresholds: HarmonyThresholds = field(default_factory=HarmonyThresholds)
    color: ColorTunables = field(default_factory=ColorTunables)
    typography: TypographyTunables = field(default_factory=TypographyTunables)
    spacing: SpacingTunables = field(default_factory=SpacingTunables)
    # Dimension score below which a fix-up suggestion is emitted
    suggestion_score: int = 70


HARMONY_CONFIG = HarmonyConfig()


@dataclass(frozen=True)
class HarmonyCheckOptions:
    """Per-call overrides. Thresholds are 0-100, weights 0-1."""

    color_threshold: float | None = None
    typography_threshold: float | None = None
    spacing_threshold: float | None = None
    color_weight: float | None = None
    typography_weight: float | None = None
    spacing_weight: float | None = None


# --- Input Models ---


@dataclass(frozen=True)
class HarmonyCheckInput:
    """Input for a harmony calculation."""

    references: list[Reference]
    section_mapping: SectionMapping | None = None
    options: HarmonyCheckOptions | None = None


# --- Output Models ---


@dataclass(frozen=True)
class HarmonyIssue:
    """One flagged incompatibility."""

    type: IssueType
    severity: Severity
    description: str
    affected_sections: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "severity": self.severity,
            "description": self.description,
            "affectedSections": list(self.affected_sections),
        }


@dataclass(frozen=True)
class HarmonyBreakdown:
    color: int
    typography: int
    spacing: int
    overall: int

    def to_dict(self) -> dict[str, int]:
        return {
            "color": self.color,
            "typography": self.typography,
            "spacing": self.spacing,
            "overall": self.overall,
        }


@dataclass(frozen=True)
class DetailedHarmonyResult:
    """Complete harmony analysis. score always equals breakdown.overall."""

    score: int
    breakdown: HarmonyBreakdown
    issues: list[HarmonyIssue] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)
    references_analyzed: list[str] = field(default_factory=list)
    sections_analyzed: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "breakdown": self.breakdown.to_dict(),
            "issues": [issue.to_dict() for issue in self.issues],
            "suggestions": list(self.suggestions),
            "referencesAnalyzed": list(self.references_analyzed),
            "sectionsAnalyzed": list(self.sections_analyzed),
        }
