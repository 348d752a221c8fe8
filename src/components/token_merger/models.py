"""
Token merger input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from src.domain.entities import DesignSystem, MergeStrategy, Reference

# --- Configuration ---

DEFAULT_SUPPORTED_PATHS: dict[str, tuple[str, ...]] = {
    "colors": ("primary", "secondary", "neutral", "semantic", "palettes"),
    "typography": ("fonts", "scale", "weights", "lineHeights"),
    "spacing": ("baseUnit", "scale", "containerMaxWidth", "sectionPadding"),
    "effects": ("shadows", "radii", "transitions"),
}


@dataclass(frozen=True)
class MergerConfig:
    """Merger configuration from rules."""

    default_version: int = 1
    supported_paths: dict[str, tuple[str, ...]] = field(
        default_factory=lambda: dict(DEFAULT_SUPPORTED_PATHS)
    )


MERGER_CONFIG = MergerConfig()


@dataclass(frozen=True)
class MergeOptions:
    """Per-call merge behavior."""

    strict: bool = False
    # ISO timestamp for meta.extractedAt; current UTC time when omitted
    timestamp: str | None = None
    # A bare category path ("colors") replaces the whole category
    allow_partial_paths: bool = True


# --- Errors ---


class TokenMergeError(ValueError):
    """Raised when a merge cannot produce a design system."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        self.errors = errors if errors is not None else [message]
        super().__init__(message)


# --- Input Models ---


@dataclass(frozen=True)
class MergeTokensInput:
    """All available references plus the strategy to apply to them."""

    references: list[Reference]
    strategy: MergeStrategy


# --- Output Models ---


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a merge precondition check."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class OverrideResult:
    """Outcome of applying a single override."""

    success: bool
    error: str | None = None
    changed: bool = True


@dataclass(frozen=True)
class MergeTokensResult:
    """Merged design system and the audit trail of the overrides."""

    design_system: DesignSystem
    applied_overrides: list[str] = field(default_factory=list)
    failed_overrides: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    # Applied overrides whose value was already present in the base
    unchanged_overrides: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "designSystem": self.design_system.to_tree(),
            "appliedOverrides": list(self.applied_overrides),
            "failedOverrides": list(self.failed_overrides),
            "warnings": list(self.warnings),
            "unchangedOverrides": list(self.unchanged_overrides),
        }
