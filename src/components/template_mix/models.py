"""
Template mix input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from src.components.harmony import DetailedHarmonyResult, HarmonyCheckOptions
from src.components.token_merger import MergeOptions
from src.domain.entities import DesignSystem, Reference, SectionMapping, TokenCategory

TemplatePhase = Literal["selecting_primary", "merging_tokens", "checking_harmony"]


# --- Input Models ---


@dataclass(frozen=True)
class PrepareTemplateInput:
    """Everything needed to turn a section mapping into one token set."""

    references: list[Reference]
    section_mapping: SectionMapping
    # Reference id or index whose tokens form the base
    primary_token_source: str | None = None
    # Token category -> reference id supplying that whole category
    category_sources: dict[TokenCategory, str] = field(default_factory=dict)
    skip_harmony_check: bool = False
    # Advisory only: a lower score adds a recoverable error
    min_harmony_score: float | None = None
    harmony_options: HarmonyCheckOptions | None = None
    merge_options: MergeOptions | None = None


# --- Output Models ---


@dataclass(frozen=True)
class TemplateError:
    """A failure in one phase of template preparation."""

    phase: TemplatePhase
    message: str
    recoverable: bool = False


@dataclass(frozen=True)
class PrepareTemplateOutput:
    """Merged tokens plus harmony feedback for a template."""

    design_system: DesignSystem | None
    harmony: DetailedHarmonyResult | None = None
    primary_reference_id: str | None = None
    merge_warnings: list[str] = field(default_factory=list)
    errors: list[TemplateError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.design_system is not None and not any(
            not error.recoverable for error in self.errors
        )
