"""
Harmony checker component - entry points for scoring reference compatibility.

Invariants:
- I1: score == breakdown.overall
- I2: Every breakdown value is within 0-100
- I3: Fewer than two usable references yields score 0, never an exception
- I4: Default weights sum to 1.0 and thresholds satisfy high < medium < low
"""

from __future__ import annotations

from src.rules.models import HarmonyRules

from ._impl import calculate_harmony
from .models import (
    HARMONY_CONFIG,
    ColorTunables,
    DetailedHarmonyResult,
    HarmonyCheckInput,
    HarmonyConfig,
    HarmonyThresholds,
    HarmonyWeights,
    SpacingTunables,
    TypographyTunables,
)


def build_config(rules: HarmonyRules | None) -> HarmonyConfig:
    """Build harmony config from the rules file section."""
    if rules is None:
        return HARMONY_CONFIG

    return HarmonyConfig(
        default_weights=HarmonyWeights(**rules.weights.model_dump()),
        thresholds=HarmonyThresholds(**rules.thresholds.model_dump()),
        color=ColorTunables(**rules.color.model_dump()),
        typography=TypographyTunables(**rules.typography.model_dump()),
        spacing=SpacingTunables(**rules.spacing.model_dump()),
        suggestion_score=rules.suggestion_score,
    )


def run(
    inp: HarmonyCheckInput,
    *,
    rules: HarmonyRules | None = None,
) -> DetailedHarmonyResult:
    """
    Main entry point for the harmony checker component.

    Args:
        inp: References, optional section mapping and options.
        rules: Optional harmony rules for configuration.

    Returns:
        DetailedHarmonyResult for the references.
    """
    return calculate_harmony(
        inp.references,
        section_mapping=inp.section_mapping,
        options=inp.options,
        config=build_config(rules),
    )
