"""
Harmony checker component - visual compatibility scoring across references.
"""

from ._impl import (
    calculate_harmony,
    can_calculate_harmony,
    color_distance,
    generate_suggestions,
    get_harmony_score,
    get_used_references,
    meets_harmony_threshold,
    palette_distance,
    parse_color,
    parse_size,
    resolve_section_source,
    scale_similarity,
    spacing_similarity,
    typography_similarity,
)
from .component import build_config, run
from .models import (
    HARMONY_CONFIG,
    ColorTunables,
    DetailedHarmonyResult,
    HarmonyBreakdown,
    HarmonyCheckInput,
    HarmonyCheckOptions,
    HarmonyConfig,
    HarmonyIssue,
    HarmonyThresholds,
    HarmonyWeights,
    IssueType,
    Severity,
    SpacingTunables,
    TypographyTunables,
)

__all__ = [
    # Entry points
    "run",
    "build_config",
    # Functions
    "calculate_harmony",
    "can_calculate_harmony",
    "color_distance",
    "generate_suggestions",
    "get_harmony_score",
    "get_used_references",
    "meets_harmony_threshold",
    "palette_distance",
    "parse_color",
    "parse_size",
    "resolve_section_source",
    "scale_similarity",
    "spacing_similarity",
    "typography_similarity",
    # Models
    "HARMONY_CONFIG",
    "ColorTunables",
    "DetailedHarmonyResult",
    "HarmonyBreakdown",
    "HarmonyCheckInput",
    "HarmonyCheckOptions",
    "HarmonyConfig",
    "HarmonyIssue",
    "HarmonyThresholds",
    "HarmonyWeights",
    "IssueType",
    "Severity",
    "SpacingTunables",
    "TypographyTunables",
]
