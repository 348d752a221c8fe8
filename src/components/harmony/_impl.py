"""
Harmony checker - how well several references' design tokens fit together.

Every unordered pair of references is compared on three dimensions:

- color: weighted HSL distance between the primary palettes
- typography: heading/body family matches plus type-scale deviation
- spacing: proportional agreement of base unit, scale, container width
  and section padding

Pair scores are averaged per dimension (0-100) and combined with weights
into the overall score. Pairs that fall short become issues naming both
references and, when a section mapping is given, the sections they feed.

Key behaviors:
- Never raises for thin input; fewer than two usable references score 0
- References that are not ready are skipped and reported
- Missing data on both sides of a pair scores neutral, not zero
"""

from __future__ import annotations

import colorsys
import logging
import re
from collections.abc import Callable
from itertools import combinations
from statistics import mean

from src.domain.entities import (
    Reference,
    SectionMapping,
    SpacingTokens,
    TypographyTokens,
)

from .models import (
    HARMONY_CONFIG,
    DetailedHarmonyResult,
    HarmonyBreakdown,
    HarmonyCheckOptions,
    HarmonyConfig,
    HarmonyIssue,
    HarmonyThresholds,
    Severity,
)

logger = logging.getLogger(__name__)

HSL = tuple[float, float, float]

HEX_COLOR_PATTERN = re.compile(r"^#([0-9A-Fa-f]{3,4}|[0-9A-Fa-f]{6}|[0-9A-Fa-f]{8})$")
RGB_COLOR_PATTERN = re.compile(
    r"^rgba?\(\s*(\d{1,3})\s*[, ]\s*(\d{1,3})\s*[, ]\s*(\d{1,3})", re.IGNORECASE
)
SIZE_PATTERN = re.compile(r"(\d*\.?\d+)\s*(px|rem|em|pt|%)?", re.IGNORECASE)

ROOT_FONT_SIZE = 16.0

SCALE_KEYS = ("display", "h1", "h2", "h3", "h4", "h5", "h6", "body", "small", "xs")

# Share of each spacing signal in a pair's spacing similarity
SPACING_PARTS = {
    "base_unit": 0.3,
    "scale": 0.4,
    "container": 0.15,
    "padding": 0.15,
}


# --- Value Parsing ---


def parse_color(value: str) -> HSL | None:
    """
    Parse a CSS color into (hue, lightness, saturation), each 0-1.

    Accepts #rgb, #rgba, #rrggbb, #rrggbbaa and rgb()/rgba(). Alpha is ignored.
    """
    if not isinstance(value, str):
        return None
    value = value.strip()

    hex_match = HEX_COLOR_PATTERN.match(value)
    if hex_match:
        digits = hex_match.group(1)
        if len(digits) in (3, 4):
            digits = "".join(c * 2 for c in digits[:3])
        rgb = (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))
    else:
        rgb_match = RGB_COLOR_PATTERN.match(value)
        if not rgb_match:
            return None
        rgb = tuple(min(int(c), 255) for c in rgb_match.groups())  # type: ignore[assignment]

    r, g, b = (c / 255 for c in rgb)
    return colorsys.rgb_to_hls(r, g, b)


def parse_size(value: str | float | None) -> float | None:
    """Parse a CSS length to pixels; rem/em assume a 16px root. None if unusable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value) if value > 0 else None

    match = SIZE_PATTERN.search(value)
    if not match:
        return None

    number = float(match.group(1))
    unit = (match.group(2) or "px").lower()
    if unit == "%":
        return None
    if unit in ("rem", "em"):
        number *= ROOT_FONT_SIZE
    elif unit == "pt":
        number *= 4 / 3

    return number if number > 0 else None


def _relative_similarity(a: float, b: float, tolerance: float) -> float:
    """1.0 for equal values, 0.5 at `tolerance` relative deviation, 0 at twice it."""
    deviation = abs(a - b) / max(a, b)
    return max(0.0, 1.0 - deviation / (2 * tolerance))


# --- Color ---


def color_distance(c1: HSL, c2: HSL, config: HarmonyConfig = HARMONY_CONFIG) -> float:
    """
    Weighted HSL distance (0-1) between two parsed colors.

    Hue only counts as far as both colors are saturated, so grays do not
    clash with each other on an arbitrary hue.
    """
    h1, l1, s1 = c1
    h2, l2, s2 = c2
    tunables = config.color

    hue_diff = abs(h1 - h2)
    hue_diff = min(hue_diff, 1.0 - hue_diff) * 2

    return (
        tunables.hue_weight * hue_diff * min(s1, s2)
        + tunables.saturation_weight * abs(s1 - s2)
        + tunables.lightness_weight * abs(l1 - l2)
    )


def palette_distance(
    palette1: list[HSL],
    palette2: list[HSL],
    config: HarmonyConfig = HARMONY_CONFIG,
) -> float:
    """Mean nearest-neighbour distance, averaged over both directions."""

    def directed(src: list[HSL], dst: list[HSL]) -> float:
        return mean(min(color_distance(a, b, config) for b in dst) for a in src)

    return (directed(palette1, palette2) + directed(palette2, palette1)) / 2


def _representative_palette(ref: Reference) -> list[HSL]:
    """Parsed primary colors, falling back to secondary ones."""
    if ref.tokens is None:
        return []
    colors = ref.tokens.colors
    for candidates in (colors.primary, colors.secondary):
        parsed = [c for c in (parse_color(value) for value in candidates) if c is not None]
        if parsed:
            return parsed
    return []


def _color_clash_severity(distance: float, config: HarmonyConfig) -> Severity:
    excess = round(distance - config.color.clash_distance, 6)
    step = config.color.severity_step
    if excess >= 2 * step:
        return "high"
    if excess >= step:
        return "medium"
    return "low"


# --- Typography ---


def _normalize_family(family: str | None) -> str:
    """First family of a font stack, lowercased and unquoted."""
    if not family:
        return ""
    return family.split(",")[0].strip().strip("'\"").lower()


def scale_similarity(
    typo1: TypographyTokens,
    typo2: TypographyTokens,
    config: HarmonyConfig = HARMONY_CONFIG,
) -> float | None:
    """Mean similarity of the type-scale steps both sides define. None if none."""
    similarities = []
    for key in SCALE_KEYS:
        size1 = parse_size(getattr(typo1.scale, key))
        size2 = parse_size(getattr(typo2.scale, key))
        if size1 is None or size2 is None:
            continue
        similarities.append(
            _relative_similarity(size1, size2, config.typography.scale_tolerance)
        )
    return mean(similarities) if similarities else None


def typography_similarity(
    typo1: TypographyTokens,
    typo2: TypographyTokens,
    config: HarmonyConfig = HARMONY_CONFIG,
) -> float:
    """Weighted blend of font-family matches and type-scale similarity (0-1)."""
    heading_match = _normalize_family(typo1.fonts.heading) == _normalize_family(typo2.fonts.heading)
    body_match = _normalize_family(typo1.fonts.body) == _normalize_family(typo2.fonts.body)
    font_similarity = (int(heading_match) + int(body_match)) / 2

    scale = scale_similarity(typo1, typo2, config)
    if scale is None:
        return font_similarity

    tunables = config.typography
    return font_similarity * tunables.font_weight + scale * tunables.scale_weight


def _font_differences(typo1: TypographyTokens, typo2: TypographyTokens) -> list[str]:
    differences = []
    for role in ("heading", "body"):
        family1 = getattr(typo1.fonts, role)
        family2 = getattr(typo2.fonts, role)
        if _normalize_family(family1) != _normalize_family(family2):
            differences.append(f"{role} fonts {family1 or 'unset'} vs {family2 or 'unset'}")
    return differences


# --- Spacing ---


def _scale_values(spacing: SpacingTokens) -> list[float]:
    return [float(v) for v in spacing.scale if v > 0]


def _scale_match(values1: list[float], values2: list[float], tolerance: float) -> float:
    """Share of values that have a counterpart within tolerance, both directions."""

    def directed(src: list[float], dst: list[float]) -> float:
        matched = sum(
            1 for a in src if any(abs(a - b) / max(a, b) <= tolerance for b in dst)
        )
        return matched / len(src)

    return (directed(values1, values2) + directed(values2, values1)) / 2


def spacing_similarity(
    spacing1: SpacingTokens,
    spacing2: SpacingTokens,
    config: HarmonyConfig = HARMONY_CONFIG,
) -> float | None:
    """
    Weighted agreement of the spacing signals both sides provide (0-1).

    Returns None when no signal is available at all.
    """
    tolerance = config.spacing.value_tolerance
    parts: dict[str, float] = {}

    if spacing1.base_unit > 0 and spacing2.base_unit > 0:
        parts["base_unit"] = _relative_similarity(
            float(spacing1.base_unit), float(spacing2.base_unit), tolerance
        )

    scale1 = _scale_values(spacing1)
    scale2 = _scale_values(spacing2)
    if scale1 and scale2:
        parts["scale"] = _scale_match(scale1, scale2, tolerance)
    elif scale1 or scale2:
        parts["scale"] = 0.5

    width1 = parse_size(spacing1.container_max_width)
    width2 = parse_size(spacing2.container_max_width)
    if width1 is not None and width2 is not None:
        parts["container"] = _relative_similarity(width1, width2, tolerance)

    paddings = []
    for breakpoint in ("mobile", "desktop"):
        pad1 = parse_size(getattr(spacing1.section_padding, breakpoint))
        pad2 = parse_size(getattr(spacing2.section_padding, breakpoint))
        if pad1 is not None and pad2 is not None:
            paddings.append(_relative_similarity(pad1, pad2, tolerance))
    if paddings:
        parts["padding"] = mean(paddings)

    if not parts:
        return None

    total_weight = sum(SPACING_PARTS[name] for name in parts)
    return sum(SPACING_PARTS[name] * value for name, value in parts.items()) / total_weight


# --- Reference Resolution ---


def resolve_section_source(value: str | None, references: list[Reference]) -> Reference | None:
    """Resolve a section mapping value as a reference id, else as a list index."""
    if not value:
        return None

    for ref in references:
        if ref.id == value:
            return ref

    try:
        index = int(value)
    except ValueError:
        return None

    if 0 <= index < len(references):
        return references[index]
    return None


def get_used_references(
    section_mapping: SectionMapping,
    all_references: list[Reference],
) -> list[Reference]:
    """References a section mapping points at, in first-use order, without duplicates."""
    used: list[Reference] = []

    for value in section_mapping.values():
        ref = resolve_section_source(value, all_references)
        if ref is not None and not any(ref is seen for seen in used):
            used.append(ref)

    return used


def _affected_sections(
    ref1: Reference,
    ref2: Reference,
    section_mapping: SectionMapping | None,
    references: list[Reference],
) -> list[str]:
    if not section_mapping:
        return []

    sections = []
    for section, value in section_mapping.items():
        ref = resolve_section_source(value, references)
        if ref is ref1 or ref is ref2:
            sections.append(section)
    return sections


# --- Validation ---


def _is_analyzable(ref: Reference) -> bool:
    return ref.status == "ready" and ref.tokens is not None and ref.tokens.colors is not None


def can_calculate_harmony(references: list[Reference]) -> bool:
    """True iff there are at least two references, all ready with color tokens."""
    if len(references) < 2:
        return False
    return all(_is_analyzable(ref) for ref in references)


# --- Scoring ---


def _severity_for_score(score: float, thresholds: HarmonyThresholds) -> Severity:
    if score < thresholds.high:
        return "high"
    if score < thresholds.medium:
        return "medium"
    return "low"


PairScorer = Callable[[Reference, Reference], tuple[int, HarmonyIssue | None]]


def _score_pairs(
    references: list[Reference],
    scorer: PairScorer,
) -> tuple[int, list[HarmonyIssue]]:
    scores: list[int] = []
    issues: list[HarmonyIssue] = []

    for ref1, ref2 in combinations(references, 2):
        score, issue = scorer(ref1, ref2)
        scores.append(score)
        if issue is not None:
            issues.append(issue)

    return round(mean(scores)), issues


def _color_scorer(
    references: list[Reference],
    section_mapping: SectionMapping | None,
    options: HarmonyCheckOptions,
    config: HarmonyConfig,
) -> PairScorer:
    def score_pair(ref1: Reference, ref2: Reference) -> tuple[int, HarmonyIssue | None]:
        palette1 = _representative_palette(ref1)
        palette2 = _representative_palette(ref2)
        if not palette1 or not palette2:
            return config.color.neutral_score, None

        distance = palette_distance(palette1, palette2, config)
        score = round(100 * max(0.0, 1.0 - distance / config.color.max_distance))
        names = f'"{ref1.display_name}" and "{ref2.display_name}"'

        severity: Severity | None = None
        if distance > config.color.clash_distance:
            severity = _color_clash_severity(distance, config)
        elif options.color_threshold is not None and score < options.color_threshold:
            severity = _severity_for_score(score, config.thresholds)

        if severity is None:
            return score, None

        return score, HarmonyIssue(
            type="color_clash",
            severity=severity,
            description=(
                f"Primary colors from {names} clash "
                f"(distance {distance:.2f}, {score}% compatible)"
            ),
            affected_sections=_affected_sections(ref1, ref2, section_mapping, references),
        )

    return score_pair


def _typography_scorer(
    references: list[Reference],
    section_mapping: SectionMapping | None,
    options: HarmonyCheckOptions,
    config: HarmonyConfig,
) -> PairScorer:
    threshold = (
        options.typography_threshold
        if options.typography_threshold is not None
        else config.typography.mismatch_score
    )

    def score_pair(ref1: Reference, ref2: Reference) -> tuple[int, HarmonyIssue | None]:
        typo1 = ref1.tokens.typography  # type: ignore[union-attr]
        typo2 = ref2.tokens.typography  # type: ignore[union-attr]

        score = round(100 * typography_similarity(typo1, typo2, config))
        differences = _font_differences(typo1, typo2)
        if not differences and score >= threshold:
            return score, None

        scale = scale_similarity(typo1, typo2, config)
        if scale is not None and scale < 1.0:
            differences.append(f"type scale {round(scale * 100)}% aligned")

        return score, HarmonyIssue(
            type="typography_mismatch",
            severity=_severity_for_score(score, config.thresholds),
            description=(
                f'Typography from "{ref1.display_name}" and "{ref2.display_name}" '
                f"differs ({'; '.join(differences)}; {score}% match)"
            ),
            affected_sections=_affected_sections(ref1, ref2, section_mapping, references),
        )

    return score_pair


def _spacing_scorer(
    references: list[Reference],
    section_mapping: SectionMapping | None,
    options: HarmonyCheckOptions,
    config: HarmonyConfig,
) -> PairScorer:
    threshold = (
        options.spacing_threshold
        if options.spacing_threshold is not None
        else config.spacing.inconsistent_score
    )

    def score_pair(ref1: Reference, ref2: Reference) -> tuple[int, HarmonyIssue | None]:
        similarity = spacing_similarity(
            ref1.tokens.spacing,  # type: ignore[union-attr]
            ref2.tokens.spacing,  # type: ignore[union-attr]
            config,
        )
        if similarity is None:
            return config.spacing.neutral_score, None

        score = round(100 * similarity)
        if score >= threshold:
            return score, None

        return score, HarmonyIssue(
            type="spacing_inconsistent",
            severity=_severity_for_score(score, config.thresholds),
            description=(
                f'Spacing systems from "{ref1.display_name}" and "{ref2.display_name}" '
                f"are inconsistent ({score}% match)"
            ),
            affected_sections=_affected_sections(ref1, ref2, section_mapping, references),
        )

    return score_pair


# --- Suggestions ---


def generate_suggestions(
    issues: list[HarmonyIssue],
    breakdown: HarmonyBreakdown,
    config: HarmonyConfig = HARMONY_CONFIG,
) -> list[str]:
    """Turn the breakdown and issues into actionable advice."""
    suggestions: list[str] = []
    issue_types = {issue.type for issue in issues}
    cutoff = config.suggestion_score

    if "color_clash" in issue_types or breakdown.color < cutoff:
        suggestions.append("Adjust color palettes: pick one reference as the primary color source")
        suggestions.append("Use neutral colors (grays, whites) as common ground between sections")

    if "typography_mismatch" in issue_types or breakdown.typography < cutoff:
        suggestions.append("Unify fonts and sizes: take heading and body fonts from one reference")

    if "spacing_inconsistent" in issue_types or breakdown.spacing < cutoff:
        suggestions.append("Align spacing scales: use one reference's spacing tokens throughout")

    if breakdown.overall < config.thresholds.high:
        suggestions.append("Consider choosing a different combination of references with more similar styles")
    elif breakdown.overall >= config.thresholds.low:
        suggestions.append("These references work well together!")

    return suggestions


# --- Main Functions ---


def _insufficient_result(
    description: str,
    references: list[Reference],
    section_mapping: SectionMapping | None,
) -> DetailedHarmonyResult:
    return DetailedHarmonyResult(
        score=0,
        breakdown=HarmonyBreakdown(color=0, typography=0, spacing=0, overall=0),
        issues=[
            HarmonyIssue(type="insufficient_data", severity="high", description=description)
        ],
        suggestions=[
            "Ensure all references are processed successfully",
            "Add at least 2 ready references to compare",
        ],
        references_analyzed=[ref.display_name for ref in references],
        sections_analyzed=list(section_mapping) if section_mapping else [],
    )


def calculate_harmony(
    references: list[Reference],
    section_mapping: SectionMapping | None = None,
    options: HarmonyCheckOptions | None = None,
    config: HarmonyConfig = HARMONY_CONFIG,
) -> DetailedHarmonyResult:
    """
    Calculate visual harmony between references.

    Args:
        references: References to compare; only ready ones are analysed.
        section_mapping: Optional section -> reference id/index mapping, used
            to attribute issues to sections.
        options: Optional per-call thresholds and weights.
        config: Harmony configuration.

    Returns:
        DetailedHarmonyResult with score, breakdown, issues and suggestions.
    """
    options = options or HarmonyCheckOptions()

    if not references:
        return _insufficient_result(
            "No references provided for harmony analysis", [], section_mapping
        )

    usable = [ref for ref in references if _is_analyzable(ref)]
    skipped = [ref for ref in references if not _is_analyzable(ref)]

    if len(usable) < 2:
        if len(references) == 1:
            description = "Only one reference provided, nothing to compare it against"
        else:
            description = (
                f"Only {len(usable)} of {len(references)} references are ready for analysis"
            )
        return _insufficient_result(description, usable, section_mapping)

    color_score, color_issues = _score_pairs(
        usable, _color_scorer(references, section_mapping, options, config)
    )
    typography_score, typography_issues = _score_pairs(
        usable, _typography_scorer(references, section_mapping, options, config)
    )
    spacing_score, spacing_issues = _score_pairs(
        usable, _spacing_scorer(references, section_mapping, options, config)
    )

    weights = config.default_weights
    color_weight = options.color_weight if options.color_weight is not None else weights.color
    typography_weight = (
        options.typography_weight
        if options.typography_weight is not None
        else weights.typography
    )
    spacing_weight = (
        options.spacing_weight if options.spacing_weight is not None else weights.spacing
    )

    overall = round(
        color_score * color_weight
        + typography_score * typography_weight
        + spacing_score * spacing_weight
    )
    overall = max(0, min(100, overall))

    breakdown = HarmonyBreakdown(
        color=color_score,
        typography=typography_score,
        spacing=spacing_score,
        overall=overall,
    )

    issues = [*color_issues, *typography_issues, *spacing_issues]
    issues.extend(
        HarmonyIssue(
            type="insufficient_data",
            severity="low",
            description=f'Reference "{ref.display_name}" skipped: status is {ref.status}',
        )
        for ref in skipped
    )

    logger.debug(
        "Harmony for %d references: color=%d typography=%d spacing=%d overall=%d",
        len(usable),
        color_score,
        typography_score,
        spacing_score,
        overall,
    )

    return DetailedHarmonyResult(
        score=overall,
        breakdown=breakdown,
        issues=issues,
        suggestions=generate_suggestions(issues, breakdown, config),
        references_analyzed=[ref.display_name for ref in usable],
        sections_analyzed=list(section_mapping) if section_mapping else [],
    )


def get_harmony_score(
    references: list[Reference],
    section_mapping: SectionMapping | None = None,
    options: HarmonyCheckOptions | None = None,
    config: HarmonyConfig = HARMONY_CONFIG,
) -> int:
    """Harmony score (0-100) only."""
    return calculate_harmony(references, section_mapping, options, config).score


def meets_harmony_threshold(
    references: list[Reference],
    threshold: float,
    section_mapping: SectionMapping | None = None,
    options: HarmonyCheckOptions | None = None,
    config: HarmonyConfig = HARMONY_CONFIG,
) -> bool:
    """True if the harmony score meets or exceeds threshold."""
    return get_harmony_score(references, section_mapping, options, config) >= threshold

