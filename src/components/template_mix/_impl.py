"""
Template mix - turn a section mapping over several references into one
design system plus harmony feedback.

Key behaviors:
- The primary reference supplies the base tokens; explicit choice wins,
  otherwise the reference feeding the most sections
- Whole token categories may be taken from other references
- Merge failures are reported as errors, never raised
- A harmony score below min_harmony_score is advisory: the template is
  still produced
"""

from __future__ import annotations

import logging
from collections import Counter
from urllib.parse import urlparse

from src.components.harmony import (
    HARMONY_CONFIG,
    HarmonyConfig,
    calculate_harmony,
    resolve_section_source,
)
from src.components.token_merger import (
    MERGER_CONFIG,
    MergerConfig,
    MergeTokensInput,
    TokenMergeError,
    create_simple_merge_strategy,
    merge_tokens,
)
from src.domain.entities import MergeStrategy, Reference, SectionMapping, TokenCategory

from .models import PrepareTemplateInput, PrepareTemplateOutput, TemplateError

logger = logging.getLogger(__name__)

DEFAULT_REFERENCE_NAME = "Reference Site"


def generate_reference_name(url: str) -> str:
    """Friendly name from a URL: the capitalised first label of its host."""
    parsed = urlparse(url if "://" in url else f"https://{url}")
    host = parsed.hostname or ""
    if host.startswith("www."):
        host = host[4:]

    label = host.split(".")[0]
    if not label:
        return DEFAULT_REFERENCE_NAME
    return label[0].upper() + label[1:]


def select_primary_reference(
    references: list[Reference],
    section_mapping: SectionMapping,
    primary_token_source: str | None = None,
) -> Reference | None:
    """
    Pick the reference whose tokens form the base of the template.

    Order of preference: the explicit source if it is ready, the ready
    reference assigned to the most sections (earliest wins ties), the
    first ready reference.
    """
    ready = [ref for ref in references if ref.is_ready]
    if not ready:
        return None

    explicit = resolve_section_source(primary_token_source, references)
    if explicit is not None and explicit.is_ready:
        return explicit

    counts: Counter[str] = Counter()
    for value in section_mapping.values():
        ref = resolve_section_source(value, references)
        if ref is not None and ref.is_ready:
            counts[ref.id] += 1

    if counts:
        most = max(counts.values())
        for ref in ready:
            if counts[ref.id] == most:
                return ref

    return ready[0]


def build_section_merge_strategy(
    primary_id: str,
    category_sources: dict[TokenCategory, str] | None = None,
) -> MergeStrategy:
    """Strategy with the primary as base and optional whole-category sources."""
    category_sources = category_sources or {}
    return create_simple_merge_strategy(
        primary_id,
        colors=category_sources.get("colors"),
        typography=category_sources.get("typography"),
        spacing=category_sources.get("spacing"),
        effects=category_sources.get("effects"),
    )


def prepare_template(
    inp: PrepareTemplateInput,
    merger_config: MergerConfig = MERGER_CONFIG,
    harmony_config: HarmonyConfig = HARMONY_CONFIG,
) -> PrepareTemplateOutput:
    """
    Merge the tokens for a template and check the harmony of its sources.

    Args:
        inp: References, section mapping and preferences.
        merger_config: Token merger configuration.
        harmony_config: Harmony checker configuration.

    Returns:
        PrepareTemplateOutput; design_system is None when no merge was possible.
    """
    errors: list[TemplateError] = []

    primary = select_primary_reference(
        inp.references, inp.section_mapping, inp.primary_token_source
    )
    if primary is None:
        return PrepareTemplateOutput(
            design_system=None,
            errors=[
                TemplateError(
                    phase="selecting_primary",
                    message="No ready reference available to provide base tokens",
                )
            ],
        )

    design_system = None
    merge_warnings: list[str] = []
    strategy = build_section_merge_strategy(primary.id, inp.category_sources)

    try:
        merged = merge_tokens(
            MergeTokensInput(references=inp.references, strategy=strategy),
            options=inp.merge_options,
            config=merger_config,
        )
    except TokenMergeError as e:
        logger.warning("Token merge failed for template: %s", e)
        errors.append(TemplateError(phase="merging_tokens", message=f"Token merge error: {e}"))
    else:
        design_system = merged.design_system
        merge_warnings = merged.warnings

    harmony = None
    if not inp.skip_harmony_check:
        harmony = calculate_harmony(
            inp.references,
            section_mapping=inp.section_mapping,
            options=inp.harmony_options,
            config=harmony_config,
        )
        if harmony.score == 0:
            errors.append(
                TemplateError(
                    phase="checking_harmony",
                    message="Harmony could not be assessed for these references",
                    recoverable=True,
                )
            )
        elif inp.min_harmony_score is not None and harmony.score < inp.min_harmony_score:
            logger.info(
                "Harmony score %d below recommended %s", harmony.score, inp.min_harmony_score
            )
            errors.append(
                TemplateError(
                    phase="checking_harmony",
                    message=(
                        f"Harmony score {harmony.score}% is below the recommended "
                        f"threshold of {inp.min_harmony_score:g}%"
                    ),
                    recoverable=True,
                )
            )

    return PrepareTemplateOutput(
        design_system=design_system,
        harmony=harmony,
        primary_reference_id=primary.id,
        merge_warnings=merge_warnings,
        errors=errors,
    )
