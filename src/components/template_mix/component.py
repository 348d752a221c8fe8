"""
Template mix component - section mapping to merged tokens plus harmony.

Invariants:
- I1: The base tokens come from a ready reference
- I2: References are never mutated
- I3: Merge failures surface as errors in the output, not exceptions
"""

from __future__ import annotations

from src.components import harmony, token_merger
from src.rules.models import TemplateRules

from ._impl import prepare_template
from .models import PrepareTemplateInput, PrepareTemplateOutput


def run(
    inp: PrepareTemplateInput,
    *,
    rules: TemplateRules | None = None,
) -> PrepareTemplateOutput:
    """
    Main entry point for the template mix component.

    Args:
        inp: References, section mapping and preferences.
        rules: Optional template rules for configuration.

    Returns:
        PrepareTemplateOutput with merged tokens and harmony feedback.
    """
    return prepare_template(
        inp,
        merger_config=token_merger.build_config(rules.merger if rules else None),
        harmony_config=harmony.build_config(rules.harmony if rules else None),
    )
