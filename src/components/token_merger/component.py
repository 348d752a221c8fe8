"""
Token merger component - entry points for merging reference tokens.

Invariants:
- I1: The base reference must resolve and carry tokens
- I2: Overrides apply in list order
- I3: References and their tokens are never mutated
- I4: meta.sourceUrl names the base and every contributing reference
"""

from __future__ import annotations

from src.rules.models import MergerRules

from ._impl import merge_tokens
from .models import (
    MERGER_CONFIG,
    MergeOptions,
    MergerConfig,
    MergeTokensInput,
    MergeTokensResult,
)


def build_config(rules: MergerRules | None) -> MergerConfig:
    """Build merger config from the rules file section."""
    if rules is None:
        return MERGER_CONFIG

    return MergerConfig(
        default_version=rules.default_version,
        supported_paths={
            category: tuple(keys) for category, keys in rules.supported_paths.items()
        },
    )


def run(
    inp: MergeTokensInput,
    *,
    options: MergeOptions | None = None,
    rules: MergerRules | None = None,
) -> MergeTokensResult:
    """
    Main entry point for the token merger component.

    Args:
        inp: References and merge strategy.
        options: Optional per-call merge options.
        rules: Optional merger rules for configuration.

    Returns:
        MergeTokensResult with the merged design system.

    Raises:
        TokenMergeError: When the merge cannot produce a design system.
    """
    return merge_tokens(inp, options=options, config=build_config(rules))
