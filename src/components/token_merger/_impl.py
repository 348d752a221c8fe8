"""
Token merger - combine several references' design tokens into one.

A merge strategy names a base reference whose tokens are cloned as the
working copy, then an ordered list of overrides that each write one path
of that copy, taking the value either verbatim or from another reference.

Key behaviors:
- Inputs are never mutated; the result shares no data with any reference
- Overrides apply in list order, later ones win
- Strict mode raises on the first problem; otherwise problems are
  collected in failed_overrides and warnings and the merge carries on
- Each applied override must leave a valid DesignSystem; one that does
  not is rolled back and counts as a failed override
- The merged tree is validated back into a DesignSystem at the end
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from src.components.tree_paths import (
    deep_clone,
    get_value_at_path,
    parse_token_path,
    set_value_at_path,
)
from src.domain.entities import (
    MergeStrategy,
    Reference,
    TokenOverride,
    design_system_from_tree,
)

from .models import (
    MERGER_CONFIG,
    MergeOptions,
    MergerConfig,
    MergeTokensInput,
    MergeTokensResult,
    OverrideResult,
    TokenMergeError,
    ValidationResult,
)

logger = logging.getLogger(__name__)

_MISSING = object()

DEFAULT_OPTIONS = MergeOptions()


# --- Lookup ---


def find_reference(references: list[Reference], reference_id: str) -> Reference | None:
    """Return the reference with the given id, if any."""
    for ref in references:
        if ref.id == reference_id:
            return ref
    return None


# --- Validation Functions ---


def validate_reference_exists(references: list[Reference], reference_id: str) -> bool:
    """Check that a reference id resolves."""
    return find_reference(references, reference_id) is not None


def validate_references_ready(references: list[Reference]) -> ValidationResult:
    """Every reference must be ready and carry tokens."""
    errors: list[str] = []

    for ref in references:
        if ref.status != "ready":
            errors.append(f"{ref.id}: status is {ref.status}")
        if ref.tokens is None:
            errors.append(f"{ref.id}: no tokens")

    return ValidationResult(is_valid=not errors, errors=errors)


def validate_merge_strategy(
    strategy: MergeStrategy,
    references: list[Reference],
) -> ValidationResult:
    """Check the strategy's base and the shape of every override."""
    errors: list[str] = []

    if not strategy.base:
        errors.append("Merge strategy must specify a base reference id")
    elif not validate_reference_exists(references, strategy.base):
        errors.append(f'Base reference "{strategy.base}" not found in available references')

    if not isinstance(strategy.overrides, list):
        errors.append("Merge strategy must include an overrides list")
        return ValidationResult(is_valid=False, errors=errors)

    for index, override in enumerate(strategy.overrides):
        if not override.reference_id:
            errors.append(f"Override at index {index} missing referenceId")
        elif not validate_reference_exists(references, override.reference_id):
            errors.append(f'Override reference "{override.reference_id}" not found')

        if not override.path:
            errors.append(f"Override at index {index} missing path")

    return ValidationResult(is_valid=not errors, errors=errors)


def is_supported_path(path: str, config: MergerConfig = MERGER_CONFIG) -> bool:
    """
    Check a path against the known token categories.

    The first segment must be a category; the second, if present, one of
    that category's keys. Anything deeper is not checked.
    """
    segments = parse_token_path(path)
    if not segments or segments[0] not in config.supported_paths:
        return False
    if len(segments) == 1:
        return True
    return segments[1] in config.supported_paths[segments[0]]


# --- Override Application ---


def apply_override(
    design_system: dict[str, Any],
    override: TokenOverride,
    references: list[Reference],
    options: MergeOptions = DEFAULT_OPTIONS,
) -> OverrideResult:
    """
    Write one override into a working token tree.

    The tree is only mutated on success.
    """
    source = find_reference(references, override.reference_id)
    if source is None:
        return OverrideResult(
            success=False, error=f'Reference "{override.reference_id}" not found'
        )

    segments = parse_token_path(override.path)
    if not segments:
        return OverrideResult(success=False, error=f'Invalid path: "{override.path}"')

    if len(segments) == 1 and not options.allow_partial_paths:
        return OverrideResult(
            success=False,
            error=f'Partial path "{override.path}" not allowed, name a token inside it',
        )

    if override.has_value:
        value = override.value
    else:
        if source.tokens is None:
            return OverrideResult(
                success=False, error=f'Reference "{override.reference_id}" has no tokens'
            )
        value = get_value_at_path(source.tokens.to_tree(), segments, default=_MISSING)
        if value is _MISSING:
            return OverrideResult(
                success=False,
                error=(
                    f'Value not found at path "{override.path}" '
                    f'in reference "{override.reference_id}"'
                ),
            )

    previous = get_value_at_path(design_system, segments, default=_MISSING)
    if not set_value_at_path(design_system, segments, deep_clone(value)):
        return OverrideResult(
            success=False, error=f'Failed to set value at path "{override.path}"'
        )

    return OverrideResult(success=True, changed=previous is _MISSING or previous != value)


# --- Merge ---


def _shape_error(tree: dict[str, Any]) -> str | None:
    """First validation problem of a working tree, or None if it is a valid design system."""
    try:
        design_system_from_tree(tree)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        return f"{location}: {first['msg']}"
    return None


def _restore(tree: dict[str, Any], key: str, snapshot: Any) -> None:
    if snapshot is _MISSING:
        tree.pop(key, None)
    else:
        tree[key] = snapshot


def _involved_references(
    references: list[Reference],
    strategy: MergeStrategy,
) -> list[Reference]:
    """Base first, then each override source, without duplicates."""
    involved: list[Reference] = []
    seen: set[str] = set()

    for reference_id in [strategy.base, *(o.reference_id for o in strategy.overrides)]:
        if reference_id in seen:
            continue
        seen.add(reference_id)
        ref = find_reference(references, reference_id)
        if ref is not None:
            involved.append(ref)

    return involved


def _provenance(base_id: str, contributors: list[str]) -> str:
    others = [ref_id for ref_id in contributors if ref_id != base_id]
    if not others:
        return f"merged:{base_id}"
    return f"merged:{base_id}+{','.join(others)}"


def merge_tokens(
    inp: MergeTokensInput,
    options: MergeOptions | None = None,
    config: MergerConfig = MERGER_CONFIG,
) -> MergeTokensResult:
    """
    Merge design tokens from several references into one design system.

    Args:
        inp: References and the merge strategy to apply.
        options: Strictness, timestamp and path handling.
        config: Merger configuration.

    Returns:
        MergeTokensResult with the merged system and override audit trail.

    Raises:
        TokenMergeError: Invalid strategy, base without tokens, or (strict
            mode) any readiness or override failure, including an override
            that leaves the tokens an invalid design system.
    """
    options = options or DEFAULT_OPTIONS
    references = inp.references
    strategy = inp.strategy

    applied: list[str] = []
    failed: list[str] = []
    unchanged: list[str] = []
    warnings: list[str] = []
    contributors: list[str] = []

    validation = validate_merge_strategy(strategy, references)
    if not validation.is_valid:
        raise TokenMergeError(
            f"Invalid merge strategy: {'; '.join(validation.errors)}",
            validation.errors,
        )

    base = find_reference(references, strategy.base)
    if base is None or base.tokens is None:
        raise TokenMergeError(f'Base reference "{strategy.base}" has no tokens')

    working = deep_clone(base.tokens.to_tree())

    readiness = validate_references_ready(_involved_references(references, strategy))
    if not readiness.is_valid:
        if options.strict:
            raise TokenMergeError(
                f"References not ready: {'; '.join(readiness.errors)}",
                readiness.errors,
            )
        warnings.extend(readiness.errors)

    for override in strategy.overrides:
        if not is_supported_path(override.path, config):
            warnings.append(f'Path "{override.path}" is outside the known token categories')

        segments = parse_token_path(override.path)
        category = segments[0] if segments else ""
        snapshot = deep_clone(working.get(category, _MISSING))

        result = apply_override(working, override, references, options)
        if result.success:
            problem = _shape_error(working)
            if problem is not None:
                _restore(working, category, snapshot)
                result = OverrideResult(
                    success=False,
                    error=f"Value does not fit the design system ({problem})",
                )

        if result.success:
            applied.append(override.path)
            if not result.changed:
                unchanged.append(override.path)
            if override.reference_id not in contributors:
                contributors.append(override.reference_id)
            continue

        message = f"{override.path}: {result.error}"
        if options.strict:
            raise TokenMergeError(f"Failed to apply override: {message}", [message])

        failed.append(override.path)
        warnings.append(f"Skipped override {message}")
        logger.warning("Skipped token override %s", message)

    working["meta"] = {
        "sourceUrl": _provenance(base.id, contributors),
        "extractedAt": options.timestamp or datetime.now(UTC).isoformat(),
        "version": config.default_version,
    }

    try:
        design_system = design_system_from_tree(working)
    except ValidationError as e:
        raise TokenMergeError(f"Merged tokens are not a valid design system:\n{e}") from e

    logger.debug(
        "Merged tokens from base %s: %d applied, %d failed",
        base.id,
        len(applied),
        len(failed),
    )

    return MergeTokensResult(
        design_system=design_system,
        applied_overrides=applied,
        failed_overrides=failed,
        warnings=warnings,
        unchanged_overrides=unchanged,
    )


def merge_tokens_from_map(
    references_map: Mapping[str, Reference],
    strategy: MergeStrategy,
    options: MergeOptions | None = None,
    config: MergerConfig = MERGER_CONFIG,
) -> MergeTokensResult:
    """Merge from an id-keyed mapping of references."""
    if not references_map:
        raise TokenMergeError("No references supplied for merge")

    references = list(references_map.values())
    return merge_tokens(
        MergeTokensInput(references=references, strategy=strategy),
        options=options,
        config=config,
    )


def create_simple_merge_strategy(
    base: str,
    colors: str | None = None,
    typography: str | None = None,
    spacing: str | None = None,
    effects: str | None = None,
) -> MergeStrategy:
    """
    Build a strategy that takes whole token categories from other references.

    Each named category becomes one override whose value is read from the
    given reference at merge time.
    """
    sources = {
        "colors": colors,
        "typography": typography,
        "spacing": spacing,
        "effects": effects,
    }
    overrides = [
        TokenOverride(reference_id=reference_id, path=category)
        for category, reference_id in sources.items()
        if reference_id
    ]
    return MergeStrategy(base=base, overrides=overrides)
