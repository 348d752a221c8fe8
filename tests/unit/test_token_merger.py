"""
Tests for the token merger.

Covers strategy validation, override application, strict and non-strict
merging, provenance metadata and the convenience builders.
"""

from __future__ import annotations

import pytest

from src.components import token_merger
from src.components.token_merger import (
    MergeOptions,
    MergeTokensInput,
    TokenMergeError,
    apply_override,
    create_simple_merge_strategy,
    is_supported_path,
    merge_tokens,
    merge_tokens_from_map,
    validate_merge_strategy,
    validate_reference_exists,
    validate_references_ready,
)
from src.domain.entities import MergeStrategy, Reference, TokenOverride

TIMESTAMP = "2025-06-01T12:00:00+00:00"


def _strategy(base: str, *overrides: tuple[str, str]) -> MergeStrategy:
    return MergeStrategy(
        base=base,
        overrides=[TokenOverride(reference_id=ref_id, path=path) for ref_id, path in overrides],
    )


# --- Validation Tests ---


class TestValidateReferenceExists:
    def test_found(self, ref_a: Reference) -> None:
        assert validate_reference_exists([ref_a], "ref-a") is True

    def test_missing(self, ref_a: Reference) -> None:
        assert validate_reference_exists([ref_a], "nope") is False


class TestValidateReferencesReady:
    """Readiness is reported per reference."""

    def test_all_ready(self, ref_a: Reference, ref_b: Reference) -> None:
        result = validate_references_ready([ref_a, ref_b])
        assert result.is_valid
        assert result.errors == []

    def test_names_each_failing_reference(self, make_reference, ref_a: Reference) -> None:
        ref3 = make_reference("ref3", status="processing", with_tokens=False)

        result = validate_references_ready([ref_a, ref3])

        assert not result.is_valid
        assert result.errors == ["ref3: status is processing", "ref3: no tokens"]


class TestValidateMergeStrategy:
    """Strategy shape validation."""

    def test_valid(self, ref_a: Reference, ref_b: Reference) -> None:
        result = validate_merge_strategy(
            _strategy("ref-a", ("ref-b", "colors.primary")), [ref_a, ref_b]
        )
        assert result.is_valid

    def test_empty_base(self, ref_a: Reference) -> None:
        result = validate_merge_strategy(MergeStrategy(base=""), [ref_a])
        assert not result.is_valid
        assert any("base" in e for e in result.errors)

    def test_unknown_base(self, ref_a: Reference) -> None:
        result = validate_merge_strategy(MergeStrategy(base="missing-id"), [ref_a])
        assert not result.is_valid
        assert any("missing-id" in e for e in result.errors)

    def test_overrides_not_a_list(self, ref_a: Reference) -> None:
        strategy = MergeStrategy.model_construct(base="ref-a", overrides=None)
        result = validate_merge_strategy(strategy, [ref_a])
        assert not result.is_valid
        assert any("overrides" in e for e in result.errors)

    def test_collects_every_override_error(self, ref_a: Reference) -> None:
        strategy = MergeStrategy(
            base="ref-a",
            overrides=[
                TokenOverride(reference_id="", path="colors"),
                TokenOverride(reference_id="ref-a", path=""),
                TokenOverride(reference_id="ghost", path="colors"),
            ],
        )

        result = validate_merge_strategy(strategy, [ref_a])

        assert result.errors == [
            "Override at index 0 missing referenceId",
            "Override at index 1 missing path",
            'Override reference "ghost" not found',
        ]


class TestIsSupportedPath:
    def test_category(self) -> None:
        assert is_supported_path("colors") is True

    def test_category_key(self) -> None:
        assert is_supported_path("spacing.baseUnit") is True

    def test_deeper_path(self) -> None:
        assert is_supported_path("colors.semantic.error") is True

    def test_unknown_key(self) -> None:
        assert is_supported_path("colors.bogus") is False

    def test_unknown_category(self) -> None:
        assert is_supported_path("layout.grid") is False

    def test_empty(self) -> None:
        assert is_supported_path("") is False


# --- Apply Override Tests ---


class TestApplyOverride:
    """Single override application against a working tree."""

    def test_reads_value_from_source(self, ref_a: Reference, ref_b: Reference) -> None:
        tree = ref_a.tokens.to_tree()
        override = TokenOverride(reference_id="ref-b", path="colors.primary")

        result = apply_override(tree, override, [ref_a, ref_b])

        assert result.success
        assert tree["colors"]["primary"] == ["#ff0000"]

    def test_explicit_value(self, ref_a: Reference) -> None:
        tree = ref_a.tokens.to_tree()
        override = TokenOverride(reference_id="ref-a", path="spacing.baseUnit", value=8)

        assert apply_override(tree, override, [ref_a]).success
        assert tree["spacing"]["baseUnit"] == 8

    def test_missing_source_reference(self, ref_a: Reference) -> None:
        tree = ref_a.tokens.to_tree()
        before = ref_a.tokens.to_tree()

        result = apply_override(tree, TokenOverride(reference_id="x", path="colors"), [ref_a])

        assert not result.success
        assert "not found" in result.error
        assert tree == before

    def test_empty_path(self, ref_a: Reference) -> None:
        result = apply_override(
            ref_a.tokens.to_tree(), TokenOverride(reference_id="ref-a", path=".."), [ref_a]
        )
        assert not result.success
        assert "Invalid path" in result.error

    def test_unresolvable_source_path(self, ref_a: Reference, ref_b: Reference) -> None:
        tree = ref_a.tokens.to_tree()
        before = ref_a.tokens.to_tree()

        result = apply_override(
            tree, TokenOverride(reference_id="ref-b", path="invalid.path"), [ref_a, ref_b]
        )

        assert not result.success
        assert "invalid.path" in result.error
        assert tree == before

    def test_source_without_tokens(self, make_reference, ref_a: Reference) -> None:
        empty = make_reference("empty", with_tokens=False)
        result = apply_override(
            ref_a.tokens.to_tree(), TokenOverride(reference_id="empty", path="colors"), [empty]
        )
        assert not result.success
        assert "no tokens" in result.error

    def test_partial_path_rejected_when_disabled(self, ref_a: Reference) -> None:
        result = apply_override(
            ref_a.tokens.to_tree(),
            TokenOverride(reference_id="ref-a", path="colors"),
            [ref_a],
            MergeOptions(allow_partial_paths=False),
        )
        assert not result.success

    def test_unchanged_value_flagged(self, ref_a: Reference) -> None:
        result = apply_override(
            ref_a.tokens.to_tree(),
            TokenOverride(reference_id="ref-a", path="colors.primary"),
            [ref_a],
        )
        assert result.success
        assert result.changed is False


# --- Merge Tests ---


class TestMergeTokens:
    """Full merges."""

    def test_primary_colors_from_other_reference(
        self, ref_a: Reference, ref_b: Reference
    ) -> None:
        result = merge_tokens(
            MergeTokensInput(
                references=[ref_a, ref_b],
                strategy=_strategy("ref-a", ("ref-b", "colors.primary")),
            )
        )

        merged = result.design_system
        assert merged.colors.primary == ref_b.tokens.colors.primary
        assert merged.colors.secondary == ref_a.tokens.colors.secondary
        assert merged.typography == ref_a.tokens.typography
        assert merged.spacing == ref_a.tokens.spacing
        assert merged.effects == ref_a.tokens.effects
        assert result.applied_overrides == ["colors.primary"]
        assert result.failed_overrides == []
        assert result.warnings == []

    def test_unknown_base_raises(self, ref_a: Reference, ref_b: Reference) -> None:
        with pytest.raises(TokenMergeError) as exc_info:
            merge_tokens(
                MergeTokensInput(
                    references=[ref_a, ref_b],
                    strategy=_strategy("missing-id", ("ref-b", "colors.primary")),
                )
            )

        assert "missing-id" in str(exc_info.value)
        assert exc_info.value.errors

    def test_base_without_tokens_raises(self, make_reference, ref_b: Reference) -> None:
        base = make_reference("ref-a", with_tokens=False)

        with pytest.raises(TokenMergeError, match="ref-a"):
            merge_tokens(MergeTokensInput(references=[base, ref_b], strategy=_strategy("ref-a")))

    def test_non_strict_records_failed_override(
        self, ref_a: Reference, ref_b: Reference
    ) -> None:
        result = merge_tokens(
            MergeTokensInput(
                references=[ref_a, ref_b],
                strategy=_strategy(
                    "ref-a", ("ref-b", "invalid.path"), ("ref-b", "colors.primary")
                ),
            )
        )

        assert result.failed_overrides == ["invalid.path"]
        assert result.applied_overrides == ["colors.primary"]
        assert result.warnings
        assert result.design_system.colors.primary == ["#ff0000"]

    def test_strict_raises_on_failed_override(
        self, ref_a: Reference, ref_b: Reference
    ) -> None:
        with pytest.raises(TokenMergeError, match="invalid.path"):
            merge_tokens(
                MergeTokensInput(
                    references=[ref_a, ref_b],
                    strategy=_strategy("ref-a", ("ref-b", "invalid.path")),
                ),
                MergeOptions(strict=True),
            )

    def test_non_ready_reference_warns(self, make_reference, ref_a: Reference) -> None:
        pending = make_reference("ref-p", status="processing", colors={"primary": ["#00ff00"]})

        result = merge_tokens(
            MergeTokensInput(
                references=[ref_a, pending],
                strategy=_strategy("ref-a", ("ref-p", "colors.primary")),
            )
        )

        assert "ref-p: status is processing" in result.warnings
        assert result.design_system.colors.primary == ["#00ff00"]

    def test_non_ready_reference_strict_raises(self, make_reference, ref_a: Reference) -> None:
        pending = make_reference("ref-p", status="processing")

        with pytest.raises(TokenMergeError, match="not ready"):
            merge_tokens(
                MergeTokensInput(
                    references=[ref_a, pending],
                    strategy=_strategy("ref-a", ("ref-p", "colors.primary")),
                ),
                MergeOptions(strict=True),
            )

    def test_uninvolved_reference_readiness_ignored(
        self, make_reference, ref_a: Reference
    ) -> None:
        bystander = make_reference("ref-x", status="error", with_tokens=False)

        result = merge_tokens(
            MergeTokensInput(references=[ref_a, bystander], strategy=_strategy("ref-a")),
            MergeOptions(strict=True),
        )

        assert result.warnings == []

    def test_overrides_apply_in_order(self, make_reference, ref_a: Reference) -> None:
        red = make_reference("red", colors={"primary": ["#ff0000"]})
        green = make_reference("green", colors={"primary": ["#00ff00"]})

        result = merge_tokens(
            MergeTokensInput(
                references=[ref_a, red, green],
                strategy=_strategy("ref-a", ("red", "colors.primary"), ("green", "colors.primary")),
            )
        )

        assert result.design_system.colors.primary == ["#00ff00"]

    def test_meta_names_contributors(self, ref_a: Reference, ref_b: Reference) -> None:
        result = merge_tokens(
            MergeTokensInput(
                references=[ref_a, ref_b],
                strategy=_strategy("ref-a", ("ref-b", "colors.primary")),
            ),
            MergeOptions(timestamp=TIMESTAMP),
        )

        meta = result.design_system.meta
        assert "ref-a" in meta.source_url
        assert "ref-b" in meta.source_url
        assert meta.extracted_at == TIMESTAMP
        assert meta.version == 1

    def test_meta_skips_failed_contributors(self, ref_a: Reference, ref_b: Reference) -> None:
        result = merge_tokens(
            MergeTokensInput(
                references=[ref_a, ref_b],
                strategy=_strategy("ref-a", ("ref-b", "invalid.path")),
            )
        )

        assert result.design_system.meta.source_url == "merged:ref-a"

    def test_default_timestamp_is_set(self, ref_a: Reference) -> None:
        result = merge_tokens(
            MergeTokensInput(references=[ref_a], strategy=_strategy("ref-a"))
        )
        assert result.design_system.meta.extracted_at

    def test_inputs_are_not_mutated(self, ref_a: Reference, ref_b: Reference) -> None:
        tokens_a = ref_a.tokens.model_copy(deep=True)
        tokens_b = ref_b.tokens.model_copy(deep=True)

        result = merge_tokens(
            MergeTokensInput(
                references=[ref_a, ref_b],
                strategy=_strategy("ref-a", ("ref-b", "colors.primary")),
            )
        )
        result.design_system.colors.primary.append("#000000")
        result.design_system.spacing.scale.append(128)

        assert ref_a.tokens == tokens_a
        assert ref_b.tokens == tokens_b

    def test_explicit_value_of_wrong_shape_rolled_back(
        self, ref_a: Reference, ref_b: Reference
    ) -> None:
        strategy = MergeStrategy(
            base="ref-a",
            overrides=[
                TokenOverride(reference_id="ref-a", path="colors.primary", value=5),
                TokenOverride(reference_id="ref-b", path="colors.primary.0"),
            ],
        )

        result = merge_tokens(MergeTokensInput(references=[ref_a, ref_b], strategy=strategy))

        assert result.failed_overrides == ["colors.primary"]
        assert result.applied_overrides == ["colors.primary.0"]
        assert result.design_system.colors.primary == ["#ff0000", "#2563eb"]
        assert any("does not fit" in w for w in result.warnings)

    def test_explicit_value_of_wrong_shape_strict_raises(self, ref_a: Reference) -> None:
        strategy = MergeStrategy(
            base="ref-a",
            overrides=[TokenOverride(reference_id="ref-a", path="colors.primary", value=5)],
        )

        with pytest.raises(TokenMergeError, match="does not fit the design system"):
            merge_tokens(
                MergeTokensInput(references=[ref_a], strategy=strategy),
                MergeOptions(strict=True),
            )

    def test_list_index_past_base_end_fails_cleanly(
        self, make_reference, ref_a: Reference
    ) -> None:
        wide = make_reference(
            "ref-c", colors={"primary": ["#111111", "#222222", "#333333", "#444444"]}
        )
        strategy = _strategy("ref-a", ("ref-c", "colors.primary.3"))

        result = merge_tokens(MergeTokensInput(references=[ref_a, wide], strategy=strategy))

        assert result.failed_overrides == ["colors.primary.3"]
        assert result.design_system.colors.primary == ref_a.tokens.colors.primary
        assert result.warnings

    def test_list_index_at_base_end_appends(self, make_reference, ref_a: Reference) -> None:
        wide = make_reference(
            "ref-c", colors={"primary": ["#111111", "#222222", "#333333", "#444444"]}
        )
        strategy = _strategy("ref-a", ("ref-c", "colors.primary.2"))

        result = merge_tokens(MergeTokensInput(references=[ref_a, wide], strategy=strategy))

        assert result.applied_overrides == ["colors.primary.2"]
        assert result.design_system.colors.primary == ["#3b82f6", "#2563eb", "#333333"]

    def test_unsupported_path_warns_but_applies(self, ref_a: Reference) -> None:
        strategy = MergeStrategy(
            base="ref-a",
            overrides=[TokenOverride(reference_id="ref-a", path="layout.grid", value=12)],
        )

        result = merge_tokens(MergeTokensInput(references=[ref_a], strategy=strategy))

        assert result.applied_overrides == ["layout.grid"]
        assert any("layout.grid" in w for w in result.warnings)
        assert result.design_system.to_tree()["layout"] == {"grid": 12}

    def test_unchanged_overrides_reported(self, ref_a: Reference, ref_b: Reference) -> None:
        result = merge_tokens(
            MergeTokensInput(
                references=[ref_a, ref_b],
                strategy=_strategy("ref-a", ("ref-b", "typography"), ("ref-b", "colors.primary")),
            )
        )

        assert result.unchanged_overrides == ["typography"]

    def test_whole_category_override(self, make_reference, ref_a: Reference) -> None:
        serif = make_reference(
            "serif", typography={"fonts": {"heading": "Georgia", "body": "Georgia"}}
        )

        result = merge_tokens(
            MergeTokensInput(references=[ref_a, serif], strategy=_strategy("ref-a", ("serif", "typography")))
        )

        assert result.design_system.typography == serif.tokens.typography
        assert result.design_system.colors == ref_a.tokens.colors

    def test_to_dict_uses_wire_names(self, ref_a: Reference, ref_b: Reference) -> None:
        result = merge_tokens(
            MergeTokensInput(
                references=[ref_a, ref_b],
                strategy=_strategy("ref-a", ("ref-b", "colors.primary")),
            )
        )

        payload = result.to_dict()
        assert payload["appliedOverrides"] == ["colors.primary"]
        assert payload["designSystem"]["spacing"]["baseUnit"] == 4


class TestMergeTokensFromMap:
    def test_merges_from_map(self, ref_a: Reference, ref_b: Reference) -> None:
        result = merge_tokens_from_map(
            {"ref-a": ref_a, "ref-b": ref_b},
            _strategy("ref-a", ("ref-b", "colors.primary")),
        )
        assert result.design_system.colors.primary == ["#ff0000"]

    def test_empty_map_raises(self) -> None:
        with pytest.raises(TokenMergeError):
            merge_tokens_from_map({}, _strategy("ref-a"))

    def test_invalid_strategy_raises(self, ref_a: Reference) -> None:
        with pytest.raises(TokenMergeError):
            merge_tokens_from_map({"ref-a": ref_a}, _strategy("ghost"))


class TestCreateSimpleMergeStrategy:
    def test_no_overrides(self) -> None:
        strategy = create_simple_merge_strategy("ref-a")
        assert strategy.base == "ref-a"
        assert strategy.overrides == []

    def test_one_override_per_category(self) -> None:
        strategy = create_simple_merge_strategy("ref-a", colors="ref-b", spacing="ref-c")

        assert [(o.reference_id, o.path) for o in strategy.overrides] == [
            ("ref-b", "colors"),
            ("ref-c", "spacing"),
        ]
        assert not any(o.has_value for o in strategy.overrides)

    def test_merges_whole_colors(self, ref_a: Reference, ref_b: Reference) -> None:
        result = merge_tokens(
            MergeTokensInput(
                references=[ref_a, ref_b],
                strategy=create_simple_merge_strategy("ref-a", colors="ref-b"),
            )
        )
        assert result.design_system.colors == ref_b.tokens.colors


class TestComponentRun:
    def test_run_with_rules(self, ref_a: Reference, ref_b: Reference, rules_path) -> None:
        from src.rules.loader import load_rules

        rules = load_rules(rules_path)
        result = token_merger.run(
            MergeTokensInput(
                references=[ref_a, ref_b],
                strategy=_strategy("ref-a", ("ref-b", "colors.primary")),
            ),
            rules=rules.merger,
        )
        assert result.applied_overrides == ["colors.primary"]

    def test_build_config_defaults(self) -> None:
        assert token_merger.build_config(None) == token_merger.MERGER_CONFIG
