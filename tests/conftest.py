from collections.abc import Callable
from copy import deepcopy
from pathlib import Path
from typing import Any

import pytest

from src.domain.entities import DesignSystem, Reference

PROJECT_ROOT = Path(__file__).parent.parent

BASE_TOKENS: dict[str, Any] = {
    "meta": {
        "sourceUrl": "https://example.com",
        "extractedAt": "2025-01-01T00:00:00+00:00",
        "version": 1,
    },
    "colors": {
        "primary": ["#3b82f6", "#2563eb"],
        "secondary": ["#8b5cf6", "#7c3aed"],
        "neutral": ["#f5f5f5", "#e5e7eb", "#9ca3af"],
        "semantic": {
            "success": "#22c55e",
            "error": "#ef4444",
            "warning": "#f59e0b",
            "info": "#3b82f6",
        },
        "palettes": {
            "blue": {"50": "#eff6ff", "500": "#3b82f6", "900": "#1e3a8a"},
        },
    },
    "typography": {
        "fonts": {"heading": "Inter", "body": "Inter"},
        "scale": {
            "display": "72px",
            "h1": "48px",
            "h2": "36px",
            "h3": "28px",
            "h4": "24px",
            "h5": "20px",
            "h6": "18px",
            "body": "16px",
            "small": "14px",
            "xs": "12px",
        },
        "weights": [400, 500, 600, 700],
        "lineHeights": {"tight": 1.2, "normal": 1.5, "relaxed": 1.75},
    },
    "spacing": {
        "baseUnit": 4,
        "scale": [4, 8, 12, 16, 24, 32, 48, 64, 96],
        "containerMaxWidth": "1280px",
        "sectionPadding": {"mobile": "48px", "desktop": "96px"},
    },
    "effects": {
        "shadows": {
            "sm": "0 1px 2px rgba(0,0,0,0.05)",
            "md": "0 4px 6px rgba(0,0,0,0.1)",
            "lg": "0 10px 15px rgba(0,0,0,0.1)",
            "xl": "0 20px 25px rgba(0,0,0,0.1)",
        },
        "radii": {"sm": "4px", "md": "8px", "lg": "12px", "full": "9999px"},
        "transitions": {"fast": "150ms", "normal": "300ms", "slow": "500ms"},
    },
}


def build_tokens(**categories: dict[str, Any]) -> DesignSystem:
    """Base tokens with the given categories' keys replaced."""
    tree = deepcopy(BASE_TOKENS)
    for category, values in categories.items():
        tree[category].update(deepcopy(values))
    return DesignSystem.model_validate(tree)


MakeReference = Callable[..., Reference]


@pytest.fixture
def make_reference() -> MakeReference:
    """Factory for references built on the base tokens."""

    def _make(
        ref_id: str,
        *,
        name: str | None = None,
        status: str = "ready",
        with_tokens: bool = True,
        **categories: dict[str, Any],
    ) -> Reference:
        return Reference(
            id=ref_id,
            url=f"https://{ref_id}.example.com",
            name=name if name is not None else ref_id.title(),
            tokens=build_tokens(**categories) if with_tokens else None,
            status=status,  # type: ignore[arg-type]
        )

    return _make


@pytest.fixture
def ref_a(make_reference: MakeReference) -> Reference:
    return make_reference("ref-a", name="Alpha")


@pytest.fixture
def ref_b(make_reference: MakeReference) -> Reference:
    """Same as ref_a except for a red primary palette."""
    return make_reference("ref-b", name="Beta", colors={"primary": ["#ff0000"]})


@pytest.fixture
def rules_path() -> Path:
    return PROJECT_ROOT / "rules.yaml"
