from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# --- Enums / Literals ---
ReferenceStatus = Literal["pending", "processing", "ready", "error"]
SectionType = Literal[
    "header",
    "hero",
    "features",
    "testimonials",
    "pricing",
    "cta",
    "footer",
]
TokenCategory = Literal["colors", "typography", "spacing", "effects"]

# Section type -> reference id or stringified index into the reference list.
SectionMapping = dict[str, str | None]

TOKEN_CATEGORIES: tuple[TokenCategory, ...] = ("colors", "typography", "spacing", "effects")


class TokenModel(BaseModel):
    """Base for token models: camelCase on the wire, unknown keys preserved."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


# --- Design System ---

class TokenMeta(TokenModel):
    source_url: str = ""
    extracted_at: str = ""
    version: int = 1

class SemanticColors(TokenModel):
    success: str = ""
    error: str = ""
    warning: str = ""
    info: str = ""

class ColorTokens(TokenModel):
    primary: list[str] = Field(default_factory=list)
    secondary: list[str] = Field(default_factory=list)
    neutral: list[str] = Field(default_factory=list)
    semantic: SemanticColors = Field(default_factory=SemanticColors)
    palettes: dict[str, dict[str, str]] = Field(default_factory=dict)

class FontFamilies(TokenModel):
    heading: str = ""
    body: str = ""
    mono: str | None = None

class TypeScale(TokenModel):
    display: str | float = ""
    h1: str | float = ""
    h2: str | float = ""
    h3: str | float = ""
    h4: str | float = ""
    h5: str | float = ""
    h6: str | float = ""
    body: str | float = ""
    small: str | float = ""
    xs: str | float = ""

class TypographyTokens(TokenModel):
    fonts: FontFamilies = Field(default_factory=FontFamilies)
    scale: TypeScale = Field(default_factory=TypeScale)
    weights: list[int] = Field(default_factory=list)
    line_heights: dict[str, float] = Field(default_factory=dict)

class SectionPadding(TokenModel):
    mobile: str | float = ""
    desktop: str | float = ""

class SpacingTokens(TokenModel):
    base_unit: float = 0
    scale: list[float] = Field(default_factory=list)
    container_max_width: str | float = ""
    section_padding: SectionPadding = Field(default_factory=SectionPadding)

class ShadowTokens(TokenModel):
    sm: str = ""
    md: str = ""
    lg: str = ""
    xl: str = ""

class RadiusTokens(TokenModel):
    sm: str = ""
    md: str = ""
    lg: str = ""
    full: str = ""

class TransitionTokens(TokenModel):
    fast: str = ""
    normal: str = ""
    slow: str = ""

class EffectsTokens(TokenModel):
    shadows: ShadowTokens = Field(default_factory=ShadowTokens)
    radii: RadiusTokens = Field(default_factory=RadiusTokens)
    transitions: TransitionTokens = Field(default_factory=TransitionTokens)

class DesignSystem(TokenModel):
    """One website's extracted design tokens."""

    meta: TokenMeta = Field(default_factory=TokenMeta)
    colors: ColorTokens
    typography: TypographyTokens
    spacing: SpacingTokens
    effects: EffectsTokens

    def to_tree(self) -> dict[str, Any]:
        """Plain nested dict/list form, keyed the way token paths address it."""
        return self.model_dump(by_alias=True, mode="json")


def design_system_from_tree(tree: dict[str, Any]) -> DesignSystem:
    """
    Validating cast from an untyped token tree back to a DesignSystem.

    Raises pydantic.ValidationError if the tree no longer has the expected shape.
    """
    return DesignSystem.model_validate(tree)


def tokens_equal(left: DesignSystem | dict[str, Any], right: DesignSystem | dict[str, Any]) -> bool:
    """Structural equality of two token sets, independent of key order."""
    left_tree = left.to_tree() if isinstance(left, DesignSystem) else left
    right_tree = right.to_tree() if isinstance(right, DesignSystem) else right
    return left_tree == right_tree


# --- Template Mode ---

class Reference(TokenModel):
    """A user-added source website and its extraction state."""

    id: str
    url: str = ""
    name: str | None = None
    tokens: DesignSystem | None = None
    sections: list[dict[str, Any]] = Field(default_factory=list)
    status: ReferenceStatus = "pending"

    @property
    def display_name(self) -> str:
        return self.name or self.id

    @property
    def is_ready(self) -> bool:
        return self.status == "ready" and self.tokens is not None

class TokenOverride(TokenModel):
    reference_id: str
    path: str
    value: Any = None

    @property
    def has_value(self) -> bool:
        """True when an explicit replacement value was supplied (even None)."""
        return "value" in self.model_fields_set

class MergeStrategy(TokenModel):
    base: str
    overrides: list[TokenOverride] = Field(default_factory=list)
