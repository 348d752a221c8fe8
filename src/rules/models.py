from pydantic import BaseModel, model_validator


class WeightsRules(BaseModel):
    color: float
    typography: float
    spacing: float

    @model_validator(mode="after")
    def check_sum(self) -> "WeightsRules":
        total = self.color + self.typography + self.spacing
        if abs(total - 1.0) > 0.001:
            raise ValueError(f"weights must sum to 1.0, got {total:.3f}")
        return self

class ThresholdsRules(BaseModel):
    high: int
    medium: int
    low: int

    @model_validator(mode="after")
    def check_order(self) -> "ThresholdsRules":
        if not self.high < self.medium < self.low:
            raise ValueError("thresholds must satisfy high < medium < low")
        return self

class ColorRules(BaseModel):
    clash_distance: float
    max_distance: float
    severity_step: float
    hue_weight: float
    saturation_weight: float
    lightness_weight: float
    neutral_score: int

class TypographyRules(BaseModel):
    scale_tolerance: float
    font_weight: float
    scale_weight: float
    mismatch_score: int

class SpacingRules(BaseModel):
    value_tolerance: float
    inconsistent_score: int
    neutral_score: int

class HarmonyRules(BaseModel):
    weights: WeightsRules
    thresholds: ThresholdsRules
    color: ColorRules
    typography: TypographyRules
    spacing: SpacingRules
    suggestion_score: int

class MergerRules(BaseModel):
    default_version: int
    supported_paths: dict[str, list[str]]

class TemplateRules(BaseModel):
    harmony: HarmonyRules
    merger: MergerRules
