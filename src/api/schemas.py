from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.components.harmony import HarmonyCheckOptions
from src.components.token_merger import MergeOptions
from src.domain.entities import MergeStrategy, Reference


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Harmony ---
class HarmonyOptionsModel(ApiModel):
    color_threshold: float | None = Field(default=None, ge=0, le=100)
    typography_threshold: float | None = Field(default=None, ge=0, le=100)
    spacing_threshold: float | None = Field(default=None, ge=0, le=100)
    color_weight: float | None = Field(default=None, ge=0, le=1)
    typography_weight: float | None = Field(default=None, ge=0, le=1)
    spacing_weight: float | None = Field(default=None, ge=0, le=1)

    def to_options(self) -> HarmonyCheckOptions:
        return HarmonyCheckOptions(**self.model_dump())


class HarmonyRequest(ApiModel):
    references: list[Reference] = Field(min_length=2)
    section_mapping: dict[str, str | None] | None = None
    options: HarmonyOptionsModel | None = None


class HarmonyResponse(BaseModel):
    success: bool = True
    result: dict[str, Any]


# --- Merge ---
class MergeOptionsModel(ApiModel):
    strict: bool = False
    timestamp: str | None = None
    allow_partial_paths: bool = True

    def to_options(self) -> MergeOptions:
        return MergeOptions(**self.model_dump())


class MergeRequest(ApiModel):
    references: list[Reference] = Field(min_length=1)
    strategy: MergeStrategy
    options: MergeOptionsModel | None = None


class MergeResponse(BaseModel):
    success: bool = True
    result: dict[str, Any]
