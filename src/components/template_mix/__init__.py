"""
Template mix component - assemble one token set from a section mapping.
"""

from ._impl import (
    DEFAULT_REFERENCE_NAME,
    build_section_merge_strategy,
    generate_reference_name,
    prepare_template,
    select_primary_reference,
)
from .component import run
from .models import PrepareTemplateInput, PrepareTemplateOutput, TemplateError

__all__ = [
    "run",
    "DEFAULT_REFERENCE_NAME",
    "build_section_merge_strategy",
    "generate_reference_name",
    "prepare_template",
    "select_primary_reference",
    "PrepareTemplateInput",
    "PrepareTemplateOutput",
    "TemplateError",
]
