"""
Token merger component - base + override merging of design tokens.
"""

from ._impl import (
    apply_override,
    create_simple_merge_strategy,
    find_reference,
    is_supported_path,
    merge_tokens,
    merge_tokens_from_map,
    validate_merge_strategy,
    validate_reference_exists,
    validate_references_ready,
)
from .component import build_config, run
from .models import (
    DEFAULT_SUPPORTED_PATHS,
    MERGER_CONFIG,
    MergeOptions,
    MergerConfig,
    MergeTokensInput,
    MergeTokensResult,
    OverrideResult,
    TokenMergeError,
    ValidationResult,
)

__all__ = [
    # Entry points
    "run",
    "build_config",
    # Functions
    "apply_override",
    "create_simple_merge_strategy",
    "find_reference",
    "is_supported_path",
    "merge_tokens",
    "merge_tokens_from_map",
    "validate_merge_strategy",
    "validate_reference_exists",
    "validate_references_ready",
    # Models
    "DEFAULT_SUPPORTED_PATHS",
    "MERGER_CONFIG",
    "MergeOptions",
    "MergerConfig",
    "MergeTokensInput",
    "MergeTokensResult",
    "OverrideResult",
    "TokenMergeError",
    "ValidationResult",
]
