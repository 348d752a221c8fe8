"""
Tree paths component - generic get/set/clone over nested data by dot path.
"""

from ._impl import (
    Tree,
    deep_clone,
    get_value_at_path,
    parse_token_path,
    set_value_at_path,
)

__all__ = [
    "Tree",
    "deep_clone",
    "get_value_at_path",
    "parse_token_path",
    "set_value_at_path",
]
