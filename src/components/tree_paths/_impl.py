"""
Tree path utilities - dot-path addressing over untyped nested data.

Operates on any mix of dicts, lists and scalars. Knows nothing about the
shape of a design system; the token merger is the only caller that does.

Key behaviors:
- Empty path segments are discarded ("a..b" == "a.b")
- Lists are addressed by in-range integer segments ("scale.0")
- Setting a path creates intermediate dicts, replacing scalars in the way
- Lists are never replaced; an index equal to the length appends, one
  past it makes the set fail without touching the tree
"""

from __future__ import annotations

from typing import Any

Tree = Any


def parse_token_path(path: str) -> list[str]:
    """Split a dot-delimited path into its non-empty segments."""
    return [segment for segment in path.split(".") if segment]


def _list_index(container: list[Any], segment: str) -> int | None:
    """Return the integer index for segment if it addresses an existing list slot."""
    if not segment.isdigit():
        return None
    index = int(segment)
    if index >= len(container):
        return None
    return index


def get_value_at_path(tree: Tree, segments: list[str], default: Any = None) -> Any:
    """
    Walk tree along segments and return the value found there.

    Returns tree itself for an empty segment list, and default as soon as
    the walk hits a missing key, an out-of-range index, or a scalar.
    """
    current = tree

    for segment in segments:
        if isinstance(current, dict):
            if segment not in current:
                return default
            current = current[segment]
        elif isinstance(current, list):
            index = _list_index(current, segment)
            if index is None:
                return default
            current = current[index]
        else:
            return default

    return current


def _accepts(container: Any, segment: str) -> bool:
    """Check whether container can hold a value under segment."""
    if isinstance(container, dict):
        return True
    if isinstance(container, list):
        return segment.isdigit() and int(segment) <= len(container)
    return False


def _get_child(container: dict[str, Any] | list[Any], segment: str) -> Any:
    if isinstance(container, dict):
        return container.get(segment)
    index = int(segment)
    return container[index] if index < len(container) else None


def _put_child(container: dict[str, Any] | list[Any], segment: str, value: Any) -> None:
    if isinstance(container, dict):
        container[segment] = value
    elif int(segment) == len(container):
        container.append(value)
    else:
        container[int(segment)] = value


def _writable(tree: Tree, segments: list[str]) -> bool:
    """Check that every list on the path can take the segment after it."""
    if not _accepts(tree, segments[0]):
        return False

    current = tree
    for position, segment in enumerate(segments[:-1]):
        child = _get_child(current, segment)
        if isinstance(child, list):
            if not _accepts(child, segments[position + 1]):
                return False
        elif not isinstance(child, dict):
            # Everything below here is created fresh
            return True
        current = child

    return True


def set_value_at_path(tree: Tree, segments: list[str], value: Any) -> bool:
    """
    Assign value at the path, mutating tree in place.

    Intermediate dicts are created when missing, or when the existing value
    is a scalar. Returns False without touching tree for an empty path, or
    when tree or a list on the path cannot hold the next segment.
    """
    if not segments or not _writable(tree, segments):
        return False

    current = tree
    for position, segment in enumerate(segments[:-1]):
        next_segment = segments[position + 1]
        child = _get_child(current, segment)

        if not _accepts(child, next_segment):
            child = {}
            _put_child(current, segment, child)

        current = child

    _put_child(current, segments[-1], value)
    return True


def deep_clone(value: Any) -> Any:
    """Recursively copy dicts, lists and tuples; everything else is returned as is."""
    if isinstance(value, dict):
        return {key: deep_clone(item) for key, item in value.items()}
    if isinstance(value, list):
        return [deep_clone(item) for item in value]
    if isinstance(value, tuple):
        return tuple(deep_clone(item) for item in value)
    return value
