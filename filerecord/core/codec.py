"""
filerecord Path Codec — path ⇄ attributes.

- parse:       path → attribute map (via the anchored match pattern)
- synthesize:  attribute map → path (wildcard-free locations only)
- patch:       old path + changed attributes → new path, preserving every
               span that is not a changed placeholder byte-for-byte

Paths are relative to a base directory. Absolute paths and paths with '.'
or '..' components are rejected by parse and patch.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Mapping, Optional, Union

from filerecord.core.location import (
    DIRECTORY,
    SEPARATOR,
    CompiledLocation,
    LocationSpec,
    Placeholder,
)
from filerecord.engine.errors import PathMismatchError, UngeneratablePathError

PathLike = Union[str, "os.PathLike[str]"]


def normalize_path(path: PathLike) -> str:
    """Relative record paths always use '/' as separator."""
    text = os.fspath(path)
    if os.sep != SEPARATOR:
        text = text.replace(os.sep, SEPARATOR)
    return text


_UNSAFE_COMPONENTS = frozenset({".", ".."})


def is_contained(path: PathLike) -> bool:
    """False for absolute paths and paths with '.' or '..' components."""
    text = normalize_path(path)
    if text.startswith(SEPARATOR) or os.path.isabs(text):
        return False
    return not any(part in _UNSAFE_COMPONENTS for part in text.split(SEPARATOR))


def _ensure_contained(
    path: str,
    compiled: CompiledLocation,
    record_type: Optional[str],
    operation: str,
) -> None:
    if not is_contained(path):
        raise PathMismatchError(
            f"{path!r} escapes the base directory",
            record_type=record_type,
            path=path,
            pattern=compiled.match_pattern,
            operation=operation,
        )


def parse(path: PathLike, compiled: CompiledLocation, record_type: Optional[str] = None) -> Dict[str, str]:
    """Zip the capture groups of ``path`` to the location's attribute names."""
    path = normalize_path(path)
    _ensure_contained(path, compiled, record_type, "parse")
    match = compiled.match(path)
    if match is None:
        raise PathMismatchError(
            f"{path!r} doesn't match {compiled.match_pattern}",
            record_type=record_type,
            path=path,
            pattern=compiled.match_pattern,
            operation="parse",
        )
    return dict(zip(compiled.attribute_names, match.groups()))


def _value(attributes: Mapping[str, Any], name: str) -> Optional[str]:
    value = attributes.get(name)
    return None if value is None else str(value)


def synthesize(spec: LocationSpec, attributes: Mapping[str, Any]) -> Optional[str]:
    """
    Build a path from attributes alone.

    Returns None when the location has '*' or '**' segments. A missing
    attribute becomes an empty segment; a missing extension attribute falls
    back to the placeholder's own name.
    """
    if spec.has_wildcards:
        return None

    parts = []
    for segment in spec.segments:
        if isinstance(segment, Placeholder):
            parts.append(_value(attributes, segment.name) or "")
        else:
            parts.append(segment)
    path = SEPARATOR.join(parts)

    extension = spec.extension
    if isinstance(extension, Placeholder):
        value = _value(attributes, extension.name)
        path += "." + (value if value is not None else extension.name)
    elif extension is not None and extension != DIRECTORY:
        path += "." + extension
    return path


def patch(
    old_path: PathLike,
    compiled: CompiledLocation,
    attributes: Mapping[str, Any],
    record_type: Optional[str] = None,
) -> str:
    """
    Relocate ``old_path`` by substituting placeholder spans.

    A placeholder whose attribute is None keeps its original text, as do all
    literal and wildcard spans.
    """
    old_path = normalize_path(old_path)
    _ensure_contained(old_path, compiled, record_type, "patch")
    match = compiled.match(old_path)
    if match is None:
        raise PathMismatchError(
            f"{old_path!r} doesn't match {compiled.match_pattern}",
            record_type=record_type,
            path=old_path,
            pattern=compiled.match_pattern,
            operation="patch",
        )

    pieces = []
    previous_end = 0
    for index, name in enumerate(compiled.attribute_names, start=1):
        start, end = match.span(index)
        pieces.append(old_path[previous_end:start])
        value = _value(attributes, name)
        pieces.append(match.group(index) if value is None else value)
        previous_end = end
    pieces.append(old_path[previous_end:])
    new_path = "".join(pieces)
    _ensure_contained(new_path, compiled, record_type, "patch")
    return new_path


def derive_path(
    current_path: Optional[PathLike],
    compiled: CompiledLocation,
    attributes: Mapping[str, Any],
    record_type: Optional[str] = None,
) -> str:
    """Patch the current path, or synthesize one when there is none yet."""
    if current_path:
        return patch(current_path, compiled, attributes, record_type=record_type)

    path = synthesize(compiled.spec, attributes)
    if path is None:
        raise UngeneratablePathError(
            f"This {record_type or 'record'} has no path, and it was impossible "
            f"to generate one from its attributes (location {compiled.glob_pattern!r} "
            f"contains wildcards)",
            record_type=record_type,
            operation="derive_path",
        )
    return path
