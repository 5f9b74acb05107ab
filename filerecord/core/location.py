"""
filerecord Location Compiler — Turn a location specification into the glob
used for enumeration and the anchored regex used to parse paths.

A location is an ordered list of segments followed by one extension token:

    ["scripts", "*", "{name}", "rb"]      → scripts/*/*.rb
    ["{project}", "{title}", "{ext}"]     → */*.*
    ["projects", "{name}", "/"]           → projects/*   (directory records)

Segment tokens:
    "literal"     — matched verbatim
    "*"           — anything inside one path component, binds nothing
    "**"          — anything across components (may match zero of them)
    "{name}"      — placeholder, binds the attribute ``name``

Extension token:
    None          — no suffix rule
    "rb"          — literal extension
    "{ext}"       — suffix captured as the attribute ``ext``
    "/"           — directory marker, records are directories

Compilation is pure: the same LocationSpec always yields the same
CompiledLocation, so results are memoized.
"""

from __future__ import annotations

import functools
import glob
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from filerecord.engine.errors import LocationSpecError

WILDCARD = "*"
RECURSIVE_WILDCARD = "**"
DIRECTORY = "/"
SEPARATOR = "/"

_PLACEHOLDER_TOKEN = re.compile(r"^\{([A-Za-z_][A-Za-z0-9_]*)\}$")
_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class Placeholder:
    """Named segment: matches one or more non-separator characters."""

    name: str

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not _IDENTIFIER.match(self.name):
            raise LocationSpecError(
                f"Placeholder name must be an identifier, got {self.name!r}",
                tokens=[self.name],
            )

    def __str__(self) -> str:
        return "{" + self.name + "}"


Segment = Union[str, Placeholder]
Extension = Union[None, str, Placeholder]


def parse_token(token: Any) -> Segment:
    """Convert a raw token ("{name}", "*", "literal", Placeholder) to a segment."""
    if isinstance(token, Placeholder):
        return token
    if not isinstance(token, str):
        raise LocationSpecError(
            f"Location tokens must be strings or placeholders, got {token!r}",
            tokens=[token],
        )
    match = _PLACEHOLDER_TOKEN.match(token)
    if match:
        return Placeholder(match.group(1))
    return token


@dataclass(frozen=True)
class LocationSpec:
    """Ordered segments plus the terminal extension token."""

    segments: Tuple[Segment, ...]
    extension: Extension = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "segments", tuple(parse_token(s) for s in self.segments))
        if self.extension is not None:
            object.__setattr__(self, "extension", parse_token(self.extension))
        self._validate()

    @classmethod
    def from_tokens(cls, tokens: Sequence[Any]) -> "LocationSpec":
        """Build a spec from a token list whose last element is the extension."""
        tokens = list(tokens)
        if len(tokens) < 2:
            raise LocationSpecError(
                "A location needs at least one segment and an extension token",
                tokens=tokens,
            )
        return cls(segments=tuple(tokens[:-1]), extension=tokens[-1])

    def _validate(self) -> None:
        tokens = self.tokens()
        if not self.segments:
            raise LocationSpecError("A location needs at least one segment", tokens=tokens)

        recursive = [s for s in self.segments if s == RECURSIVE_WILDCARD]
        if len(recursive) > 1:
            raise LocationSpecError(
                f"At most one '{RECURSIVE_WILDCARD}' is allowed per location",
                tokens=tokens,
            )

        for segment in self.segments:
            if isinstance(segment, str) and not segment:
                raise LocationSpecError("Empty literal segment in location", tokens=tokens)

        if isinstance(self.extension, str) and self.extension in (WILDCARD, RECURSIVE_WILDCARD, ""):
            raise LocationSpecError(
                f"Invalid extension token {self.extension!r}", tokens=tokens
            )

        seen: set = set()
        for placeholder in self.placeholders:
            if placeholder.name in seen:
                raise LocationSpecError(
                    f"Duplicate placeholder '{placeholder.name}' in location",
                    tokens=tokens,
                )
            seen.add(placeholder.name)

    @property
    def placeholders(self) -> List[Placeholder]:
        """Placeholders in capture order (extension placeholder last)."""
        found = [s for s in self.segments if isinstance(s, Placeholder)]
        if isinstance(self.extension, Placeholder):
            found.append(self.extension)
        return found

    @property
    def is_directory(self) -> bool:
        return self.extension == DIRECTORY

    @property
    def has_wildcards(self) -> bool:
        return any(s in (WILDCARD, RECURSIVE_WILDCARD) for s in self.segments)

    def tokens(self) -> List[Optional[str]]:
        """Token-list form, suitable for YAML or display."""
        out: List[Optional[str]] = [str(s) for s in self.segments]
        out.append(None if self.extension is None else str(self.extension))
        return out

    def compile(self) -> "CompiledLocation":
        return compile_location(self)


@dataclass(frozen=True)
class CompiledLocation:
    """Glob pattern, anchored match pattern and capture order for one spec."""

    spec: LocationSpec
    glob_pattern: str
    match_pattern: str
    attribute_names: Tuple[str, ...]
    is_directory: bool
    regex: "re.Pattern[str]" = field(compare=False, repr=False)

    def match(self, path: str) -> Optional["re.Match[str]"]:
        return self.regex.match(path)

    def matches(self, path: str) -> bool:
        return self.regex.match(path) is not None


def _glob_for(spec: LocationSpec) -> str:
    parts: List[str] = []
    for segment in spec.segments:
        if isinstance(segment, Placeholder) or segment == WILDCARD:
            parts.append("*")
        elif segment == RECURSIVE_WILDCARD:
            parts.append("**")
        else:
            parts.append(glob.escape(segment))
    pattern = SEPARATOR.join(parts)

    extension = spec.extension
    if isinstance(extension, Placeholder):
        pattern += ".*"
    elif extension is not None and extension != DIRECTORY:
        pattern += "." + glob.escape(extension)
    return pattern


def _regex_for(spec: LocationSpec) -> Tuple[str, Tuple[str, ...]]:
    names: List[str] = []
    body = ""
    optional_separator = False

    for index, segment in enumerate(spec.segments):
        if index > 0:
            body += re.escape(SEPARATOR)
            if optional_separator:
                body += "?"
        optional_separator = False

        if isinstance(segment, Placeholder):
            names.append(segment.name)
            body += "([^/]+)"
        elif segment == RECURSIVE_WILDCARD:
            # the following separator is optional so '**' can match nothing
            optional_separator = True
            body += "(?:.*?)"
        elif segment == WILDCARD:
            body += "(?:[^/]*)"
        else:
            body += re.escape(segment)

    extension = spec.extension
    if isinstance(extension, Placeholder):
        names.append(extension.name)
        body += r"\.([^/]+)"
    elif extension is not None and extension != DIRECTORY:
        body += re.escape("." + extension)

    return r"\A" + body + r"\Z", tuple(names)


@functools.lru_cache(maxsize=None)
def _compile(spec: LocationSpec) -> CompiledLocation:
    match_pattern, names = _regex_for(spec)
    return CompiledLocation(
        spec=spec,
        glob_pattern=_glob_for(spec),
        match_pattern=match_pattern,
        attribute_names=names,
        is_directory=spec.is_directory,
        regex=re.compile(match_pattern),
    )


def compile_location(
    location: Union[LocationSpec, CompiledLocation, Iterable[Any]],
) -> CompiledLocation:
    """
    Compile a location specification.

    Accepts a LocationSpec, an already compiled location (returned as is),
    or a token list whose last element is the extension token.
    """
    if isinstance(location, CompiledLocation):
        return location
    if not isinstance(location, LocationSpec):
        location = LocationSpec.from_tokens(list(location))
    return _compile(location)


def describe(compiled: CompiledLocation) -> Dict[str, Any]:
    """Summary dict for CLI output and structured logs."""
    return {
        "tokens": compiled.spec.tokens(),
        "glob": compiled.glob_pattern,
        "match": compiled.match_pattern,
        "attributes": list(compiled.attribute_names),
        "directory": compiled.is_directory,
    }
