"""
filerecord Record Schema — the immutable description of one record type.

Produced once at registration: the compiled location, the base directory
(created if absent) and any association descriptors. Every store operation
reads from it; nothing mutates it afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable, Optional, Tuple, Union

from filerecord.core.location import CompiledLocation, LocationSpec, compile_location
from filerecord.engine.errors import InvalidBaseDirectoryError

if TYPE_CHECKING:
    from filerecord.core.associations import Association

logger = logging.getLogger("filerecord.core.schema")


def ensure_base_directory(directory: Union[str, Path], record_type: Optional[str] = None) -> Path:
    """Create ``directory`` if needed; fail if something else is in the way."""
    path = Path(directory).expanduser()
    if path.exists() and not path.is_dir():
        raise InvalidBaseDirectoryError(
            f"{path} is not a directory",
            record_type=record_type,
            path=str(path),
            operation="register",
        )
    try:
        path.mkdir(parents=True, exist_ok=True)
    except (FileExistsError, NotADirectoryError) as exc:
        raise InvalidBaseDirectoryError(
            f"{path} is not a directory: {exc}",
            record_type=record_type,
            path=str(path),
            operation="register",
        ) from exc
    return path.resolve()


@dataclass(frozen=True)
class RecordSchema:
    """Compiled, read-only state of a record type."""

    name: str
    location: CompiledLocation
    base_directory: Path
    associations: Tuple["Association", ...] = ()

    @classmethod
    def define(
        cls,
        name: str,
        location: Union[LocationSpec, CompiledLocation, Iterable[Any]],
        base_directory: Union[str, Path],
        associations: Iterable["Association"] = (),
    ) -> "RecordSchema":
        """Compile the location and prepare the base directory."""
        compiled = compile_location(location)
        base = ensure_base_directory(base_directory, record_type=name)
        schema = cls(
            name=name,
            location=compiled,
            base_directory=base,
            associations=tuple(associations),
        )
        logger.debug(
            f"Defined record type {name}: glob={compiled.glob_pattern!r} "
            f"attributes={list(compiled.attribute_names)} base={base}"
        )
        return schema

    @property
    def attribute_names(self) -> Tuple[str, ...]:
        return self.location.attribute_names

    @property
    def is_directory(self) -> bool:
        return self.location.is_directory

    @property
    def glob_pattern(self) -> str:
        return self.location.glob_pattern

    @property
    def match_pattern(self) -> str:
        return self.location.match_pattern

    def association(self, name: str) -> Optional["Association"]:
        for association in self.associations:
            if association.name == name:
                return association
        return None
