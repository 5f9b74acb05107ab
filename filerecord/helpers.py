"""
filerecord Helpers — identifiers and URLs for records.

A record's path ends in an extension ("scripts/util/helper.rb"). Web
frameworks tend to read a trailing ".rb" as a response format, so the
external identifier replaces the last dot of the final path component
with ``~`` ("scripts/util/helper~rb"); ``decode_id`` reverses it.

Inside the final component a literal ``~`` is written ``%7E`` and a literal
``%`` is written ``%25``, so a bare ``~`` only ever marks the extension and
``decode_id(encode_id(path)) == path`` for every path. ``record_url``
percent-quotes the identifier, so these escapes survive URL decoding.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Optional, Union
from urllib.parse import quote, urlencode

from filerecord.utilities.utils import tableize

if TYPE_CHECKING:
    from filerecord.core.record import Record
    from filerecord.core.store import RecordStore

EXTENSION_SEPARATOR = "~"

_ESCAPED = re.compile(r"%(25|7E)")


def _split_last(path: str, char: str):
    head, sep, name = path.rpartition("/")
    stem, found, suffix = name.rpartition(char)
    if not found or not stem:
        return None
    return head + sep + stem, suffix


def encode_id(path: str) -> str:
    """'a/b/name.ext' → 'a/b/name~ext'. Paths without an extension keep their dots."""
    head, sep, name = path.rpartition("/")
    name = name.replace("%", "%25").replace(EXTENSION_SEPARATOR, "%7E")
    stem, dot, suffix = name.rpartition(".")
    if dot and stem:
        name = f"{stem}{EXTENSION_SEPARATOR}{suffix}"
    return head + sep + name


def decode_id(identifier: str) -> str:
    """Inverse of encode_id()."""
    head, sep, name = identifier.rpartition("/")
    stem, marker, suffix = name.rpartition(EXTENSION_SEPARATOR)
    if marker:
        name = f"{stem}.{suffix}"
    name = _ESCAPED.sub(lambda m: "%" if m.group(1) == "25" else EXTENSION_SEPARATOR, name)
    return head + sep + name


def force_extension(path: str, new_extension: Optional[str] = None) -> str:
    """Strip a trailing '.ext' from ``path`` and append ``new_extension`` if given."""
    parts = _split_last(path, ".")
    if parts is not None:
        path = parts[0]
    if new_extension:
        return f"{path}.{new_extension}"
    return path


def record_url(
    action: str,
    record: Union["Record", str, None],
    controller: Optional[str] = None,
    format: Optional[str] = None,
    **params: Any,
) -> str:
    """
    Build '/<controller>/<action>/<id>[.<format>][?query]' for a record.

    ``controller`` defaults to the tableized record type name.
    """
    if controller is None:
        if record is None or isinstance(record, str):
            raise ValueError("controller is required when no record is given")
        controller = tableize(record.schema.name)

    identifier = record if isinstance(record, str) or record is None else record.id
    if identifier:
        identifier = quote(identifier, safe="/~")
    segments = ["", controller, action]
    if identifier:
        segments.append(identifier)
    url = "/".join(segments)

    if format is not None:
        url = force_extension(url, format)
    if params:
        url += "?" + urlencode(params)
    return url


def find_by_id(store: "RecordStore", identifier: str) -> Optional["Record"]:
    """Look a record up by its external identifier."""
    return store.find(decode_id(identifier))
