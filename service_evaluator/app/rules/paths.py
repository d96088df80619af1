"""
Dotted field paths and their resolution against a document.
"""

from dataclasses import dataclass
from typing import Any, Tuple

from .errors import FieldAccessError, InvalidPathError
from .values import JsonValue, value_kind


@dataclass(frozen=True)
class FieldPath:
    """A non-empty sequence of field names, e.g. ``height.feet``."""

    segments: Tuple[str, ...]

    def __post_init__(self):
        if not self.segments or any(not segment for segment in self.segments):
            raise InvalidPathError(".".join(self.segments))

    @classmethod
    def parse(cls, text: str) -> "FieldPath":
        """Split a dotted path; empty segments are rejected."""
        if not isinstance(text, str) or not text:
            raise InvalidPathError(str(text) if text is not None else "")
        segments = tuple(text.split("."))
        if any(not segment for segment in segments):
            raise InvalidPathError(text)
        return cls(segments)

    def __str__(self) -> str:
        return ".".join(self.segments)


def resolve(document: Any, path: FieldPath) -> JsonValue:
    """Walk ``path`` through ``document``.

    Every step requires the current value to be a mapping. A key missing at
    the last step resolves to ``None``; a key missing earlier leaves ``None``
    as the current value, so the next step fails with ``FieldAccessError``.
    """
    current = document
    for segment in path.segments:
        if not isinstance(current, dict):
            raise FieldAccessError(segment, value_kind(current))
        current = current.get(segment)
    return current
