"""Path templates: placeholder parsing, URL substitution and request matching.

The canonical placeholder syntax is ``{name}``. The ``:name`` and ``[name]``
forms are accepted when a template is parsed and normalized to ``{name}``, so
``/pokemon/:name`` and ``/pokemon/{name}`` describe the same resource path.

A placeholder matches exactly one non-empty path segment (or the part of a
segment it occupies, as in ``/files/{name}.json``).
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from re import Pattern
from typing import Any, Final
from urllib.parse import quote

from schema_api.core.schema import stringify_param

_PLACEHOLDER_PATTERN: Final[Pattern[str]] = re.compile(
    r":(?P<colon>[A-Za-z_][A-Za-z0-9_]*)"
    r"|\[(?P<bracket>[^\]/]+)\]"
    r"|\{(?P<brace>[^}/]+)\}"
)


@dataclass(frozen=True, slots=True)
class Placeholder:
    """A named placeholder inside a path template."""

    name: str


@dataclass(frozen=True, slots=True)
class PathTemplate:
    """A parsed path template.

    Attributes:
        raw: The path as declared.
        canonical: The path with every placeholder rewritten as ``{name}``.
        parts: Literal strings and placeholders in order.
        params: Placeholder names in order of appearance (may repeat).
        regex: Full-match pattern used by the router.
    """

    raw: str
    canonical: str
    parts: tuple[str | Placeholder, ...]
    params: tuple[str, ...]
    regex: Pattern[str]

    @classmethod
    def parse(cls, path: str) -> "PathTemplate":
        """Parse a path declared with any supported placeholder syntax."""
        parts: list[str | Placeholder] = []
        position = 0
        for match in _PLACEHOLDER_PATTERN.finditer(path):
            if match.start() > position:
                parts.append(path[position : match.start()])
            name = match.group("colon") or match.group("bracket") or match.group("brace")
            parts.append(Placeholder(name))
            position = match.end()
        if position < len(path):
            parts.append(path[position:])

        canonical = "".join(
            f"{{{part.name}}}" if isinstance(part, Placeholder) else part
            for part in parts
        )
        params = tuple(part.name for part in parts if isinstance(part, Placeholder))

        # Group names are positional, placeholder names need not be identifiers
        pattern = ""
        group_index = 0
        for part in parts:
            if isinstance(part, Placeholder):
                pattern += f"(?P<p{group_index}>[^/]+)"
                group_index += 1
            else:
                pattern += re.escape(part)

        return cls(
            raw=path,
            canonical=canonical,
            parts=tuple(parts),
            params=params,
            regex=re.compile(pattern),
        )

    @property
    def static_segment_count(self) -> int:
        """Number of path segments that contain no placeholder."""
        segments = [segment for segment in self.canonical.split("/") if segment]
        return sum(1 for segment in segments if "{" not in segment)

    def build(self, values: Mapping[str, Any], *, escape: bool = False) -> str:
        """Substitute every placeholder with its stringified value.

        Args:
            values: Parameter values keyed by placeholder name.
            escape: Percent-encode substituted values.

        Returns:
            str: The concrete path.

        Raises:
            KeyError: If a placeholder has no value.
        """
        rendered: list[str] = []
        for part in self.parts:
            if isinstance(part, Placeholder):
                value = stringify_param(values[part.name])
                rendered.append(quote(value, safe="") if escape else value)
            else:
                rendered.append(part)
        return "".join(rendered)

    def match(self, path: str) -> dict[str, str] | None:
        """Match a request path, returning the raw placeholder values."""
        found = self.regex.fullmatch(path)
        if found is None:
            return None
        return {
            name: found.group(f"p{index}") for index, name in enumerate(self.params)
        }
