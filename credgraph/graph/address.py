"""Hierarchical addresses for graph nodes and edges.

An address is an ordered sequence of string components, e.g.
``NodeAddress.from_parts(["github", "issue", "123"])``. Plugins own
sub-namespaces and select them with ``has_prefix``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import ClassVar, Iterable

_SEPARATOR = "\0"


@dataclass(frozen=True, order=True)
class _Address:
    parts: tuple[str, ...] = ()

    kind: ClassVar[str] = "Address"

    def __post_init__(self) -> None:
        if not isinstance(self.parts, tuple):
            object.__setattr__(self, "parts", tuple(self.parts))
        for part in self.parts:
            if not isinstance(part, str):
                raise TypeError(
                    f"{self.kind} parts must be strings, got {type(part).__name__}"
                )
            if _SEPARATOR in part:
                raise ValueError(
                    f"{self.kind} part must not contain NUL: {part!r}"
                )

    @classmethod
    def from_parts(cls, parts: Iterable[str]):
        return cls(tuple(parts))

    @classmethod
    def empty(cls):
        """The zero-length address; a prefix of every address."""
        return cls(())

    @classmethod
    def parse(cls, text: str, separator: str = "/"):
        """Parse ``github/issue/123`` style text; empty text is the empty address."""
        if not text:
            return cls(())
        return cls(tuple(text.split(separator)))

    def to_parts(self) -> list[str]:
        return list(self.parts)

    def append(self, *components: str):
        return type(self)(self.parts + tuple(components))

    def has_prefix(self, prefix: "_Address") -> bool:
        if type(prefix) is not type(self):
            raise TypeError(
                f"expected {self.kind} prefix, got {type(prefix).__name__}"
            )
        return self.parts[: len(prefix.parts)] == prefix.parts

    def __len__(self) -> int:
        return len(self.parts)

    def __str__(self) -> str:
        return f"{self.kind}{json.dumps(list(self.parts), separators=(',', ':'))}"


class NodeAddress(_Address):
    kind = "NodeAddress"


class EdgeAddress(_Address):
    kind = "EdgeAddress"
