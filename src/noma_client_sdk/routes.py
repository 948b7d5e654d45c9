from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable

PLACEHOLDER_PREFIX = ":"


@dataclass(frozen=True)
class RoutePattern:
    """A route such as ``/orders/:id`` split into ``/``-delimited segments.

    Paths are compared segment by segment without normalisation, so
    ``/orders/42/`` has one more (empty) segment than ``/orders/42``.
    Placeholders match any non-empty segment.
    """

    raw: str
    segments: tuple[str, ...]
    placeholders: frozenset[int]

    @classmethod
    def parse(cls, pattern: str) -> "RoutePattern":
        segments = tuple(pattern.split("/"))
        placeholders = frozenset(
            index for index, segment in enumerate(segments) if segment.startswith(PLACEHOLDER_PREFIX)
        )
        return cls(raw=pattern, segments=segments, placeholders=placeholders)

    @property
    def is_static(self) -> bool:
        return not self.placeholders

    def matches(self, path: str) -> bool:
        if path == self.raw:
            return True
        if self.is_static:
            return False
        parts = path.split("/")
        if len(parts) != len(self.segments):
            return False
        for index, (expected, actual) in enumerate(zip(self.segments, parts)):
            if index in self.placeholders:
                if not actual:
                    return False
            elif expected != actual:
                return False
        return True

    def params(self, path: str) -> dict[str, str] | None:
        if not self.matches(path):
            return None
        parts = path.split("/")
        return {self.segments[index][1:]: parts[index] for index in sorted(self.placeholders)}


@lru_cache(maxsize=256)
def compile_route(pattern: str) -> RoutePattern:
    return RoutePattern.parse(pattern)


def is_route_match(pattern: str, path: str) -> bool:
    return compile_route(pattern).matches(path)


def match_any(patterns: Iterable[str], path: str) -> bool:
    return any(is_route_match(pattern, path) for pattern in patterns)
