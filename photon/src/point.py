"""
Time-series point model shared by sources and sinks.

A Point is one measurement (name, tags, typed fields, optional timestamp).
Points is an ordered batch of them; sources return a Points batch and sinks
consume one.

Field values are limited to int, float, bool and str. ``bool`` is kept
distinct from ``int`` so that a boolean field is never written as ``1i``.

CHANGELOG:
- 2026-10-16: Initial creation

TODO:
- None
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

FieldValue = int | float | bool | str
"""Allowed field value types."""


@dataclass
class Point:
    """A single time-series measurement.

    Setters return the point itself so construction can be chained::

        Point("eco2mix").tag("region", "FR").field("nuclear", 41000).at(ts)

    Attributes:
        name: Measurement name.
        tags: Indexed string key/values.
        fields: Field name to value mapping.
        timestamp: Aware datetime of the sample, or ``None`` to let the sink
            stamp it with the write time.
    """

    name: str
    tags: dict[str, str] = field(default_factory=dict)
    fields: dict[str, FieldValue] = field(default_factory=dict)
    timestamp: datetime | None = None

    def tag(self, key: str, value: str) -> Point:
        self.tags[key] = value
        return self

    def field(self, key: str, value: FieldValue) -> Point:
        if not isinstance(value, int | float | bool | str):
            raise TypeError(
                f"Unsupported field type {type(value).__name__} for field '{key}'"
            )
        self.fields[key] = value
        return self

    def at(self, ts: datetime) -> Point:
        if ts.tzinfo is None:
            raise ValueError("Point timestamp must be timezone-aware")
        self.timestamp = ts
        return self

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "name": self.name,
            "tags": dict(self.tags),
            "fields": dict(self.fields),
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }


class Points:
    """Ordered batch of points."""

    def __init__(self, points: Iterable[Point] = ()) -> None:
        self._points: list[Point] = list(points)

    def add(self, point: Point) -> None:
        self._points.append(point)

    def merge_with(self, other: Points) -> None:
        """Append every point of *other* after the current ones."""
        self._points.extend(other)

    def tag_all(self, key: str, value: str) -> None:
        """Set (or overwrite) tag *key* on every point of the batch."""
        for point in self._points:
            point.tags[key] = value

    def to_list(self) -> list[dict[str, Any]]:
        return [point.to_dict() for point in self._points]

    def __iter__(self) -> Iterator[Point]:
        return iter(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def __getitem__(self, index: int) -> Point:
        return self._points[index]

    def __repr__(self) -> str:
        return f"Points({len(self._points)} points)"
