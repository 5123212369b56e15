"""Property value model: the scalar kinds a store can persist natively.

An encoded record is a flat list of ``(PropertyPath, PropertyValue)`` pairs.
Every value knows how to apply itself to an entity builder, which is the only
mutation a store adapter has to support for encoded records.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, NewType

from typed_entities.keys import Key

if TYPE_CHECKING:
    from typed_entities.entity import EntityBuilder


# One-character text, stored as a string property
Character = NewType("Character", str)

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1

PATH_SEPARATOR = "."


@dataclass(frozen=True)
class PropertyPath:
    """Ordered sequence of name segments addressing one stored property.

    The empty path is the root of a record. Rendered as a dot-joined string.
    """

    segments: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for segment in self.segments:
            if not segment:
                raise ValueError("Property path segments must not be empty")
            if PATH_SEPARATOR in segment:
                raise ValueError(f"Property path segment {segment!r} must not contain '.'")

    @classmethod
    def parse(cls, text: str) -> PropertyPath:
        """Parse a rendered path. The empty string is the root path."""
        if not text:
            return cls()
        return cls(tuple(text.split(PATH_SEPARATOR)))

    @property
    def is_root(self) -> bool:
        return not self.segments

    def child(self, segment: str | int) -> PropertyPath:
        """Return this path extended by one segment."""
        return PropertyPath(self.segments + (str(segment),))

    def __str__(self) -> str:
        return PATH_SEPARATOR.join(self.segments)

    def __repr__(self) -> str:
        return f"PropertyPath({str(self)!r})"


ROOT = PropertyPath()


@dataclass(frozen=True)
class GeoPoint:
    """A geographical position, with latitude and longitude in degrees."""

    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"Latitude {self.lat} out of range [-90, 90]")
        if not -180.0 <= self.lng <= 180.0:
            raise ValueError(f"Longitude {self.lng} out of range [-180, 180]")


class PropertyValue:
    """Base class for all storable property values."""

    kind: ClassVar[str] = "value"

    def apply(self, builder: EntityBuilder, path: PropertyPath | str) -> EntityBuilder:
        """Set this value on ``builder`` at ``path`` and return the builder."""
        return builder.set(str(path), self)


@dataclass(frozen=True)
class StringValue(PropertyValue):
    kind: ClassVar[str] = "string"

    value: str


@dataclass(frozen=True)
class IntegerValue(PropertyValue):
    """A signed 64-bit integer."""

    kind: ClassVar[str] = "integer"

    value: int

    def __post_init__(self) -> None:
        if not INT64_MIN <= self.value <= INT64_MAX:
            raise OverflowError(f"Integer {self.value} does not fit in 64 bits")


@dataclass(frozen=True)
class BooleanValue(PropertyValue):
    kind: ClassVar[str] = "boolean"

    value: bool


@dataclass(frozen=True)
class DoubleValue(PropertyValue):
    kind: ClassVar[str] = "double"

    value: float


@dataclass(frozen=True)
class GeoPointValue(PropertyValue):
    kind: ClassVar[str] = "geo_point"

    value: GeoPoint


@dataclass(frozen=True)
class KeyValue(PropertyValue):
    """A reference to another stored entity."""

    kind: ClassVar[str] = "key"

    value: Key


class TombstoneValue(PropertyValue):
    """Marker meaning "remove this property", distinct from never setting it.

    Use the ``TOMBSTONE`` singleton.
    """

    kind: ClassVar[str] = "tombstone"

    def apply(self, builder: EntityBuilder, path: PropertyPath | str) -> EntityBuilder:
        return builder.remove(str(path))

    def __eq__(self, other: object) -> bool:
        return isinstance(other, TombstoneValue)

    def __hash__(self) -> int:
        return hash(TombstoneValue)

    def __repr__(self) -> str:
        return "TOMBSTONE"


TOMBSTONE = TombstoneValue()


# An encoded record: ordered (path, value) pairs
FlatRecord = list[tuple[PropertyPath, PropertyValue]]
