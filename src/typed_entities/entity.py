"""Store-native entities and the builder encoded records are applied to."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from typed_entities.keys import Key
from typed_entities.values import PATH_SEPARATOR, PropertyPath, PropertyValue


class Entity(Mapping[str, PropertyValue]):
    """An immutable stored entity: a key plus rendered-path properties."""

    def __init__(self, key: Key, properties: Mapping[str, PropertyValue] | None = None) -> None:
        self.key = key
        self._properties: Mapping[str, PropertyValue] = MappingProxyType(dict(properties or {}))

    @property
    def properties(self) -> Mapping[str, PropertyValue]:
        return self._properties

    def __getitem__(self, path: str) -> PropertyValue:
        return self._properties[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._properties)

    def __len__(self) -> int:
        return len(self._properties)

    def to_builder(self) -> EntityBuilder:
        """Start a builder pre-populated with this entity's key and properties."""
        return EntityBuilder(self.key, self._properties)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity):
            return NotImplemented
        return self.key == other.key and dict(self._properties) == dict(other._properties)

    def __hash__(self) -> int:
        return hash(self.key)

    def __repr__(self) -> str:
        return f"Entity({self.key.path!r}, {dict(self._properties)!r})"


class EntityBuilder:
    """Mutable entity under construction."""

    def __init__(self, key: Key, properties: Mapping[str, PropertyValue] | None = None) -> None:
        self.key = key
        self._properties: dict[str, PropertyValue] = dict(properties or {})

    def set(self, path: str, value: PropertyValue) -> EntityBuilder:
        """Set the property at ``path``."""
        self._properties[path] = value
        return self

    def remove(self, path: str) -> EntityBuilder:
        """Remove the property at ``path`` and every property nested beneath it."""
        nested = path + PATH_SEPARATOR
        for existing in [p for p in self._properties if p == path or p.startswith(nested)]:
            del self._properties[existing]
        return self

    def build(self) -> Entity:
        return Entity(self.key, self._properties)


def build_entity(
    key: Key,
    record: Iterable[tuple[PropertyPath, PropertyValue]],
    base: Entity | None = None,
) -> Entity:
    """Fold an encoded record into an entity.

    Args:
        key: Key of the entity to build.
        record: Encoded (path, value) pairs, applied in order.
        base: Existing entity to update in place of an empty one. Tombstones
            in ``record`` clear the properties they address.

    Returns:
        The built entity.
    """
    builder = EntityBuilder(key, base.properties if base is not None else None)
    for path, value in record:
        builder = value.apply(builder, path)
    return builder.build()
