"""Structural decoder: rebuilds typed values from stored properties."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Union

from loguru import logger

from typed_entities.errors import SerializationError
from typed_entities.reference import Reference
from typed_entities.types import (
    VARIANT_TAG,
    ArrayTypeDefinition,
    CompositeTypeDefinition,
    OptionalTypeDefinition,
    PrimitiveType,
    PrimitiveTypeDefinition,
    ReferenceTypeDefinition,
    SumTypeDefinition,
    SumTypeMode,
    TypeDefinition,
)
from typed_entities.values import (
    PATH_SEPARATOR,
    ROOT,
    TOMBSTONE,
    KeyValue,
    PropertyPath,
    PropertyValue,
    StringValue,
)

PropertySource = Union[Mapping[str, PropertyValue], Iterable[tuple[PropertyPath, PropertyValue]]]


class PropertyView:
    """Read access to a flat property collection, keyed by rendered path."""

    def __init__(self, source: PropertySource) -> None:
        if isinstance(source, Mapping):
            self._properties: Mapping[str, PropertyValue] = source
        else:
            self._properties = {str(path): value for path, value in source}
        self._ancestors: set[str] | None = None

    def get(self, path: PropertyPath) -> PropertyValue | None:
        return self._properties.get(str(path))

    def exists(self, path: PropertyPath) -> bool:
        """Return whether a property is stored at ``path`` or anywhere beneath it."""
        if path.is_root:
            return bool(self._properties)
        if self._ancestors is None:
            self._ancestors = set()
            for stored in self._properties:
                parts = stored.split(PATH_SEPARATOR)
                for end in range(1, len(parts) + 1):
                    self._ancestors.add(PATH_SEPARATOR.join(parts[:end]))
        return str(path) in self._ancestors


class Decoder:
    """Decodes values of one type definition from stored properties.

    Raises SerializationError when a required property is missing or holds
    the wrong kind of value. In untagged mode, sum types are decoded by trying
    each variant in declaration order and keeping the first that succeeds.
    Variants with identical fields therefore always decode as the first one.
    """

    def __init__(self, type_def: TypeDefinition, mode: SumTypeMode = SumTypeMode.UNTAGGED) -> None:
        self.type_def = type_def
        self.mode = mode

    def decode(self, properties: PropertySource | PropertyView, prefix: PropertyPath | str = ROOT) -> Any:
        """Decode a value stored under ``prefix``.

        Args:
            properties: An entity, a mapping of rendered paths to values, or
                an encoded record.
            prefix: Path the value was stored under.

        Returns:
            The decoded value.

        Raises:
            SerializationError: If required data is missing or malformed.
        """
        view = properties if isinstance(properties, PropertyView) else PropertyView(properties)
        if isinstance(prefix, str):
            prefix = PropertyPath.parse(prefix)
        return self._decode(self.type_def, view, prefix)

    def __call__(self, properties: PropertySource) -> Any:
        return self.decode(properties)

    def _decode(self, type_def: TypeDefinition, view: PropertyView, path: PropertyPath) -> Any:
        if isinstance(type_def, PrimitiveTypeDefinition):
            return _decode_primitive(type_def, view.get(path), path)
        elif isinstance(type_def, CompositeTypeDefinition):
            return self._decode_composite(type_def, view, path)
        elif isinstance(type_def, OptionalTypeDefinition):
            if view.get(path) == TOMBSTONE or not view.exists(path):
                return None
            return self._decode(type_def.inner, view, path)
        elif isinstance(type_def, ArrayTypeDefinition):
            elements = []
            while view.exists(path.child(len(elements))):
                elements.append(self._decode(type_def.element_type, view, path.child(len(elements))))
            return elements
        elif isinstance(type_def, SumTypeDefinition):
            if self.mode is SumTypeMode.TAGGED:
                return self._decode_tagged(type_def, view, path)
            return self._decode_untagged(type_def, view, path)
        elif isinstance(type_def, ReferenceTypeDefinition):
            prop = view.get(path)
            if not isinstance(prop, KeyValue):
                raise _mismatch("key", prop, path)
            return Reference(prop.value)
        raise SerializationError(f"Cannot decode type '{type_def.name}'", str(path))

    def _decode_composite(
        self, type_def: CompositeTypeDefinition, view: PropertyView, path: PropertyPath
    ) -> Any:
        values = {f.name: self._decode(f.type_def, view, path.child(f.name)) for f in type_def.fields}
        try:
            return type_def.python_type(**values)
        except Exception as e:
            raise SerializationError(f"Cannot construct {type_def.name}: {e}", str(path)) from e

    def _decode_untagged(
        self, type_def: SumTypeDefinition, view: PropertyView, path: PropertyPath
    ) -> Any:
        failures: list[str] = []
        for variant in type_def.variants:
            try:
                return self._decode(variant, view, path)
            except SerializationError as e:
                logger.debug(f"Variant {variant.name} did not match at {str(path)!r}: {e}")
                failures.append(f"{variant.name}: {e}")
        raise SerializationError(
            f"No variant of '{type_def.name}' could be decoded ({'; '.join(failures)})", str(path)
        )

    def _decode_tagged(
        self, type_def: SumTypeDefinition, view: PropertyView, path: PropertyPath
    ) -> Any:
        tag_path = path.child(VARIANT_TAG)
        tag = view.get(tag_path)
        if not isinstance(tag, StringValue):
            raise _mismatch("string", tag, tag_path)
        variant = type_def.get_variant(tag.value)
        if variant is None:
            raise SerializationError(f"Unknown variant '{tag.value}' for '{type_def.name}'", str(tag_path))
        return self._decode(variant, view, path)


def _decode_primitive(type_def: PrimitiveTypeDefinition, prop: PropertyValue | None, path: PropertyPath) -> Any:
    pt = type_def.primitive
    if not isinstance(prop, pt.value_class):
        raise _mismatch(pt.value_class.kind, prop, path)
    if pt is PrimitiveType.CHARACTER:
        if not prop.value:
            raise SerializationError("Empty string stored for a character", str(path))
        return prop.value[0]
    return prop.value  # type: ignore[attr-defined]


def _mismatch(expected: str, prop: PropertyValue | None, path: PropertyPath) -> SerializationError:
    if prop is None:
        return SerializationError(f"Missing {expected} property", str(path))
    return SerializationError(f"Expected {expected} property, found {prop.kind}", str(path))
