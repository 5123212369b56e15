"""Structural encoder: flattens typed values into (path, value) pairs."""

from __future__ import annotations

from typing import Any

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
    ROOT,
    TOMBSTONE,
    FlatRecord,
    KeyValue,
    PropertyPath,
    StringValue,
)


class Encoder:
    """Encodes values of one type definition into a flat record.

    Records encode their fields in declaration order under ``prefix.field``.
    Sum types encode the runtime variant at the same prefix. ``None`` in an
    optional field encodes to a single tombstone. List element ``i`` is
    encoded under ``prefix.i``; an empty list encodes to nothing.

    With ``replace=True`` every list and sum type is preceded by a tombstone
    at its own path, so applying the record over a stored entity clears
    elements and variant fields the new value no longer has.
    """

    def __init__(self, type_def: TypeDefinition, mode: SumTypeMode = SumTypeMode.UNTAGGED) -> None:
        self.type_def = type_def
        self.mode = mode

    def encode(self, prefix: PropertyPath | str, value: Any, replace: bool = False) -> FlatRecord:
        """Encode ``value`` under ``prefix``.

        Args:
            prefix: Path the value is stored under; the root for a whole record.
            value: Value matching this encoder's type definition.
            replace: Clear list and sum type subtrees before writing them.

        Returns:
            Ordered (path, value) pairs.
        """
        if isinstance(prefix, str):
            prefix = PropertyPath.parse(prefix)
        out: FlatRecord = []
        self._encode(self.type_def, prefix, value, out, replace)
        return out

    def __call__(self, value: Any) -> FlatRecord:
        return self.encode(ROOT, value)

    def _encode(
        self,
        type_def: TypeDefinition,
        path: PropertyPath,
        value: Any,
        out: FlatRecord,
        replace: bool = False,
    ) -> None:
        if isinstance(type_def, PrimitiveTypeDefinition):
            out.append((path, _encode_primitive(type_def, value)))
        elif isinstance(type_def, CompositeTypeDefinition):
            if not isinstance(value, type_def.python_type):
                raise TypeError(f"Expected {type_def.name}, got {type(value).__name__}")
            for f in type_def.fields:
                self._encode(f.type_def, path.child(f.name), getattr(value, f.name), out, replace)
        elif isinstance(type_def, OptionalTypeDefinition):
            if value is None:
                out.append((path, TOMBSTONE))
            else:
                self._encode(type_def.inner, path, value, out, replace)
        elif isinstance(type_def, ArrayTypeDefinition):
            if replace:
                out.append((path, TOMBSTONE))
            for idx, element in enumerate(value):
                self._encode(type_def.element_type, path.child(idx), element, out, replace)
        elif isinstance(type_def, SumTypeDefinition):
            variant = type_def.variant_for(value)
            if replace:
                out.append((path, TOMBSTONE))
            if self.mode is SumTypeMode.TAGGED:
                out.append((path.child(VARIANT_TAG), StringValue(variant.name)))
            self._encode(variant, path, value, out, replace)
        elif isinstance(type_def, ReferenceTypeDefinition):
            out.append((path, KeyValue(value.key)))
        else:
            raise TypeError(f"Cannot encode type '{type_def.name}'")


def _encode_primitive(type_def: PrimitiveTypeDefinition, value: Any):
    pt = type_def.primitive
    if pt is PrimitiveType.CHARACTER:
        if not isinstance(value, str) or len(value) != 1:
            raise ValueError(f"Expected a single character, got {value!r}")
        return StringValue(value)
    if pt is PrimitiveType.INTEGER and isinstance(value, bool):
        raise TypeError(f"Expected integer, got bool {value!r}")
    if pt is PrimitiveType.DOUBLE:
        return pt.value_class(float(value))
    return pt.value_class(value)
