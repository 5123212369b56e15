"""Type definitions and the registry that derives them from Python annotations."""

from __future__ import annotations

import dataclasses
import types
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Union, get_args, get_origin, get_type_hints

from typed_entities.values import (
    BooleanValue,
    Character,
    DoubleValue,
    GeoPoint,
    GeoPointValue,
    IntegerValue,
    PropertyValue,
    StringValue,
)

if TYPE_CHECKING:
    from typed_entities.decoder import Decoder
    from typed_entities.encoder import Encoder


class PrimitiveType(Enum):
    """Scalar kinds with a native property representation."""

    STRING = "string"
    CHARACTER = "character"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    DOUBLE = "double"
    GEO_POINT = "geo_point"

    @property
    def value_class(self) -> type[PropertyValue]:
        """Return the property value class this primitive is stored as."""
        classes = {
            PrimitiveType.STRING: StringValue,
            PrimitiveType.CHARACTER: StringValue,  # One-character string
            PrimitiveType.INTEGER: IntegerValue,
            PrimitiveType.BOOLEAN: BooleanValue,
            PrimitiveType.DOUBLE: DoubleValue,
            PrimitiveType.GEO_POINT: GeoPointValue,
        }
        return classes[self]


# Mapping from Python types to the primitive they are stored as
PRIMITIVE_PYTHON_TYPES: dict[Any, PrimitiveType] = {
    str: PrimitiveType.STRING,
    Character: PrimitiveType.CHARACTER,
    int: PrimitiveType.INTEGER,
    bool: PrimitiveType.BOOLEAN,
    float: PrimitiveType.DOUBLE,
    GeoPoint: PrimitiveType.GEO_POINT,
}


class SumTypeMode(Enum):
    """How sum types are written and read back.

    UNTAGGED writes no discriminant and decodes by trying each alternative in
    declaration order; it matches data already stored that way. TAGGED writes
    the variant name at ``<prefix>._variant`` and decodes by that name.
    """

    UNTAGGED = "untagged"
    TAGGED = "tagged"


VARIANT_TAG = "_variant"


class Sealed:
    """Base for closed class hierarchies stored as sum types.

    A class deriving directly from ``Sealed`` is the root of a hierarchy; every
    dataclass defined beneath it becomes one of its variants, in definition
    order. Define all variants before the root is first registered.
    """

    __variants__: ClassVar[list[type]]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if Sealed in cls.__bases__:
            cls.__variants__ = []
            return
        for base in cls.__mro__[1:]:
            if "__variants__" in vars(base):
                base.__variants__.append(cls)
                break


@dataclass
class TypeDefinition:
    """Base class for all type definitions."""

    name: str

    @property
    def is_primitive(self) -> bool:
        return False

    @property
    def is_composite(self) -> bool:
        return False

    @property
    def is_optional(self) -> bool:
        return False

    @property
    def is_array(self) -> bool:
        return False

    @property
    def is_sum(self) -> bool:
        return False

    @property
    def is_reference(self) -> bool:
        return False


@dataclass
class PrimitiveTypeDefinition(TypeDefinition):
    """Type definition wrapping a primitive type."""

    primitive: PrimitiveType
    python_type: Any = None

    @property
    def is_primitive(self) -> bool:
        return True


@dataclass
class OptionalTypeDefinition(TypeDefinition):
    """A value that may be absent (``T | None``)."""

    inner: TypeDefinition

    @property
    def is_optional(self) -> bool:
        return True


@dataclass
class ArrayTypeDefinition(TypeDefinition):
    """A repeated field (``list[T]``)."""

    element_type: TypeDefinition

    @property
    def is_array(self) -> bool:
        return True


@dataclass
class FieldDefinition:
    """Definition of a field within a composite type."""

    name: str
    type_def: TypeDefinition


@dataclass
class CompositeTypeDefinition(TypeDefinition):
    """A record type backed by a dataclass.

    Fields are kept in declaration order; that order is the order in which
    they are encoded.
    """

    python_type: Any = None
    fields: list[FieldDefinition] = field(default_factory=list)

    @property
    def is_composite(self) -> bool:
        return True

    def get_field(self, name: str) -> FieldDefinition | None:
        """Get a field by name."""
        for f in self.fields:
            if f.name == name:
                return f
        return None


@dataclass
class SumTypeDefinition(TypeDefinition):
    """A closed set of alternatives (a ``Union`` or a ``Sealed`` hierarchy)."""

    variants: list[TypeDefinition] = field(default_factory=list)

    @property
    def is_sum(self) -> bool:
        return True

    def get_variant(self, name: str) -> TypeDefinition | None:
        """Get a variant by name."""
        for v in self.variants:
            if v.name == name:
                return v
        return None

    def variant_for(self, value: Any) -> TypeDefinition:
        """Return the variant whose Python type is exactly the type of ``value``."""
        for v in self.variants:
            if type(value) is getattr(v, "python_type", None):
                return v
        raise TypeError(
            f"{type(value).__name__} is not a variant of '{self.name}' "
            f"(expected one of {[v.name for v in self.variants]})"
        )


@dataclass
class ReferenceTypeDefinition(TypeDefinition):
    """A ``Reference[T]`` field, stored as a key."""

    target: Any = None

    @property
    def is_reference(self) -> bool:
        return True


class TypeRegistry:
    """Registry mapping Python types to their structural definitions.

    Definitions are derived from annotations once, on first use, and cached.
    """

    def __init__(self, sum_type_mode: SumTypeMode = SumTypeMode.UNTAGGED) -> None:
        self.sum_type_mode = sum_type_mode
        self._types: dict[Any, TypeDefinition] = {}
        self._by_name: dict[str, TypeDefinition] = {}
        self._encoders: dict[tuple[Any, SumTypeMode], Encoder] = {}
        self._decoders: dict[tuple[Any, SumTypeMode], Decoder] = {}
        self._register_primitives()

    def _register_primitives(self) -> None:
        """Register all primitive types."""
        for python_type, pt in PRIMITIVE_PYTHON_TYPES.items():
            type_def = PrimitiveTypeDefinition(name=pt.value, primitive=pt, python_type=python_type)
            self._types[python_type] = type_def
            self._by_name[type_def.name] = type_def

    def register(self, python_type: Any) -> TypeDefinition:
        """Register a Python type, returning its definition.

        Registering the same type twice returns the cached definition.

        Raises:
            TypeError: If the type, or any type it contains, is unsupported.
        """
        return self.resolve(python_type)

    def resolve(self, annotation: Any) -> TypeDefinition:
        """Get or derive the definition for an annotation."""
        cached = self._types.get(annotation)
        if cached is not None:
            return cached

        origin = get_origin(annotation)
        if origin is Union or origin is types.UnionType:
            type_def = self._resolve_union(annotation)
        elif origin is list:
            (element,) = get_args(annotation) or (None,)
            if element is None:
                raise TypeError("list fields need an element type, e.g. list[int]")
            element_def = self.resolve(element)
            type_def = ArrayTypeDefinition(name=f"{element_def.name}[]", element_type=element_def)
        elif origin is not None and _is_reference(origin):
            (target,) = get_args(annotation)
            type_def = ReferenceTypeDefinition(
                name=f"Reference[{getattr(target, '__name__', target)}]", target=target
            )
        elif origin is None and isinstance(annotation, type) and "__variants__" in vars(annotation):
            return self._resolve_sealed(annotation)
        elif origin is None and isinstance(annotation, type) and dataclasses.is_dataclass(annotation):
            return self._resolve_composite(annotation)
        else:
            raise TypeError(f"Unsupported field type: {annotation!r}")

        self._types[annotation] = type_def
        return type_def

    def _resolve_union(self, annotation: Any) -> TypeDefinition:
        """Resolve ``A | B`` to a sum type and ``T | None`` to an optional."""
        args = get_args(annotation)
        members = [a for a in args if a is not type(None)]
        if len(members) < len(args):
            inner = members[0] if len(members) == 1 else Union[tuple(members)]
            inner_def = self.resolve(inner)
            return OptionalTypeDefinition(name=f"{inner_def.name}?", inner=inner_def)

        sum_def = SumTypeDefinition(name=" | ".join(getattr(m, "__name__", str(m)) for m in members))
        self._types[annotation] = sum_def  # Allow self-reference through variants
        try:
            sum_def.variants = [self._resolve_variant(m, sum_def.name) for m in members]
        except (TypeError, ValueError):
            del self._types[annotation]
            raise
        return sum_def

    def _resolve_sealed(self, root: type) -> SumTypeDefinition:
        """Resolve a ``Sealed`` root to a sum over its dataclass subclasses."""
        members = [v for v in root.__variants__ if dataclasses.is_dataclass(v)]
        if not members:
            raise TypeError(f"Sealed type '{root.__name__}' has no dataclass variants")
        sum_def = SumTypeDefinition(name=root.__name__)
        self._types[root] = sum_def
        self._by_name[sum_def.name] = sum_def
        try:
            sum_def.variants = [self._resolve_variant(m, sum_def.name) for m in members]
        except (TypeError, ValueError):
            del self._types[root]
            del self._by_name[sum_def.name]
            raise
        return sum_def

    def _resolve_variant(self, member: Any, sum_name: str) -> TypeDefinition:
        variant = self.resolve(member)
        if not (variant.is_composite or variant.is_primitive):
            raise TypeError(
                f"Variant '{variant.name}' of '{sum_name}' must be a record or a primitive"
            )
        return variant

    def _resolve_composite(self, cls: type) -> CompositeTypeDefinition:
        """Resolve a dataclass, registering a stub first so fields may refer back to it."""
        name = cls.__name__
        existing = self._by_name.get(name)
        if existing is not None and getattr(existing, "python_type", None) is not cls:
            raise ValueError(f"Type '{name}' is already defined")

        composite = CompositeTypeDefinition(name=name, python_type=cls, fields=[])
        self._types[cls] = composite
        self._by_name[name] = composite

        try:
            hints = get_type_hints(cls)
        except NameError as e:
            del self._types[cls]
            del self._by_name[name]
            raise TypeError(f"Cannot resolve annotations of '{name}': {e}") from e

        try:
            for f in dataclasses.fields(cls):
                if not f.init:
                    continue
                composite.fields.append(FieldDefinition(name=f.name, type_def=self.resolve(hints[f.name])))
        except TypeError as e:
            del self._types[cls]
            del self._by_name[name]
            raise TypeError(f"In type '{name}': {e}") from e
        return composite

    def get(self, name: str) -> TypeDefinition | None:
        """Get a registered record, sum or primitive type by name."""
        return self._by_name.get(name)

    def get_or_raise(self, name: str) -> TypeDefinition:
        """Get a type by name, raising if not found."""
        type_def = self._by_name.get(name)
        if type_def is None:
            raise KeyError(f"Type '{name}' not found")
        return type_def

    def list_types(self) -> list[str]:
        """List all named type definitions."""
        return list(self._by_name.keys())

    def encoder(self, python_type: Any, mode: SumTypeMode | None = None) -> Encoder:
        """Return the cached encoder for a type."""
        from typed_entities.encoder import Encoder

        mode = mode or self.sum_type_mode
        cache_key = (python_type, mode)
        if cache_key not in self._encoders:
            self._encoders[cache_key] = Encoder(self.resolve(python_type), mode)
        return self._encoders[cache_key]

    def decoder(self, python_type: Any, mode: SumTypeMode | None = None) -> Decoder:
        """Return the cached decoder for a type."""
        from typed_entities.decoder import Decoder

        mode = mode or self.sum_type_mode
        cache_key = (python_type, mode)
        if cache_key not in self._decoders:
            self._decoders[cache_key] = Decoder(self.resolve(python_type), mode)
        return self._decoders[cache_key]

    def __contains__(self, python_type: Any) -> bool:
        return python_type in self._types


def _is_reference(origin: Any) -> bool:
    from typed_entities.reference import Reference

    return isinstance(origin, type) and issubclass(origin, Reference)

