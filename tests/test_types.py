"""Tests for the type registry."""

from dataclasses import dataclass, field
from typing import List, Optional, Union

import pytest

from typed_entities import Character, GeoPoint, Reference, Sealed
from typed_entities.types import (
    ArrayTypeDefinition,
    CompositeTypeDefinition,
    OptionalTypeDefinition,
    PrimitiveType,
    PrimitiveTypeDefinition,
    ReferenceTypeDefinition,
    SumTypeDefinition,
)


@dataclass
class Address:
    city: str
    zip_code: int


@dataclass
class Person:
    name: str = field(metadata={"id": True})
    age: int
    address: Optional[Address]
    tags: List[str]


@dataclass
class Node:
    value: int
    children: list["Node"]


@dataclass
class Circle:
    radius: float


@dataclass
class Square:
    side: float


class Vehicle(Sealed):
    pass


@dataclass
class Car(Vehicle):
    wheels: int


@dataclass
class Boat(Vehicle):
    sails: int


class Empty(Sealed):
    pass


@dataclass
class Pet:
    name: str
    owner: Reference[Person]


@dataclass
class Unsupported:
    attributes: dict[str, int]


class Document(Sealed):
    pass


@dataclass
class Letter(Document):
    text: str


@dataclass
class Form(Document):
    answers: dict[str, str]


class TestPrimitives:
    """Tests for primitive registration."""

    def test_python_types_map_to_primitives(self, registry):
        """Built-in Python types resolve to their primitive definitions."""
        expected = {
            str: PrimitiveType.STRING,
            int: PrimitiveType.INTEGER,
            bool: PrimitiveType.BOOLEAN,
            float: PrimitiveType.DOUBLE,
            Character: PrimitiveType.CHARACTER,
            GeoPoint: PrimitiveType.GEO_POINT,
        }
        for python_type, primitive in expected.items():
            type_def = registry.resolve(python_type)
            assert isinstance(type_def, PrimitiveTypeDefinition)
            assert type_def.primitive is primitive
            assert type_def.is_primitive

    def test_primitives_listed_by_name(self, registry):
        """Primitives are registered by name."""
        assert registry.get("integer").primitive is PrimitiveType.INTEGER
        assert "string" in registry.list_types()


class TestComposites:
    """Tests for dataclass registration."""

    def test_fields_in_declaration_order(self, registry):
        """Fields keep their declaration order."""
        person = registry.register(Person)
        assert isinstance(person, CompositeTypeDefinition)
        assert [f.name for f in person.fields] == ["name", "age", "address", "tags"]
        assert person.python_type is Person

    def test_field_shapes(self, registry):
        """Optional and list annotations resolve to their definitions."""
        person = registry.register(Person)
        address = person.get_field("address").type_def
        assert isinstance(address, OptionalTypeDefinition)
        assert address.inner is registry.resolve(Address)
        tags = person.get_field("tags").type_def
        assert isinstance(tags, ArrayTypeDefinition)
        assert tags.element_type.name == "string"

    def test_register_is_idempotent(self, registry):
        """Registering twice returns the same definition."""
        assert registry.register(Person) is registry.register(Person)
        assert Person in registry

    def test_recursive_type(self, registry):
        """A record may contain lists of itself."""
        node = registry.register(Node)
        children = node.get_field("children").type_def
        assert children.element_type is node

    def test_get_by_name(self, registry):
        """Registered records can be looked up by name."""
        registry.register(Person)
        assert registry.get_or_raise("Address").python_type is Address
        with pytest.raises(KeyError):
            registry.get_or_raise("Missing")

    def test_unsupported_field_type(self, registry):
        """Unsupported annotations fail at registration."""
        with pytest.raises(TypeError, match="Unsupported"):
            registry.register(Unsupported)
        assert Unsupported not in registry

    def test_reference_field(self, registry):
        """Reference annotations keep their target type."""
        pet = registry.register(Pet)
        owner = pet.get_field("owner").type_def
        assert isinstance(owner, ReferenceTypeDefinition)
        assert owner.target is Person
        assert owner.is_reference


class TestSumTypes:
    """Tests for unions and sealed hierarchies."""

    def test_union_variants_in_declaration_order(self, registry):
        """A union of records becomes a sum type over its members, in order."""
        shape = registry.resolve(Union[Circle, Square])
        assert isinstance(shape, SumTypeDefinition)
        assert [v.name for v in shape.variants] == ["Circle", "Square"]

    def test_optional_union(self, registry):
        """A union including None is an optional sum type."""
        shape = registry.resolve(Circle | Square | None)
        assert isinstance(shape, OptionalTypeDefinition)
        assert isinstance(shape.inner, SumTypeDefinition)
        assert len(shape.inner.variants) == 2

    def test_variant_for(self, registry):
        """The runtime variant is chosen by exact type."""
        shape = registry.resolve(Circle | Square)
        assert shape.variant_for(Square(2.0)).name == "Square"
        with pytest.raises(TypeError):
            shape.variant_for(Address("Paris", 75001))

    def test_sealed_hierarchy(self, registry):
        """Dataclass subclasses of a sealed root are its variants."""
        vehicle = registry.resolve(Vehicle)
        assert isinstance(vehicle, SumTypeDefinition)
        assert [v.name for v in vehicle.variants] == ["Car", "Boat"]
        assert registry.get("Vehicle") is vehicle

    def test_sealed_without_variants(self, registry):
        """A sealed root with no dataclass variants cannot be registered."""
        with pytest.raises(TypeError):
            registry.resolve(Empty)

    def test_failed_sealed_registration_is_not_cached(self, registry):
        """A sealed root whose variant cannot be registered fails every time."""
        with pytest.raises(TypeError, match="Unsupported"):
            registry.register(Document)
        assert Document not in registry
        assert registry.get("Document") is None
        with pytest.raises(TypeError, match="Unsupported"):
            registry.register(Document)

    def test_failed_union_registration_is_not_cached(self, registry):
        """A union with an unsupported member fails every time."""
        with pytest.raises(TypeError):
            registry.resolve(Circle | Unsupported)
        assert (Circle | Unsupported) not in registry
        with pytest.raises(TypeError):
            registry.resolve(Circle | Unsupported)


class TestCodecCache:
    """Tests for encoder and decoder caching."""

    def test_encoder_and_decoder_cached(self, registry):
        """Codecs are built once per type and mode."""
        assert registry.encoder(Person) is registry.encoder(Person)
        assert registry.decoder(Person) is registry.decoder(Person)
        assert registry.encoder(Person).type_def is registry.resolve(Person)
