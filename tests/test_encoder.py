"""Tests for the structural encoder."""

from dataclasses import dataclass
from typing import Optional

import pytest

from typed_entities import (
    TOMBSTONE,
    BooleanValue,
    Character,
    DoubleValue,
    GeoPoint,
    GeoPointValue,
    IntegerValue,
    Key,
    KeyValue,
    Reference,
    StringValue,
)


@dataclass
class Address:
    city: str
    zip_code: int


@dataclass
class Person:
    name: str
    age: int
    address: Address


@dataclass
class Contact:
    name: str
    nickname: Optional[str]
    tags: list[str]


@dataclass
class Circle:
    radius: float


@dataclass
class Square:
    side: float


@dataclass
class Drawing:
    title: str
    shape: Circle | Square


@dataclass
class Scalars:
    text: str
    count: int
    flag: bool
    ratio: float
    initial: Character
    location: GeoPoint


@dataclass
class Pet:
    name: str
    owner: Reference[Person]


def rendered(record):
    """Render paths to strings for readable comparisons."""
    return [(str(path), value) for path, value in record]


class TestProducts:
    """Tests for encoding records."""

    def test_nested_record_paths(self, registry):
        """Nested record fields are encoded under dot-joined paths, in declaration order."""
        person = Person("alice", 30, Address("Paris", 75001))
        record = registry.encoder(Person).encode("", person)
        assert rendered(record) == [
            ("name", StringValue("alice")),
            ("age", IntegerValue(30)),
            ("address.city", StringValue("Paris")),
            ("address.zip_code", IntegerValue(75001)),
        ]

    def test_prefix(self, registry):
        """A non-empty prefix is prepended to every path."""
        record = registry.encoder(Address).encode("home", Address("Oslo", 150))
        assert rendered(record) == [
            ("home.city", StringValue("Oslo")),
            ("home.zip_code", IntegerValue(150)),
        ]

    def test_encoding_is_deterministic(self, registry):
        """Encoding the same value twice gives identical records."""
        person = Person("alice", 30, Address("Paris", 75001))
        encoder = registry.encoder(Person)
        assert encoder.encode("", person) == encoder.encode("", person)

    def test_wrong_record_type(self, registry):
        """Encoding a value of another type is a programming error."""
        with pytest.raises(TypeError):
            registry.encoder(Person).encode("", Address("Paris", 75001))


class TestScalars:
    """Tests for encoding scalar kinds."""

    def test_scalar_kinds(self, registry):
        """Each Python scalar maps to its property value kind."""
        value = Scalars("hi", 7, True, 0.5, Character("x"), GeoPoint(1.5, -2.5))
        record = registry.encoder(Scalars)(value)
        assert rendered(record) == [
            ("text", StringValue("hi")),
            ("count", IntegerValue(7)),
            ("flag", BooleanValue(True)),
            ("ratio", DoubleValue(0.5)),
            ("initial", StringValue("x")),
            ("location", GeoPointValue(GeoPoint(1.5, -2.5))),
        ]

    def test_int_in_float_field(self, registry):
        """Integers stored in float fields are widened to doubles."""
        value = Scalars("hi", 7, False, 2, Character("x"), GeoPoint(0.0, 0.0))
        record = dict(rendered(registry.encoder(Scalars)(value)))
        assert record["ratio"] == DoubleValue(2.0)

    def test_character_must_be_one_letter(self, registry):
        """Character fields reject empty and multi-letter strings."""
        encoder = registry.encoder(Character)
        assert rendered(encoder("x")) == [("", StringValue("x"))]
        with pytest.raises(ValueError):
            encoder("ab")
        with pytest.raises(ValueError):
            encoder("")

    def test_bool_in_integer_field(self, registry):
        """Booleans are rejected where an integer is declared."""
        value = Scalars("hi", True, False, 0.5, Character("x"), GeoPoint(0.0, 0.0))
        with pytest.raises(TypeError, match="bool"):
            registry.encoder(Scalars)(value)

    def test_reference(self, registry):
        """References encode to their key."""
        key = Key("Person", "alice")
        record = registry.encoder(Pet)(Pet("rex", Reference(key)))
        assert rendered(record) == [("name", StringValue("rex")), ("owner", KeyValue(key))]


class TestOptionalsAndLists:
    """Tests for encoding optional and repeated fields."""

    def test_present_optional(self, registry):
        """A present optional encodes like its inner value."""
        record = registry.encoder(Contact)(Contact("bob", "Bobby", []))
        assert rendered(record) == [("name", StringValue("bob")), ("nickname", StringValue("Bobby"))]

    def test_absent_optional_is_tombstone(self, registry):
        """An absent optional encodes to exactly one tombstone."""
        record = registry.encoder(Contact)(Contact("bob", None, []))
        assert rendered(record) == [("name", StringValue("bob")), ("nickname", TOMBSTONE)]

    def test_list_indices(self, registry):
        """List elements are encoded under their index."""
        record = registry.encoder(Contact)(Contact("bob", None, ["a", "b", "c"]))
        assert rendered(record)[2:] == [
            ("tags.0", StringValue("a")),
            ("tags.1", StringValue("b")),
            ("tags.2", StringValue("c")),
        ]

    def test_root_list(self, registry):
        """A list encoded at the root uses bare indices."""
        record = registry.encoder(list[str]).encode("", ["a", "b", "c"])
        assert [str(path) for path, _ in record] == ["0", "1", "2"]

    def test_empty_list_encodes_nothing(self, registry):
        """An empty list produces no pairs."""
        record = registry.encoder(Contact)(Contact("bob", "Bobby", []))
        assert not any(str(path).startswith("tags") for path, _ in record)


class TestSumTypes:
    """Tests for encoding sum types."""

    def test_untagged_uses_same_prefix(self, registry):
        """The variant is encoded at the field's own path, with no tag."""
        record = registry.encoder(Drawing)(Drawing("sun", Circle(1.0)))
        assert rendered(record) == [("title", StringValue("sun")), ("shape.radius", DoubleValue(1.0))]

    def test_tagged_writes_variant_name(self, tagged_registry):
        """Tagged mode writes the variant name before the payload."""
        record = tagged_registry.encoder(Drawing)(Drawing("box", Square(2.0)))
        assert rendered(record) == [
            ("title", StringValue("box")),
            ("shape._variant", StringValue("Square")),
            ("shape.side", DoubleValue(2.0)),
        ]

    def test_not_a_variant(self, registry):
        """Encoding a value outside the sum is a programming error."""
        with pytest.raises(TypeError):
            registry.encoder(Drawing)(Drawing("bad", Address("Paris", 1)))  # type: ignore[arg-type]


class TestReplace:
    """Tests for encoding with subtree replacement."""

    def test_lists_and_sums_are_cleared_first(self, registry):
        """Replacement encoding writes a tombstone before each list and sum type."""
        record = registry.encoder(Contact).encode("", Contact("bob", "Bobby", ["a"]), replace=True)
        assert rendered(record) == [
            ("name", StringValue("bob")),
            ("nickname", StringValue("Bobby")),
            ("tags", TOMBSTONE),
            ("tags.0", StringValue("a")),
        ]
        record = registry.encoder(Drawing).encode("", Drawing("sun", Circle(1.0)), replace=True)
        assert rendered(record)[1:] == [("shape", TOMBSTONE), ("shape.radius", DoubleValue(1.0))]

    def test_default_writes_no_extra_tombstones(self, registry):
        """Plain encoding never writes tombstones for present values."""
        record = registry.encoder(Contact)(Contact("bob", "Bobby", ["a"]))
        assert TOMBSTONE not in [value for _, value in record]
