"""Example usage of the typed_entities library."""

from dataclasses import dataclass, field
from typing import Optional

from typed_entities import (
    Dao,
    EntityConfig,
    InMemoryStore,
    Reference,
    Sealed,
    Service,
    configure_logging,
    default,
    transaction,
)


# Define the record types as plain dataclasses
@dataclass
class Address:
    city: str
    zip_code: int


class Pet(Sealed):
    pass


@dataclass
class Dog(Pet):
    good: bool


@dataclass
class Cat(Pet):
    lives: int


@dataclass
class Person:
    name: str = field(metadata={"id": True})
    age: int = 0
    address: Optional[Address] = None
    pets: list[Pet] = field(default_factory=list)
    friend: Optional[Reference["Person"]] = None


config = EntityConfig.from_env()
configure_logging(config.log_level)

# Build a service over an in-memory store
store = InMemoryStore()
service = Service.from_config(store, config)
people = Dao(Person, service)

# Save a few records; each save is its own round trip
alice = people.save(Person("alice", 30, Address("Paris", 75001), [Dog(True), Cat(9)]))
people.save(Person("bob", 25, friend=alice))

# Show the flattened properties the store holds
for key in (people.new_key("alice"), people.new_key("bob")):
    print(f"{key}:")
    for path, value in store.get(key).items():
        print(f"  {path} = {value!r}")

# Read everything back
for person in people.all():
    print(person)

# Follow a reference
bob = people.get("bob")
print(f"bob's friend: {bob.friend.apply(default(service), people.decoder)}")

# Write several records atomically
with transaction(service) as tx:
    people.save_all([Person("carol", 41), Person("dave", 52)], tx)

# Clear an optional field on the stored record
people.update(Person("alice", 31, None, [Dog(True), Cat(8)]))
print(people.get("alice"))

people.delete(Person("bob"))
print(f"{len(store)} records stored")
