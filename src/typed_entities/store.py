"""Store adapter boundary.

These protocols are everything the library needs from a key-value store:
keyed reads, queries by kind and namespace, puts and deletes, transactions,
batches and key factories. Query semantics beyond "all entities of a kind in
a namespace" are never relied on.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Protocol, runtime_checkable

from typed_entities.entity import Entity
from typed_entities.keys import Key, KeyFactory, Namespace


@runtime_checkable
class StoreReader(Protocol):
    """Read side of a store or transaction."""

    def get(self, key: Key) -> Entity | None:
        """Return the entity stored under ``key``, or None."""
        ...

    def run_query(self, kind: str, namespace: str | None = None) -> Iterator[Entity]:
        """Return a forward-only cursor over every entity of ``kind``."""
        ...


@runtime_checkable
class StoreWriter(Protocol):
    """Write side of a store, transaction or batch."""

    def put(self, *entities: Entity) -> list[Entity]:
        """Store entities, replacing any with the same key."""
        ...

    def delete(self, *keys: Key) -> None:
        """Delete entities. Missing keys are ignored."""
        ...


@runtime_checkable
class StoreTransaction(StoreReader, StoreWriter, Protocol):
    """A transaction: staged writes applied all together, or not at all."""

    @property
    def active(self) -> bool:
        ...

    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        ...


@runtime_checkable
class StoreBatch(StoreWriter, Protocol):
    """Write-only accumulation sent in one round trip, without atomicity."""

    @property
    def active(self) -> bool:
        ...

    def submit(self) -> None:
        ...


@runtime_checkable
class StoreAdapter(StoreReader, StoreWriter, Protocol):
    """A store handle."""

    def new_transaction(self) -> StoreTransaction:
        ...

    def new_batch(self) -> StoreBatch:
        ...

    def new_key_factory(self, kind: str, namespace: Namespace | str | None = None) -> KeyFactory:
        ...
