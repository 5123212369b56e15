"""In-memory store adapter.

Implements the full store boundary against a dictionary. Transactions stage
their writes and apply them under a lock, restoring the previous state if any
write fails. Batches apply their writes one by one when submitted, so a
failure part way through leaves the earlier writes in place.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator

from loguru import logger

from typed_entities.entity import Entity
from typed_entities.keys import Key, KeyFactory, Namespace


class InMemoryStore:
    """Dictionary-backed store adapter."""

    # Number of keys fetched per page while iterating a query
    PAGE_SIZE = 100

    def __init__(self) -> None:
        self._entities: dict[Key, Entity] = {}
        self._lock = threading.RLock()

    # -- Reads --

    def get(self, key: Key) -> Entity | None:
        with self._lock:
            return self._entities.get(key)

    def run_query(self, kind: str, namespace: str | None = None) -> Iterator[Entity]:
        """Return a lazy cursor over every entity of ``kind`` in ``namespace``.

        Matching keys are collected when the query is issued; entities are
        fetched page by page as the cursor is consumed. Entities deleted in
        the meantime are skipped.
        """
        namespace = namespace or ""
        with self._lock:
            keys = [k for k in self._entities if k.kind == kind and k.namespace == namespace]
        logger.debug(f"Query issued: kind={kind!r}, namespace={namespace!r}, matches={len(keys)}")
        return self._cursor(keys)

    def _cursor(self, keys: list[Key]) -> Iterator[Entity]:
        for start in range(0, len(keys), self.PAGE_SIZE):
            with self._lock:
                page = [self._entities.get(k) for k in keys[start : start + self.PAGE_SIZE]]
            for entity in page:
                if entity is not None:
                    yield entity

    # -- Writes --

    def put(self, *entities: Entity) -> list[Entity]:
        with self._lock:
            for entity in entities:
                self._apply_put(entity)
        return list(entities)

    def delete(self, *keys: Key) -> None:
        with self._lock:
            for key in keys:
                self._apply_delete(key)

    def _apply_put(self, entity: Entity) -> None:
        """Store one entity. Every write path goes through here."""
        self._entities[entity.key] = entity

    def _apply_delete(self, key: Key) -> None:
        """Delete one entity. Every delete path goes through here."""
        self._entities.pop(key, None)

    def _apply_atomically(self, operations: list[tuple[str, Entity | Key]]) -> None:
        """Apply staged operations, restoring the previous state if one fails."""
        with self._lock:
            snapshot = dict(self._entities)
            try:
                self._apply_in_order(operations)
            except Exception:
                self._entities = snapshot
                raise

    def _apply_in_order(self, operations: list[tuple[str, Entity | Key]]) -> None:
        with self._lock:
            for op, target in operations:
                if op == "put":
                    self._apply_put(target)  # type: ignore[arg-type]
                else:
                    self._apply_delete(target)  # type: ignore[arg-type]

    # -- Scopes --

    def new_transaction(self) -> MemoryTransaction:
        return MemoryTransaction(self)

    def new_batch(self) -> MemoryBatch:
        return MemoryBatch(self)

    def new_key_factory(self, kind: str, namespace: Namespace | str | None = None) -> KeyFactory:
        return KeyFactory(kind, namespace)

    def __contains__(self, key: Key) -> bool:
        with self._lock:
            return key in self._entities

    def __len__(self) -> int:
        with self._lock:
            return len(self._entities)


class _StagedWrites:
    """Shared staging for transactions and batches."""

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store
        self._operations: list[tuple[str, Entity | Key]] = []
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def _check_active(self) -> None:
        if not self._active:
            raise RuntimeError(f"{type(self).__name__} is no longer active")

    def put(self, *entities: Entity) -> list[Entity]:
        self._check_active()
        self._operations.extend(("put", e) for e in entities)
        return list(entities)

    def delete(self, *keys: Key) -> None:
        self._check_active()
        self._operations.extend(("delete", k) for k in keys)

    @property
    def pending(self) -> int:
        """Number of staged operations."""
        return len(self._operations)


class MemoryTransaction(_StagedWrites):
    """Transaction over an InMemoryStore.

    Reads see committed data only, not this transaction's own staged writes.
    """

    def get(self, key: Key) -> Entity | None:
        self._check_active()
        return self._store.get(key)

    def run_query(self, kind: str, namespace: str | None = None) -> Iterator[Entity]:
        self._check_active()
        return self._store.run_query(kind, namespace)

    def commit(self) -> None:
        self._check_active()
        self._active = False
        self._store._apply_atomically(self._operations)

    def rollback(self) -> None:
        self._check_active()
        self._active = False
        self._operations.clear()


class MemoryBatch(_StagedWrites):
    """Batch over an InMemoryStore. Write-only."""

    def submit(self) -> None:
        self._check_active()
        self._active = False
        self._store._apply_in_order(self._operations)
