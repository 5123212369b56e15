"""Execution contexts: where and how groups of entities are written.

- DefaultContext: each call is its own round trip.
- TransactionContext: reads and staged writes, committed all together or
  rolled back.
- BatchContext: write-only; staged writes are sent together on submit, and a
  failure part way through may leave some of them applied.

Write operations never raise for store failures; they return a WriteResult
carrying a DatabaseError that the caller must inspect or unwrap.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

from loguru import logger

from typed_entities.entity import Entity
from typed_entities.errors import DatabaseError
from typed_entities.keys import Key

if TYPE_CHECKING:
    from typed_entities.service import Service
    from typed_entities.store import StoreBatch, StoreReader, StoreTransaction, StoreWriter


@dataclass(frozen=True)
class WriteResult:
    """Outcome of a context write operation.

    Attributes:
        error: The wrapped store failure, or None on success.
    """

    error: DatabaseError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> None:
        """Raise the wrapped DatabaseError, if any."""
        if self.error is not None:
            raise self.error from self.error.cause

    @classmethod
    def capture(cls, operation: Callable[[], object], description: str) -> WriteResult:
        """Run a store operation, wrapping any failure."""
        try:
            operation()
        except Exception as e:
            logger.warning(f"Store operation failed: {description}: {e!r}")
            return cls(DatabaseError(e))
        return cls()


class Context:
    """Base class for execution contexts."""

    write: StoreWriter

    def __init__(self, service: Service) -> None:
        self.service = service

    def save_all(self, entities: Iterable[Entity]) -> WriteResult:
        """Write entities in the given order."""
        entities = list(entities)
        logger.debug(f"{type(self).__name__}: saving {len(entities)} entities")
        return WriteResult.capture(lambda: self.write.put(*entities), f"put {len(entities)} entities")

    def delete_all(self, keys: Iterable[Key]) -> WriteResult:
        """Delete entities by key, in the given order."""
        keys = list(keys)
        logger.debug(f"{type(self).__name__}: deleting {len(keys)} keys")
        return WriteResult.capture(lambda: self.write.delete(*keys), f"delete {len(keys)} keys")


class ReadContext(Context):
    """A context with read capability."""

    read: StoreReader

    def get(self, key: Key) -> Entity | None:
        """Read one entity.

        Raises:
            DatabaseError: If the store read fails.
        """
        try:
            return self.read.get(key)
        except Exception as e:
            raise DatabaseError(e) from e

    def run_query(self, kind: str, namespace: str | None = None) -> Iterator[Entity]:
        """Query every entity of ``kind`` in ``namespace``.

        Raises:
            DatabaseError: If the query cannot be issued.
        """
        try:
            return self.read.run_query(kind, namespace)
        except Exception as e:
            raise DatabaseError(e) from e


class DefaultContext(ReadContext):
    """No explicit scope: each write call is sent as its own store batch."""

    def __init__(self, service: Service) -> None:
        super().__init__(service)
        self.read = service.store
        self.write = service.store

    def save_all(self, entities: Iterable[Entity]) -> WriteResult:
        entities = list(entities)
        logger.debug(f"DefaultContext: saving {len(entities)} entities")

        def run() -> None:
            store_batch = self.service.store.new_batch()
            store_batch.put(*entities)
            store_batch.submit()

        return WriteResult.capture(run, f"put {len(entities)} entities")

    def delete_all(self, keys: Iterable[Key]) -> WriteResult:
        keys = list(keys)
        logger.debug(f"DefaultContext: deleting {len(keys)} keys")

        def run() -> None:
            store_batch = self.service.store.new_batch()
            store_batch.delete(*keys)
            store_batch.submit()

        return WriteResult.capture(run, f"delete {len(keys)} keys")


class TransactionContext(ReadContext):
    """Reads and writes through one store transaction."""

    def __init__(self, service: Service) -> None:
        super().__init__(service)
        self.tx: StoreTransaction = service.store.new_transaction()
        self.read = self.tx
        self.write = self.tx

    @property
    def active(self) -> bool:
        return self.tx.active

    def commit(self) -> WriteResult:
        """Apply every staged write. On failure none of them are applied."""
        result = WriteResult.capture(self.tx.commit, "commit transaction")
        if result.ok:
            logger.info("Transaction committed")
        return result

    def rollback(self) -> None:
        """Discard every staged write."""
        if self.tx.active:
            self.tx.rollback()
            logger.warning("Transaction rolled back")


class BatchContext(Context):
    """Write-only accumulation sent in one round trip.

    There is no atomicity: if submitting fails, writes applied before the
    failure stay applied.
    """

    def __init__(self, service: Service) -> None:
        super().__init__(service)
        self.batch: StoreBatch = service.store.new_batch()
        self.write = self.batch

    @property
    def active(self) -> bool:
        return self.batch.active

    def submit(self) -> WriteResult:
        """Send every accumulated write."""
        result = WriteResult.capture(self.batch.submit, "submit batch")
        if result.ok:
            logger.info("Batch submitted")
        return result


def default(service: Service) -> DefaultContext:
    """Return a context that performs each operation directly."""
    return DefaultContext(service)


@contextmanager
def transaction(service: Service) -> Iterator[TransactionContext]:
    """Run a block inside a transaction.

    Commits when the block exits normally and rolls back when it raises.

    Raises:
        DatabaseError: If the commit fails; the store is left unchanged.
    """
    ctx = TransactionContext(service)
    try:
        yield ctx
    except BaseException:
        ctx.rollback()
        raise
    if ctx.active:
        ctx.commit().unwrap()


@contextmanager
def batch(service: Service) -> Iterator[BatchContext]:
    """Accumulate writes in a block and submit them when it exits normally.

    Nothing is submitted if the block raises.

    Raises:
        DatabaseError: If submitting fails. Writes applied before the
            failure are not undone.
    """
    ctx = BatchContext(service)
    yield ctx
    if ctx.active:
        ctx.submit().unwrap()
