"""Data access objects: keys, queries, save and delete for one record type."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Generic, TypeVar

from loguru import logger

from typed_entities.context import Context, ReadContext, default
from typed_entities.entity import Entity, build_entity
from typed_entities.errors import NotSavedError
from typed_entities.identity import IdentifierResolver, dataclass_identifier
from typed_entities.keys import Key, Namespace
from typed_entities.reference import Reference
from typed_entities.service import Service
from typed_entities.values import ROOT

T = TypeVar("T")


class Dao(Generic[T]):
    """Key and query access for one record type.

    The kind defaults to the record class name and the namespace to the
    service namespace. The identifier resolver defaults to the dataclass
    field declared with ``metadata={"id": True}``.
    """

    def __init__(
        self,
        record_type: type[T],
        service: Service,
        kind: str | None = None,
        namespace: Namespace | str | None = None,
        identifier: IdentifierResolver | None = None,
    ) -> None:
        self.record_type = record_type
        self.service = service
        self.kind = kind or record_type.__name__
        if isinstance(namespace, str):
            namespace = Namespace(namespace)
        self.namespace = namespace if namespace is not None else service.namespace
        self.key_factory = service.store.new_key_factory(self.kind, self.namespace)
        self.identifier = identifier or dataclass_identifier(record_type)
        self.encoder = service.registry.encoder(record_type)
        self.decoder = service.registry.decoder(record_type)

    def _context(self, context: Context | None) -> Context:
        return context if context is not None else default(self.service)

    def new_key(self, identifier: str) -> Key:
        """Build the key for ``identifier``. No store round trip is made."""
        return self.key_factory.new_key(identifier)

    def key_for(self, value: T) -> Key | None:
        """Return the key of ``value``, or None when it has no identifier."""
        ident = self.identifier(value)
        return self.new_key(ident) if ident else None

    def entity_for(self, value: T, base: Entity | None = None) -> Entity:
        """Encode ``value`` into an entity, optionally on top of an existing one.

        Raises:
            ValueError: If ``value`` has no identifier.
        """
        key = self.key_for(value)
        if key is None:
            raise ValueError(f"{self.kind} value has no identifier: {value!r}")
        record = self.encoder.encode(ROOT, value, replace=base is not None)
        return build_entity(key, record, base)

    def all(self, context: ReadContext | None = None) -> Iterator[T]:
        """Iterate over every stored record of this kind.

        The query is issued immediately; records are decoded one at a time as
        the iterator is consumed, so a decode error surfaces on the ``next()``
        that reaches the bad record.
        """
        ctx = self._context(context)
        entities = ctx.run_query(self.kind, self.namespace.option)  # type: ignore[union-attr]
        return (self.decoder.decode(entity) for entity in entities)

    def get(self, identifier: str, context: ReadContext | None = None) -> T | None:
        """Read and decode one record, or return None if it is not stored."""
        entity = self._context(context).get(self.new_key(identifier))  # type: ignore[union-attr]
        return None if entity is None else self.decoder.decode(entity)

    def save(self, value: T, context: Context | None = None) -> Reference[T]:
        """Encode and write ``value``, replacing any stored record with the same key.

        Raises:
            DatabaseError: If the write fails.
        """
        return self.save_all([value], context)[0]

    def save_all(self, values: Iterable[T], context: Context | None = None) -> list[Reference[T]]:
        """Encode and write several records in one context call."""
        entities = [self.entity_for(v) for v in values]
        self._context(context).save_all(entities).unwrap()
        logger.debug(f"Saved {len(entities)} {self.kind} entities")
        return [Reference(e.key) for e in entities]

    def update(self, value: T, context: ReadContext | None = None) -> Reference[T]:
        """Apply ``value`` on top of the stored entity.

        Unlike ``save``, properties of the stored entity that ``value`` does
        not encode are kept. ``None`` optional fields clear the stored
        property, and lists and sum types replace their stored subtree.
        """
        ctx = self._context(context)
        key = self.key_for(value)
        base = ctx.get(key) if key is not None else None  # type: ignore[union-attr]
        entity = self.entity_for(value, base)
        ctx.save_all([entity]).unwrap()
        return Reference(entity.key)

    def delete(self, value: T, context: Context | None = None) -> None:
        """Delete the stored record with the key of ``value``.

        Raises:
            NotSavedError: If ``value`` has no identifier.
            DatabaseError: If the delete fails.
        """
        self.delete_all([value], context)

    def delete_all(self, values: Iterable[T], context: Context | None = None) -> None:
        keys = []
        for value in values:
            key = self.key_for(value)
            if key is None:
                raise NotSavedError(self.kind)
            keys.append(key)
        self._context(context).delete_all(keys).unwrap()
        logger.debug(f"Deleted {len(keys)} {self.kind} entities")

    def __repr__(self) -> str:
        return f"Dao({self.kind!r}, namespace={self.namespace.name!r})"
