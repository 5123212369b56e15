"""Typed references to other stored records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Generic, TypeVar

from typed_entities.errors import SerializationError
from typed_entities.keys import Key

if TYPE_CHECKING:
    from typed_entities.context import ReadContext
    from typed_entities.decoder import Decoder

T = TypeVar("T")


class Reference(Generic[T]):
    """A lazily resolved pointer to a stored record of type ``T``.

    Decoding a Reference never reads the store; call ``apply`` to load the
    record. Each call performs one read. Equality and hashing use the key only.
    """

    __slots__ = ("key",)

    def __init__(self, key: Key) -> None:
        self.key = key

    @property
    def name(self) -> str:
        """The identifier of the referenced record."""
        return self.key.name

    def apply(self, context: ReadContext, decoder: Decoder) -> T:
        """Load and decode the referenced record.

        Args:
            context: A context with read capability.
            decoder: Decoder for ``T``.

        Returns:
            The decoded record.

        Raises:
            SerializationError: If no entity is stored under the key, or it
                cannot be decoded.
            DatabaseError: If the read fails.
        """
        entity = context.get(self.key)
        if entity is None:
            raise SerializationError(f"No entity stored for {self.key.path}")
        return decoder.decode(entity)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Reference):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __repr__(self) -> str:
        return f"Reference[{self.key.kind}]({self.key.name!r})"
