"""Identifier resolvers: how a record's key name is derived from its value."""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from typing import Any

# Returns the identifier for a record, or None when it has none yet
IdentifierResolver = Callable[[Any], "str | None"]


def field_identifier(name: str) -> IdentifierResolver:
    """Use the value of field ``name`` as the identifier."""

    def resolve(value: Any) -> str | None:
        ident = getattr(value, name)
        return None if ident is None else str(ident)

    return resolve


def dataclass_identifier(cls: type) -> IdentifierResolver:
    """Use the dataclass field declared with ``metadata={"id": True}``.

    Raises:
        TypeError: If ``cls`` is not a dataclass, or does not declare exactly
            one id field.
    """
    if not dataclasses.is_dataclass(cls):
        raise TypeError(f"{cls.__name__} is not a dataclass")
    id_fields = [f.name for f in dataclasses.fields(cls) if f.metadata.get("id")]
    if len(id_fields) != 1:
        raise TypeError(
            f"{cls.__name__} must declare exactly one field with metadata={{'id': True}}, "
            f"found {len(id_fields)}"
        )
    return field_identifier(id_fields[0])
