"""Store keys and key factories."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Namespace:
    """A store partition. The empty name is the default partition."""

    name: str = ""

    @property
    def option(self) -> str | None:
        """Return the namespace name, or None for the default partition."""
        return self.name or None


DEFAULT_NAMESPACE = Namespace("")


@dataclass(frozen=True)
class Key:
    """Identifies one stored entity by (kind, namespace, name)."""

    kind: str
    name: str
    namespace: str = ""

    @property
    def path(self) -> str:
        """Human-readable key path, e.g. ``people/Person:alice``."""
        base = f"{self.kind}:{self.name}"
        return f"{self.namespace}/{base}" if self.namespace else base

    def __str__(self) -> str:
        return self.path


class KeyFactory:
    """Builds keys for one kind within one namespace."""

    def __init__(self, kind: str, namespace: Namespace | str | None = None) -> None:
        if not kind:
            raise ValueError("Key kind must not be empty")
        if isinstance(namespace, Namespace):
            namespace = namespace.name
        self.kind = kind
        self.namespace = namespace or ""

    def new_key(self, name: str) -> Key:
        """Build the key for ``name``. No store round trip is made."""
        if not name:
            raise ValueError(f"Key name for kind '{self.kind}' must not be empty")
        return Key(kind=self.kind, name=name, namespace=self.namespace)

    def __repr__(self) -> str:
        return f"KeyFactory({self.kind!r}, namespace={self.namespace!r})"
