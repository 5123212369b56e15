"""Service handle: a store plus the settings every operation needs."""

from __future__ import annotations

from dataclasses import dataclass, field

from typed_entities.config import EntityConfig
from typed_entities.keys import DEFAULT_NAMESPACE, Namespace
from typed_entities.store import StoreAdapter
from typed_entities.types import TypeRegistry


@dataclass
class Service:
    """A store handle with its namespace and type registry.

    Attributes:
        store: The store adapter.
        namespace: Namespace used by Daos that do not name one.
        registry: Registry resolving record types to encoders and decoders.
    """

    store: StoreAdapter
    namespace: Namespace = DEFAULT_NAMESPACE
    registry: TypeRegistry = field(default_factory=TypeRegistry)

    @classmethod
    def from_config(cls, store: StoreAdapter, config: EntityConfig) -> Service:
        """Build a service from validated configuration."""
        return cls(
            store=store,
            namespace=Namespace(config.namespace),
            registry=TypeRegistry(sum_type_mode=config.sum_type_mode),
        )
