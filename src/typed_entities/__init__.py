"""Typed Entities - map typed records onto a path-keyed key-value store."""

from typed_entities.context import (
    BatchContext,
    Context,
    DefaultContext,
    ReadContext,
    TransactionContext,
    WriteResult,
    batch,
    default,
    transaction,
)
from typed_entities.config import EntityConfig
from typed_entities.dao import Dao
from typed_entities.decoder import Decoder
from typed_entities.encoder import Encoder
from typed_entities.entity import Entity, EntityBuilder, build_entity
from typed_entities.errors import (
    ConfigError,
    DatabaseError,
    NotSavedError,
    SerializationError,
    TypedEntitiesError,
)
from typed_entities.identity import dataclass_identifier, field_identifier
from typed_entities.keys import Key, KeyFactory, Namespace
from typed_entities.log import configure_logging
from typed_entities.memory import InMemoryStore
from typed_entities.reference import Reference
from typed_entities.service import Service
from typed_entities.types import Sealed, SumTypeMode, TypeRegistry
from typed_entities.values import (
    TOMBSTONE,
    BooleanValue,
    Character,
    DoubleValue,
    FlatRecord,
    GeoPoint,
    GeoPointValue,
    IntegerValue,
    KeyValue,
    PropertyPath,
    PropertyValue,
    StringValue,
)

__all__ = [
    # Main API
    "Service",
    "Dao",
    "Reference",
    "TypeRegistry",
    "Sealed",
    "SumTypeMode",
    "EntityConfig",
    "configure_logging",
    # Codecs
    "Encoder",
    "Decoder",
    # Contexts
    "Context",
    "ReadContext",
    "DefaultContext",
    "TransactionContext",
    "BatchContext",
    "WriteResult",
    "default",
    "transaction",
    "batch",
    # Store
    "Entity",
    "EntityBuilder",
    "build_entity",
    "InMemoryStore",
    "Key",
    "KeyFactory",
    "Namespace",
    "dataclass_identifier",
    "field_identifier",
    # Property values
    "PropertyPath",
    "PropertyValue",
    "FlatRecord",
    "StringValue",
    "IntegerValue",
    "BooleanValue",
    "DoubleValue",
    "GeoPointValue",
    "KeyValue",
    "TOMBSTONE",
    "GeoPoint",
    "Character",
    # Errors
    "TypedEntitiesError",
    "SerializationError",
    "DatabaseError",
    "NotSavedError",
    "ConfigError",
]

__version__ = "0.1.0"
