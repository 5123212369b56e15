"""Pytest configuration and fixtures."""

import pytest

from typed_entities import InMemoryStore, Service, SumTypeMode, TypeRegistry


class FailingStore(InMemoryStore):
    """InMemoryStore whose Nth entity write raises."""

    def __init__(self, fail_on: int) -> None:
        super().__init__()
        self.fail_on = fail_on
        self.writes = 0

    def _apply_put(self, entity) -> None:
        self.writes += 1
        if self.writes == self.fail_on:
            raise ConnectionError(f"write {self.writes} rejected")
        super()._apply_put(entity)


@pytest.fixture
def store() -> InMemoryStore:
    """Provide an empty in-memory store."""
    return InMemoryStore()


@pytest.fixture
def service(store: InMemoryStore) -> Service:
    """Provide a service over the empty store."""
    return Service(store)


@pytest.fixture
def registry() -> TypeRegistry:
    """Provide a fresh untagged type registry."""
    return TypeRegistry()


@pytest.fixture
def tagged_registry() -> TypeRegistry:
    """Provide a fresh tagged type registry."""
    return TypeRegistry(sum_type_mode=SumTypeMode.TAGGED)


@pytest.fixture
def failing_store() -> FailingStore:
    """Provide a store that rejects the second of its writes."""
    return FailingStore(fail_on=2)
