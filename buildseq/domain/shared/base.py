"""Base classes for domain entities and value objects."""

from abc import ABC

from pydantic import BaseModel, ConfigDict


class ValueObject(BaseModel):
    """Base class for value objects (immutable, defined by their values)."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class Entity(BaseModel):
    """
    Base class for entities (have identity).

    Entities in a schedule snapshot are frozen: a change of state produces a
    new instance rather than mutating the snapshot the engine is reading.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    id: str


class DomainService(ABC):
    """Base class for domain services (business logic that doesn't belong to a single entity)."""

    pass
