"""Base model for domain entities."""

from pydantic import BaseModel, ConfigDict


class DomainModel(BaseModel):
    """Base class for all domain entities.

    Entities are frozen; state changes produce a new instance through
    ``model_copy(update=...)`` which is then handed back to its repository.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)
