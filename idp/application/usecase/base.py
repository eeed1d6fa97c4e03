"""Base use case."""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from pydantic import BaseModel

RequestT = TypeVar("RequestT", bound=BaseModel)
ResponseT = TypeVar("ResponseT", bound=BaseModel)


class BaseUseCase(ABC, Generic[RequestT, ResponseT]):
    """One externally visible operation, orchestrating domain services.

    Takes a pydantic request model and returns a pydantic response model.
    """

    @abstractmethod
    async def execute(self, request: RequestT) -> ResponseT:
        pass
