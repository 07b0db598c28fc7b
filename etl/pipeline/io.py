"""Connector contract the pipeline context reads from and writes to."""

from abc import ABC, abstractmethod
from typing import Any, Iterator


class Tap(ABC):
    """Handle to data materialized by a write."""

    @abstractmethod
    def value(self) -> Iterator[Any]:
        """Iterate over the materialized records."""
        pass


class EmptyTap(Tap):
    def value(self) -> Iterator[Any]:
        return iter(())

    def __repr__(self) -> str:
        return "EmptyTap"


EMPTY_TAP = EmptyTap()


class ConnectorIO(ABC):
    @property
    @abstractmethod
    def test_id(self) -> str:
        """Identity used to match this IO against registered test data."""
        pass

    @abstractmethod
    def read(self, context: Any, params: Any = None) -> Any:
        """Produce a record collection from the external system."""
        pass

    @abstractmethod
    def write(self, data: Any, params: Any = None) -> Tap:
        """Write a record collection to the external system."""
        pass

    @abstractmethod
    def tap(self, params: Any = None) -> Tap:
        """Return a handle to previously written data."""
        pass
