"""In-memory stand-ins for connector IO, keyed by connector test identity."""

from typing import Any, Iterable

from .io import ConnectorIO


class DuplicateRegistrationError(ValueError):
    """Raised when the same connector identity is registered twice."""


class TestData:
    __test__ = False

    def __init__(self) -> None:
        self._inputs: dict[str, list[Any]] = {}
        self._outputs: dict[str, list[Any]] = {}

    def add_input(self, io: ConnectorIO, records: Iterable[Any]) -> "TestData":
        key = io.test_id
        if key in self._inputs:
            raise DuplicateRegistrationError(f"Test input already registered for {type(io).__name__}")
        self._inputs[key] = list(records)
        return self

    def input(self, io: ConnectorIO) -> list[Any]:
        try:
            return list(self._inputs[io.test_id])
        except KeyError:
            raise KeyError(f"No test input registered for {type(io).__name__}") from None

    def record_output(self, io: ConnectorIO, records: Iterable[Any]) -> None:
        key = io.test_id
        if key in self._outputs:
            raise DuplicateRegistrationError(f"Output already written for {type(io).__name__}")
        self._outputs[key] = list(records)

    def output(self, io: ConnectorIO) -> list[Any]:
        try:
            return list(self._outputs[io.test_id])
        except KeyError:
            raise KeyError(f"No output written for {type(io).__name__}") from None
