"""In-process execution context and record collections."""

from typing import Any, Callable, Iterable, Iterator

from jdbcio._logging import get_logger

from .coders import CoderRegistry
from .io import EMPTY_TAP, ConnectorIO, Tap
from .testing import TestData

logger = get_logger("pipeline.context")


class Collection:
    """Materialized, ordered records produced by a pipeline step."""

    def __init__(self, context: "PipelineContext", elements: Iterable[Any], coder: Any = None) -> None:
        self.context = context
        self.coder = coder
        self._elements = list(elements)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._elements)

    def __len__(self) -> int:
        return len(self._elements)

    def map(self, fn: Callable[[Any], Any]) -> "Collection":
        return Collection(self.context, (fn(element) for element in self._elements))

    def apply(self, transform: Any) -> Any:
        """Run a sink transform over these records."""
        logger.info("Applying %s to %s records", type(transform).__name__, len(self._elements))
        return transform.expand(list(self._elements))

    def write(self, io: ConnectorIO, params: Any = None) -> Tap:
        return self.context.write(self, io, params)

    def to_list(self) -> list[Any]:
        return list(self._elements)


class PipelineContext:
    def __init__(self, coders: CoderRegistry | None = None, test_data: TestData | None = None) -> None:
        self.coders = coders or CoderRegistry()
        self.test_data = test_data

    @property
    def is_test(self) -> bool:
        return self.test_data is not None

    def parallelize(self, records: Iterable[Any]) -> Collection:
        return Collection(self, records)

    def apply(self, transform: Any) -> Collection:
        """Run a source transform and wrap its records, passing them through the transform's coder."""
        logger.info("Applying %s", type(transform).__name__)
        records = transform.expand()
        coder = getattr(transform, "coder", None)
        if coder is not None:
            records = [coder.decode(coder.encode(record)) for record in records]
        return Collection(self, records, coder)

    def read(self, io: ConnectorIO, params: Any = None) -> Collection:
        if self.is_test:
            return Collection(self, self.test_data.input(io))
        return io.read(self, params)

    def write(self, data: Collection, io: ConnectorIO, params: Any = None) -> Tap:
        if self.is_test:
            self.test_data.record_output(io, data)
            return EMPTY_TAP
        return io.write(data, params)
