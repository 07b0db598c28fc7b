"""Type-keyed coders used to move records between workers."""

import pickle
from abc import ABC, abstractmethod
from threading import Lock
from typing import Any


class Coder(ABC):
    @abstractmethod
    def encode(self, value: Any) -> bytes:
        pass

    @abstractmethod
    def decode(self, data: bytes) -> Any:
        pass


class PickleCoder(Coder):
    def encode(self, value: Any) -> bytes:
        return pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)

    def decode(self, data: bytes) -> Any:
        return pickle.loads(data)


class CoderRegistry:
    """Coders looked up by record type, falling back along the MRO then to a default."""

    def __init__(self, default: Coder | None = None) -> None:
        self._lock = Lock()
        self._coders: dict[type, Coder] = {}
        self._default = default or PickleCoder()

    def register(self, record_type: type, coder: Coder) -> None:
        with self._lock:
            self._coders[record_type] = coder

    def get_coder(self, record_type: type | None) -> Coder:
        if record_type is None:
            return self._default

        with self._lock:
            for candidate in getattr(record_type, "__mro__", (record_type,)):
                coder = self._coders.get(candidate)
                if coder is not None:
                    return coder
        return self._default
