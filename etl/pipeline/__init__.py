from .coders import Coder, CoderRegistry, PickleCoder
from .context import Collection, PipelineContext
from .io import EMPTY_TAP, ConnectorIO, EmptyTap, Tap
from .testing import DuplicateRegistrationError, TestData

__all__ = [
    "Coder",
    "CoderRegistry",
    "PickleCoder",
    "Collection",
    "PipelineContext",
    "ConnectorIO",
    "Tap",
    "EmptyTap",
    "EMPTY_TAP",
    "TestData",
    "DuplicateRegistrationError",
]
