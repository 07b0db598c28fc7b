"""Named bind-parameter holder handed to user callbacks."""

from typing import Any


class PreparedStatement:
    """Collects bind values for one execution of ``sql``.

    Parameters are named the way ``sqlalchemy.text`` expects them: a value set
    under ``"id"`` binds the ``:id`` placeholder.
    """

    def __init__(self, sql: str) -> None:
        self.sql = sql
        self._parameters: dict[str, Any] = {}

    def set(self, name: str, value: Any) -> "PreparedStatement":
        if not name:
            raise ValueError("parameter name must not be empty")
        self._parameters[name] = value
        return self

    def set_parameters(self, **values: Any) -> "PreparedStatement":
        for name, value in values.items():
            self.set(name, value)
        return self

    def __setitem__(self, name: str, value: Any) -> None:
        self.set(name, value)

    @property
    def parameters(self) -> dict[str, Any]:
        return dict(self._parameters)

    def __repr__(self) -> str:
        return f"PreparedStatement(sql={self.sql!r}, parameters={sorted(self._parameters)})"
