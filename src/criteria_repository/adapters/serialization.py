"""Value serializers for out-of-process cache stores."""

from __future__ import annotations

import json
import pickle
from typing import Any, Protocol, runtime_checkable

from pydantic import TypeAdapter


@runtime_checkable
class ISerializer(Protocol):
    """Converts cached values to bytes and back."""

    def dumps(self, value: Any) -> bytes: ...

    def loads(self, data: bytes) -> Any: ...


class PickleSerializer:
    """
    Pickle-based serializer.

    Handles detached ORM instances and pagination containers. Only use it
    with a store no untrusted party can write to.
    """

    def __init__(self, protocol: int = pickle.HIGHEST_PROTOCOL) -> None:
        self._protocol = protocol

    def dumps(self, value: Any) -> bytes:
        return pickle.dumps(value, protocol=self._protocol)

    def loads(self, data: bytes) -> Any:
        return pickle.loads(data)  # noqa: S301


class JsonSerializer:
    """
    JSON serializer.

    With *type_* set, values are dumped and validated through a pydantic
    ``TypeAdapter`` so that DTOs (``list[OrderDTO]``, ``OrderDTO | None`` ...)
    come back as models. Without it, plain JSON is used and unknown values
    are stringified.
    """

    def __init__(self, type_: Any = None) -> None:
        self._adapter: TypeAdapter[Any] | None = (
            TypeAdapter(type_) if type_ is not None else None
        )

    def dumps(self, value: Any) -> bytes:
        if self._adapter is not None:
            return self._adapter.dump_json(value)
        if hasattr(value, "model_dump_json"):
            # Pydantic V2 optimized dumping
            return value.model_dump_json().encode("utf-8")  # type: ignore[no-any-return]
        return json.dumps(value, default=str).encode("utf-8")

    def loads(self, data: bytes) -> Any:
        if self._adapter is not None:
            return self._adapter.validate_json(data)
        return json.loads(data)
