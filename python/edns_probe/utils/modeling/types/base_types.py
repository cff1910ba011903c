from __future__ import annotations

from typing import Any

NoneType = type(None)


class BaseType:
    """
    Base class of custom value types used in model annotations.

    The raw value is stored as given and checked only when 'validate()' is called,
    so that the model can report the failing value together with its tree path.
    """

    def __init__(self, value: Any, tree_path: str = "/") -> None:
        self._value = value
        self._tree_path = tree_path

    def __repr__(self) -> str:
        cls = self.__class__
        return f'{cls.__name__}("{self._value}")'

    def __eq__(self, o: object) -> bool:
        cls = self.__class__
        return isinstance(o, cls) and o._value == self._value

    def __hash__(self) -> int:
        return hash(self._value)

    def __str__(self) -> str:
        return str(self._value)

    def __int__(self) -> int:
        raise NotImplementedError

    def validate(self) -> None:
        raise NotImplementedError

    def serialize(self) -> Any:
        return self._value
