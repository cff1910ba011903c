from __future__ import annotations

from edns_probe.utils.modeling.errors import DataTypeError, DataValueError

from .base_types import BaseType


class BaseInteger(BaseType):
    """Base class to work with integer value."""

    def validate(self) -> None:
        if not isinstance(self._value, int) or isinstance(self._value, bool):
            msg = (
                f"Unexpected value for '{type(self).__name__}'."
                f" Expected integer, got '{self._value}' with type '{type(self._value).__name__}'"
            )
            raise DataTypeError(msg, self._tree_path)

    def __int__(self) -> int:
        return int(self._value)


class BaseIntegerRange(BaseInteger):
    """
    Base class to work with integer value in range.
    Just inherit the class and set the values for '_min' and '_max'.

    class IntNonNegative(BaseIntegerRange):
        _min: int = 0
    """

    _min: int
    _max: int

    def validate(self) -> None:
        super().validate()
        if hasattr(self, "_min") and (self._value < self._min):
            msg = f"value {self._value} is lower than the minimum {self._min}."
            raise DataValueError(msg, self._tree_path)
        if hasattr(self, "_max") and (self._value > self._max):
            msg = f"value {self._value} is higher than the maximum {self._max}"
            raise DataValueError(msg, self._tree_path)
