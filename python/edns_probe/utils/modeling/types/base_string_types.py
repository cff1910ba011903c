from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from edns_probe.utils.modeling.errors import DataTypeError, DataValueError

from .base_types import BaseType

if TYPE_CHECKING:
    from re import Pattern


class BaseString(BaseType):
    """Base class to work with string value."""

    def validate(self) -> None:
        if not isinstance(self._value, str):
            msg = (
                f"Unexpected value for '{type(self).__name__}'."
                f" Expected string, got '{self._value}' with type '{type(self._value).__name__}'"
            )
            raise DataTypeError(msg, self._tree_path)


class BaseStringPattern(BaseString):
    """
    Base class to work with string value that match regex pattern.
    Just inherit the class and set regex pattern for '_re'.

    class ABPattern(BaseStringPattern):
        _re: Pattern[str] = re.compile(r"ab*")
    """

    _re: Pattern[str]

    def validate(self) -> None:
        super().validate()
        if not type(self)._re.match(self._value):  # noqa: SLF001
            msg = f"'{self._value}' does not match '{self._re.pattern}' pattern"
            raise DataValueError(msg, self._tree_path)


class BaseUnit(BaseString):
    """
    Base class to work with a number followed by a unit.
    Just inherit the class and set '_units', the value is converted to the base unit (multiplier 1).

    class CustomUnit(BaseUnit):
        _units = {"B": 1, "K": 1024}
    """

    _re: Pattern[str]
    _units: dict[str, int]

    def __init__(self, value: Any, tree_path: str = "/") -> None:
        super().__init__(value, tree_path)
        # longer units first, so that 'ms' is not matched as 'm'
        units = sorted(type(self)._units.keys(), key=len, reverse=True)
        type(self)._re = re.compile(rf"^(\d+)({r'|'.join(units)})$")  # noqa: SLF001

    def _get_base_value(self) -> int:
        cls = self.__class__

        super().validate()
        grouped = self._re.search(self._value)
        if grouped:
            val, unit = grouped.groups()
            return int(val) * cls._units[unit]
        msg = (
            f"Unexpected value for '{type(self).__name__}'."
            f" Expected positive integer and one of the units {list(cls._units.keys())}, got '{self._value}'."
        )
        raise DataValueError(msg, self._tree_path)

    def validate(self) -> None:
        self._get_base_value()

    def __int__(self) -> int:
        return self._get_base_value()
