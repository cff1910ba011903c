from .base_integer_types import BaseInteger, BaseIntegerRange
from .base_string_types import BaseString, BaseStringPattern, BaseUnit
from .base_types import BaseType, NoneType

__all__ = [
    "BaseInteger",
    "BaseIntegerRange",
    "BaseString",
    "BaseStringPattern",
    "BaseType",
    "BaseUnit",
    "NoneType",
]
