from typing import Any

import pytest

from edns_probe.utils.modeling.errors import DataModelingError
from edns_probe.utils.modeling.types import BaseInteger, BaseIntegerRange


@pytest.mark.parametrize("value", [-65_535, -1, 0, 1, 65_535])
def test_base_integer(value: int):
    obj = BaseInteger(value)
    obj.validate()
    assert int(obj) == value
    assert str(obj) == str(value)


@pytest.mark.parametrize("value", [True, False, "1", 1.0, None])
def test_base_integer_invalid(value: Any):
    with pytest.raises(DataModelingError):
        BaseInteger(value).validate()


class _Range(BaseIntegerRange):
    _min: int = 10
    _max: int = 20


@pytest.mark.parametrize("value", [10, 15, 20])
def test_base_integer_range(value: int):
    obj = _Range(value)
    obj.validate()
    assert int(obj) == value


@pytest.mark.parametrize("value", [9, 21, -1, "15"])
def test_base_integer_range_invalid(value: Any):
    with pytest.raises(DataModelingError):
        _Range(value).validate()


def test_base_integer_range_only_minimum():
    class NonNegative(BaseIntegerRange):
        _min: int = 0

    NonNegative(1_000_000).validate()
    with pytest.raises(DataModelingError):
        NonNegative(-1).validate()


def test_base_type_equality():
    assert _Range(15) == _Range(15)
    assert _Range(15) != _Range(16)
    assert _Range(15) != BaseInteger(15)
    assert hash(_Range(15)) == hash(15)
