from __future__ import annotations

import typing
from typing import Any, Dict, List, Union

from typing_extensions import Literal, get_args, get_origin

from edns_probe.utils.modeling.errors import DataAnnotationError

from .base_types import NoneType


def get_annotations(cls: type) -> dict[str, Any]:
    # resolves string annotations created by 'from __future__ import annotations'
    return typing.get_type_hints(cls)


def get_generic_type_arguments(typ: Any) -> tuple[Any, ...]:
    return get_args(typ)


def get_generic_type_argument(typ: Any) -> Any:
    args = get_generic_type_arguments(typ)
    if len(args) == 1:
        return args[0]
    msg = f"expected one generic type argument, got {len(args)}"
    raise DataAnnotationError(msg)


def is_dict(typ: Any) -> bool:
    return get_origin(typ) in (Dict, dict)


def is_list(typ: Any) -> bool:
    return get_origin(typ) in (List, list)


def is_literal(typ: Any) -> bool:
    return get_origin(typ) is Literal


def is_none_type(typ: Any) -> bool:
    return typ is None or typ == NoneType


def is_union(typ: Any) -> bool:
    return get_origin(typ) is Union


def is_optional(typ: Any) -> bool:
    args = get_generic_type_arguments(typ)
    optional_len = 2
    return is_union(typ) and len(args) == optional_len and NoneType in args


def get_optional_inner_type(optional: Any) -> Any:
    if is_optional(optional):
        for arg in get_generic_type_arguments(optional):
            if not is_none_type(arg):
                return arg
    msg = "failed to get inner optional type"
    raise DataAnnotationError(msg)


def is_attr_name_private(attr_name: str) -> bool:
    return attr_name.startswith("_")
