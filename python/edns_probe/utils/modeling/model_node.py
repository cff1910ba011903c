from __future__ import annotations

import inspect
from typing import Any

from .errors import AggrDataValidationError, DataAnnotationError, DataModelingError, DataTypeError, DataValidationError
from .types.base_types import BaseType
from .types.inspect import (
    get_annotations,
    get_generic_type_argument,
    get_generic_type_arguments,
    get_optional_inner_type,
    is_attr_name_private,
    is_dict,
    is_list,
    is_literal,
    is_none_type,
    is_optional,
    is_union,
)


def is_obj_type(obj: Any, types: type | tuple[type, ...]) -> bool:
    # To check specific type we are using 'type()' instead of 'isinstance()'
    # because for example 'bool' is instance of 'int', 'isinstance(False, int)' returns True.
    # pylint: disable=unidiomatic-typecheck
    if isinstance(types, tuple):
        return type(obj) in types
    return type(obj) is types


def _child_path(tree_path: str, key: Any) -> str:
    return f"{tree_path.rstrip('/')}/{key}"


def _raise_collected(errors: list[DataModelingError], tree_path: str) -> None:
    if len(errors) == 1:
        raise errors[0]
    if len(errors) > 1:
        raise AggrDataValidationError(tree_path, child_errors=errors)


class ModelNode:
    """
    Node of a declarative data model.

    Subclasses describe their attributes with type annotations. Source data (parsed JSON/YAML)
    use kebab-case keys that are mapped to snake_case attributes. Class attribute values are
    used as defaults. Additional checks of the whole node can be done in '_validate()', which
    is expected to raise 'ValueError'.

    class ServerSchema(ModelNode):
        address: str
        port: int = 53
    """

    def __init__(self, source: dict[str, Any] | None = None, tree_path: str = "/") -> None:
        if source is None:
            source = {}
        if not isinstance(source, dict):
            raise DataTypeError(f"expected object, got '{type(source).__name__}'", tree_path)

        self._tree_path = tree_path
        errors: list[DataModelingError] = []
        known_keys: set[str] = set()

        for name, typ in get_annotations(type(self)).items():
            if is_attr_name_private(name):
                continue
            key = name.replace("_", "-")
            known_keys.add(key)
            path = _child_path(tree_path, key)
            try:
                if key in source:
                    value = self._map_object(typ, source[key], path)
                elif hasattr(type(self), name):
                    value = getattr(type(self), name)
                else:
                    raise DataValidationError("missing required attribute", path)
                setattr(self, name, value)
            except DataModelingError as e:
                errors.append(e)

        for key in source:
            if key not in known_keys:
                errors.append(DataValidationError(f"unexpected extra key '{key}'", tree_path))

        _raise_collected(errors, tree_path)

        try:
            self._validate()
        except ValueError as e:
            raise DataValidationError(str(e), tree_path) from e

    def _validate(self) -> None:
        pass

    def _map_object(self, typ: Any, obj: Any, tree_path: str) -> Any:  # noqa: PLR0911,PLR0912
        # pylint: disable=too-many-return-statements,too-many-branches
        if is_none_type(typ):
            if obj is None:
                return None
            raise DataTypeError(f"expected null, got '{obj}'", tree_path)

        if is_optional(typ):
            if obj is None:
                return None
            return self._map_object(get_optional_inner_type(typ), obj, tree_path)

        if is_union(typ):
            errors: list[DataModelingError] = []
            for variant in get_generic_type_arguments(typ):
                try:
                    return self._map_object(variant, obj, tree_path)
                except DataModelingError as e:
                    errors.append(e)
            raise DataValidationError("could not parse any of the possible variants", tree_path, errors)

        if is_literal(typ):
            expected = get_generic_type_arguments(typ)
            if obj in expected and not is_obj_type(obj, bool):
                return obj
            raise DataValidationError(f"'{obj}' does not match any of the expected values {list(expected)}", tree_path)

        if typ is bool:
            if is_obj_type(obj, bool):
                return obj
            raise DataTypeError(f"expected bool, got '{type(obj).__name__}'", tree_path)

        if typ is int:
            if is_obj_type(obj, int):
                return obj
            raise DataTypeError(f"expected int, got '{type(obj).__name__}'", tree_path)

        if typ is float:
            if is_obj_type(obj, (int, float)):
                return float(obj)
            raise DataTypeError(f"expected float, got '{type(obj).__name__}'", tree_path)

        if typ is str:
            # we are willing to cast numbers to string, but no bools or compound values
            if is_obj_type(obj, (str, int, float)):
                return str(obj)
            if is_obj_type(obj, bool):
                raise DataTypeError(
                    "expected str, found bool. Be careful, that YAML parsers consider even"
                    ' "no" and "yes" as a bool. Please use quotes explicitly.',
                    tree_path,
                )
            raise DataTypeError(f"expected str, got '{type(obj).__name__}'", tree_path)

        if is_list(typ):
            if not isinstance(obj, list):
                raise DataTypeError(f"expected list, got '{type(obj).__name__}'", tree_path)
            inner = get_generic_type_argument(typ)
            errors = []
            items: list[Any] = []
            for i, val in enumerate(obj):
                try:
                    items.append(self._map_object(inner, val, f"{tree_path}[{i}]"))
                except DataModelingError as e:
                    errors.append(e)
            _raise_collected(errors, tree_path)
            return items

        if is_dict(typ):
            if not isinstance(obj, dict):
                raise DataTypeError(f"expected object, got '{type(obj).__name__}'", tree_path)
            key_type, val_type = get_generic_type_arguments(typ)
            return {
                self._map_object(key_type, k, tree_path): self._map_object(val_type, v, _child_path(tree_path, k))
                for k, v in obj.items()
            }

        if inspect.isclass(typ) and issubclass(typ, BaseType):
            if isinstance(obj, typ):
                return obj
            value = typ(obj, tree_path)
            value.validate()
            return value

        if inspect.isclass(typ) and issubclass(typ, ModelNode):
            if isinstance(obj, typ):
                return obj
            return typ(obj, tree_path)

        raise DataAnnotationError(f"unsupported type annotation '{typ}'", tree_path)

    def to_dict(self) -> dict[str, Any]:
        res: dict[str, Any] = {}
        for name in get_annotations(type(self)):
            if is_attr_name_private(name):
                continue
            res[name.replace("_", "-")] = _serialize(getattr(self, name))
        return res

    def __eq__(self, o: object) -> bool:
        return type(o) is type(self) and self.to_dict() == o.to_dict()  # type: ignore[attr-defined]


def _serialize(obj: Any) -> Any:
    if isinstance(obj, ModelNode):
        return obj.to_dict()
    if isinstance(obj, BaseType):
        return obj.serialize()
    if isinstance(obj, list):
        return [_serialize(i) for i in obj]
    if isinstance(obj, dict):
        return {k: _serialize(v) for k, v in obj.items()}
    return obj
