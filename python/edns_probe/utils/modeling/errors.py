from __future__ import annotations

from edns_probe.errors import EdnsProbeError


class DataModelingError(EdnsProbeError):
    """Base exception class for all data modeling errors."""

    def __init__(self, msg: str, error_path: str = "") -> None:
        super().__init__()
        self._msg = f"[{error_path}] {msg}" if error_path else msg

    def __str__(self) -> str:
        return self._msg


class DataAnnotationError(DataModelingError):
    """Exception class for unsupported type annotations in a model."""

    def __init__(self, msg: str, error_path: str = "") -> None:
        super().__init__(f"annotation error: {msg}", error_path)


class DataParsingError(DataModelingError):
    """Exception class for data parsing errors."""

    def __init__(self, msg: str, error_path: str = "") -> None:
        super().__init__(f"parsing error: {msg}", error_path)


class DataTypeError(DataModelingError):
    """Exception class for data type errors."""

    def __init__(self, msg: str, error_path: str = "") -> None:
        super().__init__(f"type error: {msg}", error_path)


class DataValueError(DataModelingError):
    """Exception class for data value errors."""

    def __init__(self, msg: str, error_path: str = "") -> None:
        super().__init__(f"value error: {msg}", error_path)


class DataValidationError(DataModelingError):
    """
    Exception class for data validation errors.

    Carries the lower level errors which caused it, they are printed as an indented tree.
    """

    def __init__(self, msg: str, error_path: str, child_errors: list[DataModelingError] | None = None) -> None:
        super().__init__(msg, error_path)

        if child_errors is None:
            child_errors = []
        self._child_errors = child_errors

    def recursive_msg(self, indentation: int = 0) -> str:
        parts: list[str] = []

        if indentation == 0:
            indentation += 1
            parts.append("Configuration validation error detected:")

        indent = "    " * indentation
        parts.append(f"{indent}{self._msg}")

        for error in self._child_errors:
            if isinstance(error, DataValidationError):
                parts.append(error.recursive_msg(indentation + 1))
            else:
                parts.append(indent + f"    {error}")
        return "\n".join(parts)

    def __str__(self) -> str:
        return self.recursive_msg()


class AggrDataValidationError(DataValidationError):
    """Exception class aggregating errors of several sibling values."""

    def __init__(self, error_path: str, child_errors: list[DataModelingError]) -> None:
        super().__init__("error due to lower level error", error_path, child_errors)

    def recursive_msg(self, indentation: int = 0) -> str:
        inc = 0
        parts: list[str] = []

        if indentation == 0:
            inc = 1
            parts.append("Configuration validation errors detected:")

        for error in self._child_errors:
            if isinstance(error, DataValidationError):
                parts.append(error.recursive_msg(indentation + inc))
            else:
                parts.append(f"    {error}")
        return "\n".join(parts)
