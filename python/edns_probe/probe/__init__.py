from .builder import BuiltQuery, build
from .model import EndpointAddress, Outcome, TestCase, TestResult
from .registry import CASES, get_cases
from .runner import ProbeRunner
from .transport import Exchange, TransportError, TransportErrorKind, exchange, resolve_endpoint
from .validator import ValidationFailure, ValidationResult, validate

__all__ = [
    "CASES",
    "BuiltQuery",
    "EndpointAddress",
    "Exchange",
    "Outcome",
    "ProbeRunner",
    "TestCase",
    "TestResult",
    "TransportError",
    "TransportErrorKind",
    "ValidationFailure",
    "ValidationResult",
    "build",
    "exchange",
    "get_cases",
    "resolve_endpoint",
    "validate",
]
