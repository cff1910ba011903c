from .model_node import ModelNode
from .parsing import DataFormat, data_combine, parse_json, parse_yaml, try_to_parse

__all__ = [
    "DataFormat",
    "ModelNode",
    "data_combine",
    "parse_json",
    "parse_yaml",
    "try_to_parse",
]
