"""
Parsers for KNX item binding configurations and item definition files.
"""

from .binding_parser import BindingConfigParser, BindingGroupBuilder, parse_binding_config
from .errors import (
    BindingConfigParseError,
    BindingSyntaxError,
    ConstraintViolation,
    ParseError,
    UnresolvedTypeError,
)
from .yaml import ItemDefinition, YamlItemsParser

__all__ = [
    "BindingConfigParser",
    "BindingGroupBuilder",
    "parse_binding_config",
    "YamlItemsParser",
    "ItemDefinition",
    "ParseError",
    "BindingConfigParseError",
    "BindingSyntaxError",
    "ConstraintViolation",
    "UnresolvedTypeError",
]
