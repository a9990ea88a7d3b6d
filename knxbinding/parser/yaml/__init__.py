"""
YAML parsers for item definition files.
"""

from ..errors import ParseError
from .items_parser import ItemDefinition, YamlItemsParser

__all__ = ["YamlItemsParser", "ItemDefinition", "ParseError"]
