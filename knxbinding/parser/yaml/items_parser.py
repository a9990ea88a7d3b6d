"""
YAML parser for item definition files.

Loads a YAML file listing items together with their KNX binding
configuration strings. The binding strings themselves are not parsed here;
that is the job of ``BindingConfigParser`` once the items are registered.
"""

from pathlib import Path
from typing import Any, Dict, List, Union

import yaml
from pydantic import Field, ValidationError

from knxbinding.model import Item, StrictModel
from knxbinding.utils import filter_none

from ..errors import ParseError

BINDING_KEY = "knx"


class ItemDefinition(StrictModel):
    """An item together with its raw binding configuration string."""

    item: Item = Field(..., description="The item")
    binding_config: str = Field(..., description="Raw KNX binding configuration")

    @property
    def name(self) -> str:
        return self.item.name


class YamlItemsParser:
    """
    Parser for item definition YAML files.

    Expected layout:

        items:
          - name: Light_Kitchen
            type: Switch
            knx: "<1/1/10+0/1/13"
          - name: Custom
            acceptedCommandTypes: [OnOff]
            acceptedDataTypes: [OnOff]
            knx: "1/1/20"
    """

    def parse_file(self, file_path: Union[str, Path]) -> List[ItemDefinition]:
        """
        Parse an items YAML file.

        Args:
            file_path: Path to the items file

        Returns:
            Item definitions in file order

        Raises:
            ParseError: If the file is missing, not valid YAML or malformed
        """
        file_path = Path(file_path).resolve()

        if not file_path.exists():
            raise ParseError(f"File not found: {file_path}")

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            line = getattr(e, "problem_mark", None)
            line_num = line.line + 1 if line else None
            raise ParseError(f"YAML syntax error: {e}", file_path, line_num)

        return self.parse_data(data, file_path)

    def parse_data(self, data: Any, file_path: Union[str, Path, None] = None) -> List[ItemDefinition]:
        """Parse already loaded YAML data."""
        if not isinstance(data, dict):
            raise ParseError("Root element must be a YAML object/dictionary", file_path)

        items = data.get("items")
        if items is None:
            raise ParseError("Missing required field: items", file_path)
        if not isinstance(items, list):
            raise ParseError("Field 'items' must be a list", file_path)

        definitions = []
        names = set()
        for idx, item_data in enumerate(items):
            definition = self._parse_item(idx, item_data, file_path)
            if definition.name in names:
                raise ParseError(f"Duplicate item name in items[{idx}]: '{definition.name}'", file_path)
            names.add(definition.name)
            definitions.append(definition)
        return definitions

    def _parse_item(self, idx: int, item_data: Dict[str, Any], file_path) -> ItemDefinition:
        """Parse a single entry of the items list."""
        try:
            if not isinstance(item_data, dict):
                raise TypeError("entry must be a mapping")

            binding_config = item_data.get(BINDING_KEY)
            if binding_config is None:
                raise KeyError(BINDING_KEY)

            kind = item_data.get("type")
            if kind is not None:
                item = Item.of_kind(item_data.get("name"), kind)
            else:
                item = Item(
                    **filter_none(
                        {
                            "name": item_data.get("name"),
                            "accepted_command_types": item_data.get("acceptedCommandTypes"),
                            "accepted_data_types": item_data.get("acceptedDataTypes"),
                        }
                    )
                )

            return ItemDefinition(item=item, binding_config=str(binding_config))
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            raise ParseError(f"Error parsing items[{idx}]: {e}", file_path)
