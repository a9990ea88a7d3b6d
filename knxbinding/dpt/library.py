"""
Datapoint type library.

Provides the mapping between semantic value types and KNX datapoint type
ids from the dpt_definitions.yml file. This is the type mapper the binding
parser uses to guess default type ids and to reject unsupported ones.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from knxbinding.model import ValueType
from knxbinding.utils import DPT_DEFINITIONS_PATH, enum_value

# Default path to datapoint type definitions
DEFAULT_DPT_DEFS_PATH = DPT_DEFINITIONS_PATH


@dataclass
class DptDefinition:
    """Definition of a supported datapoint type."""

    dpt_id: str  # e.g., "9.001"
    value_type: ValueType
    name: str = ""

    @property
    def main_number(self) -> int:
        return int(self.dpt_id.split(".")[0])


class DptLibrary:
    """
    Access supported datapoint type definitions.

    Loads definitions from YAML and implements the ``TypeMapper`` protocol.
    """

    def __init__(
        self,
        definitions: Dict[str, DptDefinition],
        defaults: Optional[Dict[ValueType, str]] = None,
    ):
        """Initialize with pre-loaded definitions."""
        self._definitions = definitions
        self._defaults = defaults or {}

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "DptLibrary":
        """
        Load datapoint type definitions from YAML file.

        Args:
            path: Path to dpt_definitions.yml (defaults to the packaged file)

        Returns:
            DptLibrary instance

        Raises:
            FileNotFoundError: If the definitions file does not exist
            ValueError: If a definition references an unknown value type
        """
        path = path or DEFAULT_DPT_DEFS_PATH

        if not path.exists():
            raise FileNotFoundError(f"Datapoint type definitions file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            raw_data = yaml.safe_load(f) or {}

        definitions = {}
        for dpt_id, data in (raw_data.get("datapointTypes") or {}).items():
            dpt_id = str(dpt_id)
            definitions[dpt_id] = DptDefinition(
                dpt_id=dpt_id,
                value_type=ValueType.from_string(data.get("valueType", "")),
                name=data.get("name", ""),
            )

        defaults = {}
        for value_type, dpt_id in (raw_data.get("defaults") or {}).items():
            dpt_id = str(dpt_id)
            if dpt_id not in definitions:
                raise ValueError(f"Default datapoint type {dpt_id} for {value_type} is not defined")
            defaults[ValueType.from_string(value_type)] = dpt_id

        return cls(definitions, defaults)

    def to_dpt_id(self, value_type: ValueType) -> Optional[str]:
        """
        Get the default datapoint type id for a value type.

        Returns:
            Datapoint type id, or None if the value type has no default
        """
        return self._defaults.get(value_type)

    def to_value_type(self, dpt_id: str) -> Optional[ValueType]:
        """
        Get the value type a datapoint type id is translated to.

        Returns:
            ValueType, or None if the datapoint type is not supported
        """
        defn = self._definitions.get(dpt_id)
        return defn.value_type if defn else None

    def is_supported(self, dpt_id: str) -> bool:
        return dpt_id in self._definitions

    def list_dpt_ids(self) -> List[str]:
        """List supported datapoint type ids, ordered by main and sub number."""
        return sorted(self._definitions, key=lambda d: tuple(int(p) for p in d.split(".")))

    def get_dpt_definition(self, dpt_id: str) -> Optional[DptDefinition]:
        return self._definitions.get(dpt_id)

    def get_all_dpt_info(self) -> List[Dict[str, Any]]:
        """
        Get information for all datapoint types (for JSON serialization).

        Returns:
            List of dictionaries with id, name, value type and default flag
        """
        default_ids = set(self._defaults.values())
        result = []
        for dpt_id in self.list_dpt_ids():
            defn = self._definitions[dpt_id]
            result.append(
                {
                    "id": defn.dpt_id,
                    "name": defn.name,
                    "valueType": enum_value(defn.value_type),
                    "default": defn.dpt_id in default_ids,
                }
            )
        return result

    def get_defaults(self) -> Dict[ValueType, str]:
        return dict(self._defaults)


# Singleton instance for convenience
_library_instance: Optional[DptLibrary] = None


def get_dpt_library() -> DptLibrary:
    """Get or create the global DptLibrary instance."""
    global _library_instance
    if _library_instance is None:
        _library_instance = DptLibrary.load()
    return _library_instance
