"""Typing protocols for collaborators of the binding parser."""

from typing import Optional, Protocol

from knxbinding.model import ValueType


class TypeMapper(Protocol):
    """Maps between semantic value types and datapoint type ids."""

    def to_dpt_id(self, value_type: ValueType) -> Optional[str]:
        """Default datapoint type id for a value type, None if there is none."""
        ...

    def to_value_type(self, dpt_id: str) -> Optional[ValueType]:
        """Value type handled by a datapoint type id, None if unsupported."""
        ...

    def is_supported(self, dpt_id: str) -> bool:
        """Check whether a datapoint type id can be encoded and decoded."""
        ...
