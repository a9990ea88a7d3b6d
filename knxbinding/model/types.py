"""
Value types and items.

An item is the addressable object a binding configuration line belongs
to. The only thing the binding parser needs to know about it is its name
and the ordered lists of semantic value types it accepts as commands and
as state updates.
"""

from enum import Enum
from typing import Any, Dict, Tuple, Union

from pydantic import Field, field_validator

from .base import StrictModel


class ValueType(str, Enum):
    """Semantic value types an item can accept."""

    ON_OFF = "OnOff"
    INCREASE_DECREASE = "IncreaseDecrease"
    PERCENT = "Percent"
    DECIMAL = "Decimal"
    UP_DOWN = "UpDown"
    STOP_MOVE = "StopMove"
    OPEN_CLOSED = "OpenClosed"
    STRING = "String"
    DATE_TIME = "DateTime"
    HSB = "HSB"
    POINT = "Point"

    @classmethod
    def from_string(cls, value: str) -> "ValueType":
        """Parse a value type from its value or member name, case-insensitively.

        ``"OnOff"``, ``"onoff"``, ``"ON_OFF"`` and ``"OnOffType"`` all
        resolve to ``ValueType.ON_OFF``.
        """
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().replace("_", "").lower()
        if normalized.endswith("type") and normalized != "type":
            normalized = normalized[: -len("type")]
        for member in cls:
            if member.value.lower() == normalized:
                return member
        raise ValueError(f"Unknown value type: '{value}'")


class ItemKind(str, Enum):
    """Standard item kinds with a known set of accepted value types."""

    SWITCH = "Switch"
    DIMMER = "Dimmer"
    ROLLERSHUTTER = "Rollershutter"
    CONTACT = "Contact"
    NUMBER = "Number"
    STRING = "String"
    DATE_TIME = "DateTime"
    COLOR = "Color"
    LOCATION = "Location"

    @classmethod
    def from_string(cls, value: str) -> "ItemKind":
        """Parse an item kind case-insensitively, tolerating an ``Item`` suffix."""
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        if normalized.endswith("item") and normalized != "item":
            normalized = normalized[: -len("item")]
        for member in cls:
            if member.value.lower() == normalized:
                return member
        raise ValueError(f"Unknown item type: '{value}'")

    @property
    def accepted_command_types(self) -> Tuple[ValueType, ...]:
        return _ITEM_KIND_TYPES[self][0]

    @property
    def accepted_data_types(self) -> Tuple[ValueType, ...]:
        return _ITEM_KIND_TYPES[self][1]


# kind -> (accepted command types, accepted data types), in priority order
_ITEM_KIND_TYPES: Dict[ItemKind, Tuple[Tuple[ValueType, ...], Tuple[ValueType, ...]]] = {
    ItemKind.SWITCH: ((ValueType.ON_OFF,), (ValueType.ON_OFF,)),
    ItemKind.DIMMER: (
        (ValueType.ON_OFF, ValueType.INCREASE_DECREASE, ValueType.PERCENT),
        (ValueType.ON_OFF, ValueType.PERCENT),
    ),
    ItemKind.ROLLERSHUTTER: (
        (ValueType.UP_DOWN, ValueType.STOP_MOVE, ValueType.PERCENT),
        (ValueType.UP_DOWN, ValueType.PERCENT),
    ),
    ItemKind.CONTACT: ((), (ValueType.OPEN_CLOSED,)),
    ItemKind.NUMBER: ((ValueType.DECIMAL,), (ValueType.DECIMAL,)),
    ItemKind.STRING: ((ValueType.STRING,), (ValueType.STRING,)),
    ItemKind.DATE_TIME: ((ValueType.DATE_TIME,), (ValueType.DATE_TIME,)),
    ItemKind.COLOR: (
        (ValueType.HSB, ValueType.PERCENT, ValueType.ON_OFF, ValueType.INCREASE_DECREASE),
        (ValueType.HSB, ValueType.PERCENT, ValueType.ON_OFF),
    ),
    ItemKind.LOCATION: ((ValueType.POINT,), (ValueType.POINT,)),
}


class Item(StrictModel):
    """
    An addressable item as seen by the binding parser.

    The order of the accepted types matters: the n-th comma separated
    datapoint definition of a binding line is matched with the n-th
    accepted type when no datapoint type id is given explicitly.
    """

    name: str = Field(..., description="Unique item name")
    accepted_command_types: Tuple[ValueType, ...] = Field(
        default=(), description="Command types accepted by the item, by priority"
    )
    accepted_data_types: Tuple[ValueType, ...] = Field(
        default=(), description="State types accepted by the item, by priority"
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Ensure item name is not empty."""
        v = v.strip()
        if not v:
            raise ValueError("Item name cannot be empty")
        return v

    @field_validator("accepted_command_types", "accepted_data_types", mode="before")
    @classmethod
    def normalize_value_types(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            return tuple(ValueType.from_string(t) for t in v)
        return v

    @classmethod
    def of_kind(cls, name: str, kind: Union[ItemKind, str]) -> "Item":
        """Create an item with the accepted types of a standard item kind."""
        kind = ItemKind.from_string(kind)
        return cls(
            name=name,
            accepted_command_types=kind.accepted_command_types,
            accepted_data_types=kind.accepted_data_types,
        )

    @property
    def accepts_commands(self) -> bool:
        """Check if the item accepts at least one command type."""
        return len(self.accepted_command_types) > 0
