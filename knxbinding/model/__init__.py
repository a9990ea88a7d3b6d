"""
Pydantic-based data models for KNX item bindings.

This module provides the immutable result tree of the binding
configuration parser together with the item and value type models the
parser consumes.
"""

from .address import GroupAddress
from .base import KnxBaseModel, StrictModel
from .binding import BindingGroup, Datapoint, DatapointRole, ItemBinding
from .types import Item, ItemKind, ValueType

__all__ = [
    # Base
    "KnxBaseModel",
    "StrictModel",
    # Address
    "GroupAddress",
    # Items
    "Item",
    "ItemKind",
    "ValueType",
    # Bindings
    "Datapoint",
    "DatapointRole",
    "BindingGroup",
    "ItemBinding",
]
