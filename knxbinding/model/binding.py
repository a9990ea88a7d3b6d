"""
Binding models produced by the binding configuration parser.

Naming follows the binding configuration line:

    knx="<1/1/10+0/1/13, 5.001:1/1/11"
         |--- group ---|  |- group -|
          ^ datapoint    ^ datapoint

An ``ItemBinding`` holds one ``BindingGroup`` per comma separated segment,
and each group holds one ``Datapoint`` per ``+`` separated address.
"""

from enum import Enum
from typing import Any, Optional, Tuple

from pydantic import Field, field_validator, model_validator

from .address import GroupAddress
from .base import KnxBaseModel


class DatapointRole(str, Enum):
    """Role of a datapoint within its group."""

    COMMAND = "command"
    STATE = "state"


class Datapoint(KnxBaseModel):
    """
    A single group address bound to an item (an endpoint binding).

    The first datapoint of a group is a command datapoint when the item
    accepts commands; every other datapoint only listens for telegrams.
    """

    address: GroupAddress = Field(..., description="Group address")
    item_name: str = Field(..., description="Name of the owning item")
    dpt_id: str = Field(..., description="Datapoint type id, e.g. '1.001'")
    role: DatapointRole = Field(..., description="Command or state datapoint")
    alt_behavior: bool = Field(
        default=False, description="Start/stop behaviour instead of absolute values"
    )

    @field_validator("address", mode="before")
    @classmethod
    def normalize_address(cls, v: Any) -> Any:
        if isinstance(v, str):
            return GroupAddress.from_string(v)
        return v

    @property
    def is_command(self) -> bool:
        return self.role == DatapointRole.COMMAND

    def __str__(self) -> str:
        return f"{self.dpt_id}:{self.address}"


class BindingGroup(KnxBaseModel):
    """
    One datapoint definition of an item: a main address plus listening addresses.

    Invariants (checked on construction):
    - at least one datapoint
    - addresses are unique within the group
    - the readable address, if any, is one of the group's addresses
    - the refresh interval is positive and requires a readable address
    """

    item_name: str = Field(..., description="Name of the owning item")
    datapoints: Tuple[Datapoint, ...] = Field(..., description="Datapoints in declaration order")
    readable_address: Optional[GroupAddress] = Field(
        default=None, description="Address answering read requests, if any"
    )
    refresh_interval: Optional[int] = Field(
        default=None, gt=0, description="Polling interval of the readable address in seconds"
    )

    @field_validator("readable_address", mode="before")
    @classmethod
    def normalize_readable_address(cls, v: Any) -> Any:
        if isinstance(v, str):
            return GroupAddress.from_string(v)
        return v

    @model_validator(mode="after")
    def check_group_invariants(self) -> "BindingGroup":
        if not self.datapoints:
            raise ValueError("A binding group needs at least one datapoint")

        seen = set()
        for dp in self.datapoints:
            if dp.address in seen:
                raise ValueError(f"Duplicate address {dp.address} in binding group")
            seen.add(dp.address)

        if self.readable_address is not None and self.readable_address not in seen:
            raise ValueError(f"Readable address {self.readable_address} is not part of the group")
        if self.refresh_interval is not None and self.readable_address is None:
            raise ValueError("A refresh interval requires a readable address")
        return self

    @property
    def main_datapoint(self) -> Datapoint:
        """The first datapoint declared in the group."""
        return self.datapoints[0]

    @property
    def main_address(self) -> GroupAddress:
        return self.main_datapoint.address

    @property
    def readable_datapoint(self) -> Optional[Datapoint]:
        if self.readable_address is None:
            return None
        return self.get_datapoint(self.readable_address)

    @property
    def all_addresses(self) -> Tuple[GroupAddress, ...]:
        return tuple(dp.address for dp in self.datapoints)

    @property
    def has_listening_addresses(self) -> bool:
        """True if the group has addresses besides its main address."""
        return len(self.datapoints) > 1

    def contains(self, address: GroupAddress) -> bool:
        return any(dp.address == address for dp in self.datapoints)

    def get_datapoint(self, address: GroupAddress) -> Optional[Datapoint]:
        for dp in self.datapoints:
            if dp.address == address:
                return dp
        return None


class ItemBinding(KnxBaseModel):
    """
    Complete binding of one item: one group per datapoint definition.

    Group order matches the order of the comma separated segments of the
    configuration line it was parsed from.
    """

    item_name: str = Field(..., description="Name of the bound item")
    groups: Tuple[BindingGroup, ...] = Field(..., min_length=1, description="Binding groups")

    @property
    def all_addresses(self) -> Tuple[GroupAddress, ...]:
        """All addresses of all groups, in declaration order."""
        return tuple(address for group in self.groups for address in group.all_addresses)

    @property
    def readable_groups(self) -> Tuple[BindingGroup, ...]:
        return tuple(g for g in self.groups if g.readable_address is not None)

    @property
    def has_listening_addresses(self) -> bool:
        return any(g.has_listening_addresses for g in self.groups)

    def groups_containing(self, address: GroupAddress) -> Tuple[BindingGroup, ...]:
        return tuple(g for g in self.groups if g.contains(address))
