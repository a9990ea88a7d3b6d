"""
KNX group addresses.

A group address is a 16 bit value. It is written either as a three-level
address ``main/middle/sub`` (5/3/8 bits), a two-level address ``main/sub``
(5/11 bits) or as the plain raw number. The canonical text form is the
three-level one.
"""

import re
from typing import Union

from pydantic import Field

from .base import KnxBaseModel

_ADDRESS_PATTERN = re.compile(r"\d+(?:/\d+){0,2}")

MAIN_GROUP_MAX = 0x1F
MIDDLE_GROUP_MAX = 0x07
SUB_GROUP_8_MAX = 0xFF
SUB_GROUP_11_MAX = 0x7FF
RAW_MAX = 0xFFFF


class GroupAddress(KnxBaseModel):
    """
    Group address of a KNX datapoint.

    Frozen and hashable, equality is by raw value: ``1/0/10`` and ``1/10``
    denote the same address.
    """

    raw: int = Field(..., ge=0, le=RAW_MAX, description="16 bit raw address value")

    @classmethod
    def from_parts(cls, main: int, middle: int, sub: int) -> "GroupAddress":
        """Build a three-level group address."""
        if not 0 <= main <= MAIN_GROUP_MAX:
            raise ValueError(f"Main group out of range [0..{MAIN_GROUP_MAX}]: {main}")
        if not 0 <= middle <= MIDDLE_GROUP_MAX:
            raise ValueError(f"Middle group out of range [0..{MIDDLE_GROUP_MAX}]: {middle}")
        if not 0 <= sub <= SUB_GROUP_8_MAX:
            raise ValueError(f"Sub group out of range [0..{SUB_GROUP_8_MAX}]: {sub}")
        return cls(raw=(main << 11) | (middle << 8) | sub)

    @classmethod
    def from_string(cls, address: str) -> "GroupAddress":
        """Parse a group address from its text form.

        Args:
            address: ``"main/middle/sub"``, ``"main/sub"`` or ``"raw"``

        Returns:
            GroupAddress instance

        Raises:
            ValueError: If the text is not a valid group address

        Example:
            >>> str(GroupAddress.from_string("1/2/3"))
            '1/2/3'
        """
        text = address.strip()
        if not _ADDRESS_PATTERN.fullmatch(text):
            raise ValueError(f"Invalid group address: '{address}'")

        parts = [int(p) for p in text.split("/")]
        if len(parts) == 3:
            return cls.from_parts(*parts)
        if len(parts) == 2:
            main, sub = parts
            if not 0 <= main <= MAIN_GROUP_MAX:
                raise ValueError(f"Main group out of range [0..{MAIN_GROUP_MAX}]: {main}")
            if not 0 <= sub <= SUB_GROUP_11_MAX:
                raise ValueError(f"Sub group out of range [0..{SUB_GROUP_11_MAX}]: {sub}")
            return cls(raw=(main << 11) | sub)
        if parts[0] > RAW_MAX:
            raise ValueError(f"Group address out of range [0..{RAW_MAX}]: {parts[0]}")
        return cls(raw=parts[0])

    @classmethod
    def coerce(cls, address: Union["GroupAddress", str]) -> "GroupAddress":
        """Accept either a ``GroupAddress`` or its text form."""
        if isinstance(address, cls):
            return address
        return cls.from_string(address)

    @property
    def main_group(self) -> int:
        return (self.raw >> 11) & MAIN_GROUP_MAX

    @property
    def middle_group(self) -> int:
        return (self.raw >> 8) & MIDDLE_GROUP_MAX

    @property
    def sub_group(self) -> int:
        return self.raw & SUB_GROUP_8_MAX

    def __str__(self) -> str:
        return f"{self.main_group}/{self.middle_group}/{self.sub_group}"
