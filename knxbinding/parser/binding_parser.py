"""
Parser for KNX item binding configuration strings.

The syntax of a binding configuration string is:

    knx="[<[(refresh)]][dptId:]mainGA[ss][+[<][dptId:]listeningGA[ss]...], ..."

Each comma separated segment defines one datapoint of the item. If no
datapoint type id is given it is derived from the item's accepted command
types (or data types): the second segment maps to the second accepted type.
The optional '<' marks the address answering read requests, optionally
followed by a polling interval in seconds. A trailing 'ss' marks an address
for start/stop dimming.

Examples for a Switch item:
    1/1/10
    1.001:1/1/10
    <1/1/10+0/1/13+0/1/14
    <(30)1/1/10

Examples for a Rollershutter item:
    4/2/10, 4/2/11
    1.008:4/2/10, 5.001:4/2/11
    <4/2/10+0/2/10, 5.001:4/2/11+0/2/11
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from pydantic import ValidationError
from pyparsing import ParseBaseException, ParseSyntaxException

from knxbinding.dpt import get_dpt_library
from knxbinding.model import (
    BindingGroup,
    Datapoint,
    DatapointRole,
    GroupAddress,
    Item,
    ItemBinding,
    ValueType,
)
from knxbinding.utils import drop_trailing_empty, split_keep_positions

from .errors import BindingSyntaxError, ConstraintViolation, UnresolvedTypeError
from .grammar import AddressClause, ClauseGrammar
from .protocols import TypeMapper

logger = logging.getLogger(__name__)

SEGMENT_SEPARATOR = ","
CLAUSE_SEPARATOR = "+"

_REFRESH_PATTERN = re.compile(r"[+-]?\d+")

# Refresh intervals are 32 bit signed seconds
REFRESH_INTERVAL_MIN = -(2**31)
REFRESH_INTERVAL_MAX = 2**31 - 1


@dataclass(frozen=True)
class ResolvedClause:
    """A validated clause waiting for its group to be finalized."""

    datapoint: Datapoint
    readable: bool
    refresh_interval: Optional[int]
    source: str


class BindingGroupBuilder:
    """
    Accumulates the clauses of one segment and freezes them into a BindingGroup.

    Group level rules (one readable address, unique addresses) are checked
    in ``build()``, once all clauses of the segment are known.
    """

    def __init__(self, item_name: str, source: str = ""):
        self.item_name = item_name
        self.source = source
        self._clauses: List[ResolvedClause] = []

    def add(
        self,
        datapoint: Datapoint,
        readable: bool = False,
        refresh_interval: Optional[int] = None,
        source: str = "",
    ) -> "BindingGroupBuilder":
        self._clauses.append(
            ResolvedClause(
                datapoint=datapoint,
                readable=readable,
                refresh_interval=refresh_interval,
                source=source,
            )
        )
        return self

    def build(self) -> BindingGroup:
        """
        Validate the collected clauses and create the group.

        Raises:
            BindingSyntaxError: If the segment holds no address
            ConstraintViolation: On a second readable address or a duplicate address
        """
        if not self._clauses:
            raise BindingSyntaxError(
                "Datapoint definition contains no group address.", self.item_name, self.source
            )

        readable = [c for c in self._clauses if c.readable]
        if len(readable) > 1:
            raise ConstraintViolation(
                "Only one readable group address allowed.", self.item_name, self.source
            )

        seen = set()
        for clause in self._clauses:
            dp = clause.datapoint
            if dp.address in seen:
                raise ConstraintViolation(
                    f"Datapoint '{dp.dpt_id}' with address {dp.address} already exists "
                    f"for item '{self.item_name}'.",
                    self.item_name,
                    clause.source,
                )
            seen.add(dp.address)

        readable_clause = readable[0] if readable else None
        try:
            return BindingGroup(
                item_name=self.item_name,
                datapoints=tuple(c.datapoint for c in self._clauses),
                readable_address=readable_clause.datapoint.address if readable_clause else None,
                refresh_interval=readable_clause.refresh_interval if readable_clause else None,
            )
        except ValidationError as e:
            raise BindingSyntaxError(
                f"Invalid datapoint definition: {e.errors()[0]['msg']}",
                self.item_name,
                self.source,
            )


class BindingConfigParser:
    """
    Parser for KNX binding configuration strings.

    Parsing is all-or-nothing: the first error aborts the whole line and
    no partial ``ItemBinding`` is returned. The parser holds no state
    between calls and can be shared between threads.
    """

    def __init__(self, type_mapper: Optional[TypeMapper] = None):
        self.type_mapper = type_mapper if type_mapper is not None else get_dpt_library()
        self._grammar = ClauseGrammar()

    def parse(self, item: Item, binding_config: str) -> ItemBinding:
        """
        Parse a binding configuration string for an item.

        Args:
            item: The item the configuration belongs to
            binding_config: The configuration string, e.g. ``"<1/1/10+0/1/13"``

        Returns:
            ItemBinding with one group per comma separated segment

        Raises:
            BindingSyntaxError: Malformed refresh interval, address or segment
            ConstraintViolation: Duplicate address, second readable address,
                non-positive refresh interval, too many segments
            UnresolvedTypeError: Datapoint type missing or not supported
        """
        segments = drop_trailing_empty(split_keep_positions(binding_config, SEGMENT_SEPARATOR))
        if not segments:
            raise BindingSyntaxError("Binding configuration is empty.", item.name, binding_config)

        groups = []
        for index, segment in enumerate(segments):
            groups.append(self._parse_segment(item, segment, index))

        logger.debug(
            "Parsed binding for item '%s': %d datapoint definition(s)", item.name, len(groups)
        )
        return ItemBinding(item_name=item.name, groups=tuple(groups))

    def _parse_segment(self, item: Item, segment: str, index: int) -> BindingGroup:
        """Parse one comma separated segment into a binding group."""
        if not segment:
            raise BindingSyntaxError(
                f"Datapoint definition {index + 1} is empty.", item.name, segment
            )

        builder = BindingGroupBuilder(item.name, segment)
        for position, text in enumerate(split_keep_positions(segment, CLAUSE_SEPARATOR)):
            # Empty clause from a leading "+": the next address is a pure listening address
            if not text:
                continue

            clause = self._parse_clause(item, text, position)
            refresh_interval = self._parse_refresh_interval(item, clause)
            builder.add(
                self._create_datapoint(item, clause, index),
                readable=clause.readable,
                refresh_interval=refresh_interval,
                source=text,
            )
        return builder.build()

    def _parse_clause(self, item: Item, text: str, position: int) -> AddressClause:
        try:
            return self._grammar.parse(text, position)
        except ParseSyntaxException:
            raise BindingSyntaxError(
                "Closing ')' missing on refresh interval parameter.", item.name, text
            )
        except ParseBaseException as e:
            raise BindingSyntaxError(f"Invalid datapoint definition: {e.msg}", item.name, text)

    def _parse_refresh_interval(self, item: Item, clause: AddressClause) -> Optional[int]:
        """Validate the refresh interval text of a readable clause."""
        if clause.refresh_text is None:
            return None
        if not clause.refresh_text:
            raise BindingSyntaxError(
                "Refresh interval parameter: missing time. Empty brackets are not allowed.",
                item.name,
                clause.text,
            )
        seconds = None
        if _REFRESH_PATTERN.fullmatch(clause.refresh_text):
            seconds = int(clause.refresh_text)
        if seconds is None or not REFRESH_INTERVAL_MIN <= seconds <= REFRESH_INTERVAL_MAX:
            raise BindingSyntaxError(
                f"Refresh interval must be a number, but was '{clause.refresh_text}'.",
                item.name,
                clause.text,
            )

        if seconds <= 0:
            raise ConstraintViolation(
                f"Refresh interval must be positive, but was {seconds}.", item.name, clause.text
            )
        return seconds

    def _create_datapoint(self, item: Item, clause: AddressClause, index: int) -> Datapoint:
        dpt_id = self._resolve_dpt_id(item, clause, index)

        try:
            address = GroupAddress.from_string(clause.address)
        except ValueError as e:
            raise BindingSyntaxError(str(e), item.name, clause.text)

        # Only the first address of a segment sends commands
        if clause.position == 0 and item.accepts_commands:
            role = DatapointRole.COMMAND
        else:
            role = DatapointRole.STATE

        try:
            return Datapoint(
                address=address,
                item_name=item.name,
                dpt_id=dpt_id,
                role=role,
                alt_behavior=clause.alt_behavior,
            )
        except ValidationError as e:
            raise BindingSyntaxError(
                f"Invalid datapoint definition: {e.errors()[0]['msg']}", item.name, clause.text
            )

    def _resolve_dpt_id(self, item: Item, clause: AddressClause, index: int) -> str:
        """Use the explicit type id or guess it from the item, then check support."""
        if clause.type_id is not None:
            dpt_id = clause.type_id
        else:
            value_type = self._guess_value_type(item, index, clause)
            dpt_id = self.type_mapper.to_dpt_id(value_type)
            if not dpt_id:
                raise UnresolvedTypeError(
                    f"No DPT could be determined for the type '{value_type.value}'.",
                    item.name,
                    clause.text,
                )

        if not self.type_mapper.is_supported(dpt_id):
            raise UnresolvedTypeError(
                f"DPT {dpt_id} is not supported by the KNX binding.", item.name, clause.text
            )
        return dpt_id

    @staticmethod
    def _guess_value_type(item: Item, index: int, clause: AddressClause) -> ValueType:
        """Pick the accepted type matching the segment index."""
        try:
            if item.accepted_command_types:
                return item.accepted_command_types[index]
            if len(item.accepted_data_types) > 1:
                return item.accepted_data_types[index]
            return item.accepted_data_types[0]
        except IndexError:
            raise ConstraintViolation(
                f"Too many datapoint definitions for this item: "
                f"no more than {index} are allowed.",
                item.name,
                clause.text,
            )


def parse_binding_config(
    item: Item, binding_config: str, type_mapper: Optional[TypeMapper] = None
) -> ItemBinding:
    """
    Convenience function to parse a binding configuration string.

    Args:
        item: The item the configuration belongs to
        binding_config: The configuration string
        type_mapper: Type mapper to use (defaults to the packaged DPT library)

    Returns:
        Parsed ItemBinding
    """
    return BindingConfigParser(type_mapper).parse(item, binding_config)
