"""
KNX binding provider.

Keeps the parsed binding of every item and answers the questions the bus
side asks: which items listen to a group address, which addresses must be
polled and how often, whether an address is a command or start/stop
address and whether an item's auto-update should be suppressed.
"""

import logging
import threading
from pathlib import Path
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Union

from knxbinding.model import Datapoint, GroupAddress, Item, ItemBinding, ValueType
from knxbinding.parser import BindingConfigParseError, BindingConfigParser, YamlItemsParser
from knxbinding.parser.yaml import ItemDefinition

from .validators import BindingIssue, LoadReport

logger = logging.getLogger(__name__)

AddressLike = Union[GroupAddress, str]

KNX_BINDING_TYPE = "knx"


class KnxBindingProvider:
    """
    Registry of item bindings with derived lookups.

    Writers (registration, removal) are serialized by a lock and publish a
    new immutable snapshot of the registry. Readers work on whatever
    snapshot is current when they start and never block.
    """

    def __init__(self, parser: Optional[BindingConfigParser] = None):
        self.parser = parser if parser is not None else BindingConfigParser()
        self._lock = threading.Lock()
        self._bindings: Mapping[str, ItemBinding] = MappingProxyType({})
        self._contexts: Mapping[str, FrozenSet[str]] = MappingProxyType({})

    @property
    def binding_type(self) -> str:
        return KNX_BINDING_TYPE

    # ---- registration ----

    def process_binding_configuration(
        self, context: str, item: Item, binding_config: str
    ) -> ItemBinding:
        """
        Parse a binding configuration and register it for the item.

        A previous binding of the item is replaced. On a parse error the
        registry is left unchanged and the error propagates.

        Args:
            context: Origin of the configuration (e.g. a file name)
            item: The item being bound
            binding_config: The binding configuration string

        Returns:
            The registered ItemBinding

        Raises:
            BindingConfigParseError: If the configuration is invalid
        """
        binding = self.parser.parse(item, binding_config)

        with self._lock:
            bindings = dict(self._bindings)
            bindings[item.name] = binding
            # An item belongs to the context it was registered from last
            contexts = {}
            for name, item_names in self._contexts.items():
                item_names = item_names - {item.name}
                if item_names:
                    contexts[name] = item_names
            contexts[context] = contexts.get(context, frozenset()) | {item.name}
            self._publish(bindings, contexts)

        logger.debug("Registered binding for item '%s' from context '%s'", item.name, context)
        return binding

    def remove_configurations(self, context: str) -> None:
        """Remove all bindings registered from a context."""
        with self._lock:
            contexts = dict(self._contexts)
            item_names = contexts.pop(context, frozenset())
            bindings = {k: v for k, v in self._bindings.items() if k not in item_names}
            self._publish(bindings, contexts)

        if item_names:
            logger.debug("Removed %d binding(s) of context '%s'", len(item_names), context)

    def load_items(self, definitions: Iterable[ItemDefinition], context: str) -> LoadReport:
        """
        Register many items, skipping those with invalid configurations.

        An invalid binding only rejects its own item: the error is logged
        and recorded in the report and loading continues.
        """
        report = LoadReport(context=context)
        for definition in definitions:
            try:
                self.process_binding_configuration(
                    context, definition.item, definition.binding_config
                )
            except BindingConfigParseError as e:
                logger.error("Rejected binding of item '%s': %s", definition.name, e.message)
                report.issues.append(
                    BindingIssue(
                        severity="error",
                        message=e.message,
                        location=f"item:{definition.name}",
                        source=e.source or "",
                    )
                )
            else:
                report.loaded.append(definition.name)
        return report

    def load_file(self, file_path: Union[str, Path], context: Optional[str] = None) -> LoadReport:
        """
        Load an items YAML file, replacing what was loaded from it before.

        Raises:
            ParseError: If the file itself cannot be read or is malformed
        """
        context = context or str(file_path)
        definitions = YamlItemsParser().parse_file(file_path)
        self.remove_configurations(context)
        report = self.load_items(definitions, context)
        logger.info(
            "Loaded %d of %d item binding(s) from %s",
            len(report.loaded),
            len(definitions),
            context,
        )
        return report

    def _publish(self, bindings: Dict[str, ItemBinding], contexts: Dict[str, FrozenSet[str]]) -> None:
        self._bindings = MappingProxyType(bindings)
        self._contexts = MappingProxyType(contexts)

    # ---- registry access ----

    def get_binding(self, item_name: str) -> Optional[ItemBinding]:
        return self._bindings.get(item_name)

    def provides_binding_for(self, item_name: str) -> bool:
        return item_name in self._bindings

    def has_bindings(self) -> bool:
        return len(self._bindings) > 0

    @property
    def item_names(self) -> List[str]:
        return list(self._bindings)

    def bindings(self) -> List[ItemBinding]:
        """Snapshot of all registered bindings in registration order."""
        return list(self._bindings.values())

    # ---- derived queries ----

    def is_command_address(self, address: AddressLike) -> bool:
        """
        Check if a group address is the command address of some datapoint.

        Listening addresses of a group, and any address of a group whose
        item accepts no commands, are not command addresses.
        """
        address = GroupAddress.coerce(address)
        for binding in self._bindings.values():
            for group in binding.groups:
                dp = group.main_datapoint
                if dp.address == address and dp.is_command:
                    return True
        return False

    def readable_datapoints(self) -> List[Datapoint]:
        """All readable datapoints; each carries the name of its item."""
        result = []
        for binding in self._bindings.values():
            for group in binding.readable_groups:
                result.append(group.readable_datapoint)
        return result

    def auto_refresh_time(self, address: AddressLike) -> Optional[int]:
        """
        Polling interval of a readable address in seconds.

        Returns:
            The interval, or None if the address is not readable or is
            only read on demand
        """
        address = GroupAddress.coerce(address)
        for binding in self._bindings.values():
            for group in binding.readable_groups:
                if group.readable_address == address:
                    return group.refresh_interval
        return None

    def is_auto_refresh_enabled(self, address: AddressLike) -> bool:
        return self.auto_refresh_time(address) is not None

    def is_start_stop_address(self, address: AddressLike) -> bool:
        """Check if any group marks the address for start/stop dimming."""
        address = GroupAddress.coerce(address)
        for binding in self._bindings.values():
            for group in binding.groups:
                dp = group.get_datapoint(address)
                if dp is not None and dp.alt_behavior:
                    return True
        return False

    def listening_item_names(self, address: AddressLike) -> List[str]:
        """Names of all items with the address in one of their groups."""
        address = GroupAddress.coerce(address)
        return [
            binding.item_name
            for binding in self._bindings.values()
            if any(group.contains(address) for group in binding.groups)
        ]

    def is_auto_update_suppressed(self, item_name: str) -> Optional[bool]:
        """
        Check whether the item expects its state echoed back from the bus.

        Returns:
            True if some group has listening addresses besides its main
            address, False if every group has a single address, None if
            the item has no binding
        """
        binding = self._bindings.get(item_name)
        if binding is None or not binding.groups:
            return None
        return binding.has_listening_addresses

    def auto_update(self, item_name: str) -> Optional[bool]:
        """
        Auto-update vote for the item: False to disable it, None to not vote.
        """
        if self.is_auto_update_suppressed(item_name):
            return False
        return None

    def datapoints_for_address(self, item_name: str, address: AddressLike) -> List[Datapoint]:
        """Main datapoints of the item's groups containing the address."""
        address = GroupAddress.coerce(address)
        binding = self._bindings.get(item_name)
        if binding is None:
            return []
        return [group.main_datapoint for group in binding.groups_containing(address)]

    def datapoints_for_type(self, item_name: str, value_type: ValueType) -> List[Datapoint]:
        """Main datapoints of the item whose type id translates to the value type."""
        binding = self._bindings.get(item_name)
        if binding is None:
            return []
        type_mapper = self.parser.type_mapper
        return [
            group.main_datapoint
            for group in binding.groups
            if type_mapper.to_value_type(group.main_datapoint.dpt_id) == value_type
        ]
