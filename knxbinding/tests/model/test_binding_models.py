"""
Tests for items, value types and the binding result models.
"""

import pytest
from pydantic import ValidationError

from knxbinding.model import (
    BindingGroup,
    Datapoint,
    DatapointRole,
    GroupAddress,
    Item,
    ItemBinding,
    ItemKind,
    ValueType,
)


def make_dp(address, role=DatapointRole.STATE, dpt_id="1.001", alt_behavior=False):
    return Datapoint(
        address=address,
        item_name="Light",
        dpt_id=dpt_id,
        role=role,
        alt_behavior=alt_behavior,
    )


class TestValueTypes:
    @pytest.mark.parametrize("text", ["OnOff", "onoff", "ON_OFF", "OnOffType"])
    def test_from_string_variants(self, text):
        assert ValueType.from_string(text) == ValueType.ON_OFF

    def test_unknown_value_type(self):
        with pytest.raises(ValueError, match="Unknown value type"):
            ValueType.from_string("Temperature")


class TestItems:
    def test_of_kind_uses_kind_types(self):
        item = Item.of_kind("Shutter", "RollershutterItem")
        assert item.accepted_command_types == (
            ValueType.UP_DOWN,
            ValueType.STOP_MOVE,
            ValueType.PERCENT,
        )
        assert item.accepted_data_types == (ValueType.UP_DOWN, ValueType.PERCENT)
        assert item.accepts_commands

    def test_contact_accepts_no_commands(self):
        item = Item.of_kind("Window", ItemKind.CONTACT)
        assert not item.accepts_commands
        assert item.accepted_data_types == (ValueType.OPEN_CLOSED,)

    def test_explicit_types_from_strings(self):
        item = Item(name="Custom", accepted_command_types=["OnOff"], accepted_data_types=["Decimal"])
        assert item.accepted_command_types == (ValueType.ON_OFF,)
        assert item.accepted_data_types == (ValueType.DECIMAL,)

    def test_camel_case_aliases(self):
        item = Item(**{"name": "Custom", "acceptedCommandTypes": ["OnOff"]})
        assert item.accepted_command_types == (ValueType.ON_OFF,)

    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError):
            Item(name="  ")

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValueError, match="Unknown item type"):
            Item.of_kind("X", "Thermostat")

    def test_extra_fields_forbidden(self):
        with pytest.raises(ValidationError):
            Item(name="X", label="Kitchen light")


class TestBindingGroup:
    def test_main_datapoint_and_addresses(self):
        group = BindingGroup(
            item_name="Light",
            datapoints=(
                make_dp("1/1/10", DatapointRole.COMMAND),
                make_dp("0/1/13"),
            ),
            readable_address="1/1/10",
            refresh_interval=30,
        )
        assert group.main_address == GroupAddress.from_string("1/1/10")
        assert group.main_datapoint.is_command
        assert group.readable_datapoint.address == group.main_address
        assert group.all_addresses == (
            GroupAddress.from_string("1/1/10"),
            GroupAddress.from_string("0/1/13"),
        )
        assert group.has_listening_addresses
        assert group.contains(GroupAddress.from_string("0/1/13"))
        assert group.get_datapoint(GroupAddress.from_string("0/1/14")) is None

    def test_empty_group_rejected(self):
        with pytest.raises(ValidationError, match="at least one datapoint"):
            BindingGroup(item_name="Light", datapoints=())

    def test_duplicate_address_rejected(self):
        with pytest.raises(ValidationError, match="Duplicate address"):
            BindingGroup(item_name="Light", datapoints=(make_dp("1/1/10"), make_dp("1/1/10")))

    def test_readable_address_must_be_in_group(self):
        with pytest.raises(ValidationError, match="not part of the group"):
            BindingGroup(
                item_name="Light", datapoints=(make_dp("1/1/10"),), readable_address="1/1/11"
            )

    def test_refresh_requires_readable(self):
        with pytest.raises(ValidationError, match="requires a readable address"):
            BindingGroup(item_name="Light", datapoints=(make_dp("1/1/10"),), refresh_interval=5)

    @pytest.mark.parametrize("interval", [0, -5])
    def test_refresh_must_be_positive(self, interval):
        with pytest.raises(ValidationError):
            BindingGroup(
                item_name="Light",
                datapoints=(make_dp("1/1/10"),),
                readable_address="1/1/10",
                refresh_interval=interval,
            )

    def test_readable_and_start_stop_are_independent(self):
        group = BindingGroup(
            item_name="Light",
            datapoints=(make_dp("1/1/10", alt_behavior=True),),
            readable_address="1/1/10",
        )
        assert group.readable_datapoint.alt_behavior


class TestItemBinding:
    def test_needs_a_group(self):
        with pytest.raises(ValidationError):
            ItemBinding(item_name="Light", groups=())

    def test_aggregates(self):
        g1 = BindingGroup(item_name="Light", datapoints=(make_dp("1/1/10"),), readable_address="1/1/10")
        g2 = BindingGroup(item_name="Light", datapoints=(make_dp("1/1/11"), make_dp("1/1/10")))
        binding = ItemBinding(item_name="Light", groups=(g1, g2))

        assert len(binding.all_addresses) == 3
        assert binding.readable_groups == (g1,)
        assert binding.has_listening_addresses
        assert binding.groups_containing(GroupAddress.from_string("1/1/10")) == (g1, g2)

    def test_bindings_are_hashable_and_comparable(self):
        g = BindingGroup(item_name="Light", datapoints=(make_dp("1/1/10"),))
        a = ItemBinding(item_name="Light", groups=(g,))
        b = ItemBinding(item_name="Light", groups=(g,))
        assert a == b
        assert hash(a) == hash(b)
