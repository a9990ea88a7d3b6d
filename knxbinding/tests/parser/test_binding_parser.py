"""
Tests for the KNX binding configuration parser.
"""

import logging

import pytest

from knxbinding.dpt import get_dpt_library
from knxbinding.model import Datapoint, DatapointRole, GroupAddress, Item, ValueType
from knxbinding.parser import (
    BindingConfigParseError,
    BindingConfigParser,
    BindingGroupBuilder,
    BindingSyntaxError,
    ConstraintViolation,
    ParseError,
    UnresolvedTypeError,
    parse_binding_config,
)


def ga(text):
    return GroupAddress.from_string(text)


@pytest.fixture
def parser():
    return BindingConfigParser()


class TestSingleGroup:
    def test_plain_address(self, parser, switch):
        binding = parser.parse(switch, "1/1/10")

        assert binding.item_name == "Light_Kitchen"
        assert len(binding.groups) == 1
        group = binding.groups[0]
        assert len(group.datapoints) == 1
        dp = group.main_datapoint
        assert dp.address == ga("1/1/10")
        assert dp.role == DatapointRole.COMMAND
        assert dp.dpt_id == "1.001"
        assert dp.item_name == "Light_Kitchen"
        assert dp.alt_behavior is False
        assert group.readable_address is None
        assert group.refresh_interval is None

    def test_explicit_type_id_used_verbatim(self, parser, switch):
        binding = parser.parse(switch, "1.002:1/1/10")
        assert binding.groups[0].main_datapoint.dpt_id == "1.002"

    def test_readable_with_listening_addresses(self, parser, switch):
        group = parser.parse(switch, "<1/1/10+0/1/13+0/1/14").groups[0]

        assert group.readable_address == ga("1/1/10")
        assert group.refresh_interval is None
        assert [dp.role for dp in group.datapoints] == [
            DatapointRole.COMMAND,
            DatapointRole.STATE,
            DatapointRole.STATE,
        ]
        assert all(dp.dpt_id == "1.001" for dp in group.datapoints)
        assert group.all_addresses == (ga("1/1/10"), ga("0/1/13"), ga("0/1/14"))

    def test_refresh_interval(self, parser, switch):
        group = parser.parse(switch, "<(30)4/2/10").groups[0]
        assert group.readable_address == ga("4/2/10")
        assert group.refresh_interval == 30

    def test_largest_refresh_interval(self, parser, switch):
        group = parser.parse(switch, "<(2147483647)4/2/10").groups[0]
        assert group.refresh_interval == 2**31 - 1

    def test_start_stop_suffix(self, parser, switch):
        dp = parser.parse(switch, "4/2/10ss").groups[0].main_datapoint
        assert dp.address == ga("4/2/10")
        assert dp.alt_behavior is True

    def test_readable_listening_address(self, parser, switch):
        group = parser.parse(switch, "1/1/10+<(60)0/1/13").groups[0]
        assert group.readable_address == ga("0/1/13")
        assert group.refresh_interval == 60
        assert group.readable_datapoint.role == DatapointRole.STATE

    def test_leading_plus_makes_state_endpoint(self, parser, switch):
        dp = parser.parse(switch, "+1/1/10").groups[0].main_datapoint
        assert dp.role == DatapointRole.STATE

    def test_item_without_commands_gets_state_endpoints(self, parser):
        window = Item.of_kind("Window", "Contact")
        dp = parser.parse(window, "1/1/10").groups[0].main_datapoint
        assert dp.role == DatapointRole.STATE
        assert dp.dpt_id == "1.009"

    def test_whitespace_around_separators(self, parser, switch):
        binding = parser.parse(switch, " <1/1/10 + 0/1/13 ")
        assert binding.groups[0].all_addresses == (ga("1/1/10"), ga("0/1/13"))

    def test_readable_start_stop_address(self, parser, switch):
        group = parser.parse(switch, "<1/1/10ss").groups[0]
        assert group.readable_address == ga("1/1/10")
        assert group.main_datapoint.alt_behavior is True


class TestMultipleGroups:
    def test_types_follow_segment_index(self, parser, rollershutter):
        binding = parser.parse(rollershutter, "4/2/10, 4/2/11, 4/2/12")
        assert [g.main_datapoint.dpt_id for g in binding.groups] == ["1.008", "1.010", "5.001"]

    def test_same_address_in_different_segments(self, parser, rollershutter):
        binding = parser.parse(rollershutter, "4/2/10, 4/2/10")
        assert len(binding.groups) == 2
        assert binding.groups[0].main_address == binding.groups[1].main_address
        assert binding.groups[0].main_datapoint.dpt_id == "1.008"
        assert binding.groups[1].main_datapoint.dpt_id == "1.010"

    def test_dimmer_line(self, parser):
        dimmer = Item.of_kind("Dimmer_Living", "Dimmer")
        binding = parser.parse(dimmer, "<1/1/10+0/1/13, 3/1/10ss, 5.001:1/1/11")

        assert len(binding.groups) == 3
        assert binding.groups[0].readable_address == ga("1/1/10")
        assert binding.groups[1].main_datapoint.dpt_id == "3.007"
        assert binding.groups[1].main_datapoint.alt_behavior is True
        assert binding.groups[2].main_datapoint.dpt_id == "5.001"

    def test_trailing_comma_ignored(self, parser, switch):
        assert len(parser.parse(switch, "1/1/10,").groups) == 1

    def test_data_types_used_without_command_types(self, parser):
        sensor = Item(name="Sensor", accepted_data_types=["Decimal", "OpenClosed"])
        binding = parser.parse(sensor, "1/1/10, 1/1/11")
        assert [g.main_datapoint.dpt_id for g in binding.groups] == ["9.001", "1.009"]
        assert all(g.main_datapoint.role == DatapointRole.STATE for g in binding.groups)

    def test_single_data_type_is_reused(self, parser):
        window = Item.of_kind("Window", "Contact")
        binding = parser.parse(window, "1/1/10, 1/1/11")
        assert [g.main_datapoint.dpt_id for g in binding.groups] == ["1.009", "1.009"]

    def test_explicit_types_skip_count_check(self, parser):
        item = Item(name="Custom", accepted_command_types=["OnOff"])
        binding = parser.parse(item, "1/1/10, 5.001:1/1/11")
        assert binding.groups[1].main_datapoint.dpt_id == "5.001"


class TestSyntaxErrors:
    @pytest.mark.parametrize(
        "config, message",
        [
            ("<()4/2/10", "Empty brackets are not allowed"),
            ("<( )4/2/10", "Empty brackets are not allowed"),
            ("<(abc)4/2/10", "must be a number"),
            ("<(2147483648)4/2/10", "must be a number"),
            ("<(99999999999999999999)4/2/10", "must be a number"),
            ("<(-99999999999999999999)4/2/10", "must be a number"),
            ("<(30 4/2/10", r"Closing '\)' missing"),
            ("", "empty"),
            ("   ", "empty"),
            ("1/1/10,,1/1/11", "Datapoint definition 2 is empty"),
            ("foo", "Invalid datapoint definition"),
            ("4/2/10 ss", "Invalid datapoint definition"),
            ("(30)4/2/10", "Invalid datapoint definition"),
            ("1/1/1/1", "Invalid group address"),
            ("32/0/0", "Main group out of range"),
            ("1/8/0", "Middle group out of range"),
            ("+", "contains no group address"),
        ],
    )
    def test_syntax_errors(self, parser, rollershutter, config, message):
        with pytest.raises(BindingSyntaxError, match=message):
            parser.parse(rollershutter, config)


class TestConstraintViolations:
    def test_duplicate_address_in_segment(self, parser, switch):
        with pytest.raises(ConstraintViolation, match="already exists") as exc_info:
            parser.parse(switch, "4/2/10+4/2/10")
        assert exc_info.value.item_name == "Light_Kitchen"

    def test_equal_addresses_in_different_notations(self, parser, switch):
        with pytest.raises(ConstraintViolation, match="already exists"):
            parser.parse(switch, "1/0/10+1/10")

    def test_second_readable_address(self, parser, switch):
        with pytest.raises(ConstraintViolation, match="Only one readable"):
            parser.parse(switch, "<1/1/10+<0/1/13")

    def test_readable_checked_before_duplicates(self, parser, switch):
        with pytest.raises(ConstraintViolation, match="Only one readable"):
            parser.parse(switch, "<1/1/10+<1/1/10")

    @pytest.mark.parametrize("config", ["<(0)1/1/10", "<(-5)1/1/10"])
    def test_refresh_not_positive(self, parser, switch, config):
        with pytest.raises(ConstraintViolation, match="must be positive"):
            parser.parse(switch, config)

    def test_too_many_segments(self, parser):
        item = Item(name="Light", accepted_command_types=["OnOff"])
        with pytest.raises(ConstraintViolation, match="no more than 1 are allowed"):
            parser.parse(item, "1/1/10, 1/1/11")

    def test_too_many_segments_for_data_types(self, parser):
        sensor = Item(name="Sensor", accepted_data_types=["Decimal", "OpenClosed"])
        with pytest.raises(ConstraintViolation, match="no more than 2 are allowed"):
            parser.parse(sensor, "1/1/10, 1/1/11, 1/1/12")

    def test_item_without_types(self, parser):
        with pytest.raises(ConstraintViolation, match="Too many datapoint definitions"):
            parser.parse(Item(name="Bare"), "1/1/10")


class TestUnresolvedTypes:
    def test_unsupported_type_id(self, parser, switch):
        with pytest.raises(UnresolvedTypeError, match="DPT 99.999 is not supported"):
            parser.parse(switch, "99.999:1/1/10")

    def test_no_default_type(self, parser):
        location = Item.of_kind("Position", "Location")
        with pytest.raises(UnresolvedTypeError, match="No DPT could be determined for the type 'Point'"):
            parser.parse(location, "1/1/10")


class TestErrorTaxonomy:
    def test_all_errors_are_parse_errors(self):
        for cls in (BindingSyntaxError, ConstraintViolation, UnresolvedTypeError):
            assert issubclass(cls, BindingConfigParseError)
            assert issubclass(cls, ParseError)

    def test_error_carries_item_and_source(self, parser, switch):
        with pytest.raises(BindingSyntaxError) as exc_info:
            parser.parse(switch, "1/1/10+<(x)0/1/13")
        err = exc_info.value
        assert err.item_name == "Light_Kitchen"
        assert err.source == "<(x)0/1/13"
        assert "Item: Light_Kitchen" in str(err)
        assert err.message == "Refresh interval must be a number, but was 'x'."

    def test_first_error_aborts_line(self, parser, rollershutter):
        # The first segment is broken; the unsupported type of the second is never reached
        with pytest.raises(BindingSyntaxError):
            parser.parse(rollershutter, "<()1/1/10, 99.999:1/1/11")


class FixedTypeMapper:
    """Type mapper mapping every value type to DPT 1.001."""

    def to_dpt_id(self, value_type):
        return "1.001"

    def to_value_type(self, dpt_id):
        return ValueType.ON_OFF if dpt_id == "1.001" else None

    def is_supported(self, dpt_id):
        return dpt_id == "1.001"


class NumericTypeMapper:
    """Type mapper returning numeric type ids."""

    def to_dpt_id(self, value_type):
        return 1001

    def to_value_type(self, dpt_id):
        return None

    def is_supported(self, dpt_id):
        return True


class TestTypeMapper:
    def test_default_mapper_is_dpt_library(self, parser):
        assert parser.type_mapper is get_dpt_library()

    def test_custom_mapper(self, rollershutter):
        parser = BindingConfigParser(FixedTypeMapper())
        binding = parser.parse(rollershutter, "4/2/10, 4/2/11")
        assert [g.main_datapoint.dpt_id for g in binding.groups] == ["1.001", "1.001"]
        with pytest.raises(UnresolvedTypeError):
            parser.parse(rollershutter, "5.001:4/2/10")

    def test_convenience_function(self, switch):
        binding = parse_binding_config(switch, "1/1/10", type_mapper=FixedTypeMapper())
        assert binding.groups[0].main_datapoint.dpt_id == "1.001"

    def test_invalid_mapper_result_is_a_binding_error(self, switch):
        parser = BindingConfigParser(NumericTypeMapper())
        with pytest.raises(BindingSyntaxError, match="Invalid datapoint definition") as exc_info:
            parser.parse(switch, "1/1/10")
        assert exc_info.value.item_name == "Light_Kitchen"
        assert exc_info.value.source == "1/1/10"


class TestBindingGroupBuilder:
    def make_dp(self, address, dpt_id="1.001"):
        return Datapoint(
            address=address, item_name="Light", dpt_id=dpt_id, role=DatapointRole.STATE
        )

    def test_build(self):
        group = (
            BindingGroupBuilder("Light")
            .add(self.make_dp("1/1/10"), readable=True, refresh_interval=10)
            .add(self.make_dp("0/1/13"))
            .build()
        )
        assert group.readable_address == ga("1/1/10")
        assert group.refresh_interval == 10
        assert len(group.datapoints) == 2

    def test_build_empty(self):
        with pytest.raises(BindingSyntaxError):
            BindingGroupBuilder("Light").build()

    def test_duplicate_reports_clause_source(self):
        builder = BindingGroupBuilder("Light", "1/1/10+1.002:1/1/10")
        builder.add(self.make_dp("1/1/10"), source="1/1/10")
        builder.add(self.make_dp("1/1/10", "1.002"), source="1.002:1/1/10")
        with pytest.raises(ConstraintViolation) as exc_info:
            builder.build()
        assert exc_info.value.source == "1.002:1/1/10"
        assert "Datapoint '1.002' with address 1/1/10" in exc_info.value.message


def test_parse_logs_at_debug(parser, switch, caplog):
    caplog.set_level(logging.DEBUG, logger="knxbinding")
    parser.parse(switch, "1/1/10")
    assert "Light_Kitchen" in caplog.text


def test_parsing_twice_gives_equal_bindings(parser, switch):
    assert parser.parse(switch, "<(30)1/1/10+0/1/13") == parser.parse(switch, "<(30)1/1/10+0/1/13")
