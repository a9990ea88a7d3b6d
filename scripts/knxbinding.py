#!/usr/bin/env python3
"""
knxbinding - KNX item binding configuration tool.

Usage:
    python scripts/knxbinding.py parse "<(30)1/1/10+0/1/13, 5.001:1/1/11" --item-type Dimmer
    python scripts/knxbinding.py check items.yml --json
    python scripts/knxbinding.py list-dpts

Subcommands:
    parse      Compile a single binding configuration line
    check      Load an items file and report rejected bindings and warnings
    list-dpts  List supported datapoint types and default mappings
"""
import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from knxbinding.dpt import get_dpt_library
from knxbinding.generator.binding_writer import write_binding_config
from knxbinding.model import Item, ItemBinding
from knxbinding.parser import BindingConfigParser, ParseError
from knxbinding.provider import BindingValidator, KnxBindingProvider
from knxbinding.utils import enum_value


def binding_to_dict(binding: ItemBinding) -> dict:
    """JSON friendly view of an item binding."""
    return {
        "item": binding.item_name,
        "canonical": write_binding_config(binding),
        "groups": [
            {
                "readableAddress": str(g.readable_address) if g.readable_address else None,
                "refreshInterval": g.refresh_interval,
                "datapoints": [
                    {
                        "address": str(dp.address),
                        "dpt": dp.dpt_id,
                        "role": enum_value(dp.role),
                        "startStop": dp.alt_behavior,
                    }
                    for dp in g.datapoints
                ],
            }
            for g in binding.groups
        ],
    }


def issue_to_dict(issue) -> dict:
    return {
        "severity": issue.severity,
        "message": issue.message,
        "location": issue.location,
        "source": issue.source,
        "suggestion": issue.suggestion,
    }


def cmd_parse(args):
    """Compile one binding configuration line."""
    try:
        item = Item.of_kind(args.name, args.item_type)
        binding = BindingConfigParser().parse(item, args.config)
    except (ParseError, ValueError) as e:
        if args.json:
            print(json.dumps({"success": False, "error": str(e)}))
        else:
            print(f"Error: {e}")
        sys.exit(1)

    if args.json:
        print(json.dumps({"success": True, "binding": binding_to_dict(binding)}))
        return

    print(f"\n✓ {binding.item_name}: {write_binding_config(binding)}")
    for idx, group in enumerate(binding.groups):
        print(f"\nGroup {idx}:")
        for dp in group.datapoints:
            flags = []
            if dp.address == group.readable_address:
                refresh = group.refresh_interval
                flags.append(f"read every {refresh}s" if refresh else "read on start")
            if dp.alt_behavior:
                flags.append("start/stop")
            suffix = f"  ({', '.join(flags)})" if flags else ""
            print(f"  {str(dp.address):10} {dp.dpt_id:8} {dp.role.value:8}{suffix}")


def cmd_check(args):
    """Load an items file and report problems."""
    provider = KnxBindingProvider()
    try:
        report = provider.load_file(args.input)
    except ParseError as e:
        if args.json:
            print(json.dumps({"success": False, "error": str(e)}))
        else:
            print(f"Error: {e}")
        sys.exit(1)

    warnings = BindingValidator(provider).validate_all()
    report.issues.extend(warnings)

    if args.json:
        print(
            json.dumps(
                {
                    "success": report.ok,
                    "loaded": report.loaded,
                    "issues": [issue_to_dict(i) for i in report.issues],
                }
            )
        )
    else:
        print(report.summary())
        if report.ok and not warnings:
            print("\n✓ All binding checks passed")

    if not report.ok:
        sys.exit(1)


def cmd_list_dpts(args):
    """List supported datapoint types."""
    library = get_dpt_library()

    if args.json:
        print(
            json.dumps(
                {
                    "success": True,
                    "datapointTypes": library.get_all_dpt_info(),
                    "defaults": {enum_value(vt): dpt for vt, dpt in library.get_defaults().items()},
                }
            )
        )
        return

    print("\nSupported datapoint types:")
    for info in library.get_all_dpt_info():
        marker = "*" if info["default"] else " "
        print(f"  {marker} {info['id']:8} {info['valueType']:18} {info['name']}")
    print("\n* default type for its value type")


def main():
    parser = argparse.ArgumentParser(
        prog="knxbinding", description="KNX item binding configuration tool"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # parse subcommand
    parse_parser = subparsers.add_parser("parse", help="Compile a binding configuration line")
    parse_parser.add_argument("config", help="Binding configuration, e.g. '<1/1/10+0/1/13'")
    parse_parser.add_argument(
        "--item-type", "-t", default="Switch", help="Item kind (default: Switch)"
    )
    parse_parser.add_argument("--name", "-n", default="Item", help="Item name (default: Item)")
    parse_parser.add_argument("--json", action="store_true", help="JSON output")
    parse_parser.set_defaults(func=cmd_parse)

    # check subcommand
    check_parser = subparsers.add_parser("check", help="Check an items YAML file")
    check_parser.add_argument("input", help="Items YAML file")
    check_parser.add_argument("--json", action="store_true", help="JSON output")
    check_parser.set_defaults(func=cmd_check)

    # list-dpts subcommand
    dpts_parser = subparsers.add_parser("list-dpts", help="List supported datapoint types")
    dpts_parser.add_argument("--json", action="store_true", help="JSON output")
    dpts_parser.set_defaults(func=cmd_list_dpts)

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    args.func(args)


if __name__ == "__main__":
    main()
