"""
Canonical writer for KNX binding configuration strings.

Renders an ``ItemBinding`` back into the binding configuration syntax.
Type ids are always written explicitly, so parsing the output again for
the same item gives an identical ``ItemBinding``.
"""

from typing import List

from knxbinding.model import BindingGroup, Datapoint, DatapointRole, ItemBinding
from knxbinding.parser.binding_parser import CLAUSE_SEPARATOR, SEGMENT_SEPARATOR
from knxbinding.parser.grammar import ALT_BEHAVIOR_SUFFIX, READABLE_MARKER, TYPE_SEPARATOR


class BindingConfigWriter:
    """Writes item bindings in canonical form."""

    def write(self, binding: ItemBinding) -> str:
        """
        Render an item binding.

        Example:
            ``<(30)1.001:1/1/10+1.001:0/1/13, 5.001:1/1/11``
        """
        return f"{SEGMENT_SEPARATOR} ".join(self.write_group(g) for g in binding.groups)

    def write_group(self, group: BindingGroup) -> str:
        clauses: List[str] = [self.write_datapoint(dp, group) for dp in group.datapoints]

        # A state main datapoint is written as a pure listening address
        if group.main_datapoint.role == DatapointRole.STATE:
            clauses.insert(0, "")
        return CLAUSE_SEPARATOR.join(clauses)

    @staticmethod
    def write_datapoint(dp: Datapoint, group: BindingGroup) -> str:
        parts = []
        if dp.address == group.readable_address:
            parts.append(READABLE_MARKER)
            if group.refresh_interval is not None:
                parts.append(f"({group.refresh_interval})")
        parts.append(f"{dp.dpt_id}{TYPE_SEPARATOR}{dp.address}")
        if dp.alt_behavior:
            parts.append(ALT_BEHAVIOR_SUFFIX)
        return "".join(parts)


def write_binding_config(binding: ItemBinding) -> str:
    """Convenience function to render an item binding in canonical form."""
    return BindingConfigWriter().write(binding)
