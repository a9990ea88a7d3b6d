"""
Grammar for a single address clause of a KNX binding configuration.

    clause    := ["<" ["(" refresh ")"]] [typeId ":"] address ["ss"]

The line and segment separators (``,`` and ``+``) are split off by the
binding parser before a clause reaches this grammar.
"""

from dataclasses import dataclass
from typing import Optional

from pyparsing import CharsNotIn, Group, Literal
from pyparsing import Optional as Opt
from pyparsing import ParseResults, Regex, Suppress

READABLE_MARKER = "<"
ALT_BEHAVIOR_SUFFIX = "ss"
TYPE_SEPARATOR = ":"


@dataclass(frozen=True)
class AddressClause:
    """Raw, not yet validated content of one address clause."""

    text: str
    position: int  # position within the segment, empty clauses included
    readable: bool
    refresh_text: Optional[str]  # None if no parentheses were given
    type_id: Optional[str]
    address: str
    alt_behavior: bool


class ClauseGrammar:
    """pyparsing grammar for address clauses."""

    def __init__(self):
        """Initialize the clause grammar definitions."""
        self.readable_marker = Literal(READABLE_MARKER)("readable")

        # "-" after "(": an unclosed parenthesis raises ParseSyntaxException
        self.refresh = Group(
            Suppress("(")
            - (Opt(CharsNotIn(")"), default="") + Suppress(")").set_name("closing ')'"))
        )("refresh")

        self.type_id = Regex(r"[^\s:/<>()+,]+")("type_id") + Suppress(TYPE_SEPARATOR)

        # Range and level checks live in GroupAddress
        self.address = Regex(r"\d+(?:/\d+)*")("address")

        # The suffix must follow the address directly
        self.alt_marker = Literal(ALT_BEHAVIOR_SUFFIX).leave_whitespace()("alt")

        self.clause = (
            Opt(self.readable_marker + Opt(self.refresh))
            + Opt(self.type_id)
            + self.address
            + Opt(self.alt_marker)
        )

    def parse(self, text: str, position: int = 0) -> AddressClause:
        """
        Parse one address clause.

        Args:
            text: Clause text without surrounding whitespace
            position: Position of the clause within its segment

        Returns:
            AddressClause with the raw parts of the clause

        Raises:
            ParseSyntaxException: If a refresh parenthesis is not closed
            ParseException: If the clause does not match the grammar
        """
        result = self.clause.parse_string(text, parse_all=True)
        return self._to_clause(text, position, result)

    @staticmethod
    def _to_clause(text: str, position: int, result: ParseResults) -> AddressClause:
        refresh_text = None
        if "refresh" in result:
            refresh_text = str(result["refresh"][0]).strip()

        return AddressClause(
            text=text,
            position=position,
            readable="readable" in result,
            refresh_text=refresh_text,
            type_id=result.get("type_id"),
            address=result["address"],
            alt_behavior="alt" in result,
        )
