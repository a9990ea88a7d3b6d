"""
Validation utilities for registered KNX bindings.

Each binding is valid on its own once parsed. The checks here look across
items for setups that work but are likely mistakes, and collect the
outcome of loading an items file.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Set

from knxbinding.model import GroupAddress

if TYPE_CHECKING:
    from .binding_provider import KnxBindingProvider


@dataclass
class BindingIssue:
    """Problem found while loading or checking bindings."""

    severity: str  # 'error', 'warning'
    message: str
    location: str  # e.g. 'item:Light_Kitchen', 'address:1/1/10'
    suggestion: str = ""
    source: str = ""  # Offending binding configuration, if any


def _format_issues(title: str, issues: List[BindingIssue]) -> List[str]:
    lines = [f"\n{len(issues)} {title}:"]
    for issue in issues:
        lines.append(f"  [{issue.severity.upper()}] {issue.location}: {issue.message}")
        if issue.source:
            lines.append(f"           in '{issue.source}'")
        if issue.suggestion:
            lines.append(f"           → {issue.suggestion}")
    return lines


@dataclass
class LoadReport:
    """Outcome of loading a batch of item bindings."""

    context: str
    loaded: List[str] = field(default_factory=list)
    issues: List[BindingIssue] = field(default_factory=list)

    @property
    def errors(self) -> List[BindingIssue]:
        return [i for i in self.issues if i.severity == "error"]

    @property
    def warnings(self) -> List[BindingIssue]:
        return [i for i in self.issues if i.severity == "warning"]

    @property
    def ok(self) -> bool:
        return not self.errors

    def summary(self) -> str:
        """Get human-readable summary."""
        total = len(self.loaded) + len(self.errors)
        lines = [f"{self.context}: {len(self.loaded)} of {total} item binding(s) loaded"]
        if self.errors:
            lines.extend(_format_issues("Error(s)", self.errors))
        if self.warnings:
            lines.extend(_format_issues("Warning(s)", self.warnings))
        return "\n".join(lines)


class BindingValidator:
    """
    Cross-item checks on the bindings of a provider.

    Never rejects a binding; everything found is reported as a warning.
    """

    def __init__(self, provider: "KnxBindingProvider"):
        self.provider = provider
        self.warnings: List[BindingIssue] = []

    def validate_all(self) -> List[BindingIssue]:
        """
        Run all checks.

        Returns:
            The warnings found
        """
        self.warnings.clear()

        self.validate_polling()
        self.validate_start_stop_marking()

        return self.warnings

    def validate_polling(self) -> None:
        """Warn about addresses read by more than one item."""
        readers: Dict[GroupAddress, List[str]] = {}
        for dp in self.provider.readable_datapoints():
            readers.setdefault(dp.address, []).append(dp.item_name)

        for address, item_names in readers.items():
            if len(item_names) > 1:
                self.warnings.append(
                    BindingIssue(
                        severity="warning",
                        message=f"Address is readable for {len(item_names)} items: "
                        + ", ".join(f"'{n}'" for n in item_names),
                        location=f"address:{address}",
                        suggestion="Mark the address readable ('<') for a single item only",
                    )
                )

    def validate_start_stop_marking(self) -> None:
        """Warn about addresses marked start/stop in some groups but not in others."""
        marked: Set[GroupAddress] = set()
        unmarked: Dict[GroupAddress, List[str]] = {}
        for binding in self.provider.bindings():
            for group in binding.groups:
                for dp in group.datapoints:
                    if dp.alt_behavior:
                        marked.add(dp.address)
                    else:
                        unmarked.setdefault(dp.address, []).append(binding.item_name)

        for address in sorted(marked & set(unmarked), key=lambda a: a.raw):
            names = ", ".join(f"'{n}'" for n in unmarked[address])
            self.warnings.append(
                BindingIssue(
                    severity="warning",
                    message=f"Address is marked start/stop elsewhere but not for {names}",
                    location=f"address:{address}",
                    suggestion="Use the 'ss' suffix consistently for this address",
                )
            )

    def get_summary(self) -> str:
        """Get human-readable summary of the checks."""
        if not self.warnings:
            return "\n✓ All binding checks passed"
        return "\n".join(_format_issues("Warning(s)", self.warnings))


def validate_bindings(provider: "KnxBindingProvider") -> List[BindingIssue]:
    """Convenience function to run all cross-item checks on a provider."""
    return BindingValidator(provider).validate_all()
