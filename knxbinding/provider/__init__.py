"""
Binding provider: registry of item bindings and the lookups built on it.
"""

from .binding_provider import KNX_BINDING_TYPE, KnxBindingProvider
from .validators import BindingIssue, BindingValidator, LoadReport, validate_bindings

__all__ = [
    "KNX_BINDING_TYPE",
    "KnxBindingProvider",
    "BindingIssue",
    "BindingValidator",
    "LoadReport",
    "validate_bindings",
]
