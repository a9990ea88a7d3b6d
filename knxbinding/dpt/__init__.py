"""
Datapoint type mapping for the KNX binding.
"""

from .library import DptDefinition, DptLibrary, get_dpt_library

__all__ = ["DptDefinition", "DptLibrary", "get_dpt_library"]
