"""
Discovery module - Gathers the tweak document and system facts.

Components:
- TweakDocumentLoader: finds and parses the tweak document
- tweaks_by_category: category index for menus
- is_running_as_admin / require_windows: privilege and platform checks
"""

from .loader import TweakDocumentLoader, tweaks_by_category
from .system import is_running_as_admin, is_windows, require_windows

__all__ = [
    "TweakDocumentLoader",
    "tweaks_by_category",
    "is_running_as_admin",
    "is_windows",
    "require_windows",
]
