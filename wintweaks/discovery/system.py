"""
System checks - platform and privilege detection.
"""

import ctypes
import os
import sys

from ..protocol.errors import PlatformUnavailableError


def is_windows() -> bool:
    return os.name == "nt"


def is_running_as_admin() -> bool:
    """True if the process has administrator rights (always False off Windows)."""
    if not is_windows():
        return False
    try:
        return bool(ctypes.windll.shell32.IsUserAnAdmin())
    except (AttributeError, OSError):
        return False


def require_windows():
    """
    Raise unless running on Windows.

    Raises:
        PlatformUnavailableError: on any other platform
    """
    if not is_windows():
        raise PlatformUnavailableError(
            f"Services, scheduled tasks and the registry can only be changed on Windows "
            f"(running on {sys.platform})"
        )
