"""
Harness Host module.

This module contains the in-process build host that runs builds on the
local machine, and the file-system workspace it hands out.
"""

from .local import LocalBuildHost
from .workspace import LocalWorkspace

__all__ = ["LocalBuildHost", "LocalWorkspace"]
