"""
Harness Git module.

This module contains the asyncio git client and the fixture repository that
tests commit into. It depends only on harness_common.
"""

from .client import GitClient, GitException
from .fixture import FixtureRepository

__all__ = ["FixtureRepository", "GitClient", "GitException"]
