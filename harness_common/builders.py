"""
Build steps attached to a project.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Build


class Builder(ABC):
    """A single build step run after the source checkout."""

    @abstractmethod
    async def perform(self, build: "Build", env: dict[str, str]) -> bool:
        """
        Run the step.

        Args:
            build: The running build
            env: Environment visible to the step

        Returns:
            True if the step succeeded, False to fail the build
        """
        pass


class CaptureEnvironmentBuilder(Builder):
    """Records the environment visible during the most recent build."""

    def __init__(self):
        self.env_vars: dict[str, str] = {}

    async def perform(self, build: "Build", env: dict[str, str]) -> bool:
        self.env_vars = dict(env)
        return True

    def get_env_vars(self) -> dict[str, str]:
        return self.env_vars
