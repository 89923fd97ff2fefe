"""
Abstract capability interfaces for build hosts and VCS clients.

The harness only talks to these interfaces, so it can run against a real
build host, the in-process LocalBuildHost, or a test double.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TypeVar

from .models import Build, Cause, Node, Project

T = TypeVar("T")


class Workspace(ABC):
    """
    A file tree materialized by a build host for a build.

    The tree may live on another worker; `act` runs code where it lives.
    """

    @property
    @abstractmethod
    def path(self) -> Path:
        """Location of the workspace on the worker hosting it."""
        pass

    @abstractmethod
    def child(self, name: str) -> "Workspace":
        """Return the workspace entry `name` relative to this one."""
        pass

    @abstractmethod
    def exists(self) -> bool:
        """Check whether this entry exists on its worker."""
        pass

    @abstractmethod
    async def act(self, func: Callable[[Path], T | Awaitable[T]]) -> T:
        """
        Run `func` against this entry on the worker hosting it.

        Args:
            func: Callable receiving the local path; may be a coroutine function

        Returns:
            Whatever `func` returns

        Raises:
            GitException: VCS failures raised by `func` propagate unchanged
            OSError: If the worker cannot access the path
        """
        pass


class BuildHost(ABC):
    """
    Creates projects and runs their builds.

    Implementations own scheduling and execution; callers only await the
    completion future.
    """

    @property
    @abstractmethod
    def node(self) -> Node:
        """The node builds run on."""
        pass

    @abstractmethod
    def create_project(self, name: str) -> Project:
        """
        Create and register a new, empty project.

        Raises:
            ValueError: If a project with the same name already exists
        """
        pass

    @abstractmethod
    def schedule_build(self, project: Project, cause: Cause) -> Awaitable[Build]:
        """
        Schedule one build of `project`.

        Args:
            project: Project to build
            cause: Why the build was requested

        Returns:
            Awaitable completing with the finished build
        """
        pass


class RepositoryResolver(ABC):
    """Resolves references in a local repository."""

    @abstractmethod
    async def resolve(self, ref: str) -> str:
        """
        Resolve `ref` to a full object id.

        Raises:
            GitException: If the reference cannot be resolved
        """
        pass
