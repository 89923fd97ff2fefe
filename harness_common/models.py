"""
Data models for the git build harness.

These models describe the source configuration of a build job and the
artifacts a build leaves behind, independent of the build host that runs it.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from .extensions import ExtensionList

if TYPE_CHECKING:
    from .builders import Builder
    from .host import Workspace


@dataclass(frozen=True)
class Identity:
    """A synthetic author or committer used by fixture commits."""

    name: str
    email: str

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>"


JOHN_DOE = Identity("John Doe", "john@doe.com")
JANE_DOE = Identity("Jane Doe", "jane@doe.com")


@dataclass(frozen=True)
class RemoteConfig:
    """
    Describes where a job fetches its source from.

    The refspec and credentials are optional; a missing refspec means the
    default "fetch every branch into refs/remotes/<name>/".
    """

    url: str
    name: str = "origin"
    refspec: str | None = None
    credentials_id: str | None = None

    def effective_refspec(self) -> str:
        """Return the configured refspec or the default one for this remote."""
        if self.refspec:
            return self.refspec
        return f"+refs/heads/*:refs/remotes/{self.name}/*"


@dataclass(frozen=True)
class BranchSpec:
    """
    A pattern selecting which branch(es) a job builds.

    "*" matches within a single path segment and "**" matches across
    segments. A pattern without a "/" also matches "<remote>/<pattern>", so
    "master" selects "origin/master".
    """

    name: str

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Branch spec must not be empty")

    def _regex(self) -> re.Pattern[str]:
        pattern = self.name.strip()
        if pattern.startswith("refs/heads/"):
            pattern = pattern[len("refs/heads/"):]
        elif pattern.startswith("refs/remotes/"):
            pattern = pattern[len("refs/remotes/"):]

        parts = []
        i = 0
        while i < len(pattern):
            if pattern.startswith("**", i):
                parts.append(".*")
                i += 2
            elif pattern[i] == "*":
                parts.append("[^/]*")
                i += 1
            else:
                parts.append(re.escape(pattern[i]))
                i += 1
        body = "".join(parts)

        if "/" not in pattern and pattern != "**":
            # Bare branch names match on any remote
            body = f"(?:[^/]+/)?{body}"
        return re.compile(f"^{body}$")

    def matches(self, ref: str) -> bool:
        """
        Check whether a branch reference is selected by this spec.

        Args:
            ref: Branch name such as "master", "origin/master",
                 "refs/heads/master" or "refs/remotes/origin/master"

        Returns:
            True if the spec selects the branch
        """
        if ref.startswith("refs/heads/"):
            ref = ref[len("refs/heads/"):]
        elif ref.startswith("refs/remotes/"):
            ref = ref[len("refs/remotes/"):]
        return self._regex().match(ref) is not None

    def filter_matching(self, refs: list[str]) -> list[str]:
        """Return the references this spec selects, preserving order."""
        return [ref for ref in refs if self.matches(ref)]


class Result(str, Enum):
    """Terminal status of a build, ordered from best to worst."""

    SUCCESS = "SUCCESS"
    UNSTABLE = "UNSTABLE"
    FAILURE = "FAILURE"
    NOT_BUILT = "NOT_BUILT"
    ABORTED = "ABORTED"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Cause:
    """Why a build was scheduled."""

    description: str


@dataclass(frozen=True)
class UserCause(Cause):
    """A build started explicitly by a user."""

    description: str = "Started by user"
    user_name: str = "anonymous"


@dataclass
class GitSCMConfig:
    """
    Source configuration of a job: remotes, branches and extensions.

    `author_or_committer`, `local_branch` and `fast_remote_poll` are carried
    for downstream consumers (polling, checkout); the configuration itself
    does not interpret them.
    """

    remotes: list[RemoteConfig]
    branches: list[BranchSpec]
    extensions: ExtensionList = field(default_factory=ExtensionList)
    author_or_committer: bool = False
    local_branch: str | None = None
    fast_remote_poll: bool = False

    def __post_init__(self):
        if not self.remotes:
            raise ValueError("At least one remote repository is required")
        if not self.branches:
            raise ValueError("At least one branch spec is required")


@dataclass
class Project:
    """
    A build job: a source configuration plus an ordered list of build steps.
    """

    name: str
    scm: GitSCMConfig | None = None
    builders: list["Builder"] = field(default_factory=list)


@dataclass
class Build:
    """
    One execution of a project.

    Produced by a build host per build invocation; inspected then discarded.
    """

    number: int
    project_name: str
    workspace: "Workspace"
    cause: Cause
    result: Result | None = None  # None while the build is running
    log_lines: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)
    revision: str | None = None  # Commit id that was checked out
    branch: str | None = None  # Remote branch that was built, e.g. "origin/master"

    def log(self, message: str) -> None:
        """Append a line to the build log."""
        self.log_lines.append(message)

    def get_log(self) -> str:
        """Return the complete build log."""
        return "\n".join(self.log_lines) + ("\n" if self.log_lines else "")

    def to_dict(self) -> dict[str, Any]:
        """Convert build to dictionary format (for display)."""
        return {
            "number": self.number,
            "project": self.project_name,
            "result": str(self.result) if self.result else None,
            "revision": self.revision,
            "branch": self.branch,
            "workspace": str(self.workspace.path),
        }


@dataclass(frozen=True)
class EnvEntry:
    """One environment variable assigned on a node."""

    key: str
    value: str


@dataclass
class EnvironmentVariablesNodeProperty:
    """Node property contributing environment variables to every build."""

    entries: list[EnvEntry] = field(default_factory=list)

    def env_vars(self) -> dict[str, str]:
        return {entry.key: entry.value for entry in self.entries}


@dataclass
class Node:
    """A machine (or in-process worker) that runs builds."""

    name: str = "built-in"
    node_properties: list[EnvironmentVariablesNodeProperty] = field(
        default_factory=list
    )

    def replace_properties(
        self, properties: list[EnvironmentVariablesNodeProperty]
    ) -> None:
        """Replace the node's property set with exactly `properties`."""
        self.node_properties = list(properties)

    def env_vars(self) -> dict[str, str]:
        """Merge the environment variables of all node properties."""
        env: dict[str, str] = {}
        for prop in self.node_properties:
            env.update(prop.env_vars())
        return env
