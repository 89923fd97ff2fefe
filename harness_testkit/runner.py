"""
Build runner and verifier, plus small accessors used by build tests.
"""

import logging
from pathlib import Path

from harness_common.builders import CaptureEnvironmentBuilder
from harness_common.host import BuildHost, Workspace
from harness_common.models import (
    Build,
    EnvEntry,
    EnvironmentVariablesNodeProperty,
    Node,
    Project,
    Result,
    UserCause,
)
from harness_git.client import GitClient

logger = logging.getLogger(__name__)


class BuildVerificationError(AssertionError):
    """A build did not end in the expected state."""


async def build(
    host: BuildHost,
    project: Project,
    expected_result: Result | None,
    *expected_files: str,
    parent_dir: str | None = None,
) -> Build:
    """
    Run one build of `project` and verify its outcome.

    The build log is printed to stdout before any check so it shows up in
    the test output when a check fails.

    Args:
        host: Build host the project was created on
        project: Project to build
        expected_result: Required terminal status, or None to skip the check
        *expected_files: Files that must exist in the workspace
        parent_dir: Look for the files under this workspace subdirectory
                    instead of the workspace root

    Returns:
        The finished build

    Raises:
        BuildVerificationError: If a file is missing or the status differs
    """
    finished = await host.schedule_build(project, UserCause())
    print(finished.get_log())

    root: Workspace = finished.workspace
    if parent_dir is not None:
        root = root.child(parent_dir)
    for expected_file in expected_files:
        if not root.child(expected_file).exists():
            location = f"{parent_dir}/{expected_file}" if parent_dir else expected_file
            raise BuildVerificationError(f"{location} file not found in workspace")

    if expected_result is not None and finished.result != expected_result:
        raise BuildVerificationError(
            f"Expected build #{finished.number} of {project.name} to be "
            f"{expected_result} but it was {finished.result}"
        )
    return finished


def get_env_vars(project: Project) -> dict[str, str]:
    """Return the environment captured by the project's last build, or {}."""
    for builder in project.builders:
        if isinstance(builder, CaptureEnvironmentBuilder):
            return builder.get_env_vars()
    return {}


def set_variables(node: Node, *entries: EnvEntry) -> None:
    """Replace the node's environment variables with exactly `entries`."""
    node.replace_properties([EnvironmentVariablesNodeProperty(list(entries))])


async def get_head_revision(
    build: Build, branch: str, parent_dir: str | None = None
) -> str:
    """
    Resolve refs/heads/<branch> in the repository checked out by `build`.

    The lookup runs on the worker hosting the build's workspace, in the
    workspace root or in `parent_dir` when the source was checked out into a
    subdirectory. Only a repository at exactly that path is consulted.

    Raises:
        GitException: If the branch cannot be resolved
    """

    async def resolve(path: Path) -> str:
        return await GitClient(path).resolve(f"refs/heads/{branch}")

    workspace = build.workspace
    if parent_dir is not None:
        workspace = workspace.child(parent_dir)
    revision = await workspace.act(resolve)
    logger.debug(f"Head of {branch} in build #{build.number} is {revision}")
    return revision
