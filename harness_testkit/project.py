"""
Project configuration builder.

Turns a ProjectConfig into a ready-to-build project whose source is the
fixture repository.
"""

import logging
import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from harness_common.builders import CaptureEnvironmentBuilder
from harness_common.extensions import (
    MATCH_EVERYTHING,
    MATCH_NOTHING,
    DisableRemotePoll,
    ExtensionList,
    PathRestriction,
    RelativeTargetDirectory,
    SparseCheckoutPath,
    SparseCheckoutPaths,
    UserExclusion,
)
from harness_common.host import BuildHost
from harness_common.models import BranchSpec, GitSCMConfig, Project, RemoteConfig

logger = logging.getLogger(__name__)


class RemoteProvider(Protocol):
    """Anything that can describe the remotes a project should fetch from."""

    def remote_configs(self) -> list[RemoteConfig]: ...


@dataclass
class ProjectConfig:
    """
    Optional knobs for a project built from the fixture repository.

    Every field except `branches` is optional; None means "not configured"
    and leaves the corresponding extension off.
    """

    branches: Sequence[BranchSpec]
    author_or_committer: bool = False
    relative_target_dir: str | None = None
    excluded_regions: str | None = None
    included_regions: str | None = None
    excluded_users: str | None = None
    local_branch: str | None = None
    fast_remote_poll: bool = False
    sparse_checkout_paths: Sequence[SparseCheckoutPath | str] | None = None

    def __post_init__(self):
        if isinstance(self.branches, (str, BranchSpec)):
            self.branches = [self.branches]
        self.branches = [
            b if isinstance(b, BranchSpec) else BranchSpec(b) for b in self.branches
        ]
        if not self.branches:
            raise ValueError("At least one branch spec is required")

    @classmethod
    def for_branch(cls, branch: str, **kwargs) -> "ProjectConfig":
        """Create a config building the single branch `branch`."""
        return cls(branches=[BranchSpec(branch)], **kwargs)

    def build_extensions(self) -> ExtensionList:
        """
        Build the extension set for this configuration.

        DisableRemotePoll and SparseCheckoutPaths are always present; the
        other extensions only when their input is set.
        """
        extensions = ExtensionList()
        # Remote polling does not work against a local repository
        extensions.add(DisableRemotePoll())
        if self.relative_target_dir is not None:
            extensions.add(RelativeTargetDirectory(self.relative_target_dir))
        if self.excluded_users is not None:
            extensions.add(UserExclusion(self.excluded_users))
        if self.excluded_regions is not None or self.included_regions is not None:
            extensions.add(
                PathRestriction(
                    included_regions=(
                        self.included_regions
                        if self.included_regions is not None
                        else MATCH_EVERYTHING
                    ),
                    excluded_regions=(
                        self.excluded_regions
                        if self.excluded_regions is not None
                        else MATCH_NOTHING
                    ),
                )
            )
        extensions.add(SparseCheckoutPaths(tuple(self.sparse_checkout_paths or ())))
        return extensions


def setup_project(
    host: BuildHost,
    fixture: RemoteProvider,
    config: ProjectConfig,
    name: str | None = None,
) -> Project:
    """
    Create a project that builds the fixture repository.

    Args:
        host: Build host to create the project on
        fixture: Source of the remote repository descriptors
        config: Branches and optional extensions
        name: Project name (default: a unique generated name)

    Returns:
        A project with its source configuration and an environment-capturing
        build step attached

    Raises:
        ValueError: If the host already has a project called `name`
    """
    scm = GitSCMConfig(
        remotes=fixture.remote_configs(),
        branches=list(config.branches),
        extensions=config.build_extensions(),
        author_or_committer=config.author_or_committer,
        local_branch=config.local_branch,
        fast_remote_poll=config.fast_remote_poll,
    )

    project = host.create_project(name or f"test{uuid.uuid4().hex[:8]}")
    project.scm = scm
    project.builders.append(CaptureEnvironmentBuilder())
    logger.debug(
        f"Configured project {project.name}: branches="
        f"{[b.name for b in scm.branches]}, extensions="
        f"{[k.__name__ for k in scm.extensions.kinds()]}"
    )
    return project


def setup_simple_project(
    host: BuildHost, fixture: RemoteProvider, branch: str, name: str | None = None
) -> Project:
    """Create a project building `branch` with no optional extensions."""
    return setup_project(host, fixture, ProjectConfig.for_branch(branch), name=name)


def setup_sparse_project(
    host: BuildHost,
    fixture: RemoteProvider,
    branch: str,
    sparse_checkout_paths: Sequence[SparseCheckoutPath | str] | None,
    name: str | None = None,
) -> Project:
    """Create a project building `branch` with a sparse checkout of the given paths."""
    return setup_project(
        host,
        fixture,
        ProjectConfig.for_branch(branch, sparse_checkout_paths=sparse_checkout_paths),
        name=name,
    )
