"""
Per-test bundle of a fixture repository and a build host.
"""

from collections.abc import Sequence
from pathlib import Path

from harness_common.extensions import SparseCheckoutPath
from harness_common.host import BuildHost
from harness_common.models import (
    Build,
    EnvEntry,
    Identity,
    Node,
    Project,
    RemoteConfig,
    Result,
)
from harness_git.client import GitClient
from harness_git.fixture import FixtureRepository
from harness_host.local import LocalBuildHost

from . import project as project_builder
from . import runner
from .project import ProjectConfig


class GitBuildHarness:
    """
    Base fixture for single-repository build tests.

    Holds one fixture repository and one build host and exposes the
    commit/configure/build/inspect steps a test needs. Create one per test
    with `await GitBuildHarness.create(tmp_path)`.
    """

    def __init__(self, test_repo: FixtureRepository, host: BuildHost):
        self.test_repo = test_repo
        self.host = host

        # Aliases of test_repo properties
        self.john_doe: Identity = test_repo.john_doe
        self.jane_doe: Identity = test_repo.jane_doe
        self.work_dir: Path = test_repo.git_dir
        self.workspace: str = test_repo.git_dir_path
        self.git: GitClient = test_repo.git

    @classmethod
    async def create(
        cls, tmp_dir: Path | str, host: BuildHost | None = None, name: str = "unnamed"
    ) -> "GitBuildHarness":
        """
        Create a fixture repository and (by default) a local build host.

        Args:
            tmp_dir: Scratch directory owned by the test
            host: Build host to use (default: LocalBuildHost under tmp_dir)
            name: Name of the fixture repository
        """
        tmp_dir = Path(tmp_dir)
        test_repo = await FixtureRepository.create(name, tmp_dir)
        if host is None:
            host = LocalBuildHost(tmp_dir / "host")
        return cls(test_repo, host)

    @property
    def node(self) -> Node:
        return self.host.node

    async def commit(
        self,
        file_name: str,
        committer: Identity,
        message: str,
        *,
        content: str | None = None,
        author: Identity | None = None,
    ) -> str:
        return await self.test_repo.commit(
            file_name, committer, message, content=content, author=author
        )

    def create_remote_repositories(self) -> list[RemoteConfig]:
        return self.test_repo.remote_configs()

    def setup_project(
        self,
        config: ProjectConfig | None = None,
        /,
        name: str | None = None,
        **kwargs,
    ) -> Project:
        """
        Create a project building the fixture repository.

        Accepts either a ProjectConfig or its fields as keyword arguments,
        e.g. `setup_project(branches=["master"], relative_target_dir="sub")`.
        """
        if config is None:
            config = ProjectConfig(**kwargs)
        elif kwargs:
            raise TypeError("Pass either a ProjectConfig or keyword arguments, not both")
        return project_builder.setup_project(self.host, self.test_repo, config, name=name)

    def setup_simple_project(self, branch: str, name: str | None = None) -> Project:
        return project_builder.setup_simple_project(
            self.host, self.test_repo, branch, name=name
        )

    def setup_sparse_project(
        self,
        branch: str,
        sparse_checkout_paths: Sequence[SparseCheckoutPath | str] | None,
        name: str | None = None,
    ) -> Project:
        return project_builder.setup_sparse_project(
            self.host, self.test_repo, branch, sparse_checkout_paths, name=name
        )

    async def build(
        self,
        project: Project,
        expected_result: Result | None,
        *expected_files: str,
        parent_dir: str | None = None,
    ) -> Build:
        return await runner.build(
            self.host, project, expected_result, *expected_files, parent_dir=parent_dir
        )

    def get_env_vars(self, project: Project) -> dict[str, str]:
        return runner.get_env_vars(project)

    def set_variables(self, node: Node, *entries: EnvEntry) -> None:
        runner.set_variables(node, *entries)

    async def get_head_revision(
        self, build: Build, branch: str, parent_dir: str | None = None
    ) -> str:
        return await runner.get_head_revision(build, branch, parent_dir=parent_dir)
