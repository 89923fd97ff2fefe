"""
In-process build host.

LocalBuildHost runs each build as an asyncio task on the current event loop:
it fetches the project's remotes into a per-project workspace, checks out the
selected branch and runs the project's build steps. It implements the
BuildHost interface so the harness can run end to end without an external
build server.
"""

import asyncio
import logging
import os
import shutil
import tempfile
from pathlib import Path

from harness_common.extensions import RelativeTargetDirectory, SparseCheckoutPaths
from harness_common.host import BuildHost
from harness_common.models import Build, Cause, GitSCMConfig, Node, Project, Result
from harness_git.client import GitClient, GitException

from .workspace import LocalWorkspace

# Configure logging
logger = logging.getLogger(__name__)


def get_host_root() -> Path:
    """
    Get the directory the local host keeps workspaces in.

    Returns:
        HARNESS_HOST_ROOT if set, otherwise a fresh temporary directory

    Environment variables:
    - HARNESS_HOST_ROOT: Custom root directory (useful for inspecting workspaces)
    """
    root = os.environ.get("HARNESS_HOST_ROOT")
    if root:
        return Path(root)
    return Path(tempfile.mkdtemp(prefix="harness_host_"))


class LocalBuildHost(BuildHost):
    """
    Build host that runs builds on the local machine.

    Each project gets one workspace directory that is reused by all of its
    builds, so later builds fetch incrementally.
    """

    def __init__(self, root_dir: Path | str | None = None, node: Node | None = None):
        """
        Initialize the local build host.

        Args:
            root_dir: Directory for workspaces (default: see get_host_root)
            node: Node builds run on (default: an empty built-in node)
        """
        self.root_dir = Path(root_dir) if root_dir is not None else get_host_root()
        self._node = node or Node()

        self.projects: dict[str, Project] = {}
        self.builds: dict[str, list[Build]] = {}  # project name -> builds, oldest first
        self._locks: dict[str, asyncio.Lock] = {}

    @property
    def node(self) -> Node:
        return self._node

    def create_project(self, name: str) -> Project:
        if name in self.projects:
            raise ValueError(f"Project {name} already exists")
        project = Project(name=name)
        self.projects[name] = project
        self.builds[name] = []
        logger.info(f"Created project {name}")
        return project

    def workspace_for(self, project: Project) -> LocalWorkspace:
        return LocalWorkspace(self.root_dir / "workspace" / project.name)

    def last_build(self, project: Project) -> Build | None:
        builds = self.builds.get(project.name) or []
        return builds[-1] if builds else None

    def schedule_build(self, project: Project, cause: Cause) -> "asyncio.Task[Build]":
        """
        Start one build of `project` on the running event loop.

        Returns:
            Task completing with the finished build

        Raises:
            ValueError: If the project was not created by this host
        """
        if self.projects.get(project.name) is not project:
            raise ValueError(f"Project {project.name} is not registered with this host")
        return asyncio.create_task(self._run_build(project, cause))

    async def _run_build(self, project: Project, cause: Cause) -> Build:
        # Builds of one project share a workspace and run one at a time
        lock = self._locks.setdefault(project.name, asyncio.Lock())
        async with lock:
            previous = self.last_build(project)
            build = Build(
                number=len(self.builds[project.name]) + 1,
                project_name=project.name,
                workspace=self.workspace_for(project),
                cause=cause,
            )
            self.builds[project.name].append(build)

            build.log(cause.description)
            build.log(f"Building in workspace {build.workspace.path}")
            logger.info(f"Build #{build.number} of {project.name} started")

            build.workspace.path.mkdir(parents=True, exist_ok=True)
            env = self._base_env(project, build)

            if project.scm is not None:
                try:
                    env.update(await self._checkout(project.scm, build, previous))
                except GitException as e:
                    build.log(f"ERROR: {e}")
                    logger.warning(f"Checkout failed for {project.name}: {e}")
                    return self._finish(build, Result.FAILURE)
                if build.revision is None:
                    return self._finish(build, Result.FAILURE)

            build.env = dict(env)
            for builder in project.builders:
                if not await builder.perform(build, dict(env)):
                    build.log(f"Build step {type(builder).__name__} failed")
                    return self._finish(build, Result.FAILURE)

            return self._finish(build, Result.SUCCESS)

    def _finish(self, build: Build, result: Result) -> Build:
        build.result = result
        build.log(f"Finished: {result}")
        logger.info(f"Build #{build.number} of {build.project_name} finished: {result}")
        return build

    def _base_env(self, project: Project, build: Build) -> dict[str, str]:
        env = dict(self._node.env_vars())
        env.update(
            {
                "WORKSPACE": str(build.workspace.path),
                "BUILD_NUMBER": str(build.number),
                "JOB_NAME": project.name,
                "NODE_NAME": self._node.name,
            }
        )
        return env

    async def _checkout(
        self, scm: GitSCMConfig, build: Build, previous: Build | None
    ) -> dict[str, str]:
        """
        Fetch the remotes and check out the selected branch.

        Sets build.revision and build.branch when a branch was found.

        Returns:
            Git environment variables for the build steps

        Raises:
            GitException: If any git operation fails
        """
        target = scm.extensions.get(RelativeTargetDirectory)
        checkout_dir = build.workspace.path
        if target is not None:
            checkout_dir = checkout_dir / target.relative_target_dir
        git = GitClient(checkout_dir)

        if not git.has_git_repo():
            build.log(f"Cloning the remote Git repository into {checkout_dir}")
            await git.init()
        existing_remotes = await git.remotes()
        for remote in scm.remotes:
            if remote.name in existing_remotes:
                await git.remote_set_url(remote.name, remote.url)
            else:
                await git.remote_add(remote.name, remote.url)
            build.log(f"Fetching upstream changes from {remote.url}")
            await git.fetch(remote.url, remote.effective_refspec())

        candidates = await git.for_each_ref("refs/remotes/")
        matched = {
            ref for spec in scm.branches for ref in spec.filter_matching(candidates)
        }
        selected = [ref for ref in candidates if ref in matched]
        if not selected:
            build.log("ERROR: Couldn't find any revision to build.")
            return {}
        branch = selected[0]
        revision = await git.rev_parse(f"refs/remotes/{branch}")
        build.log(f"Checking out Revision {revision} ({branch})")

        await self._apply_sparse_checkout(
            git, checkout_dir, scm.extensions.get(SparseCheckoutPaths)
        )

        local_branch = scm.local_branch or branch.split("/", 1)[-1]
        await git.checkout_branch(local_branch, revision)
        if (checkout_dir / ".git" / "info" / "sparse-checkout").exists():
            await git.read_tree_update()

        build.revision = revision
        build.branch = branch

        remote_url = scm.remotes[0].url
        env = {
            "GIT_COMMIT": revision,
            "GIT_BRANCH": branch,
            "GIT_LOCAL_BRANCH": local_branch,
            "GIT_URL": remote_url,
        }
        if previous is not None and previous.revision:
            env["GIT_PREVIOUS_COMMIT"] = previous.revision
        return env

    async def _apply_sparse_checkout(
        self,
        git: GitClient,
        checkout_dir: Path,
        sparse: SparseCheckoutPaths | None,
    ) -> None:
        sparse_file = checkout_dir / ".git" / "info" / "sparse-checkout"
        paths = sparse.path_strings() if sparse is not None else []
        if paths:
            sparse_file.parent.mkdir(parents=True, exist_ok=True)
            sparse_file.write_text("\n".join(paths) + "\n")
            await git.config("core.sparseCheckout", "true")
        elif sparse_file.exists():
            # Widen back to the full tree; the pattern stays in place
            sparse_file.write_text("/*\n")

    def cleanup(self) -> None:
        """Delete every workspace this host created."""
        shutil.rmtree(self.root_dir, ignore_errors=True)
        logger.info(f"Removed host directory {self.root_dir}")
