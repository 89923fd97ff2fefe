"""
Async git client.

This module wraps the `git` binary with asyncio subprocesses, the same way
the build host drives its other external tools. Every failing command raises
GitException.
"""

import asyncio
import logging
import os
from collections.abc import Mapping
from pathlib import Path

from harness_common.host import RepositoryResolver

logger = logging.getLogger(__name__)

# Set by git hooks and `git rebase -x`; removed from every command environment
REPOSITORY_LOCATION_VARIABLES = (
    "GIT_DIR",
    "GIT_WORK_TREE",
    "GIT_INDEX_FILE",
    "GIT_OBJECT_DIRECTORY",
    "GIT_ALTERNATE_OBJECT_DIRECTORIES",
    "GIT_COMMON_DIR",
)


def get_git_binary() -> str:
    """
    Get the git executable to run.

    Environment variables:
    - HARNESS_GIT_BINARY: Path or name of the git executable (default: git)
    """
    return os.environ.get("HARNESS_GIT_BINARY", "git")


class GitException(RuntimeError):
    """A git command failed."""

    def __init__(self, message: str, returncode: int | None = None, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class GitClient(RepositoryResolver):
    """
    Runs git commands against one working directory.

    Args:
        work_dir: Repository working tree (created on demand by `init`)
        env: Extra environment variables for every command
    """

    def __init__(self, work_dir: Path | str, env: Mapping[str, str] | None = None):
        self.work_dir = Path(work_dir)
        self.env = dict(env or {})

    async def run(self, *args: str, env: Mapping[str, str] | None = None) -> str:
        """
        Run one git command in the working directory.

        Args:
            *args: Arguments after "git"
            env: Extra environment variables for this command only

        Returns:
            The command's stdout, decoded

        Raises:
            GitException: If git exits non-zero or cannot be started
        """
        command_env = {**os.environ, **self.env, **(env or {})}
        # Commands always act on work_dir, never on a caller's repository
        for name in REPOSITORY_LOCATION_VARIABLES:
            command_env.pop(name, None)
        command_env["GIT_CEILING_DIRECTORIES"] = str(self.work_dir.resolve().parent)
        # No credential prompts; error messages in the C locale
        command_env.setdefault("GIT_TERMINAL_PROMPT", "0")
        command_env["LC_ALL"] = "C"

        logger.debug(f"git {' '.join(args)} (in {self.work_dir})")
        try:
            process = await asyncio.create_subprocess_exec(
                get_git_binary(),
                *args,
                cwd=str(self.work_dir),
                env=command_env,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise GitException(f"Failed to run git {args[0]}: {e}") from e

        stdout, stderr = await process.communicate()

        if process.returncode != 0:
            error = stderr.decode(errors="replace").strip()
            raise GitException(
                f"Command \"git {' '.join(args)}\" returned status code "
                f"{process.returncode}: {error}",
                returncode=process.returncode,
                stderr=error,
            )
        return stdout.decode(errors="replace")

    async def init(self, initial_branch: str = "master") -> None:
        """Create an empty repository whose HEAD points at `initial_branch`."""
        self.work_dir.mkdir(parents=True, exist_ok=True)
        await self.run("init", "--quiet")
        await self.run("symbolic-ref", "HEAD", f"refs/heads/{initial_branch}")

    def has_git_repo(self) -> bool:
        return (self.work_dir / ".git").exists()

    async def config(self, key: str, value: str) -> None:
        await self.run("config", key, value)

    async def add(self, *paths: str) -> None:
        await self.run("add", "--", *paths)

    async def commit(
        self,
        message: str,
        author_name: str,
        author_email: str,
        committer_name: str,
        committer_email: str,
    ) -> str:
        """
        Commit the index and return the new commit id.

        Raises:
            GitException: If the commit fails
        """
        await self.run(
            "-c",
            "commit.gpgsign=false",
            "commit",
            "--quiet",
            "--allow-empty",
            "-m",
            message,
            env={
                "GIT_AUTHOR_NAME": author_name,
                "GIT_AUTHOR_EMAIL": author_email,
                "GIT_COMMITTER_NAME": committer_name,
                "GIT_COMMITTER_EMAIL": committer_email,
            },
        )
        return await self.rev_parse("HEAD")

    async def rev_parse(self, revision: str) -> str:
        output = await self.run("rev-parse", "--verify", f"{revision}^{{commit}}")
        return output.strip()

    async def resolve(self, ref: str) -> str:
        """
        Resolve `ref` in the repository at exactly work_dir.

        Raises:
            GitException: If work_dir is not a repository or `ref` is unknown
        """
        if not self.has_git_repo():
            raise GitException(f"{self.work_dir} is not a git repository")
        return await self.rev_parse(ref)

    async def remote_add(self, name: str, url: str) -> None:
        await self.run("remote", "add", name, url)

    async def remote_set_url(self, name: str, url: str) -> None:
        await self.run("remote", "set-url", name, url)

    async def remotes(self) -> list[str]:
        output = await self.run("remote")
        return [line.strip() for line in output.splitlines() if line.strip()]

    async def fetch(self, url: str, refspec: str) -> None:
        await self.run("fetch", "--tags", "--force", url, refspec)

    async def for_each_ref(self, prefix: str) -> list[str]:
        """List short names of the references under `prefix`, sorted."""
        output = await self.run(
            "for-each-ref", "--sort=refname", "--format=%(refname:short)", prefix
        )
        return [
            line.strip()
            for line in output.splitlines()
            if line.strip() and not line.strip().endswith("/HEAD")
        ]

    async def checkout_branch(self, branch: str, revision: str) -> None:
        """Force-checkout `revision` on local branch `branch`, resetting it."""
        await self.run("checkout", "--force", "-B", branch, revision)

    async def read_tree_update(self) -> None:
        """Re-apply the sparse-checkout patterns to the working tree."""
        await self.run("read-tree", "-mu", "HEAD")

    async def ls_files(self) -> list[str]:
        output = await self.run("ls-files")
        return [line for line in output.splitlines() if line]

    async def changed_paths(self, revision: str) -> list[str]:
        """List the paths touched by `revision` relative to its first parent."""
        output = await self.run(
            "show", "--pretty=format:", "--name-only", "--no-renames", revision
        )
        return [line.strip() for line in output.splitlines() if line.strip()]

    async def commit_author(self, revision: str) -> str:
        output = await self.run("show", "-s", "--format=%an", revision)
        return output.strip()

    async def commit_committer(self, revision: str) -> str:
        output = await self.run("show", "-s", "--format=%cn", revision)
        return output.strip()
