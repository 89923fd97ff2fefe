"""
Throwaway git repository used as the source of test builds.
"""

import logging
from pathlib import Path

from harness_common.models import JANE_DOE, JOHN_DOE, Identity, RemoteConfig

from .client import GitClient, GitException

logger = logging.getLogger(__name__)


class FixtureRepository:
    """
    A local git repository with two synthetic identities.

    Create instances with `await FixtureRepository.create(...)`; the
    constructor does not touch the file system.
    """

    def __init__(self, name: str, git_dir: Path):
        self.name = name
        self.git_dir = Path(git_dir)
        self.john_doe: Identity = JOHN_DOE
        self.jane_doe: Identity = JANE_DOE
        self.git = GitClient(self.git_dir)

    @classmethod
    async def create(
        cls, name: str, parent_dir: Path | str, initial_branch: str = "master"
    ) -> "FixtureRepository":
        """
        Initialize a new empty repository under `parent_dir`.

        Args:
            name: Repository name, also used as the directory name
            parent_dir: Directory that will contain the repository
            initial_branch: Branch HEAD points at before the first commit

        Raises:
            GitException: If the repository cannot be initialized
        """
        repo = cls(name, Path(parent_dir) / name)
        await repo.git.init(initial_branch=initial_branch)
        logger.debug(f"Created fixture repository {name} at {repo.git_dir}")
        return repo

    @property
    def git_dir_path(self) -> str:
        """Path builds use to fetch from this repository."""
        return str(self.git_dir.resolve())

    async def commit(
        self,
        file_name: str,
        committer: Identity,
        message: str,
        *,
        content: str | None = None,
        author: Identity | None = None,
    ) -> str:
        """
        Create or overwrite `file_name` in the working tree and commit it.

        Args:
            file_name: Path of the file, relative to the repository root
            committer: Identity recorded as committer
            message: Commit message
            content: File content (default: the file name)
            author: Identity recorded as author (default: the committer)

        Returns:
            The id of the new commit

        Raises:
            GitException: If writing or committing fails
        """
        author = author or committer
        path = self.git_dir / file_name
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(file_name if content is None else content)
        except OSError as e:
            raise GitException(f"Failed to write {file_name}: {e}") from e

        await self.git.add(file_name)
        commit_id = await self.git.commit(
            message,
            author_name=author.name,
            author_email=author.email,
            committer_name=committer.name,
            committer_email=committer.email,
        )
        logger.debug(f"Committed {file_name} as {commit_id[:8]} by {author}")
        return commit_id

    def remote_configs(self) -> list[RemoteConfig]:
        """Return the remote descriptors pointing at this repository."""
        return [RemoteConfig(url=self.git_dir_path)]
