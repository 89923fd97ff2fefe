"""
Unit tests for harness_git.client.

Tests the git wrapper with mocked subprocess calls.
"""

from unittest.mock import AsyncMock, patch

import pytest

from harness_git.client import GitClient, GitException, get_git_binary


def make_process(returncode: int = 0, stdout: bytes = b"", stderr: bytes = b""):
    process = AsyncMock()
    process.returncode = returncode
    process.communicate = AsyncMock(return_value=(stdout, stderr))
    return process


class TestGetGitBinary:
    """Test suite for get_git_binary."""

    def test_default(self, monkeypatch):
        monkeypatch.delenv("HARNESS_GIT_BINARY", raising=False)
        assert get_git_binary() == "git"

    def test_override(self, monkeypatch):
        monkeypatch.setenv("HARNESS_GIT_BINARY", "/opt/git/bin/git")
        assert get_git_binary() == "/opt/git/bin/git"


class TestGitClient:
    """Test suite for GitClient."""

    @pytest.fixture(autouse=True)
    def default_git_binary(self, monkeypatch):
        monkeypatch.delenv("HARNESS_GIT_BINARY", raising=False)

    @pytest.mark.asyncio
    async def test_run_returns_stdout(self, tmp_path):
        process = make_process(stdout=b"output\n")
        with patch(
            "asyncio.create_subprocess_exec", return_value=process
        ) as mock_exec:
            output = await GitClient(tmp_path).run("status")

        assert output == "output\n"
        args, kwargs = mock_exec.call_args
        assert args == ("git", "status")
        assert kwargs["cwd"] == str(tmp_path)

    @pytest.mark.asyncio
    async def test_failure_raises_git_exception(self, tmp_path):
        process = make_process(returncode=128, stderr=b"fatal: not a git repository\n")
        with patch("asyncio.create_subprocess_exec", return_value=process):
            with pytest.raises(GitException) as exc_info:
                await GitClient(tmp_path).run("status")

        assert exc_info.value.returncode == 128
        assert exc_info.value.stderr == "fatal: not a git repository"
        assert "git status" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_missing_binary_raises_git_exception(self, tmp_path):
        with patch(
            "asyncio.create_subprocess_exec",
            side_effect=FileNotFoundError("no such file"),
        ):
            with pytest.raises(GitException, match="Failed to run git status"):
                await GitClient(tmp_path).run("status")

    @pytest.mark.asyncio
    async def test_commit_passes_identities(self, tmp_path):
        processes = [make_process(), make_process(stdout=b"a" * 40 + b"\n")]
        with patch(
            "asyncio.create_subprocess_exec", side_effect=processes
        ) as mock_exec:
            commit_id = await GitClient(tmp_path).commit(
                "message", "Author", "a@x", "Committer", "c@x"
            )

        assert commit_id == "a" * 40
        env = mock_exec.call_args_list[0].kwargs["env"]
        assert env["GIT_AUTHOR_NAME"] == "Author"
        assert env["GIT_AUTHOR_EMAIL"] == "a@x"
        assert env["GIT_COMMITTER_NAME"] == "Committer"
        assert env["GIT_COMMITTER_EMAIL"] == "c@x"

    @pytest.mark.asyncio
    async def test_resolve_uses_rev_parse(self, tmp_path):
        (tmp_path / ".git").mkdir()
        process = make_process(stdout=b"b" * 40 + b"\n")
        with patch(
            "asyncio.create_subprocess_exec", return_value=process
        ) as mock_exec:
            revision = await GitClient(tmp_path).resolve("refs/heads/master")

        assert revision == "b" * 40
        assert mock_exec.call_args.args == (
            "git",
            "rev-parse",
            "--verify",
            "refs/heads/master^{commit}",
        )

    @pytest.mark.asyncio
    async def test_for_each_ref_skips_head(self, tmp_path):
        process = make_process(stdout=b"origin/HEAD\norigin/dev\norigin/master\n")
        with patch("asyncio.create_subprocess_exec", return_value=process):
            refs = await GitClient(tmp_path).for_each_ref("refs/remotes/")

        assert refs == ["origin/dev", "origin/master"]

    def test_has_git_repo(self, tmp_path):
        client = GitClient(tmp_path)
        assert not client.has_git_repo()

        (tmp_path / ".git").mkdir()
        assert client.has_git_repo()

    @pytest.mark.asyncio
    async def test_resolve_outside_repository_raises(self, tmp_path):
        with patch("asyncio.create_subprocess_exec") as mock_exec:
            with pytest.raises(GitException, match="is not a git repository"):
                await GitClient(tmp_path / "plain").resolve("refs/heads/master")

        mock_exec.assert_not_called()

    @pytest.mark.asyncio
    async def test_repository_location_variables_are_dropped(
        self, tmp_path, monkeypatch
    ):
        monkeypatch.setenv("GIT_DIR", str(tmp_path / "outer" / ".git"))
        monkeypatch.setenv("GIT_WORK_TREE", str(tmp_path / "outer"))
        monkeypatch.setenv("GIT_INDEX_FILE", str(tmp_path / "outer" / "index"))
        monkeypatch.setenv("GIT_OBJECT_DIRECTORY", str(tmp_path / "objects"))
        process = make_process()
        with patch(
            "asyncio.create_subprocess_exec", return_value=process
        ) as mock_exec:
            await GitClient(tmp_path / "repo").run("status")

        env = mock_exec.call_args.kwargs["env"]
        for name in ("GIT_DIR", "GIT_WORK_TREE", "GIT_INDEX_FILE", "GIT_OBJECT_DIRECTORY"):
            assert name not in env
        assert env["GIT_CEILING_DIRECTORIES"] == str(tmp_path.resolve())
