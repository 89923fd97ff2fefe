"""
Command-line entry point for running a harness scenario by hand.

Useful for checking that git and the local build host work on a machine
before running the test suite.
"""

import asyncio
import json
import logging
import os
import shutil
import sys
import tempfile
from pathlib import Path

import click

from harness_common.models import Result
from harness_git.client import GitException

from .harness import GitBuildHarness
from .project import ProjectConfig
from .runner import BuildVerificationError, get_env_vars


def get_log_level() -> str:
    """
    Get the log level for the CLI.

    Environment variables:
    - HARNESS_LOG_LEVEL: Python logging level name (default: INFO)
    """
    return os.environ.get("HARNESS_LOG_LEVEL", "INFO").upper()


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else get_log_level(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def run_async(coro):
    """Helper to run async functions in CLI commands."""
    return asyncio.run(coro)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """Git build harness - drive fixture repositories through a build host."""
    configure_logging(verbose)


@cli.command("smoke")
@click.option("--branch", default="master", show_default=True, help="Branch to build")
@click.option("--file", "file_name", default="a.txt", show_default=True, help="File to commit")
@click.option("--content", default="hello", show_default=True, help="Content of the file")
@click.option("--relative-target-dir", default=None, help="Check out into this subdirectory")
@click.option(
    "--sparse-path",
    "sparse_paths",
    multiple=True,
    help="Sparse checkout path (repeatable)",
)
@click.option(
    "--keep",
    is_flag=True,
    help="Keep the scratch directory instead of deleting it",
)
@click.option("--json", "json_output", is_flag=True, help="Output the finished build as JSON")
def smoke(
    branch: str,
    file_name: str,
    content: str,
    relative_target_dir: str | None,
    sparse_paths: tuple[str, ...],
    keep: bool,
    json_output: bool,
):
    """Commit one file to a fresh fixture repository, build it and verify."""

    async def scenario(tmp_dir: Path) -> None:
        harness = await GitBuildHarness.create(tmp_dir)
        commit_id = await harness.commit(
            file_name, harness.john_doe, "smoke commit", content=content
        )
        click.echo(f"Committed {file_name} as {commit_id}")

        project = harness.setup_project(
            ProjectConfig.for_branch(
                branch,
                relative_target_dir=relative_target_dir,
                sparse_checkout_paths=list(sparse_paths) or None,
            )
        )
        finished = await harness.build(
            project, Result.SUCCESS, file_name, parent_dir=relative_target_dir
        )
        if json_output:
            click.echo(json.dumps(finished.to_dict(), indent=2))
        else:
            click.echo(f"Build #{finished.number}: {finished.result}")
            click.echo(f"GIT_COMMIT={get_env_vars(project).get('GIT_COMMIT', '')}")

    tmp_dir = Path(tempfile.mkdtemp(prefix="harness_smoke_"))
    try:
        run_async(scenario(tmp_dir))
    except BuildVerificationError as e:
        click.echo(f"Verification failed: {e}", err=True)
        sys.exit(1)
    except GitException as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    finally:
        if keep:
            click.echo(f"Scratch directory kept at {tmp_dir}")
        else:
            shutil.rmtree(tmp_dir, ignore_errors=True)


def main():
    cli()


if __name__ == "__main__":
    main()
