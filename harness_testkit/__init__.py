"""
Harness Testkit module.

This module contains the pieces tests use directly: the project
configuration builder, the build runner and verifier, and GitBuildHarness,
which bundles a fixture repository with a build host.
"""

from .harness import GitBuildHarness
from .project import (
    ProjectConfig,
    setup_project,
    setup_simple_project,
    setup_sparse_project,
)
from .runner import (
    BuildVerificationError,
    build,
    get_env_vars,
    get_head_revision,
    set_variables,
)

__all__ = [
    "BuildVerificationError",
    "GitBuildHarness",
    "ProjectConfig",
    "build",
    "get_env_vars",
    "get_head_revision",
    "set_variables",
    "setup_project",
    "setup_simple_project",
    "setup_sparse_project",
]
