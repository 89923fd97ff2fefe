"""
Harness Common module.

This module contains the domain models, source-configuration extensions and
capability interfaces shared by the harness components (git client, build
host, test kit).

The common module has no dependencies on other harness_* modules, making it
a pure domain layer that can be imported by any component.
"""

from .builders import Builder, CaptureEnvironmentBuilder
from .extensions import (
    MATCH_EVERYTHING,
    MATCH_NOTHING,
    DisableRemotePoll,
    ExtensionList,
    GitSCMExtension,
    PathRestriction,
    RelativeTargetDirectory,
    SparseCheckoutPath,
    SparseCheckoutPaths,
    UserExclusion,
)
from .host import BuildHost, RepositoryResolver, Workspace
from .models import (
    JANE_DOE,
    JOHN_DOE,
    BranchSpec,
    Build,
    Cause,
    EnvEntry,
    EnvironmentVariablesNodeProperty,
    GitSCMConfig,
    Identity,
    Node,
    Project,
    RemoteConfig,
    Result,
    UserCause,
)

__all__ = [
    "JANE_DOE",
    "JOHN_DOE",
    "MATCH_EVERYTHING",
    "MATCH_NOTHING",
    "BranchSpec",
    "Build",
    "BuildHost",
    "Builder",
    "CaptureEnvironmentBuilder",
    "Cause",
    "DisableRemotePoll",
    "EnvEntry",
    "EnvironmentVariablesNodeProperty",
    "ExtensionList",
    "GitSCMConfig",
    "GitSCMExtension",
    "Identity",
    "Node",
    "PathRestriction",
    "Project",
    "RelativeTargetDirectory",
    "RemoteConfig",
    "RepositoryResolver",
    "Result",
    "SparseCheckoutPath",
    "SparseCheckoutPaths",
    "UserCause",
    "UserExclusion",
    "Workspace",
]
