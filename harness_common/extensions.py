"""
Extensions that modify how a job fetches and filters its source.

Each extension kind is independently optional. An ExtensionList holds at most
one instance of each kind.
"""

import logging
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from .models import Identity

logger = logging.getLogger(__name__)

# Region pattern defaults for PathRestriction
MATCH_NOTHING = ""
MATCH_EVERYTHING = ".*"


def _split_patterns(value: str) -> list[str]:
    """Split a newline-separated pattern block, dropping blank lines."""
    return [line.strip() for line in value.splitlines() if line.strip()]


class GitSCMExtension:
    """Base class for all source-configuration extensions."""


@dataclass(frozen=True)
class DisableRemotePoll(GitSCMExtension):
    """Poll against the workspace instead of querying the remote."""


@dataclass(frozen=True)
class RelativeTargetDirectory(GitSCMExtension):
    """Check the source out into a subdirectory of the workspace."""

    relative_target_dir: str

    def __post_init__(self):
        if not self.relative_target_dir:
            raise ValueError("Relative target directory must not be empty")


@dataclass(frozen=True)
class PathRestriction(GitSCMExtension):
    """
    Restrict which changed paths count as relevant.

    Both region blocks are newline-separated regular expressions matched
    against the whole path. A change is ignored when every path it touches is
    either excluded or not included.
    """

    included_regions: str = MATCH_EVERYTHING
    excluded_regions: str = MATCH_NOTHING

    def included_patterns(self) -> list[re.Pattern[str]]:
        return [re.compile(p) for p in _split_patterns(self.included_regions)]

    def excluded_patterns(self) -> list[re.Pattern[str]]:
        return [re.compile(p) for p in _split_patterns(self.excluded_regions)]

    def is_path_relevant(self, path: str) -> bool:
        """Check whether a single changed path counts toward triggering a build."""
        included = self.included_patterns()
        if included and not any(p.fullmatch(path) for p in included):
            return False
        return not any(p.fullmatch(path) for p in self.excluded_patterns())

    def is_excluded(self, paths: Iterable[str]) -> bool:
        """
        Check whether a change touching `paths` should be ignored.

        Args:
            paths: Repository-relative paths touched by a commit

        Returns:
            True if no path is relevant. A change with no paths is never
            excluded.
        """
        paths = list(paths)
        if not paths:
            return False
        return not any(self.is_path_relevant(path) for path in paths)


@dataclass(frozen=True)
class UserExclusion(GitSCMExtension):
    """Ignore commits made by the listed users (one name per line)."""

    excluded_users: str

    def excluded_user_names(self) -> set[str]:
        return set(_split_patterns(self.excluded_users))

    def is_excluded(self, user: "Identity | str") -> bool:
        """Check whether a commit by `user` should be ignored."""
        name = user if isinstance(user, str) else user.name
        return name.strip() in self.excluded_user_names()


@dataclass(frozen=True)
class SparseCheckoutPath:
    """One path pattern kept by a sparse checkout."""

    path: str


@dataclass(frozen=True)
class SparseCheckoutPaths(GitSCMExtension):
    """
    Limit the checkout to a set of paths.

    No paths (None or empty) means no restriction.
    """

    paths: tuple[SparseCheckoutPath, ...] | None = None

    def __post_init__(self):
        normalized = tuple(
            p if isinstance(p, SparseCheckoutPath) else SparseCheckoutPath(p)
            for p in (self.paths or ())
        )
        object.__setattr__(self, "paths", normalized)

    def path_strings(self) -> list[str]:
        return [p.path for p in self.paths or ()]


ExtensionT = TypeVar("ExtensionT", bound=GitSCMExtension)


class ExtensionList:
    """
    Ordered set of extensions with at most one instance per kind.

    Adding an extension of a kind that is already present replaces it in
    place.
    """

    def __init__(self, extensions: Iterable[GitSCMExtension] = ()):
        self._items: list[GitSCMExtension] = []
        for extension in extensions:
            self.add(extension)

    def add(self, extension: GitSCMExtension) -> None:
        """Add an extension, replacing any existing one of the same kind."""
        for i, existing in enumerate(self._items):
            if type(existing) is type(extension):
                logger.debug(f"Replacing {type(existing).__name__} extension")
                self._items[i] = extension
                return
        self._items.append(extension)

    def get(self, kind: type[ExtensionT]) -> ExtensionT | None:
        """Return the extension of `kind`, or None if absent."""
        for extension in self._items:
            if type(extension) is kind:
                return extension  # type: ignore[return-value]
        return None

    def kinds(self) -> list[type[GitSCMExtension]]:
        return [type(e) for e in self._items]

    def __contains__(self, kind: object) -> bool:
        return any(type(e) is kind for e in self._items)

    def __iter__(self) -> Iterator[GitSCMExtension]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ExtensionList):
            return NotImplemented
        return self._items == other._items

    def __repr__(self) -> str:
        return f"ExtensionList({self._items!r})"
