"""
Unit tests for harness_common.extensions.
"""

import pytest

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
from harness_common.models import JANE_DOE, JOHN_DOE


class TestExtensionList:
    """Test suite for ExtensionList."""

    def test_keeps_insertion_order(self):
        extensions = ExtensionList(
            [DisableRemotePoll(), RelativeTargetDirectory("sub"), SparseCheckoutPaths()]
        )
        assert extensions.kinds() == [
            DisableRemotePoll,
            RelativeTargetDirectory,
            SparseCheckoutPaths,
        ]

    def test_one_instance_per_kind(self):
        extensions = ExtensionList()
        extensions.add(RelativeTargetDirectory("first"))
        extensions.add(DisableRemotePoll())
        extensions.add(RelativeTargetDirectory("second"))

        assert len(extensions) == 2
        assert extensions.get(RelativeTargetDirectory) == RelativeTargetDirectory(
            "second"
        )
        # Replacement keeps the original position
        assert extensions.kinds()[0] is RelativeTargetDirectory

    def test_get_missing_kind(self):
        assert ExtensionList().get(UserExclusion) is None

    def test_contains(self):
        extensions = ExtensionList([DisableRemotePoll()])
        assert DisableRemotePoll in extensions
        assert UserExclusion not in extensions

    def test_equality(self):
        assert ExtensionList([DisableRemotePoll(), UserExclusion("x")]) == ExtensionList(
            [DisableRemotePoll(), UserExclusion("x")]
        )
        assert ExtensionList([UserExclusion("x")]) != ExtensionList([UserExclusion("y")])


class TestPathRestriction:
    """Test suite for PathRestriction."""

    def test_defaults(self):
        restriction = PathRestriction()
        assert restriction.included_regions == MATCH_EVERYTHING
        assert restriction.excluded_regions == MATCH_NOTHING
        assert restriction.excluded_patterns() == []

    def test_excluded_region(self):
        restriction = PathRestriction(excluded_regions="build/.*")
        assert restriction.is_excluded(["build/output.txt"])
        assert not restriction.is_excluded(["src/main.py"])
        assert not restriction.is_excluded(["build/output.txt", "src/main.py"])

    def test_included_region(self):
        restriction = PathRestriction(included_regions="src/.*")
        assert not restriction.is_excluded(["src/main.py"])
        assert restriction.is_excluded(["docs/readme.md"])

    def test_multiline_regions(self):
        restriction = PathRestriction(excluded_regions="build/.*\n\n  docs/.*  \n")
        assert len(restriction.excluded_patterns()) == 2
        assert restriction.is_excluded(["docs/a.md", "build/b.o"])

    def test_exclusion_wins_over_inclusion(self):
        restriction = PathRestriction(
            included_regions="src/.*", excluded_regions="src/generated/.*"
        )
        assert restriction.is_excluded(["src/generated/x.py"])
        assert not restriction.is_excluded(["src/x.py"])

    def test_change_without_paths_is_not_excluded(self):
        assert not PathRestriction(excluded_regions=".*").is_excluded([])


class TestUserExclusion:
    """Test suite for UserExclusion."""

    def test_excludes_listed_identity(self):
        exclusion = UserExclusion(JANE_DOE.name)
        assert exclusion.is_excluded(JANE_DOE)
        assert not exclusion.is_excluded(JOHN_DOE)

    def test_multiple_users(self):
        exclusion = UserExclusion("Jane Doe\nBuild Bot\n")
        assert exclusion.excluded_user_names() == {"Jane Doe", "Build Bot"}
        assert exclusion.is_excluded("Build Bot")


class TestRelativeTargetDirectory:
    """Test suite for RelativeTargetDirectory."""

    def test_rejects_empty(self):
        with pytest.raises(ValueError):
            RelativeTargetDirectory("")


class TestSparseCheckoutPaths:
    """Test suite for SparseCheckoutPaths."""

    def test_none_and_empty_are_equal(self):
        assert SparseCheckoutPaths(None) == SparseCheckoutPaths(())
        assert SparseCheckoutPaths(None).paths == ()

    def test_strings_are_wrapped(self):
        sparse = SparseCheckoutPaths(("src", SparseCheckoutPath("docs")))
        assert sparse.paths == (SparseCheckoutPath("src"), SparseCheckoutPath("docs"))
        assert sparse.path_strings() == ["src", "docs"]
