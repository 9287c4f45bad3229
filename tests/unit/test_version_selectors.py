"""Tests for version matchers and version selectors."""

from __future__ import annotations

import pytest

from depkit.core.errors import SpecConfigError
from depkit.core.ir import Artifact
from depkit.core.version_matchers import build_version_matcher
from depkit.core.version_selectors import build_version_selector, last
from depkit.core.versions import Version, parse_version


def select(spec: str, current: str, versions: list[Version]) -> str:
    return build_version_selector(spec).select(Artifact.parse(f"g:a:{current}"), versions)


# ============================================================================
# Version matchers
# ============================================================================


class TestVersionMatchers:
    """Predicates over versions."""

    @pytest.mark.parametrize(
        "spec,version,expected",
        [
            ("any()", "1.0", True),
            ("noPreviews()", "1.0-rc-1", False),
            ("noPreviews()", "1.0-SNAPSHOT", True),
            ("noSnapshots()", "1.0-SNAPSHOT", False),
            ("noSnapshots()", "1.0-20240322.113300-2", False),
            ("noSnapshots()", "1.0-beta", True),
            ("noSnapshotsAndPreviews()", "1.0-beta", False),
            ("noSnapshotsAndPreviews()", "1.0", True),
            ("gt(3.1.0)", "3.1.1M1", True),
            ("gt(3.1.0)", "3.1.0", False),
            ("gte(3.1.0)", "3.1", True),
            ("lt(4.0.0)", "4.0.0RC", True),
            ("lte(1)", "1.0.0", True),
            ("eq(1.0)", "1-ga", True),
            ("not(eq(1.0))", "1.0", False),
            ("and(noSnapshots(), gte(4))", "4.0.0", True),
            ("and(noSnapshots(), gte(4))", "410.0.0-SNAPSHOT", False),
            ("or(lt(2), gt(3))", "2.5", False),
        ],
    )
    def test_match(self, spec: str, version: str, expected: bool) -> None:
        assert build_version_matcher(spec).test(parse_version(version)) is expected

    def test_blank_bound_rejected(self) -> None:
        with pytest.raises(SpecConfigError, match="must not be blank"):
            build_version_matcher("eq(' ')")

    def test_wrong_family(self) -> None:
        with pytest.raises(SpecConfigError, match="Expected version matcher"):
            build_version_matcher("not(x)")


# ============================================================================
# Version selectors
# ============================================================================


class TestVersionSelectors:
    """Selection against an ascending version line."""

    def test_identity(self, versions: list[Version]) -> None:
        assert select("identity()", "3.0.0", versions) == "3.0.0"

    def test_first_last(self, versions: list[Version]) -> None:
        assert select("first()", "3.0.0", versions) == "2.0.0"
        assert select("last()", "3.0.0", versions) == "410.0.0-SNAPSHOT"

    def test_prev_next(self, versions: list[Version]) -> None:
        assert select("prev()", "3.1.0", versions) == "3.1.0M1"
        assert select("next()", "3.1.0", versions) == "3.1.1M1"

    def test_prev_next_at_edges(self, versions: list[Version]) -> None:
        assert select("prev()", "2.0.0", versions) == "2.0.0"
        assert select("next()", "410.0.0-SNAPSHOT", versions) == "410.0.0-SNAPSHOT"

    def test_prev_of_unknown_version_is_current(self, versions: list[Version]) -> None:
        assert select("prev()", "3.0.0", versions) == "3.0.0"

    def test_major(self, versions: list[Version]) -> None:
        assert select("major()", "3.0.0", versions) == "3.200.0-SNAPSHOT"

    def test_major_without_dot_is_last(self, versions: list[Version]) -> None:
        assert select("major()", "3", versions) == "410.0.0-SNAPSHOT"

    def test_minor(self, versions: list[Version]) -> None:
        assert select("minor()", "3.0.0", versions) == "3.0.2-alpha"
        assert select("minor()", "3.1.0", versions) == "3.1.1M1"

    def test_minor_of_short_version_is_major(self, versions: list[Version]) -> None:
        assert select("minor()", "3.0", versions) == "3.200.0-SNAPSHOT"

    def test_shorthand_filters_default_to_last(self, versions: list[Version]) -> None:
        assert select("noSnapshotsAndPreviews()", "3.0.0", versions) == "400.0.0"
        assert select("noSnapshots()", "3.0.0", versions) == "401.0.0RC"
        assert select("noPreviews()", "3.0.0", versions) == "410.0.0-SNAPSHOT"

    def test_shorthand_filter_with_selector(self, versions: list[Version]) -> None:
        assert select("noSnapshotsAndPreviews(last())", "3.0.0", versions) == "400.0.0"
        assert select("noSnapshotsAndPreviews(major())", "3.0.0", versions) == "3.100.0"

    def test_filtered(self, versions: list[Version]) -> None:
        assert select("filtered(gte(4.0.0), first())", "3.0.0", versions) == "4.0.0"
        assert select("filtered(lt(3), last())", "3.0.0", versions) == "2.0.0"

    def test_filtered_nothing_left(self, versions: list[Version]) -> None:
        assert select("filtered(gt(1000), last())", "3.0.0", versions) == "3.0.0"

    @pytest.mark.parametrize(
        "current,expected",
        [
            ("3.0.0", "3.100.0"),
            ("3.0.0-rc-1", "3.101.0RC"),
            ("3.0.0-SNAPSHOT", "3.200.0-SNAPSHOT"),
        ],
    )
    def test_contextual(self, versions: list[Version], current: str, expected: str) -> None:
        assert select("contextualSnapshotsAndPreviews()", current, versions) == expected

    def test_contextual_with_selector(self, versions: list[Version]) -> None:
        assert select("contextualSnapshotsAndPreviews(last())", "3.0.0", versions) == "400.0.0"

    def test_no_candidates(self) -> None:
        assert select("last()", "1.0", []) == "1.0"

    def test_accepts_strings(self) -> None:
        selector = last()
        assert selector(Artifact.parse("g:a:1.0"), ["1.0", "1.1"]) == "1.1"

    def test_description(self) -> None:
        selector = build_version_selector("noSnapshots()")
        assert selector.description == "filtered(noSnapshots(), last())"

    def test_filtered_arity(self) -> None:
        with pytest.raises(SpecConfigError, match="Bad parameter count for op filtered"):
            build_version_selector("filtered(any())")

    def test_filtered_uses_version_matcher_vocabulary(self) -> None:
        with pytest.raises(SpecConfigError, match="Unknown version matcher op last"):
            build_version_selector("filtered(last(), last())")

    def test_unknown_op(self) -> None:
        with pytest.raises(SpecConfigError, match="Unknown version selector op newest"):
            build_version_selector("newest()")
