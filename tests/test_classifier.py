"""Tests for monobuild.classifier."""

from __future__ import annotations

import pytest

from monobuild.classifier import classify, is_dependency_of, is_watched_by
from monobuild.models import BuildCommand, Target

_BUILD = BuildCommand(command="go", args=("build", "."))


def _target(path: str = "cmd/server", deps=(), watches=()) -> Target:
    return Target(
        path=path,
        build_command=_BUILD,
        resolved_deps=tuple(deps),
        resolved_watches=frozenset(watches),
    )


def test_dependency_trigger_when_package_is_imported() -> None:
    target = _target(deps=["example.com/repo/pkg/bar"])

    assert is_dependency_of("pkg/bar/file.go", target, ["pkg"]) is True


def test_no_dependency_trigger_for_unimported_package() -> None:
    target = _target(deps=["example.com/repo/pkg/bar"])

    assert is_dependency_of("pkg/baz/file.go", target, ["pkg"]) is False


def test_no_dependency_trigger_outside_dependency_roots() -> None:
    target = _target(deps=["example.com/repo/internal/bar"])

    assert is_dependency_of("internal/bar/file.go", target, ["pkg"]) is False


@pytest.mark.parametrize("dep_dirs", [["pkg"], ["pkg", "internal"], [""]])
def test_target_without_deps_is_never_dependency_triggered(dep_dirs) -> None:
    target = _target(deps=[], watches=["pkg/bar/file.go"])

    assert is_dependency_of("pkg/bar/file.go", target, dep_dirs) is False


def test_dependency_matching_is_substring_based() -> None:
    # The loose matching also accepts unrelated packages sharing a path fragment.
    target = _target(deps=["example.com/other/pkg/bar/v2"])

    assert is_dependency_of("pkg/bar/file.go", target, ["pkg"]) is True


def test_dependency_root_is_a_plain_string_prefix() -> None:
    target = _target(deps=["example.com/repo/pkgutil"])

    assert is_dependency_of("pkgutil/file.go", target, ["pkg"]) is True


def test_trailing_separator_on_dependency_root_excludes_siblings() -> None:
    target = _target(deps=["example.com/repo/pkgutil"])

    assert is_dependency_of("pkgutil/file.go", target, ["pkg/"]) is False


def test_watch_trigger_requires_literal_membership() -> None:
    target = _target(watches=["cmd/server/main.go"])

    assert is_watched_by("cmd/server/main.go", target) is True
    assert is_watched_by("cmd/worker/main.go", target) is False


def test_watch_matching_never_evaluates_patterns() -> None:
    target = Target(
        path="cmd/server",
        build_command=_BUILD,
        watch_patterns=("cmd/server/*",),
        resolved_watches=frozenset(),
    )

    assert is_watched_by("cmd/server/main.go", target) is False


def test_classify_reports_both_triggers() -> None:
    target = _target(
        deps=["example.com/repo/pkg/bar"],
        watches=["pkg/bar/file.go"],
    )

    result = classify("pkg/bar/file.go", target, ["pkg"])

    assert result.dependency is True
    assert result.watch is True
    assert result.triggered is True


def test_classify_reports_no_trigger() -> None:
    result = classify("README.md", _target(deps=["example.com/repo/pkg/bar"]), ["pkg"])

    assert result.triggered is False
