"""Tests for monobuild.impact."""

from __future__ import annotations

from pathlib import Path

import pytest

from monobuild.errors import MissingChangedFileError
from monobuild.impact import ImpactAnalyzer
from monobuild.models import BuildCommand, Target
from tests._fixtures.repo_builder import RepoBuilder

_BUILD = BuildCommand(command="go", args=("build", "."))


def _targets() -> list[Target]:
    return [
        Target(
            path="cmd/server",
            build_command=_BUILD,
            resolved_deps=("example.com/repo/pkg/bar",),
            resolved_watches=frozenset({"cmd/server/main.go"}),
        ),
        Target(
            path="cmd/worker",
            build_command=_BUILD,
            resolved_deps=("example.com/repo/pkg/bar", "example.com/repo/pkg/queue"),
            resolved_watches=frozenset({"cmd/worker/main.go", "pkg/bar/file.go"}),
        ),
        Target(path="cmd/tool", build_command=_BUILD),
    ]


def _seed(repo_builder: RepoBuilder, paths: list[str]) -> Path:
    repo_builder.write({path: "package x\n" for path in paths})
    return repo_builder.path()


def test_compute_attributes_files_to_targets(repo_builder: RepoBuilder) -> None:
    changed = ["pkg/bar/file.go", "cmd/server/main.go", "pkg/queue/q.go", "docs/notes.md"]
    root = _seed(repo_builder, changed)
    analyzer = ImpactAnalyzer(lambda commit_range: list(changed), root=root)

    report = analyzer.compute("HEAD~1..HEAD", _targets(), ["pkg"])

    assert [f.path for f in report.files] == changed
    assert [f.path for f in report.evidence_for("cmd/server")] == ["pkg/bar/file.go", "cmd/server/main.go"]
    assert [f.path for f in report.evidence_for("cmd/worker")] == ["pkg/bar/file.go", "pkg/queue/q.go"]
    assert report.evidence_for("cmd/tool") == ()
    assert report.affected_targets() == ["cmd/server", "cmd/worker"]
    assert report.commit_range == "HEAD~1..HEAD"


def test_file_triggering_both_rules_is_recorded_once_per_target(repo_builder: RepoBuilder) -> None:
    root = _seed(repo_builder, ["pkg/bar/file.go"])
    analyzer = ImpactAnalyzer(lambda commit_range: ["pkg/bar/file.go"], root=root)

    report = analyzer.compute("", _targets(), ["pkg"])

    changed = report.files[0]
    assert changed.dependency_of == ("cmd/server", "cmd/worker")
    assert changed.watched_by == ("cmd/worker",)
    assert len(report.evidence_for("cmd/worker")) == 1
    # The same ChangedFile instance is shared as evidence across targets.
    assert report.evidence_for("cmd/server")[0] is report.evidence_for("cmd/worker")[0]


def test_blank_paths_are_discarded(repo_builder: RepoBuilder) -> None:
    root = _seed(repo_builder, ["cmd/server/main.go"])
    analyzer = ImpactAnalyzer(lambda commit_range: ["", "cmd/server/main.go", "   "], root=root)

    report = analyzer.compute("", _targets(), ["pkg"])

    assert [f.path for f in report.files] == ["cmd/server/main.go"]


def test_paths_with_surrounding_spaces_are_kept_verbatim(repo_builder: RepoBuilder) -> None:
    root = _seed(repo_builder, [" notes .md"])
    analyzer = ImpactAnalyzer(lambda commit_range: [" notes .md"], root=root)

    report = analyzer.compute("", _targets(), ["pkg"])

    assert [f.path for f in report.files] == [" notes .md"]


def test_missing_changed_file_is_fatal(repo_builder: RepoBuilder) -> None:
    root = _seed(repo_builder, ["cmd/server/main.go"])
    analyzer = ImpactAnalyzer(lambda commit_range: ["cmd/server/main.go", "pkg/bar/deleted.go"], root=root)

    with pytest.raises(MissingChangedFileError) as excinfo:
        analyzer.compute("", _targets(), ["pkg"])

    assert excinfo.value.path == "pkg/bar/deleted.go"


def test_commit_range_is_forwarded_to_collaborator(tmp_path: Path) -> None:
    seen: list[str] = []

    def vcs_diff(commit_range: str) -> list[str]:
        seen.append(commit_range)
        return []

    report = ImpactAnalyzer(vcs_diff, root=tmp_path).compute("main...feature", _targets(), ["pkg"])

    assert seen == ["main...feature"]
    assert report.files == ()
    assert list(report.evidence) == ["cmd/server", "cmd/worker", "cmd/tool"]


def test_compute_does_not_mutate_targets(repo_builder: RepoBuilder) -> None:
    root = _seed(repo_builder, ["cmd/server/main.go"])
    targets = _targets()
    snapshot = list(targets)

    ImpactAnalyzer(lambda commit_range: ["cmd/server/main.go"], root=root).compute("", targets, ["pkg"])

    assert targets == snapshot


def test_report_evidence_is_read_only(repo_builder: RepoBuilder) -> None:
    root = _seed(repo_builder, ["cmd/server/main.go"])
    report = ImpactAnalyzer(lambda commit_range: ["cmd/server/main.go"], root=root).compute(
        "", _targets(), ["pkg"]
    )

    with pytest.raises(TypeError):
        report.evidence["cmd/tool"] = ()  # type: ignore[index]


def test_compute_is_deterministic(repo_builder: RepoBuilder) -> None:
    changed = ["pkg/queue/q.go", "pkg/bar/file.go", "cmd/worker/main.go"]
    root = _seed(repo_builder, changed)
    analyzer = ImpactAnalyzer(lambda commit_range: list(changed), root=root)

    assert analyzer.compute("", _targets(), ["pkg"]) == analyzer.compute("", _targets(), ["pkg"])
