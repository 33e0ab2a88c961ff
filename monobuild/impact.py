"""Impact analysis: maps changed files onto the targets they affect."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Sequence

from .classifier import classify
from .errors import MissingChangedFileError
from .logging import get_logger
from .models import ChangedFile, ImpactReport, Target

VCSDiffFn = Callable[[str], Sequence[str]]


class ImpactAnalyzer:
    """Runs the diff collaborator and folds its paths into per-target evidence."""

    def __init__(
        self,
        vcs_diff: VCSDiffFn,
        *,
        root: Path | str | None = None,
        exists: Callable[[Path], bool] | None = None,
    ) -> None:
        self._vcs_diff = vcs_diff
        self.root = Path(root) if root is not None else Path.cwd()
        self._exists = exists or _path_exists
        self.logger = get_logger("impact")

    def compute(
        self,
        commit_range: str,
        targets: Sequence[Target],
        dep_source_dirs: Sequence[str],
    ) -> ImpactReport:
        paths = [path for path in self._vcs_diff(commit_range) if path.strip()]
        self.logger.info(
            "Diff %s reported %d changed files",
            commit_range or "(working tree)",
            len(paths),
        )

        files: List[ChangedFile] = []
        evidence: Dict[str, List[ChangedFile]] = {target.path: [] for target in targets}
        for path in paths:
            if not self._exists(self.root / path):
                raise MissingChangedFileError(path)
            changed, triggered = self._classify_file(path, targets, dep_source_dirs)
            files.append(changed)
            for target_path in triggered:
                evidence[target_path].append(changed)

        return ImpactReport(commit_range=commit_range, files=tuple(files), evidence=evidence)

    def _classify_file(
        self,
        path: str,
        targets: Sequence[Target],
        dep_source_dirs: Sequence[str],
    ) -> tuple[ChangedFile, List[str]]:
        dependency_of: List[str] = []
        watched_by: List[str] = []
        triggered: List[str] = []
        for target in targets:
            result = classify(path, target, dep_source_dirs)
            if result.dependency:
                dependency_of.append(target.path)
                self.logger.debug("file %s is dependency of target %s", path, target.path)
            if result.watch:
                watched_by.append(target.path)
                self.logger.debug("file %s is watched by target %s", path, target.path)
            if result.triggered:
                triggered.append(target.path)
        changed = ChangedFile(
            path=path,
            dependency_of=tuple(dependency_of),
            watched_by=tuple(watched_by),
        )
        return changed, triggered


def _path_exists(path: Path) -> bool:
    try:
        path.stat()
    except FileNotFoundError:
        return False
    return True


__all__ = ["ImpactAnalyzer"]
