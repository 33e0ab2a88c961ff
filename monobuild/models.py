"""Core data models shared across monobuild components."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import FrozenSet, List, Mapping, Optional, Tuple

from .errors import BuildError, ConfigError


@dataclass(frozen=True)
class BuildCommand:
    """Command used to build a target."""

    command: str
    args: Tuple[str, ...] = ()
    dir: Optional[str] = None

    @property
    def argv(self) -> List[str]:
        return [self.command, *self.args]


@dataclass(frozen=True)
class Target:
    """A buildable binary and everything derived about it at startup."""

    path: str
    build_command: BuildCommand
    watch_patterns: Tuple[str, ...] = ()
    resolved_deps: Tuple[str, ...] = ()
    resolved_watches: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class MonoBuildConfig:
    """Validated contents of monobuild.yaml."""

    root: Path
    dep_source_dirs: Tuple[str, ...] = ()
    targets: Tuple[Target, ...] = ()


@dataclass(frozen=True)
class Classification:
    """Outcome of classifying one changed file against one target."""

    dependency: bool = False
    watch: bool = False

    @property
    def triggered(self) -> bool:
        return self.dependency or self.watch


@dataclass(frozen=True)
class ChangedFile:
    """A file reported by the version-control diff."""

    path: str
    dependency_of: Tuple[str, ...] = ()
    watched_by: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ImpactReport:
    """Changed files and the per-target evidence derived from them."""

    commit_range: str
    files: Tuple[ChangedFile, ...]
    evidence: Mapping[str, Tuple[ChangedFile, ...]]

    def __post_init__(self) -> None:
        object.__setattr__(self, "files", tuple(self.files))
        frozen = {path: tuple(files) for path, files in self.evidence.items()}
        object.__setattr__(self, "evidence", MappingProxyType(frozen))

    def evidence_for(self, target: Target | str) -> Tuple[ChangedFile, ...]:
        key = target.path if isinstance(target, Target) else target
        return self.evidence.get(key, ())

    def affected_targets(self) -> List[str]:
        return [path for path, files in self.evidence.items() if files]


class TargetState(str, enum.Enum):
    """Lifecycle of a target during one orchestration run."""

    PENDING = "pending"
    SKIPPED = "skipped"
    BUILDING = "building"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class TargetBuild:
    """Mutable state record owned by a single target's build step."""

    path: str
    state: TargetState = TargetState.PENDING
    output: str = ""
    error: str = ""
    returncode: Optional[int] = None
    failure: Optional[BaseException] = None


@dataclass
class BuildReport:
    """Per-target states plus the orchestration-level abort flag."""

    targets: List[TargetBuild] = field(default_factory=list)
    aborted: bool = False

    def get(self, path: str) -> Optional[TargetBuild]:
        for record in self.targets:
            if record.path == path:
                return record
        return None

    def in_state(self, state: TargetState) -> List[str]:
        return [record.path for record in self.targets if record.state is state]

    @property
    def failed(self) -> Optional[TargetBuild]:
        for record in self.targets:
            if record.state is TargetState.FAILED:
                return record
        return None

    def raise_for_status(self) -> None:
        """Raise the error that aborted the run, if any."""
        record = self.failed
        if record is None:
            return
        failure = record.failure or RuntimeError("unknown failure")
        if isinstance(failure, ConfigError):
            raise failure
        raise BuildError(record.path, failure) from failure

