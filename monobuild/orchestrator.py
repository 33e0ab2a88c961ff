"""Pipeline orchestration: config, resolution, impact analysis, builds."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import IO, Any, Callable, List, Optional, Sequence

from .builder import BuildOrchestrator, SpawnFn
from .config import DEFAULT_CONFIG_FILE, load_config
from .git.diff import GitDiff
from .impact import ImpactAnalyzer, VCSDiffFn
from .logging import get_logger
from .models import BuildReport, ImpactReport, MonoBuildConfig, Target, TargetState
from .resolver import DependencyResolverFn, GlobExpander, GlobFn, GoListResolver, TargetResolver

ImpactCallback = Callable[[ImpactReport, Sequence[Target]], None]


@dataclass
class RunOutcome:
    """Everything a single monobuild invocation produced."""

    config: MonoBuildConfig
    targets: List[Target]
    impact: ImpactReport
    build: Optional[BuildReport] = None


class Orchestrator:
    """Coordinates a monobuild run over one repository root."""

    def __init__(
        self,
        root: Path | str | None = None,
        *,
        vcs_diff: VCSDiffFn | None = None,
        dep_resolver: DependencyResolverFn | None = None,
        glob: GlobFn | None = None,
        spawn: SpawnFn | None = None,
        stdout: IO[Any] | None = None,
        stderr: IO[Any] | None = None,
    ) -> None:
        self.root = Path(root).expanduser().resolve() if root is not None else Path.cwd()
        self.resolver = TargetResolver(
            dep_resolver or GoListResolver(self.root),
            glob or GlobExpander(self.root),
        )
        self.impact_analyzer = ImpactAnalyzer(vcs_diff or GitDiff(self.root), root=self.root)
        self.builder = BuildOrchestrator(spawn, root=self.root, stdout=stdout, stderr=stderr)
        self.logger = get_logger("orchestrator")

    def load(self, config_path: Path | str = DEFAULT_CONFIG_FILE) -> MonoBuildConfig:
        config = load_config(config_path, self.root)
        self.logger.debug(
            "Loaded %d targets and %d dependency roots from %s",
            len(config.targets),
            len(config.dep_source_dirs),
            config_path,
        )
        return config

    def resolve(self, config: MonoBuildConfig) -> List[Target]:
        return self.resolver.resolve_all(config.targets)

    def analyze(
        self, config: MonoBuildConfig, targets: Sequence[Target], commit_range: str = ""
    ) -> ImpactReport:
        impact = self.impact_analyzer.compute(commit_range, targets, config.dep_source_dirs)
        affected = impact.affected_targets()
        self.logger.info(
            "%d of %d targets affected%s",
            len(affected),
            len(targets),
            f": {', '.join(affected)}" if affected else "",
        )
        return impact

    def build(self, targets: Sequence[Target], impact: ImpactReport) -> BuildReport:
        report = self.builder.build(targets, impact)
        report.raise_for_status()
        built = report.in_state(TargetState.SUCCEEDED)
        self.logger.info("Built %d target(s), skipped %d", len(built), len(report.in_state(TargetState.SKIPPED)))
        return report

    def run(
        self,
        config_path: Path | str = DEFAULT_CONFIG_FILE,
        commit_range: str = "",
        *,
        diff_only: bool = False,
        on_impact: ImpactCallback | None = None,
    ) -> RunOutcome:
        """Execute the full pipeline; every failure surfaces as a MonoBuildError."""
        config = self.load(config_path)
        targets = self.resolve(config)
        impact = self.analyze(config, targets, commit_range)
        if on_impact is not None:
            on_impact(impact, targets)
        outcome = RunOutcome(config=config, targets=targets, impact=impact)
        if diff_only:
            self.logger.info("Diff only; skipping builds")
            return outcome
        outcome.build = self.build(targets, impact)
        return outcome


__all__ = ["Orchestrator", "RunOutcome"]
