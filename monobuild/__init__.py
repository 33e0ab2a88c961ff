"""Rebuild only the monorepo targets affected by a change set."""

from .builder import BuildOrchestrator
from .classifier import classify
from .config import load_config
from .errors import (
    BuildCommandError,
    BuildError,
    CollaboratorError,
    ConfigError,
    DependencyResolutionError,
    MissingChangedFileError,
    MonoBuildError,
    NoTargetsError,
    VCSError,
)
from .impact import ImpactAnalyzer
from .models import (
    BuildCommand,
    BuildReport,
    ChangedFile,
    Classification,
    ImpactReport,
    MonoBuildConfig,
    Target,
    TargetBuild,
    TargetState,
)
from .orchestrator import Orchestrator, RunOutcome
from .resolver import TargetResolver

__version__ = "0.1.0"

__all__ = [
    "BuildCommand",
    "BuildCommandError",
    "BuildError",
    "BuildOrchestrator",
    "BuildReport",
    "ChangedFile",
    "Classification",
    "CollaboratorError",
    "ConfigError",
    "DependencyResolutionError",
    "ImpactAnalyzer",
    "ImpactReport",
    "MissingChangedFileError",
    "MonoBuildConfig",
    "MonoBuildError",
    "NoTargetsError",
    "Orchestrator",
    "RunOutcome",
    "Target",
    "TargetBuild",
    "TargetResolver",
    "TargetState",
    "VCSError",
    "classify",
    "load_config",
]
