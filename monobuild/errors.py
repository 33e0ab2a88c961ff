"""Exception hierarchy for monobuild runs."""

from __future__ import annotations


class MonoBuildError(RuntimeError):
    """Base class for every fatal monobuild condition."""


class ConfigError(MonoBuildError):
    """Raised when the configuration is missing, malformed, or inconsistent."""


class BuildCommandError(ConfigError):
    """Raised when a target's build command cannot be prepared for spawning."""


class NoTargetsError(ConfigError):
    """Raised when a build is requested but no targets are configured."""

    def __init__(self, message: str = "no monobuild targets found") -> None:
        super().__init__(message)


class CollaboratorError(MonoBuildError):
    """Raised when an external tool fails; keeps the tool's raw diagnostics."""

    def __init__(self, message: str, *, output: str = "") -> None:
        self.output = output
        detail = output.strip()
        super().__init__(f"{message}: {detail}" if detail else message)


class VCSError(CollaboratorError):
    """The version-control diff command failed."""


class DependencyResolutionError(CollaboratorError):
    """The dependency resolver could not list a target's imports."""


class MissingChangedFileError(MonoBuildError):
    """A path reported by the diff does not exist in the working tree."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"changed file {path} reported by the diff does not exist on disk")


class BuildError(MonoBuildError):
    """A target build failed; carries the target path and the underlying cause."""

    def __init__(self, target: str, cause: BaseException) -> None:
        self.target = target
        self.cause = cause
        super().__init__(f"build of target {target} failed: {cause}")


__all__ = [
    "BuildCommandError",
    "BuildError",
    "CollaboratorError",
    "ConfigError",
    "DependencyResolutionError",
    "MissingChangedFileError",
    "MonoBuildError",
    "NoTargetsError",
    "VCSError",
]
