"""Per-target dependency and watch-pattern resolution."""

from __future__ import annotations

import glob as _glob
import json
import subprocess
from dataclasses import replace
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Set

from .errors import ConfigError, DependencyResolutionError, MonoBuildError
from .logging import get_logger
from .models import Target

DependencyResolverFn = Callable[[str], Sequence[str]]
GlobFn = Callable[[str], Iterable[str]]


class GoListResolver:
    """Resolves a target's transitive imports with ``go list -json``."""

    def __init__(self, root: Path | str | None = None, runner: Callable[..., str] | None = None) -> None:
        self.root = Path(root) if root is not None else Path.cwd()
        self._runner = runner or self._default_runner

    def __call__(self, path: str) -> List[str]:
        # The go tool treats bare names as import paths, not directories.
        package = path if path.startswith("./") else f"./{path}"
        args = ["go", "list", "-json", package]
        try:
            output = self._runner(args, cwd=self.root)
        except subprocess.CalledProcessError as exc:
            raise DependencyResolutionError(
                f"go list -json {package}", output=_decode(exc.output)
            ) from exc
        except OSError as exc:
            raise DependencyResolutionError(
                f"go list -json {package} could not be started", output=str(exc)
            ) from exc
        return _parse_go_list(output, package)

    @staticmethod
    def _default_runner(args: Iterable[str], *, cwd: Path) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=True,
            text=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
        )
        return completed.stdout


class GlobExpander:
    """Expands watch patterns against the repository root, once, at startup."""

    def __init__(self, root: Path | str | None = None) -> None:
        self.root = Path(root) if root is not None else Path.cwd()

    def __call__(self, pattern: str) -> List[str]:
        matches = _glob.glob(pattern, root_dir=str(self.root), recursive=True)
        files = {
            Path(match).as_posix()
            for match in matches
            if (self.root / match).is_file()
        }
        return sorted(files)


class TargetResolver:
    """Populates ``resolved_deps`` and ``resolved_watches`` for targets."""

    def __init__(self, dep_resolver: DependencyResolverFn, glob: GlobFn) -> None:
        self._dep_resolver = dep_resolver
        self._glob = glob
        self.logger = get_logger("resolver")

    def resolve(self, target: Target) -> Target:
        deps = self._resolve_deps(target)
        watches = self._resolve_watches(target)
        self.logger.debug(
            "Resolved target %s: %d dependencies, %d watched files",
            target.path,
            len(deps),
            len(watches),
        )
        return replace(target, resolved_deps=deps, resolved_watches=watches)

    def resolve_all(self, targets: Sequence[Target]) -> List[Target]:
        return [self.resolve(target) for target in targets]

    def _resolve_deps(self, target: Target) -> tuple[str, ...]:
        try:
            deps = self._dep_resolver(target.path)
        except MonoBuildError:
            raise
        except Exception as exc:
            raise DependencyResolutionError(
                f"cannot resolve dependencies of target {target.path}", output=str(exc)
            ) from exc
        return tuple(dict.fromkeys(deps or ()))

    def _resolve_watches(self, target: Target) -> frozenset[str]:
        watches: Set[str] = set()
        for pattern in target.watch_patterns:
            problem = _pattern_problem(pattern)
            if problem is not None:
                raise ConfigError(f"problem with target {target.path} watch {pattern}: {problem}")
            try:
                watches.update(self._glob(pattern))
            except (ValueError, OSError) as exc:
                raise ConfigError(f"problem with target {target.path} watch {pattern}: {exc}") from exc
        return frozenset(watches)


def _parse_go_list(output: str, package: str) -> List[str]:
    # Patterns such as ./... make go list print several concatenated objects.
    decoder = json.JSONDecoder()
    deps: List[str] = []
    index = 0
    text = output.strip()
    while index < len(text):
        try:
            payload, end = decoder.raw_decode(text, index)
        except json.JSONDecodeError as exc:
            raise DependencyResolutionError(
                f"go list -json {package} returned invalid JSON", output=str(exc)
            ) from exc
        if isinstance(payload, dict):
            for dep in payload.get("Deps") or ():
                if isinstance(dep, str) and dep not in deps:
                    deps.append(dep)
        index = end
        while index < len(text) and text[index].isspace():
            index += 1
    return deps


def _pattern_problem(pattern: str) -> Optional[str]:
    """Return why a glob pattern is malformed, or None when it is well formed."""
    index = 0
    length = len(pattern)
    while index < length:
        char = pattern[index]
        if char == "\\":
            if index + 1 >= length:
                return "trailing escape character"
            index += 2
            continue
        if char == "[":
            index += 1
            if index < length and pattern[index] in "!^":
                index += 1
            # A leading ']' is a literal member of the class.
            if index < length and pattern[index] == "]":
                index += 1
            while index < length and pattern[index] != "]":
                index += 2 if pattern[index] == "\\" else 1
            if index >= length:
                return "unterminated character class"
        index += 1
    return None


def _decode(output: object) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return str(output)


__all__ = ["GlobExpander", "GoListResolver", "TargetResolver"]
