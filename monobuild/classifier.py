"""Decides whether a changed file triggers a rebuild of a target."""

from __future__ import annotations

import posixpath
from typing import Sequence

from .models import Classification, Target


def classify(path: str, target: Target, dep_source_dirs: Sequence[str]) -> Classification:
    """Classify ``path`` against ``target`` as a dependency and/or watch trigger."""
    return Classification(
        dependency=is_dependency_of(path, target, dep_source_dirs),
        watch=is_watched_by(path, target),
    )


def is_watched_by(path: str, target: Target) -> bool:
    """True when the path was matched by one of the target's watch patterns at resolve time."""
    return path in target.resolved_watches


def is_dependency_of(path: str, target: Target, dep_source_dirs: Sequence[str]) -> bool:
    """True when the file lives under a dependency root and its package is imported by the target.

    Package membership is a substring test of the file's directory against the
    resolved import paths, which embed the repository directory as a suffix of
    the module path. Unrelated packages sharing a path fragment also match.
    """
    if not target.resolved_deps:
        return False
    if not any(path.startswith(root) for root in dep_source_dirs):
        return False
    directory = posixpath.dirname(path) or "."
    return any(directory in dep for dep in target.resolved_deps)


__all__ = ["classify", "is_dependency_of", "is_watched_by"]
