"""Version-control collaborators."""

from .diff import GitDiff

__all__ = ["GitDiff"]
