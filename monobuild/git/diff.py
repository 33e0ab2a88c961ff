"""Changed-file listing via ``git diff --name-only``."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable, Iterable, List

from ..errors import VCSError
from ..logging import get_logger

# Paths come back NUL-terminated and unquoted, byte for byte as stored in the index.
_DIFF_ARGS = ["git", "-c", "core.quotePath=false", "diff", "--name-only", "-z"]


class GitDiff:
    """Lists repository-relative paths changed in a commit range or the working tree."""

    def __init__(self, root: Path | str | None = None, runner: Callable[..., str] | None = None) -> None:
        self.root = Path(root) if root is not None else Path.cwd()
        self._runner = runner or self._default_runner
        self.logger = get_logger("git")

    def changed_paths(self, commit_range: str = "") -> List[str]:
        """Return changed paths; an empty range diffs the working tree against the index."""
        args = list(_DIFF_ARGS)
        if commit_range:
            args.append(commit_range)
        self.logger.debug("Running %s in %s", " ".join(args), self.root)
        try:
            output = self._run(args, cwd=self.root)
        except subprocess.CalledProcessError as exc:
            diagnostics = _decode(exc.stderr) or _decode(exc.output)
            raise VCSError(" ".join(args) + " failed", output=diagnostics) from exc
        except OSError as exc:
            raise VCSError(" ".join(args) + " could not be started", output=str(exc)) from exc
        return [path for path in output.split("\0") if path]

    __call__ = changed_paths

    # ------------------------------------------------------------------
    # Internals

    def _run(self, args: Iterable[str], *, cwd: Path) -> str:
        return self._runner(args, cwd=cwd)

    @staticmethod
    def _default_runner(args: Iterable[str], *, cwd: Path) -> str:
        # surrogateescape round-trips names that are not valid UTF-8 back to the same bytes on disk.
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=True,
            encoding="utf-8",
            errors="surrogateescape",
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
        return completed.stdout


def _decode(output: object) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return str(output)
