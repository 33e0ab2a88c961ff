"""CLI entrypoint for the ``mb`` command."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Mapping, Sequence

from .config import DEFAULT_CONFIG_FILE
from .errors import MonoBuildError
from .logging import configure_logging
from .models import ImpactReport, Target
from .orchestrator import Orchestrator
from .report import format_impact, impact_to_json

_ENV_PREFIX = "MB_"
_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(environ: Mapping[str, str], name: str) -> bool:
    return environ.get(_ENV_PREFIX + name, "").strip().lower() in _TRUTHY


def _build_parser(environ: Mapping[str, str] | None = None) -> argparse.ArgumentParser:
    env = os.environ if environ is None else environ
    parser = argparse.ArgumentParser(
        prog="mb",
        description=(
            "mb is a build tool for Go monorepos: it rebuilds only the targets "
            "affected by the changed files."
        ),
        epilog="Every flag can also be set through an MB_-prefixed environment variable.",
    )
    parser.add_argument(
        "--commit-range",
        default=env.get(_ENV_PREFIX + "COMMIT_RANGE", ""),
        help="Passed to `git diff --name-only [commit-range]` to find file changes.",
    )
    parser.add_argument(
        "--config",
        default=env.get(_ENV_PREFIX + "CONFIG", f"./{DEFAULT_CONFIG_FILE}"),
        help="Path to the mb config file (default: ./monobuild.yaml).",
    )
    parser.add_argument(
        "--diff-only",
        action="store_true",
        default=_env_flag(env, "DIFF_ONLY"),
        help="View changes without building.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        default=_env_flag(env, "JSON"),
        help="Print the impact report as JSON.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=_env_flag(env, "VERBOSE"),
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=env.get(_ENV_PREFIX + "LOG_FILE") or None,
        help="Also write logs to this file.",
    )
    return parser


def main(argv: Sequence[str] | None = None, *, orchestrator: Orchestrator | None = None) -> int:
    """CLI entrypoint; returns the process exit status."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file) if args.log_file else None
    configure_logging(verbose=bool(args.verbose), log_file=log_file)

    def _print_impact(impact: ImpactReport, targets: Sequence[Target]) -> None:
        if args.json:
            print(impact_to_json(impact))
        else:
            print(format_impact(impact, targets))
        sys.stdout.flush()

    runner = orchestrator or Orchestrator()
    try:
        runner.run(
            args.config,
            args.commit_range,
            diff_only=bool(args.diff_only),
            on_impact=_print_impact,
        )
    except MonoBuildError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except Exception as exc:  # pragma: no cover - defensive guard
        print(f"Error: {exc}\nRun with --verbose for more details.", file=sys.stderr)
        return 1
    return 0


def run() -> None:
    sys.exit(main(sys.argv[1:]))


if __name__ == "__main__":
    run()
