"""Sequential, fail-fast execution of target build commands."""

from __future__ import annotations

import codecs
import functools
import io
import subprocess
import sys
import threading
from pathlib import Path
from typing import IO, Any, Callable, List, Optional, Protocol, Sequence, Tuple

from .errors import BuildCommandError, NoTargetsError
from .logging import get_logger
from .models import BuildReport, ImpactReport, Target, TargetBuild, TargetState

_CHUNK_SIZE = 65536


class Process(Protocol):
    """The subset of :class:`subprocess.Popen` the orchestrator relies on."""

    stdout: Optional[IO[bytes]]
    stderr: Optional[IO[bytes]]

    def wait(self) -> int: ...


SpawnFn = Callable[[List[str], Optional[Path]], Process]


class BuildOrchestrator:
    """Builds every target with change evidence, one at a time, stopping at the first failure."""

    def __init__(
        self,
        spawn: SpawnFn | None = None,
        *,
        root: Path | str | None = None,
        stdout: IO[Any] | None = None,
        stderr: IO[Any] | None = None,
    ) -> None:
        self._spawn = spawn or _default_spawn
        self.root = Path(root) if root is not None else None
        self._stdout = stdout
        self._stderr = stderr
        self.logger = get_logger("builder")

    def build(self, targets: Sequence[Target], impact: ImpactReport) -> BuildReport:
        """Run builds and return the per-target states; never raises for build failures."""
        if not targets:
            raise NoTargetsError()

        report = BuildReport(targets=[TargetBuild(path=target.path) for target in targets])
        for target, record in zip(targets, report.targets):
            if report.aborted:
                break
            if not impact.evidence_for(target):
                record.state = TargetState.SKIPPED
                self.logger.info("Skipping build target %s (no changes)", target.path)
                continue
            self._run_target(target, record)
            if record.state is TargetState.FAILED:
                report.aborted = True
                self.logger.error("Build of target %s failed: %s", target.path, record.failure)

        remaining = report.in_state(TargetState.PENDING)
        if remaining:
            self.logger.warning("Not attempted after failure: %s", ", ".join(remaining))
        return report

    def _run_target(self, target: Target, record: TargetBuild) -> None:
        record.state = TargetState.BUILDING
        argv = target.build_command.argv
        self.logger.info("Building target %s: %s", target.path, " ".join(argv))
        try:
            cwd = self._working_dir(target)
            process = self._spawn(argv, cwd)
        except (BuildCommandError, OSError) as exc:
            record.state = TargetState.FAILED
            record.failure = exc
            return

        stdout_sink = self._stdout if self._stdout is not None else sys.stdout
        stderr_sink = self._stderr if self._stderr is not None else sys.stderr
        try:
            output, error = drain_streams(process, stdout_sink, stderr_sink)
        except Exception as exc:
            process.wait()
            record.state = TargetState.FAILED
            record.failure = exc
            return
        returncode = process.wait()

        record.output = output.decode("utf-8", errors="replace")
        record.error = error.decode("utf-8", errors="replace")
        record.returncode = returncode
        if returncode != 0:
            record.state = TargetState.FAILED
            record.failure = subprocess.CalledProcessError(returncode, argv, output, error)
            return
        record.state = TargetState.SUCCEEDED
        self.logger.info("Target %s built successfully", target.path)

    def _working_dir(self, target: Target) -> Optional[Path]:
        build_dir = target.build_command.dir
        if not build_dir:
            return None
        location = Path(build_dir)
        if not location.is_absolute() and self.root is not None:
            location = self.root / location
        if not location.is_dir():
            raise BuildCommandError(f"build command error: directory {build_dir} does not exist")
        return location


def drain_streams(process: Process, stdout_sink: IO[Any], stderr_sink: IO[Any]) -> Tuple[bytes, bytes]:
    """Tee the child's stdout and stderr to the sinks while capturing both.

    stdout is drained on a worker thread and stderr on the calling thread so a
    child blocked on a full pipe can never stall the other stream.
    """
    captured: dict[str, bytes] = {}
    errors: List[BaseException] = []

    def _worker() -> None:
        try:
            captured["stdout"] = _pump(process.stdout, stdout_sink)
        except Exception as exc:  # re-raised on the caller after join
            errors.append(exc)

    thread = threading.Thread(target=_worker, name="monobuild-stdout", daemon=True)
    thread.start()
    try:
        error = _pump(process.stderr, stderr_sink)
    finally:
        thread.join()
    if errors:
        raise errors[0]
    return captured.get("stdout", b""), error


def _pump(source: Optional[IO[bytes]], sink: IO[Any]) -> bytes:
    if source is None:
        return b""
    captured = io.BytesIO()
    # Forward whatever is available; partial lines are not held back.
    read = functools.partial(getattr(source, "read1", source.read), _CHUNK_SIZE)
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    try:
        for chunk in iter(read, b""):
            captured.write(chunk)
            _write_live(sink, chunk, decoder)
        _write_live(sink, b"", decoder, final=True)
    finally:
        source.close()
    return captured.getvalue()


def _write_live(stream: IO[Any], chunk: bytes, decoder: codecs.IncrementalDecoder, final: bool = False) -> None:
    buffer = getattr(stream, "buffer", None)
    if buffer is not None:
        if not chunk:
            return
        stream.flush()
        buffer.write(chunk)
        buffer.flush()
        return
    # Text sinks get whole characters only; a multi-byte sequence may straddle chunks.
    text = decoder.decode(chunk, final=final)
    if text:
        stream.write(text)
        stream.flush()


def _default_spawn(argv: List[str], cwd: Optional[Path]) -> Process:
    return subprocess.Popen(
        argv,
        cwd=str(cwd) if cwd is not None else None,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )


__all__ = ["BuildOrchestrator", "Process", "drain_streams"]
