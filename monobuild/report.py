"""Human-readable and JSON renderings of an impact report."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Sequence

from .models import ChangedFile, ImpactReport, Target


def format_impact(report: ImpactReport, targets: Sequence[Target]) -> str:
    """Render the changed files and the build/skip decision for every target."""
    label = report.commit_range or "working tree"
    lines = [f"Changes ({label}): {len(report.files)} file(s)"]
    for changed in report.files:
        lines.append(f"  {changed.path}{_trigger_suffix(changed)}")

    lines.append("")
    lines.append("Targets:")
    if not targets:
        lines.append("  (none configured)")
    for target in targets:
        evidence = report.evidence_for(target)
        if evidence:
            lines.append(f"  BUILD {target.path} ({len(evidence)} change(s))")
            for changed in evidence:
                lines.append(f"    - {changed.path}")
        else:
            lines.append(f"  SKIP  {target.path}")
    return "\n".join(lines)


def impact_to_dict(report: ImpactReport) -> Dict[str, Any]:
    return {
        "commit_range": report.commit_range,
        "files": [_file_to_dict(changed) for changed in report.files],
        "targets": {
            path: [changed.path for changed in files]
            for path, files in report.evidence.items()
        },
    }


def impact_to_json(report: ImpactReport) -> str:
    return json.dumps(impact_to_dict(report), indent=2)


def _file_to_dict(changed: ChangedFile) -> Dict[str, Any]:
    return {
        "path": changed.path,
        "dependency_of": list(changed.dependency_of),
        "watched_by": list(changed.watched_by),
    }


def _trigger_suffix(changed: ChangedFile) -> str:
    parts: List[str] = []
    if changed.dependency_of:
        parts.append("dependency of " + ", ".join(changed.dependency_of))
    if changed.watched_by:
        parts.append("watched by " + ", ".join(changed.watched_by))
    if not parts:
        return ""
    return " [" + "; ".join(parts) + "]"


__all__ = ["format_impact", "impact_to_dict", "impact_to_json"]
