from __future__ import annotations

import os
from pathlib import Path
from typing import List, Mapping, Optional

from ..infra.models import RunSummary

_HEADINGS = {
    "published": "Release published",
    "skipped": "Release already exists, nothing to do",
    "failed": "Mirror run failed",
}


def render_markdown(summary: RunSummary) -> str:
    lines: List[str] = [f"## Mirror run summary: {_HEADINGS.get(summary.outcome, summary.outcome)}", ""]
    if summary.version:
        lines.append(f"**Version:** {summary.version}")
    if summary.final_name:
        lines.append(f"**File:** {summary.final_name}")
    if summary.release_url:
        lines.append(f"**Release URL:** {summary.release_url}")
    if summary.error:
        lines.append(f"**Error:** {summary.error}")
    lines.append("")
    return "\n".join(lines) + "\n"


def _append(path: Path, text: str) -> None:
    with path.open("a", encoding="utf-8") as f:
        f.write(text)


def emit_summary(summary: RunSummary, env: Optional[Mapping[str, str]] = None) -> None:
    """Print the run facts and, inside GitHub Actions, write the step summary and outputs."""
    e = os.environ if env is None else env

    for key, value in summary.as_facts():
        if value:
            print(f"[summary] {key}={value}")

    step_summary = str(e.get("GITHUB_STEP_SUMMARY", "") or "").strip()
    if step_summary:
        _append(Path(step_summary), render_markdown(summary))

    gh_output = str(e.get("GITHUB_OUTPUT", "") or "").strip()
    if gh_output:
        facts = [(k, v) for k, v in summary.as_facts() if k != "error"]
        _append(Path(gh_output), "".join(f"{k}={v}\n" for k, v in facts))
