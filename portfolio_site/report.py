from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
import json
from pathlib import Path
from typing import Sequence

from portfolio_site.commits import CommitRecord
from portfolio_site.projects import Project, project_payload
from portfolio_site.stats import CommitStats, display_values

COMMITS_FILENAME = "commits.json"
PROJECTS_FILENAME = "projects.json"
SUMMARY_FILENAME = "summary.md"


def _jsonable(value: object) -> object:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def commit_payload(commit: CommitRecord) -> dict:
    # display_fields() leaves out the per-line back-reference.
    return {k: _jsonable(v) for k, v in commit.display_fields().items()}


def build_stats_payload(stats: CommitStats) -> dict:
    return {"schema_version": 1, **asdict(stats)}


def build_markdown_summary(stats: CommitStats, commits: Sequence[CommitRecord]) -> str:
    shown = display_values(stats)
    lines: list[str] = []
    lines.append("## Commit summary")
    lines.append("")
    lines.append(f"- Commits: {shown['commits']}")
    lines.append(f"- Files: {shown['files']}")
    lines.append(f"- Total LOC: {shown['total_loc']}")
    lines.append(f"- Max depth: {shown['max_depth']}")
    lines.append(f"- Average file length: {shown['avg_file_length']}")
    lines.append(f"- Longest file: {shown['max_line']} lines")
    lines.append("")
    if commits:
        first, last = commits[0], commits[-1]
        lines.append("### Range")
        lines.append(f"- First: {first.datetime.isoformat()} ({first.id})")
        lines.append(f"- Last: {last.datetime.isoformat()} ({last.id})")
        lines.append("")
    return "\n".join(lines)


def _atomic_write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(text, encoding="utf-8")
    tmp.replace(path)


def _atomic_write_json(path: Path, payload) -> None:
    _atomic_write_text(path, json.dumps(payload, indent=2, sort_keys=True))


def write_meta_exports(
    out_dir: Path, *, commits: Sequence[CommitRecord], stats: CommitStats
) -> tuple[Path, Path]:
    json_path = out_dir / COMMITS_FILENAME
    md_path = out_dir / SUMMARY_FILENAME
    _atomic_write_json(
        json_path,
        {"stats": build_stats_payload(stats), "commits": [commit_payload(c) for c in commits]},
    )
    _atomic_write_text(md_path, build_markdown_summary(stats, commits))
    return json_path, md_path


def write_projects_export(out_dir: Path, *, projects: Sequence[Project]) -> Path:
    """projects.json next to the projects page, for the search box."""
    path = out_dir / PROJECTS_FILENAME
    _atomic_write_text(path, json.dumps([project_payload(p) for p in projects], indent=2))
    return path
