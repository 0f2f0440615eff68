from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from portfolio_site.loader import LineRecord
from portfolio_site.scales import OrdinalColorScale


@dataclass
class FileRow:
    name: str
    label: str = ""
    marks: list[str] = field(default_factory=list)  # one colour per line


@dataclass
class FilesPanel:
    rows: dict[str, FileRow] = field(default_factory=dict)

    @property
    def order(self) -> list[str]:
        return list(self.rows)


def type_color_scale(rows: Iterable[LineRecord]) -> OrdinalColorScale:
    """Colour per line `type`, fixed by sorted type name so every view agrees."""
    return OrdinalColorScale(sorted({r.type for r in rows}))


def group_files(rows: Iterable[LineRecord]) -> list[tuple[str, list[LineRecord]]]:
    groups: dict[str, list[LineRecord]] = {}
    for r in rows:
        groups.setdefault(r.file, []).append(r)
    return sorted(groups.items(), key=lambda kv: -len(kv[1]))


def render_files(panel: FilesPanel, rows: Iterable[LineRecord], colors: OrdinalColorScale) -> FilesPanel:
    """Per-file containers are reused by name; their line marks are rebuilt."""
    rebuilt: dict[str, FileRow] = {}
    for name, lines in group_files(rows):
        row = panel.rows.get(name) or FileRow(name=name)
        row.label = f"{len(lines)} lines"
        row.marks = [colors(line.type) for line in lines]
        rebuilt[name] = row
    panel.rows = rebuilt
    return panel
