from __future__ import annotations

from html import escape
import logging
from pathlib import Path

from portfolio_site.commits import process_commits
from portfolio_site.config import SiteConfig
from portfolio_site.errors import LogLoadError, ProjectLoadError
from portfolio_site.explorer_state import CommitExplorer, DisplaySurface
from portfolio_site.files import FilesPanel
from portfolio_site.loader import load_rows
from portfolio_site.navigation import render_nav, render_theme_switcher, theme_script
from portfolio_site.projects import ProjectGallery, load_projects, render_projects, search_script
from portfolio_site.report import write_meta_exports, write_projects_export
from portfolio_site.scatter import ScatterRenderer, Tooltip
from portfolio_site.selection import LanguagePanel
from portfolio_site.stats import StatsPanel, compute_stats

logger = logging.getLogger(__name__)

INDEX_FILENAME = "index.html"
CSS_FILENAME = "style.css"
HOME_PROJECT_COUNT = 3

STYLE_CSS = """:root { color-scheme: light dark; --color-accent: oklch(65% 50% 0); }
body { max-width: 100ch; margin-inline: auto; padding: 1em; font: 100%/1.5 system-ui, sans-serif; accent-color: var(--color-accent); }
nav { display: flex; margin-bottom: 1em; border-bottom: 1px solid oklch(50% 10% 200 / 40%); }
nav a { flex: 1; text-align: center; padding: 0.5em; text-decoration: none; color: inherit; }
nav a.current { border-bottom: 0.4em solid oklch(80% 3% 200); padding-bottom: 0.1em; }
nav a:hover { border-bottom: 0.4em solid var(--color-accent); background-color: color-mix(in oklch, var(--color-accent), canvas 85%); }
.color-scheme { position: absolute; top: 1rem; right: 1rem; font-size: 80%; }
.projects { display: grid; grid-template-columns: repeat(auto-fill, minmax(15em, 1fr)); gap: 1em; }
.projects article { display: grid; grid-template-rows: subgrid; grid-row: span 3; }
.projects img { max-width: 100%; }
.container { display: flex; gap: 1em; align-items: center; }
.legend { display: grid; grid-template-columns: repeat(auto-fill, minmax(9em, 1fr)); gap: 1em; flex: 1; padding: 1em; border: 1px solid #ccc; }
.legend-items { display: flex; align-items: center; gap: 0.5em; }
.swatch { display: inline-block; width: 1em; aspect-ratio: 1 / 1; background-color: var(--color); border-radius: 50%; }
dl.stats { display: grid; grid-template-columns: repeat(6, 1fr); grid-auto-flow: column; grid-template-rows: auto auto; }
dl.stats dt { font-size: 80%; text-transform: uppercase; opacity: 0.7; }
dl.stats dd { margin: 0; font-size: 200%; }
dl.info { display: grid; grid-template-columns: auto 1fr; gap: 0.25em 1em; margin: 0; }
.tooltip { position: fixed; top: 1em; left: 1em; background: canvas; box-shadow: 0 0.5em 1em rgb(0 0 0 / 20%); padding: 0.5em; border-radius: 0.5em; }
.files > div { display: grid; grid-template-columns: subgrid; grid-column: 1 / -1; }
.files { display: grid; grid-template-columns: 1fr 4fr; }
.files dt small { display: block; font-size: 75%; opacity: 0.6; }
.files dd { grid-column: 2; display: flex; flex-wrap: wrap; align-items: start; align-content: start; gap: 0.15em; padding-top: 0.6em; margin-left: 0; }
.loc { display: flex; width: 0.5em; aspect-ratio: 1; background: var(--color); border-radius: 50%; }
#scrolly-1 { position: relative; display: flex; gap: 1rem; }
#scrolly-1 > * { flex: 1; }
#scatter-story .step { padding-bottom: 50vh; }
#scatter-plot { position: sticky; top: 0; height: 60vh; }
#scatter-plot svg { max-width: 100%; height: auto; }
"""

# Slider on the published meta page: hides the points of commits after the
# cutoff, using the datetimes exported to commits.json.
SLIDER_SCRIPT = """<script>
  (function () {
    const slider = document.getElementById('commit-slider');
    const label = document.getElementById('selectedTime');
    const count = document.querySelector('#stats dd');
    let commits = [];

    function update() {
      if (!commits.length) return;
      const t0 = commits[0].time;
      const t1 = commits[commits.length - 1].time;
      const cutoff = new Date(t0 + (t1 - t0) * Number(slider.value) / 100);
      let shown = 0;
      for (const c of commits) {
        const visible = c.time <= cutoff.getTime();
        if (visible) shown += 1;
        const node = document.getElementById('commit-' + c.id);
        if (node) node.style.display = visible ? '' : 'none';
      }
      label.textContent = cutoff.toLocaleString('en-US', { dateStyle: 'long', timeStyle: 'short' });
      if (count) count.textContent = String(shown);
    }

    fetch('./commits.json', { cache: 'no-store' })
      .then((res) => res.json())
      .then((payload) => {
        commits = payload.commits
          .map((c) => ({ id: c.id, time: new Date(c.datetime).getTime() }))
          .sort((a, b) => a.time - b.time);
        slider.addEventListener('input', update);
      });
  })();
</script>"""


def _atomic_write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(text, encoding="utf-8")
    tmp.replace(path)


def inline_svg(svg: str) -> str:
    """Drop the XML prolog and doctype matplotlib writes before the <svg> element."""
    start = svg.find("<svg")
    return svg[start:] if start >= 0 else svg


def render_page(
    cfg: SiteConfig, *, title: str, current_url: str, body: str, base_path: str, scripts: str = ""
) -> str:
    return (
        "<!doctype html>\n"
        '<html lang="en">\n'
        "<head>\n"
        '<meta charset="utf-8" />\n'
        '<meta name="viewport" content="width=device-width, initial-scale=1" />\n'
        f"<title>{escape(title)}</title>\n"
        f'<link rel="stylesheet" href="{base_path}{CSS_FILENAME}" />\n'
        "</head>\n"
        "<body>\n"
        f"{render_theme_switcher()}\n"
        f"{render_nav(cfg.nav_pages, current_url, base_path)}\n"
        f"{body}\n"
        f"{theme_script()}\n"
        f"{scripts}\n"
        "</body>\n"
        "</html>\n"
    )


def render_stats_html(panel: StatsPanel) -> str:
    parts: list[str] = []
    for slot in panel.slots.values():
        label = escape(slot.label)
        if slot.title:
            head, _, tail = slot.label.rpartition(" ")
            label = f'{escape(head)} <abbr title="{escape(slot.title)}">{escape(tail)}</abbr>'.lstrip()
        parts.append(f"<dt>{label}</dt><dd>{escape(slot.text)}</dd>")
    return '<dl id="stats" class="stats">' + "".join(parts) + "</dl>"


def render_tooltip_html(tooltip: Tooltip) -> str:
    hidden = "" if tooltip.visible else " hidden"
    return (
        f'<dl id="commit-tooltip" class="info tooltip"{hidden}>'
        "<dt>Commit</dt>"
        f'<dd><a id="commit-link" href="{escape(tooltip.link_href)}" target="_blank">{escape(tooltip.link_text)}</a></dd>'
        "<dt>Date</dt>"
        f'<dd id="commit-date">{escape(tooltip.date)}</dd>'
        "</dl>"
    )


def render_language_html(panel: LanguagePanel) -> str:
    parts = [
        f"<dt>{escape(share.language)}</dt><dd>{escape(share.lines_text)}</dd>"
        for share in panel.entries
    ]
    return '<dl id="language-breakdown" class="stats">' + "".join(parts) + "</dl>"


def render_files_html(panel: FilesPanel) -> str:
    rows: list[str] = []
    for row in panel.rows.values():
        marks = "".join(f'<div class="loc" style="--color: {color}"></div>' for color in row.marks)
        rows.append(
            "<div>"
            f"<dt><code>{escape(row.name)}</code><small>{escape(row.label)}</small></dt>"
            f"<dd>{marks}</dd>"
            "</div>"
        )
    return '<dl id="files" class="files">' + "".join(rows) + "</dl>"


def render_meta_body(surface: DisplaySurface) -> str:
    steps = "".join(
        '<div class="step">'
        f"<p>{escape(step.text)} "
        f'<a href="{escape(step.commit.url)}" target="_blank">View commit</a></p>'
        "</div>"
        for step in surface.narrative
    )
    return "\n".join(
        [
            "<h1>Meta</h1>",
            "<h2>Summary</h2>",
            render_stats_html(surface.stats),
            "<label>Show commits until: "
            f'<input type="range" id="commit-slider" min="0" max="100" value="{surface.slider:g}" />'
            f'<time id="selectedTime">{escape(surface.selected_time)}</time>'
            "</label>",
            '<div id="scrolly-1">',
            f'<div id="scatter-story">{steps}</div>',
            f'<div id="scatter-plot"><div id="chart">{inline_svg(surface.chart.to_svg())}</div></div>',
            "</div>",
            render_tooltip_html(surface.tooltip),
            f'<p id="selection-count">{escape(surface.selection_count)}</p>',
            render_language_html(surface.language_breakdown),
            render_files_html(surface.files),
        ]
    )


def build_meta_page(cfg: SiteConfig, out_dir: Path, *, base_path: str) -> dict:
    """Load the log and write meta/. A failed load leaves meta/ untouched."""
    rows = load_rows(cfg.loc_source)
    commits = process_commits(rows, repo_url=cfg.repo_url)
    meta_dir = out_dir / "meta"
    if not commits:
        logger.warning("Commit log %s has no rows; skipping the meta page", cfg.loc_source)
        return {"meta_page": None, "commits": 0}

    explorer = CommitExplorer(rows, commits, renderer=ScatterRenderer(cfg.chart))
    surface = explorer.initial_paint()
    page = render_page(
        cfg,
        title="Meta",
        current_url="meta/",
        body=render_meta_body(surface),
        base_path=base_path,
        scripts=SLIDER_SCRIPT,
    )
    page_path = meta_dir / INDEX_FILENAME
    _atomic_write_text(page_path, page)
    json_path, md_path = write_meta_exports(meta_dir, commits=commits, stats=compute_stats(rows, commits))
    return {
        "meta_page": page_path,
        "commits_json": json_path,
        "summary_md": md_path,
        "commits": len(commits),
        "lines": len(rows),
    }


def build_project_pages(cfg: SiteConfig, out_dir: Path, *, base_path: str) -> dict:
    projects = load_projects(cfg.projects_source)

    gallery = ProjectGallery(projects, heading_level="h2")
    surface = gallery.on_search("")
    body = "\n".join(
        [
            f"<h1>{surface.count} Projects</h1>",
            '<div class="container">',
            f'<div id="projects-pie-plot">{inline_svg(surface.pie_svg)}</div>',
            surface.legend_html,
            "</div>",
            '<input class="searchBar" type="search" aria-label="Search projects" placeholder="🔍 Search projects…" />',
            f'<div class="projects">{surface.projects_html}</div>',
        ]
    )
    projects_path = out_dir / "projects" / INDEX_FILENAME
    write_projects_export(projects_path.parent, projects=projects)
    _atomic_write_text(
        projects_path,
        render_page(
            cfg,
            title="Projects",
            current_url="projects/",
            body=body,
            base_path=base_path,
            scripts=search_script(gallery.heading_level),
        ),
    )

    latest = render_projects(projects[:HOME_PROJECT_COUNT], "h3")
    home_body = "\n".join(
        [
            f"<h1>{escape(cfg.title)}</h1>",
            "<h2>Latest Projects</h2>",
            f'<div class="projects">{latest}</div>',
        ]
    )
    home_path = out_dir / INDEX_FILENAME
    _atomic_write_text(
        home_path, render_page(cfg, title=cfg.title, current_url="", body=home_body, base_path=base_path)
    )
    return {"home_page": home_path, "projects_page": projects_path, "projects": len(projects)}


def build_site(cfg: SiteConfig, *, base_path: str | None = None) -> dict:
    """
    Write the whole site under cfg.output_dir.

    Each data-backed part is built independently: when its source fails to
    load the error is recorded and that part is left as it was.
    """
    base = base_path or cfg.base_path
    out_dir = cfg.output_dir
    _atomic_write_text(out_dir / CSS_FILENAME, STYLE_CSS)
    nojekyll = out_dir / ".nojekyll"
    if not nojekyll.exists():
        _atomic_write_text(nojekyll, "")

    result: dict = {"output_dir": out_dir, "errors": []}
    try:
        result.update(build_project_pages(cfg, out_dir, base_path=base))
    except ProjectLoadError as e:
        result["errors"].append(str(e))
    try:
        result.update(build_meta_page(cfg, out_dir, base_path=base))
    except LogLoadError as e:
        result["errors"].append(str(e))
    return result
