from __future__ import annotations

from dataclasses import dataclass, field
from html import escape
import io
import json
import logging
from pathlib import Path
from typing import Sequence
from urllib.request import urlopen

from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure

from portfolio_site.errors import ProjectLoadError
from portfolio_site.scales import OrdinalColorScale

logger = logging.getLogger(__name__)

PIE_SIZE_PX = 200


@dataclass(frozen=True)
class Project:
    title: str
    image: str
    description: str
    year: str
    extra: dict[str, str] = field(default_factory=dict, compare=False)

    def values(self) -> list[str]:
        return [self.title, self.image, self.description, self.year, *self.extra.values()]


@dataclass(frozen=True)
class PieSlice:
    label: str
    value: int


def _read_text(source: str | Path) -> str:
    s = str(source)
    if s.startswith(("http://", "https://")):
        with urlopen(s, timeout=30) as resp:
            return resp.read().decode("utf-8")
    return Path(s).read_text(encoding="utf-8")


def project_from_json(raw: dict) -> Project:
    known = {"title", "image", "description", "year"}
    return Project(
        title=str(raw["title"]),
        image=str(raw["image"]),
        description=str(raw["description"]),
        year=str(raw["year"]),
        extra={str(k): str(v) for k, v in raw.items() if k not in known},
    )


def load_projects(source: str | Path) -> list[Project]:
    try:
        raw = json.loads(_read_text(source))
        if not isinstance(raw, list):
            raise ValueError("expected a JSON array of projects")
        projects = [project_from_json(p) for p in raw]
    except Exception as e:
        logger.error("Failed to load projects from %s: %s", source, e)
        raise ProjectLoadError(f"could not load {source}: {e}") from e
    logger.info("Loaded %d projects from %s", len(projects), source)
    return projects


def filter_projects(projects: Sequence[Project], query: str) -> list[Project]:
    """Case-insensitive match of `query` against every field of a project."""
    q = query.lower()
    return [p for p in projects if q in "\n".join(p.values()).lower()]


def year_counts(projects: Sequence[Project]) -> list[PieSlice]:
    counts: dict[str, int] = {}
    for p in projects:
        counts[p.year] = counts.get(p.year, 0) + 1
    return [PieSlice(label=year, value=n) for year, n in counts.items()]


def render_projects(projects: Sequence[Project], heading_level: str = "h2") -> str:
    if not projects:
        return '<p class="empty">No projects found.</p>'
    articles: list[str] = []
    for p in projects:
        articles.append(
            "<article>"
            f"<{heading_level}>{escape(p.title)}</{heading_level}>"
            f'<img src="{escape(p.image)}" alt="{escape(p.title)}">'
            "<div>"
            f"<p>{escape(p.description)}</p>"
            f'<p class="year">c. {escape(p.year)}</p>'
            "</div>"
            "</article>"
        )
    return "\n".join(articles)


def render_pie_svg(slices: Sequence[PieSlice], colors: OrdinalColorScale | None = None) -> str:
    """Pie of project counts per year; slice i takes palette colour i."""
    colors = colors or OrdinalColorScale()
    fig = Figure(figsize=(PIE_SIZE_PX / 100, PIE_SIZE_PX / 100), dpi=100)
    FigureCanvasAgg(fig)
    fig.patch.set_alpha(0)
    ax = fig.add_axes((0, 0, 1, 1))
    ax.set_aspect("equal")
    ax.axis("off")
    if slices:
        ax.pie(
            [s.value for s in slices],
            colors=[colors.palette[i % len(colors.palette)] for i in range(len(slices))],
            startangle=90,
            counterclock=False,
        )
    buf = io.StringIO()
    fig.savefig(buf, format="svg")
    return buf.getvalue()


def render_legend(slices: Sequence[PieSlice], colors: OrdinalColorScale | None = None) -> str:
    colors = colors or OrdinalColorScale()
    items = [
        f'<li class="legend-items" style="--color:{colors.palette[i % len(colors.palette)]}">'
        f'<span class="swatch"></span> {escape(s.label)} <em class="legend-value">({s.value})</em></li>'
        for i, s in enumerate(slices)
    ]
    return '<ul class="legend">' + "".join(items) + "</ul>"


@dataclass
class GallerySurface:
    projects_html: str = ""
    pie_svg: str = ""
    legend_html: str = ""
    count: int = 0


class ProjectGallery:
    """Projects page: list, year pie and legend, all following the search box."""

    def __init__(self, projects: Sequence[Project], *, heading_level: str = "h2") -> None:
        self.projects = list(projects)
        self.heading_level = heading_level
        self.query = ""
        self.surface = GallerySurface()

    def on_search(self, query: str) -> GallerySurface:
        self.query = query
        shown = filter_projects(self.projects, query)
        slices = year_counts(shown)
        self.surface.projects_html = render_projects(shown, self.heading_level)
        self.surface.pie_svg = render_pie_svg(slices)
        self.surface.legend_html = render_legend(slices)
        self.surface.count = len(shown)
        return self.surface


def project_payload(project: Project) -> dict[str, str]:
    return {
        "title": project.title,
        "image": project.image,
        "description": project.description,
        "year": project.year,
        **project.extra,
    }


# Mirrors ProjectGallery.on_search in the browser, over the exported projects.json.
_SEARCH_SCRIPT = """<script>
  (function () {
    const PALETTE = __PALETTE__;
    const HEADING = '__HEADING__';
    const search = document.querySelector('.searchBar');
    const list = document.querySelector('.projects');
    const title = document.querySelector('h1');
    const pie = document.getElementById('projects-pie-plot');
    const legend = document.querySelector('ul.legend');
    let projects = [];

    function el(tag, text) {
      const node = document.createElement(tag);
      if (text !== undefined) node.textContent = text;
      return node;
    }

    function matches(project, query) {
      return Object.values(project).map(String).join('\\n').toLowerCase().includes(query);
    }

    function yearCounts(shown) {
      const counts = new Map();
      for (const p of shown) counts.set(String(p.year), (counts.get(String(p.year)) || 0) + 1);
      return Array.from(counts, ([label, value]) => ({ label, value }));
    }

    function renderProjects(shown) {
      if (!shown.length) {
        const empty = el('p', 'No projects found.');
        empty.className = 'empty';
        list.replaceChildren(empty);
        return;
      }
      list.replaceChildren(...shown.map((p) => {
        const article = el('article');
        const img = el('img');
        img.src = p.image;
        img.alt = p.title;
        const body = el('div');
        const year = el('p', 'c. ' + p.year);
        year.className = 'year';
        body.append(el('p', p.description), year);
        article.append(el(HEADING, p.title), img, body);
        return article;
      }));
    }

    function slicePath(r, a0, a1) {
      // angles run clockwise from twelve o'clock
      const x0 = r * Math.sin(a0), y0 = -r * Math.cos(a0);
      const x1 = r * Math.sin(a1), y1 = -r * Math.cos(a1);
      const large = a1 - a0 > Math.PI ? 1 : 0;
      return `M0,0L${x0},${y0}A${r},${r} 0 ${large} 1 ${x1},${y1}Z`;
    }

    function renderPie(slices) {
      const NS = 'http://www.w3.org/2000/svg';
      const svg = document.createElementNS(NS, 'svg');
      svg.setAttribute('viewBox', '-50 -50 100 100');
      svg.setAttribute('width', '__SIZE__');
      svg.setAttribute('height', '__SIZE__');
      const total = slices.reduce((sum, s) => sum + s.value, 0);
      let angle = 0;
      slices.forEach((s, i) => {
        const span = 2 * Math.PI * s.value / total;
        let shape;
        if (slices.length === 1) {
          shape = document.createElementNS(NS, 'circle');
          shape.setAttribute('r', '50');
        } else {
          shape = document.createElementNS(NS, 'path');
          shape.setAttribute('d', slicePath(50, angle, angle + span));
        }
        shape.setAttribute('fill', PALETTE[i % PALETTE.length]);
        svg.append(shape);
        angle += span;
      });
      pie.replaceChildren(svg);
    }

    function renderLegend(slices) {
      legend.replaceChildren(...slices.map((s, i) => {
        const item = el('li');
        item.className = 'legend-items';
        item.style.setProperty('--color', PALETTE[i % PALETTE.length]);
        const swatch = el('span');
        swatch.className = 'swatch';
        const value = el('em', '(' + s.value + ')');
        value.className = 'legend-value';
        item.append(swatch, ' ' + s.label + ' ', value);
        return item;
      }));
    }

    function update(query) {
      const shown = projects.filter((p) => matches(p, query.toLowerCase()));
      const slices = yearCounts(shown);
      title.textContent = shown.length + ' Projects';
      renderProjects(shown);
      renderPie(slices);
      renderLegend(slices);
    }

    fetch('./projects.json', { cache: 'no-store' })
      .then((res) => res.json())
      .then((data) => {
        projects = data;
        search.addEventListener('input', (event) => update(event.target.value));
      });
  })();
</script>"""


def search_script(heading_level: str = "h2", colors: OrdinalColorScale | None = None) -> str:
    colors = colors or OrdinalColorScale()
    return (
        _SEARCH_SCRIPT.replace("__PALETTE__", json.dumps(list(colors.palette)))
        .replace("__HEADING__", heading_level)
        .replace("__SIZE__", str(PIE_SIZE_PX))
    )
