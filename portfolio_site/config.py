from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import tomllib

from portfolio_site.errors import ConfigError
from portfolio_site.scatter import ChartLayout


def default_config_path() -> Path:
    return Path("site.toml")


@dataclass(frozen=True)
class NavPage:
    url: str
    title: str

    @property
    def external(self) -> bool:
        return self.url.startswith("http")


DEFAULT_GITHUB_URL = "https://github.com/your-name"

DEFAULT_PAGES: tuple[NavPage, ...] = (
    NavPage("", "Home"),
    NavPage("projects/", "Projects"),
    NavPage("meta/", "Meta"),
    NavPage("contact/", "Contact"),
)


@dataclass(frozen=True)
class SiteConfig:
    title: str = "Portfolio"
    base_path: str = "/portfolio/"
    github_url: str = DEFAULT_GITHUB_URL
    repo_url: str = f"{DEFAULT_GITHUB_URL}/portfolio"
    loc_source: str = "meta/loc.csv"
    projects_source: str = "lib/projects.json"
    output_dir: Path = Path("docs")
    pages: list[NavPage] = field(default_factory=lambda: list(DEFAULT_PAGES))
    chart: ChartLayout = field(default_factory=ChartLayout)

    @property
    def nav_pages(self) -> list[NavPage]:
        # The GitHub profile link always closes the bar.
        return [*self.pages, NavPage(self.github_url, "GitHub")]

    def validate(self) -> None:
        if not self.base_path.startswith("/") or not self.base_path.endswith("/"):
            raise ConfigError("base_path must start and end with '/'")
        if not self.repo_url.startswith("http"):
            raise ConfigError("repo_url must be an http(s) URL")
        if not self.pages:
            raise ConfigError("pages must include at least one entry")
        c = self.chart
        if c.usable_width <= 0 or c.usable_height <= 0:
            raise ConfigError("chart margins leave no room to draw")

    def to_toml(self) -> str:
        lines: list[str] = []
        lines.append("# portfolio-site config")
        lines.append("")
        lines.append("[site]")
        lines.append(f'title = "{self.title}"')
        lines.append(f'base_path = "{self.base_path}"')
        lines.append(f'github_url = "{self.github_url}"')
        lines.append(f'repo_url = "{self.repo_url}"')
        lines.append(f'loc_source = "{self.loc_source}"')
        lines.append(f'projects_source = "{self.projects_source}"')
        lines.append(f'output_dir = "{self.output_dir.as_posix()}"')
        lines.append("")
        lines.append("[site.chart]")
        for name in ("width", "height", "top", "right", "bottom", "left"):
            lines.append(f"{name} = {int(getattr(self.chart, name))}")
        for p in self.pages:
            lines.append("")
            lines.append("[[site.pages]]")
            lines.append(f'url = "{p.url}"')
            lines.append(f'title = "{p.title}"')
        lines.append("")
        return "\n".join(lines)


def load_config(path: Path) -> SiteConfig:
    """Read `path`; relative data sources and output_dir resolve against its folder."""
    raw = tomllib.loads(path.read_bytes().decode("utf-8"))
    site = raw.get("site", {})
    chart = site.get("chart", {})
    base = path.parent
    defaults = SiteConfig()

    def resolve(value: str) -> str:
        if value.startswith(("http://", "https://")) or Path(value).is_absolute():
            return value
        return str(base / value)

    pages_raw = site.get("pages")
    pages = (
        [NavPage(url=str(p.get("url", "")), title=str(p["title"])) for p in pages_raw]
        if pages_raw is not None
        else list(DEFAULT_PAGES)
    )

    cfg = SiteConfig(
        title=str(site.get("title", defaults.title)),
        base_path=str(site.get("base_path", defaults.base_path)),
        github_url=str(site.get("github_url", defaults.github_url)),
        repo_url=str(site.get("repo_url", defaults.repo_url)),
        loc_source=resolve(str(site.get("loc_source", defaults.loc_source))),
        projects_source=resolve(str(site.get("projects_source", defaults.projects_source))),
        output_dir=Path(resolve(str(site.get("output_dir", defaults.output_dir.as_posix())))),
        pages=pages,
        chart=ChartLayout(**{k: int(v) for k, v in chart.items()}),
    )
    cfg.validate()
    return cfg


def write_default_config(path: Path, *, github_url: str, repo_url: str | None = None) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    cfg = SiteConfig(
        github_url=github_url,
        repo_url=repo_url or f"{github_url.rstrip('/')}/portfolio",
    )
    path.write_text(cfg.to_toml(), encoding="utf-8")
