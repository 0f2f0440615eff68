from __future__ import annotations

from html import escape
from typing import Sequence

from portfolio_site.config import NavPage

LOCAL_BASE_PATH = "/"

COLOR_SCHEMES: tuple[tuple[str, str], ...] = (
    ("light dark", "Automatic"),
    ("light", "Light"),
    ("dark", "Dark"),
)


def page_href(page: NavPage, base_path: str) -> str:
    return page.url if page.external else base_path + page.url


def render_nav(pages: Sequence[NavPage], current_url: str, base_path: str) -> str:
    """
    Navigation bar for the page published at `current_url` (relative to the site root).

    The matching link is marked `current`; off-site links open in a new tab.
    """
    links: list[str] = []
    for page in pages:
        attrs = [f'href="{escape(page_href(page, base_path))}"']
        if page.external:
            attrs.append('target="_blank"')
        elif page.url == current_url:
            attrs.append('class="current"')
        links.append(f"<a {' '.join(attrs)}>{escape(page.title)}</a>")
    return "<nav>" + "".join(links) + "</nav>"


# The colour scheme is the one preference the site keeps, in localStorage.
_THEME_SCRIPT = """<script>
  (function () {
    const select = document.querySelector('label.color-scheme select');
    function setColorScheme(colorScheme) {
      document.documentElement.style.setProperty('color-scheme', colorScheme);
    }
    if ('colorScheme' in localStorage) {
      setColorScheme(localStorage.colorScheme);
      select.value = localStorage.colorScheme;
    }
    select.addEventListener('input', function (event) {
      localStorage.colorScheme = event.target.value;
      setColorScheme(event.target.value);
    });
  })();
</script>"""


def render_theme_switcher() -> str:
    options = "".join(f'<option value="{value}">{label}</option>' for value, label in COLOR_SCHEMES)
    return (
        '<label class="color-scheme">Theme: '
        f"<select>{options}</select>"
        "</label>"
    )


def theme_script() -> str:
    return _THEME_SCRIPT
