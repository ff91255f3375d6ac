"""Jinja2 templates for the preview page and the embed error graphic."""

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape
from pygments.formatters import HtmlFormatter

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
PAGE_TEMPLATE = "page.html"
ERROR_SVG_TEMPLATE = "error.svg"
MATHJAX_URL = "https://cdn.jsdelivr.net/npm/mathjax@3/es5/tex-mml-chtml.js"

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html", "svg"]),
)


def render_page(
    title: str, body: str, use_live_reload: bool, use_math: bool = False
) -> str:
    """Wrap a rendered body fragment in the full preview page.

    ``body`` is trusted HTML from the renderer and is inserted as-is; the
    live-reload script is only emitted when ``use_live_reload`` is set, and
    MathJax is only loaded for pages that contain math.
    """
    tmpl = _env.get_template(PAGE_TEMPLATE)
    return tmpl.render(
        title=title,
        body=body,
        use_live_reload=use_live_reload,
        use_math=use_math,
        mathjax_url=MATHJAX_URL,
        highlight_css=HtmlFormatter().get_style_defs("pre code"),
    )


def render_error_svg(fill: str, text: str) -> str:
    tmpl = _env.get_template(ERROR_SVG_TEMPLATE)
    return tmpl.render(fill=fill, text=text)
