"""Markdown rendering pipeline.

The document is parsed into a markdown-it token stream, image sources are
replaced by data URLs and local links by ``/?path=`` navigation URLs, and the
mutated stream is rendered back to HTML and wrapped in the page template.
"""

import logging
import os
from pathlib import Path

from markdown_it import MarkdownIt
from markdown_it.common.utils import escapeHtml
from mdit_py_plugins.attrs import attrs_block_plugin, attrs_plugin
from mdit_py_plugins.deflist import deflist_plugin
from mdit_py_plugins.dollarmath import dollarmath_plugin
from mdit_py_plugins.footnote import footnote_plugin
from mdit_py_plugins.front_matter import front_matter_plugin
from mdit_py_plugins.tasklists import tasklists_plugin
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from .command_registry import register_command
from .embed import embed, error_data_url
from .links import is_external_url, rewrite_link
from .paths import reference_to_path, resolve_reference
from .page_template import render_page

logger = logging.getLogger(__name__)


class RenderError(Exception):
    """Raised when the source document cannot be canonicalized or read."""


def highlight_code(code, lang, attrs):
    # an empty string tells markdown-it to fall back to plain escaping
    if not lang:
        return ""
    try:
        lexer = get_lexer_by_name(lang)
    except ClassNotFound:
        return ""
    return highlight(code, lexer, HtmlFormatter(nowrap=True))


def math_delimiters(content, config):
    # leave the TeX for MathJax, in the delimiters it scans for by default
    if config["display_mode"]:
        return escapeHtml(f"\\[{content}\\]")
    return escapeHtml(f"\\({content}\\)")


def make_parser():
    # commonmark plus the optional core rules and the mdit_py_plugins syntax
    md = MarkdownIt(
        "commonmark",
        {
            "html": True,
            "linkify": True,
            "typographer": True,
            "highlight": highlight_code,
        },
    )
    md.enable(
        ["table", "strikethrough", "linkify", "replacements", "smartquotes"]
    )
    # bare file names like notes.md would otherwise become http://notes.md
    md.linkify.set({"fuzzy_link": False})
    md.use(front_matter_plugin)
    md.use(footnote_plugin)
    md.use(deflist_plugin)
    md.use(tasklists_plugin)
    md.use(attrs_plugin)
    md.use(attrs_block_plugin)
    # "$5 and $10" stays prose
    md.use(dollarmath_plugin, allow_digits=False, renderer=math_delimiters)
    return md


def parse_document(md, text):
    """Return ``(tokens, env)``; ``env`` carries footnote state to the renderer."""
    env = {}
    tokens = md.parse(text, env)
    return tokens, env


def iter_tokens(tokens):
    for token in tokens:
        yield token
        if token.children:
            yield from iter_tokens(token.children)


def embed_image_source(src, base):
    if is_external_url(src):
        return src
    try:
        resolved = resolve_reference(reference_to_path(src), base)
    except ValueError as exc:
        logger.warning("Unable to parse image reference %r: %s", src, exc)
        return error_data_url()
    return embed(resolved)


def transform_tokens(tokens, base, cwd=None):
    """Rewrite image sources and link targets in document order."""
    for token in iter_tokens(tokens):
        if token.type == "image":
            src = token.attrGet("src")
            if src is None:
                continue
            token.attrSet("src", embed_image_source(str(src), base))
        elif token.type == "link_open":
            href = token.attrGet("href")
            if href is None:
                continue
            token.attrSet("href", rewrite_link(str(href), base, cwd))
    return tokens


def serialize_tokens(md, tokens, env):
    return md.renderer.render(tokens, md.options, env)


def _render_tokens(text, base, cwd):
    md = make_parser()
    tokens, env = parse_document(md, text)
    transform_tokens(tokens, base, cwd)
    return serialize_tokens(md, tokens, env), tokens


def uses_math(tokens):
    return any(token.type.startswith("math") for token in iter_tokens(tokens))


def render_body(text, base, cwd=None):
    """Render markdown ``text`` to an HTML fragment.

    ``base`` is the path of the document ``text`` came from; relative image
    and link references are resolved against its directory.
    """
    body, _ = _render_tokens(text, base, cwd)
    return body


def render_doc(path, use_live_reload=True, cwd=None):
    """Render the markdown file at ``path`` into a complete HTML page.

    Only a failure to canonicalize or read the source raises
    (``RenderError``); broken references inside the document degrade in
    place.
    """
    try:
        source = Path(path).resolve(strict=True)
        text = source.read_text(encoding="utf-8")
    except (OSError, ValueError) as exc:
        # ValueError covers undecodable text and NUL bytes in the path
        raise RenderError(f"Unable to read document {path}: {exc}") from exc
    logger.info("Rendering document %s", source)
    body, tokens = _render_tokens(text, source, cwd)
    return render_page(
        title=str(source),
        body=body,
        use_live_reload=use_live_reload,
        use_math=uses_math(tokens),
    )


@register_command(
    "Render a markdown file to a standalone HTML page",
    help={
        "filename": "Markdown file to render",
        "output": "Where to write the page (defaults to FILENAME.html)",
        "live_reload": "Include the live-reload script in the page",
    },
)
def render(filename, output=None, live_reload=False):
    source = Path(filename)
    target = Path(output) if output else source.with_suffix(".html")
    page = render_doc(source, use_live_reload=live_reload, cwd=os.getcwd())
    target.write_text(page, encoding="utf-8")
    print(f"Wrote {target}")
    return target
