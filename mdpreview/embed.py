"""Turn image references into self-contained data URLs."""

import base64
import logging
import mimetypes
from pathlib import Path

from .page_template import render_error_svg

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "text/plain"
EMBED_ERROR_MESSAGE = "Unable to embed image."
EMBED_ERROR_FILL = "red"


def data_url(data: bytes, mime_type: str) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def guess_mime_type(path) -> str:
    mime_type, _ = mimetypes.guess_type(str(path), strict=False)
    if mime_type is None:
        return DEFAULT_MIME_TYPE
    return mime_type


def path_to_data_url(path) -> str:
    """Load the file at ``path`` and return it as a base64 data URL.

    Raises ``OSError`` if the file is missing, unreadable, or is not a
    regular file.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"not a regular file: {path}")
    return data_url(path.read_bytes(), guess_mime_type(path))


def error_data_url(
    message: str = EMBED_ERROR_MESSAGE, fill: str = EMBED_ERROR_FILL
) -> str:
    svg = render_error_svg(fill=fill, text=message)
    return data_url(svg.encode("utf-8"), "image/svg+xml")


def embed(resolved) -> str:
    """Return a data URL for ``resolved``, or the error graphic on failure.

    Read errors are logged and never propagate; the caller always gets
    something it can drop into an ``src`` attribute.
    """
    logger.info("Loading image %s", resolved)
    try:
        return path_to_data_url(resolved)
    except OSError as exc:
        logger.warning("Unable to embed image %s: %s", resolved, exc)
        return error_data_url()
