"""Rewrite outbound document links so they route back through the server."""

import logging
import re

from .paths import (
    reference_to_path,
    relativize_under_cwd,
    resolve_reference,
    split_fragment,
)

logger = logging.getLogger(__name__)

# a one-letter "scheme" is a Windows drive, not a URL
_SCHEME_RE = re.compile(r"^([A-Za-z][A-Za-z0-9+.\-]+):")
LOCAL_SCHEMES = {"file"}

# characters that would otherwise end or corrupt the query value
_QUERY_ESCAPES = {"%": "%25", "&": "%26", "#": "%23", "+": "%2B", " ": "%20"}


def is_external_url(reference):
    m = _SCHEME_RE.match(reference)
    if m is None:
        return False
    return m.group(1).lower() not in LOCAL_SCHEMES


def navigation_url(path):
    value = "".join(_QUERY_ESCAPES.get(c, c) for c in str(path))
    return f"/?path={value}"


def rewrite_link(reference, base, cwd=None):
    """Return the href to use for a link to ``reference``.

    External URLs, in-page anchors and references with no path in them
    (``""``, ``?q=1``) come back unchanged.  Anything else is
    resolved against ``base`` (the file being rendered), made relative to
    ``cwd`` when it lies below it, and turned into a ``/?path=`` URL.
    """
    if is_external_url(reference) or reference.startswith("#"):
        return reference
    target, fragment = split_fragment(reference)
    try:
        resolved = resolve_reference(reference_to_path(target), base)
    except ValueError as exc:
        logger.debug("Leaving link %r alone: %s", reference, exc)
        return reference
    if cwd is not None:
        resolved = relativize_under_cwd(resolved, cwd)
    rewritten = navigation_url(resolved) + fragment
    logger.debug("Rewrote link %s -> %s", reference, rewritten)
    return rewritten
