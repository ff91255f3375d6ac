"""Path algebra for references found while rendering a document.

Everything here is lexical: nothing touches the filesystem, so references to
files or directories that do not exist still resolve to a clean absolute
path.
"""

from pathlib import PurePath
from urllib.parse import unquote, urlsplit


def clean_path(path):
    """Drop ``.`` components and fold ``..`` into the preceding component.

    A ``..`` with nothing left to pop is discarded, so ``/../x`` cleans to
    ``/x`` and ``../x`` cleans to ``x``.
    """
    path = PurePath(path)
    if path.anchor:
        components = path.parts[1:]
    else:
        components = path.parts
    kept = []
    for part in components:
        if part == ".":
            continue
        if part == "..":
            if kept:
                kept.pop()
            continue
        kept.append(part)
    return type(path)(path.anchor, *kept)


def resolve_reference(reference, base, base_is_file=True):
    """Resolve ``reference`` against ``base`` and return a cleaned path.

    A relative reference is joined to the directory holding ``base`` when
    ``base_is_file`` is true (the document being rendered), or to ``base``
    itself when it names a directory.
    """
    reference = PurePath(reference)
    if reference.is_absolute():
        return clean_path(reference)
    base = PurePath(base)
    anchor = base.parent if base_is_file else base
    return clean_path(anchor / reference)


def relativize_under_cwd(path, cwd):
    """Return ``path`` relative to ``cwd`` if it lives strictly below it.

    The comparison is component-wise on the paths as given; anything that is
    not a descendant of ``cwd`` (including ``cwd`` itself) comes back
    unchanged.
    """
    path = PurePath(path)
    cwd_parts = PurePath(cwd).parts
    if not path.is_absolute() or len(path.parts) <= len(cwd_parts):
        return path
    if path.parts[: len(cwd_parts)] != cwd_parts:
        return path
    return type(path)(*path.parts[len(cwd_parts) :])


def reference_to_path(reference):
    """Turn a raw image or link token into a path.

    ``file://`` URLs are reduced to their path, a query string or fragment is
    dropped, and percent-escapes (which the markdown parser adds to
    destinations) are decoded.  Raises ``ValueError`` when nothing usable is
    left.
    """
    if not reference or "\x00" in reference:
        raise ValueError(f"not a path reference: {reference!r}")
    parts = urlsplit(reference)
    if parts.scheme == "file":
        text = parts.path
    else:
        text = reference.split("#", 1)[0].split("?", 1)[0]
    text = unquote(text)
    if not text or "\x00" in text:
        raise ValueError(f"not a path reference: {reference!r}")
    return PurePath(text)


def split_fragment(reference):
    # keep "#section" so rewritten links still jump to the right heading
    if "#" in reference:
        head, fragment = reference.split("#", 1)
        return head, "#" + fragment
    return reference, ""
