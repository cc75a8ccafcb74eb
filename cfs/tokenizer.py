"""Path tokenization.

Turns path strings into key sequences. A backslash makes the following
character literal, so ``a\\/b`` is the single key ``a/b``.
"""

from typing import Any, List
from urllib.parse import unquote, urljoin, urlsplit

from cfs.base import Sentinel

SEPARATOR = "/"
ESCAPE = "\\"


def split(path: Any) -> List[Any]:
    """Split a path into keys.

    Args:
        path: Path string, key sequence, single sentinel/int key, or None

    Returns:
        List of keys (empty for the current node)
    """
    if isinstance(path, Sentinel) or (isinstance(path, int) and not isinstance(path, bool)):
        return [path]
    if not path:
        return []
    if isinstance(path, (list, tuple)):
        return list(path)

    path = str(path)
    parts = [""]
    i = 0
    while i < len(path):
        char = path[i]
        if char == SEPARATOR:
            parts.append("")
        elif char == ESCAPE:
            i += 1
            if i < len(path):
                parts[-1] += path[i]
        else:
            parts[-1] += char
        i += 1
    return parts


def join(keys: List[Any]) -> str:
    """Inverse of split for string keys; separators and escapes are escaped."""
    out = []
    for key in keys:
        text = str(key)
        out.append(text.replace(ESCAPE, ESCAPE * 2).replace(SEPARATOR, ESCAPE + SEPARATOR))
    return SEPARATOR.join(out)


def url_to_path(url: str) -> str:
    """Extract the decoded path from a URL, without its leading separator.

    Query strings and fragments are ignored.
    """
    pathname = urlsplit(urljoin("http://a/", url)).path
    if pathname.startswith(SEPARATOR):
        pathname = pathname[1:]
    return unquote(pathname)
