"""
URL utilities for adminkit.
"""

from urllib.parse import urlsplit, urlunsplit


def join_paths(*parts: str) -> str:
    """
    Join URL path segments.

    Handles:
    - Multiple slashes (//) -> /
    - Trailing/leading slashes
    - Empty segments

    Example:
        join_paths("/api/", "/settings", "SystemSettings/") -> "/api/settings/SystemSettings/"
    """
    clean_parts = []

    for part in parts:
        if not part:
            continue
        clean = str(part).strip("/")
        if clean:
            clean_parts.append(clean)

    joined = "/" + "/".join(clean_parts)

    # Trailing slash survives only when the last segment asked for it
    if parts and str(parts[-1]).endswith("/") and joined != "/":
        joined += "/"

    return joined


def normalize_path(path: str) -> str:
    """Normalize a URL path: leading slash, no repeated slashes, no trailing slash."""
    if not path:
        return "/"

    while "//" in path:
        path = path.replace("//", "/")

    if not path.startswith("/"):
        path = "/" + path

    if len(path) > 1 and path.endswith("/"):
        path = path[:-1]

    return path


def join_url(base: str, *parts: str) -> str:
    """
    Join path segments onto a base URL.

    The scheme and host of an absolute ``base`` are kept as they are; only
    the path component is joined. A relative ``base`` behaves like
    ``join_paths``.

    Example:
        join_url("https://cdn.example.com/static", "uploads", "a.png")
        -> "https://cdn.example.com/static/uploads/a.png"
    """
    split = urlsplit(base or "")
    path = join_paths(split.path, *parts)
    if not split.scheme and not split.netloc:
        return path
    return urlunsplit((split.scheme, split.netloc, path, "", ""))
