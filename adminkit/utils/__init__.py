"""
adminkit utilities.
"""

from .comparers import EqualityStrategy, EqualityKey
from .paths import HostingEnvironment, LocalPathResolver, WebFilePathResolver
from .urls import join_paths, join_url, normalize_path

__all__ = [
    "EqualityStrategy",
    "EqualityKey",
    "HostingEnvironment",
    "LocalPathResolver",
    "WebFilePathResolver",
    "join_paths",
    "join_url",
    "normalize_path",
]
