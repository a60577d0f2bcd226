"""
Filesystem and public URL resolution for hosted content.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from .urls import join_url


@dataclass(frozen=True)
class HostingEnvironment:
    """Root directories of the running application."""

    content_root: str
    web_root: Optional[str] = None

    @property
    def root(self) -> str:
        """The public web root when set, otherwise the content root."""
        return self.web_root or self.content_root


class LocalPathResolver:
    """
    Resolve a logical path to an absolute path under the hosting root.

    Leading slashes and backslashes are stripped, so ``"/img/a.png"`` and
    ``"img/a.png"`` resolve to the same file. A path that would leave the
    root (``"../etc/passwd"``) raises ``ValueError``.
    """

    def __init__(self, env: HostingEnvironment):
        self.env = env

    def resolve(self, path: str) -> str:
        return self._join(self.env.root, path)

    @staticmethod
    def _join(root: str, *parts: str) -> str:
        base = os.path.abspath(root)
        relative = [p.lstrip("/\\") for p in parts if p]
        result = os.path.abspath(os.path.join(base, *relative))
        # Canonicalize and prevent traversal
        if os.path.commonpath([base, result]) != base:
            raise ValueError(f"Path '{os.path.join(*relative)}' escapes {base}")
        return result


class WebFilePathResolver(LocalPathResolver):
    """Path resolver aware of the uploads folder and the public CDN base."""

    def __init__(self, env: HostingEnvironment, api_config):
        super().__init__(env)
        self.api_config = api_config

    def uploads_root(self) -> str:
        return self._join(self.env.root, self.api_config.uploads_folder)

    def resolve_upload(self, path: str) -> str:
        return self._join(self.uploads_root(), path)

    def public_url(self, path: str) -> str:
        base = self.api_config.base_cdn_url or self.api_config.api_base_url
        return join_url(base, self.api_config.uploads_folder, path.lstrip("/\\"))
