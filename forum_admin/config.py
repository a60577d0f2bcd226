"""Forum API configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from adminkit.config import ApiConfig as BaseApiConfig
from adminkit.config import ConfigLoader


@dataclass(frozen=True)
class ServiceSettings:
    disable_services: bool = False


@dataclass(frozen=True)
class ApiConfig(BaseApiConfig):
    service_settings: ServiceSettings = field(default_factory=ServiceSettings)


def load_config(
    paths: Optional[Iterable[str]] = None,
    env_file: Optional[str] = None,
    **overrides,
) -> ApiConfig:
    """Read ``ApiConfig`` from config files, ``.env`` and ``FORUM_`` variables."""
    loader = ConfigLoader.load(
        paths=list(paths or []),
        env_prefix="FORUM_",
        env_file=env_file,
        overrides={"api": overrides} if overrides else None,
    )
    return loader.get_api_config(ApiConfig)
