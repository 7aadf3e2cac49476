"""
Module: service.config

Purpose:
    Service-level configuration: storage location, per-request budget,
    cleanup credentials and the engine configs. Immutable with
    validation on construction; can be read from the environment.

Key Classes:
    - ServiceConfig: Main configuration for the service

Dependencies:
    - dataclasses (std)
    - pathlib (std)

Used By:
    - service.jobs: PatternService
    - api.app: create_app()
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from ..merger.config import MergeConfig
from ..renderer.config import RenderConfig
from ..timing import DEFAULT_BUDGET_SECONDS

ENV_PREFIX = "PATTERN_TOOLKIT_"


@dataclass(frozen=True)
class ServiceConfig:
    """
    Configuration for the upload/merge service (immutable).

    Attributes:
        storage_root: Directory for job artifacts
        request_budget_seconds: Wall-clock budget per request (default 60)
        cleanup_token: Bearer token accepted by the cleanup endpoint;
            None disables cleanup for everyone
        write_workers: Threads writing page artifacts (default 4)
        render: Rasterization settings
        merge: Merge settings

    Example:
        >>> config = ServiceConfig(storage_root=Path("/var/lib/patterns"))
        >>> config.render.dpi
        240.0
    """

    storage_root: Path = Path("artifacts")
    request_budget_seconds: float = DEFAULT_BUDGET_SECONDS
    cleanup_token: Optional[str] = None
    write_workers: int = 4
    render: RenderConfig = field(default_factory=RenderConfig)
    merge: MergeConfig = field(default_factory=MergeConfig)

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        object.__setattr__(self, "storage_root", Path(self.storage_root))
        if self.request_budget_seconds <= 0:
            raise ValueError(
                f"request_budget_seconds must be positive: {self.request_budget_seconds}"
            )
        if self.write_workers < 1:
            raise ValueError(f"write_workers must be >= 1: {self.write_workers}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServiceConfig":
        """
        Build a config from PATTERN_TOOLKIT_* environment variables.

        Recognised: STORAGE_ROOT, BUDGET_SECONDS, CLEANUP_TOKEN,
        WRITE_WORKERS, RENDER_SCALE, OVERLAP_PIXELS, MAX_CANVAS_PIXELS.
        Missing variables keep their defaults.
        """
        env = os.environ if environ is None else environ

        def get(name: str) -> Optional[str]:
            value = env.get(ENV_PREFIX + name)
            return value if value not in (None, "") else None

        kwargs = {}
        if get("STORAGE_ROOT"):
            kwargs["storage_root"] = Path(get("STORAGE_ROOT"))
        if get("BUDGET_SECONDS"):
            kwargs["request_budget_seconds"] = float(get("BUDGET_SECONDS"))
        if get("CLEANUP_TOKEN"):
            kwargs["cleanup_token"] = get("CLEANUP_TOKEN")
        if get("WRITE_WORKERS"):
            kwargs["write_workers"] = int(get("WRITE_WORKERS"))
        if get("RENDER_SCALE"):
            kwargs["render"] = RenderConfig(render_scale=float(get("RENDER_SCALE")))
        merge_kwargs = {}
        if get("OVERLAP_PIXELS"):
            merge_kwargs["default_overlap_pixels"] = int(get("OVERLAP_PIXELS"))
        if get("MAX_CANVAS_PIXELS"):
            merge_kwargs["max_canvas_pixels"] = int(get("MAX_CANVAS_PIXELS"))
        if merge_kwargs:
            kwargs["merge"] = MergeConfig(**merge_kwargs)
        return cls(**kwargs)
