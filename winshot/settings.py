"""Configuration for winshot.

Compression constants live in CompressionDefaults so a single value can be
overridden (dataclasses.replace) without touching the pipeline. Process-level
settings come from WINSHOT_* environment variables; CLI flags override them.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

MIB = 1024 * 1024


@dataclass(frozen=True)
class CompressionDefaults:
    quality: int = 85
    max_width: int = 1920  # ceiling used when the caller gives no max_width
    max_size_bytes: int = 2 * MIB
    quality_step: int = 10
    quality_floor: int = 30
    resize_floor_width: int = 800
    shrink_factor: float = 0.8
    max_base64_len: int = 5 * MIB


DEFAULTS = CompressionDefaults()


@dataclass(frozen=True)
class CompressionConfig:
    """Caller-supplied compression constraints."""
    quality: int = DEFAULTS.quality
    max_width: Optional[int] = None
    max_size_bytes: int = DEFAULTS.max_size_bytes

    @classmethod
    def from_mb(
        cls,
        quality: Optional[int] = None,
        max_width: Optional[int] = None,
        max_size_mb: Optional[float] = None,
        defaults: CompressionDefaults = DEFAULTS,
    ) -> "CompressionConfig":
        max_size_bytes = defaults.max_size_bytes
        if max_size_mb is not None:
            max_size_bytes = int(max_size_mb * MIB)
        return cls(
            quality=defaults.quality if quality is None else quality,
            max_width=max_width,
            max_size_bytes=max_size_bytes,
        )


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer (got {raw!r})")


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    host: str = "127.0.0.1"
    port: int = 8766
    default_window: str = "main"
    workers: int = 4
    state_dir: Optional[str] = None
    debug: bool = False
    compression: CompressionDefaults = field(default_factory=CompressionDefaults)


def load_settings() -> Settings:
    """Build Settings from WINSHOT_* environment variables."""
    return Settings(
        host=os.environ.get("WINSHOT_HOST", "127.0.0.1"),
        port=_env_int("WINSHOT_PORT", 8766),
        default_window=os.environ.get("WINSHOT_DEFAULT_WINDOW", "main"),
        workers=max(1, _env_int("WINSHOT_WORKERS", 4)),
        state_dir=os.environ.get("WINSHOT_STATE_DIR") or None,
        debug=_env_flag("WINSHOT_DEBUG"),
    )
