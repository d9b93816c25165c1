"""Environment-driven runtime settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Final

import jax


@dataclass(frozen=True)
class Settings:
    enable_x64: bool
    log_level: str


def load_settings() -> Settings:
    return Settings(
        enable_x64=os.environ.get("PURRJAX_ENABLE_X64", "0") == "1",
        log_level=os.environ.get("PURRJAX_LOG_LEVEL", "WARNING").upper(),
    )


def apply_settings(current: Settings) -> None:
    """Push settings that live in JAX's global config.

    Only ever switches x64 on; an application that enabled it itself is left alone.
    """
    if current.enable_x64:
        jax.config.update("jax_enable_x64", True)


settings: Final[Settings] = load_settings()
apply_settings(settings)
