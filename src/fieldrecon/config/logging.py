"""Shared logging helpers."""

from __future__ import annotations

import logging
import os

LOG_LEVEL_ENV = "FIELDRECON_LOG_LEVEL"


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Initialise the root logger once with sensible defaults.

    Parameters mirror ``logging.basicConfig`` with a simplified contract: we default
    to INFO level (or ``FIELDRECON_LOG_LEVEL`` when set) and a terse format suitable
    for CLI output. Pass ``force=True`` to reconfigure during tests or specialised
    entry points.
    """

    logging.basicConfig(
        level=level if level is not None else _level_from_environment(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )


def _level_from_environment() -> int:
    raw = os.getenv(LOG_LEVEL_ENV, "").strip().upper()
    if not raw:
        return logging.INFO
    level = logging.getLevelName(raw)
    return level if isinstance(level, int) else logging.INFO
