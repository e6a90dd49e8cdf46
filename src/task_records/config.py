"""Service settings loaded from environment variables (+ optional .env).

Every variable carries the ``TASK_RECORDS_`` prefix, e.g.
``TASK_RECORDS_PORT=9000``.  A ``.env`` file in the working directory is
read first; variables already set in the environment win.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from .models import DEFAULT_PAGE_SIZE

ENV_PREFIX = "TASK_RECORDS"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str) -> str:
    v = os.getenv(name)
    return default if v is None or v.strip() == "" else v.strip()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str) -> Optional[Path]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return Path(raw).expanduser()


@dataclass(frozen=True)
class ServiceSettings:
    """Settings for the HTTP entry point around a :class:`RecordStore`.

    Parameters
    ----------
    host, port : str, int
        Address the API server binds to.
    default_page_size : int
        Page size used when a list request gives none.
    max_page_size : int
        Upper bound applied to requested page sizes.
    log_level : str
        Threshold of the structured audit logger.
    snapshot_path : Path, optional
        When set, the store is restored from and saved to this JSON file.
    """

    host: str = "0.0.0.0"
    port: int = 8080
    default_page_size: int = DEFAULT_PAGE_SIZE
    max_page_size: int = 100
    log_level: str = "INFO"
    snapshot_path: Optional[Path] = None


def load_settings(*, dotenv: bool = True) -> ServiceSettings:
    """Build :class:`ServiceSettings` from the environment."""
    if dotenv:
        load_dotenv(find_dotenv(usecwd=True), override=False)

    default_page_size = max(_env_int(_k("DEFAULT_PAGE_SIZE"), DEFAULT_PAGE_SIZE), 0)
    max_page_size = max(_env_int(_k("MAX_PAGE_SIZE"), 100), default_page_size)

    return ServiceSettings(
        host=_env(_k("HOST"), "0.0.0.0"),
        port=_env_int(_k("PORT"), 8080),
        default_page_size=default_page_size,
        max_page_size=max_page_size,
        log_level=_env(_k("LOG_LEVEL"), "INFO").upper(),
        snapshot_path=_env_path(_k("SNAPSHOT_PATH")),
    )
