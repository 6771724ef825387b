from __future__ import annotations

import os
from contextlib import suppress
from pathlib import Path

from dotenv import dotenv_values


def load_env_chain(repo_root: Path) -> None:
    """
    Populate os.environ from `.env` files, cwd first, then the repo root.
    Variables that are already set to a non-empty value win.
    """
    for env_path in (Path.cwd() / ".env", repo_root / ".env"):
        if not env_path.is_file():
            continue
        for key, value in dotenv_values(env_path).items():
            if value is None:
                continue
            if (os.environ.get(key) or "").strip():
                continue
            os.environ[key] = value


def env_or(default: str, *keys: str) -> str:
    for key in keys:
        value = os.getenv(key)
        if value:
            return value
    return default


def int_env_or(default: int, *keys: str) -> int:
    for key in keys:
        value = os.getenv(key)
        if not value:
            continue
        with suppress(ValueError):
            return int(value)
    return default


def optional_env(*keys: str) -> str | None:
    value = env_or("", *keys)
    return value or None
