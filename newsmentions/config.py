"""Load newsmentions settings from TOML (e.g. newsmentions.toml).

Config file is looked up in order:
  1. Path in NEWSMENTIONS_CONFIG env var (if set)
  2. newsmentions.toml in the current working directory

The DATABASE_URL env var, when set, overrides the configured database URL.
If no file is found, built-in defaults are used.

Example file::

    [store]
    database_url = "postgresql://localhost/news"

    [retention]
    days = 30
    max_attempts = 3

    [aggregation]
    limit = 100
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

DEFAULT_DATABASE_URL = "sqlite:///./newsmentions.db"
DEFAULT_RETENTION_DAYS = 30
DEFAULT_AGGREGATE_LIMIT = 100
DEFAULT_PRUNE_MAX_ATTEMPTS = 3


class NewsMentionsConfig(BaseModel, frozen=True):
    database_url: str = DEFAULT_DATABASE_URL
    retention_days: int = Field(default=DEFAULT_RETENTION_DAYS, ge=0)
    aggregate_limit: int = Field(default=DEFAULT_AGGREGATE_LIMIT, ge=1)
    prune_max_attempts: int = Field(default=DEFAULT_PRUNE_MAX_ATTEMPTS, ge=1)


def _default_config_paths() -> list[Path]:
    """Return paths to check for newsmentions.toml (first existing wins)."""
    paths: list[Path] = []
    if os.environ.get("NEWSMENTIONS_CONFIG"):
        paths.append(Path(os.environ["NEWSMENTIONS_CONFIG"]))
    paths.append(Path.cwd() / "newsmentions.toml")
    return paths


def _from_toml(data: dict[str, Any]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    store = data.get("store")
    if isinstance(store, dict) and isinstance(store.get("database_url"), str):
        values["database_url"] = store["database_url"]
    retention = data.get("retention")
    if isinstance(retention, dict):
        if isinstance(retention.get("days"), int):
            values["retention_days"] = retention["days"]
        if isinstance(retention.get("max_attempts"), int):
            values["prune_max_attempts"] = retention["max_attempts"]
    aggregation = data.get("aggregation")
    if isinstance(aggregation, dict) and isinstance(aggregation.get("limit"), int):
        values["aggregate_limit"] = aggregation["limit"]
    return values


def load_config() -> NewsMentionsConfig:
    """Load settings from the first config file found, then the environment.

    Returns:
        A NewsMentionsConfig. Fields missing from the file keep their defaults;
        unreadable files are skipped.
    """
    values: dict[str, Any] = {}
    for path in _default_config_paths():
        if path.is_file():
            try:
                with open(path, "rb") as f:
                    data = tomllib.load(f)
            except (OSError, ValueError):
                continue
            values = _from_toml(data)
            break
    if os.environ.get("DATABASE_URL"):
        values["database_url"] = os.environ["DATABASE_URL"]
    return NewsMentionsConfig(**values)
