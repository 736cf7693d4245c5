"""Locate ``propsrealm.toml``.

``PROPSREALM_CONFIG`` names the file explicitly. Otherwise the search starts
in the working directory and climbs toward the filesystem root, taking the
first directory that holds a ``propsrealm.toml``.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "propsrealm.toml"
CONFIG_ENV_VAR = "PROPSREALM_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file governing *start* (default: cwd), or None.

    An env override pointing at a missing file disables discovery rather
    than falling back to the walk-up search.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        explicit = Path(override)
        return explicit if explicit.is_file() else None

    origin = (start or Path.cwd()).resolve()
    for directory in (origin, *origin.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None
