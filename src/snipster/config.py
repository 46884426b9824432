"""Run time configuration.

Snipster has no configuration file. The storage location is taken from the
environment; see `resolve_data_dir`.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping

from loguru import logger

DIR_ENV_VAR = 'SNIPSTER_DIR'
APP_DIR_NAME = '.snipster'
SNIPPETS_DIR_NAME = 'snippets'
LOG_FILE_NAME = 'snipster.log'


class StartupError(Exception):
    """Error raised when Snipster cannot start."""


def _ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def resolve_data_dir(
        env: Mapping[str, str] | None = None,
        home: Path | None = None,
        cwd: Path | None = None,
    ) -> Path:
    """Find, and create if necessary, the snippet storage directory.

    The order of preference is:

    1. The directory named by the SNIPSTER_DIR environment variable.
    2. ~/.snipster/snippets
    3. ./.snipster/snippets, used when the home directory is unknown or
       the directory there cannot be created for permission reasons.

    :raise StartupError: If the chosen directory cannot be created.
    """
    env = os.environ if env is None else env
    explicit = env.get(DIR_ENV_VAR, '')
    try:
        if explicit:
            return _ensure_dir(Path(explicit).expanduser())

        if home is None:
            try:
                home = Path.home()
            except (RuntimeError, KeyError):
                home = None
        if home is not None:
            try:
                return _ensure_dir(home / APP_DIR_NAME / SNIPPETS_DIR_NAME)
            except PermissionError:
                pass

        local = (cwd or Path()) / APP_DIR_NAME / SNIPPETS_DIR_NAME
        _ensure_dir(local)
        logger.info('Using local data directory {}', local)
        return local
    except OSError as exc:
        msg = f'failed to ensure data dir: {exc}'
        raise StartupError(msg) from exc


def log_path_for(data_dir: Path) -> Path:
    """Choose the log file location for a storage directory.

    The log lives beside the snippets directory so it is never mistaken for
    a snippet.
    """
    return data_dir.parent / LOG_FILE_NAME
