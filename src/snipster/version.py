"""Version information.

The commit and date are filled in by release builds.
"""
from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

COMMIT = ''
DATE = ''

try:
    VERSION = version('snipster')
except PackageNotFoundError:
    VERSION = 'dev'


def version_string(prog: str) -> str:
    """Format the text printed for the version command."""
    extra = f' ({COMMIT} {DATE})' if COMMIT or DATE else ''
    return f'{prog} {VERSION}{extra}'
