"""Windows specific code."""
from __future__ import annotations

import contextlib
import os
import subprocess

from loguru import logger

CLIPBOARD_TIMEOUT = 5.0


class ClipboardError(Exception):
    """Indication that clipboard access failed."""


def put_to_clipboard(text: str, mode: str = 'raw') -> None:
    """Put a text string into the clipboard.

    The clip program only handles plain text, so styled mode falls back to
    the raw text.
    """
    if mode == 'styled':
        logger.debug('Styled clipboard text not supported, copying raw text')
    try:
        subprocess.run(
            ['clip'], input=text.encode('utf-16-le'), check=True,
            capture_output=True, timeout=CLIPBOARD_TIMEOUT)
    except (OSError, subprocess.SubprocessError) as exc:
        msg = f'clip failed: {exc}'
        raise ClipboardError(msg) from exc


@contextlib.contextmanager
def terminal_title(_title: str):
    """Temporarily set the text terminal's title.

    This currently does nothing on Windows.
    """
    yield None


def get_editor_command(default: str = 'notepad') -> str:
    """Get the user's editor command.

    The VISUAL and then EDITOR environment variables are tried.
    """
    return os.getenv('VISUAL') or os.getenv('EDITOR') or default
