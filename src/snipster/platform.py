"""Code that handles platform specific behaviour."""
from __future__ import annotations

import sys

__all__ = [
    'ClipboardError',
    'get_editor_command',
    'put_to_clipboard',
    'terminal_title',
]

if sys.platform == 'win32':                                  # pragma: no cover
    from .win import (
        ClipboardError, get_editor_command, put_to_clipboard, terminal_title)
else:
    from .linux import (
        ClipboardError, get_editor_command, put_to_clipboard, terminal_title)
