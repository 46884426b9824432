"""Linux (and other POSIX) specific code."""
from __future__ import annotations

import contextlib
import os
import shutil
import subprocess
import sys

import markdown
from loguru import logger

doc_template = r'''
<html>
<head>
  <meta http-equiv='content-type' content='text/html; charset=utf-8'/>
  <title></title>
</head>
<body>
{0}
</body>
</html>
'''
CLIPBOARD_TIMEOUT = 5.0


class ClipboardError(Exception):
    """Indication that clipboard access failed."""


def clipboard_commands(*, html: bool) -> list[tuple[list[str], bool]]:
    """List the available clipboard programs, most preferred first.

    :return:
        A list of (command, handles_html) tuples. When html is False, every
        command copies plain text.
    """
    commands = []
    if os.getenv('WAYLAND_DISPLAY') and shutil.which('wl-copy'):
        cmd = ['wl-copy', '--type', 'text/html'] if html else ['wl-copy']
        commands.append((cmd, html))
    if shutil.which('xclip'):
        cmd = ['xclip', '-selection', 'clipboard']
        if html:
            cmd[1:1] = ['-t', 'text/html']
        commands.append((cmd, html))
    if shutil.which('pbcopy'):
        commands.append((['pbcopy'], False))
    return commands


def put_to_clipboard(text: str, mode: str = 'raw') -> None:
    """Put a text string into the clipboard.

    In 'styled' mode the text is treated as Markdown and converted to HTML,
    when the clipboard program supports it.

    :raise ClipboardError: If no clipboard program could be run successfully.
    """
    styled = mode == 'styled'
    html = doc_template.format(markdown.markdown(text)) if styled else ''
    commands = clipboard_commands(html=styled)
    if not commands:
        msg = 'no clipboard program found (install xclip or wl-clipboard)'
        raise ClipboardError(msg)

    error = ''
    for cmd, handles_html in commands:
        payload = html if handles_html else text
        try:
            subprocess.run(
                cmd, input=payload.encode(), check=True,
                capture_output=True, timeout=CLIPBOARD_TIMEOUT)
        except (OSError, subprocess.SubprocessError) as exc:
            logger.debug('Clipboard command {} failed: {}', cmd[0], exc)
            error = f'{cmd[0]} failed'
            continue
        return
    raise ClipboardError(error)


@contextlib.contextmanager
def terminal_title(title: str):
    """Temporarily set the text terminal's title."""
    print('\x1b[22;0t', end='')
    print(f'\x1b]0;{title}\x07', end='')
    sys.stdout.flush()
    try:
        yield None
    finally:
        print('\x1b[23;0t', end='')
        sys.stdout.flush()


def get_editor_command(default: str = 'nano') -> str:
    """Get the user's editor command.

    The VISUAL and then EDITOR environment variables are tried.
    """
    return os.getenv('VISUAL') or os.getenv('EDITOR') or default
