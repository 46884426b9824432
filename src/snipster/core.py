"""Terminal based personal snippet manager."""
from __future__ import annotations

import argparse
import asyncio
import contextlib
import shlex
import signal
import sys
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING, cast

from loguru import logger
from textual.app import App, SuspendNotSupported
from textual.message import Message
from textual.screen import Screen
from textual.widgets import Static

from . import model, tasks
from .colors import Theme
from .config import StartupError, log_path_for, resolve_data_dir
from .logging_config import configure_logging
from .model import ViewModel
from .platform import (
    ClipboardError, get_editor_command, put_to_clipboard, terminal_title)
from .snippets import Store, StoreError
from .version import version_string
from .view import render_dialog, render_screen

if TYPE_CHECKING:
    from textual import events
    from textual.app import ComposeResult

    from .snippets import Snippet

STYLED_LANGUAGES = {'md', 'markdown'}
SIGNAL_ERRORS = (NotImplementedError, RuntimeError, ValueError)
STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class CommandCompleted(Message):
    """An indication that a background command has finished."""

    def __init__(self, result: model.Result) -> None:
        super().__init__()
        self.result = result


class MainScreen(Screen):
    """The only screen. Its content is drawn entirely by the view module."""

    def compose(self) -> ComposeResult:
        """Build the widget hierarchy."""
        yield Static(id='frame')
        dialog = Static(id='dialog')
        dialog.display = False
        yield dialog

    def on_mount(self) -> None:
        """Size the view-model and draw for the first time."""
        app = cast(Snipster, self.app)
        app.vm.resize(app.size.width, app.size.height)
        app.redraw()

    def on_resize(self, event: events.Resize) -> None:
        """Recompute the layout for the new terminal size."""
        app = cast(Snipster, self.app)
        app.vm.resize(event.size.width, event.size.height)
        app.redraw()

    def on_key(self, event: events.Key) -> None:
        """Pass every key to the view-model."""
        event.stop()
        event.prevent_default()
        cast(Snipster, self.app).handle_key(event.key, event.character)


class Snipster(App):
    """The textual application object."""

    ENABLE_COMMAND_PALETTE = False
    AUTO_FOCUS = None
    CSS_PATH = 'snipster.css'
    TITLE = 'Snipster'

    def __init__(self, store: Store):
        super().__init__()
        self.store = store
        self.ui_theme = Theme()
        self.vm = ViewModel(store.load_all())
        self.vm.status = load_status(store)

    def get_default_screen(self) -> Screen:
        """Provide the main screen."""
        return MainScreen(id='main')

    def run(self, *args, **kwargs):                          # pragma: no cover
        """Wrap the standard run method, setting the terminal title."""
        with terminal_title('Snipster'):
            return super().run(*args, **kwargs)

    def on_mount(self) -> None:
        """Arrange for SIGINT and SIGTERM to stop the application."""
        loop = asyncio.get_running_loop()
        for sig in STOP_SIGNALS:
            with contextlib.suppress(*SIGNAL_ERRORS):
                loop.add_signal_handler(sig, self.exit)

    def on_unmount(self) -> None:
        """Remove the signal handlers."""
        loop = asyncio.get_running_loop()
        for sig in STOP_SIGNALS:
            with contextlib.suppress(*SIGNAL_ERRORS):
                loop.remove_signal_handler(sig)

    def redraw(self) -> None:
        """Draw the current view-model state."""
        screen = self.screen
        if not isinstance(screen, MainScreen):
            return                                           # pragma: no cover
        frame = screen.query_one('#frame', Static)
        frame.update(render_screen(self.vm, self.ui_theme))
        dialog = screen.query_one('#dialog', Static)
        renderable = render_dialog(self.vm, self.ui_theme)
        dialog.display = renderable is not None
        if renderable is not None:
            dialog.update(renderable)

    def handle_key(self, key: str, character: str | None) -> None:
        """Handle a key press."""
        logger.debug('Key {!r} in context {}', key, self.vm.context_name())
        command = self.vm.handle_key(key, character)
        self.ui_theme.set_accent(self.vm.accent)
        self.redraw()
        if command is not None:
            self.run_command(command)

    def run_command(self, command: model.Command) -> None:
        """Start running a command produced by the view-model."""
        if isinstance(command, model.Quit):
            self.exit()
        else:
            tasks.create_task(
                self.execute(command), name=type(command).__name__)

    async def execute(self, command: model.Command) -> None:
        """Run a command and post its result back to the event loop."""
        result = await self.perform(command)
        self.post_message(CommandCompleted(result))

    async def perform(self, command: model.Command) -> model.Result:
        """Perform the work of a command."""
        if isinstance(command, model.SaveSnippet):
            op = self.store.create if command.create else self.store.update
            try:
                await asyncio.to_thread(op, command.snippet)
            except StoreError as exc:
                logger.error('Save failed: {}', exc)
                return model.StoreFailed(f'Save failed: {exc}')
            return await self.reload()

        elif isinstance(command, model.DeleteSnippet):
            try:
                await asyncio.to_thread(self.store.delete, command.snippet)
            except StoreError as exc:
                logger.error('Delete failed: {}', exc)
                return model.StoreFailed(f'Delete failed: {exc}')
            return await self.reload()

        elif isinstance(command, model.CopyToClipboard):
            return await copy_snippet(command.snippet)

        elif isinstance(command, model.OpenInEditor):
            path = cast(Path, command.snippet.path)
            try:
                with self.suspend():
                    await run_editor(path)
            except SuspendNotSupported:
                return model.StatusChanged('Cannot run an editor here')
            except OSError as exc:
                logger.error('Editor failed: {}', exc)
                return model.StatusChanged(f'Editor failed: {exc}')
            return await self.reload()

        return await self.reload()

    async def reload(self) -> model.Reloaded:
        """Load all snippets from the store."""
        snippets = await asyncio.to_thread(self.store.load_all)
        return model.Reloaded(snippets, load_status(self.store, 'reloaded'))

    def on_command_completed(self, message: CommandCompleted) -> None:
        """Pass a command's result to the view-model."""
        self.vm.handle_result(message.result)
        self.redraw()


def load_status(store: Store, status: str = '') -> str:
    """Build a status message that reports any unreadable snippet files."""
    count = len(store.load_errors)
    if count == 0:
        return status
    skipped = f'{count} unreadable snippet file{"s" if count > 1 else ""}'
    return f'{status}, {skipped}' if status else skipped


async def copy_snippet(snippet: Snippet) -> model.StatusChanged:
    """Put a snippet's content on the clipboard.

    Markdown snippets are copied as styled (HTML) text.
    """
    lang = snippet.language.strip().lower()
    mode = 'styled' if lang in STYLED_LANGUAGES else 'raw'
    try:
        await asyncio.to_thread(put_to_clipboard, snippet.content, mode)
    except ClipboardError as exc:
        logger.error('Copy failed: {}', exc)
        return model.StatusChanged(f'Copy failed: {exc}')
    return model.StatusChanged('copied to clipboard')


async def run_editor(path: Path) -> int:
    """Run the user's preferred editor on a snippet file.

    The editor is found using the VISUAL or EDITOR environment variables. The
    command may include options, for example::

        code --wait

    The command is invoked with the snippet file's path as its single
    additional argument.

    :return: The editor's exit status.
    """
    edit_cmd = get_editor_command()
    cmd = shlex.split(edit_cmd, posix=sys.platform != 'win32')
    logger.info('Running editor: {} {}', edit_cmd, path)
    proc = await asyncio.create_subprocess_exec(*cmd, str(path))
    return await proc.wait()


def parse_args(sys_args: list[str] | None = None) -> argparse.Namespace:
    """Parse the command line arguments."""
    parser = argparse.ArgumentParser(
        prog='snipster', description='Terminal based snippet manager.')
    parser.add_argument(
        '-v', '-version', '--version', action='store_true',
        help='Show the version and exit.')
    parser.add_argument(
        'command', nargs='?', choices=['version'],
        help='Use "version" to show the version and exit.')

    add_hidden_arg = partial(parser.add_argument, help=argparse.SUPPRESS)
    add_hidden_arg('--debug', action='store_true')
    return parser.parse_args(
        sys.argv[1:] if sys_args is None else sys_args)


def main():                                                  # pragma: no cover
    """Run the application."""
    args = parse_args()
    if args.version or args.command == 'version':
        print(version_string(Path(sys.argv[0]).name))
        return

    try:
        data_dir = resolve_data_dir()
    except StartupError as exc:
        sys.exit(str(exc))
    configure_logging(log_path_for(data_dir), verbose=args.debug)
    logger.info('Starting with data directory {}', data_dir)
    app = Snipster(Store(data_dir))
    app.run()
