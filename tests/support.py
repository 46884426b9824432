"""Common test support code."""
from __future__ import annotations

import sys
from contextlib import contextmanager
from typing import TYPE_CHECKING, Callable

from snipster.snippets import Snippet

if TYPE_CHECKING:
    from textual.pilot import Pilot

    from snipster.model import Command, ViewModel

# Characters that textual reports using a different key name.
key_names = {
    ' ': 'space',
    '/': 'slash',
    ',': 'comma',
    '.': 'full_stop',
    '-': 'minus',
    '*': 'asterisk',
}
char_for_key = {name: ch for ch, name in key_names.items()}


def sample_snippets() -> list[Snippet]:
    """Create the standard set of test snippets.

    The resulting folder tree is::

        backend/
          express/   Express Error Handler
          go/        Go Handler
          node/      Server Render
        db/          Select Users
        frontend/
          react/     Component Patterns, React Hooks
        uncategorized/
                     Scratch Notes
    """
    return [
        Snippet(
            'React Hooks', 'frontend/react',
            'const [count, setCount] = useState(0)\nreturn count',
            'js', ['hooks']),
        Snippet(
            'Component Patterns', 'frontend/react',
            'function Card() {\n  return null\n}', 'jsx', ['react', 'ui']),
        Snippet(
            'Express Error Handler', 'backend/express',
            'app.use((err, req, res, next) => {\n  res.status(500)\n})',
            'js', ['node']),
        Snippet(
            'Server Render', 'backend/node',
            'import ReactDOM from "react-dom"\nReactDOM.hydrate(app)',
            'js', []),
        Snippet(
            'Go Handler', 'backend/go',
            'func main() {\n\treturn\n}', 'go', ['http']),
        Snippet(
            'Select Users', 'db',
            'select * from users where id = 1', 'sql', ['query']),
        Snippet('Scratch Notes', '', 'Some notes', 'md', []),
    ]


def keys_for_text(text: str) -> list[tuple[str, str]]:
    """Convert text into the (key, character) pairs used to type it."""
    return [(key_names.get(ch, ch), ch) for ch in text]


def press(vm: ViewModel, *keys: str) -> list[Command]:
    """Feed a sequence of keys to a view-model.

    A key of the form 'text:...' types each character of the text.

    :return: The commands returned by the view-model.
    """
    commands = []
    for key in keys:
        if key.startswith('text:'):
            pairs = keys_for_text(key[5:])
        else:
            char = char_for_key.get(key, key if len(key) == 1 else None)
            pairs = [(key, char)]
        for name, char in pairs:
            command = vm.handle_key(name, char)
            if command is not None:
                commands.append(command)
    return commands


async def wait_until(
        pilot: Pilot, predicate: Callable[[], bool], timeout: float = 5.0,
    ) -> None:
    """Wait for background work to bring about a condition."""
    steps = int(timeout / 0.02)
    for _ in range(steps):
        if predicate():
            return
        await pilot.pause(0.02)
    assert predicate(), 'Timed out waiting for condition'


@contextmanager
def temp_command_args(args: list[str]):
    """Temporary update the arguments part of sys.argv."""
    saved = list(sys.argv)
    sys.argv[1:] = list(args)
    yield
    sys.argv[:] = saved
