"""Simple text editing buffers for the snippet form.

The cursor movement code is a pared down version of the logic used by the
original built-in editor. There is no selection and no internal clipboard;
just insertion, deletion and cursor movement.
"""
from __future__ import annotations

import re
from typing import Literal, NamedTuple, cast

r_word_boundary = re.compile(r'\W*\w+\b')

ArrowName = Literal['left', 'right', 'up', 'down']


class Cursor(NamedTuple):
    """Representation of the cursor position."""

    lidx: int
    cidx: int


def split_key(key: str) -> tuple[str, set[str]]:
    """Split a key name into its base name and a set of modifiers."""
    modifier, sep, name = key.rpartition('+')
    modifiers = set() if sep != '+' else set(modifier.split('+'))
    return name, modifiers


def is_printable(char: str | None) -> bool:
    """Test whether a key's character should be inserted as text."""
    return char is not None and len(char) == 1 and char.isprintable()


class TextBuffer:
    """Editable multi-line text with a cursor.

    The cursor may sit one place beyond the last character of a line.
    """

    multiline = True

    def __init__(self, text: str = ''):
        self.lines: list[str] = ['']
        self.cursor = Cursor(0, 0)
        self.text = text

    @property
    def text(self) -> str:
        """The buffer's content."""
        return '\n'.join(self.lines)

    @text.setter
    def text(self, value: str) -> None:
        self.lines = value.split('\n') if self.multiline else [
            value.replace('\n', ' ')]
        self.cursor = Cursor(
            len(self.lines) - 1, len(self.lines[-1]))

    def clear(self) -> None:
        """Remove all text."""
        self.text = ''

    def handle_key(self, key: str, char: str | None = None) -> bool:
        """Handle a key press.

        :return: True if the key was used.
        """
        name, modifiers = split_key(key)
        if name in ('left', 'right', 'up', 'down'):
            self.cursor = handle_arrow(
                cast(ArrowName, name), modifiers, self.lines, self.cursor)
        elif name == 'home':
            lidx = 0 if 'ctrl' in modifiers else self.cursor.lidx
            self.cursor = Cursor(lidx, 0)
        elif name == 'end':
            lidx = (
                len(self.lines) - 1 if 'ctrl' in modifiers
                else self.cursor.lidx)
            self.cursor = Cursor(lidx, len(self.lines[lidx]))
        elif name == 'backspace':
            self._delete_between(
                handle_arrow('left', modifiers, self.lines, self.cursor),
                self.cursor)
        elif name == 'delete':
            self._delete_between(
                self.cursor,
                handle_arrow('right', modifiers, self.lines, self.cursor))
        elif name == 'enter' and self.multiline and not modifiers:
            self.insert('\n')
        elif modifiers <= {'shift'} and is_printable(char):
            self.insert(cast(str, char))
        else:
            return False
        return True

    def insert(self, text: str) -> None:
        """Insert text at the cursor."""
        lidx, cidx = self.cursor
        line = self.lines[lidx]
        head, tail = line[:cidx], line[cidx:]
        new_lines = f'{head}{text}{tail}'.split('\n')
        self.lines[lidx:lidx + 1] = new_lines
        last = lidx + len(new_lines) - 1
        self.cursor = Cursor(last, len(self.lines[last]) - len(tail))

    def _delete_between(self, first: Cursor, last: Cursor) -> None:
        first, last = min(first, last), max(first, last)
        head = self.lines[first.lidx][:first.cidx]
        tail = self.lines[last.lidx][last.cidx:]
        self.lines[first.lidx:last.lidx + 1] = [f'{head}{tail}']
        self.cursor = first


class LineBuffer(TextBuffer):
    """A single line text buffer."""

    multiline = False


def handle_arrow(
        name: ArrowName, modifiers: set[str], lines: list[str], cursor: Cursor,
    ) -> Cursor:
    """Handle an arrow key."""
    handler = None
    if 'ctrl' in modifiers:
        handler = globals().get(f'_handle_ctrl_{name}')
    if handler is None:
        handler = globals().get(f'_handle_{name}')
    return handler(lines, cursor) if handler else cursor


def _handle_right(lines: list[str], cursor: Cursor) -> Cursor:
    max_x = len(lines[cursor.lidx])
    max_y = len(lines) - 1
    if cursor.cidx < max_x:
        return Cursor(cursor.lidx, cursor.cidx + 1)
    elif cursor.lidx < max_y:
        return Cursor(cursor.lidx + 1, 0)
    else:
        return cursor


def _handle_left(lines: list[str], cursor: Cursor) -> Cursor:
    if cursor.cidx > 0:
        return Cursor(cursor.lidx, cursor.cidx - 1)
    elif cursor.lidx > 0:
        return Cursor(cursor.lidx - 1, len(lines[cursor.lidx - 1]))
    else:
        return cursor


def _handle_down(lines: list[str], cursor: Cursor) -> Cursor:
    if cursor.lidx == len(lines) - 1:
        return cursor
    else:
        max_x = len(lines[cursor.lidx + 1])
        return Cursor(lidx=cursor.lidx + 1, cidx=min(max_x, cursor.cidx))


def _handle_up(lines: list[str], cursor: Cursor) -> Cursor:
    if cursor.lidx == 0:
        return cursor
    else:
        max_x = len(lines[cursor.lidx - 1])
        return Cursor(lidx=cursor.lidx - 1, cidx=min(max_x, cursor.cidx))


def _handle_ctrl_right(lines: list[str], cursor: Cursor) -> Cursor:
    lidx, cidx = cursor
    if cidx == len(lines[lidx]):
        if lidx == len(lines) - 1:
            return cursor
        lidx, cidx = lidx + 1, 0
    tail = lines[lidx][cidx:]
    if match := r_word_boundary.match(tail):
        return Cursor(lidx=lidx, cidx=cidx + match.span()[1])
    else:  # no more words, move to end of line
        return Cursor(lidx=lidx, cidx=len(lines[lidx]))


def _handle_ctrl_left(lines: list[str], cursor: Cursor) -> Cursor:
    lidx, cidx = cursor
    if cidx == 0:
        if lidx == 0:
            return cursor
        lidx, cidx = lidx - 1, len(lines[lidx - 1])
    tail = lines[lidx][:cidx][::-1]
    if match := r_word_boundary.match(tail):
        return Cursor(lidx=lidx, cidx=cidx - match.span()[1])
    else:  # no more words, move to start of line
        return Cursor(lidx=lidx, cidx=0)
