"""The application state machine.

The `ViewModel` holds all of the user interface state and reacts to key
presses. It never performs any I/O itself. Anything slow or external, such as
writing to the store or running an editor, is returned as a one-shot command
that the application runs. The outcome comes back as a result value, which
is passed to `ViewModel.handle_result`.

Keys are mapped to actions using a table keyed by (context, key), where the
context depends on the current screen and focus. Keys without a binding are
passed on to whichever text input currently has focus.
"""
from __future__ import annotations

import dataclasses
import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Union

from loguru import logger
from textual.actions import parse
from textual.binding import Binding

from . import folders, search
from .colors import accent_colors
from .edit import LineBuffer, TextBuffer
from .folders import FolderItem, SidebarItem, SnippetItem
from .layout import Layout, compute_layout
from .search import SearchMode
from .snippets import Snippet

if TYPE_CHECKING:
    from collections.abc import Iterable

FIELD_NAMES = ('title', 'category', 'tags', 'language', 'content')
REQUIRED_FIELDS: dict[str, str] = {
    'title': 'Title is required',
    'category': 'Category is required',
    'content': 'Content is required',
}
SIDEBAR_ROWS_PER_ITEM = 2


class Screen(enum.Enum):
    """The screens (states) of the application."""

    WELCOME = 'welcome'
    HOME = 'home'
    CREATE = 'create'
    EDIT = 'edit'
    CONFIRM_DELETE = 'confirm_delete'


@dataclass
class CopyToClipboard:
    """Put a snippet's content on the clipboard."""

    snippet: Snippet


@dataclass
class OpenInEditor:
    """Edit a snippet's file using the external editor, then reload."""

    snippet: Snippet


@dataclass
class SaveSnippet:
    """Create or update a snippet, then reload."""

    snippet: Snippet
    create: bool


@dataclass
class DeleteSnippet:
    """Delete a snippet, then reload."""

    snippet: Snippet


@dataclass
class Reload:
    """Reload all snippets from the store."""


@dataclass
class Quit:
    """Stop the application."""


Command = Union[
    CopyToClipboard, OpenInEditor, SaveSnippet, DeleteSnippet, Reload, Quit]


@dataclass
class Reloaded:
    """The store has been (re)loaded."""

    snippets: list[Snippet]
    status: str = ''


@dataclass
class StatusChanged:
    """A command completed with a message for the user."""

    text: str


@dataclass
class StoreFailed:
    """A store mutation failed; nothing was changed."""

    text: str


Result = Union[Reloaded, StatusChanged, StoreFailed]


class KeyMap:
    """Context specific key bindings."""

    def __init__(self):
        self.bindings: dict[tuple[str, str], Binding] = {}

    def bind(                              # pylint: disable=too-many-arguments
        self,
        keys: str,
        action: str,
        *,
        contexts: Iterable[str],
        description: str = '',
        show: bool = True,
        key_display: str | None = None,
    ) -> None:
        """Bind one or more space separated keys to an action."""
        for key in keys.split():
            binding = Binding(key, action, description, show, key_display)
            for context in contexts:
                self.bindings[(context, key)] = binding

    def lookup(self, context: str, key: str) -> Binding | None:
        """Find the binding for a key in a given context."""
        return self.bindings.get((context, key))

    def shown(self, context: str) -> list[Binding]:
        """The bindings to show to the user, one per action."""
        seen = set()
        shown = []
        for (ctx, _), binding in self.bindings.items():
            if ctx == context and binding.show and binding.action not in seen:
                seen.add(binding.action)
                shown.append(binding)
        return shown


@dataclass
class Form:
    """The create/edit form state."""

    fields: dict[str, TextBuffer] = field(default_factory=lambda: {
        'title': LineBuffer(),
        'category': LineBuffer(),
        'tags': LineBuffer(),
        'language': LineBuffer(),
        'content': TextBuffer(),
    })
    focus: int = 0
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def focused_name(self) -> str:
        """The name of the field with focus."""
        return FIELD_NAMES[self.focus]

    @property
    def focused(self) -> TextBuffer:
        """The buffer of the field with focus."""
        return self.fields[self.focused_name]

    def value(self, name: str) -> str:
        """Get a field's current text."""
        return self.fields[name].text

    def load(self, snippet: Snippet | None) -> None:
        """Reset the form, optionally populating it from a snippet."""
        for buf in self.fields.values():
            buf.clear()
        if snippet is not None:
            self.fields['title'].text = snippet.title
            self.fields['category'].text = snippet.category
            self.fields['tags'].text = ', '.join(snippet.tags)
            self.fields['language'].text = snippet.language
            self.fields['content'].text = snippet.content
        self.focus = 0
        self.errors = {}

    def validate(self) -> list[str]:
        """Check the required fields, recording errors.

        :return: The names of the invalid fields, in form order.
        """
        self.errors = {
            name: msg for name, msg in REQUIRED_FIELDS.items()
            if not self.value(name).strip()}
        return [name for name in FIELD_NAMES if name in self.errors]

    def build(self, base: Snippet | None) -> Snippet:
        """Create a snippet record from the form values.

        When editing, the base snippet's id, location and creation time are
        kept.
        """
        tags = [t.strip() for t in self.value('tags').split(',') if t.strip()]
        values = {
            'title': self.value('title').strip(),
            'category': self.value('category').strip(),
            'language': self.value('language').strip(),
            'tags': tags,
            'content': self.value('content'),
        }
        if base is None:
            return Snippet(**values)
        return dataclasses.replace(base, **values)


class ViewModel:              # pylint: disable=too-many-instance-attributes
    """All of the application's user interface state."""

    def __init__(
            self, snippets: Iterable[Snippet] = (), *,
            width: int = 80, height: int = 24):
        self.screen = Screen.WELCOME
        self.snippets: list[Snippet] = []
        self.tree = folders.FolderNode()
        self.current_path = ''
        self.query = LineBuffer()
        self.mode = SearchMode.SUBSTRING
        self.search_active = False
        self.items: list[SidebarItem] = []
        self.selected = 0
        self.sidebar_top = 0
        self.status = ''
        self.form = Form()
        self.target: Snippet | None = None
        self.accent = 0
        self.busy = False
        self.pending: Screen | None = None
        self.layout: Layout = compute_layout(width, height)
        self.keymap = KeyMap()
        self.init_bindings()
        self.set_snippets(snippets)

    def init_bindings(self) -> None:
        """Set up the key bindings for every context."""
        bind = self.keymap.bind
        bind('slash', 'open_library(True)', contexts=('welcome',), show=False)

        contexts = ('browse',)
        bind('slash', 'start_search', contexts=contexts,
            description='Search', key_display='/')
        bind('down j', 'move_selection(1)', contexts=contexts,
            description='Navigate', key_display='j/k')
        bind('up k', 'move_selection(-1)', contexts=contexts, show=False)
        bind('right l', 'forward', contexts=contexts, show=False)
        bind('left h', 'back', contexts=contexts, show=False)
        bind('enter', 'copy', contexts=contexts, description='Copy')
        bind('n', 'new_snippet', contexts=contexts, description='New')
        bind('e', 'edit_snippet', contexts=contexts, description='Edit')
        bind('d', 'delete_snippet', contexts=contexts, description='Delete')
        bind('E', 'external_edit', contexts=contexts, description='Editor')
        bind('f', 'toggle_fuzzy', contexts=contexts, description='Fuzzy')
        bind('t', 'cycle_accent', contexts=contexts, description='Theme')
        bind('q', 'quit', contexts=contexts, description='Quit')
        bind('home', 'jump_selection(False)', contexts=contexts, show=False)
        bind('end', 'jump_selection(True)', contexts=contexts, show=False)

        contexts = ('browse', 'search')
        bind('pageup', 'page(-1)', contexts=contexts, show=False)
        bind('pagedown', 'page(1)', contexts=contexts, show=False)

        contexts = ('search',)
        bind('escape', 'cancel_search', contexts=contexts,
            description='Clear', key_display='esc')
        bind('down', 'move_selection(1)', contexts=contexts, show=False)
        bind('up', 'move_selection(-1)', contexts=contexts, show=False)

        contexts = ('form', 'content')
        bind('tab', 'next_field', contexts=contexts, description='Next')
        bind('shift+tab', 'previous_field', contexts=contexts,
            description='Previous')
        bind('ctrl+s', 'save', contexts=contexts, description='Save')
        bind('escape', 'cancel_form', contexts=contexts,
            description='Cancel', key_display='esc')
        bind('enter', 'save', contexts=('form',), show=False)

        contexts = ('confirm',)
        bind('y Y', 'confirm_delete', contexts=contexts,
            description='Yes', key_display='y')
        bind('n N escape', 'cancel_delete', contexts=contexts,
            description='Cancel', key_display='n/esc')

    def context_name(self) -> str:
        """Provide a name identifying the current key handling context."""
        if self.screen is Screen.WELCOME:
            return 'welcome'
        elif self.screen is Screen.HOME:
            return 'search' if self.search_active else 'browse'
        elif self.screen is Screen.CONFIRM_DELETE:
            return 'confirm'
        else:
            return 'content' if self.form.focused_name == 'content' else 'form'

    # Derived state.
    @property
    def query_text(self) -> str:
        """The search query, without surrounding white space."""
        return self.query.text.strip()

    @property
    def selected_item(self) -> SidebarItem | None:
        """The currently selected sidebar item, if any."""
        if 0 <= self.selected < len(self.items):
            return self.items[self.selected]
        return None

    @property
    def selected_snippet(self) -> Snippet | None:
        """The snippet of the selected sidebar item, if any."""
        item = self.selected_item
        return item.snippet if isinstance(item, SnippetItem) else None

    @property
    def snippet_count(self) -> int:
        """The number of snippet rows currently listed."""
        return sum(isinstance(item, SnippetItem) for item in self.items)

    @property
    def sidebar_capacity(self) -> int:
        """How many sidebar items fit in the sidebar pane."""
        return max(1, self.layout.pane_height // SIDEBAR_ROWS_PER_ITEM)

    def visible_items(self) -> list[tuple[int, SidebarItem]]:
        """The (index, item) pairs that fit in the sidebar pane."""
        top = self.sidebar_top
        end = top + self.sidebar_capacity
        return list(enumerate(self.items))[top:end]

    # Collection and list maintenance.
    def set_snippets(self, snippets: Iterable[Snippet]) -> None:
        """Replace the collection of snippets, rebuilding derived state."""
        self.snippets = sorted(snippets, key=folders.title_key)
        self.tree = folders.build(self.snippets)
        while self.current_path and folders.find(
                self.tree, self.current_path) is None:
            self.current_path = folders.parent_path(self.current_path)
        self.refresh_items()

    def refresh_items(self) -> None:
        """Recompute the visible sidebar items."""
        q = self.query_text
        if q:
            self.items = list(search.apply(self.snippets, q, self.mode))
        else:
            self.items = folders.children_of(self.tree, self.current_path)
        if not 0 <= self.selected < len(self.items):
            self.selected = 0
        self._scroll_to_selection()

    def _select(self, index: int) -> None:
        self.selected = max(0, min(index, len(self.items) - 1))
        self._scroll_to_selection()

    def _scroll_to_selection(self) -> None:
        cap = self.sidebar_capacity
        top = min(self.sidebar_top, max(0, len(self.items) - cap))
        if self.selected < top:
            top = self.selected
        elif self.selected >= top + cap:
            top = self.selected - cap + 1
        self.sidebar_top = max(0, top)

    def resize(self, width: int, height: int) -> None:
        """Handle a change of terminal size."""
        self.layout = compute_layout(width, height)
        self._scroll_to_selection()

    # Event handling.
    def handle_key(self, key: str, char: str | None = None) -> Command | None:
        """Handle a key press.

        :key:  The key name, for example 'a', 'enter' or 'ctrl+s'.
        :char: The character the key produces, if any.
        :return: A command for the application to run, or ``None``.
        """
        self.status = ''
        context = self.context_name()
        binding = self.keymap.lookup(context, key)
        if binding is not None:
            _, name, args = parse(binding.action)
            return getattr(self, f'action_{name}')(*args)

        if context == 'welcome':
            self.action_open_library()
        elif context == 'search':
            if self.query.handle_key(key, char):
                self.selected = 0
                self.refresh_items()
        elif context in ('form', 'content'):
            name = self.form.focused_name
            if self.form.focused.handle_key(key, char):
                self.form.errors.pop(name, None)
        return None

    def handle_result(self, result: Result) -> None:
        """Consume the outcome of a command.

        A reload returns to the home screen only while the form or dialog
        that asked for the change is still showing.
        """
        if isinstance(result, Reloaded):
            self.busy = False
            self.set_snippets(result.snippets)
            if self.pending is not None and self.screen is self.pending:
                self.screen = Screen.HOME
                self.target = None
                self.form.load(None)
            self.pending = None
            self.status = result.status
        elif isinstance(result, StoreFailed):
            self.busy = False
            self.pending = None
            self.status = result.text
        else:
            self.status = result.text

    # Welcome actions.
    def action_open_library(self, with_search: bool = False) -> None:
        """Leave the welcome screen."""
        self.screen = Screen.HOME
        self.search_active = with_search
        self.refresh_items()

    # Browsing actions.
    def action_start_search(self) -> None:
        """Give the search input focus."""
        self.search_active = True

    def action_cancel_search(self) -> None:
        """Clear the query and leave the search input."""
        self.search_active = False
        self.query.clear()
        self.refresh_items()

    def action_move_selection(self, inc: int) -> None:
        """Move the selection up or down."""
        self._select(self.selected + inc)

    def action_jump_selection(self, to_end: bool) -> None:
        """Select the first or last item."""
        self._select(len(self.items) - 1 if to_end else 0)

    def action_page(self, direction: int) -> None:
        """Move the selection by a pane full."""
        self._select(self.selected + direction * self.sidebar_capacity)

    def action_forward(self) -> None:
        """Descend into the selected folder."""
        item = self.selected_item
        if self.query_text or not isinstance(item, FolderItem):
            return
        self.current_path = item.path
        self.selected = 0
        self.sidebar_top = 0
        self.refresh_items()

    def action_back(self) -> None:
        """Ascend to the parent folder, selecting the folder just left."""
        if self.query_text or not self.current_path:
            return
        left = self.current_path
        self.current_path = folders.parent_path(left)
        self.selected = 0
        self.refresh_items()
        for i, item in enumerate(self.items):
            if isinstance(item, FolderItem) and item.path == left:
                self._select(i)
                break

    def action_toggle_fuzzy(self) -> None:
        """Switch between substring and fuzzy matching."""
        if self.mode is SearchMode.FUZZY:
            self.mode = SearchMode.SUBSTRING
            self.status = 'Fuzzy search OFF'
        else:
            self.mode = SearchMode.FUZZY
            self.status = 'Fuzzy search ON'
        self.refresh_items()

    def action_cycle_accent(self) -> None:
        """Select the next border color."""
        self.accent = (self.accent + 1) % len(accent_colors)
        self.status = 'Border color changed'

    def action_copy(self) -> Command | None:
        """Copy the selected snippet to the clipboard."""
        snippet = self._require_snippet()
        return None if snippet is None else CopyToClipboard(snippet)

    def action_external_edit(self) -> Command | None:
        """Edit the selected snippet's file in the external editor."""
        snippet = self._require_snippet()
        if snippet is None or snippet.path is None:
            return None
        return OpenInEditor(snippet)

    def action_new_snippet(self) -> None:
        """Open an empty form to create a snippet."""
        self.pending = None
        self.target = None
        self.form.load(None)
        self.screen = Screen.CREATE

    def action_edit_snippet(self) -> None:
        """Open the form to edit the selected snippet."""
        snippet = self._require_snippet()
        if snippet is not None:
            self.pending = None
            self.target = snippet
            self.form.load(snippet)
            self.screen = Screen.EDIT

    def action_delete_snippet(self) -> None:
        """Ask for confirmation before deleting the selected snippet."""
        snippet = self._require_snippet()
        if snippet is not None:
            self.pending = None
            self.target = snippet
            self.screen = Screen.CONFIRM_DELETE

    def action_quit(self) -> Command:
        """Quit the application."""
        return Quit()

    def _require_snippet(self) -> Snippet | None:
        snippet = self.selected_snippet
        if snippet is None:
            self.status = 'No snippet selected'
        return snippet

    # Form actions.
    def action_next_field(self) -> None:
        """Move focus to the next field, unless a required one is empty."""
        form = self.form
        name = form.focused_name
        if name in REQUIRED_FIELDS and not form.value(name).strip():
            form.errors[name] = REQUIRED_FIELDS[name]
            self.status = 'Please fill required field'
            return
        form.errors.pop(name, None)
        form.focus = min(form.focus + 1, len(FIELD_NAMES) - 1)

    def action_previous_field(self) -> None:
        """Move focus to the previous field."""
        self.form.focus = max(self.form.focus - 1, 0)

    def action_save(self) -> Command | None:
        """Validate the form and request that the snippet is stored."""
        form = self.form
        invalid = form.validate()
        if invalid:
            form.focus = FIELD_NAMES.index(invalid[0])
            self.status = 'Please fix validation errors'
            return None
        if self.busy:
            self.status = 'Busy, please wait'
            return None

        create = self.screen is Screen.CREATE
        snippet = form.build(None if create else self.target)
        self.busy = True
        self.pending = self.screen
        logger.debug('Saving snippet {!r} (create={})', snippet.title, create)
        return SaveSnippet(snippet, create)

    def action_cancel_form(self) -> None:
        """Abandon the form."""
        self.form.load(None)
        self.target = None
        self.screen = Screen.HOME

    # Delete confirmation actions.
    def action_confirm_delete(self) -> Command | None:
        """Request that the target snippet is deleted."""
        if self.target is None:
            self.screen = Screen.HOME
            return None
        if self.busy:
            self.status = 'Busy, please wait'
            return None
        self.busy = True
        self.pending = self.screen
        return DeleteSnippet(self.target)

    def action_cancel_delete(self) -> None:
        """Return to browsing without deleting."""
        self.target = None
        self.screen = Screen.HOME
