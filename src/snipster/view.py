"""Rendering of the view-model as rich renderables.

Every function here is a pure function of the view-model state, the theme
and the precomputed layout. Nothing is sized by measuring the terminal.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from rich import box
from rich.align import Align
from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .folders import FolderItem
from .model import FIELD_NAMES, REQUIRED_FIELDS, Screen
from .search import Matcher, SearchMode
from .text import highlight_keywords, highlight_substring, render_text

if TYPE_CHECKING:
    from rich.console import RenderableType

    from .colors import Theme
    from .edit import TextBuffer
    from .model import ViewModel
    from .snippets import Snippet

BANNER = r'''
███████╗███╗   ██╗██╗██████╗ ███████╗████████╗███████╗██████╗
██╔════╝████╗  ██║██║██╔══██╗██╔════╝╚══██╔══╝██╔════╝██╔══██╗
███████╗██╔██╗ ██║██║██████╔╝███████╗   ██║   █████╗  ██████╔╝
╚════██║██║╚██╗██║██║██╔═══╝ ╚════██║   ██║   ██╔══╝  ██╔══██╗
███████║██║ ╚████║██║██║     ███████║   ██║   ███████╗██║  ██║
╚══════╝╚═╝  ╚═══╝╚═╝╚═╝     ╚══════╝   ╚═╝   ╚══════╝╚═╝  ╚═╝

            C L I   S N I P P E T   M A N A G E R
'''.strip('\n')
KEY_NAMES = {
    'enter': 'enter',
    'escape': 'esc',
    'slash': '/',
}
FIELD_LABELS = {
    'title': 'Title',
    'category': 'Category',
    'tags': 'Tags',
    'language': 'Language',
    'content': 'Content',
}
FORM_HINT = 'ctrl+s: save, esc: cancel (enter in content adds newline)'
FORM_CONTENT_ROWS = 8
TAB_SIZE = 4


def render_screen(vm: ViewModel, theme: Theme) -> RenderableType:
    """Render the whole screen, apart from any dialog."""
    if vm.screen is Screen.WELCOME:
        return render_welcome(vm, theme)
    return render_main(vm, theme)


def render_dialog(vm: ViewModel, theme: Theme) -> RenderableType | None:
    """Render the dialog for the current screen, if it has one."""
    if vm.screen is Screen.CREATE:
        return render_form(vm, theme, 'Create')
    elif vm.screen is Screen.EDIT:
        return render_form(vm, theme, 'Edit')
    elif vm.screen is Screen.CONFIRM_DELETE:
        return render_confirm(vm, theme)
    return None


def render_welcome(vm: ViewModel, theme: Theme) -> RenderableType:
    """Render the welcome screen."""
    content = Group(
        Text(BANNER, style=theme.title, no_wrap=True, overflow='crop'),
        Text(''),
        Text('SNIPSTER', style=theme.status),
        Text('Press any key to open your library', style=theme.hint),
    )
    frame = Panel.fit(
        content, box=box.ROUNDED, padding=(1, 2), border_style=theme.border)
    layout = vm.layout
    return Align.center(
        frame, vertical='middle', width=layout.width, height=layout.height)


def render_main(vm: ViewModel, theme: Theme) -> RenderableType:
    """Render the framed header, sidebar, preview and footer."""
    layout = vm.layout
    inner = Group(
        render_header(vm, theme),
        render_body(vm, theme),
        render_footer(vm, theme),
    )
    return Panel(
        inner,
        box=box.ROUNDED,
        padding=(1, 2),
        border_style=theme.border,
        width=layout.frame_width,
        height=layout.frame_height,
    )


def header_status(vm: ViewModel) -> str:
    """Build the status summary shown in the header."""
    parts = [f'{vm.snippet_count} snippets']
    if vm.mode is SearchMode.FUZZY:
        parts.append('[fuzzy]')
    if vm.query_text:
        parts.append(f'filter: {vm.query_text}')
    if vm.status:
        parts.append(vm.status)
    return '  ·  '.join(parts)


def render_header(vm: ViewModel, theme: Theme) -> RenderableType:
    """Render the three line header."""
    width = vm.layout.content_width
    line = Text(no_wrap=True, overflow='ellipsis')
    line.append('Snipster', style=theme.title)
    line.append('  ')
    line.append(vm.current_path or '/', style=theme.status)
    line.append('  ')
    if vm.search_active or vm.query_text:
        line.append_text(render_search(vm, theme))
    else:
        line.append('/ to search', style=theme.hint)
    line.truncate(width, overflow='ellipsis')
    status = Text(header_status(vm), style=theme.status, no_wrap=True)
    status.truncate(width, overflow='ellipsis')
    return Group(line, status, Text(''))


def render_search(vm: ViewModel, theme: Theme) -> Text:
    """Render the search input."""
    prompt = Text()
    prompt.append('Search: ', style=theme.status)
    value = render_buffer_line(
        vm.query, 0, focused=vm.search_active, theme=theme)
    prompt.append_text(value)
    prompt.truncate(vm.layout.search_width, overflow='crop', pad=True)
    return prompt


def render_body(vm: ViewModel, theme: Theme) -> RenderableType:
    """Render the sidebar and preview panes side by side."""
    layout = vm.layout
    pane_h = layout.pane_height + 2
    sidebar = Panel(
        render_sidebar(vm, theme),
        box=box.ROUNDED, padding=(0, 1), border_style=theme.border,
        width=layout.sidebar_width + 4, height=pane_h)
    preview = Panel(
        render_preview(vm, theme),
        box=box.ROUNDED, padding=(0, 1), border_style=theme.border,
        width=layout.preview_width + 4, height=pane_h)
    grid = Table.grid(padding=0)
    grid.add_column(width=layout.sidebar_width + 4)
    grid.add_column(width=1)
    grid.add_column(width=layout.preview_width + 4)
    grid.add_row(sidebar, ' ', preview)
    return grid


def render_sidebar(vm: ViewModel, theme: Theme) -> RenderableType:
    """Render the visible part of the sidebar list."""
    width = vm.layout.sidebar_width
    lines = []
    for index, item in vm.visible_items():
        selected = index == vm.selected
        if isinstance(item, FolderItem):
            main = Text(item.display, style=theme.folder)
            desc = Text('')
        else:
            main = render_text(
                f'📄 {item.title}', match_style=theme.match,
                keyword_style=theme.keyword)
            desc = Text(item.description, style=theme.hint)
        for text in (main, desc):
            text.truncate(width, overflow='ellipsis', pad=True)
            if selected:
                text.stylize(theme.selected)
            lines.append(text)
    if not lines:
        lines.append(Text('No snippets', style=theme.hint))
    return Group(*lines)


def preview_lines(
        snippet: Snippet, query: str, theme: Theme, width: int) -> list[Text]:
    """Render a snippet as preview lines.

    Each content line gets a numbered gutter, marked when the line contains
    the query.
    """
    tags = ', '.join(snippet.tags)
    meta = f'{snippet.category} | {snippet.language} | {tags}'
    lines = [Text(snippet.title, style=theme.title), Text(meta, theme.status),
        Text('')]

    matcher = Matcher(query)
    for i, raw in enumerate(snippet.content.split('\n'), 1):
        line = raw.expandtabs(TAB_SIZE)
        hit = bool(query) and matcher.search(line)
        gutter = Text()
        gutter.append(
            f'{i:3d} {"▶" if hit else "│"} ',
            style=theme.gutter_mark if hit else theme.gutter)
        markup = highlight_keywords(
            highlight_substring(line, query), snippet.language)
        gutter.append_text(render_text(
            markup, match_style=theme.match, keyword_style=theme.keyword))
        lines.append(gutter)

    for line in lines:
        line.no_wrap = True
        line.truncate(width, overflow='crop')
    return lines


def render_preview(vm: ViewModel, theme: Theme) -> RenderableType:
    """Render the preview of the selected snippet."""
    snippet = vm.selected_snippet
    if snippet is None:
        return Text('No snippet', style=theme.hint)
    lines = preview_lines(
        snippet, vm.query_text, theme, vm.layout.preview_width)
    return Group(*lines[:vm.layout.pane_height])


def render_footer(vm: ViewModel, theme: Theme) -> RenderableType:
    """Render the key help line."""
    text = Text(no_wrap=True, overflow='ellipsis', style=theme.hint)
    for i, binding in enumerate(vm.keymap.shown(vm.context_name())):
        if i:
            text.append('  ')
        key = binding.key_display or KEY_NAMES.get(binding.key, binding.key)
        text.append(key, style='bold')
        text.append(f' {binding.description.lower()}')
    text.truncate(vm.layout.content_width, overflow='ellipsis')
    return text


def render_buffer_line(
        buf: TextBuffer, lidx: int, *, focused: bool, theme: Theme) -> Text:
    """Render one line of an edit buffer, showing the cursor if focused."""
    line = buf.lines[lidx]
    if not focused or buf.cursor.lidx != lidx:
        return Text(line)
    cidx = buf.cursor.cidx
    text = Text(line[:cidx])
    text.append(line[cidx:cidx + 1] or ' ', style=theme.selected)
    text.append(line[cidx + 1:])
    return text


def render_form(vm: ViewModel, theme: Theme, action: str) -> RenderableType:
    """Render the create/edit dialog."""
    form = vm.form
    lines: list[Text] = [Text(f'{action} Snippet', style=theme.title), Text()]
    for idx, name in enumerate(FIELD_NAMES):
        focused = idx == form.focus
        label = FIELD_LABELS[name] + ('*' if name in REQUIRED_FIELDS else '')
        label_style = theme.title if focused else theme.status
        buf = form.fields[name]
        if name == 'content':
            lines.append(Text(f'{label}:', style=label_style))
            first = max(0, buf.cursor.lidx - FORM_CONTENT_ROWS + 1)
            last = min(len(buf.lines), first + FORM_CONTENT_ROWS)
            for lidx in range(first, last):
                text = Text('  ')
                text.append_text(
                    render_buffer_line(
                        buf, lidx, focused=focused, theme=theme))
                lines.append(text)
        else:
            text = Text()
            text.append(f'{label}: ', style=label_style)
            text.append_text(
                render_buffer_line(buf, 0, focused=focused, theme=theme))
            lines.append(text)
        if name in form.errors:
            lines.append(Text(form.errors[name], style=theme.error))
    lines.append(Text(FORM_HINT, style=theme.hint))
    if vm.status:
        lines.append(Text(vm.status, style=theme.error))

    width = min(vm.layout.content_width, 72)
    for line in lines:
        line.no_wrap = True
        line.truncate(width - 4, overflow='ellipsis')
    return Panel(
        Group(*lines), box=box.ROUNDED, padding=(0, 1),
        border_style=theme.border, width=width)


def render_confirm(vm: ViewModel, theme: Theme) -> RenderableType:
    """Render the delete confirmation dialog."""
    title = vm.target.title if vm.target is not None else ''
    content = Group(
        Text('Delete Snippet?', style=theme.title),
        Text(''),
        Text(title),
        Text(''),
        Text('y: yes, n/esc: cancel', style=theme.status),
    )
    return Panel.fit(
        content, box=box.ROUNDED, padding=(0, 1), border_style=theme.border)
