"""The category folder tree.

Snippets carry slash separated categories, such as 'frontend/react'. This
module derives a tree of folders from those categories so that the sidebar
can be browsed one level at a time. The tree is never stored; it is simply
rebuilt whenever the collection of snippets changes.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator, Union

from .snippets import split_category

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .snippets import Snippet

UNCATEGORIZED = 'uncategorized'


@dataclass
class FolderNode:
    """A folder within the category tree."""

    name: str = ''
    path: str = ''
    children: dict[str, FolderNode] = field(default_factory=dict)
    snippets: list[Snippet] = field(default_factory=list)

    def child(self, name: str) -> FolderNode:
        """Get or create the named child folder."""
        node = self.children.get(name)
        if node is None:
            path = f'{self.path}/{name}' if self.path else name
            node = self.children[name] = FolderNode(name, path)
        return node

    def sorted_children(self) -> list[FolderNode]:
        """The child folders, ordered by name."""
        return [self.children[name] for name in sorted(self.children)]

    def sorted_snippets(self) -> list[Snippet]:
        """The snippets in this folder, ordered by title ignoring case."""
        return sorted(self.snippets, key=title_key)


@dataclass
class FolderItem:
    """A sidebar entry for a folder."""

    name: str
    path: str
    depth: int = 0

    @property
    def display(self) -> str:
        """The text shown in the sidebar."""
        return f'📁 {self.name}/'


@dataclass
class SnippetItem:
    """A sidebar entry for a snippet.

    The title may contain highlight markup; see `snipster.text`.
    """

    title: str
    category: str
    depth: int
    snippet: Snippet

    @property
    def display(self) -> str:
        """The text shown in the sidebar."""
        return f'📄 {self.title}'

    @property
    def description(self) -> str:
        """The secondary line shown below the title."""
        tags = self.snippet.tags
        if tags:
            return f'{self.category}  [{", ".join(tags)}]'
        return self.category


SidebarItem = Union[FolderItem, SnippetItem]


def title_key(snippet: Snippet) -> str:
    """Sort key giving case insensitive title order."""
    return snippet.title.casefold()


def category_path(category: str) -> str:
    """Normalise a category to the folder path it lives under."""
    return '/'.join(split_category(category)) or UNCATEGORIZED


def build(snippets: Iterable[Snippet]) -> FolderNode:
    """Build the folder tree for a collection of snippets."""
    root = FolderNode()
    for snippet in snippets:
        node = root
        for name in category_path(snippet.category).split('/'):
            node = node.child(name)
        node.snippets.append(snippet)
    return root


def find(tree: FolderNode, path: str) -> FolderNode | None:
    """Find the folder for a path, or ``None`` if there is no such folder."""
    node = tree
    for name in split_category(path):
        node = node.children.get(name)
        if node is None:
            return None
    return node


def children_of(tree: FolderNode, path: str) -> list[SidebarItem]:
    """List the immediate contents of a folder.

    Sub-folders come first, sorted by name, then the folder's own snippets
    sorted by title. An unknown path gives an empty list.
    """
    node = find(tree, path)
    if node is None:
        return []
    items: list[SidebarItem] = [
        FolderItem(child.name, child.path) for child in node.sorted_children()]
    items.extend(
        SnippetItem(s.title, s.category, 0, s) for s in node.sorted_snippets())
    return items


def flatten(tree: FolderNode) -> list[SidebarItem]:
    """List the whole tree, depth first.

    Each folder is followed by its sub-folders and then by its own snippets.
    The root folder itself is not listed.
    """
    return list(_walk(tree, 0))


def _walk(node: FolderNode, depth: int) -> Iterator[SidebarItem]:
    for child in node.sorted_children():
        yield FolderItem(child.name, child.path, depth)
        yield from _walk(child, depth + 1)
    for s in node.sorted_snippets():
        yield SnippetItem(s.title, s.category, depth, s)


def parent_path(path: str) -> str:
    """Strip the last segment from a folder path."""
    head, _, _ = path.rpartition('/')
    return head
