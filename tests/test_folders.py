"""The folder tree derived from snippet categories."""
from __future__ import annotations
# pylint: disable=redefined-outer-name
# pylint: disable=no-self-use

import pytest

from support import sample_snippets

from snipster import folders
from snipster.folders import FolderItem, SnippetItem
from snipster.snippets import Snippet


@pytest.fixture
def tree():
    """The folder tree for the standard snippets."""
    return folders.build(sample_snippets())


def names(items):
    """Summarise sidebar items as strings."""
    return [
        item.display if isinstance(item, FolderItem) else item.title
        for item in items]


class TestBrowsing:
    """Listing the contents of a single folder."""

    def test_top_level_lists_folders_by_name(self, tree):
        """The root holds only folders, in name order."""
        assert names(folders.children_of(tree, '')) == [
            '📁 backend/', '📁 db/', '📁 frontend/', '📁 uncategorized/']

    def test_folders_precede_snippets(self, tree):
        """Sub-folders are listed before a folder's own snippets."""
        tree = folders.build(
            [*sample_snippets(), Snippet('Top Level', 'backend', 'x')])
        assert names(folders.children_of(tree, 'backend')) == [
            '📁 express/', '📁 go/', '📁 node/', 'Top Level']

    def test_snippets_are_sorted_by_title_ignoring_case(self):
        """Title order does not depend on case."""
        tree = folders.build([
            Snippet('beta', 'x'), Snippet('Alpha', 'x'), Snippet('gamma', 'x'),
        ])
        assert names(folders.children_of(tree, 'x')) == [
            'Alpha', 'beta', 'gamma']

    def test_nested_folder_contents(self, tree):
        """A deeper path lists that folder's snippets."""
        items = folders.children_of(tree, 'frontend/react')
        assert names(items) == ['Component Patterns', 'React Hooks']
        assert all(isinstance(item, SnippetItem) for item in items)
        assert items[1].snippet.language == 'js'

    def test_folder_items_carry_full_paths(self, tree):
        """Selecting a folder item gives the path to descend into."""
        items = folders.children_of(tree, 'frontend')
        assert items == [FolderItem('react', 'frontend/react')]

    def test_unknown_path_is_empty(self, tree):
        """A folder that does not exist has no contents."""
        assert folders.children_of(tree, 'nowhere') == []
        assert folders.children_of(tree, 'frontend/vue') == []

    def test_uncategorised_snippets_get_a_folder(self, tree):
        """Snippets with blank categories are grouped together."""
        items = folders.children_of(tree, 'uncategorized')
        assert names(items) == ['Scratch Notes']

    def test_category_paths_are_normalised(self):
        """Surrounding spaces and empty segments are ignored."""
        assert folders.category_path(' a / /b ') == 'a/b'
        assert folders.category_path('   ') == 'uncategorized'
        tree = folders.build([Snippet('T', ' a / b ')])
        assert names(folders.children_of(tree, 'a/b')) == ['T']

    def test_listing_is_repeatable(self, tree):
        """Asking twice gives the same answer."""
        assert folders.children_of(tree, 'backend') == folders.children_of(
            tree, 'backend')

    def test_snippet_description_shows_category_and_tags(self, tree):
        """The second sidebar line summarises a snippet."""
        patterns, hooks = folders.children_of(tree, 'frontend/react')
        assert patterns.description == 'frontend/react  [react, ui]'
        assert hooks.display == '📄 React Hooks'
        no_tags = folders.children_of(tree, 'backend/node')[0]
        assert no_tags.description == 'backend/node'


class TestFlatten:
    """Listing the whole tree at once."""

    def test_depth_first_order(self):
        """Each folder is followed by its sub-folders and then snippets."""
        tree = folders.build([
            Snippet('B1', 'b'),
            Snippet('A2', 'a/x'),
            Snippet('A1', 'a'),
        ])
        items = folders.flatten(tree)
        assert [(names([item])[0], item.depth) for item in items] == [
            ('📁 a/', 0),
            ('📁 x/', 1),
            ('A2', 2),
            ('A1', 1),
            ('📁 b/', 0),
            ('B1', 1),
        ]

    def test_every_snippet_appears_once(self, tree):
        """No snippet is lost or repeated."""
        items = folders.flatten(tree)
        snippet_titles = [
            item.title for item in items if isinstance(item, SnippetItem)]
        assert sorted(snippet_titles) == sorted(
            s.title for s in sample_snippets())
        paths = [item.path for item in items if isinstance(item, FolderItem)]
        assert len(paths) == len(set(paths))


class TestPaths:
    """Folder path manipulation."""

    @pytest.mark.parametrize('path, parent', [
        ('frontend/react', 'frontend'),
        ('a/b/c', 'a/b'),
        ('frontend', ''),
        ('', ''),
    ])
    def test_parent_path(self, path, parent):
        """The last segment is removed."""
        assert folders.parent_path(path) == parent

    def test_find(self, tree):
        """Folders can be looked up by path."""
        node = folders.find(tree, 'backend/go')
        assert node is not None
        assert node.path == 'backend/go'
        assert folders.find(tree, '') is tree
        assert folders.find(tree, 'backend/python') is None
