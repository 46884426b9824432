"""Loading and saving snippets.

Each snippet is a JSON file, stored in a directory tree that mirrors the
snippet's category.
"""
from __future__ import annotations
# pylint: disable=redefined-outer-name
# pylint: disable=no-self-use

import json
from datetime import datetime, timezone

import pytest

from snipster.snippets import (
    FIELD_ORDER, InvalidPathError, Snippet, SnippetExistsError,
    SnippetMissingError, StoreError, format_time, parse_time, slugify,
    split_category)


def write_json(path, data):
    """Write a raw snippet file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding='utf-8')


class TestIds:
    """Snippet ids are derived from titles."""

    def test_slug_is_lower_case_with_hyphens(self):
        """Runs of non-alphanumeric characters become single hyphens."""
        assert slugify('My Snippet!') == 'my-snippet'
        assert slugify('  Hello   World  ') == 'hello-world'
        assert slugify('Express: Error/Handler') == 'express-error-handler'

    def test_empty_slug_uses_a_timestamp(self):
        """A title without usable characters still gives an id."""
        slug = slugify('!!!')
        assert slug.startswith('snippet-')
        assert slug[len('snippet-'):].isdigit()

    def test_category_segments_are_trimmed(self):
        """Empty segments are dropped and the others stripped."""
        assert split_category(' a / /b ') == ['a', 'b']
        assert split_category('') == []


class TestTimestamps:
    """Timestamps are ISO-8601 UTC strings."""

    def test_format_uses_z_suffix(self):
        """UTC is written as a trailing Z."""
        dt = datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc)
        assert format_time(dt) == '2024-03-01T12:30:00Z'

    def test_nanosecond_fractions_are_accepted(self):
        """Up to nine fractional digits are understood."""
        dt = parse_time('2024-03-01T12:30:00.123456789Z')
        assert dt == datetime(
            2024, 3, 1, 12, 30, 0, 123456, tzinfo=timezone.utc)

    def test_short_fractions_are_accepted(self):
        """A fraction with fewer than six digits is padded."""
        dt = parse_time('2024-03-01T12:30:00.5+00:00')
        assert dt.microsecond == 500000

    def test_naive_times_are_utc(self):
        """A time without an offset is taken to be UTC."""
        dt = parse_time('2024-03-01T12:30:00')
        assert dt.tzinfo is timezone.utc

    def test_bad_values_give_none(self):
        """Unparseable values are reported as None."""
        assert parse_time('yesterday') is None
        assert parse_time('') is None
        assert parse_time(42) is None


class TestRecords:
    """Conversion to and from the JSON record."""

    def test_fields_are_written_in_a_fixed_order(self):
        """The JSON keys always appear in the same order."""
        snippet = Snippet('Title', 'a/b', 'text', 'js', ['x'], id='title')
        assert tuple(snippet.to_json()) == FIELD_ORDER

    def test_missing_fields_take_defaults(self):
        """Absent fields become empty values."""
        snippet = Snippet.from_json({'title': 'Only a title'})
        assert snippet.title == 'Only a title'
        assert snippet.category == ''
        assert snippet.tags == []
        assert snippet.created_at is not None
        assert snippet.updated_at == snippet.created_at

    def test_zero_timestamps_are_replaced(self):
        """The zero time written by some tools is treated as missing."""
        before = datetime.now(timezone.utc)
        snippet = Snippet.from_json({
            'title': 'T',
            'created_at': '0001-01-01T00:00:00Z',
            'updated_at': '0001-01-01T00:00:00Z',
        })
        assert snippet.created_at >= before
        assert snippet.updated_at == snippet.created_at

    def test_wrong_types_are_rejected(self):
        """A field of the wrong type is a decoding error."""
        with pytest.raises(ValueError):
            Snippet.from_json({'title': 3})
        with pytest.raises(ValueError):
            Snippet.from_json({'title': 'T', 'tags': 'a, b'})
        with pytest.raises(ValueError):
            Snippet.from_json(['not', 'an', 'object'])


class TestCreate:
    """Creating new snippet files."""

    def test_create_assigns_id_path_and_times(self, store, store_dir):
        """A new snippet is given an id, a location and timestamps."""
        snippet = store.create(Snippet(
            'Error Handler', 'backend/express', 'code', 'js', ['node']))
        assert snippet.id == 'error-handler'
        assert snippet.path == (
            store_dir / 'backend' / 'express' / 'error-handler.json')
        assert snippet.path.is_file()
        assert snippet.created_at is not None
        assert snippet.updated_at >= snippet.created_at

    def test_file_is_indented_json(self, store):
        """The file is readable JSON, with a trailing newline."""
        snippet = store.create(Snippet('Plain', 'misc', 'ünïcode'))
        text = snippet.path.read_text(encoding='utf-8')
        assert text.startswith('{\n  "id": "plain",\n')
        assert text.endswith('}\n')
        assert 'ünïcode' in text

    def test_uncategorised_snippets_live_at_the_root(self, store, store_dir):
        """An empty category stores the file directly under the root."""
        snippet = store.create(Snippet('Loose', '', 'x'))
        assert snippet.path == store_dir / 'loose.json'

    def test_created_snippets_load_back_unchanged(self, populated_store):
        """Everything written can be read back."""
        loaded = populated_store.load_all()
        assert len(loaded) == 7
        by_title = {s.title: s for s in loaded}
        hooks = by_title['React Hooks']
        assert hooks.category == 'frontend/react'
        assert hooks.language == 'js'
        assert hooks.tags == ['hooks']
        assert hooks.content.splitlines()[1] == 'return count'
        assert hooks.path.name == 'react-hooks.json'
        assert populated_store.load_errors == []

    def test_existing_file_is_not_overwritten(self, store):
        """Creating a snippet with a clashing id fails."""
        store.create(Snippet('Twin', 'a', 'first'))
        with pytest.raises(SnippetExistsError, match='snippet exists:'):
            store.create(Snippet('Twin', 'a', 'second'))
        assert store.load_all()[0].content == 'first'

    def test_same_title_in_another_category_is_fine(self, store):
        """Ids only need to be unique within a folder."""
        store.create(Snippet('Twin', 'a', 'first'))
        store.create(Snippet('Twin', 'b', 'second'))
        assert len(store.load_all()) == 2

    def test_path_escapes_are_rejected(self, store):
        """A category cannot be used to write outside the store."""
        with pytest.raises(InvalidPathError):
            store.create(Snippet('Sneaky', '../outside', 'x'))
        with pytest.raises(InvalidPathError):
            store.create(Snippet('Sneaky', 'ok', 'x', id='a\\b'))


class TestUpdate:
    """Rewriting existing snippet files."""

    def test_update_keeps_location_and_creation_time(self, populated_store):
        """An updated snippet stays where it was, even for a new category."""
        snippet = next(
            s for s in populated_store.load_all() if s.title == 'Go Handler')
        path = snippet.path
        created = snippet.created_at
        snippet.category = 'elsewhere'
        snippet.content = 'package main'
        populated_store.update(snippet)

        assert snippet.path == path
        reloaded = next(
            s for s in populated_store.load_all() if s.title == 'Go Handler')
        assert reloaded.content == 'package main'
        assert reloaded.category == 'elsewhere'
        assert reloaded.created_at == created
        assert reloaded.updated_at >= created


class TestDelete:
    """Removing snippet files."""

    def test_delete_removes_the_file(self, populated_store):
        """The file is gone after deletion."""
        snippet = populated_store.load_all()[0]
        populated_store.delete(snippet)
        assert not snippet.path.exists()
        assert len(populated_store.load_all()) == 6

    def test_deleting_twice_fails(self, populated_store):
        """A missing file is reported."""
        snippet = populated_store.load_all()[0]
        populated_store.delete(snippet)
        with pytest.raises(SnippetMissingError) as info:
            populated_store.delete(snippet)
        assert isinstance(info.value, StoreError)


class TestLoading:
    """Loading the whole store."""

    def test_missing_root_is_empty(self, store):
        """A store that does not exist yet simply has no snippets."""
        assert store.load_all() == []
        assert store.load_errors == []

    def test_empty_root_is_empty(self, store, store_dir):
        """An existing directory without snippet files has no snippets."""
        store_dir.mkdir()
        (store_dir / 'notes.txt').write_text('ignored', encoding='utf-8')
        (store_dir / 'empty').mkdir()
        assert store.load_all() == []
        assert store.load_errors == []

    def test_bad_files_are_skipped_and_recorded(self, store, store_dir):
        """Unreadable files do not prevent others from loading."""
        write_json(store_dir / 'good.json', {'id': 'good', 'title': 'Good'})
        bad = store_dir / 'sub' / 'bad.json'
        bad.parent.mkdir(parents=True)
        bad.write_text('{not json', encoding='utf-8')
        write_json(store_dir / 'list.json', [1, 2])

        loaded = store.load_all()
        assert [s.title for s in loaded] == ['Good']
        assert sorted(p.name for p, _ in store.load_errors) == [
            'bad.json', 'list.json']

    def test_only_json_files_are_loaded(self, store, store_dir):
        """Other files are ignored, whatever the case of the extension."""
        write_json(store_dir / 'upper.JSON', {'title': 'Upper'})
        (store_dir / 'notes.txt').write_text('hello', encoding='utf-8')
        assert [s.title for s in store.load_all()] == ['Upper']
        assert store.load_errors == []

    def test_errors_are_reset_on_reload(self, store, store_dir):
        """Each load reports only its own failures."""
        bad = store_dir / 'bad.json'
        bad.parent.mkdir(parents=True)
        bad.write_text('', encoding='utf-8')
        store.load_all()
        assert len(store.load_errors) == 1
        bad.unlink()
        store.load_all()
        assert store.load_errors == []
