"""Snippet records and their on-disk store.

Each snippet lives in its own JSON file, placed in a directory tree that
mirrors its category. For example, a snippet with the category
'backend/express' and the id 'error-handler' is stored as::

    <root>/backend/express/error-handler.json

The record holds the fields id, title, category, language, tags, content,
created_at and updated_at. Timestamps are ISO-8601 UTC strings. The location
of the file is not part of the record; it is assigned by the store.
"""
from __future__ import annotations

import json
import re
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from loguru import logger

r_non_slug = re.compile(r'[^a-z0-9]+')
r_fraction = re.compile(r'\.(\d+)')
FIELD_ORDER = (
    'id', 'title', 'category', 'language', 'tags', 'content', 'created_at',
    'updated_at')


class StoreError(Exception):
    """Base for all errors raised by the snippet store."""


class SnippetExistsError(StoreError):
    """A new snippet would overwrite an existing file."""


class SnippetMissingError(StoreError):
    """A snippet's file could not be found."""


class InvalidPathError(StoreError):
    """A category or id cannot be mapped to a location within the store."""


def utc_now() -> datetime:
    """Provide the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_time(dt: datetime) -> str:
    """Format a datetime as an ISO-8601 UTC string."""
    return dt.astimezone(timezone.utc).isoformat().replace('+00:00', 'Z')


def parse_time(text: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp.

    Timestamps written by other tools may use a trailing 'Z' and carry up to
    nine fractional digits, so both are normalised first.

    :return: An aware datetime or ``None`` if the text cannot be parsed.
    """
    if not isinstance(text, str) or not text.strip():
        return None
    s = text.strip()
    if s[-1] in 'Zz':
        s = s[:-1] + '+00:00'
    s = r_fraction.sub(lambda m: '.' + (m.group(1) + '000000')[:6], s, count=1)
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def slugify(title: str) -> str:
    """Derive a file-system friendly id from a title.

    >>> slugify('My Snippet!')
    'my-snippet'
    """
    slug = r_non_slug.sub('-', title.strip().lower()).strip('-')
    return slug or f'snippet-{int(time.time())}'


def split_category(category: str) -> list[str]:
    """Split a category into its trimmed, non-empty segments."""
    return [seg.strip() for seg in category.split('/') if seg.strip()]


@dataclass
class Snippet:
    """A single snippet record."""

    title: str
    category: str = ''
    content: str = ''
    language: str = ''
    tags: list[str] = field(default_factory=list)
    id: str = ''
    created_at: datetime | None = None
    updated_at: datetime | None = None
    path: Path | None = field(default=None, compare=False)

    def to_json(self) -> dict[str, Any]:
        """Convert to the stored JSON representation."""
        data = {
            'id': self.id,
            'title': self.title,
            'category': self.category,
            'language': self.language,
            'tags': list(self.tags),
            'content': self.content,
            'created_at': format_time(self.created_at or utc_now()),
            'updated_at': format_time(self.updated_at or utc_now()),
        }
        return {name: data[name] for name in FIELD_ORDER}

    @classmethod
    def from_json(cls, data: Any, path: Path | None = None) -> Snippet:
        """Create a Snippet from a decoded JSON object.

        Missing or zero timestamps are replaced by the current time.

        :raise ValueError: If the data is not a JSON object or a field has the
            wrong type.
        """
        if not isinstance(data, dict):
            msg = 'snippet file does not contain a JSON object'
            raise ValueError(msg)

        def text_field(name: str) -> str:
            value = data.get(name) or ''
            if not isinstance(value, str):
                msg = f'field {name!r} is not a string'
                raise ValueError(msg)
            return value

        tags = data.get('tags') or []
        if not isinstance(tags, list) or not all(
                isinstance(tag, str) for tag in tags):
            msg = "field 'tags' is not a list of strings"
            raise ValueError(msg)

        created = parse_time(data.get('created_at'))
        if created is None or created.year <= 1:
            created = utc_now()
        updated = parse_time(data.get('updated_at'))
        if updated is None or updated.year <= 1:
            updated = created
        return cls(
            id=text_field('id'),
            title=text_field('title'),
            category=text_field('category'),
            language=text_field('language'),
            tags=list(tags),
            content=text_field('content'),
            created_at=created,
            updated_at=updated,
            path=path,
        )


class Store:
    """A directory tree of snippet JSON files."""

    def __init__(self, root: Path | str):
        self.root = Path(root)
        self.load_errors: list[tuple[Path, str]] = []

    def load_all(self) -> list[Snippet]:
        """Load every snippet below the root directory.

        A missing root yields an empty list. Files that cannot be read or
        decoded are skipped; each failure is logged and recorded in
        `load_errors`.
        """
        self.load_errors = []
        if not self.root.is_dir():
            logger.debug('Snippet root {} does not exist', self.root)
            return []

        loaded = []
        for path in sorted(self.root.rglob('*')):
            if not path.name.lower().endswith('.json') or not path.is_file():
                continue
            try:
                data = json.loads(path.read_text(encoding='utf-8'))
                loaded.append(Snippet.from_json(data, path))
            except (OSError, ValueError) as exc:
                logger.warning('Skipping unreadable snippet {}: {}', path, exc)
                self.load_errors.append((path, str(exc)))
        logger.debug('Loaded {} snippets from {}', len(loaded), self.root)
        return loaded

    def path_for(self, snippet: Snippet) -> Path:
        """Compute where a snippet should be stored."""
        segments = split_category(snippet.category)
        for name in (*segments, snippet.id):
            if name in ('.', '..') or '\\' in name or '/' in name:
                msg = f'invalid path component: {name!r}'
                raise InvalidPathError(msg)
        return self.root.joinpath(*segments, f'{snippet.id}.json')

    def create(self, snippet: Snippet) -> Snippet:
        """Write a new snippet.

        The id is derived from the title when absent.

        :raise SnippetExistsError: If the target file already exists.
        """
        if not snippet.id.strip():
            snippet.id = slugify(snippet.title)
        now = utc_now()
        if snippet.created_at is None:
            snippet.created_at = now
        snippet.updated_at = now

        path = self.path_for(snippet)
        if path.exists():
            msg = f'snippet exists: {path}'
            raise SnippetExistsError(msg)
        self._write(path, snippet)
        snippet.path = path
        logger.info('Created snippet {}', path)
        return snippet

    def update(self, snippet: Snippet) -> Snippet:
        """Rewrite an existing snippet, keeping its current location."""
        if not snippet.id.strip():
            snippet.id = slugify(snippet.title)
        snippet.updated_at = utc_now()
        if snippet.created_at is None:
            snippet.created_at = snippet.updated_at
        path = snippet.path or self.path_for(snippet)
        self._write(path, snippet)
        snippet.path = path
        logger.info('Updated snippet {}', path)
        return snippet

    def delete(self, snippet: Snippet) -> None:
        """Remove a snippet's file.

        :raise SnippetMissingError: If there is no such file.
        """
        path = snippet.path or self.path_for(snippet)
        try:
            path.unlink()
        except FileNotFoundError:
            msg = f'snippet not found: {path}'
            raise SnippetMissingError(msg) from None
        except OSError as exc:
            msg = f'cannot delete {path}: {exc.strerror or exc}'
            raise StoreError(msg) from exc
        logger.info('Deleted snippet {}', path)

    @staticmethod
    def _write(path: Path, snippet: Snippet) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            text = json.dumps(snippet.to_json(), indent=2, ensure_ascii=False)
            path.write_text(text + '\n', encoding='utf-8')
        except OSError as exc:
            msg = f'cannot write {path}: {exc.strerror or exc}'
            raise StoreError(msg) from exc
