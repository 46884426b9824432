"""Filtering of snippets by a search query."""
from __future__ import annotations

import enum
import re
from typing import TYPE_CHECKING, Iterable

from rapidfuzz.distance import LCSseq

from .folders import SnippetItem
from .text import highlight_positions, highlight_substring

if TYPE_CHECKING:
    from .snippets import Snippet


class SearchMode(enum.Enum):
    """The ways in which a query can be matched."""

    SUBSTRING = 'substring'
    FUZZY = 'fuzzy'


class Matcher:                         # pylint: disable=too-few-public-methods
    """Simple plain-text, case insensitive matcher."""

    def __init__(self, pat: str):
        self.pat = pat
        self._re = re.compile(re.escape(pat), re.IGNORECASE)

    def search(self, text: str) -> bool:
        """Search for plain text."""
        return not self.pat or self._re.search(text) is not None


class FuzzyMatcher:                    # pylint: disable=too-few-public-methods
    """Case insensitive, ordered subsequence matcher.

    Every character of the pattern must appear in the text, in order, but
    not necessarily next to each other. The longest common subsequence of
    the pattern and the text decides this.
    """

    def __init__(self, pat: str):
        self.pat = pat
        self._chars = _fold(pat)

    def positions(self, text: str) -> list[int] | None:
        """Find the indices of the matching characters.

        :return:
            A list of code point indices into text or ``None`` if the text
            does not match.
        """
        chars = _fold(text)
        if LCSseq.similarity(self._chars, chars) < len(self._chars):
            return None
        found = []
        for op in LCSseq.opcodes(self._chars, chars):
            if op.tag == 'equal':
                found.extend(range(op.dest_start, op.dest_end))
        return found

    def search(self, text: str) -> bool:
        """Test whether text matches."""
        return self.positions(text) is not None


def _fold(text: str) -> list[str]:
    # One entry per code point, so indices stay aligned with the text.
    return [ch.lower() for ch in text]


def substring_match(snippet: Snippet, matcher: Matcher) -> bool:
    """Test a snippet against a substring query."""
    fields = (snippet.title, snippet.category, snippet.content, *snippet.tags)
    return any(matcher.search(text) for text in fields)


def apply(
        snippets: Iterable[Snippet], query: str, mode: SearchMode,
    ) -> list[SnippetItem]:
    """Filter snippets to a flat list of sidebar items.

    The order of the input is preserved. Display titles are marked up to show
    the matching parts.
    """
    q = query.strip()
    items = []
    if mode is SearchMode.FUZZY:
        fuzzy = FuzzyMatcher(q)
        for s in snippets:
            positions = fuzzy.positions(s.title)
            if positions is not None:
                title = highlight_positions(s.title, positions)
            elif fuzzy.search(s.category):
                title = s.title
            else:
                continue
            items.append(SnippetItem(title, s.category, 0, s))
    else:
        matcher = Matcher(q)
        for s in snippets:
            if substring_match(s, matcher):
                title = highlight_substring(s.title, q)
                items.append(SnippetItem(title, s.category, 0, s))
    return items
