"""Text highlighting support.

We 'smuggle' highlight information through plain strings by surrounding the
highlighted parts with specific Unicode half brackets. They are extremely
unlikely to appear in snippet text. There are two independent pairs:

- match markers, for text that matches the current search query.
- keyword markers, for language keywords.

Each marker toggles its highlight on or off, so the two kinds can overlap
freely. The function `render_text` converts marked up text into a rich `Text`
instance.
"""
from __future__ import annotations

import re
from typing import Iterable

from rich.errors import StyleSyntaxError
from rich.style import Style
from rich.text import Text

MATCH_ON = '⸢'
MATCH_OFF = '⸣'
KEYWORD_ON = '⸤'
KEYWORD_OFF = '⸥'
MARKERS = MATCH_ON + MATCH_OFF + KEYWORD_ON + KEYWORD_OFF
re_markers = re.compile(f'[{MARKERS}]')

_js_words = (
    'const let var function return if else for while switch case break await'
    ' async new class try catch throw')
_go_words = (
    'func package import return if else for range switch case break go defer'
    ' type struct interface map chan var const')
_sql_words = (
    'SELECT FROM WHERE AND OR INSERT INTO VALUES UPDATE SET DELETE JOIN LEFT'
    ' RIGHT ON GROUP BY ORDER LIMIT')


def _word_pattern(words: str, flags: int = 0) -> re.Pattern[str]:
    return re.compile(r'\b(?:' + '|'.join(words.split()) + r')\b', flags)


re_js = _word_pattern(_js_words)
re_go = _word_pattern(_go_words)
re_sql = _word_pattern(_sql_words, re.IGNORECASE)
keyword_patterns: dict[str, re.Pattern[str]] = {
    'js': re_js,
    'javascript': re_js,
    'ts': re_js,
    'typescript': re_js,
    'go': re_go,
    'golang': re_go,
    'sql': re_sql,
}
upper_case_languages = {'sql'}


def strip_markup(text: str) -> str:
    """Remove all highlight markers."""
    return re_markers.sub('', text)


def _wrap_runs(text: str, flags: Iterable[bool], on: str, off: str) -> str:
    parts = []
    active = False
    for ch, flag in zip(text, flags):
        if flag != active:
            parts.append(on if flag else off)
            active = flag
        parts.append(ch)
    if active:
        parts.append(off)
    return ''.join(parts)


def highlight_substring(text: str, query: str) -> str:
    """Mark every occurrence of query within text.

    Matching ignores case and is left to right and non-overlapping. An empty
    query leaves the text unchanged.
    """
    if not query:
        return text
    pat = re.compile(re.escape(query), re.IGNORECASE)
    return pat.sub(lambda m: f'{MATCH_ON}{m.group(0)}{MATCH_OFF}', text)


def highlight_positions(text: str, positions: Iterable[int]) -> str:
    """Mark the characters at the given indices.

    Indices are code point offsets into text. Those out of range are
    ignored.
    """
    wanted = set(positions)
    if not wanted:
        return text
    flags = (i in wanted for i in range(len(text)))
    return _wrap_runs(text, flags, MATCH_ON, MATCH_OFF)


def highlight_keywords(text: str, language: str) -> str:
    """Mark the keywords of a language within a line of text.

    Any match markers already present are kept. Keywords for languages that
    compare them without case are shown in upper case. Unknown languages
    leave the text unchanged.
    """
    lang = language.strip().lower()
    pat = keyword_patterns.get(lang)
    if pat is None:
        return text

    # Split the line into plain characters plus their match flags.
    chars: list[str] = []
    matched: list[bool] = []
    in_match = False
    for ch in text:
        if ch == MATCH_ON:
            in_match = True
        elif ch == MATCH_OFF:
            in_match = False
        elif ch not in (KEYWORD_ON, KEYWORD_OFF):
            chars.append(ch)
            matched.append(in_match)

    plain = ''.join(chars)
    keyword = [False] * len(plain)
    for m in pat.finditer(plain):
        start, end = m.span()
        keyword[start:end] = [True] * (end - start)
        if lang in upper_case_languages:
            chars[start:end] = list(m.group(0).upper())
    if not any(keyword):
        return text

    parts = []
    state = (False, False)
    for ch, flags in zip(chars, zip(matched, keyword)):
        parts.append(_toggles(state, flags))
        parts.append(ch)
        state = flags
    parts.append(_toggles(state, (False, False)))
    return ''.join(parts)


def _toggles(old: tuple[bool, bool], new: tuple[bool, bool]) -> str:
    s = ''
    if old[0] != new[0]:
        s += MATCH_ON if new[0] else MATCH_OFF
    if old[1] != new[1]:
        s += KEYWORD_ON if new[1] else KEYWORD_OFF
    return s


def force_style(st: str | Style | None) -> Style:
    """Convert any string to a Style instance."""
    if st is None:
        return Style()
    if isinstance(st, str):
        try:
            return Style.parse(st)
        except StyleSyntaxError:
            return Style()
    return st


def render_text(
        markup: str,
        *,
        style: str | Style | None = None,
        match_style: str | Style = 'bold black on yellow',
        keyword_style: str | Style = 'bold magenta',
    ) -> Text:
    """Render specially marked up text.

    Text that is both a match and a keyword gets both styles combined.
    """
    base = force_style(style)
    styles = {
        (False, False): base,
        (True, False): base + force_style(match_style),
        (False, True): base + force_style(keyword_style),
        (True, True): (
            base + force_style(keyword_style) + force_style(match_style)),
    }
    text = Text(style=base)
    in_match = in_keyword = False
    start = 0
    for m in re_markers.finditer(markup):
        if m.start() > start:
            text.append(markup[start:m.start()], styles[in_match, in_keyword])
        marker = m.group(0)
        if marker in (MATCH_ON, MATCH_OFF):
            in_match = marker == MATCH_ON
        else:
            in_keyword = marker == KEYWORD_ON
        start = m.end()
    if start < len(markup):
        text.append(markup[start:], styles[in_match, in_keyword])
    return text
