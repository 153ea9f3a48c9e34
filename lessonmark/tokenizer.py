"""Tokenizer for the lesson markup dialect.

Syntax:
    <p bold center size='18' color='red' hint='...' importance='high'>  paragraph open
    </p>                      paragraph close
    </gap id='g1'>            fill-in-the-blank marker
    </n>                      line break

The grammar is flat: paragraphs do not nest. Tokenizing never fails; text
that only looks like a delimiter stays in the surrounding TextRun, and the
raw text of all tokens concatenated is always the original input.
"""

import re

from lessonmark.models import (
    GapMarker, LineBreak, ParagraphClose, ParagraphOpen, TextRun, Token,
)

_GAP_RE = re.compile(r"</gap id='(.*?)'>", re.IGNORECASE)
_BREAK_RE = re.compile(r"</n\s*>", re.IGNORECASE)
_CLOSE_RE = re.compile(r"</p>", re.IGNORECASE)
_QUOTES = "'\""


class _TagScanner:
    """Finds where <p ...> tags end within one document.

    Quoted values may contain `>` and backslash-escaped quotes. A quote that
    never closes does not protect anything: the tag then ends at the first
    `>`. Scans only ever move forward, so the scanner remembers the next `>`
    and, per quote character, the earliest opening that has no closing quote.
    """

    def __init__(self, content: str):
        self.content = content
        self._gt = content.find(">")
        self._unclosed: dict[str, int] = {}

    def _next_gt(self, i: int) -> int:
        if self._gt != -1 and self._gt < i:
            self._gt = self.content.find(">", i)
        return self._gt

    def _closing_quote(self, i: int) -> int | None:
        """Index of the quote closing the one at i, or None if it never closes."""
        content = self.content
        q = content[i]
        if i >= self._unclosed.get(q, len(content)):
            return None
        j = i + 1
        n = len(content)
        while j < n and content[j] != q:
            if content[j] == "\\":
                j += 1
            j += 1
        if j >= n:
            self._unclosed[q] = i
            return None
        return j

    def scan(self, start: int) -> int | None:
        """Return the index just past the `>` of a <p ...> tag at `start`."""
        content = self.content
        if content[start:start + 2].lower() != "<p":
            return None
        i = start + 2
        n = len(content)
        if i >= n or not (content[i] == ">" or content[i].isspace()):
            return None
        fallback = self._next_gt(i)
        if fallback == -1:
            return None
        while i < n:
            ch = content[i]
            if ch == ">":
                return i + 1
            if ch in _QUOTES:
                close = self._closing_quote(i)
                if close is None:
                    return fallback + 1
                i = close
            i += 1
        return fallback + 1


def _match_at(content: str, pos: int, scanner: _TagScanner) -> Token | None:
    m = _GAP_RE.match(content, pos)
    if m:
        return GapMarker(raw=m.group(0), id=m.group(1))
    m = _BREAK_RE.match(content, pos)
    if m:
        return LineBreak(raw=m.group(0))
    end = scanner.scan(pos)
    if end is not None:
        return ParagraphOpen(raw=content[pos:end])
    m = _CLOSE_RE.match(content, pos)
    if m:
        return ParagraphClose(raw=m.group(0))
    return None


def tokenize(content: str | None) -> list[Token]:
    """Split markup into an ordered list of tokens covering the whole input."""
    if not content:
        return []
    scanner = _TagScanner(content)
    tokens: list[Token] = []
    text_start = 0
    pos = content.find("<")
    while pos != -1:
        token = _match_at(content, pos, scanner)
        if token is None:
            pos = content.find("<", pos + 1)
            continue
        if pos > text_start:
            tokens.append(TextRun(raw=content[text_start:pos]))
        tokens.append(token)
        text_start = pos + len(token.raw)
        pos = content.find("<", text_start)
    if text_start < len(content):
        tokens.append(TextRun(raw=content[text_start:]))
    return tokens


def serialize(tokens: list[Token]) -> str:
    return "".join(t.raw for t in tokens)


def paragraph_ranges(tokens: list[Token]) -> list[tuple[int, int, bool]]:
    """Find paragraphs as (open_index, close_index, closed).

    An unclosed paragraph runs to the last token. A second open tag closes the
    previous paragraph at the token just before it. A close tag with no open
    paragraph is ignored.
    """
    ranges = []
    open_index = None
    for i, token in enumerate(tokens):
        if isinstance(token, ParagraphOpen):
            if open_index is not None:
                ranges.append((open_index, i - 1, False))
            open_index = i
        elif isinstance(token, ParagraphClose) and open_index is not None:
            ranges.append((open_index, i, True))
            open_index = None
    if open_index is not None:
        ranges.append((open_index, len(tokens) - 1, False))
    return ranges
