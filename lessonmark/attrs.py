"""Paragraph attribute extraction from a raw <p ...> tag."""

import re
from dataclasses import dataclass

from lessonmark.models import ParagraphAttrs

# Palette readable on both light and dark backgrounds.
COLOR_MAP = {
    "primary": "hsl(var(--primary))",
    "red": "#ef4444",
    "green": "#10b981",
    "blue": "#3b82f6",
    "yellow": "#eab308",
    "orange": "#f97316",
    "purple": "#8b5cf6",
    "gray": "#6b7280",
}

FLAGS = ("bold", "italic", "underline")
ALIGNMENTS = ("left", "center", "right")
IMPORTANCE_LEVELS = ("low", "medium", "high")

_SIZE_RE = re.compile(r'\s*([0-9]{1,6})(?![0-9])')
_LEGACY_SIZE_RE = re.compile(r'[0-9]{1,6}')
_ESCAPE_RE = re.compile(r'\\(.)', re.DOTALL)


@dataclass
class TagPart:
    """A bare word (value is None) or name=value pair inside a <p ...> tag."""
    name: str
    value: str | None
    start: int            # span of the whole part within the raw tag
    end: int
    quote: str = ""

    @property
    def key(self) -> str:
        return self.name.lower()


def _scan_quoted(raw: str, i: int, end: int) -> int:
    """Given raw[i] is a quote, return the index of its closing quote (or end)."""
    q = raw[i]
    i += 1
    while i < end and raw[i] != q:
        if raw[i] == "\\":
            i += 1
        i += 1
    return min(i, end)


def _body_bounds(raw_tag: str) -> tuple[int, int]:
    start = 2 if raw_tag[:2].lower() == "<p" else 0
    end = len(raw_tag) - 1 if raw_tag.endswith(">") else len(raw_tag)
    return start, max(start, end)


def _is_word_char(ch: str) -> bool:
    return ch.isalnum() or ch in "-_"


def split_tag(raw_tag: str) -> list[TagPart]:
    """Split the inside of a paragraph tag into words and attribute pairs.

    Quote aware: `hint='a > b'` and `hint="it's"` are single parts, and a
    backslash escapes the next character inside a quoted value. Outside
    values, whitespace and punctuation both separate words, so
    `<p bold,center>` holds the words `bold` and `center`.
    """
    parts = []
    i, end = _body_bounds(raw_tag)
    while i < end:
        ch = raw_tag[i]
        start = i
        if ch in "'\"":
            close = _scan_quoted(raw_tag, i, end)
            if close >= end:
                # A lone apostrophe; only the character itself is skipped.
                i += 1
                continue
            # Stray quoted text with no attribute name; skip it whole.
            i = close + 1
            parts.append(TagPart(name="", value=None, start=start, end=i))
            continue
        if not (_is_word_char(ch) or ch == "="):
            i += 1
            continue
        while i < end and _is_word_char(raw_tag[i]):
            i += 1
        name = raw_tag[start:i]
        if i < end and raw_tag[i] == "=":
            i += 1
            if i < end and raw_tag[i] in "'\"":
                quote = raw_tag[i]
                close = _scan_quoted(raw_tag, i, end)
                value = _ESCAPE_RE.sub(r'\1', raw_tag[i + 1:close])
                i = min(close + 1, end)
                parts.append(TagPart(name, value, start, i, quote))
            else:
                vstart = i
                while i < end and not raw_tag[i].isspace():
                    i += 1
                parts.append(TagPart(name, raw_tag[vstart:i], start, i))
        else:
            parts.append(TagPart(name=name, value=None, start=start, end=i))
    return parts


def _first_pairs(parts: list[TagPart]) -> dict[str, TagPart]:
    pairs: dict[str, TagPart] = {}
    for p in parts:
        if p.value is not None and p.key not in pairs:
            pairs[p.key] = p
    return pairs


def legacy_size_part(parts: list[TagPart]) -> TagPart | None:
    """A bare integer word, honoured as a size only when nothing else could own it."""
    pairs = _first_pairs(parts)
    if "size" in pairs or "color" in pairs or "hint" in pairs:
        return None
    for p in parts:
        if p.value is None and _LEGACY_SIZE_RE.fullmatch(p.name):
            return p
    return None


def resolve_color(value: str, colors: dict | None = None) -> str | None:
    value = value.strip()
    if not value:
        return None
    key = value.lower()
    if colors and key in colors:
        return colors[key]
    return COLOR_MAP.get(key, value)


def extract_attrs(raw_tag: str, colors: dict | None = None) -> ParagraphAttrs:
    """Derive ParagraphAttrs from a raw paragraph tag. Never raises."""
    parts = split_tag(raw_tag or "")
    words = [p.key for p in parts if p.value is None]
    pairs = _first_pairs(parts)

    align = "left"
    for w in words:
        if w in ALIGNMENTS:
            align = w

    font_size = None
    if "size" in pairs:
        m = _SIZE_RE.match(pairs["size"].value)
        if m:
            font_size = int(m.group(1))
    else:
        legacy = legacy_size_part(parts)
        if legacy is not None:
            font_size = int(legacy.name)

    color = resolve_color(pairs["color"].value, colors) if "color" in pairs else None
    hint = pairs["hint"].value if "hint" in pairs else None
    importance = None
    if "importance" in pairs:
        level = pairs["importance"].value.strip().lower()
        if level in IMPORTANCE_LEVELS:
            importance = level

    return ParagraphAttrs(
        bold="bold" in words,
        italic="italic" in words,
        underline="underline" in words,
        align=align,
        font_size_px=font_size,
        color=color,
        hint=hint or None,
        importance=importance,
    )
