"""Format commands: rewrite one paragraph's open tag in place.

Only the text of the target <p ...> token changes; every other token is
serialized exactly as it was read, so the rest of the document stays
byte-identical.
"""

import logging

from lessonmark.attrs import ALIGNMENTS, FLAGS, TagPart, legacy_size_part, split_tag
from lessonmark.models import ParagraphOpen, Token
from lessonmark.tokenizer import serialize, tokenize

log = logging.getLogger(__name__)

FORMAT_COMMANDS = FLAGS + ALIGNMENTS + ("color", "size")


def _closing_at(raw_tag: str) -> int:
    return len(raw_tag) - 1 if raw_tag.endswith(">") else len(raw_tag)


def _is_separator(ch: str) -> bool:
    return not (ch.isalnum() or ch.isspace() or ch in "-_='\"<>")


def _remove(raw_tag: str, parts: list[TagPart]) -> str:
    """Cut parts out of the tag with the separator that joins each to its neighbours.

    A trailing `,` (or similar) goes with the part; otherwise the whitespace
    and separators in front of it do.
    """
    for part in sorted(parts, key=lambda p: p.start, reverse=True):
        start, end = part.start, part.end
        limit = _closing_at(raw_tag)
        if end < limit and _is_separator(raw_tag[end]):
            while end < limit and _is_separator(raw_tag[end]):
                end += 1
        else:
            while start > 0 and (raw_tag[start - 1].isspace() or _is_separator(raw_tag[start - 1])):
                start -= 1
        raw_tag = raw_tag[:start] + raw_tag[end:]
    return raw_tag


def _append(raw_tag: str, text: str) -> str:
    at = _closing_at(raw_tag)
    return raw_tag[:at].rstrip() + " " + text + raw_tag[at:]


def _quote(value: str) -> str:
    value = value.replace("\\", "\\\\")
    if "'" not in value:
        return f"'{value}'"
    if '"' not in value:
        return f'"{value}"'
    return "'" + value.replace("'", "\\'") + "'"


def _set_pair(raw_tag: str, name: str, value) -> str:
    value = "" if value is None else str(value)
    matches = [p for p in split_tag(raw_tag) if p.value is not None and p.key == name]
    if not value:
        return _remove(raw_tag, matches)
    pair = f"{name}={_quote(value)}"
    if not matches:
        return _append(raw_tag, pair)
    first, rest = matches[0], matches[1:]
    raw_tag = _remove(raw_tag, rest)
    return raw_tag[:first.start] + pair + raw_tag[first.end:]


def _promote_legacy_size(raw_tag: str) -> str:
    legacy = legacy_size_part(split_tag(raw_tag))
    if legacy is None:
        return raw_tag
    return raw_tag[:legacy.start] + f"size='{legacy.name}'" + raw_tag[legacy.end:]


def rewrite_tag(raw_tag: str, command: str, value=None) -> str:
    """Apply one format command to a raw <p ...> tag and return the new tag."""
    if command not in FORMAT_COMMANDS:
        raise ValueError(f"Unknown format command: {command!r}")
    parts = split_tag(raw_tag)
    words = [p for p in parts if p.value is None]

    if command in FLAGS:
        present = [p for p in words if p.key == command]
        if present:
            return _remove(raw_tag, present)
        return _append(raw_tag, command)

    if command in ALIGNMENTS:
        raw_tag = _remove(raw_tag, [p for p in words if p.key in ALIGNMENTS])
        return _append(raw_tag, command)

    if command == "size":
        legacy = legacy_size_part(parts)
        if legacy is not None:
            raw_tag = _remove(raw_tag, [legacy])
        return _set_pair(raw_tag, "size", value)

    # color: a legacy bare size would stop being read once color= is present
    raw_tag = _promote_legacy_size(raw_tag)
    return _set_pair(raw_tag, "color", value)


def apply_format(tokens: list[Token], open_index: int, command: str, value=None) -> str:
    """Rewrite tokens[open_index] with a format command and serialize everything.

    An index that does not point at a paragraph open tag leaves the document
    unchanged.
    """
    if command not in FORMAT_COMMANDS:
        raise ValueError(f"Unknown format command: {command!r}")
    if not 0 <= open_index < len(tokens) or not isinstance(tokens[open_index], ParagraphOpen):
        log.debug("apply_format(%s): token %d is not a paragraph open tag", command, open_index)
        return serialize(tokens)
    new_tag = rewrite_tag(tokens[open_index].raw_tag, command, value)
    return "".join(new_tag if i == open_index else t.raw for i, t in enumerate(tokens))


def format_markup(content: str, open_index: int, command: str, value=None) -> str:
    return apply_format(tokenize(content), open_index, command, value)
