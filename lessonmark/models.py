"""Shared data classes: tokens, paragraph attributes, segments and render nodes."""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

log = logging.getLogger(__name__)


# ── Tokens ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TextRun:
    raw: str

    @property
    def content(self) -> str:
        return self.raw


@dataclass(frozen=True)
class ParagraphOpen:
    raw: str

    @property
    def raw_tag(self) -> str:
        return self.raw

    @property
    def attrs(self) -> "ParagraphAttrs":
        from lessonmark.attrs import extract_attrs
        return extract_attrs(self.raw)


@dataclass(frozen=True)
class ParagraphClose:
    raw: str = "</p>"


@dataclass(frozen=True)
class GapMarker:
    raw: str
    id: str


@dataclass(frozen=True)
class LineBreak:
    raw: str = "</n>"


Token = TextRun | ParagraphOpen | ParagraphClose | GapMarker | LineBreak


# ── Paragraphs ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class ParagraphAttrs:
    bold: bool = False
    italic: bool = False
    underline: bool = False
    align: str = "left"              # "left" | "center" | "right"
    font_size_px: int | None = None
    color: str | None = None
    hint: str | None = None
    importance: str | None = None    # "low" | "medium" | "high"

    def to_dict(self) -> dict:
        return {
            "bold": self.bold, "italic": self.italic, "underline": self.underline,
            "align": self.align, "font_size_px": self.font_size_px,
            "color": self.color, "hint": self.hint, "importance": self.importance,
        }


@dataclass
class Segment:
    """One rendered paragraph and where it sits in the token sequence."""
    open_index: int
    close_index: int
    attrs: ParagraphAttrs
    raw: str              # open tag + content + close tag (if present), verbatim
    text: str = ""        # plain text, for click callbacks
    closed: bool = True   # False when the paragraph was closed implicitly
    section_id: str | None = None

    @property
    def id(self) -> str:
        span = f"{self.open_index}-{self.close_index}"
        if self.section_id is None:
            return span
        return f"{self.section_id}:{span}"


# ── Render nodes ────────────────────────────────────────────────────

@dataclass
class TextNode:
    text: str
    inline: list = field(default_factory=list)
    index: int = 0


@dataclass
class GapNode:
    gap_id: str
    content: Any = None
    index: int = 0


@dataclass
class SpacerNode:
    height: int = 16
    index: int = 0


@dataclass
class SegmentNode:
    segment: Segment
    children: list = field(default_factory=list)


class Pending:
    """Placeholder for gap content that is still being loaded elsewhere.

    The loader calls fulfil() once the value is ready. Listeners are invoked
    at most once; cancel() drops them so a late result goes nowhere.
    """

    def __init__(self, placeholder: Any = None):
        self.placeholder = placeholder
        self.value: Any = None
        self.done = False
        self._listeners: list[Callable[["Pending"], None]] = []

    def add_listener(self, fn: Callable[["Pending"], None]):
        if self.done:
            fn(self)
        else:
            self._listeners.append(fn)

    def fulfil(self, value: Any):
        if self.done:
            return
        self.done = True
        self.value = value
        listeners, self._listeners = self._listeners, []
        for fn in listeners:
            fn(self)

    def cancel(self):
        if self._listeners:
            log.debug("Cancelled %d listener(s) on pending content", len(self._listeners))
        self._listeners = []
