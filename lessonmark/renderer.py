"""Segment renderer: tokens -> render tree plus paragraph segments.

Paragraph boundaries follow tokenizer.paragraph_ranges, so an unclosed <p>
and a <p> that opens before the previous one closed are handled the same way
everywhere. Gap markers are resolved through the caller's on_gap_found,
called exactly once per marker, in document order.
"""

from dataclasses import dataclass, field
from typing import Any, Callable

from lessonmark.attrs import extract_attrs
from lessonmark.inline import parse_inline, plain_text
from lessonmark.models import (
    GapMarker, GapNode, LineBreak, ParagraphClose, ParagraphOpen, Segment,
    SegmentNode, SpacerNode, TextNode, TextRun, Token,
)
from lessonmark.tokenizer import paragraph_ranges

GapResolver = Callable[[str], Any]


@dataclass
class Rendering:
    nodes: list = field(default_factory=list)
    segments: list[Segment] = field(default_factory=list)

    def segment(self, segment_id: str) -> Segment | None:
        for seg in self.segments:
            if seg.id == segment_id:
                return seg
        return None


def _leaf(token: Token, index: int, on_gap_found: GapResolver | None,
          spacer_height: int):
    """Render a token that is not a paragraph boundary, or None for a stray </p>."""
    if isinstance(token, TextRun):
        return TextNode(text=token.content, inline=parse_inline(token.content), index=index)
    if isinstance(token, GapMarker):
        content = on_gap_found(token.id) if on_gap_found else None
        return GapNode(gap_id=token.id, content=content, index=index)
    if isinstance(token, LineBreak):
        return SpacerNode(height=spacer_height, index=index)
    return None


def _node_text(node) -> str:
    if isinstance(node, TextNode):
        return plain_text(node.inline)
    if isinstance(node, SpacerNode):
        return "\n"
    return ""


def render(tokens: list[Token], on_gap_found: GapResolver | None = None, *,
           section_id: str | None = None, spacer_height: int = 16,
           colors: dict | None = None) -> Rendering:
    """Render tokens into an ordered node list.

    Args:
        tokens: Output of tokenizer.tokenize().
        on_gap_found: Called with each gap id; its return value (possibly None)
            becomes the gap node's content.
        section_id: Namespace for segment ids, so two fields rendered side by
            side never share an id.
        spacer_height: Height in px of the spacer a line break produces.
        colors: Extra named colors for attribute extraction.
    """
    result = Rendering()
    starts = {open_i: (close_i, closed) for open_i, close_i, closed in paragraph_ranges(tokens)}

    i = 0
    while i < len(tokens):
        if i not in starts:
            node = _leaf(tokens[i], i, on_gap_found, spacer_height)
            if node is not None:
                result.nodes.append(node)
            i += 1
            continue

        close_i, closed = starts[i]
        open_token = tokens[i]
        children = []
        for j in range(i + 1, close_i + 1):
            if isinstance(tokens[j], (ParagraphOpen, ParagraphClose)):
                continue
            node = _leaf(tokens[j], j, on_gap_found, spacer_height)
            if node is not None:
                children.append(node)

        segment = Segment(
            open_index=i,
            close_index=close_i,
            attrs=extract_attrs(open_token.raw_tag, colors),
            raw="".join(t.raw for t in tokens[i:close_i + 1]),
            text="".join(_node_text(c) for c in children).strip(),
            closed=closed,
            section_id=section_id,
        )
        result.segments.append(segment)
        result.nodes.append(SegmentNode(segment=segment, children=children))
        i = close_i + 1
    return result
