"""Render tree -> HTML.

Text is always escaped; only gap content supplied by the caller as a string
is inserted verbatim, since that is the caller's own widget markup.
"""

import html

from lessonmark.attrs import COLOR_MAP
from lessonmark.inline import Break, Styled, Text
from lessonmark.models import (
    GapNode, ParagraphAttrs, Pending, SegmentNode, SpacerNode, TextNode,
)

IMPORTANCE_COLORS = {
    "low": COLOR_MAP["green"],
    "medium": COLOR_MAP["orange"],
    "high": COLOR_MAP["red"],
}

_STYLE_TAGS = {"bold": "strong", "italic": "em", "underline": "u"}


def _inline_html(nodes: list) -> str:
    out = []
    for node in nodes:
        if isinstance(node, Text):
            out.append(html.escape(node.content))
        elif isinstance(node, Styled):
            tag = _STYLE_TAGS[node.style]
            out.append(f"<{tag}>{_inline_html(node.children)}</{tag}>")
        elif isinstance(node, Break):
            out.append("<br>")
    return "".join(out)


def segment_style(attrs: ParagraphAttrs, accent: str = COLOR_MAP["primary"]) -> str:
    rules = ["white-space:pre-wrap"]
    if attrs.bold:
        rules.append("font-weight:bold")
    if attrs.italic:
        rules.append("font-style:italic")
    if attrs.underline:
        rules.append("text-decoration:underline")
    if attrs.align != "left":
        rules.append(f"text-align:{attrs.align}")
    if attrs.font_size_px is not None:
        rules.append(f"font-size:{attrs.font_size_px}px")
    if attrs.color:
        rules.append(f"color:{attrs.color}")
    if attrs.hint:
        border = IMPORTANCE_COLORS.get(attrs.importance, accent)
        rules.append(f"border:1px dashed {border}")
        rules.append("cursor:help")
    return ";".join(rules)


def _gap_html(content, accent: str) -> str:
    if content is None:
        return ""
    if isinstance(content, Pending):
        content = content.value if content.done else content.placeholder
        return _gap_html(content, accent)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return to_html(content, accent=accent)
    return to_html([content], accent=accent)


def _node_html(node, accent: str) -> str:
    if isinstance(node, TextNode):
        if not node.inline:
            return html.escape(node.text)
        return _inline_html(node.inline)
    if isinstance(node, GapNode):
        return _gap_html(node.content, accent)
    if isinstance(node, SpacerNode):
        return f'<div class="lm-break" style="height:{node.height}px"></div>'
    if isinstance(node, SegmentNode):
        seg = node.segment
        attrs = [f'data-segment="{html.escape(seg.id)}"',
                 f'style="{html.escape(segment_style(seg.attrs, accent))}"']
        if seg.attrs.hint:
            attrs.append(f'data-hint="{html.escape(seg.attrs.hint)}"')
        inner = "".join(_node_html(c, accent) for c in node.children)
        return f'<p {" ".join(attrs)}>{inner}</p>'
    return ""


def to_html(nodes: list, *, accent: str = COLOR_MAP["primary"]) -> str:
    return "".join(_node_html(n, accent) for n in nodes)
