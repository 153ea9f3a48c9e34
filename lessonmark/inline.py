"""Inline styling inside text runs: <b>, <i>, <u> and <br>.

Text runs in lesson content often carry a few HTML-ish inline tags
(`<b>Past Simple</b>`). They are parsed into a small tree instead of being
passed through as raw HTML. Anything not recognised stays literal text.
"""

import html
import re
from dataclasses import dataclass, field

_TAG_RE = re.compile(r'<(/?)([a-zA-Z]+)\s*(/?)>')

_STYLES = {
    "b": "bold",
    "strong": "bold",
    "i": "italic",
    "em": "italic",
    "u": "underline",
}


@dataclass
class Text:
    content: str


@dataclass
class Styled:
    style: str            # "bold" | "italic" | "underline"
    children: list = field(default_factory=list)
    tag: str = ""


@dataclass
class Break:
    pass


def parse_inline(text: str) -> list:
    """Parse a text run into Text / Styled / Break nodes. Never raises."""
    root: list = []
    stack: list[Styled] = []

    def _children():
        return stack[-1].children if stack else root

    def _add_text(s: str):
        if not s:
            return
        s = html.unescape(s)
        siblings = _children()
        if siblings and isinstance(siblings[-1], Text):
            siblings[-1].content += s
        else:
            siblings.append(Text(s))

    last_end = 0
    for m in _TAG_RE.finditer(text):
        closing, name, self_closing = m.group(1), m.group(2).lower(), m.group(3)
        _add_text(text[last_end:m.start()])
        last_end = m.end()

        if name == "br" and not closing:
            _children().append(Break())
        elif name in _STYLES and not closing and not self_closing:
            node = Styled(_STYLES[name], tag=name)
            _children().append(node)
            stack.append(node)
        elif name in _STYLES and closing and any(s.tag == name for s in stack):
            # Close everything opened after the matching tag as well.
            while stack:
                if stack.pop().tag == name:
                    break
        else:
            _add_text(m.group(0))
    _add_text(text[last_end:])
    return root


def plain_text(nodes: list) -> str:
    out = []
    for node in nodes:
        if isinstance(node, Text):
            out.append(node.content)
        elif isinstance(node, Styled):
            out.append(plain_text(node.children))
        elif isinstance(node, Break):
            out.append("\n")
    return "".join(out)
