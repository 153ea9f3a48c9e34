"""Tests for lessonmark.inline."""

from lessonmark.inline import Break, Styled, Text, parse_inline, plain_text


def test_plain():
    assert parse_inline("hello") == [Text("hello")]


def test_bold_and_italic():
    nodes = parse_inline("a <b>bold</b> and <em>it</em>")
    assert nodes[0] == Text("a ")
    assert isinstance(nodes[1], Styled) and nodes[1].style == "bold"
    assert nodes[1].children == [Text("bold")]
    assert nodes[3].style == "italic"


def test_nested():
    nodes = parse_inline("<b><u>x</u></b>")
    assert nodes[0].style == "bold"
    assert nodes[0].children[0].style == "underline"
    assert plain_text(nodes) == "x"


def test_break():
    nodes = parse_inline("a<br>b<br/>c")
    assert [type(n) for n in nodes] == [Text, Break, Text, Break, Text]
    assert plain_text(nodes) == "a\nb\nc"


def test_unknown_tags_stay_literal():
    nodes = parse_inline("<ul><li>x</li></ul>")
    assert plain_text(nodes) == "<ul><li>x</li></ul>"


def test_stray_close_is_literal():
    assert plain_text(parse_inline("x</b>y")) == "x</b>y"


def test_unclosed_style_runs_to_end():
    nodes = parse_inline("<b>open")
    assert nodes[0].style == "bold"
    assert nodes[0].children == [Text("open")]


def test_close_pops_inner_styles():
    nodes = parse_inline("<b><i>x</b>y")
    assert nodes[0].children[0].style == "italic"
    assert nodes[1] == Text("y")


def test_entities_unescaped():
    assert plain_text(parse_inline("Tom &amp; Jerry&nbsp;!")) == "Tom & Jerry\xa0!"
