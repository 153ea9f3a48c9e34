"""Tests for lessonmark.mutator."""

import pytest

from lessonmark.attrs import ALIGNMENTS, COLOR_MAP, extract_attrs, split_tag
from lessonmark.mutator import apply_format, format_markup, rewrite_tag
from lessonmark.tokenizer import tokenize


def _first_attrs(content):
    return tokenize(content)[0].attrs


# ---------------------------------------------------------------------------
# rewrite_tag
# ---------------------------------------------------------------------------

class TestToggles:
    def test_add_bold(self):
        assert rewrite_tag("<p>", "bold") == "<p bold>"

    def test_remove_bold(self):
        assert rewrite_tag("<p bold>", "bold") == "<p>"

    def test_remove_takes_leading_space(self):
        assert rewrite_tag("<p bold italic>", "bold") == "<p italic>"
        assert rewrite_tag("<p italic bold>", "bold") == "<p italic>"

    def test_add_before_closing(self):
        assert rewrite_tag("<p center >", "underline") == "<p center underline>"

    def test_remove_is_case_insensitive(self):
        assert rewrite_tag("<p BOLD center>", "bold") == "<p center>"

    def test_quoted_values_untouched(self):
        assert rewrite_tag("<p hint='a > b' bold>", "bold") == "<p hint='a > b'>"
        assert rewrite_tag("<p hint='bold'>", "bold") == "<p hint='bold' bold>"

    def test_punctuated_words(self):
        assert rewrite_tag("<p bold,center>", "bold") == "<p center>"
        assert rewrite_tag("<p center, bold>", "bold") == "<p center>"
        assert rewrite_tag("<p italic,center>", "bold") == "<p italic,center bold>"


class TestAlignment:
    def test_center_to_right_keeps_size(self):
        new = rewrite_tag("<p center size='12'>", "right")
        attrs = extract_attrs(new)
        assert attrs.align == "right"
        assert attrs.font_size_px == 12
        assert "center" not in new
        assert "size='12'" in new

    def test_same_alignment_round_trips_keyword(self):
        assert rewrite_tag("<p center>", "center") == "<p center>"

    def test_left_is_written(self):
        assert rewrite_tag("<p right>", "left") == "<p left>"

    def test_duplicates_are_cleaned(self):
        new = rewrite_tag("<p center right>", "center")
        assert new == "<p center>"

    @pytest.mark.parametrize("commands", [
        ["center"],
        ["center", "right"],
        ["right", "left", "center", "center"],
        ["left", "left"],
        ["center", "bold", "right", "italic", "left"],
    ])
    def test_exactly_one_alignment(self, commands):
        tag = "<p bold size='14'>"
        for cmd in commands:
            tag = rewrite_tag(tag, cmd)
        words = [p.key for p in split_tag(tag) if p.value is None and p.key in ALIGNMENTS]
        assert len(words) == 1
        last_align = [c for c in commands if c in ALIGNMENTS][-1]
        assert extract_attrs(tag).align == last_align


class TestColorAndSize:
    def test_empty_color_removes_attribute(self):
        new = format_markup("<p color='ff0000'>X</p>", 0, "color", "")
        assert new == "<p>X</p>"
        assert "color=" not in new

    def test_none_color_removes_attribute(self):
        assert rewrite_tag("<p bold color='red'>", "color") == "<p bold>"

    def test_replace_color_in_place(self):
        assert rewrite_tag("<p color='red' bold>", "color", "blue") == "<p color='blue' bold>"

    def test_append_color(self):
        assert rewrite_tag("<p bold>", "color", "green") == "<p bold color='green'>"

    def test_unparseable_value_stored_verbatim(self):
        new = rewrite_tag("<p>", "color", "not a colour")
        assert new == "<p color='not a colour'>"
        assert extract_attrs(new).color == "not a colour"

    def test_value_with_quote(self):
        new = rewrite_tag("<p>", "color", "it's")
        assert new == "<p color=\"it's\">"
        assert extract_attrs(new).color == "it's"

    def test_value_with_both_quotes_stays_one_tag(self):
        content = format_markup("<p>X</p>", 0, "color", "a'b\"c")
        tokens = tokenize(content)
        assert len(tokens) == 3
        assert tokens[0].attrs.color == "a'b\"c"

    def test_size_from_int(self):
        assert rewrite_tag("<p>", "size", 24) == "<p size='24'>"

    def test_replace_size(self):
        assert rewrite_tag("<p size='12' center>", "size", "20") == "<p size='20' center>"

    def test_size_replaces_legacy_size(self):
        new = rewrite_tag("<p 18 bold>", "size", "20")
        assert new == "<p bold size='20'>"
        assert extract_attrs(new).font_size_px == 20

    def test_color_keeps_legacy_size(self):
        new = rewrite_tag("<p 18>", "color", "red")
        assert new == "<p size='18' color='red'>"
        attrs = extract_attrs(new)
        assert attrs.font_size_px == 18
        assert attrs.color == COLOR_MAP["red"]

    def test_duplicate_pairs_collapse(self):
        assert rewrite_tag("<p color='red' color='blue'>", "color", "gray") == "<p color='gray'>"


def test_unknown_command_raises():
    with pytest.raises(ValueError):
        rewrite_tag("<p>", "justify")
    with pytest.raises(ValueError):
        apply_format(tokenize("<p>x</p>"), 0, "sparkle")


# ---------------------------------------------------------------------------
# apply_format
# ---------------------------------------------------------------------------

DOC = ("Intro </gap id='g0'></n>"
       "<p bold>First</p>"
       "<p center size='12' hint='a > b'>Second </gap id='g1'></p>"
       "</p>tail <p>unclosed")


class TestApplyFormat:
    def test_only_target_token_changes(self):
        before = tokenize(DOC)
        target = next(i for i, t in enumerate(before) if t.raw.startswith("<p center"))
        after = tokenize(apply_format(before, target, "right"))
        assert len(after) == len(before)
        for i, (a, b) in enumerate(zip(before, after)):
            if i != target:
                assert a.raw == b.raw
        assert after[target].attrs.align == "right"

    def test_non_paragraph_index_is_noop(self):
        tokens = tokenize(DOC)
        assert apply_format(tokens, 0, "bold") == DOC
        assert apply_format(tokens, 999, "bold") == DOC
        assert apply_format(tokens, -1, "bold") == DOC

    def test_unclosed_paragraph(self):
        tokens = tokenize(DOC)
        last_open = max(i for i, t in enumerate(tokens) if t.raw.startswith("<p"))
        new = apply_format(tokens, last_open, "italic")
        assert new.endswith("<p italic>unclosed")

    @pytest.mark.parametrize("command", ["bold", "italic", "underline"])
    @pytest.mark.parametrize("tag", [
        "<p>", "<p bold>", "<p italic center>", "<p size='12' underline>",
        "<p hint='bold move' importance='high'>", "<p 18 right>",
    ])
    def test_toggle_twice_restores_attrs(self, tag, command):
        content = tag + "Text</p>"
        once = format_markup(content, 0, command)
        twice = format_markup(once, 0, command)
        assert _first_attrs(once) != _first_attrs(content)
        assert _first_attrs(twice) == _first_attrs(content)

    def test_color_set_then_clear_restores_attrs(self):
        content = "<p bold center>Text</p>"
        colored = format_markup(content, 0, "color", "purple")
        cleared = format_markup(colored, 0, "color", "")
        assert _first_attrs(colored).color == COLOR_MAP["purple"]
        assert _first_attrs(cleared) == _first_attrs(content)
