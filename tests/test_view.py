"""Tests for lessonmark.view."""

from unittest.mock import MagicMock

from lessonmark.models import GapNode, Pending
from lessonmark.view import MarkupView

CONTENT = "<p>First</p><p hint='read this' importance='medium'>Second</p>tail"


def _editable(registry, content=CONTENT, **kwargs):
    on_change = MagicMock()
    view = MarkupView(content, on_change=on_change, registry=registry, **kwargs)
    view.mount()
    return view, on_change


class TestLifecycle:
    def test_mount_registers_each_paragraph(self, registry):
        view, _ = _editable(registry)
        assert len(registry) == 2
        for seg in view.segments:
            assert seg.id in registry

    def test_read_only_view_registers_nothing(self, registry):
        view = MarkupView(CONTENT, registry=registry)
        view.mount()
        assert len(registry) == 0

    def test_unmount_unregisters_and_clears_active(self, registry):
        view, on_change = _editable(registry)
        view.click(view.segments[0].id)
        view.unmount()
        assert len(registry) == 0
        assert registry.active is None
        assert registry.dispatch("bold") is False
        on_change.assert_not_called()

    def test_update_same_content_is_noop(self, registry):
        view, _ = _editable(registry)
        tokens = view.tokens
        view.update(CONTENT)
        assert view.tokens is tokens

    def test_update_drops_stale_targets(self, registry):
        view, _ = _editable(registry)
        old_second = view.segments[1].id
        view.update("<p>Only one</p>")
        assert old_second not in registry
        assert len(registry) == 1


class TestClick:
    def test_click_activates_editable_paragraph(self, registry):
        view, _ = _editable(registry)
        seg = view.segments[0]
        assert view.click(seg.id) == "active"
        assert registry.active == seg.id

    def test_hint_click_does_not_activate(self, registry):
        on_hint = MagicMock()
        view, _ = _editable(registry, on_hint_click=on_hint)
        assert view.click(view.segments[1].id) == "hint"
        on_hint.assert_called_once_with("read this")
        assert registry.active is None

    def test_hint_segment_activates_without_hint_callback(self, registry):
        view, _ = _editable(registry)
        assert view.click(view.segments[1].id) == "active"

    def test_read_only_click_reports_text(self):
        on_text = MagicMock()
        view = MarkupView("<p>Hello <b>there</b></p>", on_text_click=on_text)
        assert view.click(view.segments[0].id) == "text"
        on_text.assert_called_once_with("Hello there")

    def test_unknown_segment(self, registry):
        view, _ = _editable(registry)
        assert view.click("99-99") is None


class TestFormatting:
    def test_dispatch_rewrites_and_reports_once(self, registry):
        view, on_change = _editable(registry)
        view.click(view.segments[0].id)
        registry.dispatch("bold")
        expected = "<p bold>First</p><p hint='read this' importance='medium'>Second</p>tail"
        on_change.assert_called_once_with(expected)
        assert view.content == expected

    def test_active_target_survives_its_own_edit(self, registry):
        view, on_change = _editable(registry)
        seg_id = view.segments[0].id
        view.click(seg_id)
        registry.dispatch("center")
        assert registry.active == seg_id
        assert registry.active_formats.align == "center"
        registry.dispatch("color", "red")
        assert on_change.call_count == 2
        assert view.content.startswith("<p center color='red'>First</p>")

    def test_fields_side_by_side_do_not_collide(self, registry):
        question, q_change = _editable(registry, "<p>Q</p>", section_id="question")
        explain, e_change = _editable(registry, "<p>E</p>", section_id="explain")
        explain.click(explain.segments[0].id)
        registry.dispatch("italic")
        e_change.assert_called_once_with("<p italic>E</p>")
        q_change.assert_not_called()
        assert question.content == "<p>Q</p>"

    def test_stale_target_is_noop(self, registry):
        view, on_change = _editable(registry)
        stale = view.segments[1].id
        registry.set_active(stale)
        view.update("<p>Only one</p>")
        assert registry.dispatch("bold") is False
        on_change.assert_not_called()

    def test_rest_of_document_untouched(self, registry):
        content = "Intro</n><p>A</p>mid </gap id='g'><p right>B</p>"
        view, on_change = _editable(registry, content)
        view.click(view.segments[1].id)
        registry.dispatch("left")
        assert on_change.call_args[0][0] == "Intro</n><p>A</p>mid </gap id='g'><p left>B</p>"


class TestPendingGaps:
    def test_fulfilled_content_is_applied(self):
        pending = Pending(placeholder="loading")
        on_update = MagicMock()
        view = MarkupView("a</gap id='img'>", on_gap_found=lambda g: pending,
                          on_update=on_update)
        view.mount()
        pending.fulfil("<img src='x.png'>")
        gap = next(n for n in view.nodes if isinstance(n, GapNode))
        assert gap.content == "<img src='x.png'>"
        on_update.assert_called_once_with(view)

    def test_result_after_unmount_is_dropped(self):
        pending = Pending(placeholder="loading")
        on_update = MagicMock()
        view = MarkupView("</gap id='img'>", on_gap_found=lambda g: pending,
                          on_update=on_update)
        view.mount()
        view.unmount()
        pending.fulfil("late")
        assert view.nodes[0].content is pending
        on_update.assert_not_called()

    def test_result_after_rerender_is_dropped(self):
        first = Pending()
        resolvers = iter([first, None])
        on_update = MagicMock()
        view = MarkupView("</gap id='g'>", on_gap_found=lambda g: next(resolvers),
                          on_update=on_update)
        view.update("x</gap id='g'>")
        first.fulfil("stale")
        assert view.nodes[1].content is None
        on_update.assert_not_called()
