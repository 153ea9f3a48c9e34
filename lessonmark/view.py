"""MarkupView: one markup string rendered for one surface, optionally editable."""

import functools
import logging
from typing import Any, Callable

from lessonmark.models import GapNode, Pending, SegmentNode
from lessonmark.mutator import apply_format
from lessonmark.registry import TargetRegistry
from lessonmark.renderer import GapResolver, Rendering, render
from lessonmark.tokenizer import tokenize

log = logging.getLogger(__name__)


class MarkupView:
    """Holds the tokens and render tree for a markup string.

    Usage:
        registry = TargetRegistry()
        view = MarkupView(quiz["question"], on_gap_found=blank_resolver,
                          on_change=save, registry=registry, section_id="question")
        view.mount()                      # paragraphs become format targets
        view.click(view.segments[0].id)   # activates it
        registry.dispatch("bold")         # rewrites the tag, calls save(new)
        view.unmount()

    Without a registry or on_change the view is read-only: clicks go to
    on_text_click / on_hint_click instead.
    """

    def __init__(self, content: str | None, *,
                 on_gap_found: GapResolver | None = None,
                 on_text_click: Callable[[str], Any] | None = None,
                 on_hint_click: Callable[[str], Any] | None = None,
                 on_change: Callable[[str], Any] | None = None,
                 on_update: Callable[["MarkupView"], Any] | None = None,
                 section_id: str | None = None,
                 registry: TargetRegistry | None = None,
                 spacer_height: int = 16,
                 colors: dict | None = None):
        self.content = content or ""
        self.on_gap_found = on_gap_found
        self.on_text_click = on_text_click
        self.on_hint_click = on_hint_click
        self.on_change = on_change
        self.on_update = on_update
        self.section_id = section_id
        self.registry = registry
        self.spacer_height = spacer_height
        self.colors = colors
        self.mounted = False
        self._generation = 0
        self._pending: list[Pending] = []
        self._registered: set[str] = set()
        self.tokens: list = []
        self.rendering = Rendering()
        self._render()

    @property
    def editable(self) -> bool:
        return self.registry is not None and self.on_change is not None

    @property
    def nodes(self) -> list:
        return self.rendering.nodes

    @property
    def segments(self) -> list:
        return self.rendering.segments

    # ── Rendering ────────────────────────────────────────────────────

    def _render(self):
        self._generation += 1
        self._cancel_pending()
        self.tokens = tokenize(self.content)
        self.rendering = render(self.tokens, self.on_gap_found,
                                section_id=self.section_id,
                                spacer_height=self.spacer_height,
                                colors=self.colors)
        gen = self._generation
        for node in self._gap_nodes():
            if isinstance(node.content, Pending):
                pending = node.content
                self._pending.append(pending)
                pending.add_listener(functools.partial(self._resolved, node, gen))

    def _gap_nodes(self):
        for node in self.rendering.nodes:
            if isinstance(node, GapNode):
                yield node
            elif isinstance(node, SegmentNode):
                for child in node.children:
                    if isinstance(child, GapNode):
                        yield child

    def _cancel_pending(self):
        for pending in self._pending:
            pending.cancel()
        self._pending = []

    def _resolved(self, node: GapNode, gen: int, pending: Pending):
        if gen != self._generation:
            log.debug("Dropping stale gap content for %s", node.gap_id)
            return
        node.content = pending.value
        if self.on_update:
            self.on_update(self)

    def update(self, content: str | None):
        """Re-render from new markup, keeping the active target if it still exists."""
        content = content or ""
        if content == self.content:
            return
        self.content = content
        old_ids = set(self._registered)
        self._render()
        if not self.mounted or not self.editable:
            return
        new_ids = {seg.id for seg in self.segments}
        for target_id in old_ids - new_ids:
            self.registry.unregister(target_id)
        self._registered -= old_ids - new_ids
        self._register()
        active = self.rendering.segment(self.registry.active or "")
        if active is not None:
            self.registry.update_active_formats(active.attrs)

    # ── Lifecycle ────────────────────────────────────────────────────

    def _register(self):
        for seg in self.segments:
            self.registry.register(seg.id, functools.partial(self._apply_format, seg.id))
            self._registered.add(seg.id)

    def mount(self):
        self.mounted = True
        if self.editable:
            self._register()

    def unmount(self):
        if self.registry is not None:
            for target_id in sorted(self._registered):
                self.registry.unregister(target_id)
        self._registered = set()
        self.mounted = False
        self._generation += 1
        self._cancel_pending()

    # ── Interaction ──────────────────────────────────────────────────

    def click(self, segment_id: str) -> str | None:
        """Handle a click on a paragraph.

        Returns "hint", "active" or "text" for whichever action was taken,
        or None when nothing handled it.
        """
        seg = self.rendering.segment(segment_id)
        if seg is None:
            return None
        if seg.attrs.hint and self.on_hint_click:
            self.on_hint_click(seg.attrs.hint)
            return "hint"
        if self.editable and self.mounted:
            self.registry.set_active(seg.id, seg.attrs)
            return "active"
        if self.on_text_click:
            self.on_text_click(seg.text)
            return "text"
        return None

    def _apply_format(self, segment_id: str, format_type: str, value: Any = None):
        seg = self.rendering.segment(segment_id)
        if seg is None or not self.mounted:
            log.debug("Format %s for unknown segment %s ignored", format_type, segment_id)
            return
        new_content = apply_format(self.tokens, seg.open_index, format_type, value)
        self.update(new_content)
        self.on_change(new_content)
