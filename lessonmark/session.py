"""EditSession: the markup fields of one content record, edited in place.

A content record is the JSON-like dict a lesson or quiz is stored as. Each
markup field is addressed by a dotted path ("quiz.0.question"), which is also
the section id of its view, so paragraphs at the same position in two fields
never collide in the shared registry.
"""

import functools
import logging
from typing import Any, Callable

from lessonmark.config import DEFAULT_SETTINGS
from lessonmark.models import TextRun
from lessonmark.registry import TargetRegistry
from lessonmark.renderer import GapResolver
from lessonmark.tokenizer import tokenize
from lessonmark.view import MarkupView

log = logging.getLogger(__name__)


def _step(container, key: str):
    if isinstance(container, list):
        try:
            return container[int(key)]
        except (ValueError, IndexError):
            raise KeyError(key) from None
    if isinstance(container, dict) and key in container:
        return container[key]
    raise KeyError(key)


def get_field(record: dict, path: str) -> Any:
    value = record
    for key in path.split("."):
        value = _step(value, key)
    return value


def set_field(record: dict, path: str, value: Any):
    *parents, last = path.split(".")
    container = record
    for key in parents:
        container = _step(container, key)
    if isinstance(container, list):
        _step(container, last)
        container[int(last)] = value
    elif isinstance(container, dict):
        container[last] = value
    else:
        raise KeyError(path)


def is_markup(text: str) -> bool:
    return any(not isinstance(t, TextRun) for t in tokenize(text))


def markup_fields(record: Any, prefix: str = "") -> list[str]:
    """Dotted paths of every string field that contains markup tags."""
    paths = []
    if isinstance(record, dict):
        items = record.items()
    elif isinstance(record, list):
        items = enumerate(record)
    else:
        return paths
    for key, value in items:
        path = f"{prefix}{key}"
        if isinstance(value, str):
            if is_markup(value):
                paths.append(path)
        else:
            paths.extend(markup_fields(value, path + "."))
    return paths


class EditSession:
    """Holds the record, its views and the one registry they share.

    Usage:
        session = EditSession(record, on_change=lambda path, text: ...)
        view = session.view("quiz.0.question")
        session.activate("quiz.0.question", view.segments[0].id)
        session.apply_format("center")
        session.close_all()
    """

    def __init__(self, record: dict, settings: dict | None = None,
                 registry: TargetRegistry | None = None,
                 on_change: Callable[[str, str], Any] | None = None,
                 on_gap_found: GapResolver | None = None):
        self.record = record
        self.settings = settings or dict(DEFAULT_SETTINGS)
        self.registry = registry or TargetRegistry()
        self.on_change = on_change
        self.on_gap_found = on_gap_found
        self.views: dict[str, MarkupView] = {}
        self.dirty = False

    def view(self, path: str) -> MarkupView:
        """Return the mounted view for a field, creating it on first use."""
        if path not in self.views:
            content = get_field(self.record, path)
            if not isinstance(content, str):
                raise KeyError(f"{path} is not a text field")
            view = MarkupView(
                content,
                on_gap_found=self.on_gap_found,
                on_change=functools.partial(self._changed, path),
                section_id=path,
                registry=self.registry,
                spacer_height=self.settings.get("spacer_height", 16),
                colors=self.settings.get("colors") or None,
            )
            view.mount()
            self.views[path] = view
        return self.views[path]

    def _changed(self, path: str, new_content: str):
        set_field(self.record, path, new_content)
        self.dirty = True
        if self.on_change:
            self.on_change(path, new_content)

    def activate(self, path: str, segment_id: str) -> bool:
        view = self.view(path)
        seg = view.rendering.segment(segment_id)
        if seg is None:
            log.debug("activate: no segment %s in %s", segment_id, path)
            return False
        self.registry.set_active(seg.id, seg.attrs)
        return True

    def active_field(self) -> str | None:
        active = self.registry.active
        if active is None:
            return None
        for path, view in self.views.items():
            if view.rendering.segment(active) is not None:
                return path
        return None

    def apply_format(self, format_type: str, value: Any = None) -> bool:
        return self.registry.dispatch(format_type, value)

    def reload(self, path: str):
        """Pick up a field that was changed outside the session."""
        if path in self.views:
            self.views[path].update(get_field(self.record, path))

    def close(self, path: str):
        view = self.views.pop(path, None)
        if view is not None:
            view.unmount()

    def close_all(self):
        for path in list(self.views):
            self.close(path)

    def mark_saved(self):
        self.dirty = False
