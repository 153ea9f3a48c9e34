"""TargetRegistry: which rendered paragraph receives format commands.

One registry is created per top-level view and handed to every editable
view inside it. At most one target is active at a time.
"""

import logging
from typing import Any, Callable

from lessonmark.models import ParagraphAttrs

log = logging.getLogger(__name__)

ApplyFormat = Callable[..., None]


class TargetRegistry:
    def __init__(self):
        self._targets: dict[str, ApplyFormat] = {}
        self._active: str | None = None
        self.active_formats = ParagraphAttrs()

    def __contains__(self, target_id: str) -> bool:
        return target_id in self._targets

    def __len__(self) -> int:
        return len(self._targets)

    @property
    def active(self) -> str | None:
        return self._active

    def get_active(self) -> str | None:
        return self._active

    def register(self, target_id: str, apply_format: ApplyFormat):
        self._targets[target_id] = apply_format

    def unregister(self, target_id: str):
        self._targets.pop(target_id, None)
        if self._active == target_id:
            self.set_active(None)

    def set_active(self, target_id: str | None, formats: ParagraphAttrs | None = None):
        self._active = target_id
        self.active_formats = formats if (target_id is not None and formats) else ParagraphAttrs()

    def update_active_formats(self, formats: ParagraphAttrs):
        self.active_formats = formats

    def dispatch(self, format_type: str, value: Any = None) -> bool:
        """Send a format command to the active target. Returns whether one received it."""
        target_id = self._active
        if target_id is None:
            log.debug("dispatch(%s): no active target", format_type)
            return False
        apply_format = self._targets.get(target_id)
        if apply_format is None:
            log.debug("dispatch(%s): active target %s is not registered", format_type, target_id)
            return False
        apply_format(format_type, value)
        return True
