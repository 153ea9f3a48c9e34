"""Gap helpers shared by the quiz surfaces.

Gaps are written `</gap id='ID'>`. Older content sometimes has bare `<gap>`
or `</gap>` tags without an id; normalize_gaps() numbers those so every gap
can be addressed.
"""

import html
import re
from typing import Callable

from lessonmark.models import GapMarker
from lessonmark.tokenizer import tokenize

_ID_LESS_GAP_RE = re.compile(r"</?gap\b(?![^>]*\bid=['\"])[^>]*>", re.IGNORECASE)


def gap_ids(content: str | None) -> list[str]:
    """Ids of all gap markers, in document order (duplicates kept)."""
    return [t.id for t in tokenize(content) if isinstance(t, GapMarker)]


def normalize_gaps(content: str | None) -> str:
    """Give every id-less gap tag an id: gap-1, gap-2, ..."""
    count = 0

    def _number(m):
        nonlocal count
        count += 1
        return f"</gap id='gap-{count}'>"

    return _ID_LESS_GAP_RE.sub(_number, content or "")


def blank_resolver(gap_id: str) -> str:
    """Empty input box for a gap."""
    return f'<input class="lm-gap" data-gap="{html.escape(gap_id)}" type="text">'


def answer_resolver(answers: dict) -> Callable[[str], str | None]:
    """Resolver that reveals answers; gaps without an answer render nothing."""
    def _resolve(gap_id: str) -> str | None:
        answer = answers.get(gap_id)
        if answer is None:
            return None
        return f'<mark data-gap="{html.escape(gap_id)}">{html.escape(str(answer))}</mark>'
    return _resolve


def fill_gaps(content: str | None, answers: dict, missing: str = "") -> str:
    """Replace each gap marker with its answer, leaving all other text as is."""
    out = []
    for token in tokenize(content):
        if isinstance(token, GapMarker):
            answer = answers.get(token.id)
            out.append(missing if answer is None else str(answer))
        else:
            out.append(token.raw)
    return "".join(out)
