"""lessonmark: lesson/quiz markup rendering and in-place formatting."""

__version__ = "0.1.0"

from lessonmark.models import ParagraphAttrs, Pending, Segment
from lessonmark.tokenizer import tokenize, serialize
from lessonmark.attrs import extract_attrs
from lessonmark.renderer import render
from lessonmark.registry import TargetRegistry
from lessonmark.mutator import apply_format, format_markup
from lessonmark.view import MarkupView

__all__ = [
    "MarkupView", "ParagraphAttrs", "Pending", "Segment", "TargetRegistry",
    "apply_format", "extract_attrs", "format_markup", "render", "serialize",
    "tokenize",
]
