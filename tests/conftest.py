"""Shared test fixtures."""

import pytest

from lessonmark.registry import TargetRegistry


@pytest.fixture
def registry():
    return TargetRegistry()


@pytest.fixture
def record():
    """A content record shaped like a lesson file."""
    return {
        "title": "Lesson 1",
        "quiz": [
            {
                "type": "gap-fill",
                "question": "<p>Fill </gap id='g1'> here</p>",
                "explain": "<p bold>Why</p><p hint='see unit 2' importance='low'>Note</p>",
                "answers": [{"id": "g1", "answer": "it"}],
            },
            {"type": "multiple-choice", "question": "plain text"},
        ],
    }


@pytest.fixture
def settings_file(tmp_path):
    path = tmp_path / "settings.toml"
    path.write_text('edit_port = 9100\n\n[colors]\nTeal = "#0d9488"\n')
    return path
