import sys
from pathlib import Path

import pytest

# Add src to sys.path so we can import studybrick_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from studybrick_toolkit.core.models import (  # noqa: E402
    Difficulty,
    Entitlement,
    Question,
    QuestionType,
    Role,
    Viewer,
    ViewerIdentity,
)
from studybrick_toolkit.drafts import DraftRepository, Notifier  # noqa: E402


# Common test fixtures
@pytest.fixture
def make_question():
    """Factory for MCQ questions with sensible defaults."""

    def _make(qid="q1", subject="physics", chapter="Kinematics", content=None, **kwargs):
        kwargs.setdefault("difficulty", Difficulty.MEDIUM)
        kwargs.setdefault("type", QuestionType.MCQ)
        if kwargs["type"] is QuestionType.MCQ:
            kwargs.setdefault("options", ("10 m/s", "20 m/s", "30 m/s", "40 m/s"))
            kwargs.setdefault("correct_answer", 1)
        return Question(
            id=qid,
            subject=subject,
            chapter=chapter,
            content=content or f"Question {qid}",
            **kwargs,
        )

    return _make


@pytest.fixture
def question_record():
    """Factory for raw catalog question payloads."""

    def _make(qid="q1", subject="physics", chapter="Kinematics", **overrides):
        record = {
            "id": qid,
            "subject": subject,
            "chapter": chapter,
            "difficulty": "Medium",
            "type": "MCQ",
            "content": f"Question {qid}",
            "options": ["A", "B", "C", "D"],
            "correct": 0,
            "assignedTo": None,
        }
        record.update(overrides)
        return record

    return _make


@pytest.fixture
def student():
    """Student with physics and maths, every chapter."""
    return Viewer(
        identity=ViewerIdentity(internal_id="uid-1", profile_id="user-1", email="s@example.com"),
        role=Role.STUDENT,
        entitlement=Entitlement(allowed_subjects=("physics", "maths")),
        name="Sam",
    )


@pytest.fixture
def admin():
    return Viewer(
        identity=ViewerIdentity(internal_id="uid-admin", email="admin@example.com"),
        role=Role.ADMIN,
        name="Admin",
    )


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Per-test device state directory."""
    return tmp_path / "data"


@pytest.fixture
def repository(data_dir: Path) -> DraftRepository:
    return DraftRepository(data_dir)


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()
