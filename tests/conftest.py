import pytest
import sys
from pathlib import Path
from PIL import Image

# Add src to sys.path so we can import qbank_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from qbank_toolkit.common.images import image_to_data_uri
from qbank_toolkit.core.models import (
    Difficulty,
    ExamMonth,
    Question,
    QuestionPart,
)
from qbank_toolkit.storage import QuestionStore


# Common test fixtures
@pytest.fixture
def sample_image(tmp_path: Path):
    """Create a simple test image."""
    img = Image.new("RGB", (200, 100), color="white")
    img_path = tmp_path / "sample.png"
    img.save(img_path)
    return img_path


@pytest.fixture
def image_ref():
    """A small valid data-URI image reference."""
    return image_to_data_uri(Image.new("RGB", (20, 10), color="red"))


@pytest.fixture
def make_question():
    """Factory for Paper 1 questions with sensible defaults."""
    def _make(qid: str = "q1", **kwargs) -> Question:
        kwargs.setdefault("created_at", 1_700_000_000_000)
        kwargs.setdefault("year", 2020)
        kwargs.setdefault("keywords", ())
        kwargs.setdefault("topics", ())
        return Question.paper1(id=qid, **kwargs)
    return _make


@pytest.fixture
def paper2_question():
    """A Paper 2 question with two parts."""
    return Question.paper2(
        id="p2",
        created_at=1_700_000_000_500,
        year=2019,
        month=ExamMonth.NOVEMBER,
        difficulty=Difficulty.HARD,
        keywords=("forces", "momentum"),
        topics=("A.2",),
        question_number="3",
        parts=(
            QuestionPart(id="p2a", label="a"),
            QuestionPart(id="p2b", label="b"),
        ),
    )


@pytest.fixture
def store(tmp_path: Path):
    """An opened store in a temp directory."""
    s = QuestionStore(tmp_path / "qbank.sqlite3")
    s.open()
    yield s
    s.close()
