"""
Study session navigation over a filtered view.

Tracks the current question, whether its answer is shown, and which
Paper 2 parts have had their answers revealed. Moving to another question
hides everything again.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Set

from qbank_toolkit.core.models.questions import Question


class StudySession:
    """
    Step through questions one at a time.

    Example:
        >>> session = StudySession(library.filtered(spec))
        >>> session.progress_label
        '1 / 12'
        >>> session.next()
        True
    """

    def __init__(self, questions: Sequence[Question]):
        self._questions: List[Question] = list(questions)
        self._index = 0
        self.show_answer = False
        self._revealed_parts: Set[str] = set()

    @property
    def is_empty(self) -> bool:
        return not self._questions

    def __len__(self) -> int:
        return len(self._questions)

    @property
    def index(self) -> int:
        return self._index

    @property
    def current(self) -> Optional[Question]:
        if self.is_empty:
            return None
        return self._questions[self._index]

    @property
    def progress_label(self) -> str:
        if self.is_empty:
            return "0 / 0"
        return f"{self._index + 1} / {len(self._questions)}"

    def _move_to(self, index: int) -> None:
        self._index = index
        self.show_answer = False
        self._revealed_parts.clear()

    def next(self) -> bool:
        """Advance; returns False (and stays put) at the last question."""
        if self._index >= len(self._questions) - 1:
            return False
        self._move_to(self._index + 1)
        return True

    def previous(self) -> bool:
        """Go back; returns False (and stays put) at the first question."""
        if self._index <= 0:
            return False
        self._move_to(self._index - 1)
        return True

    def toggle_answer(self) -> bool:
        """Flip the Paper 1 answer visibility; returns the new state."""
        self.show_answer = not self.show_answer
        return self.show_answer

    def reveal_part(self, part_id: str) -> None:
        """Reveal one Paper 2 part's answer."""
        question = self.current
        if question is None or question.get_part(part_id) is None:
            raise KeyError(f"No part {part_id!r} on the current question")
        self._revealed_parts.add(part_id)

    def is_revealed(self, part_id: str) -> bool:
        return part_id in self._revealed_parts
