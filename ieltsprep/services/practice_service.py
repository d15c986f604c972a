"""Practice dashboard: test cards, the built-in question bank and progress."""

import logging
import random
from dataclasses import dataclass
from typing import List, Optional

from ..errors import ValidationFailure
from ..models.practice import Question

logger = logging.getLogger(__name__)

QUESTION_BANK: List[Question] = [
    Question(1, "Tell me about your hometown.", "Personal", "Easy"),
    Question(2, "Do you prefer living in a house or an apartment? Why?", "Living Situation", "Medium"),
    Question(3, "Describe a book that made an impression on you.", "Literary", "Hard"),
    Question(4, "How often do you use public transportation?", "Transportation", "Easy"),
]

TEST_INSTRUCTIONS = [
    "The test has 3 parts lasting 11-14 minutes",
    "Part 1: Introduction and interview (4-5 minutes)",
    "Part 2: Long turn (3-4 minutes)",
    "Part 3: Discussion (4-5 minutes)",
    "Speak clearly and at a natural pace",
    "Expand your answers with reasons/examples",
]
TEST_TIP = "Practice common topics like hobbies, work, and studies."


@dataclass
class PracticeCard:
    """One entry on the test taker dashboard."""
    title: str
    description: str
    question_id: Optional[int] = None


PRACTICE_CARDS: List[PracticeCard] = [
    PracticeCard("IELTS Speaking Part 1: Introduction",
                 "Practice answering common introduction questions.", 1),
    PracticeCard("IELTS Speaking Part 2: Long-turn speaking",
                 "Practice speaking on a given topic for 2 minutes.", 2),
    PracticeCard("IELTS Speaking Part 3: Discussion",
                 "Practice answering in-depth questions on various topics.", 3),
    PracticeCard("Random Practice Questions",
                 "Practice with randomly selected questions from all parts."),
]


class PracticeService:
    """Picks questions and remembers which ones were answered this run."""

    def __init__(self, questions: Optional[List[Question]] = None, rng: Optional[random.Random] = None):
        self.questions = list(questions if questions is not None else QUESTION_BANK)
        self.rng = rng or random.Random()
        self.answered: List[int] = []
        self.current: Optional[Question] = None

    def pick(self, question_id: Optional[int] = None) -> Question:
        """Return the question with ``question_id``, or a random one when it is None.

        Raises:
            ValidationFailure: If no question has that id.
        """
        if not self.questions:
            raise ValidationFailure("No questions available")
        if question_id is None:
            question = self.rng.choice(self.questions)
        else:
            question = next((q for q in self.questions if q.id == question_id), None)
            if question is None:
                raise ValidationFailure("Question not found")
        self.current = question
        logger.debug(f"Picked question {question.id}: {question.text}")
        return question

    def mark_answered(self, question_id: int) -> None:
        if question_id not in self.answered:
            self.answered.append(question_id)

    @property
    def answered_count(self) -> int:
        return len(self.answered)
