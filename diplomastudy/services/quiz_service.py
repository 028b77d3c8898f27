import json
import logging
import math
import random
import time
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from diplomastudy.models.quiz import MCQQuestion, QuestionSet, TestResult

logger = logging.getLogger(__name__)

QUESTION_BANK_PATH = Path(__file__).resolve().parent.parent / "data" / "mcq_questions.json"
DEFAULT_QUESTION_SET = "default"
QUESTION_COUNT_CHOICES = (15, 30, 50)


def load_question_bank(path: Path = QUESTION_BANK_PATH) -> List[MCQQuestion]:
    with open(path, "r", encoding="utf-8") as f:
        return [MCQQuestion.model_validate(item) for item in json.load(f)]


def percentage_score(correct: int, total: int) -> int:
    """Whole-number percentage rounded half up; 0 for an empty test."""
    if total <= 0:
        return 0
    return math.floor(correct / total * 100 + 0.5)


def score_message(score: int) -> str:
    if score >= 90:
        return "Excellent! You have a great understanding of acids and bases."
    if score >= 80:
        return "Very good! You have a solid understanding of the topic."
    if score >= 70:
        return "Good! You have a decent understanding but can improve."
    if score >= 60:
        return "Fair! You need to review some concepts."
    return "You need to study more about acids and bases."


def placeholder_questions(filename: str) -> List[MCQQuestion]:
    """Stand-in questions for an uploaded DOCX; the document content is not parsed."""
    return [
        MCQQuestion(
            id=1,
            question=f"Sample question from {filename}",
            options=["Option A", "Option B", "Option C", "Option D"],
            correct_answer=0,
            explanation="This is a sample question from the uploaded document.",
        ),
        MCQQuestion(
            id=2,
            question=f"Another question from {filename}",
            options=["Choice A", "Choice B", "Choice C", "Choice D"],
            correct_answer=1,
            explanation="This is another sample question from the uploaded document.",
        ),
    ]


class QuizService:
    def __init__(self, questions: Optional[Sequence[MCQQuestion]] = None, rng: Optional[random.Random] = None):
        self.questions = list(questions) if questions is not None else load_question_bank()
        self.rng = rng or random.Random()
        self.question_sets: Dict[str, QuestionSet] = {}

    def pool(self, question_set: Optional[str] = None) -> List[MCQQuestion]:
        """Questions of an uploaded set; unknown or missing set ids fall back to the default bank."""
        if question_set and question_set != DEFAULT_QUESTION_SET and question_set in self.question_sets:
            return self.question_sets[question_set].questions
        return self.questions

    def select_questions(self, count: int, question_set: Optional[str] = None) -> List[MCQQuestion]:
        pool = list(self.pool(question_set))
        self.rng.shuffle(pool)
        return pool[: max(count, 0)]

    def score(
        self,
        questions: Sequence[MCQQuestion],
        answers: Mapping[int, int],
        time_taken: int = 0,
    ) -> TestResult:
        correct = sum(1 for question in questions if answers.get(question.id) == question.correct_answer)
        return TestResult(
            total_questions=len(questions),
            correct_answers=correct,
            score=percentage_score(correct, len(questions)),
            answers=dict(answers),
            time_taken=time_taken,
        )

    def submit(
        self,
        question_ids: Sequence[int],
        answers: Mapping[int, int],
        time_taken: int = 0,
        question_set: Optional[str] = None,
    ) -> TestResult:
        """Score answers against the drawn questions; ids not in the pool are ignored."""
        by_id = {question.id: question for question in self.pool(question_set)}
        drawn = [by_id[question_id] for question_id in question_ids if question_id in by_id]
        result = self.score(drawn, answers, time_taken)
        logger.info(f"Quiz submitted: {result.correct_answers}/{result.total_questions} ({result.score}%)")
        return result

    def register_question_set(self, name: str, filename: str, questions: List[MCQQuestion]) -> QuestionSet:
        set_id = int(time.time() * 1000)
        while str(set_id) in self.question_sets:
            set_id += 1
        question_set = QuestionSet(id=str(set_id), name=name, filename=filename, questions=questions)
        self.question_sets[question_set.id] = question_set
        return question_set

    @staticmethod
    def record_result(payload: Dict[str, Any]) -> Dict[str, Any]:
        """Echo a client-side result with a server timestamp; results are not persisted."""
        return {**payload, "timestamp": datetime.now(UTC).isoformat(timespec="milliseconds")}
