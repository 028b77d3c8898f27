from datetime import UTC, datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from diplomastudy.models.folders import CamelModel


class MCQQuestion(CamelModel):
    id: int
    question: str
    options: List[str]
    correct_answer: int  # Index into options
    explanation: Optional[str] = None


class TestResult(CamelModel):
    __test__ = False  # not a pytest test class

    total_questions: int
    correct_answers: int
    score: int
    answers: Dict[int, int] = Field(default_factory=dict)
    time_taken: int = 0


class QuizSubmission(CamelModel):
    """Answers for a drawn question set: question id -> chosen option index"""

    question_ids: List[int] = Field(default_factory=list)
    answers: Dict[int, int] = Field(default_factory=dict)
    time_taken: int = 0
    question_set: Optional[str] = None


class TestResultPayload(CamelModel):
    __test__ = False

    score: Optional[int] = None
    total_questions: Optional[int] = None
    correct_answers: Optional[int] = None
    time_taken: Optional[int] = None
    answers: Dict[str, Any] = Field(default_factory=dict)


class QuestionSet(CamelModel):
    """Questions extracted from an uploaded document, kept for the lifetime of the process"""

    id: str
    name: str
    filename: str
    questions: List[MCQQuestion]
    upload_date: str = Field(default_factory=lambda: datetime.now(UTC).isoformat(timespec="milliseconds"))
