import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from diplomastudy.config import Settings
from diplomastudy.dependencies import get_app_settings, get_quiz_service
from diplomastudy.models.quiz import QuizSubmission, TestResultPayload
from diplomastudy.models.responses import (
    MessageResponse,
    QuestionSetsResponse,
    QuestionSetSummary,
    QuestionsResponse,
    QuizResultResponse,
    TestResultSavedResponse,
)
from diplomastudy.services.quiz_service import QuizService, score_message

router = APIRouter(tags=["Quiz"])
logger = logging.getLogger(__name__)


@router.get("/quiz/questions", response_model=QuestionsResponse)
async def get_questions(
    count: Optional[int] = Query(None, ge=1),
    question_set: Optional[str] = Query(None, alias="questionSet"),
    settings: Settings = Depends(get_app_settings),
    quiz_service: QuizService = Depends(get_quiz_service),
) -> QuestionsResponse:
    """Draw a shuffled sample of questions from the default bank or an uploaded set."""
    questions = quiz_service.select_questions(count or settings.DEFAULT_QUESTION_COUNT, question_set)
    return QuestionsResponse(questions=questions)


@router.get("/quiz/question-sets", response_model=QuestionSetsResponse)
async def list_question_sets(quiz_service: QuizService = Depends(get_quiz_service)) -> QuestionSetsResponse:
    return QuestionSetsResponse(
        question_sets=[
            QuestionSetSummary(
                id=question_set.id,
                name=question_set.name,
                filename=question_set.filename,
                question_count=len(question_set.questions),
                upload_date=question_set.upload_date,
            )
            for question_set in quiz_service.question_sets.values()
        ]
    )


@router.post("/quiz/submit", response_model=QuizResultResponse)
async def submit_quiz(
    submission: QuizSubmission,
    quiz_service: QuizService = Depends(get_quiz_service),
) -> QuizResultResponse:
    result = quiz_service.submit(
        submission.question_ids,
        submission.answers,
        time_taken=submission.time_taken,
        question_set=submission.question_set,
    )
    return QuizResultResponse(**result.model_dump(), message=score_message(result.score))


@router.post("/test-results", response_model=TestResultSavedResponse)
async def save_test_result(payload: TestResultPayload) -> TestResultSavedResponse:
    """Acknowledge a client-side test result. Nothing is stored."""
    result = QuizService.record_result(payload.model_dump(by_alias=True))
    logger.info(f"Test result received: score={payload.score} total={payload.total_questions}")
    return TestResultSavedResponse(success=True, message="Test results saved successfully", result=result)


@router.get("/test-results", response_model=MessageResponse)
async def get_test_results() -> MessageResponse:
    return MessageResponse(message="Test results API endpoint")
