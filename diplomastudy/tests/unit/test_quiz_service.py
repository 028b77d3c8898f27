import random

import pytest

from diplomastudy.models.quiz import MCQQuestion
from diplomastudy.services.quiz_service import (
    QuizService,
    load_question_bank,
    percentage_score,
    placeholder_questions,
    score_message,
)


@pytest.fixture
def quiz_service():
    return QuizService(rng=random.Random(42))


def test_question_bank_has_fifty_well_formed_questions():
    questions = load_question_bank()

    assert len(questions) == 50
    assert len({question.id for question in questions}) == 50
    for question in questions:
        assert len(question.options) == 4
        assert 0 <= question.correct_answer < 4


@pytest.mark.parametrize("count", [15, 30, 50])
def test_select_questions_returns_distinct_sample(quiz_service, count):
    selected = quiz_service.select_questions(count)

    assert len(selected) == count
    assert len({question.id for question in selected}) == count


def test_select_more_than_pool_returns_whole_pool(quiz_service):
    assert len(quiz_service.select_questions(500)) == 50


@pytest.mark.parametrize(
    "correct, total, expected",
    [(0, 15, 0), (15, 15, 100), (1, 3, 33), (2, 3, 67), (1, 8, 13), (7, 30, 23), (0, 0, 0)],
)
def test_percentage_score_rounds_half_up(correct, total, expected):
    assert percentage_score(correct, total) == expected


def test_quiz_scoring_scenario(quiz_service):
    selected = quiz_service.select_questions(15)
    answers = {}
    for index, question in enumerate(selected):
        # Answer every third question wrong
        answers[question.id] = (question.correct_answer + 1) % 4 if index % 3 == 0 else question.correct_answer

    result = quiz_service.score(selected, answers, time_taken=120)

    expected_correct = sum(1 for question in selected if answers[question.id] == question.correct_answer)
    assert result.total_questions == 15
    assert result.correct_answers == expected_correct == 10
    assert result.score == 67
    assert result.time_taken == 120


def test_submit_ignores_unknown_ids_and_unanswered(quiz_service):
    bank = {question.id: question for question in quiz_service.questions}
    first, second = list(bank)[:2]

    result = quiz_service.submit([first, second, 999], {first: bank[first].correct_answer})

    assert result.total_questions == 2
    assert result.correct_answers == 1
    assert result.score == 50


@pytest.mark.parametrize(
    "score, fragment",
    [(95, "Excellent"), (90, "Excellent"), (85, "Very good"), (72, "Good!"), (60, "Fair"), (10, "study more")],
)
def test_score_message_bands(score, fragment):
    assert fragment in score_message(score)


def test_placeholder_questions_mention_filename():
    questions = placeholder_questions("week1.docx")

    assert [question.id for question in questions] == [1, 2]
    assert "week1.docx" in questions[0].question
    assert questions[1].correct_answer == 1


def test_registered_question_set_becomes_a_pool(quiz_service):
    custom = [MCQQuestion(id=1, question="Q?", options=["a", "b", "c", "d"], correct_answer=2)]

    first = quiz_service.register_question_set("Week 1", "2025_week1.docx", custom)
    second = quiz_service.register_question_set("Week 2", "2025_week2.docx", custom)

    assert first.id != second.id
    assert quiz_service.select_questions(15, first.id) == custom
    assert len(quiz_service.select_questions(15, "unknown")) == 15


def test_record_result_adds_timestamp():
    result = QuizService.record_result({"score": 80})

    assert result["score"] == 80
    assert "timestamp" in result
