from quizforge.schemas import Quiz
from quizforge.services.scoring import normalize_answer, score_question, score_quiz


def _matching():
    return Quiz.model_validate({
        "quiz_title": "m", "quiz_type": "matching", "question_count": 1, "source_summary": "",
        "questions": [{"id": "m1", "type": "matching", "explanation": "",
                       "pairs": [{"left": "A", "right": "1"}, {"left": "B", "right": "2"},
                                 {"left": "C", "right": "3"}]}],
    })


def test_mcq_exact_index(quiz):
    q = quiz.questions[0]
    assert score_question(q, 2).score == 1
    assert score_question(q, 1).score == 0
    assert score_question(q, None).score == 0
    assert score_question(q, "2").score == 0
    res = score_question(q, 2)
    assert res.total == 1
    assert res.correct_answer == "Network"


def test_text_answers_ignore_case_and_whitespace():
    quiz = Quiz.model_validate({
        "quiz_title": "t", "quiz_type": "fill_blank", "question_count": 1, "source_summary": "",
        "questions": [{"id": "f1", "type": "fill_blank", "prompt": "Capital of France?",
                       "answers": ["Paris"], "explanation": ""}],
    })
    q = quiz.questions[0]
    for given in ("Paris", " paris ", "PARIS"):
        assert score_question(q, given).correct is True
    assert score_question(q, "Lyon").correct is False
    assert score_question(q, None).correct is False


def test_identification_accepts_any_listed_answer(quiz):
    q = quiz.questions[2]
    assert score_question(q, "domain   name system").correct
    assert score_question(q, "dns").correct
    assert score_question(q, "").correct is False
    assert score_question(q, "dns").correct_answer == "DNS / Domain Name System"


def test_matching_partial_credit():
    quiz = _matching()
    result = score_quiz(quiz, {"m1": {"0": "1", "1": "2", "2": "1"}})
    item = result.results[0]
    assert (item.score, item.total, item.correct) == (2, 3, False)
    assert result.total_score == 2
    assert result.total_possible == 3
    assert result.percent == 67


def test_matching_all_pairs_correct_normalized():
    item = score_quiz(_matching(), {"m1": {"0": " 1", "1": "2 ", "2": "3"}}).results[0]
    assert item.correct is True
    assert item.correct_answer == "A → 1; B → 2; C → 3"


def test_matching_missing_answer_scores_zero():
    item = score_quiz(_matching(), {}).results[0]
    assert (item.score, item.total) == (0, 3)


def test_aggregate_and_percent(quiz):
    answers = {"q1": 2, "q2": " ack ", "q4": {"0": "80", "1": "22"}}
    result = score_quiz(quiz, answers)
    assert result.total_score == 3
    assert result.total_possible == 6
    assert result.percent == 50


def test_empty_quiz_percent_is_zero():
    quiz = Quiz.model_validate({"quiz_title": "t", "quiz_type": "mcq", "question_count": 0,
                                "source_summary": "s", "questions": []})
    result = score_quiz(quiz, {})
    assert (result.total_score, result.total_possible, result.percent) == (0, 0, 0)


def test_percent_rounds_half_up():
    quiz = Quiz.model_validate({
        "quiz_title": "t", "quiz_type": "mcq", "question_count": 8, "source_summary": "s",
        "questions": [{"id": f"q{i}", "type": "mcq", "prompt": "p", "choices": ["a", "b"],
                       "answer_index": 0, "explanation": ""} for i in range(8)],
    })
    assert score_quiz(quiz, {"q0": 0}).percent == 13


def test_scoring_is_repeatable_and_pure(quiz):
    answers = {"q1": 1, "q2": "ACK", "q4": {"0": "80"}}
    snapshot = {"q1": 1, "q2": "ACK", "q4": {"0": "80"}}
    before = quiz.model_dump()
    first = score_quiz(quiz, answers)
    second = score_quiz(quiz, answers)
    assert first == second
    assert answers == snapshot
    assert quiz.model_dump() == before


def test_normalize_answer():
    assert normalize_answer("  Hello \t  World\n") == "hello world"
