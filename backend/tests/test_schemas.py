"""Tests for result model coercion and weighting checks."""
import pytest
from pydantic import ValidationError

from pte_practice.schemas import (
    DescriptionEvaluation,
    ListeningEvaluation,
    ListeningQuestion,
    SpeakingEvaluation,
    SummaryEvaluation,
)
from pte_practice.tasks import TaskType, clamp_score, get_spec, weighted_score


def listening_reply(**overrides):
    data = {
        "overallScore": 94,
        "scores": {"correctness": 100, "pronunciation": 80, "speed": 90},
        "feedback": {"overall": "Great."},
    }
    data.update(overrides)
    return data


class TestClampScore:
    @pytest.mark.parametrize(
        "value, expected",
        [(0, 1), (-20, 1), (1, 1), (49.5, 50), (49.4, 49), (100, 100), (140, 100)],
    )
    def test_clamp(self, value, expected):
        assert clamp_score(value) == expected


class TestWeights:
    @pytest.mark.parametrize("task", list(TaskType))
    def test_weights_sum_to_100(self, task):
        assert sum(get_spec(task).weights.values()) == 100

    def test_listening_weighted_sum(self):
        spec = get_spec(TaskType.LISTENING)
        assert weighted_score(spec, {"correctness": 100, "pronunciation": 80, "speed": 90}) == 94


class TestEvaluationResult:
    def test_consistent_aggregate_is_kept(self):
        result = ListeningEvaluation(**listening_reply(overallScore=93))
        assert result.overallScore == 93

    def test_inconsistent_aggregate_is_replaced(self):
        result = ListeningEvaluation(**listening_reply(overallScore=40))
        assert result.overallScore == 94

    def test_out_of_range_scores_are_clamped(self):
        result = ListeningEvaluation(
            **listening_reply(scores={"correctness": 130, "pronunciation": -5, "speed": 90})
        )
        assert result.scores == {"correctness": 100, "pronunciation": 1, "speed": 90}
        assert 1 <= result.overallScore <= 100

    def test_numeric_strings_are_accepted(self):
        result = ListeningEvaluation(
            **listening_reply(overallScore="94", scores={"correctness": "100", "pronunciation": 80.4, "speed": 90})
        )
        assert result.scores["correctness"] == 100
        assert result.scores["pronunciation"] == 80

    @pytest.mark.parametrize("bad", [None, True, "high", float("nan"), float("inf"), 10**400])
    def test_invalid_score_values(self, bad):
        with pytest.raises(ValidationError):
            ListeningEvaluation(**listening_reply(scores={"correctness": bad, "pronunciation": 80, "speed": 90}))

    def test_oversized_aggregate_is_a_validation_error(self):
        with pytest.raises(ValidationError):
            ListeningEvaluation(**listening_reply(overallScore=10**400))

    @pytest.mark.parametrize("bad", [float("inf"), float("nan"), "many", None])
    def test_unusable_word_count_becomes_zero(self, bad):
        result = SummaryEvaluation(
            overallScore=70,
            scores={"content": 70, "conciseness": 70, "languageQuality": 70},
            feedback={"overall": "ok"},
            wordCount=bad,
        )
        assert result.wordCount == 0

    def test_description_exposes_score(self):
        result = DescriptionEvaluation(
            overallScore=72,
            scores={"content": 70, "fluency": 70, "details": 70, "clarity": 90},
            feedback={"overall": "ok"},
        )
        assert result.model_dump()["score"] == result.overallScore == 72

    def test_unknown_sub_scores_are_dropped(self):
        result = ListeningEvaluation(
            **listening_reply(scores={"correctness": 100, "pronunciation": 80, "speed": 90, "grammar": 10})
        )
        assert set(result.scores) == {"correctness", "pronunciation", "speed"}

    def test_string_feedback_becomes_overall(self):
        result = ListeningEvaluation(**listening_reply(feedback="Nicely done."))
        assert result.feedback == {"overall": "Nicely done."}

    @pytest.mark.parametrize("bad", [{}, "", "   ", None, ["a"]])
    def test_empty_feedback_rejected(self, bad):
        with pytest.raises(ValidationError):
            ListeningEvaluation(**listening_reply(feedback=bad))

    def test_list_fields_accept_single_string(self):
        result = SummaryEvaluation(
            overallScore=70,
            scores={"content": 70, "conciseness": 70, "languageQuality": 70},
            feedback={"overall": "ok"},
            mainIdeasMissed="the conclusion",
            strengths=None,
        )
        assert result.mainIdeasMissed == ["the conclusion"]
        assert result.strengths == []

    def test_unknown_fields_are_ignored(self):
        result = DescriptionEvaluation(
            overallScore=70,
            scores={"content": 70, "fluency": 70, "details": 70, "clarity": 70},
            feedback={"overall": "ok"},
            confidence="high",
        )
        assert not hasattr(result, "confidence")

    def test_speaking_defaults(self):
        result = SpeakingEvaluation(
            overallScore=70,
            scores={"content": 70, "fluency": 70, "pronunciation": 70},
            feedback={"overall": "ok"},
        )
        assert result.audioProcessed is True
        assert result.mistakesFound == []
        assert result.evaluationSource == "oracle"


class TestListeningQuestion:
    def test_requires_answers(self):
        with pytest.raises(ValidationError):
            ListeningQuestion(question="What is the capital of France?", expectedAnswers=[])

    def test_requires_question(self):
        with pytest.raises(ValidationError):
            ListeningQuestion(question="  ", expectedAnswers=["Paris"])

    def test_blank_answers_are_dropped(self):
        question = ListeningQuestion(question="Capital of France?", expectedAnswers=["Paris", " ", None])
        assert question.expectedAnswers == ["Paris"]
