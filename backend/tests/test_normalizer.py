"""Tests for reply extraction and validation."""
import json

import pytest

from pte_practice.exceptions import ExtractionFailed
from pte_practice.normalizer import extract_json, normalize, parse_as
from pte_practice.schemas import EssayEvaluation, ListeningQuestion
from pte_practice.tasks import TaskType


ESSAY_REPLY = {
    "overallScore": 78,
    "scores": {"contentIdeas": 80, "organization": 70, "languageUse": 75, "taskAchievement": 90},
    "feedback": {"contentIdeas": "Relevant.", "overall": "Solid essay."},
    "suggestions": "Add examples.",
    "strengths": ["Clear thesis"],
    "areasToImprove": ["Transitions"],
    "hasIntroduction": True,
    "hasConclusion": True,
}


class TestExtractJson:
    def test_direct_parse(self):
        text = json.dumps(ESSAY_REPLY)
        assert extract_json(text) == ESSAY_REPLY

    def test_direct_parse_ignores_surrounding_whitespace(self):
        assert extract_json("\n  " + json.dumps(ESSAY_REPLY) + "  \n") == ESSAY_REPLY

    def test_fenced_block_with_json_tag(self):
        text = "```json\n" + json.dumps(ESSAY_REPLY) + "\n```"
        assert extract_json(text) == extract_json(json.dumps(ESSAY_REPLY))

    def test_fenced_block_without_tag_inside_prose(self):
        text = "Here is the evaluation:\n```\n" + json.dumps(ESSAY_REPLY) + "\n```\nGood luck!"
        assert extract_json(text) == ESSAY_REPLY

    def test_brace_span_inside_prose(self):
        text = "Sure! " + json.dumps(ESSAY_REPLY) + " Let me know if you need more."
        assert extract_json(text) == ESSAY_REPLY

    def test_brace_span_is_outermost(self):
        # First '{' to last '}' spans both fragments and the prose between them
        text = 'First {"a": 1} and then {"b": 2}'
        with pytest.raises(ExtractionFailed):
            extract_json(text)

    def test_nested_object_is_kept_whole(self):
        text = 'Result: {"outer": {"inner": 1}} done'
        assert extract_json(text) == {"outer": {"inner": 1}}

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    def test_blank_reply(self, text):
        with pytest.raises(ExtractionFailed):
            extract_json(text)

    def test_prose_without_object(self):
        with pytest.raises(ExtractionFailed):
            extract_json("I'm sorry, I cannot evaluate this essay.")

    def test_syntactically_invalid_json(self):
        with pytest.raises(ExtractionFailed):
            extract_json('{"overallScore": 70, "scores": {"content": 65,}')

    def test_top_level_array_is_not_an_object(self):
        with pytest.raises(ExtractionFailed):
            extract_json("[1, 2, 3]")

    def test_idempotent(self):
        text = "```json\n" + json.dumps(ESSAY_REPLY) + "\n```"
        assert extract_json(text) == extract_json(text)


class TestNormalize:
    def test_valid_reply_yields_identical_fields(self):
        result = normalize(TaskType.ESSAY, json.dumps(ESSAY_REPLY))
        assert isinstance(result, EssayEvaluation)
        assert result.overallScore == 78
        assert result.scores == ESSAY_REPLY["scores"]
        assert result.feedback == ESSAY_REPLY["feedback"]
        assert result.strengths == ["Clear thesis"]
        assert result.evaluationSource == "oracle"

    def test_same_result_twice(self):
        text = "noise " + json.dumps(ESSAY_REPLY) + " noise"
        assert normalize(TaskType.ESSAY, text) == normalize(TaskType.ESSAY, text)

    def test_missing_aggregate_fails(self):
        data = {k: v for k, v in ESSAY_REPLY.items() if k != "overallScore"}
        with pytest.raises(ExtractionFailed):
            normalize(TaskType.ESSAY, json.dumps(data))

    def test_missing_sub_score_fails(self):
        data = dict(ESSAY_REPLY, scores={"contentIdeas": 80, "organization": 70})
        with pytest.raises(ExtractionFailed):
            normalize(TaskType.ESSAY, json.dumps(data))

    def test_missing_feedback_fails(self):
        data = {k: v for k, v in ESSAY_REPLY.items() if k != "feedback"}
        with pytest.raises(ExtractionFailed):
            normalize(TaskType.ESSAY, json.dumps(data))

    def test_non_numeric_score_fails(self):
        data = dict(ESSAY_REPLY, scores=dict(ESSAY_REPLY["scores"], organization="good"))
        with pytest.raises(ExtractionFailed):
            normalize(TaskType.ESSAY, json.dumps(data))

    def test_other_task_schema_does_not_match(self):
        with pytest.raises(ExtractionFailed):
            normalize(TaskType.SUMMARY, json.dumps(ESSAY_REPLY))

    def test_model_cannot_claim_fallback_source(self):
        data = dict(ESSAY_REPLY, evaluationSource="fallback")
        assert normalize(TaskType.ESSAY, json.dumps(data)).evaluationSource == "oracle"

    def test_listening_question_model(self):
        question = parse_as(ListeningQuestion, '{"question": "Opposite of up?", "expectedAnswers": "down"}')
        assert question.expectedAnswers == ["down"]
