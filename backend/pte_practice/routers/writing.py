from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends

from .. import fallback
from ..dependencies import get_oracle
from ..evaluation import envelope, failure_boundary, resolve
from ..gemini_client import GeminiClient
from ..prompts import build_essay_prompt, build_essay_topic_prompt, build_reading_text_prompt, build_summary_prompt
from ..schemas import EssayRequest, EssayTopicRequest, ReadingTextRequest, SummaryRequest
from ..tasks import TaskType, get_spec, time_management
from ..text import count_words
from ..validation import elapsed_seconds, require_text


router = APIRouter(prefix="/api", tags=["writing"])


@router.post("/evaluate-essay")
async def evaluate_essay(req: EssayRequest, oracle: GeminiClient = Depends(get_oracle)):
	spec = get_spec(TaskType.ESSAY)
	topic, essay = require_text(req.essayTopic, req.userEssay, message="Essay topic and response are required")
	time_spent = elapsed_seconds(req.timeSpent, "timeSpent")
	with failure_boundary(spec.error_message):
		reply = await oracle.generate(build_essay_prompt(topic, essay, time_spent))
		result = resolve(TaskType.ESSAY, reply, lambda: fallback.essay(essay, time_spent))
		# Word count and timing are known locally; never trust the model's version
		result = result.model_copy(update={
			"wordCount": count_words(essay),
			"timeManagement": time_management(spec, time_spent),
		})
	return envelope(result)


@router.post("/evaluate-summary")
async def evaluate_summary(req: SummaryRequest, oracle: GeminiClient = Depends(get_oracle)):
	spec = get_spec(TaskType.SUMMARY)
	original, summary = require_text(req.originalText, req.userSummary, message="Original text and summary are required")
	time_spent = elapsed_seconds(req.timeSpent, "timeSpent")
	with failure_boundary(spec.error_message):
		reply = await oracle.generate(build_summary_prompt(original, summary, time_spent))
		result = resolve(TaskType.SUMMARY, reply, lambda: fallback.summary(summary, time_spent))
		result = result.model_copy(update={
			"wordCount": count_words(summary),
			"timeManagement": time_management(spec, time_spent),
		})
	return envelope(result)


@router.post("/generate-essay-topic")
async def generate_essay_topic(req: Optional[EssayTopicRequest] = None, oracle: GeminiClient = Depends(get_oracle)):
	req = req or EssayTopicRequest()
	with failure_boundary("Failed to generate essay topic"):
		content = (await oracle.generate(build_essay_topic_prompt(req.type, req.difficulty))).strip()
	return {
		"success": True,
		"content": content,
		"type": req.type,
		"difficulty": req.difficulty,
		"timestamp": datetime.now(timezone.utc).isoformat(),
	}


@router.post("/generate-reading-text")
async def generate_reading_text(req: Optional[ReadingTextRequest] = None, oracle: GeminiClient = Depends(get_oracle)):
	req = req or ReadingTextRequest()
	topic = req.topic.strip() or "general"
	with failure_boundary("Failed to generate reading text"):
		text = (await oracle.generate(build_reading_text_prompt(topic, req.difficulty))).strip()
	return {
		"success": True,
		"text": text,
		"wordCount": count_words(text),
		"topic": topic,
		"difficulty": req.difficulty,
		"timestamp": datetime.now(timezone.utc).isoformat(),
	}
