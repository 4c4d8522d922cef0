"""
Task registry
=============

One `TaskSpec` per scoring task. The instruction builder, the reply
normalizer and the fallback evaluator all read weights, field names and
bounds from here, so a task's scoring scheme is declared exactly once.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, Optional, Tuple


MIN_SCORE = 1
MAX_SCORE = 100


class TaskType(str, Enum):
	IMAGE_DESCRIPTION = "image-description-score"
	ESSAY = "essay"
	SUMMARY = "summary"
	LISTENING = "listening-response"
	LISTENING_AUDIO = "listening-response-audio"
	SPEAKING = "speaking"


@dataclass(frozen=True)
class Criterion:
	key: str
	label: str
	weight: int
	guidance: str
	feedback_hint: str


@dataclass(frozen=True)
class TaskSpec:
	task: TaskType
	title: str
	criteria: Tuple[Criterion, ...]
	# Extra reply fields requested from the model: name -> placeholder shown in the schema
	extra_fields: Tuple[Tuple[str, str], ...] = ()
	word_bounds: Optional[Tuple[int, int]] = None
	time_limit_seconds: Optional[int] = None
	error_message: str = "Failed to evaluate response"
	considerations: Tuple[str, ...] = field(default_factory=tuple)

	@property
	def weights(self) -> Dict[str, int]:
		return {c.key: c.weight for c in self.criteria}

	@property
	def score_keys(self) -> Tuple[str, ...]:
		return tuple(c.key for c in self.criteria)

	def within_word_bounds(self, word_count: int) -> bool:
		if self.word_bounds is None:
			return True
		low, high = self.word_bounds
		return low <= word_count <= high


def clamp_score(value: float) -> int:
	"""Round half up and clamp into [1, 100]."""
	return max(MIN_SCORE, min(MAX_SCORE, int(value + 0.5)))


def weighted_score(spec: TaskSpec, scores: Mapping[str, int]) -> int:
	total = sum(scores[c.key] * c.weight for c in spec.criteria)
	return clamp_score(total / 100)


# Response-time bands for the timed listening tasks
EXCELLENT_RESPONSE_SECONDS = 3
GOOD_RESPONSE_SECONDS = 5


def response_time_category(seconds: float) -> str:
	if seconds <= EXCELLENT_RESPONSE_SECONDS:
		return "excellent"
	if seconds <= GOOD_RESPONSE_SECONDS:
		return "good"
	return "needs improvement"


def time_management(spec: TaskSpec, seconds: float) -> str:
	if spec.time_limit_seconds is None or seconds <= spec.time_limit_seconds:
		return "good"
	return "needs improvement"


_LISTENING_CRITERIA = (
	Criterion("correctness", "Correctness", 60, "Is the answer correct or acceptable?", "feedback on answer accuracy"),
	Criterion("pronunciation", "Pronunciation", 25, "Was the response clear and understandable?", "feedback on speech clarity"),
	Criterion("speed", "Speed", 15, "Did they respond quickly (within 5 seconds is ideal)?", "feedback on response time"),
)

_LISTENING_EXTRAS = (
	("isCorrect", "[boolean]"),
	("correctAnswer", '"[the most appropriate answer from expected answers]"'),
	("suggestions", '"[improvement tips]"'),
)

_LISTENING_CONSIDERATIONS = (
	"Synonyms and alternative correct answers",
	"Minor pronunciation variations",
	"Context and reasonableness of answer",
	"Response time (0-3 sec = excellent, 3-5 sec = good, 5+ sec = needs improvement)",
)


TASK_SPECS: Dict[TaskType, TaskSpec] = {
	TaskType.IMAGE_DESCRIPTION: TaskSpec(
		task=TaskType.IMAGE_DESCRIPTION,
		title="describe image",
		criteria=(
			Criterion("content", "Content accuracy", 40, "How well does the user description match the image content?", "feedback on content accuracy"),
			Criterion("fluency", "Language fluency", 30, "Grammar, vocabulary, sentence structure", "feedback on language fluency"),
			Criterion("details", "Detail coverage", 20, "How many relevant details were mentioned?", "feedback on detail coverage"),
			Criterion("clarity", "Clarity", 10, "How clear and coherent is the description?", "feedback on clarity"),
		),
		extra_fields=(("suggestions", '"[specific suggestions for improvement]"'),),
		error_message="Failed to score description",
	),
	TaskType.ESSAY: TaskSpec(
		task=TaskType.ESSAY,
		title="essay",
		criteria=(
			Criterion("contentIdeas", "Content & Ideas", 35, "Relevance to topic, depth of ideas, examples", "feedback on ideas and relevance"),
			Criterion("organization", "Organization", 25, "Structure, logical flow, introduction/conclusion", "feedback on structure and flow"),
			Criterion("languageUse", "Language Use", 25, "Grammar, vocabulary, sentence variety", "feedback on grammar and vocabulary"),
			Criterion("taskAchievement", "Task Achievement", 15, "Meets word count (200-300), addresses prompt", "feedback on meeting requirements"),
		),
		extra_fields=(
			("suggestions", '"[specific improvement tips]"'),
			("strengths", "[array of positive aspects]"),
			("areasToImprove", "[array of specific areas needing work]"),
			("hasIntroduction", "[boolean]"),
			("hasConclusion", "[boolean]"),
		),
		word_bounds=(200, 300),
		time_limit_seconds=600,
		error_message="Failed to evaluate essay",
		considerations=(
			"Word count should be 200-300 words",
			"Should have clear introduction, body, conclusion",
			"Ideas should be well-developed and supported",
			"Time management (completed within 10 minutes)",
		),
	),
	TaskType.SUMMARY: TaskSpec(
		task=TaskType.SUMMARY,
		title="summary",
		criteria=(
			Criterion("content", "Content", 50, "Does the summary capture the main idea and key points?", "feedback on main idea identification and completeness"),
			Criterion("conciseness", "Conciseness", 25, "Is it appropriately brief (5-75 words) while being complete?", "feedback on brevity and word count"),
			Criterion("languageQuality", "Language Quality", 25, "Grammar, vocabulary, sentence structure", "feedback on grammar and vocabulary"),
		),
		extra_fields=(
			("suggestions", '"[specific improvement tips]"'),
			("mainIdeasMissed", "[array of important points not included]"),
			("strengths", "[array of positive aspects]"),
		),
		word_bounds=(5, 75),
		time_limit_seconds=600,
		error_message="Failed to evaluate summary",
		considerations=(
			"Word count should be 5-75 words",
			"Should identify the main idea accurately",
			"Should include most important supporting details",
			"Time management (completed within 10 minutes)",
		),
	),
	TaskType.LISTENING: TaskSpec(
		task=TaskType.LISTENING,
		title="listening response",
		criteria=_LISTENING_CRITERIA,
		extra_fields=_LISTENING_EXTRAS,
		error_message="Failed to evaluate listening response",
		considerations=_LISTENING_CONSIDERATIONS,
	),
	TaskType.LISTENING_AUDIO: TaskSpec(
		task=TaskType.LISTENING_AUDIO,
		title="listening response audio",
		criteria=_LISTENING_CRITERIA,
		extra_fields=_LISTENING_EXTRAS + (("transcript", '"[what was heard in the audio]"'),),
		error_message="Failed to evaluate listening response audio",
		considerations=_LISTENING_CONSIDERATIONS + ("Audio quality and clarity",),
	),
	TaskType.SPEAKING: TaskSpec(
		task=TaskType.SPEAKING,
		title="read aloud",
		criteria=(
			Criterion("content", "Content", 40, "Word accuracy, how many words were read correctly", "specific feedback on word accuracy and language used"),
			Criterion("fluency", "Oral Fluency", 35, "Natural pace, smooth delivery, appropriate pausing", "feedback on speaking rhythm and flow"),
			Criterion("pronunciation", "Pronunciation", 25, "Clear articulation, correct sound production", "feedback on sound clarity"),
		),
		extra_fields=(
			("suggestions", '"[specific tips for improvement]"'),
			("mistakesFound", "[array of missed or mispronounced words]"),
			("strengths", "[array of positive aspects, if any]"),
		),
		error_message="Failed to evaluate speaking",
		considerations=(
			"Missing words, substitutions, insertions",
			"Speaking rhythm and natural flow",
			"Clear pronunciation of individual sounds",
			"If the transcription shows non-English text or no speech detected, give very low scores (10-20)",
			"If the user spoke in a different language, the content score should be very low",
		),
	),
}


def get_spec(task: TaskType) -> TaskSpec:
	return TASK_SPECS[task]
