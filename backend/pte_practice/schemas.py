from __future__ import annotations

import logging
import math
from typing import Annotated, Any, ClassVar, Dict, List, Literal, Optional, Type

from pydantic import BaseModel, BeforeValidator, ConfigDict, computed_field, model_validator

from .tasks import TaskType, clamp_score, get_spec, weighted_score


logger = logging.getLogger(__name__)


# ============================================================================
# FIELD COERCION
# ============================================================================

def _as_score(value: Any) -> int:
	if isinstance(value, bool) or value is None:
		raise ValueError("score must be a number")
	try:
		number = float(value)
	except (TypeError, ValueError, OverflowError):
		raise ValueError(f"score is not numeric: {value!r}")
	if math.isnan(number) or math.isinf(number):
		raise ValueError("score must be finite")
	return clamp_score(number)


def _as_score_map(value: Any) -> Dict[str, int]:
	if not isinstance(value, dict):
		raise ValueError("scores must be an object")
	return {str(k): _as_score(v) for k, v in value.items()}


def _as_feedback(value: Any) -> Dict[str, str]:
	if isinstance(value, str) and value.strip():
		return {"overall": value.strip()}
	if not isinstance(value, dict) or not value:
		raise ValueError("feedback must be a non-empty object")
	return {str(k): str(v).strip() for k, v in value.items() if v is not None}


def _as_text(value: Any) -> str:
	if value is None:
		return ""
	if isinstance(value, (list, tuple)):
		return " ".join(str(v).strip() for v in value if v is not None)
	return str(value).strip()


def _as_list(value: Any) -> List[str]:
	if value is None:
		return []
	if isinstance(value, str):
		return [value.strip()] if value.strip() else []
	if isinstance(value, (list, tuple)):
		return [str(v).strip() for v in value if v is not None and str(v).strip()]
	return [str(value)]


def _as_count(value: Any) -> int:
	try:
		return max(0, int(value))
	except (TypeError, ValueError, OverflowError):
		return 0


Score = Annotated[int, BeforeValidator(_as_score)]
ScoreMap = Annotated[Dict[str, int], BeforeValidator(_as_score_map)]
Feedback = Annotated[Dict[str, str], BeforeValidator(_as_feedback)]
Text = Annotated[str, BeforeValidator(_as_text)]
TextList = Annotated[List[str], BeforeValidator(_as_list)]
Count = Annotated[int, BeforeValidator(_as_count)]


# ============================================================================
# STRUCTURED RESULTS
# ============================================================================

class EvaluationResult(BaseModel):
	"""Structured scoring result shared by every task.

	Sub-scores are restricted to the task's criteria and the aggregate is
	checked against the task weights: an aggregate more than one point away
	from the weighted sum is replaced by it.
	"""
	task: ClassVar[TaskType]
	model_config = ConfigDict(extra="ignore")

	overallScore: Score
	scores: ScoreMap
	feedback: Feedback
	suggestions: Text = ""
	evaluationSource: Literal["oracle", "fallback"] = "oracle"

	@model_validator(mode="after")
	def _check_weighting(self) -> "EvaluationResult":
		spec = get_spec(self.task)
		missing = [key for key in spec.score_keys if key not in self.scores]
		if missing:
			raise ValueError(f"missing sub-scores: {', '.join(missing)}")
		self.scores = {key: self.scores[key] for key in spec.score_keys}
		expected = weighted_score(spec, self.scores)
		if abs(self.overallScore - expected) > 1:
			logger.info(
				"Replacing %s aggregate %s with weighted sum %s",
				self.task.value, self.overallScore, expected,
			)
			self.overallScore = expected
		return self


class DescriptionEvaluation(EvaluationResult):
	task: ClassVar[TaskType] = TaskType.IMAGE_DESCRIPTION

	# The describe-image page reads the aggregate as `score`
	@computed_field
	@property
	def score(self) -> int:
		return self.overallScore


class EssayEvaluation(EvaluationResult):
	task: ClassVar[TaskType] = TaskType.ESSAY

	strengths: TextList = []
	areasToImprove: TextList = []
	wordCount: Count = 0
	timeManagement: str = "good"
	hasIntroduction: bool = False
	hasConclusion: bool = False


class SummaryEvaluation(EvaluationResult):
	task: ClassVar[TaskType] = TaskType.SUMMARY

	mainIdeasMissed: TextList = []
	strengths: TextList = []
	wordCount: Count = 0
	timeManagement: str = "good"


class ListeningEvaluation(EvaluationResult):
	task: ClassVar[TaskType] = TaskType.LISTENING

	isCorrect: Optional[bool] = None
	correctAnswer: Text = ""
	responseTimeCategory: str = ""


class ListeningAudioEvaluation(ListeningEvaluation):
	task: ClassVar[TaskType] = TaskType.LISTENING_AUDIO

	transcript: Text = ""


class SpeakingEvaluation(EvaluationResult):
	task: ClassVar[TaskType] = TaskType.SPEAKING

	mistakesFound: TextList = []
	strengths: TextList = []
	transcript: Text = ""
	audioProcessed: bool = True


RESULT_MODELS: Dict[TaskType, Type[EvaluationResult]] = {
	TaskType.IMAGE_DESCRIPTION: DescriptionEvaluation,
	TaskType.ESSAY: EssayEvaluation,
	TaskType.SUMMARY: SummaryEvaluation,
	TaskType.LISTENING: ListeningEvaluation,
	TaskType.LISTENING_AUDIO: ListeningAudioEvaluation,
	TaskType.SPEAKING: SpeakingEvaluation,
}


# ============================================================================
# REQUESTS
# ============================================================================
# Fields are optional at the schema level; routers check presence so the
# caller gets a task-specific message instead of a generic validation error.

Difficulty = Literal["easy", "medium", "hard"]


class DescriptionScoreRequest(BaseModel):
	aiDescription: Optional[str] = None
	userDescription: Optional[str] = None


class EssayRequest(BaseModel):
	essayTopic: Optional[str] = None
	userEssay: Optional[str] = None
	timeSpent: Optional[float] = None


class SummaryRequest(BaseModel):
	originalText: Optional[str] = None
	userSummary: Optional[str] = None
	timeSpent: Optional[float] = None


class ListeningRequest(BaseModel):
	question: Optional[str] = None
	expectedAnswers: Optional[List[str]] = None
	userResponse: Optional[str] = None
	responseTime: Optional[float] = None


class EssayTopicRequest(BaseModel):
	type: Literal["argumentative", "descriptive", "narrative", "expository"] = "argumentative"
	difficulty: Difficulty = "medium"


class ReadingTextRequest(BaseModel):
	topic: str = "general"
	difficulty: Difficulty = "medium"


class SpeakingTextRequest(BaseModel):
	difficulty: Difficulty = "medium"


class ListeningQuestionRequest(BaseModel):
	difficulty: Difficulty = "medium"
	category: str = "general"


class ListeningQuestion(BaseModel):
	"""Generated listening prompt as returned by the model."""
	model_config = ConfigDict(extra="ignore")

	question: Text
	expectedAnswers: TextList
	hint: Text = ""

	@model_validator(mode="after")
	def _check_complete(self) -> "ListeningQuestion":
		if not self.question or not self.expectedAnswers:
			raise ValueError("question and expectedAnswers are required")
		return self
