"""
Fallback evaluation
===================

Deterministic, locally computed results used when a model reply cannot be
normalized. Each function only looks at inputs the router has already
validated, so none of them raise. Aggregates are never hard-coded: the
result models derive them from the sub-scores and the task weights.
"""

from __future__ import annotations

from typing import Dict, List

from .schemas import (
	DescriptionEvaluation,
	EssayEvaluation,
	ListeningAudioEvaluation,
	ListeningEvaluation,
	SpeakingEvaluation,
	SummaryEvaluation,
)
from .tasks import (
	TaskType,
	clamp_score,
	get_spec,
	response_time_category,
	time_management,
	weighted_score,
)
from .text import content_words, contains_any, count_words, coverage, paragraphs, tokens


# Value used for sub-scores the heuristics cannot judge
MODERATE_SCORE = 70

NO_SPEECH_MARKER = "[No speech detected]"
NO_SPEECH_SCORE = 15
UNTRANSCRIBED_MARKER = "[Could not transcribe audio]"

SPEED_SCORES: Dict[str, int] = {"excellent": 95, "good": 85, "needs improvement": 60}

SPEED_FEEDBACK: Dict[str, str] = {
	"excellent": "Excellent response time!",
	"good": "Good response time!",
	"needs improvement": "Try to respond more quickly.",
}

_CONCLUSION_MARKERS = ("in conclusion", "to conclude", "to sum up", "in summary", "overall", "all in all")


def score_description(reference: str, description: str) -> DescriptionEvaluation:
	spec = get_spec(TaskType.IMAGE_DESCRIPTION)
	words = count_words(description)
	overlap = coverage(content_words(reference), content_words(description))
	if words < 10:
		details = 40
	elif words < 25:
		details = 60
	else:
		details = 75
	scores = {
		"content": clamp_score(40 + overlap * 55),
		"fluency": MODERATE_SCORE,
		"details": details,
		"clarity": MODERATE_SCORE if words >= 5 else 50,
	}
	return DescriptionEvaluation(
		overallScore=weighted_score(spec, scores),
		scores=scores,
		feedback={
			"content": "Your description mentions some of the key elements in the image." if overlap >= 0.3
			else "Try to mention more of the main objects, people and actions in the image.",
			"fluency": "Language could not be fully evaluated.",
			"details": "Good level of detail." if details >= 75 else "Add more specific details (colours, setting, actions).",
			"clarity": "Description is generally clear.",
			"overall": "Automatic estimate based on detail coverage.",
		},
		suggestions="Describe the main subject first, then the setting, actions and notable details.",
		evaluationSource="fallback",
	)


def essay(user_essay: str, time_spent: float) -> EssayEvaluation:
	spec = get_spec(TaskType.ESSAY)
	words = count_words(user_essay)
	in_bounds = spec.within_word_bounds(words)
	parts = paragraphs(user_essay)
	has_introduction = len(parts) >= 2
	has_conclusion = len(parts) >= 3 or (
		len(parts) >= 2 and any(m in parts[-1].lower() for m in _CONCLUSION_MARKERS)
	)
	scores = {
		"contentIdeas": MODERATE_SCORE,
		"organization": 65,
		"languageUse": MODERATE_SCORE,
		"taskAchievement": 80 if in_bounds else 60,
	}
	low, high = spec.word_bounds
	areas: List[str] = ["Idea development"]
	if not has_introduction or not has_conclusion:
		areas.insert(0, "Paragraph structure")
	if not in_bounds:
		areas.append("Word count")
	return EssayEvaluation(
		overallScore=weighted_score(spec, scores),
		scores=scores,
		feedback={
			"contentIdeas": "Ideas are relevant to the topic.",
			"organization": "Essay has basic structure.",
			"languageUse": "Language is generally clear.",
			"taskAchievement": "Meets word count" if in_bounds else f"Check word count ({low}-{high} words)",
			"overall": "Good effort on the essay task.",
		},
		suggestions="Focus on developing ideas with specific examples and improving organization.",
		strengths=["Completed the task"],
		areasToImprove=areas,
		wordCount=words,
		timeManagement=time_management(spec, time_spent),
		hasIntroduction=has_introduction,
		hasConclusion=has_conclusion,
		evaluationSource="fallback",
	)


def summary(user_summary: str, time_spent: float) -> SummaryEvaluation:
	spec = get_spec(TaskType.SUMMARY)
	words = count_words(user_summary)
	in_bounds = spec.within_word_bounds(words)
	low, high = spec.word_bounds
	scores = {
		"content": 65,
		"conciseness": 80 if in_bounds else 50,
		"languageQuality": MODERATE_SCORE,
	}
	return SummaryEvaluation(
		overallScore=weighted_score(spec, scores),
		scores=scores,
		feedback={
			"content": "Summary captures some main points.",
			"conciseness": "Good length" if in_bounds else f"Check word count ({low}-{high} words)",
			"languageQuality": "Generally clear writing.",
			"overall": "Good effort on summarization task.",
		},
		suggestions="Focus on identifying the main idea and key supporting details.",
		mainIdeasMissed=[],
		strengths=["Completed the task"],
		wordCount=words,
		timeManagement=time_management(spec, time_spent),
		evaluationSource="fallback",
	)


def listening(expected_answers: List[str], user_response: str, response_time: float) -> ListeningEvaluation:
	spec = get_spec(TaskType.LISTENING)
	is_correct = contains_any(user_response, expected_answers)
	category = response_time_category(response_time)
	scores = {
		"correctness": 90 if is_correct else 30,
		"pronunciation": 75,
		"speed": SPEED_SCORES[category],
	}
	return ListeningEvaluation(
		overallScore=weighted_score(spec, scores),
		scores=scores,
		feedback={
			"correctness": "Correct answer!" if is_correct else "Not quite right.",
			"pronunciation": "Response was clear.",
			"speed": SPEED_FEEDBACK[category],
			"overall": "Well done!" if is_correct else "Keep practicing!",
		},
		isCorrect=is_correct,
		correctAnswer=expected_answers[0],
		suggestions="Practice more quick responses to improve speed.",
		responseTimeCategory=category,
		evaluationSource="fallback",
	)


def listening_audio(expected_answers: List[str], response_time: float) -> ListeningAudioEvaluation:
	"""Without a transcript the answer content cannot be checked; it is given the benefit of the doubt."""
	spec = get_spec(TaskType.LISTENING_AUDIO)
	category = response_time_category(response_time)
	scores = {
		"correctness": 75,
		"pronunciation": MODERATE_SCORE,
		"speed": SPEED_SCORES[category],
	}
	return ListeningAudioEvaluation(
		overallScore=weighted_score(spec, scores),
		scores=scores,
		feedback={
			"correctness": "Response received but couldn't analyze content.",
			"pronunciation": "Audio quality was acceptable.",
			"speed": SPEED_FEEDBACK[category],
			"overall": "Keep practicing to improve clarity!",
		},
		isCorrect=True,
		correctAnswer=expected_answers[0],
		suggestions="Practice speaking clearly and responding quickly.",
		responseTimeCategory=category,
		transcript=UNTRANSCRIBED_MARKER,
		evaluationSource="fallback",
	)


def speaking(original_text: str, transcript: str) -> SpeakingEvaluation:
	spec = get_spec(TaskType.SPEAKING)
	spoken = (transcript or "").strip()
	if not spoken or spoken == NO_SPEECH_MARKER:
		scores = {key: NO_SPEECH_SCORE for key in spec.score_keys}
		return SpeakingEvaluation(
			overallScore=weighted_score(spec, scores),
			scores=scores,
			feedback={
				"content": "No speech was detected in the recording.",
				"fluency": "No speech was detected in the recording.",
				"pronunciation": "No speech was detected in the recording.",
				"overall": "Make sure your microphone works and read the passage aloud in English.",
			},
			suggestions="Check your microphone and read the whole passage aloud.",
			transcript=spoken or NO_SPEECH_MARKER,
			evaluationSource="fallback",
		)
	reference = tokens(original_text)
	said = set(tokens(spoken))
	missed = [w for w in dict.fromkeys(reference) if w not in said]
	accuracy = coverage(reference, said)
	scores = {
		"content": clamp_score(accuracy * 100),
		"fluency": MODERATE_SCORE,
		"pronunciation": MODERATE_SCORE,
	}
	return SpeakingEvaluation(
		overallScore=weighted_score(spec, scores),
		scores=scores,
		feedback={
			"content": f"About {round(accuracy * 100)}% of the passage words were recognised.",
			"fluency": "Fluency could not be fully evaluated.",
			"pronunciation": "Pronunciation could not be fully evaluated.",
			"overall": "Automatic estimate based on word accuracy.",
		},
		suggestions="Read every word of the passage at a steady, natural pace.",
		mistakesFound=missed[:20],
		strengths=["Completed the reading"] if accuracy >= 0.5 else [],
		transcript=spoken,
		evaluationSource="fallback",
	)
