from __future__ import annotations

import json
from typing import List, Optional

from .tasks import TaskSpec, TaskType, get_spec


def _criteria_block(spec: TaskSpec) -> str:
	return "\n".join(
		f"{i}. {c.label} ({c.weight}%) - {c.guidance}" for i, c in enumerate(spec.criteria, start=1)
	)


def _considerations_block(spec: TaskSpec) -> str:
	return "\n".join(f"- {line}" for line in spec.considerations)


def response_schema(spec: TaskSpec) -> str:
	"""JSON skeleton the model is asked to fill, derived from the task's criteria."""
	score_lines = ",\n".join(f'    "{c.key}": [number 1-100]' for c in spec.criteria)
	feedback_lines = ",\n".join(f'    "{c.key}": "[{c.feedback_hint}]"' for c in spec.criteria)
	lines = [
		"{",
		'  "overallScore": [number 1-100],',
		'  "scores": {',
		score_lines,
		"  },",
		'  "feedback": {',
		feedback_lines + ",",
		'    "overall": "[general performance feedback]"',
		"  }",
	]
	for name, placeholder in spec.extra_fields:
		lines[-1] += ","
		lines.append(f'  "{name}": {placeholder}')
	lines.append("}")
	return "\n".join(lines)


def _weighting_rule(spec: TaskSpec) -> str:
	terms = " + ".join(f"{c.key} * {c.weight / 100:g}" for c in spec.criteria)
	return f"overallScore must equal {terms}, rounded to the nearest integer."


def _finish(spec: TaskSpec, body: str) -> str:
	parts = [body.strip(), "", "Evaluate based on:", _criteria_block(spec)]
	if spec.considerations:
		parts += ["", "Consider:", _considerations_block(spec)]
	parts += [
		"",
		_weighting_rule(spec),
		"",
		"Respond with ONLY valid JSON in this exact format (no markdown, no extra text):",
		response_schema(spec),
	]
	return "\n".join(parts)


# ============================================================================
# SCORING INSTRUCTIONS
# ============================================================================

def build_description_prompt(ai_description: str, user_description: str) -> str:
	spec = get_spec(TaskType.IMAGE_DESCRIPTION)
	return _finish(spec, f"""
You are an English language examiner for a PTE-style test.

Reference description of the image: "{ai_description}"
User Description: "{user_description}"

Compare the user's description with the reference and score it from 1-100.
""")


def build_essay_prompt(topic: str, essay: str, time_spent: float) -> str:
	spec = get_spec(TaskType.ESSAY)
	return _finish(spec, f"""
Evaluate this essay writing performance.

Essay Topic: "{topic}"
User's Essay: "{essay}"
Time Spent: {time_spent:g} seconds (max {spec.time_limit_seconds} seconds)
""")


def build_summary_prompt(original_text: str, user_summary: str, time_spent: float) -> str:
	spec = get_spec(TaskType.SUMMARY)
	return _finish(spec, f"""
Evaluate this reading comprehension and summarization performance.

Original Text: "{original_text}"
User's Summary: "{user_summary}"
Time Spent: {time_spent:g} seconds (max {spec.time_limit_seconds} seconds)
""")


def build_listening_prompt(question: str, expected_answers: List[str], user_response: str, response_time: float) -> str:
	spec = get_spec(TaskType.LISTENING)
	return _finish(spec, f"""
Evaluate this listening & speaking response:

Question: "{question}"
Expected Answers: {json.dumps(expected_answers)}
User's Response: "{user_response}"
Response Time: {response_time:g} seconds
""")


def build_listening_audio_prompt(question: str, expected_answers: List[str], response_time: float) -> str:
	spec = get_spec(TaskType.LISTENING_AUDIO)
	return _finish(spec, f"""
Evaluate this listening & speaking response based on the audio recording:

Original Question: "{question}"
Expected Answers: {json.dumps(expected_answers)}
Response Time: {response_time:g} seconds

The user has recorded their audio response to the question. Analyze the audio and evaluate it.
""")


TRANSCRIPTION_PROMPT = """
Please transcribe this audio recording exactly as spoken.
Return only the transcribed text, nothing else.
If no clear speech is detected, return "[No speech detected]".
If the speech is in a language other than English, transcribe it in that language.
""".strip()


def build_speaking_prompt(original_text: str, transcript: str) -> str:
	spec = get_spec(TaskType.SPEAKING)
	return _finish(spec, f"""
Evaluate this English speaking performance for a PTE-style reading aloud task.

Original Text: "{original_text}"
User's Spoken Text (transcribed): "{transcript}"

Provide scoring (1-100) for each criterion.
""")


# ============================================================================
# CONTENT GENERATION
# ============================================================================

IMAGE_DESCRIPTION_PROMPT = """
Describe this image in detail for an English language test.
Focus on: objects, people, actions, colors, setting, and atmosphere.
Keep it concise but comprehensive (2-3 sentences).
""".strip()


def build_essay_topic_prompt(essay_type: str, difficulty: str) -> str:
	low, high = get_spec(TaskType.ESSAY).word_bounds
	return f"""
Generate an essay topic for English writing practice.

Requirements:
- Essay type: {essay_type} (argumentative, descriptive, narrative, expository)
- Difficulty: {difficulty}
- Should be engaging and relevant to current issues
- Allow for {low}-{high} word response
- Clear and specific prompt
- Should encourage critical thinking

Format your response as:
Topic: [Clear topic statement]
Instructions: [Specific writing instructions]
Key Points: [3-4 suggested points to consider]
""".strip()


def build_reading_text_prompt(topic: str, difficulty: str) -> str:
	return f"""
Generate a reading passage for English comprehension test.

Requirements:
- Topic: {topic}
- Difficulty: {difficulty}
- Word count: 250-300 words
- Should contain clear main ideas and supporting details
- Use academic but accessible language
- Include specific examples or explanations
- Structure: Introduction, 2-3 body paragraphs, conclusion
- Make it suitable for summarization practice

Topics can include: technology, environment, education, health, business, science, culture, travel, etc.

Return ONLY the text passage, no title, no additional formatting.
""".strip()


def build_speaking_text_prompt(difficulty: str) -> str:
	return f"""
Generate a reading passage for PTE-style English speaking practice test.

Requirements:
- Maximum 60 words
- Difficulty level: {difficulty}
- Topic should be interesting and varied (daily life, nature, technology, travel, etc.)
- Use clear, natural English
- Include a mix of sentence lengths
- Avoid complex technical terms
- Make it suitable for pronunciation practice

Return ONLY the text passage, no additional formatting or explanations.
""".strip()


def build_listening_question_prompt(
	difficulty: str,
	category: str,
	examples: List[str],
	*,
	seed: int,
	session_id: str,
	timestamp: Optional[str] = None,
) -> str:
	example_lines = "\n".join(f'- "{q}"' for q in examples[:3])
	return f"""
Generate a NEW and UNIQUE listening & speaking question for PTE-style English practice.

IMPORTANT: Create a DIFFERENT question each time. Do NOT repeat previous questions.

Requirements:
- Difficulty: {difficulty}
- Category: {category}
- Question should be SHORT and CLEAR (max 15 words)
- Should be answerable in 1-3 words
- Focus on: vocabulary, opposites, basic knowledge, quick thinking
- Make it suitable for text-to-speech
- BE CREATIVE and VARY the question structure

Random seed: {seed}
Session: {session_id}
Timestamp: {timestamp or ""}

Example patterns (but create something NEW):
{example_lines}

Question types to vary:
- "What is the opposite of [word]?"
- "Name a [category] that is [adjective]."
- "What comes after [item]?"
- "How many [things] does a [noun] have?"
- "What do you [action] with [object]?"
- "Where do [things] [verb]?"

Respond with JSON only:
{{
  "question": "[NEW, creative, short question - DIFFERENT from examples]",
  "expectedAnswers": [array of possible correct answers],
  "hint": "[optional hint for user]"
}}
""".strip()
