"""
Speaking (read aloud) router
============================

The user reads a short generated passage aloud. The recording is first
transcribed by Gemini, then the transcript is scored against the passage on
content (word accuracy), oral fluency and pronunciation. When the scoring
reply cannot be normalized, the fallback scores word accuracy locally.

API Endpoints:
- POST /api/evaluate-speaking: multipart `audio` + `originalText`
- POST /api/generate-speaking-text: passage for the read-aloud task
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from .. import fallback
from ..dependencies import get_audio_oracle, get_oracle
from ..evaluation import envelope, failure_boundary, resolve
from ..gemini_client import GeminiClient, inline_part, text_part
from ..prompts import TRANSCRIPTION_PROMPT, build_speaking_prompt, build_speaking_text_prompt
from ..schemas import SpeakingTextRequest
from ..tasks import TaskType, get_spec
from ..text import count_words
from ..validation import read_upload, require_text


router = APIRouter(prefix="/api", tags=["speaking"])


async def _transcribe(oracle: GeminiClient, audio: bytes, mime_type: str) -> str:
	"""Transcribe the recording; a blank transcription counts as no speech.

	Args:
		oracle: Gemini client used for the multimodal call
		audio: raw recording bytes
		mime_type: media type of the recording (e.g. audio/webm)

	Returns:
		The transcript, or the no-speech marker
	"""
	raw = await oracle.generate_multimodal([text_part(TRANSCRIPTION_PROMPT), inline_part(audio, mime_type)])
	return raw.strip() or fallback.NO_SPEECH_MARKER


@router.post("/evaluate-speaking")
async def evaluate_speaking(
	audio: Optional[UploadFile] = File(None),
	originalText: Optional[str] = Form(None),
	oracle: GeminiClient = Depends(get_audio_oracle),
):
	"""Score a read-aloud recording against the passage it should match.

	Raises:
		InvalidInput: if the audio file or the original text is missing
	"""
	message = "Audio file and original text are required"
	(original,) = require_text(originalText, message=message)
	data, mime_type = await read_upload(audio, "audio", message)
	with failure_boundary(get_spec(TaskType.SPEAKING).error_message):
		transcript = await _transcribe(oracle, data, mime_type)
		reply = await oracle.generate(build_speaking_prompt(original, transcript))
		result = resolve(TaskType.SPEAKING, reply, lambda: fallback.speaking(original, transcript))
		result = result.model_copy(update={"transcript": transcript, "audioProcessed": True})
	return envelope(result)


@router.post("/generate-speaking-text")
async def generate_speaking_text(req: Optional[SpeakingTextRequest] = None, oracle: GeminiClient = Depends(get_oracle)):
	req = req or SpeakingTextRequest()
	with failure_boundary("Failed to generate speaking text"):
		text = (await oracle.generate(build_speaking_text_prompt(req.difficulty))).strip()
	return {
		"success": True,
		"text": text,
		"wordCount": count_words(text),
		"difficulty": req.difficulty,
	}
