from __future__ import annotations

import json
import math
from typing import Any, List, Optional, Tuple

from fastapi import UploadFile

from .exceptions import InvalidInput
from .settings import settings
from .text import clip


def require_text(*values: Optional[str], message: str) -> Tuple[str, ...]:
	"""Strip every value; raise InvalidInput with `message` if any is blank."""
	cleaned = tuple((v or "").strip() for v in values)
	if not all(cleaned):
		raise InvalidInput(message)
	return tuple(clip(v, settings.max_text_chars) for v in cleaned)


def elapsed_seconds(value: Any, field: str) -> float:
	if value is None or value == "":
		return 0.0
	try:
		seconds = float(value)
	except (TypeError, ValueError):
		raise InvalidInput(f"{field} must be a number of seconds")
	if math.isnan(seconds) or seconds < 0 or seconds > settings.max_elapsed_seconds:
		raise InvalidInput(f"{field} must be between 0 and {settings.max_elapsed_seconds:g} seconds")
	return seconds


def expected_answers(value: Any) -> List[str]:
	"""Accept a list or a JSON array string (multipart forms)."""
	if isinstance(value, str):
		try:
			value = json.loads(value)
		except ValueError:
			raise InvalidInput("expectedAnswers must be a JSON array of strings")
	if not isinstance(value, list):
		raise InvalidInput("expectedAnswers must be a JSON array of strings")
	answers = [str(a).strip() for a in value if a is not None and str(a).strip()]
	if not answers:
		raise InvalidInput("expectedAnswers must contain at least one answer")
	return answers


def _media_type(upload: UploadFile) -> str:
	return (upload.content_type or "").split(";")[0].strip().lower()


async def read_upload(upload: Optional[UploadFile], kind: str, message: str) -> Tuple[bytes, str]:
	"""Read an uploaded image/audio file and return (bytes, mime type)."""
	if upload is None:
		raise InvalidInput(message)
	mime_type = _media_type(upload)
	# MediaRecorder in some browsers labels audio-only webm as video/webm
	if kind == "audio" and mime_type == "video/webm":
		mime_type = "audio/webm"
	if not mime_type.startswith(f"{kind}/"):
		raise InvalidInput(f"Uploaded file must be {kind} (got {mime_type or 'unknown type'})")
	data = await upload.read()
	if not data:
		raise InvalidInput(f"Uploaded {kind} file is empty")
	if len(data) > settings.max_upload_bytes:
		raise InvalidInput(f"Uploaded {kind} file exceeds {settings.max_upload_bytes} bytes")
	return data, mime_type
