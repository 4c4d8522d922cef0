"""
Reply normalization
===================

Turns the free-form text Gemini returns into a validated result model.
Extraction tries, in order, and stops at the first object it can parse:

1. the whole trimmed reply;
2. the interior of a fenced code block (optionally tagged ``json``);
3. the span from the first ``{`` to the last ``}``.

Step 3 is lossy: with several brace fragments or prose containing braces it
takes the outermost span, which may not parse or may not be the object the
model meant. It is kept as the last resort only.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Iterator, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .exceptions import ExtractionFailed
from .schemas import RESULT_MODELS, EvaluationResult
from .tasks import TaskType


logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

_FENCE_RE = re.compile(r"```(?:json)?[ \t]*\r?\n?([\s\S]*?)```", re.IGNORECASE)


def _candidates(text: str) -> Iterator[Tuple[str, str]]:
	yield "direct", text
	for match in _FENCE_RE.finditer(text):
		yield "fenced", match.group(1).strip()
	start = text.find("{")
	end = text.rfind("}")
	if start != -1 and end > start:
		yield "braces", text[start : end + 1]


def extract_json(text: str) -> Dict[str, Any]:
	"""Extract a JSON object from a model reply.

	Raises:
		ExtractionFailed: if the reply is blank or no candidate parses to an object
	"""
	stripped = (text or "").strip()
	if not stripped:
		raise ExtractionFailed("Empty reply from Gemini")
	for path, candidate in _candidates(stripped):
		try:
			data = json.loads(candidate)
		except ValueError:
			continue
		if isinstance(data, dict):
			logger.debug("Extracted JSON via %s path", path)
			return data
	raise ExtractionFailed("Failed to parse JSON from Gemini output")


def parse_as(model: Type[M], text: str, **overrides: Any) -> M:
	"""Extract a JSON object from `text` and validate it as `model`."""
	data = extract_json(text)
	try:
		return model.model_validate({**data, **overrides})
	except ValidationError as exc:
		raise ExtractionFailed(f"Reply does not match {model.__name__}: {exc}") from exc


def normalize(task: TaskType, text: str) -> EvaluationResult:
	"""Extract and validate the structured result for `task`."""
	logger.debug("Raw Gemini reply for %s: %s", task.value, text)
	return parse_as(RESULT_MODELS[task], text, evaluationSource="oracle")
