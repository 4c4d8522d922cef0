from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, TypeVar

from .exceptions import ExtractionFailed, InvalidInput, TaskFailed
from .normalizer import normalize
from .schemas import EvaluationResult
from .tasks import TaskType


logger = logging.getLogger(__name__)

R = TypeVar("R", bound=EvaluationResult)


def resolve(task: TaskType, reply: str, fallback: Callable[[], R]) -> R:
	"""Normalize the model reply, or fall back to the local heuristic.

	ExtractionFailed never escapes: the caller always gets a result.
	"""
	try:
		return normalize(task, reply)  # type: ignore[return-value]
	except ExtractionFailed as exc:
		logger.warning("Using fallback evaluation for %s: %s", task.value, exc)
		return fallback()


@contextmanager
def failure_boundary(message: str) -> Iterator[None]:
	"""Map anything but invalid input to a generic error carrying `message`."""
	try:
		yield
	except InvalidInput:
		raise
	except Exception as exc:
		logger.exception(message)
		raise TaskFailed(str(exc), public_message=message) from exc


def envelope(result: EvaluationResult) -> dict:
	return {"success": True, **result.model_dump()}
