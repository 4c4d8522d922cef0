from __future__ import annotations


class PracticeError(Exception):
	"""Base class for errors raised by the scoring service.

	`status_code` and `public_message` decide what the caller sees; the
	exception text itself may carry internal detail and is only logged.
	"""
	status_code: int = 500

	def __init__(self, message: str, *, public_message: str | None = None) -> None:
		super().__init__(message)
		self.public_message = public_message or message


class InvalidInput(PracticeError):
	"""A required request field is missing or malformed."""
	status_code = 400


class ExtractionFailed(PracticeError):
	"""The model reply could not be turned into a structured result.

	Always recovered by the fallback evaluator; never reaches the caller.
	"""


class OracleUnavailable(PracticeError):
	"""The Gemini call failed or returned an unusable payload."""

	def __init__(self, message: str) -> None:
		super().__init__(message, public_message="Language model is unavailable")


class TaskFailed(PracticeError):
	"""A task could not be completed; carries the task's generic error message."""
