from typing import AsyncIterator

from .gemini_client import GeminiClient
from .settings import settings


async def get_oracle() -> AsyncIterator[GeminiClient]:
	"""Per-request Gemini client, closed once the response is sent."""
	client = GeminiClient()
	try:
		yield client
	finally:
		await client.aclose()


async def get_audio_oracle() -> AsyncIterator[GeminiClient]:
	"""Gemini client for tasks that send recorded audio."""
	client = GeminiClient(model=settings.gemini_model_audio or settings.gemini_model)
	try:
		yield client
	finally:
		await client.aclose()
