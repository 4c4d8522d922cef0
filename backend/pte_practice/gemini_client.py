from __future__ import annotations
import base64
import logging
import httpx
from typing import Any, Dict, List, Optional
from .exceptions import OracleUnavailable
from .settings import settings

logger = logging.getLogger(__name__)


def text_part(text: str) -> Dict[str, Any]:
	return {"text": text}


def inline_part(data: bytes, mime_type: str) -> Dict[str, Any]:
	return {"inline_data": {"mime_type": mime_type, "data": base64.b64encode(data).decode("ascii")}}


class GeminiClient:
	"""Async client for the Gemini generateContent endpoint.

	The API key is checked on the first call rather than at construction so
	a client can be injected into every request before input validation runs.
	Every failure surfaces as `OracleUnavailable`.
	"""

	def __init__(
		self,
		api_key: Optional[str] = None,
		*,
		base_url: Optional[str] = None,
		model: Optional[str] = None,
		timeout: Optional[float] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self.api_key = api_key or settings.gemini_api_key
		self.model = model or settings.gemini_model
		self.provider = settings.gemini_provider
		if self.provider == "vertex":
			region = settings.vertex_region
			project = settings.vertex_project or "placeholder-project"
			# Vertex AI Generative REST endpoint (API key via header)
			self.base_url = base_url or (
				f"https://{region}-aiplatform.googleapis.com/v1/projects/{project}/locations/{region}/publishers/google/models/{self.model}:generateContent"
			)
			self._auth_in_query = False
		else:
			# Google AI Studio (Generative Language API)
			self.base_url = base_url or f"https://generativelanguage.googleapis.com/v1beta/models/{self.model}:generateContent"
			self._auth_in_query = True
		timeout = timeout or settings.gemini_timeout_seconds
		self._client = httpx.AsyncClient(timeout=timeout, transport=transport)
		self._fallback_client: Optional[httpx.AsyncClient] = None
		self._fallback_enabled = bool(settings.openrouter_api_key)
		self._openrouter_api_key = settings.openrouter_api_key
		self._openrouter_model = settings.openrouter_model
		self._openrouter_base_url = settings.openrouter_base_url
		self._openrouter_headers = {
			"Authorization": f"Bearer {self._openrouter_api_key}" if self._openrouter_api_key else "",
			"Content-Type": "application/json",
			"HTTP-Referer": settings.openrouter_referer,
			"X-Title": settings.openrouter_title,
		}
		if self._fallback_enabled:
			self._fallback_client = httpx.AsyncClient(timeout=timeout, transport=transport)

	async def generate(self, prompt: str) -> str:
		payload: Dict[str, Any] = {"contents": [{"parts": [text_part(prompt)]}]}
		return await self._post_payload(payload, fallback_prompt=prompt)

	async def generate_multimodal(
		self,
		parts: List[Dict[str, Any]],
		*,
		role: str = "user",
	) -> str:
		# Binary parts cannot be forwarded to the text-only secondary provider
		payload: Dict[str, Any] = {"contents": [{"role": role, "parts": parts}]}
		return await self._post_payload(payload, fallback_prompt=None)

	async def _post_payload(
		self,
		payload: Dict[str, Any],
		*,
		fallback_prompt: Optional[str],
	) -> str:
		last_error: Optional[Exception] = None
		if not self.api_key:
			last_error = OracleUnavailable("GEMINI_API_KEY is not configured")
		else:
			params: Dict[str, Any] = {}
			headers: Dict[str, str] = {}
			if self._auth_in_query:
				params["key"] = self.api_key
			else:
				headers["x-goog-api-key"] = self.api_key
			try:
				r = await self._client.post(self.base_url, params=params, headers=headers, json=payload)
				r.raise_for_status()
			except httpx.HTTPStatusError as http_err:
				last_error = http_err
			except httpx.RequestError as net_err:
				last_error = net_err
			if last_error is None:
				try:
					data = r.json()
					return data["candidates"][0]["content"]["parts"][0]["text"]
				except (ValueError, KeyError, IndexError, TypeError):
					last_error = OracleUnavailable(f"Unexpected Gemini response: {r.text[:500]}")
		logger.warning("Gemini call to %s failed: %s", self.model, last_error)
		if fallback_prompt is None or not self._fallback_enabled:
			raise _as_unavailable(last_error)
		return await self._fallback_generate(fallback_prompt, last_error)

	async def aclose(self) -> None:
		await self._client.aclose()
		if self._fallback_client is not None:
			await self._fallback_client.aclose()

	async def _fallback_generate(self, prompt: str, primary_error: Optional[Exception]) -> str:
		if not self._fallback_client or not self._openrouter_api_key:
			raise _as_unavailable(primary_error)
		headers = {k: v for k, v in self._openrouter_headers.items() if v}
		payload: Dict[str, Any] = {
			"model": self._openrouter_model,
			"messages": [{"role": "user", "content": prompt}],
		}
		try:
			r = await self._fallback_client.post(
				self._openrouter_base_url,
				headers=headers,
				json=payload,
			)
			r.raise_for_status()
			data = r.json()
			return data["choices"][0]["message"]["content"]
		except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as fallback_err:
			raise OracleUnavailable(
				f"Gemini primary call failed ({primary_error}); fallback via OpenRouter also failed ({fallback_err})"
			) from fallback_err


def _as_unavailable(err: Optional[Exception]) -> OracleUnavailable:
	if isinstance(err, OracleUnavailable):
		return err
	unavailable = OracleUnavailable(f"Gemini call failed: {err}")
	unavailable.__cause__ = err
	return unavailable
