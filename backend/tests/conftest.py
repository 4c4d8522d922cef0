"""Pytest configuration and fixtures."""
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from pte_practice.dependencies import get_audio_oracle, get_oracle
from pte_practice.main import app


class FakeOracle:
    """Stands in for GeminiClient: returns queued replies and records what it was sent."""

    def __init__(self, replies: Optional[List[str]] = None, error: Optional[Exception] = None):
        self.replies = list(replies or [])
        self.error = error
        self.prompts: List[str] = []
        self.parts: List[List[Dict[str, Any]]] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self._next()

    async def generate_multimodal(self, parts: List[Dict[str, Any]], *, role: str = "user") -> str:
        self.parts.append(parts)
        return self._next()

    def _next(self) -> str:
        if self.error is not None:
            raise self.error
        return self.replies.pop(0) if self.replies else ""


@pytest.fixture
def oracle() -> FakeOracle:
    return FakeOracle()


@pytest.fixture
def client(oracle: FakeOracle):
    """Test client with the Gemini dependency replaced by the fake oracle."""
    app.dependency_overrides[get_oracle] = lambda: oracle
    app.dependency_overrides[get_audio_oracle] = lambda: oracle
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()