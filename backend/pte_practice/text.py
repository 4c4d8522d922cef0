from __future__ import annotations

import re
from typing import Iterable, List, Set

_WORD_RE = re.compile(r"[A-Za-z0-9']+")
_PARAGRAPH_RE = re.compile(r"\n\s*\n")

_STOPWORDS = {
	"the", "and", "that", "this", "with", "from", "there", "their", "they", "them",
	"have", "has", "had", "were", "was", "are", "is", "been", "being", "into", "onto",
	"which", "while", "some", "very", "also", "its", "it's", "for", "but", "not",
	"can", "could", "would", "should", "will", "about", "over", "under", "what",
}


def count_words(text: str | None) -> int:
	return len((text or "").split())


def tokens(text: str | None) -> List[str]:
	return [t.lower() for t in _WORD_RE.findall(text or "")]


def content_words(text: str | None) -> Set[str]:
	"""Lower-cased words of three or more letters, stopwords removed."""
	return {t for t in tokens(text) if len(t) >= 3 and t not in _STOPWORDS}


def coverage(reference: Iterable[str], candidate: Iterable[str]) -> float:
	"""Share of reference words that also appear in candidate."""
	ref = set(reference)
	if not ref:
		return 0.0
	return len(ref & set(candidate)) / len(ref)


def paragraphs(text: str | None) -> List[str]:
	return [p.strip() for p in _PARAGRAPH_RE.split(text or "") if p.strip()]


def clip(text: str, limit: int) -> str:
	# Avoid extremely long prompts
	if limit > 0 and len(text) > limit:
		return text[:limit]
	return text


def contains_any(response: str, answers: Iterable[str]) -> bool:
	"""Case-insensitive substring match of any expected answer in response."""
	haystack = (response or "").lower()
	return any(a.strip() and a.strip().lower() in haystack for a in answers)
