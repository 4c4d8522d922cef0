"""
Listening Module Backend Router

Short spoken questions ("What is the opposite of hot?") answered in one to
three words, scored on correctness, pronunciation and response speed.
It handles:
- Question generation with a built-in question bank as fallback
- Evaluation of typed/transcribed responses
- Evaluation of recorded audio responses

Response speed is always categorised locally from the measured response
time: 0-3 s excellent, 3-5 s good, above 5 s needs improvement.
"""

from __future__ import annotations
import logging
import random
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from .. import fallback
from ..dependencies import get_audio_oracle, get_oracle
from ..evaluation import envelope, failure_boundary, resolve
from ..exceptions import ExtractionFailed, InvalidInput
from ..gemini_client import GeminiClient, inline_part, text_part
from ..normalizer import parse_as
from ..prompts import build_listening_audio_prompt, build_listening_prompt, build_listening_question_prompt
from ..schemas import ListeningQuestion, ListeningQuestionRequest, ListeningRequest
from ..tasks import TaskType, get_spec, response_time_category
from ..text import contains_any
from ..validation import elapsed_seconds, expected_answers, read_upload, require_text

logger = logging.getLogger(__name__)

# Initialize FastAPI router for listening endpoints
router = APIRouter(prefix="/api", tags=["listening"])


# ============================================================================
# QUESTION BANK
# ============================================================================

# Example questions shown to the model for each category
CATEGORY_EXAMPLES: Dict[str, List[str]] = {
    "general": [
        "What is the opposite of hot?",
        "Name something you wear on your head.",
        "What do you use to write?",
        "Where do fish live?",
        "What comes after Wednesday?",
    ],
    "opposites": [
        "What is the opposite of big?",
        "What is the opposite of fast?",
        "What is the opposite of happy?",
        "What is the opposite of light?",
        "What is the opposite of old?",
    ],
    "colors": [
        "What color do you get when you mix red and blue?",
        "What color is the sun?",
        "Name a color that starts with G.",
        "What color is grass?",
        "What color are most clouds?",
    ],
    "animals": [
        "What animal says 'moo'?",
        "Name an animal with stripes.",
        "What animal is known as man's best friend?",
        "Name a bird that can't fly.",
        "What animal has a trunk?",
    ],
    "numbers": [
        "How many days are in a week?",
        "What comes after nine?",
        "How many fingers do you have?",
        "What is five plus three?",
        "How many legs does a spider have?",
    ],
    "food": [
        "Name a red fruit.",
        "What do you drink in the morning?",
        "Name something sweet.",
        "What do bees make?",
        "Name a vegetable that is orange.",
    ],
    "time": [
        "What comes after Monday?",
        "How many hours are in a day?",
        "What season comes after winter?",
        "What do you say in the morning?",
        "Name a month with 31 days.",
    ],
    "weather": [
        "What falls from the sky when it's cold?",
        "What do you see during a storm?",
        "What makes things wet outside?",
        "What is very hot and bright in the sky?",
        "What do you use when it rains?",
    ],
    "synonyms": [
        "What is another word for happy?",
        "What is another word for big?",
        "What is another word for fast?",
        "What is another word for smart?",
        "What is another word for pretty?",
    ],
}

# Served when the generated question cannot be parsed
FALLBACK_QUESTIONS: List[ListeningQuestion] = [
    ListeningQuestion(question="What is the opposite of cold?", expectedAnswers=["hot", "warm"], hint="Think of temperature"),
    ListeningQuestion(question="Name something you eat for breakfast.", expectedAnswers=["cereal", "toast", "eggs", "pancakes"], hint="Morning meal"),
    ListeningQuestion(question="What color is an apple?", expectedAnswers=["red", "green", "yellow"], hint="Common fruit colors"),
    ListeningQuestion(question="How many wheels does a car have?", expectedAnswers=["four", "4"], hint="Count them"),
    ListeningQuestion(question="What do you use to cut paper?", expectedAnswers=["scissors", "knife"], hint="Sharp tool"),
]


def _category(name: str) -> str:
    name = (name or "").strip().lower()
    return name if name in CATEGORY_EXAMPLES else "general"


# ============================================================================
# API ENDPOINTS
# ============================================================================

@router.post("/generate-listening-question")
async def generate_listening_question(req: Optional[ListeningQuestionRequest] = None, oracle: GeminiClient = Depends(get_oracle)):
    """
    Generate a short listening question with its accepted answers.

    Randomness hints (seed, session id, timestamp) are added to the prompt so
    consecutive calls do not return the same question.
    """
    req = req or ListeningQuestionRequest()
    category = _category(req.category)
    seed = random.randint(0, 9999)
    session_id = uuid.uuid4().hex[:8]
    timestamp = datetime.now(timezone.utc).isoformat()
    with failure_boundary("Failed to generate listening question"):
        prompt = build_listening_question_prompt(
            req.difficulty,
            category,
            CATEGORY_EXAMPLES[category],
            seed=seed,
            session_id=session_id,
            timestamp=timestamp,
        )
        reply = await oracle.generate(prompt)
        try:
            question = parse_as(ListeningQuestion, reply)
        except ExtractionFailed as exc:
            logger.warning("Using fallback listening question: %s", exc)
            question = FALLBACK_QUESTIONS[seed % len(FALLBACK_QUESTIONS)]
    return {
        "success": True,
        **question.model_dump(),
        "category": category,
        "difficulty": req.difficulty,
        "timestamp": timestamp,
        "sessionId": session_id,
    }


@router.post("/evaluate-listening-response")
async def evaluate_listening_response(req: ListeningRequest, oracle: GeminiClient = Depends(get_oracle)):
    """
    Evaluate a typed or browser-transcribed answer to a listening question.

    The fallback marks the answer correct when any expected answer appears
    (case-insensitively) inside the response.
    """
    message = "Question, expected answers, and user response are required"
    if not req.expectedAnswers:
        raise InvalidInput(message)
    question, response = require_text(req.question, req.userResponse, message=message)
    answers = expected_answers(req.expectedAnswers)
    response_time = elapsed_seconds(req.responseTime, "responseTime")
    with failure_boundary(get_spec(TaskType.LISTENING).error_message):
        reply = await oracle.generate(build_listening_prompt(question, answers, response, response_time))
        result = resolve(
            TaskType.LISTENING,
            reply,
            lambda: fallback.listening(answers, response, response_time),
        )
        update = {"responseTimeCategory": response_time_category(response_time)}
        if result.isCorrect is None:
            update["isCorrect"] = contains_any(response, answers)
        if not result.correctAnswer:
            update["correctAnswer"] = answers[0]
        result = result.model_copy(update=update)
    return envelope(result)


@router.post("/evaluate-listening-response-audio")
async def evaluate_listening_response_audio(
    audio: Optional[UploadFile] = File(None),
    originalText: Optional[str] = Form(None),
    expectedAnswers: Optional[str] = Form(None),
    responseTime: Optional[str] = Form(None),
    oracle: GeminiClient = Depends(get_audio_oracle),
):
    """
    Evaluate a recorded spoken answer; the model listens to the audio directly.
    """
    message = "Audio file, original text, and expected answers are required"
    if audio is None or not (expectedAnswers or "").strip():
        raise InvalidInput(message)
    (question,) = require_text(originalText, message=message)
    answers = expected_answers(expectedAnswers)
    response_time = elapsed_seconds(responseTime, "responseTime")
    data, mime_type = await read_upload(audio, "audio", message)
    with failure_boundary(get_spec(TaskType.LISTENING_AUDIO).error_message):
        parts = [
            text_part(build_listening_audio_prompt(question, answers, response_time)),
            inline_part(data, mime_type),
        ]
        reply = await oracle.generate_multimodal(parts)
        result = resolve(
            TaskType.LISTENING_AUDIO,
            reply,
            lambda: fallback.listening_audio(answers, response_time),
        )
        update = {"responseTimeCategory": response_time_category(response_time)}
        if result.isCorrect is None:
            update["isCorrect"] = bool(result.transcript) and contains_any(result.transcript, answers)
        if not result.correctAnswer:
            update["correctAnswer"] = answers[0]
        result = result.model_copy(update=update)
    return envelope(result)
