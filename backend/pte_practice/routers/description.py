from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile

from .. import fallback
from ..dependencies import get_oracle
from ..evaluation import envelope, failure_boundary, resolve
from ..gemini_client import GeminiClient, inline_part, text_part
from ..prompts import IMAGE_DESCRIPTION_PROMPT, build_description_prompt
from ..schemas import DescriptionScoreRequest
from ..tasks import TaskType, get_spec
from ..validation import read_upload, require_text

router = APIRouter(prefix="/api", tags=["description"])


@router.post("/analyze-image")
async def analyze_image(image: Optional[UploadFile] = File(None), oracle: GeminiClient = Depends(get_oracle)):
	data, mime_type = await read_upload(image, "image", "No image provided")
	with failure_boundary("Failed to analyze image"):
		description = await oracle.generate_multimodal([text_part(IMAGE_DESCRIPTION_PROMPT), inline_part(data, mime_type)])
	return {"success": True, "aiDescription": description.strip()}


@router.post("/score-description")
async def score_description(req: DescriptionScoreRequest, oracle: GeminiClient = Depends(get_oracle)):
	reference, description = require_text(req.aiDescription, req.userDescription, message="Both descriptions are required")
	with failure_boundary(get_spec(TaskType.IMAGE_DESCRIPTION).error_message):
		reply = await oracle.generate(build_description_prompt(reference, description))
		result = resolve(
			TaskType.IMAGE_DESCRIPTION,
			reply,
			lambda: fallback.score_description(reference, description),
		)
	return envelope(result)
