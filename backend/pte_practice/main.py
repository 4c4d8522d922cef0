import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .exceptions import PracticeError
from .settings import settings
from .routers import description
from .routers import writing
from .routers import speaking
from .routers import listening

logging.basicConfig(
	level=settings.log_level.upper(),
	format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

logger = logging.getLogger(__name__)

app = FastAPI(title="PTE Practice API")
app.add_middleware(
	CORSMiddleware,
	allow_origins=settings.cors_origins,
	allow_methods=["*"],
	allow_headers=["*"],
)
app.include_router(description.router)
app.include_router(writing.router)
app.include_router(speaking.router)
app.include_router(listening.router)


@app.exception_handler(PracticeError)
async def practice_error_handler(request: Request, exc: PracticeError):
	if exc.status_code >= 500:
		logger.error("%s %s failed: %s", request.method, request.url.path, exc)
	return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.public_message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
	errors = exc.errors()
	detail = "malformed request body"
	if errors:
		first = errors[0]
		location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
		detail = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
	return JSONResponse(status_code=400, content={"success": False, "error": f"Invalid request ({detail})"})


@app.get("/info")
def root():
	return {"status": "ok", "gemini_configured": bool(settings.gemini_api_key)}
