from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from health_assistant.agents.orchestrator import TurnFailedError, TurnOrchestrator, build_orchestrator
from health_assistant.config import settings
from health_assistant.models.chat import ChatRequest, ChatResponse, ErrorResponse

logger = logging.getLogger(__name__)

app = FastAPI(title="Health Assistant", version="0.1.0")

origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
if settings.frontend_url:
    origins.append(settings.frontend_url)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache(maxsize=1)
def get_orchestrator() -> TurnOrchestrator:
    return build_orchestrator(settings)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    detail = first.get("msg", "Invalid request")
    message = f"Invalid request: {field}: {detail}" if field else f"Invalid request: {detail}"
    return JSONResponse(ErrorResponse(error=message).model_dump(), status_code=400)


@app.get("/health")
async def health():
    return {"status": "ok", "service": "health-assistant"}


@app.post(
    "/api/process-health-input",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def process_health_input(
    req: ChatRequest,
    orchestrator: TurnOrchestrator = Depends(get_orchestrator),
):
    user_input = req.user_input.strip()
    if not user_input:
        return JSONResponse(ErrorResponse(error="userInput must not be empty").model_dump(), status_code=400)

    logger.info("Received user input (%d chars, %d history turns)", len(user_input), len(req.history))
    try:
        return await orchestrator.run_turn(user_input, req.history)
    except TurnFailedError as exc:
        return JSONResponse(ErrorResponse(error=str(exc)).model_dump(), status_code=500)


@app.on_event("startup")
async def startup_check_credentials():
    if not settings.anthropic_api_key:
        logger.warning("ANTHROPIC_API_KEY not set, extraction will fall back to heuristics and advice will fail")


def run() -> None:
    import uvicorn

    uvicorn.run(
        "health_assistant.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    run()
