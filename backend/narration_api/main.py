from __future__ import annotations

import logging
import sys

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import ConfigurationError, settings
from .routers import tts_api
from .services.synthesis import NarrationValidationError, SynthesisError
from .services.voices import VOICE_CONFIG
from .utils.body_limit import BodySizeLimitMiddleware

# ===========================================================
# 🌐 App setup
# ===========================================================

logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] [%(levelname)s] %(message)s",
)
LOGGER = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allow_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(BodySizeLimitMiddleware, settings=settings)


# ===========================================================
# ⚠️ Error rendering: every failure is {"error": message}
# ===========================================================
def _validation_message(exc: RequestValidationError) -> str:
    for err in exc.errors():
        loc = tuple(err.get("loc", ()))
        if loc == ("body",) or loc == ("body", "text"):
            return "Text is required"
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ())[1:]) or "body"
    return f"Invalid request field '{field}': {first.get('msg', 'invalid value')}"


@app.exception_handler(RequestValidationError)
async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": _validation_message(exc)})


@app.exception_handler(NarrationValidationError)
async def handle_narration_validation(request: Request, exc: NarrationValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(SynthesisError)
async def handle_synthesis_error(request: Request, exc: SynthesisError) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.exception_handler(ConfigurationError)
async def handle_configuration_error(request: Request, exc: ConfigurationError) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": str(exc)})


# ===========================================================
# 🧩 Routes
# ===========================================================
app.include_router(tts_api.router, tags=["tts"])


# ===========================================================
# ⚙️ Lifecycle
# ===========================================================
def _log_banner() -> None:
    LOGGER.info("[startup] %s listening on http://%s:%d", settings.app_name, settings.host, settings.port)
    LOGGER.info(
        "[startup] model=%s timeout=%.0fs attempts=%d",
        settings.tts_model,
        settings.request_timeout,
        settings.max_attempts,
    )
    for language, voices in VOICE_CONFIG.items():
        LOGGER.info(
            "[startup] voices %s: %s (M), %s (F), %s (N)",
            language,
            voices["male"],
            voices["female"],
            voices["neutral"],
        )
    LOGGER.info("[startup] endpoints: GET / | POST /synthesize | GET /voices")


@app.on_event("startup")
async def on_startup() -> None:
    """Refuse to start without a Gemini credential."""
    settings.require_api_key()
    _log_banner()


def run() -> None:
    """Console entry point: validate config, then serve with uvicorn."""
    import uvicorn

    try:
        settings.require_api_key()
    except ConfigurationError as exc:
        LOGGER.error("ERROR: %s", exc)
        sys.exit(1)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
