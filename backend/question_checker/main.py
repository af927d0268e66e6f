"""
FastAPI application entrypoint.
Run with: uvicorn question_checker.main:app --port 8000 (from backend/).

  - Questions: POST /questions/validate, POST /questions/validate-batch
  - API keys:  GET /api-keys, POST /api-keys, POST /api-keys/bulk, PATCH/DELETE /api-keys/{id}

Every LLM request goes through one process-wide rate limiter (MIN_REQUEST_INTERVAL_MS)
and rotates over the active keys in the gemini_api_keys table.
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from question_checker.api.api_keys import router as api_keys_router
from question_checker.api.questions import router as questions_router
from question_checker.config import settings

app = FastAPI(
    title="Question Checker API",
    description="Validates exam questions (MCQ, MSQ, NAT, SUB) with Gemini across a pool of API keys.",
    version="0.1.0",
)

_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins if _origins else ["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(questions_router)
app.include_router(api_keys_router)


@app.on_event("startup")
def startup():
    """Configure logging, create the credential table, log the dispatch settings."""
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    _log = logging.getLogger("question_checker.main")
    from question_checker.database import init_db
    init_db()
    _log.info(
        "LLM model=%s min_interval=%sms key_cache_ttl=%ss mock=%s",
        settings.gen_model_name,
        settings.min_request_interval_ms,
        settings.credential_cache_ttl_seconds,
        settings.use_mock_llm,
    )


@app.get("/health")
def health():
    return {"status": "ok"}
