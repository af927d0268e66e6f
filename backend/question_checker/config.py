"""
Application configuration from environment variables.
Loads .env from the backend directory so settings are found regardless of cwd.
"""
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Default model for generateContent (v1beta).
_DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"

# Models that return 404 or are unsupported. Normalized at config load to _DEFAULT_GEMINI_MODEL.
_UNSUPPORTED_GEMINI_MODELS = frozenset({
    "gemini-1.5-flash-002", "gemini-1.5-flash-001", "gemini-1.5-flash",
    "gemini-1.5-pro", "gemini-1.5-pro-001", "gemini-1.5-pro-002",
    "gemini-2.0-flash", "gemini-2.0-flash-001", "gemini-2.0-flash-exp",
    "gemini-2.0-flash-lite", "gemini-2.0-flash-lite-001",
})


def normalize_gen_model(v: str | None) -> str:
    """Map empty or retired model ids to the default generateContent model."""
    s = (v or _DEFAULT_GEMINI_MODEL).strip()
    if not s:
        return _DEFAULT_GEMINI_MODEL
    if s in _UNSUPPORTED_GEMINI_MODELS or s.startswith("gemini-1.5-") or s.startswith("gemini-2.0-flash"):
        return _DEFAULT_GEMINI_MODEL
    return s


# .env next to backend/ (parent of question_checker/)
_BACKEND_DIR = Path(__file__).resolve().parent.parent
_ENV_FILE = _BACKEND_DIR / ".env"

if _ENV_FILE.exists():
    from dotenv import load_dotenv
    load_dotenv(_ENV_FILE, override=False)


class Settings(BaseSettings):
    """Load and validate config from env."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Credential store: sqlite for local runs, postgresql in production
    database_url: str = "sqlite:///./question_checker.db"

    gen_model_name: str = _DEFAULT_GEMINI_MODEL
    llm_temperature: float = 0.1
    llm_max_output_tokens: int = 2048
    # Per-call network timeout; None leaves the SDK default.
    llm_timeout_seconds: float | None = None
    # Offline client that always answers VERDICT: CORRECT (local runs without keys)
    use_mock_llm: bool = False

    # Minimum spacing between two outbound requests, across all callers.
    min_request_interval_ms: int = 6500
    # Active-credential snapshot freshness window.
    credential_cache_ttl_seconds: float = 60.0
    # Attempts per logical call = max(pool size, 1) * retry_multiplier, unless max_attempts is set.
    retry_multiplier: int = 2
    max_attempts: int | None = None

    # Gemini keys start with this prefix; checked before insertion.
    api_key_prefix: str = "AIza"

    validation_max_workers: int = 4

    # CORS: comma-separated origins
    cors_origins: str = "http://localhost:3000"

    debug: bool = False

    @field_validator("gen_model_name", mode="before")
    @classmethod
    def _resolve_gen_model(cls, v: str) -> str:
        return normalize_gen_model(v) if isinstance(v, str) else _DEFAULT_GEMINI_MODEL

    @property
    def min_request_interval_seconds(self) -> float:
        return self.min_request_interval_ms / 1000.0


settings = Settings()
