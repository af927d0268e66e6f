"""
Gemini (Google) text completion via google.genai.
One genai.Client per API key, created on first use and reused across calls.
"""
import logging
import threading
import time

from question_checker.config import normalize_gen_model, settings

logger = logging.getLogger(__name__)


def _resolve_model_name(name: str | None) -> str:
    """Return a model id that works with generateContent. Replace known-unsupported ids (e.g. from old .env)."""
    n = (name or "").strip()
    resolved = normalize_gen_model(n)
    if n and resolved != n:
        logger.info("Gemini: mapping unsupported model %s -> %s", n, resolved)
    return resolved


def _safety_settings_none():
    """Safety settings to avoid blocking exam content (google.genai types)."""
    from google.genai import types
    return [
        types.SafetySetting(category="HARM_CATEGORY_HARASSMENT", threshold="BLOCK_NONE"),
        types.SafetySetting(category="HARM_CATEGORY_HATE_SPEECH", threshold="BLOCK_NONE"),
        types.SafetySetting(category="HARM_CATEGORY_SEXUALLY_EXPLICIT", threshold="BLOCK_NONE"),
        types.SafetySetting(category="HARM_CATEGORY_DANGEROUS_CONTENT", threshold="BLOCK_NONE"),
    ]


class GeminiCompletionClient:
    """CompletionClient on the google.genai SDK (generate_content)."""

    def __init__(
        self,
        model_name: str | None = None,
        temperature: float | None = None,
        max_output_tokens: int | None = None,
    ) -> None:
        from google import genai
        self._genai = genai
        self._model_name = _resolve_model_name(model_name or settings.gen_model_name)
        self._temperature = settings.llm_temperature if temperature is None else temperature
        self._max_output_tokens = settings.llm_max_output_tokens if max_output_tokens is None else max_output_tokens
        self._clients: dict = {}
        self._clients_lock = threading.Lock()

    @property
    def model_name(self) -> str:
        return self._model_name

    def _client_for(self, secret: str):
        with self._clients_lock:
            client = self._clients.get(secret)
            if client is None:
                client = self._genai.Client(api_key=secret)
                self._clients[secret] = client
            return client

    def complete(self, secret: str, prompt: str, timeout: float | None = None) -> str:
        from google.genai import types
        http_options = types.HttpOptions(timeout=max(1, int(timeout * 1000))) if timeout else None
        config = types.GenerateContentConfig(
            safety_settings=_safety_settings_none(),
            max_output_tokens=self._max_output_tokens,
            temperature=self._temperature,
            http_options=http_options,
        )
        t_api_start = time.perf_counter()
        response = self._client_for(secret).models.generate_content(
            model=self._model_name,
            contents=prompt,
            config=config,
        )
        text = (getattr(response, "text", None) or "").strip()
        logger.info(
            "Gemini generate_content %.2fs model=%s response_len=%s",
            time.perf_counter() - t_api_start,
            self._model_name,
            len(text),
        )
        return text
