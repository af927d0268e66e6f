"""
LLM access: completion clients, the process-wide rate limiter and the multi-key dispatcher.
Gemini only. Uses GEN_MODEL_NAME; API keys come from the credential store.
"""
import logging

from question_checker.config import settings
from question_checker.llm.base import CompletionClient

logger = logging.getLogger(__name__)


def get_completion_client() -> CompletionClient:
    """Return the Gemini client, or the mock client when USE_MOCK_LLM is set."""
    if settings.use_mock_llm:
        logger.warning("USE_MOCK_LLM is set; questions are checked by the mock LLM.")
        from question_checker.llm.mock_impl import get_mock_completion_client
        return get_mock_completion_client()
    from question_checker.llm.gemini_impl import GeminiCompletionClient
    client = GeminiCompletionClient()
    logger.info("Using LLM: %s (Gemini)", client.model_name)
    return client


__all__ = ["CompletionClient", "get_completion_client"]
