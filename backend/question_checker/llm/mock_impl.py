"""
Mock completion client: answers every prompt with a CORRECT verdict.
Lets the service run end to end without Gemini keys (USE_MOCK_LLM=true).
"""
import logging

logger = logging.getLogger(__name__)

MOCK_RESPONSE = (
    "VERDICT: CORRECT\n"
    "CORRECT_OPTIONS_COUNT: 1\n"
    "EXPLANATION: Mock response. Set USE_MOCK_LLM=false and add Gemini API keys for real validation."
)


class MockCompletionClient:
    """Deterministic offline CompletionClient. Counts calls for tests."""

    def __init__(self, response: str = MOCK_RESPONSE) -> None:
        self._response = response
        self.calls = 0

    def complete(self, secret: str, prompt: str, timeout: float | None = None) -> str:
        self.calls += 1
        logger.debug("Mock completion for prompt of %s chars", len(prompt))
        return self._response


def get_mock_completion_client() -> MockCompletionClient:
    return MockCompletionClient()
