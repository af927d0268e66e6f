"""
Text-completion contract: one prompt in, the model's text out, authenticated per call.
Implementations raise the provider's own exceptions; the dispatcher classifies them.
"""
from typing import Protocol


class CompletionClient(Protocol):
    """Abstract interface for a single-credential text completion."""

    def complete(self, secret: str, prompt: str, timeout: float | None = None) -> str:
        """
        Send prompt with the given API key and return the raw response text.
        timeout is in seconds; None leaves the transport default.
        """
        ...
