"""
Unit tests for the Gemini completion client: model resolution, per-key client reuse,
and the request it sends. The SDK call itself is monkeypatched; no network.
"""
import pytest

from question_checker.config import normalize_gen_model
from question_checker.llm.gemini_impl import _resolve_model_name


def test_resolve_model_name_unsupported_mapped_to_fallback():
    """Retired model ids (e.g. from old .env) are mapped to gemini-2.5-flash to avoid 404."""
    assert _resolve_model_name("gemini-2.0-flash-exp") == "gemini-2.5-flash"
    assert _resolve_model_name("gemini-1.5-flash-002") == "gemini-2.5-flash"
    assert _resolve_model_name("gemini-1.5-pro") == "gemini-2.5-flash"
    assert _resolve_model_name("gemini-2.0-flash") == "gemini-2.5-flash"


def test_resolve_model_name_supported_unchanged():
    assert _resolve_model_name("gemini-2.5-flash") == "gemini-2.5-flash"
    assert _resolve_model_name("gemini-2.5-pro") == "gemini-2.5-pro"


def test_resolve_model_name_empty_returns_fallback():
    assert _resolve_model_name("") == "gemini-2.5-flash"
    assert _resolve_model_name("   ") == "gemini-2.5-flash"
    assert normalize_gen_model(None) == "gemini-2.5-flash"


def test_get_completion_client_mock(monkeypatch):
    from question_checker import llm
    from question_checker.llm.mock_impl import MockCompletionClient

    monkeypatch.setattr(llm.settings, "use_mock_llm", True)
    client = llm.get_completion_client()
    assert isinstance(client, MockCompletionClient)
    assert client.complete("AIzaX", "prompt").startswith("VERDICT: CORRECT")
    assert client.calls == 1


def test_get_completion_client_gemini(monkeypatch):
    pytest.importorskip("google.genai")
    from question_checker import llm
    from question_checker.llm.gemini_impl import GeminiCompletionClient

    monkeypatch.setattr(llm.settings, "use_mock_llm", False)
    assert isinstance(llm.get_completion_client(), GeminiCompletionClient)


def test_complete_reuses_client_per_key_and_strips_text(monkeypatch):
    pytest.importorskip("google.genai")
    from question_checker.llm.gemini_impl import GeminiCompletionClient

    created: list[str] = []
    sent: list[dict] = []

    class FakeModels:
        def generate_content(self, model, contents, config):
            sent.append({"model": model, "contents": contents, "config": config})
            return type("Response", (), {"text": "  VERDICT: CORRECT\n"})()

    class FakeClient:
        def __init__(self, api_key):
            created.append(api_key)
            self.models = FakeModels()

    service = GeminiCompletionClient(model_name="gemini-2.0-flash-exp")
    monkeypatch.setattr(service._genai, "Client", FakeClient)

    assert service.complete("AIzaKey1", "p1") == "VERDICT: CORRECT"
    service.complete("AIzaKey1", "p2")
    service.complete("AIzaKey2", "p3", timeout=12.5)

    assert created == ["AIzaKey1", "AIzaKey2"]
    assert [s["contents"] for s in sent] == ["p1", "p2", "p3"]
    assert all(s["model"] == "gemini-2.5-flash" for s in sent)
    assert sent[0]["config"].http_options is None
    assert sent[2]["config"].http_options.timeout == 12500


def test_complete_empty_text(monkeypatch):
    pytest.importorskip("google.genai")
    from question_checker.llm.gemini_impl import GeminiCompletionClient

    class FakeClient:
        def __init__(self, api_key):
            self.models = type("M", (), {"generate_content": lambda self, model, contents, config: type("R", (), {"text": None})()})()

    service = GeminiCompletionClient()
    monkeypatch.setattr(service._genai, "Client", FakeClient)
    assert service.complete("AIzaKey", "p") == ""
