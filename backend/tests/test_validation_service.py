"""
Tests for QuestionValidationService: local short-circuits, the full prompt -> dispatch -> parse
path with scripted LLM replies, and batch results that keep failures apart from verdicts.
"""
import pytest

from question_checker.errors import CredentialsExhausted
from question_checker.llm.dispatcher import RequestDispatcher
from question_checker.services.credential_pool import CredentialPool
from question_checker.services.questions import Question
from question_checker.services.validation import QuestionValidationService

from conftest import CountingRateLimiter, FakeAPIError, ScriptedClient


def _service(store, client, fake_clock):
    pool = CredentialPool(store, ttl_seconds=60, clock=fake_clock)
    dispatcher = RequestDispatcher(pool, CountingRateLimiter(), client, clock=fake_clock)
    return QuestionValidationService(dispatcher, max_workers=3)


@pytest.mark.parametrize("qtype", ["MCQ", "MSQ"])
@pytest.mark.parametrize("options", [None, "", [], "[]"])
def test_choice_question_without_options_is_wrong_without_request(store, fake_clock, qtype, options):
    client = ScriptedClient("VERDICT: CORRECT\nCORRECT_OPTIONS_COUNT: 1")
    service = _service(store, client, fake_clock)
    assert service.validate_question(Question(statement="Pick one", question_type=qtype, options=options))
    assert client.calls == []


def test_unknown_type_is_wrong_without_request(store, fake_clock):
    client = ScriptedClient("VERDICT: CORRECT")
    service = _service(store, client, fake_clock)
    outcome = service.validate(Question(statement="True or false?", question_type="TF"))
    assert outcome.is_wrong
    assert outcome.raw_response_text == ""
    assert client.calls == []


def test_mcq_round_trip(store, fake_clock):
    client = ScriptedClient("VERDICT: CORRECT\nCORRECT_OPTIONS_COUNT: 1\nB is 4.")
    service = _service(store, client, fake_clock)
    q = Question(statement="2 + 2 = ?", question_type="MCQ", options='["3", "4", "5"]', answer="B")
    outcome = service.validate(q)
    assert not outcome.is_wrong
    assert outcome.correct_options_count == 1
    prompt = client.calls[0][1]
    assert "B. 4" in prompt


def test_malformed_options_still_checked_as_single_option(store, fake_clock):
    client = ScriptedClient("VERDICT: WRONG\nCORRECT_OPTIONS_COUNT: 0")
    service = _service(store, client, fake_clock)
    q = Question(statement="Pick", question_type="MSQ", options='["a", ')
    assert service.validate_question(q)
    assert 'A. ["a", ' in client.calls[0][1]


def test_nat_uses_computed_answer(store, fake_clock):
    client = ScriptedClient("VERDICT: CORRECT\nCOMPUTED_ANSWER: 144")
    service = _service(store, client, fake_clock)
    outcome = service.validate(Question(statement="12 * 12", question_type="NAT"))
    assert not outcome.is_wrong
    assert outcome.computed_answer == "144"


def test_dispatch_failure_is_raised_not_reported_as_wrong(store, fake_clock):
    client = ScriptedClient(FakeAPIError(429, "quota"))
    service = _service(store, client, fake_clock)
    with pytest.raises(CredentialsExhausted):
        service.validate_question(Question(statement="Explain", question_type="SUB"))


def test_validate_many_keeps_order_and_separates_failures(store, fake_clock):
    boom = FakeAPIError(500, "Internal error")

    class ByStatement:
        def complete(self, secret, prompt, timeout=None):
            if "explode" in prompt:
                raise boom
            if "bad" in prompt:
                return "VERDICT: WRONG"
            return "VERDICT: CORRECT"

    service = _service(store, ByStatement(), fake_clock)
    questions = [
        Question(statement="good one", question_type="SUB"),
        Question(statement="explode", question_type="SUB"),
        Question(statement="bad one", question_type="NAT"),
        Question(statement="no options", question_type="MCQ"),
    ]
    results = service.validate_many(questions)
    assert [r.index for r in results] == [0, 1, 2, 3]
    assert results[0].ok and not results[0].outcome.is_wrong
    assert not results[1].ok and results[1].error is boom and results[1].outcome is None
    assert results[2].ok and results[2].outcome.is_wrong
    assert results[3].ok and results[3].outcome.is_wrong


def test_validate_many_empty(store, fake_clock):
    assert _service(store, ScriptedClient("x"), fake_clock).validate_many([]) == []
