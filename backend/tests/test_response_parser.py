"""Unit tests for the VERDICT / CORRECT_OPTIONS_COUNT response protocol."""
import pytest

from question_checker.services.response_parser import parse_header, parse_response


def test_mcq_count_two_is_wrong():
    out = parse_response("VERDICT: CORRECT\nCORRECT_OPTIONS_COUNT: 2", "MCQ", 4)
    assert out.is_wrong
    assert out.correct_options_count == 2


def test_mcq_count_one_and_correct_is_not_wrong():
    out = parse_response("VERDICT: CORRECT\nCORRECT_OPTIONS_COUNT: 1", "MCQ", 4)
    assert not out.is_wrong
    assert out.verdict == "CORRECT"


def test_mcq_verdict_wrong():
    assert parse_response("VERDICT: WRONG\nCORRECT_OPTIONS_COUNT: 1", "MCQ", 4).is_wrong


@pytest.mark.parametrize("qtype", ["MCQ", "MSQ", "NAT", "SUB"])
def test_incorrect_verdict_is_wrong(qtype):
    out = parse_response("VERDICT: INCORRECT\nCORRECT_OPTIONS_COUNT: 1", qtype, 4)
    assert out.is_wrong
    assert out.reason == "model verdict WRONG"


def test_mcq_count_only_one_is_not_wrong():
    assert not parse_response("CORRECT_OPTIONS_COUNT: 1", "MCQ", 4).is_wrong


def test_mcq_no_header_fails_closed():
    out = parse_response("The answer is B.", "MCQ", 4)
    assert out.is_wrong
    assert out.verdict is None
    assert out.correct_options_count is None


@pytest.mark.parametrize("verdict", ["CORRECT", "WRONG", None])
def test_msq_zero_count_is_wrong_regardless_of_verdict(verdict):
    text = (f"VERDICT: {verdict}\n" if verdict else "") + "CORRECT_OPTIONS_COUNT: 0"
    assert parse_response(text, "MSQ", 4).is_wrong


def test_msq_several_correct_is_not_wrong():
    assert not parse_response("VERDICT: CORRECT\nCORRECT_OPTIONS_COUNT: 3", "MSQ", 4).is_wrong


def test_msq_count_larger_than_options_is_wrong():
    assert parse_response("VERDICT: CORRECT\nCORRECT_OPTIONS_COUNT: 5", "MSQ", 4).is_wrong


def test_msq_no_header_fails_closed():
    assert parse_response("Looks fine to me.", "MSQ", 4).is_wrong


@pytest.mark.parametrize("qtype", ["NAT", "SUB"])
def test_nat_sub_follow_verdict(qtype):
    assert not parse_response("VERDICT: CORRECT", qtype).is_wrong
    assert parse_response("VERDICT: WRONG\nThe statement is ambiguous.", qtype).is_wrong


@pytest.mark.parametrize("qtype", ["NAT", "SUB"])
def test_nat_sub_missing_verdict_fails_closed(qtype):
    assert parse_response("I think it is fine.", qtype).is_wrong


def test_nat_computed_answer():
    out = parse_response("VERDICT: CORRECT\nCOMPUTED_ANSWER: 144\nBecause 12*12.", "NAT")
    assert not out.is_wrong
    assert out.computed_answer == "144"


def test_unknown_type_is_wrong():
    assert parse_response("VERDICT: CORRECT", "TF").is_wrong


def test_header_is_case_insensitive_and_tolerates_markdown():
    text = "Let me check.\n**Verdict:** correct\n- **Correct_Options_Count:** 1\nExplanation follows."
    parsed = parse_header(text)
    assert parsed.verdict == "CORRECT"
    assert parsed.correct_options_count == 1
    assert not parse_response(text, "MCQ", 4).is_wrong


def test_first_verdict_line_wins():
    parsed = parse_header("VERDICT: WRONG\nVERDICT: CORRECT")
    assert parsed.verdict == "WRONG"


def test_raw_text_is_kept():
    out = parse_response("VERDICT: CORRECT\nCORRECT_OPTIONS_COUNT: 1\nok", "MCQ", 2)
    assert out.raw_response_text.endswith("ok")
