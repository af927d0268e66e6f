"""
Turn the model's reply into an is_wrong verdict.

Header lines are matched anywhere in the reply (markdown bold and leading bullets are
ignored), case-insensitively; explanation lines around them are skipped.
A reply with neither a verdict line nor a usable option count is judged wrong for every type.
"""
import re
from dataclasses import dataclass

from question_checker.services.questions import QuestionType

_DECORATION = re.compile(r"[*`#>]")
_VERDICT_RE = re.compile(r"^\s*(?:[-•]\s*)?VERDICT\s*:\s*(.*)$", re.IGNORECASE)
_COUNT_RE = re.compile(r"^\s*(?:[-•]\s*)?CORRECT[_ ]OPTIONS[_ ]COUNT\s*:\s*(\d+)", re.IGNORECASE)
_ANSWER_RE = re.compile(r"^\s*(?:[-•]\s*)?COMPUTED[_ ]ANSWER\s*:\s*(.*)$", re.IGNORECASE)


@dataclass(frozen=True)
class ValidationOutcome:
    """Verdict for one question. raw_response_text is empty when the model was not called."""

    is_wrong: bool
    raw_response_text: str = ""
    verdict: str | None = None
    correct_options_count: int | None = None
    computed_answer: str | None = None
    reason: str | None = None


@dataclass(frozen=True)
class ParsedResponse:
    verdict: str | None
    correct_options_count: int | None
    computed_answer: str | None

    @property
    def verdict_is_wrong(self) -> bool:
        """WRONG or INCORRECT anywhere in the verdict line."""
        if self.verdict is None:
            return False
        verdict = self.verdict.upper()
        return "WRONG" in verdict or "INCORRECT" in verdict


def parse_header(raw_text: str) -> ParsedResponse:
    """Extract the first VERDICT, CORRECT_OPTIONS_COUNT and COMPUTED_ANSWER lines."""
    verdict = count = answer = None
    for line in (raw_text or "").splitlines():
        clean = _DECORATION.sub("", line)
        if verdict is None:
            m = _VERDICT_RE.match(clean)
            if m:
                verdict = m.group(1).strip().upper()
                continue
        if count is None:
            m = _COUNT_RE.match(clean)
            if m:
                count = int(m.group(1))
                continue
        if answer is None:
            m = _ANSWER_RE.match(clean)
            if m:
                answer = m.group(1).strip() or None
    return ParsedResponse(verdict=verdict, correct_options_count=count, computed_answer=answer)


def parse_response(raw_text: str, question_type: QuestionType | str | None, options_count: int = 0) -> ValidationOutcome:
    """Apply the per-type decision rules to a raw model reply."""
    qtype = QuestionType.parse(question_type)
    if qtype is None:
        return ValidationOutcome(is_wrong=True, raw_response_text=raw_text or "", reason="unknown question type")

    parsed = parse_header(raw_text)
    count = parsed.correct_options_count

    if qtype is QuestionType.MCQ:
        if count is not None and count != 1:
            is_wrong, reason = True, f"{count} correct options, expected exactly 1"
        elif parsed.verdict_is_wrong:
            is_wrong, reason = True, "model verdict WRONG"
        elif parsed.verdict is None and count is None:
            is_wrong, reason = True, "no verdict or option count in response"
        else:
            is_wrong, reason = False, None
    elif qtype is QuestionType.MSQ:
        if count == 0:
            is_wrong, reason = True, "no correct option"
        elif count is not None and options_count and count > options_count:
            is_wrong, reason = True, f"{count} correct options but only {options_count} given"
        elif parsed.verdict_is_wrong:
            is_wrong, reason = True, "model verdict WRONG"
        elif parsed.verdict is None and count is None:
            is_wrong, reason = True, "no verdict or option count in response"
        else:
            is_wrong, reason = False, None
    else:
        if parsed.verdict is None:
            is_wrong, reason = True, "no verdict in response"
        elif parsed.verdict_is_wrong:
            is_wrong, reason = True, "model verdict WRONG"
        else:
            is_wrong, reason = False, None

    return ValidationOutcome(
        is_wrong=is_wrong,
        raw_response_text=raw_text or "",
        verdict=parsed.verdict,
        correct_options_count=parsed.correct_options_count,
        computed_answer=parsed.computed_answer if qtype is QuestionType.NAT else None,
        reason=reason,
    )
