"""
Validation prompts per question type.
Every prompt asks for a fixed header the response parser reads:
VERDICT: CORRECT|WRONG, then CORRECT_OPTIONS_COUNT (MCQ/MSQ) or COMPUTED_ANSWER (NAT).
"""
from question_checker.services.questions import Question, QuestionType

_PREAMBLE = "You are an expert question validator."

MCQ_TEMPLATE = """{preamble} Analyze this multiple-choice question. Exactly ONE option must be correct.

Question: {statement}

Options:
{options}

Instructions:
1. Solve the question step by step.
2. Count how many of the given options are correct.
3. The question is CORRECT only if it is properly formulated and exactly one option is correct.
4. The question is WRONG if it is incorrectly formulated, unsolvable, has no correct option or has more than one. Do not accept approximations.

Reply in exactly this format, then optionally a short explanation on the following lines:
VERDICT: CORRECT or WRONG
CORRECT_OPTIONS_COUNT: <integer>"""

MSQ_TEMPLATE = """{preamble} Analyze this multiple-select question. One or more options may be correct.

Question: {statement}

Options:
{options}

Instructions:
1. Solve the question step by step.
2. Count how many of the given options are correct.
3. The question is CORRECT if it is properly formulated and at least one option is correct.
4. The question is WRONG if it is incorrectly formulated, unsolvable, or none of the options is correct. Do not accept approximations.

Reply in exactly this format, then optionally a short explanation on the following lines:
VERDICT: CORRECT or WRONG
CORRECT_OPTIONS_COUNT: <integer>"""

NAT_TEMPLATE = """{preamble} Analyze this numerical answer type question.

Question: {statement}

Instructions:
1. Solve the question step by step.
2. Determine whether the question has a valid numerical answer.
3. The question is CORRECT if it is properly formulated for a numerical response and has a valid numerical answer.
4. The question is WRONG if it is incorrectly formulated, unsolvable, or has no numerical answer.

Reply in exactly this format, then optionally a short explanation on the following lines:
VERDICT: CORRECT or WRONG
COMPUTED_ANSWER: <number, or NONE>"""

SUB_TEMPLATE = """{preamble} Analyze this subjective question.

Question: {statement}

Instructions:
1. Check that the question is clearly stated and answerable.
2. Check that a coherent proof or detailed answer can be constructed.
3. Check that the question gives sufficient information for a complete response.
4. The question is CORRECT if it is properly formulated and answerable.
5. The question is WRONG if it is ambiguous, ill-posed, or cannot be answered properly.

Reply in exactly this format, then optionally a short explanation on the following lines:
VERDICT: CORRECT or WRONG"""

_TEMPLATES = {
    QuestionType.MCQ: MCQ_TEMPLATE,
    QuestionType.MSQ: MSQ_TEMPLATE,
    QuestionType.NAT: NAT_TEMPLATE,
    QuestionType.SUB: SUB_TEMPLATE,
}


def option_label(index: int) -> str:
    """A, B, ..., Z, then AA, AB, ..."""
    label = ""
    n = index
    while True:
        label = chr(65 + n % 26) + label
        n = n // 26 - 1
        if n < 0:
            return label


def format_options(options: list[str]) -> str:
    return "\n".join(f"{option_label(i)}. {o}" for i, o in enumerate(options))


def build_prompt(question: Question, options: list[str] | None = None) -> str:
    """
    Build the validation prompt for a known question type.
    options defaults to the question's normalized options. Raises ValueError for unknown types
    and for MCQ/MSQ without options; callers decide those without the model.
    """
    qtype = question.type
    if qtype is None:
        raise ValueError(f"Unknown question type: {question.question_type!r}")
    if options is None:
        options = question.normalized_options().options
    if qtype.has_options and not options:
        raise ValueError(f"{qtype.value} question has no options")
    return _TEMPLATES[qtype].format(
        preamble=_PREAMBLE,
        statement=(question.statement or "").strip(),
        options=format_options(options) if qtype.has_options else "",
    )
