"""
Questions API: POST /questions/validate (one question), POST /questions/validate-batch.
Requests block while the shared rate limiter spaces LLM calls; a batch can take minutes.
"""
import time

from fastapi import APIRouter, Depends

from question_checker.api.deps import describe_error, get_question_validation_service, http_error_for
from question_checker.schemas.question import (
    BatchValidationItem,
    BatchValidationRequest,
    BatchValidationResponse,
    QuestionIn,
    ValidationResponse,
)
from question_checker.services.questions import Question
from question_checker.services.response_parser import ValidationOutcome
from question_checker.services.validation import QuestionValidationService

router = APIRouter(prefix="/questions", tags=["questions"])


def _to_question(body: QuestionIn) -> Question:
    return Question(
        statement=body.question_statement,
        question_type=body.question_type,
        options=body.options,
        answer=body.answer,
    )


def _to_response(outcome: ValidationOutcome) -> ValidationResponse:
    return ValidationResponse(
        is_wrong=outcome.is_wrong,
        verdict=outcome.verdict,
        correct_options_count=outcome.correct_options_count,
        computed_answer=outcome.computed_answer,
        reason=outcome.reason,
        raw_response=outcome.raw_response_text,
    )


@router.post("/validate", response_model=ValidationResponse)
def validate_question(
    body: QuestionIn,
    timeout_seconds: float | None = None,
    service: QuestionValidationService = Depends(get_question_validation_service),
):
    """Check one question. timeout_seconds bounds the wait in the rate-limit queue plus the LLM call."""
    deadline = time.monotonic() + timeout_seconds if timeout_seconds else None
    try:
        outcome = service.validate(_to_question(body), deadline=deadline)
    except Exception as e:
        raise http_error_for(e) from e
    return _to_response(outcome)


@router.post("/validate-batch", response_model=BatchValidationResponse)
def validate_questions(
    body: BatchValidationRequest,
    service: QuestionValidationService = Depends(get_question_validation_service),
):
    """Check many questions; per-question failures are reported in error, not as verdicts."""
    results = service.validate_many([_to_question(q) for q in body.questions])
    items = [
        BatchValidationItem(
            index=r.index,
            result=_to_response(r.outcome) if r.outcome is not None else None,
            error=describe_error(r.error) if r.error is not None else None,
        )
        for r in results
    ]
    failed = sum(1 for r in results if not r.ok)
    return BatchValidationResponse(items=items, checked=len(results) - failed, failed=failed)
