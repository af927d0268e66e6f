"""
Question validation request/response schemas.
"""
from typing import Any

from pydantic import BaseModel, Field


class QuestionIn(BaseModel):
    question_statement: str
    question_type: str  # MCQ | MSQ | NAT | SUB (or "Subjective")
    options: Any = None  # list of strings, JSON-encoded list, single string, or null
    answer: str | None = None  # informational only; not sent to the model


class ValidationResponse(BaseModel):
    is_wrong: bool
    verdict: str | None = None
    correct_options_count: int | None = None
    computed_answer: str | None = None
    reason: str | None = None
    raw_response: str = ""


class BatchValidationRequest(BaseModel):
    questions: list[QuestionIn] = Field(min_length=1, max_length=200)


class BatchValidationItem(BaseModel):
    """One batch entry: result when the check ran, error when it could not be performed."""
    index: int
    result: ValidationResponse | None = None
    error: str | None = None


class BatchValidationResponse(BaseModel):
    items: list[BatchValidationItem]
    checked: int
    failed: int
