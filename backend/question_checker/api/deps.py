"""
Shared dependencies: credential store, validation service, and error -> HTTP status mapping.
Tests override get_credential_store / get_question_validation_service via app.dependency_overrides.
"""
import logging

from fastapi import HTTPException, status

from question_checker.errors import (
    CredentialNotFound,
    CredentialsExhausted,
    DuplicateCredential,
    InvalidCredentialFormat,
    NoCredentialsAvailable,
    StorageUnavailable,
    ValidationAbandoned,
)
from question_checker.services.credential_store import SqlCredentialStore
from question_checker.services.validation import QuestionValidationService, get_validation_service

logger = logging.getLogger(__name__)


def get_credential_store() -> SqlCredentialStore:
    return SqlCredentialStore()


def get_question_validation_service() -> QuestionValidationService:
    return get_validation_service()


def describe_error(exc: BaseException) -> str:
    return f"{type(exc).__name__}: {exc}"


def http_error_for(exc: Exception) -> HTTPException:
    """Map a service failure to an HTTP error. A failed check is never reported as a verdict."""
    if isinstance(exc, CredentialNotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, DuplicateCredential):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, InvalidCredentialFormat):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_CONTENT, detail=str(exc))
    if isinstance(exc, (NoCredentialsAvailable, CredentialsExhausted, StorageUnavailable)):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=describe_error(exc))
    if isinstance(exc, ValidationAbandoned):
        return HTTPException(status_code=status.HTTP_504_GATEWAY_TIMEOUT, detail=describe_error(exc))
    logger.warning("LLM request failed: %s", exc)
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=describe_error(exc))
