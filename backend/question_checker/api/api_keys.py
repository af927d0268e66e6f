"""
API keys API: list, add (single / bulk), activate or deactivate, delete Gemini keys.
The credential pool picks up changes on its next snapshot refresh.
"""
from fastapi import APIRouter, Depends, Response, status

from question_checker.api.deps import get_credential_store, http_error_for
from question_checker.errors import QuestionCheckerError
from question_checker.schemas.api_key import (
    ApiKeyBulkCreate,
    ApiKeyBulkResponse,
    ApiKeyCreate,
    ApiKeyListResponse,
    ApiKeyResponse,
    ApiKeyUpdate,
)
from question_checker.services.credential_store import Credential, SqlCredentialStore

router = APIRouter(prefix="/api-keys", tags=["api-keys"])


def _to_response(c: Credential) -> ApiKeyResponse:
    return ApiKeyResponse(
        id=c.id,
        masked_key=c.masked,
        is_active=c.is_active,
        last_used_at=c.last_used_at,
        error_count=c.error_count,
    )


@router.get("", response_model=ApiKeyListResponse)
def list_api_keys(store: SqlCredentialStore = Depends(get_credential_store)):
    try:
        keys = store.list_all()
    except QuestionCheckerError as e:
        raise http_error_for(e) from e
    return ApiKeyListResponse(
        items=[_to_response(k) for k in keys],
        total=len(keys),
        active=sum(1 for k in keys if k.is_active),
    )


@router.post("", response_model=ApiKeyResponse, status_code=status.HTTP_201_CREATED)
def add_api_key(body: ApiKeyCreate, store: SqlCredentialStore = Depends(get_credential_store)):
    try:
        return _to_response(store.add_key(body.api_key))
    except QuestionCheckerError as e:
        raise http_error_for(e) from e


@router.post("/bulk", response_model=ApiKeyBulkResponse, status_code=status.HTTP_201_CREATED)
def add_api_keys_bulk(body: ApiKeyBulkCreate, store: SqlCredentialStore = Depends(get_credential_store)):
    """Paste many keys, one per line. Lines without the key prefix are rejected; known keys skipped."""
    try:
        result = store.add_keys_bulk(body.api_keys)
    except QuestionCheckerError as e:
        raise http_error_for(e) from e
    return ApiKeyBulkResponse(
        added=result.added,
        skipped_duplicates=result.skipped_duplicates,
        rejected=result.rejected,
    )


@router.patch("/{key_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_api_key(key_id: str, body: ApiKeyUpdate, store: SqlCredentialStore = Depends(get_credential_store)):
    try:
        store.set_active(key_id, body.is_active)
    except QuestionCheckerError as e:
        raise http_error_for(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{key_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_api_key(key_id: str, store: SqlCredentialStore = Depends(get_credential_store)):
    try:
        store.delete_key(key_id)
    except QuestionCheckerError as e:
        raise http_error_for(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)
