"""
Durable credential store: the gemini_api_keys table behind the credential pool.
The pool only needs list_active / touch_last_used / increment_error_count / reset_error_count;
the administrative operations back the /api-keys endpoints.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from question_checker.config import settings
from question_checker.errors import (
    CredentialNotFound,
    DuplicateCredential,
    InvalidCredentialFormat,
    StorageUnavailable,
)
from question_checker.models.api_key import GeminiApiKey

logger = logging.getLogger(__name__)


def mask_secret(secret: str) -> str:
    """Short printable form of a key: first 8 and last 3 characters."""
    if len(secret) <= 11:
        return secret[:2] + "..." if secret else ""
    return f"{secret[:8]}...{secret[-3:]}"


@dataclass
class Credential:
    """One API key as seen by the pool. error_count and last_used_at mirror the store."""

    id: str
    secret: str
    is_active: bool = True
    last_used_at: datetime | None = None
    error_count: int = 0

    @property
    def masked(self) -> str:
        return mask_secret(self.secret)


@dataclass(frozen=True)
class BulkAddResult:
    added: int
    skipped_duplicates: int
    rejected: int


class CredentialStore(Protocol):
    """Storage operations the credential pool depends on."""

    def list_active(self) -> list[Credential]:
        """Active credentials ordered by ascending last use, never-used first."""
        ...

    def touch_last_used(self, credential_id: str, when: datetime) -> None:
        ...

    def increment_error_count(self, credential_id: str) -> None:
        ...

    def reset_error_count(self, credential_id: str) -> None:
        ...


def _to_credential(row: GeminiApiKey) -> Credential:
    return Credential(
        id=str(row.id),
        secret=row.api_key,
        is_active=bool(row.is_active),
        last_used_at=row.last_used_at,
        error_count=row.error_count or 0,
    )


def _parse_id(credential_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(credential_id))
    except ValueError as e:
        raise CredentialNotFound(f"Unknown credential id: {credential_id}") from e


class SqlCredentialStore:
    """CredentialStore on SQLAlchemy. Every call opens and closes its own session."""

    def __init__(self, session_factory=None, key_prefix: str | None = None) -> None:
        if session_factory is None:
            from question_checker.database import SessionLocal
            session_factory = SessionLocal
        self._session_factory = session_factory
        self._key_prefix = settings.api_key_prefix if key_prefix is None else key_prefix

    # --- core operations -------------------------------------------------

    def list_active(self) -> list[Credential]:
        stmt = (
            select(GeminiApiKey)
            .where(GeminiApiKey.is_active.is_(True))
            .order_by(
                GeminiApiKey.last_used_at.is_(None).desc(),
                GeminiApiKey.last_used_at.asc(),
                GeminiApiKey.created_at.asc(),
            )
        )
        db = self._session_factory()
        try:
            rows = db.execute(stmt).scalars().all()
            return [_to_credential(r) for r in rows]
        except SQLAlchemyError as e:
            raise StorageUnavailable(f"Could not load active API keys: {e}") from e
        finally:
            db.close()

    def touch_last_used(self, credential_id: str, when: datetime) -> None:
        self._execute_update(credential_id, last_used_at=when)

    def increment_error_count(self, credential_id: str) -> None:
        # Single UPDATE so concurrent dispatches never lose an increment
        self._execute_update(credential_id, error_count=GeminiApiKey.error_count + 1)

    def reset_error_count(self, credential_id: str) -> None:
        self._execute_update(credential_id, error_count=0)

    def _execute_update(self, credential_id: str, **values) -> int:
        key_id = _parse_id(credential_id)
        db = self._session_factory()
        try:
            result = db.execute(update(GeminiApiKey).where(GeminiApiKey.id == key_id).values(**values))
            db.commit()
            return result.rowcount
        except SQLAlchemyError as e:
            db.rollback()
            raise StorageUnavailable(f"Could not update API key {credential_id}: {e}") from e
        finally:
            db.close()

    # --- administrative operations ---------------------------------------

    def validate_format(self, api_key: str) -> str:
        """Return the trimmed key or raise InvalidCredentialFormat."""
        key = (api_key or "").strip()
        if not key or not key.startswith(self._key_prefix):
            raise InvalidCredentialFormat(
                f'Please enter a valid Gemini API key (starts with "{self._key_prefix}")'
            )
        return key

    def list_all(self) -> list[Credential]:
        """All stored credentials, newest first."""
        db = self._session_factory()
        try:
            rows = db.execute(select(GeminiApiKey).order_by(GeminiApiKey.created_at.desc())).scalars().all()
            return [_to_credential(r) for r in rows]
        except SQLAlchemyError as e:
            raise StorageUnavailable(f"Could not load API keys: {e}") from e
        finally:
            db.close()

    def add_key(self, api_key: str) -> Credential:
        key = self.validate_format(api_key)
        db = self._session_factory()
        try:
            row = GeminiApiKey(api_key=key, is_active=True, error_count=0)
            db.add(row)
            db.commit()
            db.refresh(row)
            logger.info("Added API key %s", mask_secret(key))
            return _to_credential(row)
        except IntegrityError as e:
            db.rollback()
            raise DuplicateCredential("This API key already exists") from e
        except SQLAlchemyError as e:
            db.rollback()
            raise StorageUnavailable(f"Could not add API key: {e}") from e
        finally:
            db.close()

    def add_keys_bulk(self, text: str) -> BulkAddResult:
        """Insert one key per line. Lines without the prefix are rejected; stored keys are skipped."""
        lines = [line.strip() for line in (text or "").splitlines() if line.strip()]
        keys: list[str] = []
        for line in lines:
            if line.startswith(self._key_prefix) and line not in keys:
                keys.append(line)
        rejected = sum(1 for line in lines if not line.startswith(self._key_prefix))
        if not keys:
            raise InvalidCredentialFormat(f'No valid API keys found (must start with "{self._key_prefix}")')

        db = self._session_factory()
        try:
            existing = set(
                db.execute(select(GeminiApiKey.api_key).where(GeminiApiKey.api_key.in_(keys))).scalars().all()
            )
            new_keys = [k for k in keys if k not in existing]
            for k in new_keys:
                db.add(GeminiApiKey(api_key=k, is_active=True, error_count=0))
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise StorageUnavailable(f"Could not add API keys: {e}") from e
        finally:
            db.close()
        skipped = len(keys) - len(new_keys)
        logger.info("Bulk add: %s added, %s duplicate(s), %s rejected", len(new_keys), skipped, rejected)
        return BulkAddResult(added=len(new_keys), skipped_duplicates=skipped, rejected=rejected)

    def set_active(self, credential_id: str, is_active: bool) -> None:
        if self._execute_update(credential_id, is_active=is_active) == 0:
            raise CredentialNotFound(f"Unknown credential id: {credential_id}")

    def delete_key(self, credential_id: str) -> None:
        key_id = _parse_id(credential_id)
        db = self._session_factory()
        try:
            row = db.get(GeminiApiKey, key_id)
            if row is None:
                raise CredentialNotFound(f"Unknown credential id: {credential_id}")
            db.delete(row)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise StorageUnavailable(f"Could not delete API key {credential_id}: {e}") from e
        finally:
            db.close()
