"""
Error taxonomy for credential rotation, dispatch and question normalization.
Credential-scoped errors are retried on another key; everything else reaches the caller.
"""


class QuestionCheckerError(Exception):
    """Base class for errors raised by question_checker."""


class NoCredentialsAvailable(QuestionCheckerError):
    """The active credential set is empty at selection time. Not retried."""


class CredentialScopedError(QuestionCheckerError):
    """A failure tied to one credential; worth rotating to the next key."""

    def __init__(self, message: str, credential_id: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.credential_id = credential_id
        self.status_code = status_code


class QuotaExceeded(CredentialScopedError):
    """Provider rate or quota limit hit for this credential."""


class InvalidCredential(CredentialScopedError):
    """Provider rejected this credential."""


class CredentialsExhausted(QuestionCheckerError):
    """Every attempt in the retry budget failed with a credential-scoped error."""

    def __init__(self, attempts: int, last_error: BaseException | None = None):
        detail = str(last_error) if last_error is not None else "Unknown error"
        super().__init__(f"All API keys exhausted after {attempts} attempt(s). Last error: {detail}")
        self.attempts = attempts
        self.last_error = last_error


class StorageUnavailable(QuestionCheckerError):
    """The durable credential store could not be read or written."""


class CredentialNotFound(QuestionCheckerError):
    """No stored credential with the given id."""


class DuplicateCredential(QuestionCheckerError):
    """The key is already stored."""


class InvalidCredentialFormat(QuestionCheckerError):
    """The key does not match the provider prefix convention."""


class MalformedQuestion(QuestionCheckerError):
    """Question options could not be normalized; callers fall back to a single opaque option."""


class ValidationAbandoned(QuestionCheckerError):
    """The caller gave up on a validation before a dispatch was made."""


class ValidationCancelled(ValidationAbandoned):
    """The caller's cancellation token was set."""


class DeadlineExceeded(ValidationAbandoned):
    """The caller's deadline passed or cannot be met."""
