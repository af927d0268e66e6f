"""
Question validation: prompt -> dispatcher -> response parser, one question at a time.

Questions the model cannot help with are decided locally: an unknown type or an
MCQ/MSQ without options is wrong without any request. Dispatch failures propagate
so a check that could not run is never reported as a WRONG verdict.
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from functools import lru_cache

from question_checker.config import settings
from question_checker.llm.dispatcher import RequestDispatcher
from question_checker.services.prompts import build_prompt
from question_checker.services.questions import Question
from question_checker.services.response_parser import ValidationOutcome, parse_response

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuestionCheckResult:
    """Batch entry: outcome when the check ran, error when it could not be performed."""

    index: int
    outcome: ValidationOutcome | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class QuestionValidationService:
    def __init__(self, dispatcher: RequestDispatcher, max_workers: int | None = None) -> None:
        self._dispatcher = dispatcher
        self._max_workers = settings.validation_max_workers if max_workers is None else max_workers

    def validate(
        self,
        question: Question,
        deadline: float | None = None,
        cancel: threading.Event | None = None,
    ) -> ValidationOutcome:
        qtype = question.type
        if qtype is None:
            logger.warning("Unknown question type: %s. Marking as wrong by default.", question.question_type)
            return ValidationOutcome(is_wrong=True, reason="unknown question type")

        options = question.normalized_options().options
        if qtype.has_options and not options:
            logger.warning("No options found for %s question, marking as wrong", qtype.value)
            return ValidationOutcome(is_wrong=True, reason="no options")

        prompt = build_prompt(question, options)
        raw = self._dispatcher.send(prompt, deadline=deadline, cancel=cancel)
        outcome = parse_response(raw, qtype, len(options))
        logger.info(
            "Checked %s question: is_wrong=%s verdict=%s count=%s",
            qtype.value,
            outcome.is_wrong,
            outcome.verdict,
            outcome.correct_options_count,
        )
        return outcome

    def validate_question(
        self,
        question: Question,
        deadline: float | None = None,
        cancel: threading.Event | None = None,
    ) -> bool:
        """True when the question is judged wrong. Raises when the check could not be performed."""
        return self.validate(question, deadline=deadline, cancel=cancel).is_wrong

    def validate_many(
        self,
        questions: list[Question],
        max_workers: int | None = None,
        deadline: float | None = None,
        cancel: threading.Event | None = None,
    ) -> list[QuestionCheckResult]:
        """
        Check questions concurrently. The rate limiter still spaces every request, so
        workers only overlap on waiting. Results keep input order.
        """
        if not questions:
            return []
        workers = max(1, min(max_workers or self._max_workers, len(questions)))
        results: list[QuestionCheckResult | None] = [None] * len(questions)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {
                pool.submit(self.validate, q, deadline, cancel): i
                for i, q in enumerate(questions)
            }
            for future in as_completed(futures):
                i = futures[future]
                try:
                    results[i] = QuestionCheckResult(index=i, outcome=future.result())
                except Exception as e:
                    logger.warning("Validation failed for question %s: %s", i, e)
                    results[i] = QuestionCheckResult(index=i, error=e)
        return results


def build_validation_service(store=None, client=None) -> QuestionValidationService:
    """Wire store -> pool -> rate limiter -> dispatcher -> service from settings."""
    from question_checker.llm import get_completion_client
    from question_checker.llm.rate_limiter import RateLimiter
    from question_checker.services.credential_pool import CredentialPool
    from question_checker.services.credential_store import SqlCredentialStore

    pool = CredentialPool(store if store is not None else SqlCredentialStore())
    dispatcher = RequestDispatcher(
        pool=pool,
        rate_limiter=RateLimiter(),
        client=client if client is not None else get_completion_client(),
    )
    return QuestionValidationService(dispatcher)


@lru_cache(maxsize=1)
def get_validation_service() -> QuestionValidationService:
    """Process-wide service: one pool and one rate limiter shared by every caller."""
    return build_validation_service()
