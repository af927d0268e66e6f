"""
Question types and option normalization.

Options arrive as None, a list, a JSON-encoded list or a single plain string.
parse_options() turns every one of those into a list of strings and never raises:
malformed JSON falls back to a single opaque option with the error attached.
"""
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from question_checker.errors import MalformedQuestion

logger = logging.getLogger(__name__)


class QuestionType(str, Enum):
    MCQ = "MCQ"  # exactly one correct option
    MSQ = "MSQ"  # one or more correct options
    NAT = "NAT"  # numerical answer
    SUB = "SUB"  # subjective

    @classmethod
    def parse(cls, raw: Any) -> "QuestionType | None":
        """Case-insensitive lookup; "Subjective" is accepted for SUB. Unknown -> None."""
        if isinstance(raw, cls):
            return raw
        s = str(raw or "").strip().upper()
        if s == "SUBJECTIVE":
            return cls.SUB
        try:
            return cls(s)
        except ValueError:
            return None

    @property
    def has_options(self) -> bool:
        return self in (QuestionType.MCQ, QuestionType.MSQ)


@dataclass(frozen=True)
class OptionsParseResult:
    """Normalized options. ok=False means the raw value was malformed and kept as one option."""

    options: list[str] = field(default_factory=list)
    ok: bool = True
    error: MalformedQuestion | None = None


def _option_text(item: Any) -> str:
    if isinstance(item, dict):
        return str(item.get("text", item))
    return str(item)


def parse_options(raw: Any) -> OptionsParseResult:
    """Normalize a raw options value into an ordered list of strings."""
    if raw is None:
        return OptionsParseResult([])
    if isinstance(raw, (list, tuple)):
        return OptionsParseResult([_option_text(o) for o in raw])
    if isinstance(raw, str):
        if not raw.strip():
            return OptionsParseResult([])
        if raw.strip().startswith("["):
            try:
                data = json.loads(raw)
            except json.JSONDecodeError as e:
                logger.warning("Error parsing options, using as single option: %s", e)
                return OptionsParseResult([raw], ok=False, error=MalformedQuestion(f"Options are not valid JSON: {e}"))
            if isinstance(data, list):
                return OptionsParseResult([_option_text(o) for o in data])
            return OptionsParseResult([raw], ok=False, error=MalformedQuestion("Options JSON is not a list"))
        return OptionsParseResult([raw])
    return OptionsParseResult([str(raw)])


def serialize_options(options: list[str] | None) -> str:
    """JSON-encode an options list; parse_options() returns the same list."""
    return json.dumps([str(o) for o in (options or [])], ensure_ascii=False)


@dataclass
class Question:
    """One question as submitted for checking. answer is carried along but not sent to the model."""

    statement: str
    question_type: str
    options: Any = None
    answer: str | None = None

    @property
    def type(self) -> QuestionType | None:
        return QuestionType.parse(self.question_type)

    def normalized_options(self) -> OptionsParseResult:
        return parse_options(self.options)
