from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .errors import CorpusExhausted, GenerationError, SessionStateError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 50


@dataclass(frozen=True)
class Answer:
    text: str
    is_correct: bool

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "is_correct": self.is_correct}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Answer":
        return cls(text=str(raw["text"]), is_correct=bool(raw["is_correct"]))


@dataclass(frozen=True)
class Question:
    text: str
    answers: tuple[Answer, ...]

    def correct_answer(self) -> Answer:
        correct = [a for a in self.answers if a.is_correct]
        if len(correct) != 1:
            raise SessionStateError(
                f"question must have exactly one correct answer, got {len(correct)}"
            )
        return correct[0]

    def option_texts(self) -> list[str]:
        return [a.text for a in self.answers]

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "answers": [a.to_dict() for a in self.answers]}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Question":
        return cls(
            text=str(raw["text"]),
            answers=tuple(Answer.from_dict(a) for a in raw.get("answers", [])),
        )


def shuffled_answers(answers: list[Answer], rng: random.Random) -> tuple[Answer, ...]:
    out = list(answers)
    rng.shuffle(out)
    return tuple(out)


class QuestionGenerator(Generic[T]):
    """Base for the corpus-backed generators.

    Subclasses implement ``pick`` (draw one source item) and
    ``generate_question`` (turn it into a ``Question``). ``next_question``
    resamples items that cannot produce a question and gives up with
    ``CorpusExhausted`` after ``max_attempts`` draws.
    """

    name = "generic"

    def __init__(self, rng: random.Random | None = None, *, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> None:
        self.rng = rng or random.Random()
        self.max_attempts = max_attempts

    def pick(self) -> T:
        raise NotImplementedError

    def generate_question(self, item: T) -> Question:
        raise NotImplementedError

    def next_question(self) -> Question:
        last_exc: GenerationError | None = None
        for _ in range(self.max_attempts):
            item = self.pick()
            try:
                return self.generate_question(item)
            except GenerationError as exc:
                logger.debug("question_skipped generator=%s item=%r err=%s", self.name, item, exc)
                last_exc = exc
        raise CorpusExhausted(
            f"{self.name}: no question after {self.max_attempts} attempts"
        ) from last_exc
