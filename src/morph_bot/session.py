from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass, replace
from typing import Any, Protocol

from .errors import (
    ExplanationUnavailable,
    InvalidUserInput,
    SessionStateError,
)
from .questions import Question, QuestionGenerator

logger = logging.getLogger(__name__)

DEFAULT_MAX_QUESTIONS = 50
DEFAULT_EXPLAIN_TIMEOUT_S = 15.0

CORRECT_TEXT = "Правильно!"
WRONG_PREFIX = "Неправильно!"


class ExplanationPort(Protocol):
    async def explain(
        self,
        question: Question,
        wrong_answer_text: str,
        correct_answer_text: str,
    ) -> str:
        """Raise ExplanationTimeout or UpstreamError when no text is available."""
        ...


class SessionState(str, enum.Enum):
    AWAITING_FIRST_QUESTION = "awaiting_first_question"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass(frozen=True)
class QuizSession:
    questions: tuple[Question, ...]
    current_index: int = 0
    score: int = 0

    @property
    def total(self) -> int:
        return len(self.questions)

    @property
    def state(self) -> SessionState:
        self.check()
        if self.current_index == 0:
            return SessionState.AWAITING_FIRST_QUESTION
        if self.current_index < self.total:
            return SessionState.IN_PROGRESS
        return SessionState.COMPLETED

    def check(self) -> None:
        if not self.questions:
            raise SessionStateError("session has no questions")
        if not 0 <= self.current_index <= self.total:
            raise SessionStateError(
                f"current_index {self.current_index} outside [0, {self.total}]"
            )
        if not 0 <= self.score <= self.current_index:
            raise SessionStateError(f"score {self.score} exceeds index {self.current_index}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "questions": [q.to_dict() for q in self.questions],
            "current_index": self.current_index,
            "score": self.score,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "QuizSession":
        return cls(
            questions=tuple(Question.from_dict(q) for q in raw.get("questions", [])),
            current_index=int(raw.get("current_index", 0)),
            score=int(raw.get("score", 0)),
        )


@dataclass(frozen=True)
class Summary:
    score: int
    total: int

    def text(self) -> str:
        return f"Квіз закінчився! Ти відповів правильно на {self.score} з {self.total} питань"


@dataclass(frozen=True)
class Feedback:
    is_correct: bool
    text: str
    explained: bool = False


@dataclass(frozen=True)
class TurnResult:
    session: QuizSession
    feedback: Feedback | None = None
    prompt: Question | None = None
    summary: Summary | None = None
    question_number: int = 0

    @property
    def finished(self) -> bool:
        return self.summary is not None


def fallback_explanation(correct_answer_text: str) -> str:
    return f"Правильна відповідь -- {correct_answer_text} Будь уважнішим!"


def parse_question_count(text: str | None, *, max_questions: int = DEFAULT_MAX_QUESTIONS) -> int:
    raw = (text or "").strip()
    if not raw.isdecimal():
        raise InvalidUserInput(f"not a number: {raw!r}", reason="not_a_number")
    count = int(raw)
    _check_count(count, max_questions)
    return count


def _check_count(count: int, max_questions: int) -> None:
    if count <= 0:
        raise InvalidUserInput("question count must be positive", reason="zero")
    if count > max_questions:
        raise InvalidUserInput(f"question count above {max_questions}", reason="too_many")


def start_quiz(
    question_count: int,
    generator: QuestionGenerator,
    *,
    max_questions: int = DEFAULT_MAX_QUESTIONS,
) -> QuizSession:
    _check_count(question_count, max_questions)
    questions = tuple(generator.next_question() for _ in range(question_count))
    logger.info("quiz_started generator=%s questions=%s", generator.name, question_count)
    return QuizSession(questions=questions)


async def _explain(
    explainer: ExplanationPort | None,
    question: Question,
    user_text: str,
    correct_text: str,
    timeout: float,
) -> tuple[str, bool]:
    if explainer is None:
        return fallback_explanation(correct_text), False
    try:
        text = await asyncio.wait_for(
            explainer.explain(question, user_text, correct_text),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        logger.warning("explanation_timeout timeout_s=%s", timeout)
        return fallback_explanation(correct_text), False
    except ExplanationUnavailable as exc:
        logger.warning("explanation_unavailable kind=%s err=%s", type(exc).__name__, exc)
        return fallback_explanation(correct_text), False
    except Exception:
        logger.exception("explanation_failed")
        return fallback_explanation(correct_text), False
    if not (text or "").strip():
        return fallback_explanation(correct_text), False
    return text.strip(), True


async def advance(
    session: QuizSession,
    user_text: str,
    explainer: ExplanationPort | None = None,
    *,
    timeout: float = DEFAULT_EXPLAIN_TIMEOUT_S,
) -> TurnResult:
    """Process one inbound turn.

    Evaluates ``user_text`` against the previously emitted question (if any),
    then either emits the next question or the final summary. The input
    session is left untouched; the caller persists ``TurnResult.session``.
    """
    session.check()
    index = session.current_index
    score = session.score
    feedback: Feedback | None = None

    if index > 0:
        question = session.questions[index - 1]
        correct = question.correct_answer()
        if user_text == correct.text:
            score += 1
            feedback = Feedback(True, CORRECT_TEXT)
        else:
            text, explained = await _explain(explainer, question, user_text, correct.text, timeout)
            feedback = Feedback(False, f"{WRONG_PREFIX}\n\n{text}", explained=explained)

    if index == session.total:
        done = replace(session, score=score)
        logger.info("quiz_finished score=%s total=%s", score, session.total)
        return TurnResult(session=done, feedback=feedback, summary=Summary(score, session.total))

    return TurnResult(
        session=replace(session, current_index=index + 1, score=score),
        feedback=feedback,
        prompt=session.questions[index],
        question_number=index + 1,
    )
