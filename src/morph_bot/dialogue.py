from __future__ import annotations

import enum
import json
from dataclasses import dataclass
from typing import Union

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from .models import DialogueRecord, utcnow
from .session import QuizSession


class QuizKind(str, enum.Enum):
    STRESS = "stress"
    DECLENSION = "declension"
    PARTS = "parts"


@dataclass(frozen=True)
class AwaitingName:
    kind = "awaiting_name"


@dataclass(frozen=True)
class AwaitingGameChoice:
    kind = "awaiting_game_choice"


@dataclass(frozen=True)
class AwaitingQuestionCount:
    quiz_kind: QuizKind
    kind = "awaiting_question_count"


@dataclass(frozen=True)
class InQuiz:
    quiz_kind: QuizKind
    session: QuizSession
    kind = "in_quiz"


DialogueState = Union[AwaitingName, AwaitingGameChoice, AwaitingQuestionCount, InQuiz]


def state_to_dict(state: DialogueState) -> dict:
    if isinstance(state, AwaitingName):
        return {"kind": state.kind}
    if isinstance(state, AwaitingGameChoice):
        return {"kind": state.kind}
    if isinstance(state, AwaitingQuestionCount):
        return {"kind": state.kind, "quiz_kind": state.quiz_kind.value}
    if isinstance(state, InQuiz):
        return {
            "kind": state.kind,
            "quiz_kind": state.quiz_kind.value,
            "session": state.session.to_dict(),
        }
    raise TypeError(f"unknown dialogue state: {state!r}")


def state_from_dict(raw: dict) -> DialogueState:
    kind = raw.get("kind")
    if kind == AwaitingName.kind:
        return AwaitingName()
    if kind == AwaitingGameChoice.kind:
        return AwaitingGameChoice()
    if kind == AwaitingQuestionCount.kind:
        return AwaitingQuestionCount(QuizKind(raw["quiz_kind"]))
    if kind == InQuiz.kind:
        return InQuiz(QuizKind(raw["quiz_kind"]), QuizSession.from_dict(raw["session"]))
    raise ValueError(f"unknown dialogue state kind: {kind!r}")


def dumps_state(state: DialogueState) -> str:
    return json.dumps(state_to_dict(state), ensure_ascii=False)


def loads_state(raw: str) -> DialogueState:
    return state_from_dict(json.loads(raw))


# ---------------- persistence ----------------
async def load_state(s: AsyncSession, chat_id: int) -> DialogueState | None:
    rec = await s.get(DialogueRecord, chat_id)
    if rec is None:
        return None
    return loads_state(rec.state_json)


async def save_state(s: AsyncSession, chat_id: int, state: DialogueState) -> None:
    rec = await s.get(DialogueRecord, chat_id)
    payload = dumps_state(state)
    if rec is None:
        rec = DialogueRecord(chat_id=chat_id, kind=state.kind, state_json=payload)
        s.add(rec)
    else:
        rec.kind = state.kind
        rec.state_json = payload
        rec.updated_at = utcnow()
    await s.commit()


async def clear_state(s: AsyncSession, chat_id: int) -> None:
    await s.execute(delete(DialogueRecord).where(DialogueRecord.chat_id == chat_id))
    await s.commit()
