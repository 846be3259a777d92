from __future__ import annotations
import datetime as dt
from sqlalchemy import String, Integer, BigInteger, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column
from .db import Base

UTC = dt.timezone.utc
def utcnow() -> dt.datetime:
    return dt.datetime.now(tz=UTC)

class User(Base):
    __tablename__ = "users"
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)  # tg user id
    username: Mapped[str | None] = mapped_column(String(64), nullable=True)
    full_name: Mapped[str | None] = mapped_column(Text, nullable=True)  # name typed by the user
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

class DialogueRecord(Base):
    __tablename__ = "dialogue_states"
    chat_id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)

    # awaiting_name | awaiting_game_choice | awaiting_question_count | in_quiz
    kind: Mapped[str] = mapped_column(String(32), default="awaiting_name")
    state_json: Mapped[str] = mapped_column(Text)  # opaque snapshot, see dialogue.py

    updated_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
