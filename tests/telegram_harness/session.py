from __future__ import annotations

import datetime as dt
from typing import Any, AsyncGenerator

from aiogram import Bot
from aiogram.client.session.base import BaseSession
from aiogram.methods import SendChatAction, SendMessage
from aiogram.types import Chat, Message, User


class RecordingSession(BaseSession):
    """Fake transport that records outgoing calls instead of hitting Telegram.

    Reply keyboards can't live on a ``Message`` object, so the last keyboard
    shown in each chat is kept in ``keyboards_by_chat`` (``[]`` once removed).
    """

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[dict[str, Any]] = []
        self.messages_by_chat: dict[int, list[Message]] = {}
        self.keyboards_by_chat: dict[int, list[list[str]]] = {}
        self.parse_modes: dict[tuple[int, int], str | None] = {}
        self._message_id_counter: dict[int, int] = {}

    async def close(self) -> None:
        return None

    async def stream_content(
        self,
        url: str,
        headers: dict[str, Any] | None = None,
        timeout: int = 30,
        chunk_size: int = 65536,
        raise_for_status: bool = True,
    ) -> AsyncGenerator[bytes, None]:
        if False:
            yield b""
        return

    def _record_call(self, method_name: str, payload: dict[str, Any], chat_id: int | None) -> None:
        self.calls.append(
            {
                "method": method_name,
                "payload": payload,
                "chat_id": chat_id,
                "timestamp": dt.datetime.now(tz=dt.timezone.utc),
            }
        )

    def _bot_user(self) -> User:
        return User.model_validate(
            {
                "id": 0,
                "is_bot": True,
                "first_name": "Test Bot",
                "username": "test_bot",
            }
        )

    def _next_message_id(self, chat_id: int) -> int:
        current = self._message_id_counter.get(chat_id, 0) + 1
        self._message_id_counter[chat_id] = current
        return current

    def _remember_keyboard(self, chat_id: int, reply_markup: Any) -> None:
        if not isinstance(reply_markup, dict):
            return
        if reply_markup.get("remove_keyboard"):
            self.keyboards_by_chat[chat_id] = []
        elif "keyboard" in reply_markup:
            self.keyboards_by_chat[chat_id] = [
                [button["text"] if isinstance(button, dict) else str(button) for button in row]
                for row in reply_markup["keyboard"]
            ]

    def _build_message(self, chat_id: int, payload: dict[str, Any]) -> Message:
        self._remember_keyboard(chat_id, payload.get("reply_markup"))
        message = Message.model_validate(
            {
                "message_id": self._next_message_id(chat_id),
                "date": dt.datetime.now(tz=dt.timezone.utc),
                "chat": Chat.model_validate({"id": chat_id, "type": "private"}),
                "from": self._bot_user().model_dump(by_alias=True),
                "text": payload.get("text"),
            }
        )
        parse_mode = payload.get("parse_mode")
        self.parse_modes[(chat_id, message.message_id)] = parse_mode if isinstance(parse_mode, str) else None
        self.messages_by_chat.setdefault(chat_id, []).append(message)
        return message

    async def make_request(self, bot: Bot, method: Any, timeout: int | None = None) -> Any:
        payload = method.model_dump(exclude_none=True)
        chat_id = payload.get("chat_id")
        self._record_call(method.__class__.__name__, payload, chat_id)

        if isinstance(method, SendMessage):
            if chat_id is None:
                return True
            return self._build_message(int(chat_id), payload)

        if isinstance(method, SendChatAction):
            return True

        return True
