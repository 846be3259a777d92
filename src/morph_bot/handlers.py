from __future__ import annotations
import asyncio
import logging
import weakref

from aiogram import Dispatcher
from aiogram.enums import ChatAction, ParseMode
from aiogram.filters import Command, CommandStart
from aiogram.types import Message
from sqlalchemy.ext.asyncio import async_sessionmaker, AsyncSession

from .config import Settings
from .corpus import Corpora
from .dialogue import InQuiz, clear_state, load_state, save_state
from .errors import SessionStateError
from .flow import QuizContext, Reply, TurnOutcome, build_generators, handle_turn
from .i18n import t
from .keyboards import kb_reply
from .llm import LLMClient
from .models import User

logger = logging.getLogger(__name__)

# ---------------- helpers ----------------
def _build_llm(settings: Settings) -> LLMClient | None:
    if not settings.gemini_api_key:
        return None
    return LLMClient(settings.gemini_api_key, model=settings.llm_model, persona=settings.llm_persona)

def build_quiz_context(settings: Settings, corpora: Corpora) -> QuizContext:
    llm = _build_llm(settings)
    return QuizContext(
        generators=build_generators(corpora),
        explainer=llm,
        example_writer=llm,
        ui_lang=settings.ui_lang,
        max_questions=settings.max_questions,
        explain_timeout_s=settings.llm_timeout_s,
    )

async def _remember_user(s: AsyncSession, m: Message, full_name: str) -> None:
    u = await s.get(User, m.from_user.id)
    if u is None:
        u = User(id=m.from_user.id, username=m.from_user.username, full_name=full_name)
        s.add(u)
    else:
        u.full_name = full_name
    await s.commit()

async def _send_replies(m: Message, replies: list[Reply]) -> None:
    for reply in replies:
        await m.answer(
            reply.text,
            reply_markup=kb_reply(reply.keyboard) if reply.keyboard is not None else None,
            parse_mode=ParseMode.HTML if reply.html else None,
        )

async def _show_typing(m: Message) -> None:
    # cosmetic; a failed chat action must not break the turn
    try:
        await m.bot.send_chat_action(m.chat.id, ChatAction.TYPING)
    except Exception:
        logger.debug("chat_action_failed chat_id=%s", m.chat.id, exc_info=True)

class ChatLocks:
    """One lock per chat, dropped once no turn holds or waits on it."""

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[int, asyncio.Lock] = weakref.WeakValueDictionary()

    def __call__(self, chat_id: int) -> asyncio.Lock:
        lock = self._locks.get(chat_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[chat_id] = lock
        return lock

    def __len__(self) -> int:
        return len(self._locks)

def _expects_explanation(state, ctx: QuizContext) -> bool:
    return isinstance(state, InQuiz) and state.session.current_index > 0 and ctx.explainer is not None

def register_handlers(
    dp: Dispatcher,
    *,
    settings: Settings,
    sessionmaker: async_sessionmaker[AsyncSession],
    quiz_ctx: QuizContext,
):
    chat_locks = ChatLocks()

    @dp.message(CommandStart())
    async def on_start(m: Message):
        async with chat_locks(m.chat.id):
            async with sessionmaker() as s:
                await clear_state(s, m.chat.id)
                outcome = await handle_turn(quiz_ctx, None, m.text)
                await save_state(s, m.chat.id, outcome.state)
            logger.info("dialogue_started chat_id=%s", m.chat.id)
            await _send_replies(m, outcome.replies)

    @dp.message(Command(commands=["reset", "stop"]))
    async def on_reset(m: Message):
        async with chat_locks(m.chat.id):
            async with sessionmaker() as s:
                await clear_state(s, m.chat.id)
            await m.answer(t("progress_reset", settings.ui_lang), reply_markup=kb_reply([]), parse_mode=None)

    @dp.message()
    async def on_message(m: Message):
        async with chat_locks(m.chat.id):
            async with sessionmaker() as s:
                try:
                    state = await load_state(s, m.chat.id)
                    if _expects_explanation(state, quiz_ctx):
                        await _show_typing(m)
                    outcome: TurnOutcome = await handle_turn(quiz_ctx, state, m.text)
                except (SessionStateError, ValueError, KeyError):
                    logger.exception("dialogue_turn_failed chat_id=%s", m.chat.id)
                    await clear_state(s, m.chat.id)
                    outcome = await handle_turn(quiz_ctx, None, None)
                    outcome = TurnOutcome(
                        outcome.state,
                        [Reply(t("internal_error", settings.ui_lang))] + outcome.replies,
                    )
                except Exception:
                    # stored state is left as it was, so the same message can be retried
                    logger.exception("dialogue_turn_crashed chat_id=%s", m.chat.id)
                    await s.rollback()
                    await m.answer(t("try_again", settings.ui_lang), parse_mode=None)
                    return
                await save_state(s, m.chat.id, outcome.state)
                if outcome.user_name:
                    await _remember_user(s, m, outcome.user_name)
            logger.info(
                "dialogue_turn chat_id=%s state=%s replies=%s",
                m.chat.id,
                outcome.state.kind,
                len(outcome.replies),
            )
            await _send_replies(m, outcome.replies)
