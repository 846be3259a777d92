import random

import pytest

from morph_bot.dialogue import InQuiz, QuizKind, load_state
from morph_bot.flow import QuizContext
from morph_bot.models import DialogueRecord, User
from morph_bot.stress import StressQuestionGenerator, StressWord
from tests.telegram_harness.harness import BotHarness

WORDS = [StressWord.from_line("ма́ма"), StressWord.from_line("програмі́ст"), StressWord.from_line("кіт")]


class StubExplainer:
    async def explain(self, question, wrong_answer_text, correct_answer_text):
        return f"Наголос у слові {correct_answer_text} треба запам'ятати."


def _quiz_ctx(**kwargs) -> QuizContext:
    return QuizContext(
        generators={QuizKind.STRESS: StressQuestionGenerator(WORDS, random.Random(5))},
        **kwargs,
    )


async def _current_question(harness: BotHarness, chat_id: int):
    async with harness.sessionmaker() as s:
        state = await load_state(s, chat_id)
    assert isinstance(state, InQuiz)
    return state.session.questions[state.session.current_index - 1]


@pytest.mark.asyncio
async def test_telegram_like_smoke(tmp_path):
    harness = await BotHarness.create(tmp_path, quiz_ctx=_quiz_ctx())
    try:
        user_id = 111

        await harness.send_text(user_id=user_id, text="/start")
        assert "Як тебе звати?" in harness.last_bot_message(user_id).text

        await harness.send_text(user_id=user_id, text="Оксана")
        assert harness.bot_messages(user_id)[-2].text == "Приємно познайомитися, Оксана!"
        assert "Почати тест на наголос" in harness.keyboard_options(user_id)

        await harness.send_text(user_id=user_id, text="Почати тест на наголос")
        assert harness.keyboard(user_id) == [["5"], ["10"], ["15"]]

        await harness.send_text(user_id=user_id, text="2")
        assert harness.keyboard_options(user_id) == ["Вйо!"]

        await harness.send_text(user_id=user_id, text="Вйо!")
        assert harness.last_bot_message(user_id).text.startswith("Питання №1:")
        options = harness.keyboard_options(user_id)
        assert len(options) == 2
        question = await _current_question(harness, user_id)
        assert sorted(options) == sorted(question.option_texts())

        await harness.send_text(user_id=user_id, text=question.correct_answer().text)
        assert harness.bot_messages(user_id)[-2].text == "Правильно!"
        assert harness.last_bot_message(user_id).text.startswith("Питання №2:")

        question = await _current_question(harness, user_id)
        wrong = next(a.text for a in question.answers if not a.is_correct)
        await harness.send_text(user_id=user_id, text=wrong)
        feedback, summary = harness.bot_messages(user_id)[-2:]
        assert feedback.text.startswith("Неправильно!")
        assert "Будь уважнішим!" in feedback.text
        assert summary.text.startswith("Квіз закінчився! Ти відповів правильно на 1 з 2 питань")
        assert "Почати тест на наголос" in harness.keyboard_options(user_id)

        async with harness.sessionmaker() as s:
            user = await s.get(User, user_id)
            assert user.full_name == "Оксана"
            rec = await s.get(DialogueRecord, user_id)
            assert rec.kind == "awaiting_game_choice"
    finally:
        await harness.close()


@pytest.mark.asyncio
async def test_wrong_answer_is_explained(tmp_path):
    harness = await BotHarness.create(tmp_path, quiz_ctx=_quiz_ctx(explainer=StubExplainer()))
    try:
        user_id = 222
        for text in ["/start", "Тарас", "Почати тест на наголос", "1", "Вйо!"]:
            await harness.send_text(user_id=user_id, text=text)
        question = await _current_question(harness, user_id)
        wrong = next(a.text for a in question.answers if not a.is_correct)

        await harness.send_text(user_id=user_id, text=wrong)
        feedback = harness.bot_messages(user_id)[-2]
        correct = question.correct_answer().text
        assert feedback.text == f"Неправильно!\n\nНаголос у слові {correct} треба запам'ятати."
        assert any(call["method"] == "SendChatAction" for call in harness.recording.calls)
    finally:
        await harness.close()


@pytest.mark.asyncio
async def test_reset_and_corrupt_state_recovery(tmp_path):
    harness = await BotHarness.create(tmp_path, quiz_ctx=_quiz_ctx())
    try:
        user_id = 333
        await harness.send_text(user_id=user_id, text="/start")
        await harness.send_text(user_id=user_id, text="/reset")
        assert harness.last_bot_message(user_id).text.startswith("Прогрес скинуто.")
        assert harness.keyboard(user_id) == []
        async with harness.sessionmaker() as s:
            assert await s.get(DialogueRecord, user_id) is None

        async with harness.sessionmaker() as s:
            s.add(DialogueRecord(chat_id=user_id, kind="in_quiz", state_json='{"kind": "nonsense"}'))
            await s.commit()
        await harness.send_text(user_id=user_id, text="привіт")
        error, greeting = harness.bot_messages(user_id)[-2:]
        assert error.text == "Щось пішло не так. Почнімо спочатку."
        assert "Як тебе звати?" in greeting.text
        async with harness.sessionmaker() as s:
            rec = await s.get(DialogueRecord, user_id)
            assert rec.kind == "awaiting_name"
    finally:
        await harness.close()


class BrokenExplainer:
    async def explain(self, question, wrong_answer_text, correct_answer_text):
        raise RuntimeError("unexpected client bug")


class BrokenGenerator(StressQuestionGenerator):
    def next_question(self):
        raise RuntimeError("generator bug")


@pytest.mark.asyncio
async def test_broken_explainer_still_answers(tmp_path):
    harness = await BotHarness.create(tmp_path, quiz_ctx=_quiz_ctx(explainer=BrokenExplainer()))
    try:
        user_id = 444
        for text in ["/start", "Тарас", "Почати тест на наголос", "2", "Вйо!"]:
            await harness.send_text(user_id=user_id, text=text)
        question = await _current_question(harness, user_id)
        wrong = next(a.text for a in question.answers if not a.is_correct)

        await harness.send_text(user_id=user_id, text=wrong)
        feedback, next_question = harness.bot_messages(user_id)[-2:]
        assert feedback.text == f"Неправильно!\n\nПравильна відповідь -- {question.correct_answer().text} Будь уважнішим!"
        assert next_question.text.startswith("Питання №2:")
    finally:
        await harness.close()


@pytest.mark.asyncio
async def test_unexpected_error_replies_and_keeps_state(tmp_path):
    ctx = QuizContext(generators={QuizKind.STRESS: BrokenGenerator(WORDS, random.Random(1))})
    harness = await BotHarness.create(tmp_path, quiz_ctx=ctx)
    try:
        user_id = 555
        for text in ["/start", "Леся", "Почати тест на наголос", "3"]:
            await harness.send_text(user_id=user_id, text=text)
        assert harness.last_bot_message(user_id).text == "Щось пішло не так. Надішли повідомлення ще раз."
        async with harness.sessionmaker() as s:
            rec = await s.get(DialogueRecord, user_id)
            assert rec.kind == "awaiting_question_count"
    finally:
        await harness.close()
