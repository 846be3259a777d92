from __future__ import annotations

import asyncio
import html
import logging
import random
from dataclasses import dataclass, field
from typing import Protocol

from .corpus import Corpora
from .declension import DeclensionQuestionGenerator
from .dialogue import (
    AwaitingGameChoice,
    AwaitingName,
    AwaitingQuestionCount,
    DialogueState,
    InQuiz,
    QuizKind,
)
from .errors import CorpusExhausted, ExplanationUnavailable, InvalidUserInput, SessionStateError
from .i18n import t
from .keyboards import Rows, answer_rows, game_choice_rows, go_rows, question_count_rows
from .parts import PartOfSpeechQuestionGenerator
from .questions import Question, QuestionGenerator
from .session import (
    DEFAULT_EXPLAIN_TIMEOUT_S,
    DEFAULT_MAX_QUESTIONS,
    ExplanationPort,
    advance,
    parse_question_count,
    start_quiz,
)
from .stress import StressQuestionGenerator

logger = logging.getLogger(__name__)


class ExampleWriter(Protocol):
    async def stress_example(self, question: Question) -> str:
        ...


@dataclass(frozen=True)
class Reply:
    text: str
    keyboard: Rows | None = None  # None keeps the current keyboard, [] removes it
    html: bool = False


@dataclass(frozen=True)
class TurnOutcome:
    state: DialogueState
    replies: list[Reply] = field(default_factory=list)
    user_name: str | None = None


@dataclass
class QuizContext:
    generators: dict[QuizKind, QuestionGenerator]
    explainer: ExplanationPort | None = None
    example_writer: ExampleWriter | None = None
    ui_lang: str = "uk"
    max_questions: int = DEFAULT_MAX_QUESTIONS
    explain_timeout_s: float = DEFAULT_EXPLAIN_TIMEOUT_S


def build_generators(corpora: Corpora, rng: random.Random | None = None) -> dict[QuizKind, QuestionGenerator]:
    rng = rng or random.Random()
    factories = {
        QuizKind.STRESS: lambda: StressQuestionGenerator(corpora.stress_words, rng),
        QuizKind.DECLENSION: lambda: DeclensionQuestionGenerator(corpora.nouns, rng),
        QuizKind.PARTS: lambda: PartOfSpeechQuestionGenerator(corpora.sentences, rng),
    }
    generators: dict[QuizKind, QuestionGenerator] = {}
    for kind, factory in factories.items():
        try:
            generators[kind] = factory()
        except CorpusExhausted as exc:
            logger.warning("quiz_disabled kind=%s err=%s", kind.value, exc)
    return generators


def _game_from_text(text: str, ui_lang: str) -> QuizKind | None:
    labels = {
        t("game_stress", ui_lang): QuizKind.STRESS,
        t("game_parts", ui_lang): QuizKind.PARTS,
        t("game_declension", ui_lang): QuizKind.DECLENSION,
    }
    return labels.get(text.strip())


def _game_menu(ctx: QuizContext, key: str = "what_next") -> Reply:
    return Reply(t(key, ctx.ui_lang), keyboard=game_choice_rows(ctx.ui_lang))


async def _stress_example(ctx: QuizContext, question: Question) -> str | None:
    if ctx.example_writer is None:
        return None
    try:
        example = await asyncio.wait_for(
            ctx.example_writer.stress_example(question),
            timeout=ctx.explain_timeout_s,
        )
    except (asyncio.TimeoutError, ExplanationUnavailable) as exc:
        logger.warning("stress_example_unavailable err=%r", exc)
        return None
    except Exception:
        logger.exception("stress_example_failed")
        return None
    return (example or "").strip() or None


async def render_question(
    ctx: QuizContext,
    kind: QuizKind,
    question: Question,
    number: int,
) -> Reply:
    text = f"{t('question_header', ctx.ui_lang).format(n=number)}\n{question.text}"
    if kind is QuizKind.STRESS:
        example = await _stress_example(ctx, question)
        if example:
            text += f"\n\n{t('example_header', ctx.ui_lang)}\n{html.escape(example, quote=False)}"
    return Reply(
        text,
        keyboard=answer_rows(question.option_texts(), stacked=kind is not QuizKind.STRESS),
        html=True,
    )


async def _on_start(ctx: QuizContext) -> TurnOutcome:
    return TurnOutcome(AwaitingName(), [Reply(t("greeting", ctx.ui_lang), keyboard=[])])


async def _on_name(ctx: QuizContext, state: AwaitingName, text: str | None) -> TurnOutcome:
    name = (text or "").strip()
    if not name:
        return TurnOutcome(state, [Reply(t("name_required", ctx.ui_lang))])
    return TurnOutcome(
        AwaitingGameChoice(),
        [Reply(t("nice_to_meet", ctx.ui_lang).format(name=name)), _game_menu(ctx)],
        user_name=name,
    )


async def _on_game_choice(ctx: QuizContext, state: AwaitingGameChoice, text: str | None) -> TurnOutcome:
    kind = _game_from_text(text or "", ctx.ui_lang)
    if kind is None:
        return TurnOutcome(state, [Reply(t("choose_option", ctx.ui_lang))])
    if kind not in ctx.generators:
        return TurnOutcome(state, [_game_menu(ctx, "quiz_unavailable")])
    return TurnOutcome(
        AwaitingQuestionCount(kind),
        [Reply(t("choose_count", ctx.ui_lang), keyboard=question_count_rows())],
    )


async def _on_question_count(
    ctx: QuizContext,
    state: AwaitingQuestionCount,
    text: str | None,
) -> TurnOutcome:
    try:
        count = parse_question_count(text, max_questions=ctx.max_questions)
    except InvalidUserInput as exc:
        if exc.reason == "zero":
            msg = t("count_zero", ctx.ui_lang)
        elif exc.reason == "too_many":
            msg = t("count_too_many", ctx.ui_lang).format(max=ctx.max_questions)
        else:
            msg = t("enter_number", ctx.ui_lang)
        return TurnOutcome(state, [Reply(msg)])

    generator = ctx.generators.get(state.quiz_kind)
    if generator is None:
        return TurnOutcome(AwaitingGameChoice(), [_game_menu(ctx, "quiz_unavailable")])
    try:
        session = start_quiz(count, generator, max_questions=ctx.max_questions)
    except CorpusExhausted:
        logger.exception("quiz_generation_failed kind=%s count=%s", state.quiz_kind.value, count)
        return TurnOutcome(AwaitingGameChoice(), [_game_menu(ctx, "quiz_unavailable")])
    return TurnOutcome(
        InQuiz(state.quiz_kind, session),
        [Reply(t("quiz_ready", ctx.ui_lang), keyboard=go_rows(ctx.ui_lang))],
    )


async def _on_quiz_turn(ctx: QuizContext, state: InQuiz, text: str | None) -> TurnOutcome:
    result = await advance(
        state.session,
        text or "",
        ctx.explainer,
        timeout=ctx.explain_timeout_s,
    )
    replies: list[Reply] = []
    if result.feedback is not None:
        replies.append(Reply(result.feedback.text))
    if result.summary is not None:
        summary = f"{result.summary.text()}\n{t('what_next_after', ctx.ui_lang)}"
        replies.append(Reply(summary, keyboard=game_choice_rows(ctx.ui_lang)))
        return TurnOutcome(AwaitingGameChoice(), replies)
    replies.append(await render_question(ctx, state.quiz_kind, result.prompt, result.question_number))
    return TurnOutcome(InQuiz(state.quiz_kind, result.session), replies)


async def handle_turn(ctx: QuizContext, state: DialogueState | None, text: str | None) -> TurnOutcome:
    """Run one inbound message through the dialogue and return the next state."""
    if state is None:
        return await _on_start(ctx)
    if isinstance(state, AwaitingName):
        return await _on_name(ctx, state, text)
    if isinstance(state, AwaitingGameChoice):
        return await _on_game_choice(ctx, state, text)
    if isinstance(state, AwaitingQuestionCount):
        return await _on_question_count(ctx, state, text)
    if isinstance(state, InQuiz):
        return await _on_quiz_turn(ctx, state, text)
    raise SessionStateError(f"unknown dialogue state: {state!r}")
