from __future__ import annotations

import enum
import html
import logging
import random
from dataclasses import dataclass
from typing import Sequence

from .errors import CorpusExhausted, NoMatchingForm
from .questions import (
    DEFAULT_MAX_ATTEMPTS,
    Answer,
    Question,
    QuestionGenerator,
    shuffled_answers,
)

logger = logging.getLogger(__name__)


class NounCase(str, enum.Enum):
    NOMINATIVE = "nom"
    GENITIVE = "gen"
    DATIVE = "dat"
    ACCUSATIVE = "acc"
    INSTRUMENTAL = "ins"
    LOCATIVE = "loc"
    VOCATIVE = "voc"

    @property
    def label(self) -> str:
        return _CASE_LABELS[self]

    @property
    def hint(self) -> str:
        return _CASE_HINTS[self]


_CASE_LABELS = {
    NounCase.NOMINATIVE: "називний",
    NounCase.GENITIVE: "родовий",
    NounCase.DATIVE: "давальний",
    NounCase.ACCUSATIVE: "знахідний",
    NounCase.INSTRUMENTAL: "орудний",
    NounCase.LOCATIVE: "місцевий",
    NounCase.VOCATIVE: "кличний",
}

_CASE_HINTS = {
    NounCase.NOMINATIVE: "Хто? Що?",
    NounCase.GENITIVE: "Кого? Чого?",
    NounCase.DATIVE: "Кому? Чому?",
    NounCase.ACCUSATIVE: "Кого? Що?",
    NounCase.INSTRUMENTAL: "Ким? Чим?",
    NounCase.LOCATIVE: "На кому? На чому?",
    NounCase.VOCATIVE: "Звертання до когось або чогось",
}

OBLIQUE_CASES: tuple[NounCase, ...] = tuple(c for c in NounCase if c is not NounCase.NOMINATIVE)


def number_label(is_plural: bool) -> str:
    return "множини" if is_plural else "однини"


@dataclass(frozen=True)
class NounForm:
    word: str
    case: NounCase
    is_plural: bool

    def describe(self) -> str:
        plurality = "множина" if self.is_plural else "однина"
        return f"{self.word} ({self.case.label} відмінок, {plurality})"


@dataclass(frozen=True)
class InflectedNoun:
    lemma: str
    forms: tuple[NounForm, ...]

    def has_oblique_forms(self) -> bool:
        return any(f.case is not NounCase.NOMINATIVE for f in self.forms)


class DeclensionQuestionGenerator(QuestionGenerator[InflectedNoun]):
    name = "declension"

    def __init__(
        self,
        nouns: Sequence[InflectedNoun],
        rng: random.Random | None = None,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        super().__init__(rng, max_attempts=max_attempts)
        if not nouns:
            raise CorpusExhausted("declension dictionary is empty")
        self.nouns = tuple(nouns)

    def pick(self) -> InflectedNoun:
        return self.pick_noun()

    def pick_noun(self) -> InflectedNoun:
        return self.rng.choice(self.nouns)

    @staticmethod
    def find_form(noun: InflectedNoun, case: NounCase, is_plural: bool) -> NounForm:
        for form in noun.forms:
            if form.case is case and form.is_plural == is_plural:
                return form
        # number mismatch is acceptable, case mismatch is not
        for form in noun.forms:
            if form.case is case:
                return form
        raise NoMatchingForm(f"{noun.lemma!r} has no {case.value} form")

    @staticmethod
    def distractors_for(noun: InflectedNoun, form: NounForm) -> list[str]:
        seen: dict[str, None] = {}
        for f in noun.forms:
            if f.case is NounCase.NOMINATIVE or f.case is form.case:
                continue
            if f.is_plural != form.is_plural or f.word == form.word:
                continue
            seen.setdefault(f.word, None)
        return list(seen)

    def generate_question(
        self,
        noun: InflectedNoun,
        case: NounCase | None = None,
        is_plural: bool | None = None,
    ) -> Question:
        if case is None:
            case = self.rng.choice(OBLIQUE_CASES)
        if is_plural is None:
            is_plural = self.rng.random() < 0.5
        form = self.find_form(noun, case, is_plural)
        answers = [Answer(form.word, True)]
        answers.extend(Answer(word, False) for word in self.distractors_for(noun, form))
        if len(answers) == 1:
            logger.info("declension_single_option lemma=%s case=%s", noun.lemma, case.value)
        text = (
            f"Поставте іменник \"{html.escape(noun.lemma, quote=False)}\" у {form.case.label} відмінок "
            f"({form.case.hint}) {number_label(form.is_plural)}"
        )
        return Question(text=text, answers=shuffled_answers(answers, self.rng))
