from __future__ import annotations

import html
import logging
import random
from dataclasses import dataclass
from typing import Sequence

from .errors import CorpusExhausted, NoDistractorPosition
from .questions import (
    DEFAULT_MAX_ATTEMPTS,
    Answer,
    Question,
    QuestionGenerator,
    shuffled_answers,
)

logger = logging.getLogger(__name__)

STRESS_MARK = "\u0301"
UKRAINIAN_VOWELS = frozenset("АЕЄИІЇОУЮЯ")
DEFAULT_PICK_RETRIES = 1000


def is_vowel(ch: str) -> bool:
    return ch.upper() in UKRAINIAN_VOWELS


def strip_stress(word: str) -> str:
    return word.replace(STRESS_MARK, "")


@dataclass(frozen=True)
class StressWord:
    marked_form: str
    bare_form: str

    @classmethod
    def from_line(cls, line: str) -> "StressWord":
        marked = line.strip()
        return cls(marked_form=marked, bare_form=strip_stress(marked))

    @property
    def vowel_count(self) -> int:
        return sum(1 for ch in self.bare_form if is_vowel(ch))

    @property
    def mark_count(self) -> int:
        return self.marked_form.count(STRESS_MARK)

    def stressed_positions(self) -> list[int]:
        # positions in bare_form coordinates; each mark follows its vowel
        out: list[int] = []
        seen_marks = 0
        for i, ch in enumerate(self.marked_form):
            if ch == STRESS_MARK:
                out.append(i - 1 - seen_marks)
                seen_marks += 1
        return out

    def is_eligible(self) -> bool:
        return self.vowel_count >= 2 and " " not in self.bare_form and self.mark_count == 1


def place_stress(bare_form: str, position: int) -> str:
    return bare_form[: position + 1] + STRESS_MARK + bare_form[position + 1 :]


class StressQuestionGenerator(QuestionGenerator[StressWord]):
    name = "stress"

    def __init__(
        self,
        words: Sequence[StressWord],
        rng: random.Random | None = None,
        *,
        max_retries: int = DEFAULT_PICK_RETRIES,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        super().__init__(rng, max_attempts=max_attempts)
        if not words:
            raise CorpusExhausted("stress dictionary is empty")
        self.words = tuple(words)
        self.max_retries = max_retries
        eligible = sum(1 for w in self.words if w.is_eligible())
        if eligible == 0:
            raise CorpusExhausted("stress dictionary has no eligible words")
        skipped = len(self.words) - eligible
        if skipped:
            logger.warning(
                "stress_corpus_ineligible count=%s total=%s", skipped, len(self.words)
            )

    def pick(self) -> StressWord:
        return self.pick_word()

    def pick_word(self) -> StressWord:
        for _ in range(self.max_retries):
            word = self.rng.choice(self.words)
            if word.is_eligible():
                return word
        raise CorpusExhausted(f"no eligible stress word after {self.max_retries} draws")

    def distractor_positions(self, word: StressWord) -> list[int]:
        stressed = set(word.stressed_positions())
        return [
            i for i, ch in enumerate(word.bare_form)
            if is_vowel(ch) and i not in stressed
        ]

    def generate_question(self, word: StressWord) -> Question:
        positions = self.distractor_positions(word)
        if not positions:
            raise NoDistractorPosition(f"no unstressed vowel in {word.bare_form!r}")
        wrong_form = place_stress(word.bare_form, self.rng.choice(positions))
        answers = shuffled_answers(
            [Answer(word.marked_form, True), Answer(wrong_form, False)],
            self.rng,
        )
        first, second = (html.escape(a.text, quote=False) for a in answers)
        text = f"<b><i>{first}</i></b> чи <b><i>{second}</i></b>?"
        return Question(text=text, answers=answers)
