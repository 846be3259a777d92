from __future__ import annotations

import enum
import html
import random
from dataclasses import dataclass
from typing import Sequence

from .errors import CorpusExhausted, NoTargetToken
from .questions import (
    DEFAULT_MAX_ATTEMPTS,
    Answer,
    Question,
    QuestionGenerator,
    shuffled_answers,
)


class Upos(str, enum.Enum):
    ADJ = "ADJ"
    ADP = "ADP"
    ADV = "ADV"
    AUX = "AUX"
    CCONJ = "CCONJ"
    DET = "DET"
    INTJ = "INTJ"
    NOUN = "NOUN"
    NUM = "NUM"
    PART = "PART"
    PRON = "PRON"
    PROPN = "PROPN"
    PUNCT = "PUNCT"
    SCONJ = "SCONJ"
    SYM = "SYM"
    VERB = "VERB"
    X = "X"


OTHER_LABEL = "інше"

UPOS_LABELS: dict[Upos, str] = {
    Upos.ADJ: "прикметник",
    Upos.ADV: "прислівник",
    Upos.INTJ: "вигук",
    Upos.NOUN: "іменник",
    Upos.PROPN: "власний іменник",
    Upos.VERB: "дієслово",
    Upos.PRON: "займенник",
    Upos.ADP: "прийменник",
    Upos.CCONJ: "сполучник",
    Upos.SCONJ: "підрядний сполучник",
    Upos.AUX: "допоміжне дієслово",
    Upos.DET: "детермінатив",
    Upos.NUM: "числівник",
    Upos.PART: "частка",
    Upos.X: OTHER_LABEL,
    Upos.SYM: "символ",
    Upos.PUNCT: "пунктуація",
}

# an "other"/"symbol"/"punctuation" option would give the answer away
NON_TARGET_LABELS = frozenset({OTHER_LABEL, UPOS_LABELS[Upos.SYM], UPOS_LABELS[Upos.PUNCT]})

ANSWER_LABELS: tuple[str, ...] = tuple(
    label for label in UPOS_LABELS.values() if label not in NON_TARGET_LABELS
)


def label_for(upos: Upos | None) -> str:
    if upos is None:
        return OTHER_LABEL
    return UPOS_LABELS.get(upos, OTHER_LABEL)


@dataclass(frozen=True)
class TaggedToken:
    surface_form: str
    upos: Upos | None

    @property
    def is_punct(self) -> bool:
        return self.upos is Upos.PUNCT


@dataclass(frozen=True)
class TaggedSentence:
    surface_text: str
    tokens: tuple[TaggedToken, ...]

    def target_candidates(self) -> list[TaggedToken]:
        return [t for t in self.tokens if label_for(t.upos) not in NON_TARGET_LABELS]


def _alnum_only(word: str) -> str:
    return "".join(ch for ch in word if ch.isalnum())


def highlight_sentence(surface_text: str, target_form: str) -> str:
    words = []
    for word in surface_text.split(" "):
        escaped = html.escape(word, quote=False)
        if _alnum_only(word) == target_form:
            escaped = f"<b><u>{escaped}</u></b>"
        words.append(escaped)
    return " ".join(words)


class PartOfSpeechQuestionGenerator(QuestionGenerator[TaggedSentence]):
    name = "parts"

    def __init__(
        self,
        sentences: Sequence[TaggedSentence],
        rng: random.Random | None = None,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        super().__init__(rng, max_attempts=max_attempts)
        if not sentences:
            raise CorpusExhausted("sentence corpus is empty")
        self.sentences = tuple(sentences)

    def pick(self) -> TaggedSentence:
        return self.pick_sentence()

    def pick_sentence(self) -> TaggedSentence:
        return self.rng.choice(self.sentences)

    def pick_target(self, sentence: TaggedSentence) -> TaggedToken:
        candidates = sentence.target_candidates()
        if not candidates:
            raise NoTargetToken(f"no taggable word in {sentence.surface_text!r}")
        return self.rng.choice(candidates)

    def generate_question(self, sentence: TaggedSentence) -> Question:
        target = self.pick_target(sentence)
        correct = label_for(target.upos)
        wrong = self.rng.choice([label for label in ANSWER_LABELS if label != correct])
        answers = shuffled_answers([Answer(correct, True), Answer(wrong, False)], self.rng)
        text = (
            f"У реченні:\n\"{highlight_sentence(sentence.surface_text, target.surface_form)}\"\n\n"
            f"Якою частиною мови є підкреслене слово \"{html.escape(target.surface_form, quote=False)}\"?"
        )
        return Question(text=text, answers=answers)
