from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator

from .config import Settings
from .declension import InflectedNoun, NounCase, NounForm
from .parts import TaggedSentence, TaggedToken, Upos
from .stress import StressWord

logger = logging.getLogger(__name__)

_CASE_KEYS = {c.value: c for c in NounCase}
_NUMBER_KEYS = {"ns": False, "np": True}
_UPOS_KEYS = {u.value: u for u in Upos}


@dataclass(frozen=True)
class Corpora:
    stress_words: tuple[StressWord, ...]
    nouns: tuple[InflectedNoun, ...]
    sentences: tuple[TaggedSentence, ...]


# ---------------- stress dictionary ----------------
def parse_stress_lines(lines: Iterable[str]) -> list[StressWord]:
    return [StressWord.from_line(line) for line in lines if line.strip()]


def load_stress_words(path: str | Path) -> list[StressWord]:
    with Path(path).open("r", encoding="utf-8") as handle:
        words = parse_stress_lines(handle)
    logger.info("corpus_loaded kind=stress path=%s words=%s", path, len(words))
    return words


# ---------------- noun declension dictionary ----------------
def noun_from_entry(entry: dict) -> InflectedNoun | None:
    """Build a noun from one word-form document entry.

    ``forms`` maps keys like ``"gen ns"`` (case, noun singular/plural) to a
    list of surface forms; only the first form of each key is used.
    """
    if entry.get("pos") != "noun":
        return None
    raw_forms = entry.get("forms")
    if not isinstance(raw_forms, dict):
        return None
    forms: list[NounForm] = []
    for key, values in raw_forms.items():
        case_key, _, number_key = str(key).partition(" ")
        case = _CASE_KEYS.get(case_key)
        is_plural = _NUMBER_KEYS.get(number_key)
        if case is None or is_plural is None:
            continue
        if not isinstance(values, list) or not values or not values[0]:
            continue
        forms.append(NounForm(word=str(values[0]), case=case, is_plural=is_plural))
    return InflectedNoun(lemma=str(entry.get("word") or ""), forms=tuple(forms))


def parse_nouns(data) -> list[InflectedNoun]:
    if not isinstance(data, list):
        raise ValueError("declension dictionary must be a JSON list")
    nouns: list[InflectedNoun] = []
    skipped = 0
    for entry in data:
        if not isinstance(entry, dict):
            continue
        noun = noun_from_entry(entry)
        if noun is None:
            continue
        if not noun.lemma or not noun.has_oblique_forms():
            skipped += 1
            continue
        nouns.append(noun)
    if skipped:
        logger.warning("declension_corpus_ineligible count=%s", skipped)
    return nouns


def load_nouns(path: str | Path) -> list[InflectedNoun]:
    with Path(path).open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    nouns = parse_nouns(data)
    logger.info("corpus_loaded kind=declension path=%s nouns=%s", path, len(nouns))
    return nouns


# ---------------- CoNLL-U treebank ----------------
def _token_from_line(line: str) -> TaggedToken | None:
    cols = line.split("\t")
    if len(cols) < 4:
        return None
    token_id = cols[0]
    # multiword ranges (1-2) and empty nodes (1.1) carry no own tag
    if "-" in token_id or "." in token_id:
        return None
    upos = _UPOS_KEYS.get(cols[3])
    return TaggedToken(surface_form=cols[1], upos=upos)


def _sentence_blocks(lines: Iterable[str]) -> Iterator[list[str]]:
    block: list[str] = []
    for raw in lines:
        line = raw.rstrip("\n")
        if not line.strip():
            if block:
                yield block
                block = []
            continue
        block.append(line)
    if block:
        yield block


def parse_conllu(lines: Iterable[str]) -> list[TaggedSentence]:
    sentences: list[TaggedSentence] = []
    missing_text = 0
    for block in _sentence_blocks(lines):
        text: str | None = None
        tokens: list[TaggedToken] = []
        for line in block:
            if line.startswith("#"):
                meta = line[1:].strip()
                if meta.startswith("text = "):
                    text = meta[len("text = "):]
                continue
            token = _token_from_line(line)
            if token is not None:
                tokens.append(token)
        if text is None:
            missing_text += 1
            continue
        if not any(not t.is_punct for t in tokens):
            continue
        sentences.append(TaggedSentence(surface_text=text, tokens=tuple(tokens)))
    if missing_text:
        logger.warning("conllu_sentences_without_text count=%s", missing_text)
    return sentences


def load_sentences(path: str | Path) -> list[TaggedSentence]:
    with Path(path).open("r", encoding="utf-8") as handle:
        sentences = parse_conllu(handle)
    logger.info("corpus_loaded kind=conllu path=%s sentences=%s", path, len(sentences))
    return sentences


def load_corpora(settings: Settings) -> Corpora:
    return Corpora(
        stress_words=tuple(load_stress_words(settings.stress_path)),
        nouns=tuple(load_nouns(settings.declension_path)),
        sentences=tuple(load_sentences(settings.conllu_path)),
    )
