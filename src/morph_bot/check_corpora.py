import argparse
import random
import sys

from .corpus import load_nouns, load_sentences, load_stress_words
from .declension import DeclensionQuestionGenerator
from .errors import QuizError
from .parts import PartOfSpeechQuestionGenerator
from .stress import StressQuestionGenerator

def validate(stress_path: str, declension_path: str, conllu_path: str, *, samples: int = 20) -> int:
    errors: list[str] = []
    warnings: list[str] = []
    rng = random.Random(0)

    words = load_stress_words(stress_path)
    ineligible = [w for w in words if not w.is_eligible()]
    if ineligible:
        warnings.append(f"stress: {len(ineligible)} of {len(words)} entries can't be asked about")
    try:
        gen = StressQuestionGenerator(words, rng)
        for _ in range(samples):
            gen.next_question()
    except QuizError as exc:
        errors.append(f"stress: {exc}")

    nouns = load_nouns(declension_path)
    try:
        gen = DeclensionQuestionGenerator(nouns, rng)
        single = 0
        for _ in range(samples):
            if len(gen.next_question().answers) < 2:
                single += 1
        if single:
            warnings.append(f"declension: {single} of {samples} sampled questions have one option")
    except QuizError as exc:
        errors.append(f"declension: {exc}")

    sentences = load_sentences(conllu_path)
    try:
        gen = PartOfSpeechQuestionGenerator(sentences, rng)
        for _ in range(samples):
            gen.next_question()
    except QuizError as exc:
        errors.append(f"conllu: {exc}")

    for warn in warnings:
        print(f"WARNING: {warn}")
    if errors:
        for err in errors:
            print(f"ERROR: {err}")
        return 1
    print(f"OK stress={len(words)} nouns={len(nouns)} sentences={len(sentences)}")
    return 0

def main(argv: list[str]) -> int:
    parser = argparse.ArgumentParser(description="Check that every corpus can produce quiz questions.")
    parser.add_argument("--stress", default="data/stress.txt")
    parser.add_argument("--declension", default="data/declension.json")
    parser.add_argument("--conllu", default="data/uk_iu-ud-dev.conllu")
    parser.add_argument("--samples", type=int, default=20)
    args = parser.parse_args(argv)
    return validate(args.stress, args.declension, args.conllu, samples=args.samples)

if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
