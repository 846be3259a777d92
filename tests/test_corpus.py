import json

import pytest

from morph_bot.corpus import (
    load_nouns,
    load_sentences,
    load_stress_words,
    parse_conllu,
    parse_nouns,
    parse_stress_lines,
)
from morph_bot.declension import NounCase, NounForm
from morph_bot.parts import Upos

CONLLU = """\
# sent_id = 1
# text = Мама читає книжку.
1\tМама\tмама\tNOUN\t_\t_\t2\tnsubj\t_\t_
2\tчитає\tчитати\tVERB\t_\t_\t0\troot\t_\t_
3\tкнижку\tкнижка\tNOUN\t_\t_\t2\tobj\t_\tSpaceAfter=No
4\t.\t.\tPUNCT\t_\t_\t2\tpunct\t_\t_

# sent_id = 2
1\tБез\tбез\tADP\t_\t_\t0\troot\t_\t_

# sent_id = 3
# text = Де ж він?
1-2\tДеж\t_\t_\t_\t_\t_\t_\t_\t_
1\tДе\tде\tADV\t_\t_\t3\tadvmod\t_\t_
2\tж\tж\tPART\t_\t_\t1\tdiscourse\t_\t_
2.1\tє\tбути\tVERB\t_\t_\t_\t_\t_\t_
3\tвін\tвін\t_\t_\t_\t0\troot\t_\tSpaceAfter=No
4\t?\t?\tPUNCT\t_\t_\t3\tpunct\t_\t_

# text = …
1\t…\t…\tPUNCT\t_\t_\t0\troot\t_\t_
"""


def test_parse_stress_lines_skips_blank_lines():
    words = parse_stress_lines(["ма́ма\n", "\n", "  кни́га  \n"])
    assert [w.bare_form for w in words] == ["мама", "книга"]


def test_parse_conllu():
    sentences = parse_conllu(CONLLU.splitlines(keepends=True))
    assert [s.surface_text for s in sentences] == ["Мама читає книжку.", "Де ж він?"]
    first, second = sentences
    assert [t.upos for t in first.tokens] == [Upos.NOUN, Upos.VERB, Upos.NOUN, Upos.PUNCT]
    # the multiword range and the empty node are dropped, "_" becomes untagged
    assert [t.surface_form for t in second.tokens] == ["Де", "ж", "він", "?"]
    assert second.tokens[2].upos is None


def test_parse_nouns():
    data = [
        {"word": "книга", "pos": "noun", "forms": {
            "nom ns": ["книга"], "gen ns": ["книги", "книжки"], "v_zna ns": ["x"], "gen np": [],
        }},
        {"word": "читати", "pos": "verb", "forms": {"inf": ["читати"]}},
        {"word": "хто", "pos": "noun", "forms": {"nom ns": ["хто"]}},
        "garbage",
    ]
    nouns = parse_nouns(data)
    assert len(nouns) == 1
    assert nouns[0].lemma == "книга"
    assert nouns[0].forms == (
        NounForm("книга", NounCase.NOMINATIVE, False),
        NounForm("книги", NounCase.GENITIVE, False),
    )


def test_parse_nouns_requires_list():
    with pytest.raises(ValueError):
        parse_nouns({"word": "книга"})


def test_loaders_read_files(tmp_path):
    stress = tmp_path / "stress.txt"
    stress.write_text("ма́ма\nкни́га\n", encoding="utf-8")
    nouns = tmp_path / "declension.json"
    nouns.write_text(
        json.dumps([{"word": "книга", "pos": "noun", "forms": {"gen ns": ["книги"]}}], ensure_ascii=False),
        encoding="utf-8",
    )
    conllu = tmp_path / "uk.conllu"
    conllu.write_text(CONLLU, encoding="utf-8")

    assert len(load_stress_words(stress)) == 2
    assert load_nouns(nouns)[0].forms == (NounForm("книги", NounCase.GENITIVE, False),)
    assert len(load_sentences(conllu)) == 2
