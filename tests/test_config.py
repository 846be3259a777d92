import pytest

from morph_bot import config
from morph_bot.config import load_settings

ENV_KEYS = [
    "BOT_TOKEN", "ADMIN_IDS", "DATABASE_URL", "GOOGLE_API_KEY", "GEMINI_API_KEY", "LLM_MODEL",
    "LLM_TIMEOUT_S", "LLM_PERSONA", "UI_LANG", "MAX_QUESTIONS", "STRESS_PATH", "DECLENSION_PATH",
    "CONLLU_PATH",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.setattr(config, "load_dotenv", lambda *a, **k: False)
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("BOT_TOKEN", "123:abc")


def test_defaults():
    s = load_settings()
    assert s.bot_token == "123:abc"
    assert s.admin_ids == []
    assert s.gemini_api_key is None
    assert s.llm_timeout_s == 15.0
    assert s.llm_persona == "shevchenko"
    assert s.ui_lang == "uk"
    assert s.max_questions == 50
    assert s.database_url.startswith("sqlite+aiosqlite:///")


def test_overrides(monkeypatch):
    monkeypatch.setenv("ADMIN_IDS", "1, 2,,3")
    monkeypatch.setenv("GEMINI_API_KEY", "k")
    monkeypatch.setenv("LLM_TIMEOUT_S", "2.5")
    monkeypatch.setenv("LLM_PERSONA", "Franko")
    monkeypatch.setenv("MAX_QUESTIONS", "15")
    monkeypatch.setenv("STRESS_PATH", "/tmp/s.txt")
    s = load_settings()
    assert s.admin_ids == [1, 2, 3]
    assert s.gemini_api_key == "k"
    assert s.llm_timeout_s == 2.5
    assert s.llm_persona == "franko"
    assert s.max_questions == 15
    assert s.stress_path == "/tmp/s.txt"


@pytest.mark.parametrize(
    "key, value",
    [
        ("BOT_TOKEN", ""),
        ("LLM_PERSONA", "pushkin"),
        ("UI_LANG", "de"),
        ("MAX_QUESTIONS", "0"),
        ("MAX_QUESTIONS", "many"),
        ("LLM_TIMEOUT_S", "-1"),
    ],
)
def test_invalid_values(monkeypatch, key, value):
    monkeypatch.setenv(key, value)
    with pytest.raises(RuntimeError):
        load_settings()
