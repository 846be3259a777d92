from __future__ import annotations
import os
from dataclasses import dataclass
from typing import List
from dotenv import load_dotenv

load_dotenv()

def _split_csv_ints(s: str) -> List[int]:
    out = []
    for part in (s or "").split(","):
        part = part.strip()
        if part:
            out.append(int(part))
    return out

def _positive_number(name: str, raw: str, cast):
    try:
        value = cast(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be a number") from None
    if value <= 0:
        raise RuntimeError(f"{name} must be positive")
    return value

@dataclass(frozen=True)
class Settings:
    bot_token: str
    admin_ids: List[int]
    database_url: str
    gemini_api_key: str | None
    llm_model: str
    llm_timeout_s: float = 15.0
    llm_persona: str = "shevchenko"  # shevchenko|lesya|franko
    ui_lang: str = "uk"  # uk/en
    max_questions: int = 50
    stress_path: str = "./data/stress.txt"
    declension_path: str = "./data/declension.json"
    conllu_path: str = "./data/uk_iu-ud-dev.conllu"

def load_settings() -> Settings:
    load_dotenv()
    bot_token = os.getenv("BOT_TOKEN")
    if not bot_token:
        raise RuntimeError("BOT_TOKEN is required")

    admin_ids = _split_csv_ints(os.getenv("ADMIN_IDS", ""))
    database_url = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./data/app.db")
    gemini_api_key = os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY") or None
    llm_model = os.getenv("LLM_MODEL", "gemini-3-flash-preview").strip()
    llm_timeout_s = _positive_number("LLM_TIMEOUT_S", os.getenv("LLM_TIMEOUT_S", "15"), float)
    llm_persona = os.getenv("LLM_PERSONA", "shevchenko").strip().lower()
    if llm_persona not in {"shevchenko", "lesya", "franko"}:
        raise RuntimeError("LLM_PERSONA must be shevchenko, lesya, or franko")
    ui_lang = os.getenv("UI_LANG", "uk").strip().lower()
    if ui_lang not in {"uk", "en"}:
        raise RuntimeError("UI_LANG must be uk or en")
    max_questions = _positive_number("MAX_QUESTIONS", os.getenv("MAX_QUESTIONS", "50"), int)

    return Settings(
        bot_token=bot_token,
        admin_ids=admin_ids,
        database_url=database_url,
        gemini_api_key=gemini_api_key,
        llm_model=llm_model,
        llm_timeout_s=llm_timeout_s,
        llm_persona=llm_persona,
        ui_lang=ui_lang,
        max_questions=max_questions,
        stress_path=os.getenv("STRESS_PATH", "./data/stress.txt"),
        declension_path=os.getenv("DECLENSION_PATH", "./data/declension.json"),
        conllu_path=os.getenv("CONLLU_PATH", "./data/uk_iu-ud-dev.conllu"),
    )
