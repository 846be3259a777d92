from __future__ import annotations
from aiogram.types import ReplyKeyboardMarkup, ReplyKeyboardRemove
from aiogram.utils.keyboard import ReplyKeyboardBuilder
from .i18n import t

QUESTION_COUNT_CHOICES = ("5", "10", "15")

Rows = list[list[str]]

def game_choice_rows(ui_lang: str) -> Rows:
    return [
        [t("game_stress", ui_lang), t("game_parts", ui_lang)],
        [t("game_declension", ui_lang)],
    ]

def question_count_rows() -> Rows:
    return [[n] for n in QUESTION_COUNT_CHOICES]

def go_rows(ui_lang: str) -> Rows:
    return [[t("go", ui_lang)]]

def answer_rows(options: list[str], *, stacked: bool) -> Rows:
    # short stress variants fit on one row; longer labels go one per row
    if stacked:
        return [[opt] for opt in options]
    return [list(options)]

def kb_reply(rows: Rows) -> ReplyKeyboardMarkup | ReplyKeyboardRemove:
    if not rows:
        return ReplyKeyboardRemove()
    b = ReplyKeyboardBuilder()
    for row in rows:
        for text in row:
            b.button(text=text)
    b.adjust(*(len(row) for row in rows))
    return b.as_markup(resize_keyboard=True)
