from __future__ import annotations

STRINGS: dict[str, dict[str, str]] = {
    "greeting": {
        "en": "Hi! I'm a morphology bot. I'll help you learn Ukrainian! Let's get acquainted. What's your name?",
        "uk": "Привіт! Я -- морфологічний бот. Я допоможу тобі вивчити українську мову! Давай познайомимося! Як тебе звати?",
    },
    "nice_to_meet": {"en": "Nice to meet you, {name}!", "uk": "Приємно познайомитися, {name}!"},
    "name_required": {"en": "Please type your name (as text)", "uk": "Будь ласка, введіть своє ім'я (текстом)"},
    "what_next": {"en": "What would you like to do?", "uk": "Що б ти хотів зробити?"},
    "what_next_after": {"en": "What would you like to do next?", "uk": "Що б ти хотів зробити далі?"},
    "game_stress": {"en": "Start the stress quiz", "uk": "Почати тест на наголос"},
    "game_parts": {"en": "Start the parts of speech quiz", "uk": "Почати тест на частини мови"},
    "game_declension": {"en": "Start the noun cases quiz", "uk": "Почати тест на відмінки"},
    "choose_option": {"en": "Please pick one of the options", "uk": "Будь ласка, виберіть один з варіантів"},
    "choose_count": {"en": "Choose the number of questions", "uk": "Обери кількість питань"},
    "enter_number": {"en": "Please enter a number", "uk": "Будь ласка, введіть число"},
    "count_zero": {"en": "The number of questions cannot be 0", "uk": "Кількість питань не може бути 0"},
    "count_too_many": {"en": "Too many questions, the maximum is {max}", "uk": "Забагато питань, максимум -- {max}"},
    "quiz_ready": {"en": "Great! Let's start!", "uk": "Чудово! Почнемо тест!"},
    "go": {"en": "Go!", "uk": "Вйо!"},
    "question_header": {"en": "Question #{n}:", "uk": "Питання №{n}:"},
    "example_header": {"en": "Example:", "uk": "Приклад:"},
    "quiz_unavailable": {
        "en": "This quiz is unavailable right now. Pick another one.",
        "uk": "Цей тест зараз недоступний. Обери інший.",
    },
    "progress_reset": {
        "en": "Progress reset. Send any message to begin again.",
        "uk": "Прогрес скинуто. Надішли будь-яке повідомлення, щоб почати знову.",
    },
    "internal_error": {
        "en": "Something went wrong. Let's start over.",
        "uk": "Щось пішло не так. Почнімо спочатку.",
    },
    "try_again": {
        "en": "Something went wrong. Please send your message again.",
        "uk": "Щось пішло не так. Надішли повідомлення ще раз.",
    },
}

def t(key: str, lang: str) -> str:
    return STRINGS.get(key, {}).get(lang, STRINGS.get(key, {}).get("en", key))
