from __future__ import annotations
from dataclasses import dataclass
import logging
import httpx
from google import genai
from google.genai import errors as genai_errors

from .errors import UpstreamError
from .questions import Question

logger = logging.getLogger(__name__)

PERSONAS = {
    "shevchenko": "Тарас Шевченко",
    "lesya": "Леся Українка",
    "franko": "Іван Франко",
}

_PREAMBLE = "Ти -- Чат-бот, який допомагає учням вивчати українську мову."

@dataclass
class LLMClient:
    api_key: str
    model: str = "gemini-3-flash-preview"
    persona: str = "shevchenko"

    def _client(self):
        return genai.Client(api_key=self.api_key)

    def _persona_name(self) -> str:
        return PERSONAS.get(self.persona, PERSONAS["shevchenko"])

    async def _generate(self, contents: str) -> str:
        client = self._client()
        try:
            resp = await client.aio.models.generate_content(model=self.model, contents=contents)
        except (genai_errors.APIError, httpx.HTTPError, OSError) as exc:
            raise UpstreamError(f"LLM request failed: {exc}") from exc
        text = (resp.text or "").strip()
        if not text:
            raise UpstreamError("LLM returned an empty response")
        return text

    async def explain(
        self,
        question: Question,
        wrong_answer_text: str,
        correct_answer_text: str,
    ) -> str:
        logger.info(
            "llm_usage: explain model=%s persona=%s question_len=%s wrong_len=%s correct_len=%s",
            self.model,
            self.persona,
            len(question.text),
            len(wrong_answer_text),
            len(correct_answer_text),
        )
        options = ", ".join(question.option_texts())
        contents = f"""{_PREAMBLE}
Учень вирішував задачу, яка звучить так:
{question.text}
Варіанти відповіді: {options}
Учень відповів {wrong_answer_text}, а правильна відповідь -- {correct_answer_text}.
Згенеруй відповідь, яка пояснює, в чому була помилка і чому правильна відповідь саме така.
Напиши це так, наче ти -- {self._persona_name()}. Ліміт -- 1-2 середніх абзаци.
Пиши звичайним текстом, без Markdown чи HTML.
"""
        return await self._generate(contents)

    async def stress_example(self, question: Question) -> str:
        logger.info(
            "llm_usage: stress_example model=%s persona=%s question_len=%s",
            self.model,
            self.persona,
            len(question.text),
        )
        options = " чи ".join(question.option_texts())
        contents = f"""{_PREAMBLE}
Учню було задано питання про наголос у слові з двома варіантами: "{options}".
Згенеруй одне речення, де використовується це слово (не вказуючи наголос).
Напиши це речення так, наче ти -- {self._persona_name()}.
"""
        return await self._generate(contents)
