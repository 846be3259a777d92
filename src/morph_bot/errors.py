from __future__ import annotations


class QuizError(Exception):
    pass


class GenerationError(QuizError):
    """A single source item cannot yield a question; pick another one."""


class NoMatchingForm(GenerationError):
    pass


class NoDistractorPosition(GenerationError):
    pass


class NoTargetToken(GenerationError):
    pass


class CorpusExhausted(QuizError):
    """No eligible source item was found within the retry cap."""


class ExplanationUnavailable(QuizError):
    pass


class ExplanationTimeout(ExplanationUnavailable):
    pass


class UpstreamError(ExplanationUnavailable):
    pass


class InvalidUserInput(QuizError):
    def __init__(self, message: str, *, reason: str = "invalid") -> None:
        super().__init__(message)
        self.reason = reason  # not_a_number | zero | too_many


class SessionStateError(QuizError):
    pass
