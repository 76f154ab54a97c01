"""Mentor and tutor chat flows.

Both are a single structured LLM call returning ``{"answer": ...}``.
The mentor is grounded in a competition's context; the tutor is a
general beginner guide personalised by the user's interests.
"""
import logging
from typing import Iterable, Optional, Sequence

from src.shared.exceptions import LLMError
from src.shared.interfaces import IStructuredLLM
from src.services.competitions.exceptions import ChatUnavailableError
from src.services.competitions.schemas import AnswerOutput, ChatMessage
from src.services.competitions.services.prompts import build_mentor_prompt, build_tutor_prompt


logger = logging.getLogger(__name__)

MENTOR_UNAVAILABLE = "The AI failed to generate an answer."
TUTOR_UNAVAILABLE = "The AI tutor failed to generate an answer."


async def _answer(llm: IStructuredLLM, prompt: str, unavailable_message: str) -> str:
    try:
        output = await llm.generate(prompt, AnswerOutput)
    except LLMError as e:
        logger.warning(f"Chat generation failed: {e}", extra={"provider": e.provider})
        raise ChatUnavailableError(unavailable_message, original=e) from e

    if output is None or not output.answer.strip():
        raise ChatUnavailableError(unavailable_message)
    return output.answer


class MentorChat:
    """Answer questions about one competition using only its context."""

    def __init__(self, llm: IStructuredLLM):
        self._llm = llm

    async def ask(
        self,
        question: str,
        competition_context: str,
        history: Optional[Iterable[ChatMessage]] = None,
    ) -> str:
        """Raises ChatUnavailableError when the model gives no answer."""
        prompt = build_mentor_prompt(question, competition_context, history)
        return await _answer(self._llm, prompt, MENTOR_UNAVAILABLE)


class TutorChat:
    """Beginner-friendly ML tutor."""

    def __init__(self, llm: IStructuredLLM):
        self._llm = llm

    async def ask(
        self,
        question: str,
        interests: Optional[Sequence[str]] = None,
        history: Optional[Iterable[ChatMessage]] = None,
    ) -> str:
        prompt = build_tutor_prompt(question, interests, history)
        return await _answer(self._llm, prompt, TUTOR_UNAVAILABLE)
