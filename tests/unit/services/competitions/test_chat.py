"""Tests for the mentor and tutor chat flows."""
import pytest

from src.shared.exceptions import LLMRateLimitError
from src.shared.llm import StructuredLLM
from src.shared.testing import ScriptedLLMClient
from src.services.competitions.exceptions import ChatUnavailableError
from src.services.competitions.schemas import ChatMessage, ChatRole
from src.services.competitions.services.chat import (
    MENTOR_UNAVAILABLE,
    TUTOR_UNAVAILABLE,
    MentorChat,
    TutorChat,
)
from tests.factories import answer_reply


def llm_with(*replies):
    client = ScriptedLLMClient(list(replies))
    return StructuredLLM(client, model="mock-model"), client


@pytest.mark.asyncio
async def test_mentor_answers_from_context():
    llm, client = llm_with(answer_reply("Use the Sex and Pclass features."))

    answer = await MentorChat(llm).ask("Which features matter?", "Notebook: titanic eda\n...")

    assert answer == "Use the Sex and Pclass features."
    prompt = client.prompts[0]
    assert "Notebook: titanic eda" in prompt
    assert '"Which features matter?"' in prompt
    assert "ONLY on the context" in prompt


@pytest.mark.asyncio
async def test_mentor_renders_history():
    llm, client = llm_with(answer_reply())
    history = [
        ChatMessage(role=ChatRole.USER, content="What is the target?"),
        ChatMessage(role=ChatRole.MODEL, content="Survived."),
    ]

    await MentorChat(llm).ask("And the metric?", "context", history)

    assert "user: What is the target?\nmodel: Survived." in client.prompts[0]


@pytest.mark.asyncio
async def test_mentor_without_answer_is_unavailable():
    llm, _ = llm_with("")

    with pytest.raises(ChatUnavailableError) as exc_info:
        await MentorChat(llm).ask("Hello?", "context")

    assert exc_info.value.message == MENTOR_UNAVAILABLE
    assert exc_info.value.http_status == 503


@pytest.mark.asyncio
async def test_tutor_uses_interests():
    llm, client = llm_with(answer_reply("Think of gradient boosting like a relay team."))

    answer = await TutorChat(llm).ask("What is boosting?", ["football", "cooking"])

    assert answer.startswith("Think of gradient boosting")
    assert "The user is interested in: football, cooking." in client.prompts[0]


@pytest.mark.asyncio
async def test_tutor_without_interests_uses_general_ml():
    llm, client = llm_with(answer_reply())

    await TutorChat(llm).ask("Where do I start?")

    assert "general machine learning" in client.prompts[0]


@pytest.mark.asyncio
async def test_tutor_provider_error_is_unavailable():
    llm, _ = llm_with(LLMRateLimitError(provider="openai"))

    with pytest.raises(ChatUnavailableError) as exc_info:
        await TutorChat(llm).ask("Hi")

    assert exc_info.value.message == TUTOR_UNAVAILABLE
    assert isinstance(exc_info.value.original, LLMRateLimitError)
