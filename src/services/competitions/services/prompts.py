"""Prompt templates for tagging, summarising and chatting.

Each builder returns the full prompt text; the structured-output
instructions are appended by ``StructuredLLM``.
"""
from typing import Iterable, List, Optional, Sequence

from src.services.competitions.schemas import ChatMessage, RawCell

CELL_SEPARATOR = "\n\n---\n"

TAGGING_PROMPT = """You are an expert data science analyst who deconstructs Kaggle notebooks.
The notebook "{title}" by {author} ({url}) is given below, cell by cell.

Analyse EACH cell on its own and assign:

1. tags: specific machine learning concepts present in the cell.
   Good tags: 'EDA', 'XGBoost', 'feature-engineering', 'data-cleaning',
   'visualization', 'model-training', 'submission'.
   Bad tags: 'code', 'important', 'cell-5'.

2. signal: how important and unique the cell is. Exactly one of
   - 'high': a critical, unique insight, a core modeling step, or a clever technique
   - 'medium': a standard but important step, like loading data or a common plot
   - 'low': a minor utility, setup, or a very simple, common operation
   - 'boilerplate': library imports, environment setup, or generic helper functions

Notebook content:
---
{context}
---

Return a JSON array with exactly {count} objects, one per cell, in the same order as the cells."""

SUMMARY_PROMPT = """Based on the content of the top public notebooks of a Kaggle competition below,
write a concise, one-paragraph summary of the competition's main goal. Focus on the
problem being solved (for example "predicting house prices" or "classifying images of dogs").

Competition context:
---
{context}
---

Return an object whose "summary" field holds the paragraph."""

MENTOR_PROMPT = """You are an expert data science mentor. A user is asking about a specific Kaggle
competition. Give a clear, helpful and insightful answer based ONLY on the context below.

Do not use outside knowledge. If the answer is not in the context, say that the information
is not available in the provided materials.

Competition context:
---
{context}
---
{history}
User's question:
"{question}"

Return an object whose "answer" field holds your reply."""

TUTOR_PROMPT = """You are "KaggleBot", an expert and friendly tutor for beginners exploring machine learning.
Your goal is to guide, teach and encourage users on their learning journey.

{interests}

- Keep an encouraging, patient and clear tone.
- Break complex topics down into simple steps.
- Where possible, explain concepts with analogies drawn from the user's interests.
- Answer directly, then suggest a logical next question or topic to explore.
- Code examples are in Python, short and simple.
- Recommend real Kaggle competitions or datasets suitable for a beginner on the topic discussed.
{history}
User's question:
"{question}"

Return an object whose "answer" field holds your reply."""


def build_cell_context(cells: Sequence[RawCell]) -> str:
    """Render cells as ``## CELL {i} (TYPE: CODE)`` blocks joined by separators."""
    return CELL_SEPARATOR.join(
        f"## CELL {index} (TYPE: {cell.type.value.upper()})\n{cell.content}"
        for index, cell in enumerate(cells)
    )


def build_tagging_prompt(cells: Sequence[RawCell], title: str, author: str, url: str) -> str:
    return TAGGING_PROMPT.format(
        title=title,
        author=author,
        url=url,
        context=build_cell_context(cells),
        count=len(cells),
    )


def build_summary_prompt(context: str) -> str:
    return SUMMARY_PROMPT.format(context=context)


def render_history(history: Optional[Iterable[ChatMessage]]) -> str:
    """Render prior turns as ``role: content`` lines, or nothing."""
    lines: List[str] = [f"{message.role.value}: {message.content}" for message in history or []]
    if not lines:
        return ""
    return "\nPrevious conversation:\n" + "\n".join(lines) + "\n"


def build_mentor_prompt(question: str, context: str, history: Optional[Iterable[ChatMessage]] = None) -> str:
    return MENTOR_PROMPT.format(context=context, question=question, history=render_history(history))


def build_tutor_prompt(
    question: str,
    interests: Optional[Sequence[str]] = None,
    history: Optional[Iterable[ChatMessage]] = None,
) -> str:
    if interests:
        interest_line = f"The user is interested in: {', '.join(interests)}."
    else:
        interest_line = "The user is interested in general machine learning."
    return TUTOR_PROMPT.format(
        interests=interest_line,
        question=question,
        history=render_history(history),
    )
