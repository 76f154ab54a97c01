"""Notebook data classes for competition ingestion.

Defines the raw and tagged cell types and the deconstructed notebook that
is stored with a competition's analysis.
"""
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CellType(str, Enum):
    """Type of notebook cell."""
    CODE = "code"
    MARKDOWN = "markdown"


class Signal(str, Enum):
    """How much a cell matters for learning from the notebook.

    high: critical insight, core modeling step or clever technique
    medium: standard but important step
    low: minor utility or very simple operation
    boilerplate: imports, environment setup, generic helpers
    """
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    BOILERPLATE = "boilerplate"


class RawCell(BaseModel):
    """A notebook cell as parsed from ``.ipynb`` JSON."""

    model_config = ConfigDict(frozen=True)

    type: CellType = Field(..., description="code or markdown")
    content: str = Field(default="", description="Cell source text")


class TaggedCell(RawCell):
    """A cell annotated by the LLM."""

    tags: List[str] = Field(default_factory=list, description="Free-form topic tags")
    signal: Signal = Field(..., description="Learning value of the cell")


class CellTagOutput(BaseModel):
    """One element of the tagger's structured LLM reply."""

    tags: List[str] = Field(default_factory=list)
    signal: Signal

    @field_validator("signal", mode="before")
    @classmethod
    def normalise_signal(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v


class DeconstructedNotebook(BaseModel):
    """A public notebook broken into tagged cells.

    Attributes:
        title: Human title derived from the kernel slug
        author: Kaggle username of the author
        url: Kaggle URL of the notebook
        cells: Tagged cells in original order
    """

    model_config = ConfigDict(frozen=True)

    title: str
    author: str
    url: str
    cells: List[TaggedCell] = Field(default_factory=list)


class NotebookSource(BaseModel):
    """Raw notebook as downloaded from Kaggle.

    Attributes:
        ref: Kernel reference ``author/slug``
        file_name: ``{slug}.ipynb``
        content: Notebook JSON text
    """

    ref: str
    file_name: str
    content: str


class ContextFile(BaseModel):
    """Concatenated raw notebooks for offline use."""

    competition_slug: str
    file_name: str
    content: str


__all__ = [
    "CellType",
    "Signal",
    "RawCell",
    "TaggedCell",
    "CellTagOutput",
    "DeconstructedNotebook",
    "NotebookSource",
    "ContextFile",
]
