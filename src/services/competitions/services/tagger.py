"""LLM cell tagger.

Sends a whole notebook in one structured request and maps the reply back
onto the input cells. The model only returns tags and a signal per cell;
cell type and content always come from the input.
"""
import logging
from typing import List

from src.shared.exceptions import LLMError
from src.shared.interfaces import IStructuredLLM
from src.services.competitions.exceptions import TaggingError
from src.services.competitions.interfaces import ICellTagger
from src.services.competitions.schemas import CellTagOutput, RawCell, Signal, TaggedCell
from src.services.competitions.services.prompts import build_tagging_prompt


logger = logging.getLogger(__name__)

MISMATCH_TAGS = ["untagged", "tagging-mismatch"]


class CellTagger(ICellTagger):
    """Tag notebook cells with ML concepts and a signal.

    If the model returns a different number of entries than there are
    cells, every cell gets ``MISMATCH_TAGS`` and a ``low`` signal rather than
    risking misaligned tags.

    Example:
        tagger = CellTagger(llm=StructuredLLM(client, model="claude-sonnet-4-5"))
        tagged = await tagger.tag(cells, "Titanic EDA", "alice", url)
    """

    def __init__(self, llm: IStructuredLLM):
        self._llm = llm

    async def tag(
        self,
        cells: List[RawCell],
        title: str,
        author: str,
        url: str,
    ) -> List[TaggedCell]:
        """Tag cells in order.

        Raises:
            TaggingError: If the provider fails or returns no usable output
        """
        if not cells:
            return []

        prompt = build_tagging_prompt(cells, title=title, author=author, url=url)
        try:
            output = await self._llm.generate(prompt, List[CellTagOutput])
        except LLMError as e:
            raise TaggingError(e.message, original=e) from e

        if output is None:
            raise TaggingError("AI cell tagging returned no output.")

        if len(output) != len(cells):
            logger.warning(
                f"Cell count mismatch for {url}: input={len(cells)} output={len(output)}",
                extra={"notebook_url": url, "input_cells": len(cells), "output_cells": len(output)},
            )
            return [
                TaggedCell(type=cell.type, content=cell.content, tags=list(MISMATCH_TAGS), signal=Signal.LOW)
                for cell in cells
            ]

        return [
            TaggedCell(type=cell.type, content=cell.content, tags=tag.tags, signal=tag.signal)
            for cell, tag in zip(cells, output)
        ]
