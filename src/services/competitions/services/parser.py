"""Notebook parser.

Turns ``.ipynb`` JSON text into an ordered list of code and markdown cells.
"""
import json
import logging
from typing import Any, List, Optional

from src.services.competitions.exceptions import NotebookParseError
from src.services.competitions.interfaces import INotebookParser
from src.services.competitions.schemas import CellType, RawCell


logger = logging.getLogger(__name__)


class NotebookParser(INotebookParser):
    """Parser for Kaggle notebooks.

    - ``cell_type == "code"`` gives a code cell; every other value, including
      a missing one, gives a markdown cell
    - ``source`` may be a string or a list of line fragments joined with ``""``
    - a document without ``cells`` parses to an empty list

    Example:
        cells = NotebookParser().parse(notebook_json, "username/notebook-slug")
    """

    def parse(self, raw_text: str, notebook_ref: Optional[str] = None) -> List[RawCell]:
        """Parse notebook JSON.

        Args:
            raw_text: Notebook JSON text
            notebook_ref: Kernel reference, for error context only

        Returns:
            Cells in document order

        Raises:
            NotebookParseError: If the text is not a JSON object
        """
        try:
            document = json.loads(raw_text)
        except (json.JSONDecodeError, TypeError) as e:
            raise NotebookParseError(f"invalid JSON ({e})", notebook_ref=notebook_ref, original=e) from e

        if not isinstance(document, dict):
            raise NotebookParseError(
                f"expected a JSON object, got {type(document).__name__}",
                notebook_ref=notebook_ref,
            )

        raw_cells = document.get("cells")
        if not isinstance(raw_cells, list):
            logger.debug(f"Notebook has no cells: {notebook_ref}")
            return []

        cells = []
        for index, cell in enumerate(raw_cells):
            if not isinstance(cell, dict):
                logger.warning(
                    f"Skipping malformed cell {index} in {notebook_ref}",
                    extra={"notebook_ref": notebook_ref, "cell_index": index},
                )
                continue
            cells.append(self._parse_cell(cell))

        logger.debug(f"Parsed {len(cells)} cells from {notebook_ref}")
        return cells

    @staticmethod
    def _parse_cell(cell: dict) -> RawCell:
        cell_type = CellType.CODE if cell.get("cell_type") == "code" else CellType.MARKDOWN
        return RawCell(type=cell_type, content=_join_source(cell.get("source")))


def _join_source(source: Any) -> str:
    if isinstance(source, list):
        return "".join(part if isinstance(part, str) else str(part) for part in source)
    if not source:
        return ""
    return source if isinstance(source, str) else str(source)
