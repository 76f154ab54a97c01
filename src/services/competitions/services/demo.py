"""Landing-page demo analyses.

Showcase competitions are analysed once and the result is kept in its own
table, so visitors can browse a finished analysis without Kaggle
credentials and without touching any user's competition state.
"""
import logging
from typing import List

from src.shared.interfaces import IDemoAnalysisRepository
from src.services.competitions.exceptions import DemoNotFoundError
from src.services.competitions.schemas import DemoAnalysis, DeconstructedNotebook


logger = logging.getLogger(__name__)


class DemoService:
    """Read and store the demo analysis of a competition."""

    def __init__(self, demos: IDemoAnalysisRepository):
        self.demos = demos

    async def get_demo(self, competition_id: str) -> DemoAnalysis:
        """Stored demo analysis.

        Raises:
            DemoNotFoundError: Nothing has been stored for the competition
        """
        record = await self.demos.get_demo(competition_id)
        if record is None:
            raise DemoNotFoundError(competition_id)
        return DemoAnalysis.from_record(record)

    async def save_demo(
        self,
        competition_id: str,
        summary: str,
        notebooks: List[DeconstructedNotebook],
    ) -> DemoAnalysis:
        """Store an analysis as the competition's demo, replacing the previous one."""
        record = await self.demos.save_demo(
            competition_id,
            summary=summary,
            notebooks=[nb.model_dump(mode="json") for nb in notebooks],
        )
        logger.info(f"Demo analysis saved for {competition_id}", extra={"notebooks": len(notebooks)})
        return DemoAnalysis.from_record(record)
