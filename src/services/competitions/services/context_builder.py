"""Competition context file builder.

Concatenates the raw JSON of a competition's top notebooks into a single
text file that users can download and feed to their own tools.
"""
import asyncio
import logging
from typing import List, Optional

from src.shared.exceptions import MentorError
from src.services.competitions.exceptions import (
    ContextFileError,
    CredentialsNotFoundError,
    KaggleAuthError,
)
from src.services.competitions.interfaces import IKaggleAPI
from src.services.competitions.schemas import ContextFile, KaggleCredentials, NotebookSource
from src.services.competitions.services.pipeline import extract_competition_slug


logger = logging.getLogger(__name__)

NO_NOTEBOOKS_CONTENT = "No public notebooks were found for this competition."
SECTION_RULE = "===================="


def render_context(competition_slug: str, notebooks: List[NotebookSource]) -> str:
    parts = [f"CONTEXT FOR KAGGLE COMPETITION: {competition_slug}\n\n{SECTION_RULE}\n\n"]
    for notebook in notebooks:
        parts.append(
            f"--- NOTEBOOK: {notebook.file_name} ---\n\n"
            f"{notebook.content}\n\n"
            "--- END OF NOTEBOOK ---\n\n"
        )
    return "".join(parts)


class ContextFileBuilder:
    """Build ``{slug}-context.txt`` from a competition's top notebooks.

    Unlike ingestion, the file is all-or-nothing: one failed download fails
    the whole build.
    """

    def __init__(self, kaggle_api: IKaggleAPI):
        self.kaggle_api = kaggle_api

    async def build(
        self,
        competition_url: str,
        credentials: Optional[KaggleCredentials] = None,
    ) -> ContextFile:
        """Build the context file.

        Raises:
            InvalidCompetitionURLError: No slug in the URL
            CredentialsNotFoundError: No credentials for the downloads
            KaggleAuthError: Kaggle rejected the credentials
            ContextFileError: Any download failed
        """
        slug = extract_competition_slug(competition_url)
        file_name = f"{slug}-context.txt"

        listing = await self.kaggle_api.list_top_notebooks(slug, credentials)
        if listing.degraded:
            logger.warning(
                f"Notebook listing degraded for {slug}, writing empty context: {listing.reason}",
                extra={"competition_slug": slug},
            )
        if listing.degraded or not listing.value:
            return ContextFile(competition_slug=slug, file_name=file_name, content=NO_NOTEBOOKS_CONTENT)

        try:
            notebooks = await asyncio.gather(
                *(self.kaggle_api.fetch_notebook(ref, credentials) for ref in listing.value)
            )
        except (CredentialsNotFoundError, KaggleAuthError):
            raise
        except MentorError as e:
            raise ContextFileError(e.message, original=e) from e

        logger.info(
            f"Built context file for {slug} from {len(notebooks)} notebooks",
            extra={"competition_slug": slug, "notebooks": len(notebooks)},
        )
        return ContextFile(
            competition_slug=slug,
            file_name=file_name,
            content=render_context(slug, list(notebooks)),
        )
