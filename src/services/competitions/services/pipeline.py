"""Competition ingestion pipeline.

Lists a competition's top notebooks, downloads, parses and tags them
concurrently, and asks the LLM for a one-paragraph summary of the
competition. Individual notebooks may fail without failing the run.
"""
import asyncio
import logging
from typing import List, Optional, Tuple
from urllib.parse import urlparse

from src.shared.exceptions import LLMError, MentorError
from src.shared.interfaces import IStructuredLLM
from src.shared.utils.logging import log_context
from src.services.competitions.config import CompetitionServiceConfig
from src.services.competitions.exceptions import (
    InvalidCompetitionURLError,
    KaggleAuthError,
    is_auth_failure,
)
from src.services.competitions.interfaces import ICellTagger, IKaggleAPI, INotebookParser
from src.services.competitions.schemas import (
    BatchResult,
    DeconstructedNotebook,
    IngestionReport,
    KaggleCredentials,
    NotebookFailure,
    SummaryOutput,
)
from src.services.competitions.services.prompts import build_summary_prompt


logger = logging.getLogger(__name__)

KAGGLE_CODE_BASE = "https://www.kaggle.com/code"

NO_NOTEBOOKS_SUMMARY = (
    "No public notebooks were found for this competition, so a summary could not be generated."
)
NO_PROCESSED_SUMMARY = "No notebooks could be successfully processed for this competition."
SUMMARY_FALLBACK = "Could not generate a summary for this competition."


def extract_competition_slug(competition_url: str) -> str:
    """Return the last non-empty path segment of a competition URL.

    Query strings and fragments are ignored, so
    ``https://www.kaggle.com/competitions/titanic/?tab=data`` gives ``titanic``.

    Raises:
        InvalidCompetitionURLError: If the URL has no path segment
    """
    path = urlparse(competition_url.strip()).path
    segments = [segment for segment in path.split("/") if segment]
    if not segments:
        raise InvalidCompetitionURLError(competition_url)
    return segments[-1]


def describe_notebook(notebook_ref: str) -> Tuple[str, str, str]:
    """Derive ``(title, author, url)`` from an ``author/slug`` reference."""
    author, _, slug = notebook_ref.partition("/")
    title = slug.replace("-", " ") if slug else ""
    return (
        title or "Untitled Notebook",
        author or "Unknown Author",
        f"{KAGGLE_CODE_BASE}/{notebook_ref}",
    )


def build_summary_context(notebooks: List[DeconstructedNotebook]) -> str:
    """``Notebook: {title}`` followed by its cell contents, notebooks separated by a blank line."""
    return "\n\n".join(
        f"Notebook: {notebook.title}\n" + "\n".join(cell.content for cell in notebook.cells)
        for notebook in notebooks
    )


class IngestionPipeline:
    """Orchestrates one competition ingestion run.

    All dependencies are injected through the constructor.

    Example:
        pipeline = IngestionPipeline(
            kaggle_api=KaggleAPIClient(credential_resolver=resolver),
            parser=NotebookParser(),
            tagger=CellTagger(llm),
            llm=llm,
        )
        report = await pipeline.run("https://www.kaggle.com/c/titanic", credentials)
    """

    def __init__(
        self,
        kaggle_api: IKaggleAPI,
        parser: INotebookParser,
        tagger: ICellTagger,
        llm: IStructuredLLM,
        config: Optional[CompetitionServiceConfig] = None,
    ):
        self.kaggle_api = kaggle_api
        self.parser = parser
        self.tagger = tagger
        self.llm = llm
        self.config = config or CompetitionServiceConfig()

    async def run(
        self,
        competition_url: str,
        credentials: Optional[KaggleCredentials] = None,
    ) -> IngestionReport:
        """Ingest a competition.

        Returns:
            Summary plus processed notebooks. "Nothing found" and "nothing
            processed" are normal outcomes carried in the summary text, even
            when Kaggle rejected every request.

        Raises:
            InvalidCompetitionURLError: No slug in the URL
            KaggleAuthError: An error escaping the run reads as a Kaggle 401
        """
        slug = extract_competition_slug(competition_url)

        async with log_context(operation_name="ingest_competition", competition_slug=slug):
            try:
                return await self._run(slug, credentials)
            except KaggleAuthError:
                raise
            except MentorError as e:
                if is_auth_failure(e):
                    raise KaggleAuthError(original=e) from e
                raise

    async def _run(self, slug: str, credentials: Optional[KaggleCredentials]) -> IngestionReport:
        logger.info(f"Starting ingestion for {slug}")

        listing = await self.kaggle_api.list_top_notebooks(slug, credentials)
        refs = listing.value[: self.config.max_notebooks_per_competition]
        if listing.degraded:
            # Any listing failure, credentials included, reads as no notebooks
            logger.warning(f"Notebook listing degraded for {slug}: {listing.reason}")
            refs = []
        if not refs:
            return IngestionReport(competition_slug=slug, summary=NO_NOTEBOOKS_SUMMARY)

        batch = await self._process_all(refs, credentials)
        for failure in batch.failed:
            logger.warning(
                f"Failed to process notebook {failure.ref}: {failure.message}",
                extra={"notebook_ref": failure.ref, "error_type": failure.error_type},
            )

        if len(batch.succeeded) < self.config.min_successful_notebooks:
            return IngestionReport(
                competition_slug=slug,
                summary=NO_PROCESSED_SUMMARY,
                failures=batch.failed,
            )

        summary = await self._summarise(batch.succeeded)
        logger.info(
            f"Processed {len(batch.succeeded)}/{len(refs)} notebooks for {slug}",
            extra={"succeeded": len(batch.succeeded), "failed": len(batch.failed)},
        )
        return IngestionReport(
            competition_slug=slug,
            summary=summary,
            deconstructed_notebooks=batch.succeeded,
            failures=batch.failed,
        )

    async def _process_all(
        self,
        refs: List[str],
        credentials: Optional[KaggleCredentials],
    ) -> BatchResult[DeconstructedNotebook]:
        """Process notebooks concurrently; results keep listing order."""
        results = await asyncio.gather(
            *(self._process_notebook(ref, credentials) for ref in refs),
            return_exceptions=True,
        )

        batch: BatchResult[DeconstructedNotebook] = BatchResult()
        for ref, result in zip(refs, results):
            if isinstance(result, DeconstructedNotebook):
                batch.succeeded.append(result)
            elif isinstance(result, Exception):
                batch.failed.append(
                    NotebookFailure(
                        ref=ref,
                        error_type=KaggleAuthError.__name__ if is_auth_failure(result) else type(result).__name__,
                        message=getattr(result, "message", str(result)),
                    )
                )
            else:
                # CancelledError and other BaseExceptions are not per-notebook failures
                raise result
        return batch

    async def _process_notebook(
        self,
        notebook_ref: str,
        credentials: Optional[KaggleCredentials],
    ) -> DeconstructedNotebook:
        source = await self.kaggle_api.fetch_notebook(notebook_ref, credentials)
        cells = self.parser.parse(source.content, notebook_ref)
        title, author, url = describe_notebook(notebook_ref)
        tagged = await self.tagger.tag(cells, title=title, author=author, url=url)
        return DeconstructedNotebook(title=title, author=author, url=url, cells=tagged)

    async def _summarise(self, notebooks: List[DeconstructedNotebook]) -> str:
        prompt = build_summary_prompt(build_summary_context(notebooks))
        try:
            output = await self.llm.generate(prompt, SummaryOutput)
        except LLMError as e:
            logger.warning(f"Summary generation failed: {e}")
            return SUMMARY_FALLBACK

        if output is None or not output.summary.strip():
            return SUMMARY_FALLBACK
        return output.summary.strip()
