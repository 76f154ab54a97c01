"""Abstract interfaces for the competition mentor service.

Defines contracts that components must honor.
Allows for different implementations (e.g., fakes for testing).
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from src.services.competitions.exceptions import CredentialsNotFoundError
from src.services.competitions.schemas import (
    Competition,
    FetchResult,
    KaggleCredentials,
    NotebookSource,
    RawCell,
    TaggedCell,
)


class ICredentialResolver(ABC):
    """Interface for finding the Kaggle credentials to use for a caller.

    What changes: where credentials come from
    What must not change: operator environment beats per-user storage
    """

    @abstractmethod
    async def resolve(self, user_id: Optional[str]) -> Optional[KaggleCredentials]:
        """Return credentials for ``user_id`` or None when none exist."""
        pass

    async def resolve_or_raise(self, user_id: Optional[str]) -> KaggleCredentials:
        """Like ``resolve`` but raise when nothing is found.

        Raises:
            CredentialsNotFoundError: If no credentials exist for the caller
        """
        creds = await self.resolve(user_id)
        if creds is None:
            raise CredentialsNotFoundError(user_id)
        return creds


class IKaggleAPI(ABC):
    """Interface for the Kaggle REST client.

    What changes: HTTP client implementation, retry policy
    What must not change: listings degrade instead of raising; downloads raise
    """

    @abstractmethod
    async def list_competitions(
        self,
        credentials: Optional[KaggleCredentials] = None,
    ) -> FetchResult[List[Competition]]:
        """List active competitions, falling back to a built-in list on failure."""
        pass

    @abstractmethod
    async def list_top_notebooks(
        self,
        competition_slug: str,
        credentials: Optional[KaggleCredentials] = None,
    ) -> FetchResult[List[str]]:
        """List the top-voted Python notebook refs of a competition (``author/slug``)."""
        pass

    @abstractmethod
    async def fetch_notebook(
        self,
        notebook_ref: str,
        credentials: Optional[KaggleCredentials] = None,
    ) -> NotebookSource:
        """Download one notebook's ``.ipynb`` text.

        Raises:
            KaggleAuthError: Credentials rejected
            NotebookDownloadError: Any other failure
        """
        pass

    async def health_check(self) -> bool:
        return True


class INotebookParser(ABC):
    """Interface for turning ``.ipynb`` text into cells."""

    @abstractmethod
    def parse(self, raw_text: str, notebook_ref: Optional[str] = None) -> List[RawCell]:
        """Parse notebook JSON into ordered cells.

        Raises:
            NotebookParseError: If the text is not a JSON object
        """
        pass


class ICellTagger(ABC):
    """Interface for annotating cells with tags and a signal."""

    @abstractmethod
    async def tag(
        self,
        cells: List[RawCell],
        title: str,
        author: str,
        url: str,
    ) -> List[TaggedCell]:
        """Return one tagged cell per input cell, in order.

        Raises:
            TaggingError: If the LLM fails or gives no output
        """
        pass


__all__ = [
    "ICredentialResolver",
    "IKaggleAPI",
    "INotebookParser",
    "ICellTagger",
]
