"""Services for the competition mentor.

Exports all service classes and the factory.
"""

from src.services.competitions.services.credentials import (
    CredentialResolver,
    SYSTEM_USER_ID,
)

from src.services.competitions.services.api_client import (
    KaggleAPIClient,
    fallback_competitions,
)

from src.services.competitions.services.parser import NotebookParser
from src.services.competitions.services.tagger import CellTagger
from src.services.competitions.services.pipeline import (
    IngestionPipeline,
    extract_competition_slug,
)
from src.services.competitions.services.context_builder import ContextFileBuilder
from src.services.competitions.services.chat import MentorChat, TutorChat
from src.services.competitions.services.analysis import AnalysisService
from src.services.competitions.services.demo import DemoService
from src.services.competitions.services.factory import (
    MentorServices,
    MentorServiceFactory,
)

__all__ = [
    # Credentials
    "CredentialResolver",
    "SYSTEM_USER_ID",
    # API Client
    "KaggleAPIClient",
    "fallback_competitions",
    # Parsing and tagging
    "NotebookParser",
    "CellTagger",
    # Pipeline
    "IngestionPipeline",
    "extract_competition_slug",
    "ContextFileBuilder",
    # Chat
    "MentorChat",
    "TutorChat",
    # Orchestration
    "AnalysisService",
    "DemoService",
    "MentorServices",
    "MentorServiceFactory",
]
