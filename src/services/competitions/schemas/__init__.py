"""Schemas for the competition mentor service.

Exports all data classes, result envelopes and request bodies.
"""

from src.services.competitions.schemas.notebook import (
    CellType,
    Signal,
    RawCell,
    TaggedCell,
    CellTagOutput,
    DeconstructedNotebook,
    NotebookSource,
    ContextFile,
)

from src.services.competitions.schemas.competition import (
    IngestionStatus,
    IngestionData,
    Competition,
    KaggleCredentials,
    UserSettings,
    DemoAnalysis,
)

from src.services.competitions.schemas.results import (
    FetchResult,
    NotebookFailure,
    BatchResult,
    IngestionReport,
)

from src.services.competitions.schemas.chat import (
    ChatRole,
    ChatMessage,
    SummaryOutput,
    AnswerOutput,
    MentorChatRequest,
    TutorChatRequest,
    ChatAnswer,
    CustomCompetitionRequest,
    CredentialsRequest,
    ProgressRequest,
    ResetStuckRequest,
    DemoAnalysisRequest,
)

__all__ = [
    # Notebook schemas
    "CellType",
    "Signal",
    "RawCell",
    "TaggedCell",
    "CellTagOutput",
    "DeconstructedNotebook",
    "NotebookSource",
    "ContextFile",
    # Competition schemas
    "IngestionStatus",
    "IngestionData",
    "Competition",
    "KaggleCredentials",
    "UserSettings",
    "DemoAnalysis",
    # Results
    "FetchResult",
    "NotebookFailure",
    "BatchResult",
    "IngestionReport",
    # Chat and requests
    "ChatRole",
    "ChatMessage",
    "SummaryOutput",
    "AnswerOutput",
    "MentorChatRequest",
    "TutorChatRequest",
    "ChatAnswer",
    "CustomCompetitionRequest",
    "CredentialsRequest",
    "ProgressRequest",
    "ResetStuckRequest",
    "DemoAnalysisRequest",
]
