"""Kaggle competition mentor.

Lists Kaggle competitions, deconstructs their top public notebooks into
LLM-tagged cells, summarises each competition and answers questions
about it through a mentor and a beginner tutor chat.

Example:
    # Production use
    from src.services.competitions import MentorServiceFactory

    services = MentorServiceFactory.create_full()
    competition = await services.analysis.submit_custom_competition(
        user_id, "https://www.kaggle.com/competitions/titanic"
    )

    # Testing use
    services = MentorServiceFactory.create_for_testing(
        llm_replies=['{"answer": "Start with the EDA notebook."}'],
        kaggle_api=fake_kaggle,
    )
    answer = await services.mentor.ask("Where do I start?", context)
"""

# Version
__version__ = "1.0.0"

# Schema exports
from src.services.competitions.schemas import (
    CellType,
    Signal,
    RawCell,
    TaggedCell,
    DeconstructedNotebook,
    NotebookSource,
    ContextFile,
    IngestionStatus,
    IngestionData,
    Competition,
    KaggleCredentials,
    UserSettings,
    DemoAnalysis,
    FetchResult,
    BatchResult,
    IngestionReport,
)

# Interface exports
from src.services.competitions.interfaces import (
    ICredentialResolver,
    IKaggleAPI,
    INotebookParser,
    ICellTagger,
)

# Config exports
from src.services.competitions.config import (
    CompetitionServiceConfig,
    get_config,
    set_config,
    load_config_from_dict,
    load_config_from_file,
)

# Exception exports
from src.services.competitions.exceptions import (
    CredentialsNotFoundError,
    KaggleAuthError,
    KaggleAPIError,
    NotebookDownloadError,
    NotebookSourceMissingError,
    NotebookParseError,
    InvalidCompetitionURLError,
    TaggingError,
    ChatUnavailableError,
    ContextFileError,
    CompetitionNotFoundError,
    DemoNotFoundError,
    AnalysisInProgressError,
    AnalysisTimeoutError,
)

# Service exports
from src.services.competitions.services import (
    CredentialResolver,
    KaggleAPIClient,
    NotebookParser,
    CellTagger,
    IngestionPipeline,
    extract_competition_slug,
    ContextFileBuilder,
    MentorChat,
    TutorChat,
    AnalysisService,
    DemoService,
    MentorServices,
    MentorServiceFactory,
)

__all__ = [
    # Version
    "__version__",
    # Schemas
    "CellType",
    "Signal",
    "RawCell",
    "TaggedCell",
    "DeconstructedNotebook",
    "NotebookSource",
    "ContextFile",
    "IngestionStatus",
    "IngestionData",
    "Competition",
    "KaggleCredentials",
    "UserSettings",
    "DemoAnalysis",
    "FetchResult",
    "BatchResult",
    "IngestionReport",
    # Interfaces
    "ICredentialResolver",
    "IKaggleAPI",
    "INotebookParser",
    "ICellTagger",
    # Config
    "CompetitionServiceConfig",
    "get_config",
    "set_config",
    "load_config_from_dict",
    "load_config_from_file",
    # Exceptions
    "CredentialsNotFoundError",
    "KaggleAuthError",
    "KaggleAPIError",
    "NotebookDownloadError",
    "NotebookSourceMissingError",
    "NotebookParseError",
    "InvalidCompetitionURLError",
    "TaggingError",
    "ChatUnavailableError",
    "ContextFileError",
    "CompetitionNotFoundError",
    "DemoNotFoundError",
    "AnalysisInProgressError",
    "AnalysisTimeoutError",
    # Services
    "CredentialResolver",
    "KaggleAPIClient",
    "NotebookParser",
    "CellTagger",
    "IngestionPipeline",
    "extract_competition_slug",
    "ContextFileBuilder",
    "MentorChat",
    "TutorChat",
    "AnalysisService",
    "DemoService",
    "MentorServices",
    "MentorServiceFactory",
]
