"""Wiring for the competition mentor service."""
import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.shared.db import DatabaseConfig, get_session_factory
from src.shared.exceptions import ConfigValidationError
from src.shared.interfaces import IStructuredLLM
from src.shared.llm import StructuredLLM, create_llm_client
from src.shared.repositories import (
    CompetitionListCacheRepository,
    CompetitionRepository,
    DemoAnalysisRepository,
    UserRepository,
)
from src.services.competitions.config import CompetitionServiceConfig
from src.services.competitions.interfaces import IKaggleAPI
from src.services.competitions.services.analysis import AnalysisService
from src.services.competitions.services.api_client import KaggleAPIClient
from src.services.competitions.services.chat import MentorChat, TutorChat
from src.services.competitions.services.context_builder import ContextFileBuilder
from src.services.competitions.services.demo import DemoService
from src.services.competitions.services.credentials import CredentialResolver
from src.services.competitions.services.parser import NotebookParser
from src.services.competitions.services.pipeline import IngestionPipeline
from src.services.competitions.services.tagger import CellTagger


logger = logging.getLogger(__name__)


@dataclass
class MentorServices:
    """Everything the HTTP layer needs, built once per process."""

    config: CompetitionServiceConfig
    credential_resolver: CredentialResolver
    kaggle_api: IKaggleAPI
    analysis: AnalysisService
    demos: DemoService
    context_builder: ContextFileBuilder
    mentor: MentorChat
    tutor: TutorChat
    llm: Optional[IStructuredLLM] = None
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    async def close(self) -> None:
        await self.analysis.close()
        close = getattr(self.kaggle_api, "close", None)
        if close is not None:
            await close()
        close = getattr(self.llm, "close", None)
        if close is not None:
            await close()


class MentorServiceFactory:
    """Factory for creating the mentor service graph."""

    @staticmethod
    def create_llm(config: CompetitionServiceConfig) -> StructuredLLM:
        """Build the structured LLM from configuration.

        Raises:
            ConfigValidationError: If no API key is configured
        """
        if config.llm_api_key is None:
            raise ConfigValidationError(
                "LLM API key is not configured",
                field_errors={"llm_api_key": "set MENTOR_LLM_API_KEY or the provider key variable"},
            )
        client = create_llm_client(
            config.llm_provider,
            api_key=config.llm_api_key.get_secret_value(),
            timeout=config.llm_timeout_seconds,
        )
        return StructuredLLM(
            client,
            model=config.llm_model,
            temperature=config.llm_temperature,
            max_tokens=config.llm_max_tokens,
        )

    @staticmethod
    def create_full(
        config: Optional[CompetitionServiceConfig] = None,
        db_config: Optional[DatabaseConfig] = None,
        llm: Optional[IStructuredLLM] = None,
        kaggle_api: Optional[IKaggleAPI] = None,
    ) -> MentorServices:
        """Create the service graph backed by the database.

        Args:
            config: Service configuration (defaults to environment)
            db_config: Database configuration (defaults to environment)
            llm: Structured LLM (built from ``config`` when omitted)
            kaggle_api: Kaggle client (built from ``config`` when omitted)

        Returns:
            Configured MentorServices
        """
        config = config or CompetitionServiceConfig()
        session_factory = get_session_factory(db_config)

        users = UserRepository(session_factory)
        services = MentorServiceFactory._assemble(
            config=config,
            competitions=CompetitionRepository(session_factory),
            list_cache=CompetitionListCacheRepository(session_factory),
            users=users,
            demos=DemoAnalysisRepository(session_factory),
            llm=llm or MentorServiceFactory.create_llm(config),
            kaggle_api=kaggle_api,
        )
        services.session_factory = session_factory
        logger.info(
            f"Mentor services created (llm={config.llm_provider}/{config.llm_model})",
            extra={"llm_provider": config.llm_provider},
        )
        return services

    @staticmethod
    def create_for_testing(
        llm_replies: Optional[List] = None,
        kaggle_api: Optional[IKaggleAPI] = None,
        config: Optional[CompetitionServiceConfig] = None,
        environ: Optional[dict] = None,
    ) -> MentorServices:
        """Create the service graph with in-memory stores and a scripted LLM.

        Returns:
            MentorServices with mock dependencies
        """
        from src.shared.testing.mocks import (
            InMemoryCompetitionListCacheRepository,
            InMemoryCompetitionRepository,
            InMemoryDemoAnalysisRepository,
            InMemoryUserRepository,
            ScriptedLLMClient,
        )

        return MentorServiceFactory._assemble(
            config=config or CompetitionServiceConfig(max_retries=1, base_delay_seconds=0),
            competitions=InMemoryCompetitionRepository(),
            list_cache=InMemoryCompetitionListCacheRepository(),
            users=InMemoryUserRepository(),
            demos=InMemoryDemoAnalysisRepository(),
            llm=StructuredLLM(ScriptedLLMClient(llm_replies), model="mock-model"),
            kaggle_api=kaggle_api,
            environ=environ if environ is not None else {},
        )

    @staticmethod
    def _assemble(
        config: CompetitionServiceConfig,
        competitions,
        list_cache,
        users,
        demos,
        llm: IStructuredLLM,
        kaggle_api: Optional[IKaggleAPI] = None,
        environ: Optional[dict] = None,
    ) -> MentorServices:
        resolver = CredentialResolver(user_repository=users, environ=environ)
        kaggle_api = kaggle_api or KaggleAPIClient(credential_resolver=resolver, config=config)

        pipeline = IngestionPipeline(
            kaggle_api=kaggle_api,
            parser=NotebookParser(),
            tagger=CellTagger(llm),
            llm=llm,
            config=config,
        )
        analysis = AnalysisService(
            competitions=competitions,
            list_cache=list_cache,
            users=users,
            credential_resolver=resolver,
            kaggle_api=kaggle_api,
            pipeline=pipeline,
            config=config,
            llm=llm,
        )
        return MentorServices(
            config=config,
            credential_resolver=resolver,
            kaggle_api=kaggle_api,
            analysis=analysis,
            demos=DemoService(demos),
            context_builder=ContextFileBuilder(kaggle_api),
            mentor=MentorChat(llm),
            tutor=TutorChat(llm),
            llm=llm,
        )


__all__ = [
    "MentorServices",
    "MentorServiceFactory",
]
