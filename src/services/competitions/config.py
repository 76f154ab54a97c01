"""Configuration for the competition mentor service.

Every setting has a working default and can be overridden through
``MENTOR_*`` environment variables, a ``.env`` file or a YAML file.
"""
from typing import Literal, Optional

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.shared.utils.config import YAMLLoader


class CompetitionServiceConfig(BaseSettings):
    """Configuration for competition ingestion, analysis and chat.

    Attributes:
        # Kaggle
        kaggle_api_base: Base URL of the Kaggle REST API
        competition_list_limit: Competitions kept from one listing call
        max_notebooks_per_competition: Notebooks analysed per competition
        notebook_language: Kernel language filter
        notebook_sort_by: Kernel sort order

        # HTTP
        request_timeout_seconds: Per-request timeout for Kaggle calls
        connect_timeout_seconds: Connect timeout for Kaggle calls
        max_retries: Attempts for transient Kaggle failures (including the first)
        base_delay_seconds: Base delay for exponential backoff

        # Analysis
        analysis_timeout_seconds: Hard limit on one analysis run
        stuck_threshold_seconds: Age after which pending/processing is stale when listing
        manual_reset_threshold_seconds: Age used by the explicit reset action
        min_successful_notebooks: Survivors required before summarising
        cache_ttl_days: Age after which the competition listing cache is ignored

        # LLM
        llm_provider: anthropic or openai
        llm_model: Model identifier
        llm_temperature: Sampling temperature
        llm_max_tokens: Completion budget per request
        llm_api_key: Provider API key
        llm_timeout_seconds: Per-request timeout for the LLM provider

        # API
        api_host: Interface the HTTP server binds to
        api_port: Port the HTTP server listens on

        # Observability
        service_name: Name stamped on every log line
        log_level: Logging level
        log_file: Optional rotating log file
    """

    model_config = SettingsConfigDict(
        env_prefix="MENTOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # ==================== Kaggle ====================
    kaggle_api_base: str = Field(
        default="https://www.kaggle.com/api/v1",
        description="Base URL of the Kaggle REST API"
    )
    competition_list_limit: int = Field(
        default=50,
        ge=1,
        description="Competitions kept from one listing call"
    )
    max_notebooks_per_competition: int = Field(
        default=10,
        ge=1,
        le=10,
        description="Notebooks analysed per competition"
    )
    notebook_language: str = Field(
        default="python",
        description="Kernel language filter"
    )
    notebook_sort_by: str = Field(
        default="vote_count",
        description="Kernel sort order"
    )

    # ==================== HTTP ====================
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Per-request timeout for Kaggle calls"
    )
    connect_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Connect timeout for Kaggle calls"
    )
    max_retries: int = Field(
        default=3,
        ge=1,
        description="Attempts for transient Kaggle failures"
    )
    base_delay_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Base delay for exponential backoff"
    )

    # ==================== Analysis ====================
    analysis_timeout_seconds: float = Field(
        default=600.0,
        gt=0,
        description="Hard limit on one analysis run (10 minutes)"
    )
    stuck_threshold_seconds: float = Field(
        default=900.0,
        gt=0,
        description="Pending/processing older than this is reset when listing (15 minutes)"
    )
    manual_reset_threshold_seconds: float = Field(
        default=600.0,
        gt=0,
        description="Threshold for the explicit reset action (10 minutes)"
    )
    min_successful_notebooks: int = Field(
        default=1,
        ge=1,
        description="Processed notebooks required before summarising"
    )
    cache_ttl_days: int = Field(
        default=7,
        ge=1,
        description="Age after which the competition listing cache is ignored"
    )

    # ==================== LLM ====================
    llm_provider: Literal["anthropic", "openai"] = Field(
        default="anthropic",
        description="LLM provider"
    )
    llm_model: str = Field(
        default="claude-sonnet-4-5",
        description="Model identifier"
    )
    llm_temperature: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="Sampling temperature"
    )
    llm_max_tokens: int = Field(
        default=8192,
        ge=256,
        description="Completion budget per request"
    )
    llm_api_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("MENTOR_LLM_API_KEY", "ANTHROPIC_API_KEY", "OPENAI_API_KEY"),
        description="Provider API key"
    )
    llm_timeout_seconds: float = Field(
        default=120.0,
        gt=0,
        description="Per-request timeout for the LLM provider"
    )

    # ==================== API ====================
    api_host: str = Field(
        default="127.0.0.1",
        description="Interface the HTTP server binds to"
    )
    api_port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port the HTTP server listens on"
    )

    # ==================== Observability ====================
    service_name: str = Field(
        default="kaggle-mentor",
        description="Name stamped on every log line"
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional rotating log file"
    )


_config: Optional[CompetitionServiceConfig] = None


def get_config() -> CompetitionServiceConfig:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = CompetitionServiceConfig()
    return _config


def set_config(config: CompetitionServiceConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def load_config_from_dict(config_dict: dict) -> CompetitionServiceConfig:
    """Load configuration from dictionary.

    Values given here win over environment variables.
    """
    return CompetitionServiceConfig(**config_dict)


def load_config_from_file(config_path: str) -> CompetitionServiceConfig:
    """Load configuration from YAML file.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigParseError: If the file is not a YAML mapping
    """
    return load_config_from_dict(YAMLLoader().load(config_path))


__all__ = [
    "CompetitionServiceConfig",
    "get_config",
    "set_config",
    "load_config_from_dict",
    "load_config_from_file",
]
