"""Kaggle REST API client with dependency injection.

Talks to ``/competitions/list``, ``/kernels/list`` and ``/kernels/get`` with
HTTP Basic auth. Listings never raise: they return a ``FetchResult`` that is
flagged as degraded when Kaggle could not be used. Downloads raise typed
errors so the pipeline can drop one notebook and keep the rest.
"""
import json
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from src.shared.exceptions import (
    APIClientError,
    APIConnectionError,
    APIInvalidResponseError,
    APINotFoundError,
    APIRateLimitError,
    APIServerError,
    APITimeoutError,
    ExternalAPIError,
    MentorError,
)
from src.shared.utils.retry import retry
from src.services.competitions.config import CompetitionServiceConfig
from src.services.competitions.exceptions import (
    CredentialsNotFoundError,
    KaggleAuthError,
    NotebookDownloadError,
    NotebookSourceMissingError,
    is_auth_failure,
)
from src.services.competitions.interfaces import ICredentialResolver, IKaggleAPI
from src.services.competitions.schemas import (
    Competition,
    FetchResult,
    KaggleCredentials,
    NotebookSource,
)
from src.services.competitions.services.credentials import SYSTEM_USER_ID


logger = logging.getLogger(__name__)

KAGGLE_WEB_BASE = "https://www.kaggle.com"

FALLBACK_COMPETITIONS = [
    ("titanic", "Titanic: Machine Learning from Disaster", "Knowledge"),
    ("house-prices-advanced-regression-techniques", "House Prices: Advanced Regression Techniques", "$25,000"),
    ("spaceship-titanic", "Spaceship Titanic", "Knowledge"),
    ("digit-recognizer", "Digit Recognizer", "Knowledge"),
    ("store-sales-time-series-forecasting", "Store Sales - Time Series Forecasting", "$10,000"),
]


def fallback_competitions() -> List[Competition]:
    """The fixed listing shown when Kaggle cannot be reached."""
    return [
        Competition(
            id=slug,
            title=title,
            url=f"{KAGGLE_WEB_BASE}/c/{slug}",
            prize=prize,
            status="active",
        )
        for slug, title, prize in FALLBACK_COMPETITIONS
    ]


def title_from_slug(slug: str) -> str:
    """``house-prices`` -> ``House Prices``."""
    return " ".join(word[:1].upper() + word[1:] for word in slug.replace("-", " ").split(" "))


def _is_transient(error: Exception) -> bool:
    return isinstance(error, ExternalAPIError) and error.is_transient


class KaggleAPIClient(IKaggleAPI):
    """Client for the Kaggle REST API with injectable dependencies.

    Features:
    - HTTP Basic auth from explicit or resolved ("system") credentials
    - Retries with exponential backoff on timeouts, connection errors, 429 and 5xx
    - Degraded (fallback) results for listings instead of exceptions

    Example:
        # Production use
        client = KaggleAPIClient(credential_resolver=resolver, config=config)
        await client.initialize()

        # Testing use with a mock transport
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client = KaggleAPIClient(credential_resolver=resolver, http_client=http)

        result = await client.list_top_notebooks("titanic")

    Attributes:
        config: Service configuration
    """

    def __init__(
        self,
        credential_resolver: Optional[ICredentialResolver] = None,
        config: Optional[CompetitionServiceConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize Kaggle API client.

        Args:
            credential_resolver: Used when a call gets no explicit credentials
            config: Service configuration
            http_client: Pre-built HTTP client (tests inject a MockTransport)
        """
        self.config = config or CompetitionServiceConfig()
        self._resolver = credential_resolver
        self._http_client = http_client
        self._owns_http_client = False
        self._base_url = self.config.kaggle_api_base.rstrip("/")

        # Statistics
        self._request_count = 0
        self._error_count = 0
        self._fallback_count = 0
        self._download_count = 0

    async def initialize(self) -> None:
        """Create the HTTP client if none was injected."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(
                    self.config.request_timeout_seconds,
                    connect=self.config.connect_timeout_seconds,
                ),
                follow_redirects=True,
            )
            self._owns_http_client = True
        logger.info("KaggleAPIClient initialized", extra={"base_url": self._base_url})

    async def close(self) -> None:
        """Close the HTTP client if we created it."""
        if self._owns_http_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
            self._owns_http_client = False
        logger.info("KaggleAPIClient closed")

    async def __aenter__(self) -> "KaggleAPIClient":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # ==================== Public API ====================

    async def list_competitions(
        self,
        credentials: Optional[KaggleCredentials] = None,
    ) -> FetchResult[List[Competition]]:
        """List competitions sorted by latest deadline, capped at the configured limit.

        Any failure (missing or rejected credentials, network, bad payload)
        yields the built-in fallback listing flagged as degraded.
        """
        try:
            creds = await self._resolve_credentials(credentials)
            data = await self._get_json(
                "/competitions/list",
                params={"sortBy": "latestDeadline"},
                credentials=creds,
            )
            if not isinstance(data, list):
                raise APIInvalidResponseError(
                    message="Competition listing is not a list",
                    provider="kaggle",
                    response_snippet=str(data),
                )
            competitions = [
                self._to_competition(item)
                for item in data[: self.config.competition_list_limit]
                if isinstance(item, dict) and item.get("id") is not None
            ]
        except MentorError as e:
            self._fallback_count += 1
            reason = KaggleAuthError().message if is_auth_failure(e) else e.message
            logger.warning(
                f"Falling back to built-in competitions: {reason}",
                extra={"error_type": type(e).__name__},
            )
            return FetchResult.fallback(fallback_competitions(), reason=reason)

        logger.info(f"Fetched {len(competitions)} competitions from Kaggle")
        return FetchResult.ok(competitions)

    async def list_top_notebooks(
        self,
        competition_slug: str,
        credentials: Optional[KaggleCredentials] = None,
    ) -> FetchResult[List[str]]:
        """List the most-voted Python notebooks of a competition.

        A 404 means the competition has no public notebooks and is not
        treated as degraded. Every other failure yields an empty degraded result.
        """
        try:
            creds = await self._resolve_credentials(credentials)
            data = await self._get_json(
                "/kernels/list",
                params={
                    "competition": competition_slug,
                    "language": self.config.notebook_language,
                    "sort_by": self.config.notebook_sort_by,
                    "page_size": self.config.max_notebooks_per_competition,
                },
                credentials=creds,
            )
        except APINotFoundError:
            logger.info(f"No notebooks found for competition: {competition_slug}")
            return FetchResult.ok([])
        except MentorError as e:
            reason = KaggleAuthError().message if is_auth_failure(e) else e.message
            logger.warning(
                f"Failed to list notebooks for {competition_slug}: {reason}",
                extra={"competition_slug": competition_slug, "error_type": type(e).__name__},
            )
            return FetchResult.fallback([], reason=reason)

        if not isinstance(data, list):
            return FetchResult.fallback([], reason="Notebook listing is not a list")

        refs = [
            item["ref"] for item in data
            if isinstance(item, dict) and isinstance(item.get("ref"), str) and item["ref"]
        ]
        refs = refs[: self.config.max_notebooks_per_competition]
        logger.info(
            f"Found {len(refs)} notebooks for competition: {competition_slug}",
            extra={"competition_slug": competition_slug},
        )
        return FetchResult.ok(refs)

    async def fetch_notebook(
        self,
        notebook_ref: str,
        credentials: Optional[KaggleCredentials] = None,
    ) -> NotebookSource:
        """Download one notebook's source.

        Raises:
            CredentialsNotFoundError: No credentials could be resolved
            KaggleAuthError: Kaggle rejected the credentials
            NotebookSourceMissingError: The kernel has no source
            NotebookDownloadError: Any other failure
        """
        creds = await self._resolve_credentials(credentials)
        try:
            data = await self._get_json(
                "/kernels/get",
                params={"kernel": notebook_ref},
                credentials=creds,
            )
        except KaggleAuthError:
            raise
        except ExternalAPIError as e:
            if is_auth_failure(e):
                raise KaggleAuthError(original=e) from e
            raise NotebookDownloadError(
                e.message,
                notebook_ref=notebook_ref,
                status_code=e.status_code,
                original=e,
            ) from e

        source = self._extract_source(data)
        if not source:
            raise NotebookSourceMissingError(notebook_ref)

        self._download_count += 1
        return NotebookSource(
            ref=notebook_ref,
            file_name=f"{notebook_file_stem(notebook_ref)}.ipynb",
            content=source,
        )

    async def health_check(self) -> bool:
        """Kaggle is healthy when a real (non-fallback) listing comes back."""
        result = await self.list_competitions()
        return not result.degraded

    def get_stats(self) -> Dict[str, int]:
        return {
            "requests": self._request_count,
            "errors": self._error_count,
            "fallbacks": self._fallback_count,
            "downloads": self._download_count,
        }

    # ==================== Internals ====================

    async def _resolve_credentials(
        self,
        credentials: Optional[KaggleCredentials],
    ) -> KaggleCredentials:
        if credentials is not None:
            return credentials
        if self._resolver is not None:
            resolved = await self._resolver.resolve(SYSTEM_USER_ID)
            if resolved is not None:
                return resolved
        raise CredentialsNotFoundError()

    @retry(
        max_attempts=lambda self: self.config.max_retries,
        backoff_base=lambda self: self.config.base_delay_seconds,
        retry_if=_is_transient,
    )
    async def _get_json(
        self,
        path: str,
        params: Dict[str, Any],
        credentials: KaggleCredentials,
    ) -> Any:
        """GET ``path`` and decode JSON, mapping failures to shared API errors."""
        if self._http_client is None:
            await self.initialize()

        url = f"{self._base_url}{path}"
        self._request_count += 1
        try:
            response = await self._http_client.get(
                url,
                params=params,
                auth=httpx.BasicAuth(credentials.username, credentials.key),
            )
        except httpx.TimeoutException as e:
            self._error_count += 1
            raise APITimeoutError(
                message=f"Kaggle API request timed out: {path}",
                provider="kaggle",
                timeout_seconds=self.config.request_timeout_seconds,
                original=e,
            ) from e
        except httpx.RequestError as e:
            self._error_count += 1
            raise APIConnectionError(
                message=f"Failed to connect to Kaggle API: {e}",
                provider="kaggle",
                endpoint=path,
                original=e,
            ) from e

        if response.status_code >= 400:
            self._error_count += 1
            raise self._status_error(response, path)

        try:
            return response.json()
        except json.JSONDecodeError as e:
            raise APIInvalidResponseError(
                message=f"Kaggle returned invalid JSON for {path}",
                provider="kaggle",
                status_code=response.status_code,
                response_snippet=response.text,
                original=e,
            ) from e

    @staticmethod
    def _status_error(response: httpx.Response, path: str) -> ExternalAPIError:
        status = response.status_code
        if status == 401:
            return KaggleAuthError()
        if status == 404:
            return APINotFoundError(
                message=f"Kaggle resource not found: {path}",
                provider="kaggle",
                resource=path,
            )
        if status == 429:
            retry_after = response.headers.get("Retry-After")
            return APIRateLimitError(
                message="Kaggle rate limit exceeded",
                provider="kaggle",
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
            )
        if status >= 500:
            return APIServerError(
                message=f"Kaggle API error: {status} {response.reason_phrase}",
                provider="kaggle",
                status_code=status,
            )
        return APIClientError(
            message=f"Kaggle API error: {status} {response.reason_phrase} - {response.text[:200]}",
            provider="kaggle",
            status_code=status,
        )

    @staticmethod
    def _to_competition(item: Dict[str, Any]) -> Competition:
        """Build a Competition from one listing entry; scalars are coerced to text.

        Raises:
            APIInvalidResponseError: If the entry still does not validate
        """
        slug = str(item["id"])
        try:
            return Competition(
                id=slug,
                title=str(item.get("title") or title_from_slug(slug)),
                url=str(item.get("url") or f"{KAGGLE_WEB_BASE}/c/{slug}"),
                prize=str(item.get("reward") or "Knowledge"),
                status="active",
            )
        except ValidationError as e:
            raise APIInvalidResponseError(
                message=f"Invalid competition entry {slug}",
                provider="kaggle",
                response_snippet=str(item),
                original=e,
            ) from e

    @staticmethod
    def _extract_source(data: Any) -> Optional[str]:
        """Kernel source lives at ``source`` or, in newer payloads, ``blob.source``."""
        if not isinstance(data, dict):
            return None
        source = data.get("source")
        if source is None and isinstance(data.get("blob"), dict):
            source = data["blob"].get("source")
        if source is None or isinstance(source, str):
            return source
        return json.dumps(source)

    def __repr__(self) -> str:
        return f"KaggleAPIClient(base_url={self._base_url}, requests={self._request_count})"


def notebook_file_stem(notebook_ref: str) -> str:
    """``author/slug`` -> ``slug`` (the whole ref when it has no slash)."""
    parts = notebook_ref.split("/")
    return parts[1] if len(parts) > 1 and parts[1] else notebook_ref
