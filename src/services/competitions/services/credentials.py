"""Kaggle credential resolution.

Credentials are looked up in a fixed order: the process environment
(``KAGGLE_USERNAME`` and ``KAGGLE_KEY``, both required), then the user's
stored settings. The environment is an operator override and always wins.
"""
import logging
import os
from typing import Mapping, Optional

from src.shared.interfaces import IUserRepository
from src.services.competitions.interfaces import ICredentialResolver
from src.services.competitions.schemas import KaggleCredentials

logger = logging.getLogger(__name__)

SYSTEM_USER_ID = "system"


class CredentialResolver(ICredentialResolver):
    """Resolve credentials from the environment, then the user store.

    The ``"system"`` user (background jobs) and an empty user id never
    consult the store.

    Example:
        resolver = CredentialResolver(user_repository=UserRepository(factory))
        creds = await resolver.resolve("uid-123")

        # Tests inject the environment
        resolver = CredentialResolver(environ={"KAGGLE_USERNAME": "u", "KAGGLE_KEY": "k"})
    """

    def __init__(
        self,
        user_repository: Optional[IUserRepository] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self._users = user_repository
        self._environ = environ if environ is not None else os.environ

    def from_environment(self) -> Optional[KaggleCredentials]:
        username = self._environ.get("KAGGLE_USERNAME")
        key = self._environ.get("KAGGLE_KEY")
        if username and key:
            return KaggleCredentials(username=username, key=key)
        return None

    async def resolve(self, user_id: Optional[str]) -> Optional[KaggleCredentials]:
        """Return credentials for ``user_id`` or None.

        Raises:
            DatabaseError: If the user store fails
        """
        creds = self.from_environment()
        if creds is not None:
            logger.debug("Using Kaggle credentials from environment")
            return creds

        if not user_id or user_id == SYSTEM_USER_ID or self._users is None:
            return None

        stored = await self._users.get_kaggle_credentials(user_id)
        if stored is None:
            logger.debug(f"No stored Kaggle credentials for user={user_id}")
            return None

        username, key = stored
        return KaggleCredentials(username=username, key=key)

    def __repr__(self) -> str:
        return f"CredentialResolver(has_user_store={self._users is not None})"
