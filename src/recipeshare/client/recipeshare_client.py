"""
Composition root for the RecipeShare client.

Wires storage, the request pipeline, the session store and the services
together. The session store is passed to the pipeline by reference (as its
token provider) so nothing here relies on module-level state.
"""

import logging
from typing import Optional

import httpx

from recipeshare.auth.session_store import SessionStore
from recipeshare.auth.storage import KeyValueStorage, create_storage
from recipeshare.client.pipeline import RequestPipeline
from recipeshare.config import ClientConfig
from recipeshare.services import ApiFacade, RecipeService, UserService

logger = logging.getLogger(__name__)


class RecipeShareClient:
    """
    Everything an application needs to talk to the backend.

    Example:
        >>> async with RecipeShareClient(ClientConfig.from_env()) as client:
        ...     await client.session.login(LoginRequest(email="a@b.c", password="secret"))
        ...     recipes = await client.facade.get_current_user_recipes()
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        storage: Optional[KeyValueStorage] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            config: Client configuration, read from the environment when omitted.
            storage: Storage to use instead of the one described by ``config``.
            transport: httpx transport override, mainly for tests.
        """
        self.config = config or ClientConfig.from_env()

        if storage is None:
            storage = create_storage(
                self.config.storage_type,
                storage_path=self.config.storage_path,
                redis_url=self.config.redis_url,
                key_prefix=self.config.redis_key_prefix,
            )
        self.storage = storage

        self.pipeline = RequestPipeline(
            self.config.base_url,
            timeout=self.config.timeout,
            transport=transport,
        )
        self.session = SessionStore(self.storage, self.pipeline)
        self.pipeline.token_provider = self.session.get_token

        self.users = UserService(self.pipeline)
        self.recipes = RecipeService(self.pipeline)
        self.facade = ApiFacade(self.users, self.recipes, self.session)

        logger.debug(
            f"RecipeShare client configured for {self.config.base_url} "
            f"with {type(self.storage).__name__}"
        )

    async def __aenter__(self) -> "RecipeShareClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.pipeline.aclose()
