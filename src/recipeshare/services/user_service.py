import logging
from typing import Optional

from recipeshare.client.pipeline import RequestPipeline
from recipeshare.schema import User, UserEdit

logger = logging.getLogger(__name__)


class UserService:
    """User profile endpoints under /api/users."""

    api_url = "/api/users"

    def __init__(self, pipeline: RequestPipeline):
        self._pipeline = pipeline

    async def create(self, user: User, password: Optional[str] = None) -> User:
        """Register a new user. The password is sent once and never kept."""
        payload = user.to_payload()
        if password is not None:
            payload["password"] = password
        data = await self._pipeline.post(self.api_url, json=payload)
        return User.model_validate(data)

    async def get_by_id(self, user_id: int) -> User:
        data = await self._pipeline.get(f"{self.api_url}/{user_id}")
        return User.model_validate(data)

    async def update(self, user_id: int, changes: UserEdit | User) -> User:
        data = await self._pipeline.put(f"{self.api_url}/{user_id}", json=changes.to_payload())
        logger.info(f"Updated profile of user {user_id}")
        return User.model_validate(data)

    async def delete(self, user_id: int) -> None:
        await self._pipeline.delete(f"{self.api_url}/{user_id}")
        logger.info(f"Deleted user {user_id}")
