import asyncio
import logging
from typing import Optional

from recipeshare.client.errors import ApiError
from recipeshare.client.pipeline import RequestPipeline
from recipeshare.schema import Recipe

logger = logging.getLogger(__name__)


class RecipeService:
    """Recipe CRUD endpoints under /api/recipe."""

    api_url = "/api/recipe"

    def __init__(self, pipeline: RequestPipeline):
        self._pipeline = pipeline

    async def get_by_id(self, recipe_id: int) -> Recipe:
        data = await self._pipeline.get(f"{self.api_url}/{recipe_id}")
        return Recipe.model_validate(data)

    async def _get_or_none(self, recipe_id: int) -> Optional[Recipe]:
        try:
            return await self.get_by_id(recipe_id)
        except ApiError as e:
            logger.error(f"Failed to load recipe {recipe_id}: {e.safe_message} (status: {e.status_code})")
            return None

    async def get_recipes_by_ids(self, recipe_ids: list[int]) -> list[Recipe]:
        """
        Fetch several recipes concurrently.

        Recipes that fail to load are logged and left out; the rest keep the
        order of ``recipe_ids``.
        """
        results = await asyncio.gather(*(self._get_or_none(recipe_id) for recipe_id in recipe_ids))
        return [recipe for recipe in results if recipe is not None]

    async def get_recipes_by_user_id(self, user_id: int) -> list[Recipe]:
        data = await self._pipeline.get(f"{self.api_url}/users/{user_id}")
        return [Recipe.model_validate(item) for item in data or []]

    async def create(self, recipe: Recipe) -> Recipe:
        data = await self._pipeline.post(self.api_url, json=recipe.to_payload())
        created = Recipe.model_validate(data)
        logger.info(f"Created recipe {created.id}")
        return created

    async def update(self, recipe_id: int, recipe: Recipe) -> Recipe:
        data = await self._pipeline.put(f"{self.api_url}/{recipe_id}", json=recipe.to_payload())
        return Recipe.model_validate(data)

    async def delete(self, recipe_id: int) -> None:
        await self._pipeline.delete(f"{self.api_url}/{recipe_id}")
        logger.info(f"Deleted recipe {recipe_id}")
