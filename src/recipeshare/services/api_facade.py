from recipeshare.auth.session_store import SessionStore
from recipeshare.schema import Recipe, User, UserEdit
from recipeshare.services.recipe_service import RecipeService
from recipeshare.services.user_service import UserService


class NotLoggedInError(Exception):
    """An operation on the current user was attempted without a stored session."""


class ApiFacade:
    """
    Operations on "the current user", resolved from the stored session.

    A corrupt stored session is not handled here: SessionDataError propagates
    so the caller can force a fresh login.
    """

    def __init__(self, user_service: UserService, recipe_service: RecipeService, session_store: SessionStore):
        self._user_service = user_service
        self._recipe_service = recipe_service
        self._session_store = session_store

    def _require_user_id(self) -> int:
        user_id = self._session_store.get_current_user_id()
        if not user_id:
            raise NotLoggedInError("No user logged in")
        return user_id

    async def get_current_user(self) -> User:
        return await self._user_service.get_by_id(self._require_user_id())

    async def update_current_user(self, changes: UserEdit) -> User:
        return await self._user_service.update(self._require_user_id(), changes)

    async def get_current_user_recipes(self) -> list[Recipe]:
        return await self._recipe_service.get_recipes_by_user_id(self._require_user_id())

    def logout(self) -> None:
        self._session_store.logout()
