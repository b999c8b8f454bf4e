from .api_facade import ApiFacade, NotLoggedInError
from .recipe_service import RecipeService
from .sort_strategy import (
    SORT_STRATEGIES,
    RecipeSorter,
    SortByCaloriesStrategy,
    SortByCookTimeStrategy,
    SortByTitleStrategy,
    SortStrategy,
)
from .user_service import UserService

__all__ = [
    "ApiFacade",
    "NotLoggedInError",
    "RecipeService",
    "UserService",
    "SORT_STRATEGIES",
    "RecipeSorter",
    "SortByCaloriesStrategy",
    "SortByCookTimeStrategy",
    "SortByTitleStrategy",
    "SortStrategy",
]
