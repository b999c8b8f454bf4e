from abc import ABC, abstractmethod

from recipeshare.schema import Recipe


class SortStrategy(ABC):
    @abstractmethod
    def sort(self, recipes: list[Recipe]) -> list[Recipe]:
        """Return a sorted copy; the input list is left untouched."""
        raise NotImplementedError


class SortByTitleStrategy(SortStrategy):
    def sort(self, recipes: list[Recipe]) -> list[Recipe]:
        return sorted(recipes, key=lambda recipe: recipe.title.casefold())


class SortByCookTimeStrategy(SortStrategy):
    def sort(self, recipes: list[Recipe]) -> list[Recipe]:
        return sorted(recipes, key=lambda recipe: recipe.cook_time_minutes or 0)


class SortByCaloriesStrategy(SortStrategy):
    def sort(self, recipes: list[Recipe]) -> list[Recipe]:
        return sorted(recipes, key=lambda recipe: recipe.calories or 0)


SORT_STRATEGIES: dict[str, type[SortStrategy]] = {
    "title": SortByTitleStrategy,
    "cook-time": SortByCookTimeStrategy,
    "calories": SortByCaloriesStrategy,
}


class RecipeSorter:
    def __init__(self, strategy: SortStrategy):
        self.strategy = strategy

    def set_strategy(self, strategy: SortStrategy) -> None:
        self.strategy = strategy

    def sort_recipes(self, recipes: list[Recipe]) -> list[Recipe]:
        return self.strategy.sort(recipes)
