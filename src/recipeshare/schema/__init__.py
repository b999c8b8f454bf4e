from .schema import LoginRequest, Recipe, Session, User, UserEdit

__all__ = [
    "LoginRequest",
    "Recipe",
    "Session",
    "User",
    "UserEdit",
]
