from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ApiModel(BaseModel):
    """Base for payloads exchanged with the RecipeShare backend (camelCase on the wire)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class LoginRequest(ApiModel):
    """Credentials posted to /api/users/login."""

    email: str = Field(description="Account email address.", examples=["cook@example.com"])
    password: str = Field(description="Account password. Never logged.")


class Session(ApiModel):
    """Authenticated identity returned by a successful login."""

    user_id: int = Field(alias="userId", description="Backend id of the logged in user.")
    token: str = Field(min_length=1, description="Opaque bearer token.")
    username: str = Field(description="Display name of the user.")
    email: str = Field(description="Email address of the user.")

    def __repr__(self) -> str:
        # token stays out of reprs so it cannot end up in logs by accident
        return f"Session(user_id={self.user_id!r}, username={self.username!r}, email={self.email!r})"

    __str__ = __repr__


class User(ApiModel):
    id: Optional[int] = None
    username: str
    email: str
    bio: Optional[str] = None
    password_hash: Optional[str] = Field(default=None, alias="passwordHash")
    avatar_url: Optional[str] = Field(default=None, alias="avatarUrl")


class UserEdit(ApiModel):
    """Partial profile update."""

    username: Optional[str] = None
    email: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = Field(default=None, alias="avatarUrl")


class Recipe(ApiModel):
    id: Optional[int] = None
    user_id: Optional[int] = Field(default=None, alias="userId")
    title: str
    description: Optional[str] = None
    instructions: str
    cook_time_minutes: Optional[int] = Field(default=None, alias="cookTimeMinutes")
    ingredients: str
    calories: Optional[int] = None
    protein: Optional[int] = None
    fat: Optional[int] = None
    carbs: Optional[int] = None
