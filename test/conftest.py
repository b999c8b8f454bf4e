import logging
import sys
from pathlib import Path
from typing import Any

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI, HTTPException, Request, Response

# Add src to Python path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from recipeshare.auth.storage import MemoryStorage
from recipeshare.client.recipeshare_client import RecipeShareClient
from recipeshare.config import ClientConfig

VALID_TOKEN = "token-abc-123"
VALID_PASSWORD = "secret"


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """Configure logging for tests."""
    logging.basicConfig(level=logging.INFO)


def create_backend_app() -> FastAPI:
    """A tiny stand-in for the RecipeShare REST backend."""
    app = FastAPI()
    app.state.users = {
        1: {"id": 1, "username": "chef", "email": "chef@example.com", "bio": "<i>Loves</i> baking"},
    }
    app.state.recipes = {
        10: {
            "id": 10,
            "userId": 1,
            "title": "<script>alert(1)</script>Cake",
            "instructions": "Mix &amp; bake",
            "ingredients": "flour, <b>sugar</b>",
            "cookTimeMinutes": 45,
            "calories": 600,
        },
        11: {
            "id": 11,
            "userId": 1,
            "title": "Apple pie",
            "instructions": "Bake",
            "ingredients": "apples",
            "cookTimeMinutes": 60,
            "calories": 400,
        },
    }
    app.state.authorization_headers = []

    def require_token(request: Request) -> None:
        header = request.headers.get("authorization")
        app.state.authorization_headers.append(header)
        if header != f"Bearer {VALID_TOKEN}":
            raise HTTPException(status_code=401, detail="token check failed in /srv/app/security/jwt.py")

    @app.post("/api/users/login")
    async def login(request: Request) -> dict[str, Any]:
        credentials = await request.json()
        if credentials.get("password") != VALID_PASSWORD:
            raise HTTPException(
                status_code=401,
                detail=f"Bad credentials for {credentials.get('email')} (users table: recipeshare.users)",
            )
        return {"userId": 1, "token": VALID_TOKEN, "username": "chef", "email": credentials["email"]}

    @app.get("/api/users/{user_id}")
    async def get_user(user_id: int, request: Request) -> dict[str, Any]:
        require_token(request)
        if user_id not in app.state.users:
            raise HTTPException(status_code=404, detail={"message": "/internal/path/leaked.sql"})
        return app.state.users[user_id]

    @app.put("/api/users/{user_id}")
    async def update_user(user_id: int, request: Request) -> dict[str, Any]:
        require_token(request)
        app.state.users[user_id].update(await request.json())
        return app.state.users[user_id]

    @app.get("/api/recipe/users/{user_id}")
    async def get_user_recipes(user_id: int, request: Request) -> list[dict[str, Any]]:
        require_token(request)
        return [recipe for recipe in app.state.recipes.values() if recipe["userId"] == user_id]

    @app.get("/api/recipe/{recipe_id}")
    async def get_recipe(recipe_id: int) -> dict[str, Any]:
        if recipe_id not in app.state.recipes:
            raise HTTPException(status_code=404, detail="Recipe row missing in /var/lib/postgres")
        return app.state.recipes[recipe_id]

    @app.post("/api/recipe", status_code=201)
    async def create_recipe(request: Request) -> dict[str, Any]:
        require_token(request)
        recipe = await request.json()
        recipe["id"] = max(app.state.recipes) + 1
        app.state.recipes[recipe["id"]] = recipe
        return recipe

    @app.delete("/api/recipe/{recipe_id}")
    async def delete_recipe(recipe_id: int, request: Request) -> Response:
        require_token(request)
        app.state.recipes.pop(recipe_id, None)
        return Response(status_code=204)

    @app.get("/api/explode")
    async def explode() -> None:
        raise HTTPException(status_code=500, detail="NullPointerException at RecipeService.java:42")

    return app


@pytest.fixture
def backend_app() -> FastAPI:
    return create_backend_app()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest_asyncio.fixture
async def recipeshare_client(backend_app, storage):
    config = ClientConfig(base_url="http://recipeshare.test", storage_type="memory")
    client = RecipeShareClient(config, storage=storage, transport=httpx.ASGITransport(app=backend_app))
    yield client
    await client.aclose()
