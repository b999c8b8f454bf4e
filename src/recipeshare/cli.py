#!/usr/bin/env python3
"""
Command line client for RecipeShare.

Usage:
    recipeshare login [--email you@example.com] [--password ...]
    recipeshare whoami
    recipeshare recipes [--sort title|cook-time|calories]
    recipeshare recipe <id>
    recipeshare logout
"""
import argparse
import asyncio
import getpass
import logging
import sys
from typing import Optional

from pydantic import ValidationError

from recipeshare.auth.session_store import SessionDataError
from recipeshare.auth.storage import StorageError
from recipeshare.client.errors import ApiError
from recipeshare.client.recipeshare_client import RecipeShareClient
from recipeshare.config import setup_logging
from recipeshare.schema import LoginRequest, Recipe
from recipeshare.services import SORT_STRATEGIES, NotLoggedInError, RecipeSorter

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="recipeshare", description="RecipeShare command line client")
    subparsers = parser.add_subparsers(dest="command", required=True)

    login_parser = subparsers.add_parser("login", help="Log in and store the session")
    login_parser.add_argument("--email", default=None, help="Account email (prompted when omitted)")
    login_parser.add_argument("--password", default=None, help="Account password (prompted when omitted)")

    subparsers.add_parser("logout", help="Forget the stored session")
    subparsers.add_parser("whoami", help="Show the logged in user")

    recipes_parser = subparsers.add_parser("recipes", help="List your recipes")
    recipes_parser.add_argument("--sort", choices=sorted(SORT_STRATEGIES), default="title", help="Sort order")

    recipe_parser = subparsers.add_parser("recipe", help="Show a single recipe")
    recipe_parser.add_argument("recipe_id", type=int, help="Recipe id")

    return parser


def format_recipe(recipe: Recipe, detailed: bool = False) -> str:
    cook_time = f"{recipe.cook_time_minutes} min" if recipe.cook_time_minutes is not None else "-"
    calories = f"{recipe.calories} kcal" if recipe.calories is not None else "-"
    line = f"[{recipe.id}] {recipe.title} ({cook_time}, {calories})"
    if not detailed:
        return line

    lines = [line]
    if recipe.description:
        lines.append(recipe.description)
    lines.append(f"Ingredients: {recipe.ingredients}")
    lines.append(f"Instructions: {recipe.instructions}")
    return "\n".join(lines)


async def run(args: argparse.Namespace, client: RecipeShareClient) -> int:
    """Execute one parsed command. Returns the process exit code."""
    try:
        match args.command:
            case "login":
                email = args.email or input("Email: ")
                password = args.password or getpass.getpass("Password: ")
                session = await client.session.login(LoginRequest(email=email, password=password))
                print(f"Logged in as {session.username} <{session.email}>")
            case "logout":
                client.session.logout()
                print("Logged out")
            case "whoami":
                user = await client.facade.get_current_user()
                print(f"{user.username} <{user.email}>")
                if user.bio:
                    print(user.bio)
            case "recipes":
                recipes = await client.facade.get_current_user_recipes()
                sorter = RecipeSorter(SORT_STRATEGIES[args.sort]())
                for recipe in sorter.sort_recipes(recipes):
                    print(format_recipe(recipe))
                if not recipes:
                    print("No recipes yet")
            case "recipe":
                recipe = await client.recipes.get_by_id(args.recipe_id)
                print(format_recipe(recipe, detailed=True))
            case _:
                raise ValueError(f"Unknown command: {args.command}")
    except ApiError as e:
        print(f"[ERROR] {e.safe_message}")
        return 1
    except NotLoggedInError:
        print("[ERROR] You are not logged in. Run 'recipeshare login' first.")
        return 1
    except SessionDataError:
        logger.warning("Stored session is unreadable, clearing it")
        client.session.logout()
        print("[ERROR] Your stored session is corrupted. Please log in again.")
        return 1
    except StorageError as e:
        logger.error(f"Session storage failed: {e}")
        print("[ERROR] Could not access the local session storage. Check RECIPESHARE_STORAGE settings.")
        return 1
    except ValidationError as e:
        logger.error(f"Unexpected response shape from the server ({e.error_count()} validation errors)")
        print("[ERROR] The server sent an unexpected response. Please try again later.")
        return 1
    return 0


async def amain(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    async with RecipeShareClient() as client:
        return await run(args, client)


def main(argv: Optional[list[str]] = None) -> int:
    setup_logging()
    return asyncio.run(amain(argv))


if __name__ == "__main__":
    sys.exit(main())
