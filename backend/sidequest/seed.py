"""Quest Seeding CLI — loads a JSON catalog into the quests table.

Usage:
    sidequest-seed seeds/quests.json
    sidequest-seed seeds/quests.json --database-url postgresql+asyncpg://...

Invariants:
    - The whole file is validated before any row is written
    - Idempotent by title: re-running with the same file inserts nothing
"""

import asyncio
import logging

import click
from pydantic import ValidationError

from sidequest.config import get_settings
from sidequest.db.session import create_session_factory
from sidequest.infrastructure.observability import setup_logging
from sidequest.services.quest_catalog import QuestCatalogService, load_quest_seeds

logger = logging.getLogger(__name__)


async def seed_catalog(path: str, database_url: str) -> int:
    seeds = load_quest_seeds(path)
    factory = create_session_factory(database_url)
    try:
        async with factory() as db:
            return await QuestCatalogService(db).seed_quests(seeds)
    finally:
        await factory.kw["bind"].dispose()


@click.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--database-url", default=None,
    help="Overrides DATABASE_URL from the environment.",
)
def main(path: str, database_url: str | None):
    """Insert every quest in PATH whose title is not in the catalog yet."""
    settings = get_settings()
    setup_logging(settings.log_level, "text")
    try:
        inserted = asyncio.run(
            seed_catalog(path, database_url or settings.database_url)
        )
    except ValidationError as e:
        raise click.ClickException(f"Invalid seed file {path}:\n{e}") from e
    click.echo(f"Seeded {inserted} new quest(s) from {path}")


if __name__ == "__main__":
    main()
