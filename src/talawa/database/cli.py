#!/usr/bin/env python3
"""
CLI entry point for Talawa database migrations.
"""

import sys
from collections.abc import Callable
from pathlib import Path

import click

from alembic import command
from alembic.config import Config
from talawa import __version__
from talawa.database.connection import get_database_url
from talawa.logging import configure_logging, get_logger

logger = get_logger(__name__)


def get_alembic_config() -> Config:
    """Load ``alembic.ini`` from the project root, pointing it at ``alembic/``."""
    project_dir = Path(__file__).resolve().parents[3]
    alembic_ini = project_dir / "alembic.ini"

    if not alembic_ini.exists():
        raise FileNotFoundError(f"alembic.ini not found at {alembic_ini}")

    config = Config(str(alembic_ini))
    config.set_main_option("script_location", str(project_dir / "alembic"))
    return config


def _run(description: str, action: Callable[[Config], None], **log_fields) -> None:
    """Run one Alembic command, exiting non-zero when it fails."""
    try:
        config = get_alembic_config()
        logger.info(description, **log_fields)
        action(config)
    except Exception as e:
        logger.error(f"{description} failed", error=str(e), **log_fields)
        sys.exit(1)


@click.group()
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Log level (default: info)",
)
@click.version_option(version=__version__, prog_name="talawa-migrate")
def main(log_level: str) -> None:
    """Manage the Talawa database schema."""
    configure_logging(debug=(log_level == "debug"), level=log_level)


@main.command()
@click.argument("revision", default="head")
@click.option("--sql", is_flag=True, help="Print the SQL instead of running it")
def upgrade(revision: str, sql: bool) -> None:
    """Upgrade the database to REVISION (default: head)."""
    _run(
        "Upgrading database",
        lambda config: command.upgrade(config, revision, sql=sql),
        revision=revision,
        database=get_database_url().rsplit("@", 1)[-1],
    )


@main.command()
@click.argument("revision", default="-1")
def downgrade(revision: str) -> None:
    """Downgrade the database to REVISION (default: one step back)."""
    _run(
        "Downgrading database",
        lambda config: command.downgrade(config, revision),
        revision=revision,
    )


@main.command()
@click.option("-m", "--message", required=True, help="Revision message")
@click.option("--autogenerate/--no-autogenerate", default=True, help="Diff against the ORM models")
def revision(message: str, autogenerate: bool) -> None:
    """Create a new migration revision."""
    _run(
        "Creating migration",
        lambda config: command.revision(config, message=message, autogenerate=autogenerate),
        message=message,
    )


@main.command()
def current() -> None:
    """Show the revision the database is at."""
    _run("Reading current revision", command.current)


@main.command()
def history() -> None:
    """List all migration revisions."""
    _run("Reading migration history", command.history)


if __name__ == "__main__":
    main()
