#!/usr/bin/env python3
"""
Main CLI entry point for the Talawa API server.
"""

import os
import sys
from pathlib import Path

import click
import uvicorn

from talawa import __version__
from talawa.logging import configure_logging, get_logger

logger = get_logger(__name__)

LOG_LEVELS = click.Choice(["debug", "info", "warning", "error"])


@click.group()
@click.version_option(version=__version__, prog_name="talawa")
def cli() -> None:
    """Talawa API command line."""


@cli.command()
@click.option("--host", default="0.0.0.0", help="Host to bind to (default: 0.0.0.0)")
@click.option("--port", default=4000, type=int, help="Port to bind to (default: 4000)")
@click.option("--reload", is_flag=True, default=False, help="Restart on code changes")
@click.option("--workers", default=1, type=int, help="Number of worker processes (default: 1)")
@click.option("--log-level", default="info", type=LOG_LEVELS, help="Log level (default: info)")
def serve(host: str, port: int, reload: bool, workers: int, log_level: str) -> None:
    """Serve the GraphQL API and the object endpoint."""
    debug = log_level == "debug"
    configure_logging(debug=debug, level=log_level)

    # Reloader and worker processes build their settings from the environment
    os.environ["TALAWA_LOG_LEVEL"] = log_level.upper()
    if debug:
        os.environ["TALAWA_DEBUG"] = "true"

    logger.info("Starting Talawa API server", host=host, port=port, reload=reload, workers=workers)

    try:
        if reload or workers > 1:
            uvicorn.run(
                "talawa.api.app:app",
                host=host,
                port=port,
                reload=reload,
                workers=1 if reload else workers,
                log_level=log_level,
            )
        else:
            from talawa.api.app import app

            uvicorn.run(app, host=host, port=port, log_level=log_level)
    except KeyboardInterrupt:
        logger.info("Server shutdown requested by user")
    except Exception as e:
        logger.error("Server startup failed", error=str(e))
        sys.exit(1)


@cli.command("storage-config")
@click.option(
    "--output",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Write to this file instead of stdout",
)
def storage_config(output: Path | None) -> None:
    """Print an example storage configuration (point TALAWA_STORAGE_CONFIG_PATH at it)."""
    from talawa.storage.config import create_example_config

    content = create_example_config()
    if output is None:
        click.echo(content, nl=False)
        return

    output.write_text(content)
    click.echo(f"Wrote {output}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
