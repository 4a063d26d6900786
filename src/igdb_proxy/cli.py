"""
Command-line interface for the IGDB proxy.

Runs the HTTP server, and offers one-shot commands to check
configuration and query IGDB through the same code path.
"""

import asyncio
import json
import sys
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from igdb_proxy.config import LoggingConfig, get_settings
from igdb_proxy.logger import get_logger, setup_logging

setup_logging(LoggingConfig())
logger = get_logger(__name__, component="cli")


class CLIOutput(BaseModel):
    """Structured output for CLI commands."""

    success: bool
    command: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    data: dict[str, Any] | list[Any] | None = None
    error: str | None = None


def print_json(output: CLIOutput) -> None:
    """Print output as formatted JSON."""
    print(json.dumps(output.model_dump(), indent=2, default=str))


def cmd_serve() -> None:
    """Run the HTTP server."""
    import uvicorn

    from igdb_proxy.api import create_app

    try:
        settings = get_settings()
    except PydanticValidationError as e:
        print(
            "Error: TWITCH_CLIENT_ID and TWITCH_CLIENT_SECRET are required. "
            "Set them in the environment or in a .env file.",
            file=sys.stderr,
        )
        logger.error("Invalid configuration", error=str(e))
        sys.exit(1)

    app = create_app(settings)
    logger.info(
        "IGDB proxy listening",
        url=f"http://localhost:{settings.server.port}",
    )
    uvicorn.run(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.logging.level.lower(),
    )


async def cmd_search(term: str) -> None:
    """Search games and print the ranked results."""
    from igdb_proxy.api import GameService

    service = GameService.from_settings(get_settings())
    try:
        games = await service.search_games(term)
    finally:
        await service.close()

    print_json(
        CLIOutput(
            success=True,
            command="search",
            data=[game.model_dump() for game in games],
        )
    )


async def cmd_latest() -> None:
    """Print the latest popular releases."""
    from igdb_proxy.api import GameService

    service = GameService.from_settings(get_settings())
    try:
        games = await service.latest_releases()
    finally:
        await service.close()

    print_json(
        CLIOutput(
            success=True,
            command="latest",
            data=[game.model_dump() for game in games],
        )
    )


async def cmd_test_config() -> None:
    """Test configuration loading."""
    settings = get_settings()

    output = CLIOutput(
        success=True,
        command="test-config",
        data={
            "environment": settings.environment,
            "token_url": settings.twitch.token_url,
            "api_url": settings.twitch.api_url,
            "timeout_seconds": settings.twitch.timeout_seconds,
            "port": settings.server.port,
            "client_id_configured": bool(settings.twitch.client_id),
            "client_secret_configured": bool(settings.twitch.client_secret.get_secret_value()),
        },
    )
    print_json(output)


def print_usage() -> None:
    """Print CLI usage information."""
    usage = """
IGDB Proxy CLI
==============

Usage: igdb-proxy <command> [arguments]

Commands:
  serve                 Run the HTTP server on HOST:PORT
  test-config           Test configuration loading
  search <term>         Search games by name
  latest                List popular releases from the last six months

Examples:
  igdb-proxy serve
  igdb-proxy search "the witcher"
"""
    print(usage)


def main() -> None:
    """Main CLI entry point."""
    if len(sys.argv) < 2:
        print_usage()
        sys.exit(1)

    command = sys.argv[1]

    try:
        if command == "serve":
            cmd_serve()

        elif command == "test-config":
            asyncio.run(cmd_test_config())

        elif command == "search":
            if len(sys.argv) < 3:
                print("Error: search term required")
                sys.exit(1)
            asyncio.run(cmd_search(" ".join(sys.argv[2:])))

        elif command == "latest":
            asyncio.run(cmd_latest())

        elif command in ("help", "--help", "-h"):
            print_usage()

        else:
            print(f"Unknown command: {command}")
            print_usage()
            sys.exit(1)

    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.exception("CLI error", error=str(e))
        output = CLIOutput(
            success=False,
            command=command,
            error=str(e),
        )
        print_json(output)
        sys.exit(1)


if __name__ == "__main__":
    main()
