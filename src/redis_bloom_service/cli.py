"""Command line access to RedisBloom filters."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Awaitable, Callable, TypeVar

import typer

from .config import BloomFilterOptions
from .connection import RedisConnectionProvider
from .exceptions import BloomFilterException
from .logging import configure_logging
from .service import DEFAULT_EXPANSION, BloomFilterService
from .types import InfoAttribute, InsertFlag

T = TypeVar("T")

app = typer.Typer(help="Run RedisBloom filter commands.")

_URL_OPTION = typer.Option(
    None, "--url", envvar="BLOOM_FILTER_REDIS_URL", help="Redis URL; overrides host/port"
)
_HOST_OPTION = typer.Option(
    "127.0.0.1", "--host", envvar="BLOOM_FILTER_REDIS_HOST", help="Redis host"
)
_PORT_OPTION = typer.Option(6379, "--port", "-p", envvar="BLOOM_FILTER_REDIS_PORT")
_DB_OPTION = typer.Option(None, "--db", envvar="BLOOM_FILTER_REDIS_DB", help="Database index")
_USERNAME_OPTION = typer.Option(None, "--username", envvar="BLOOM_FILTER_REDIS_USERNAME")
_PASSWORD_OPTION = typer.Option(None, "--password", envvar="BLOOM_FILTER_REDIS_PASSWORD")
_LOG_LEVEL_OPTION = typer.Option("warning", "--log-level", help="Logging level")


def _create_service(options: BloomFilterOptions) -> BloomFilterService:
    return BloomFilterService(RedisConnectionProvider(options))


def _run(ctx: typer.Context, operation: Callable[[BloomFilterService], Awaitable[T]]) -> T:
    service = _create_service(ctx.obj)

    async def _main() -> T:
        try:
            return await operation(service)
        finally:
            await service.provider.close()

    try:
        return asyncio.run(_main())
    except BloomFilterException as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


def _echo(value: Any) -> None:
    if isinstance(value, (dict, list)):
        typer.echo(json.dumps(value))
    else:
        typer.echo(str(value).lower() if isinstance(value, bool) else value)


@app.callback()
def main(
    ctx: typer.Context,
    url: str | None = _URL_OPTION,
    host: str = _HOST_OPTION,
    port: int = _PORT_OPTION,
    db: int | None = _DB_OPTION,
    username: str | None = _USERNAME_OPTION,
    password: str | None = _PASSWORD_OPTION,
    log_level: str = _LOG_LEVEL_OPTION,
) -> None:
    configure_logging(log_level)
    if url:
        ctx.obj = BloomFilterOptions.from_redis_url(url)
    else:
        ctx.obj = BloomFilterOptions.from_connection(
            host=host, port=port, username=username, password=password, db=db
        )


@app.command()
def ping(ctx: typer.Context) -> None:
    """Check that the server answers."""
    alive = _run(ctx, lambda service: service.ping())
    _echo(alive)
    if not alive:
        raise typer.Exit(code=1)


@app.command()
def reserve(
    ctx: typer.Context,
    key: str,
    error_rate: float,
    capacity: int,
    expansion: int = typer.Option(
        DEFAULT_EXPANSION, help="Growth factor; 0 or less creates a non-scaling filter"
    ),
) -> None:
    """Create an empty filter."""
    _echo(_run(ctx, lambda service: service.reserve(key, error_rate, capacity, expansion)))


@app.command()
def add(ctx: typer.Context, key: str, item: str) -> None:
    """Add one item."""
    _echo(_run(ctx, lambda service: service.add(key, item)))


@app.command()
def madd(ctx: typer.Context, key: str, items: list[str]) -> None:
    """Add several items."""
    _echo(_run(ctx, lambda service: service.madd(key, items)))


@app.command()
def exists(ctx: typer.Context, key: str, item: str) -> None:
    """Check whether an item may have been added."""
    _echo(_run(ctx, lambda service: service.exists(key, item)))


@app.command()
def mexists(ctx: typer.Context, key: str, items: list[str]) -> None:
    """Check several items."""
    _echo(_run(ctx, lambda service: service.mexists(key, items)))


@app.command()
def card(ctx: typer.Context, key: str) -> None:
    """Print the number of items added."""
    _echo(_run(ctx, lambda service: service.card(key)))


@app.command()
def info(
    ctx: typer.Context,
    key: str,
    attribute: InfoAttribute | None = typer.Argument(None, case_sensitive=False),
) -> None:
    """Describe a filter, or print a single attribute."""
    _echo(_run(ctx, lambda service: service.info(key, attribute)))


@app.command()
def insert(
    ctx: typer.Context,
    key: str,
    items: list[str],
    capacity: int | None = typer.Option(None, "--capacity"),
    error_rate: float | None = typer.Option(None, "--error-rate"),
    expansion: int | None = typer.Option(None, "--expansion"),
    flags: list[InsertFlag] | None = typer.Option(None, "--flag", case_sensitive=False),
) -> None:
    """Add items, creating the filter if needed."""
    _echo(
        _run(
            ctx,
            lambda service: service.insert(
                key,
                items,
                capacity=capacity,
                error_rate=error_rate,
                expansion=expansion,
                flags=flags,
            ),
        )
    )


if __name__ == "__main__":
    app()
