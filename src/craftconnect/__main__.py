"""CLI entry point for CraftConnect."""

from __future__ import annotations

import json
import logging
import sys

import click

from . import __version__

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _configure_logging(level: str) -> None:
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logging.basicConfig(level=level.upper(), handlers=[console], force=True)
    for noisy in ("aiohttp.access", "google.auth", "urllib3", "asyncio"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def _load_config_or_exit(config_path: str | None):
    from .config import load_config
    from .exceptions import ConfigError
    from .friendly_errors import friendly_config_error

    try:
        return load_config(config_path)
    except ConfigError as e:
        friendly = friendly_config_error(e)
        click.echo(f"{friendly.title}: {friendly.message}", err=True)
        click.echo(friendly.fix, err=True)
        sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="craftconnect")
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    help="Logging verbosity",
)
def main(log_level: str) -> None:
    """CraftConnect: AI business tools for artisans."""
    _configure_logging(log_level)


@main.command()
@click.option("--config", "config_path", default=None, help="Config file path")
@click.option("--host", default=None, help="Override bind address")
@click.option("--port", default=None, type=int, help="Override HTTP port")
def serve(config_path: str | None, host: str | None, port: int | None) -> None:
    """Run the HTTP API."""
    from aiohttp import web

    from .api import create_api_routes
    from .providers.factory import create_services

    config = _load_config_or_exit(config_path)
    services = create_services(config)
    for name, ready in services.status().items():
        click.echo(f"  {name:<12} {'configured' if ready else 'not configured'}")

    app = create_api_routes(services, config)
    web.run_app(
        app,
        host=host or config.server.host,
        port=port or config.server.port,
        print=click.echo,
    )


@main.command()
@click.argument(
    "schema_name", type=click.Choice(["business_analysis", "enhancement", "quotation"])
)
@click.argument("source", type=click.File("r"), default="-")
@click.option("--stages", is_flag=True, help="Also print the pipeline stages taken")
def normalize(schema_name: str, source, stages: bool) -> None:
    """Normalize model output from SOURCE (file or stdin) into a record.

    Runs offline: extraction, repair, normalization and fallback only.
    """
    from .pipeline import ResponsePipeline
    from .schemas import SCHEMAS

    result = ResponsePipeline(SCHEMAS[schema_name]).process(source.read())
    out = result.to_dict()
    out.pop("rawUpstreamText", None)
    if stages:
        out["stages"] = [s.value for s in result.stages]
    click.echo(json.dumps(out, indent=2, ensure_ascii=False))


@main.command()
@click.option("--config", "config_path", default=None, help="Config file path")
def check(config_path: str | None) -> None:
    """Show which upstream services are configured."""
    import asyncio

    from .providers.factory import create_services

    config = _load_config_or_exit(config_path)
    services = create_services(config)
    status = services.status()
    for name, ready in status.items():
        mark = "ok" if ready else "--"
        click.echo(f"  [{mark}] {name}")
    asyncio.run(services.close())
    if not any(status.values()):
        click.echo("\nNo services configured; every response will use templates.")


if __name__ == "__main__":
    main()
