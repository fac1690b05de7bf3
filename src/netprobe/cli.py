"""CLI interface for netprobe"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import click
import yaml

from netprobe.application.connectivity_service import ConnectivityChecker
from netprobe.domain.errors import ConnectivityError
from netprobe.infrastructure.config.config_manager import ConfigManager, ConfigurationError

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration"""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    logging.getLogger().setLevel(level)


def _die(message: str, verbose: bool = False, exc: Optional[Exception] = None) -> None:
    """Exit with a user-friendly error message"""
    if exc is not None:
        logger.error(message, exc_info=verbose)
    else:
        logger.error(message)
    raise click.ClickException(message)


def _build_overrides(**options: Any) -> Dict[str, Any]:
    """Map CLI options onto configuration sections, skipping unset ones

    Args:
        **options: host, port, timeout, max_retries, base_delay

    Returns:
        Nested override dictionary for ConfigManager
    """
    sections = {
        "host": "endpoint",
        "port": "endpoint",
        "timeout": "endpoint",
        "max_retries": "retry",
        "base_delay": "retry",
    }
    overrides: Dict[str, Any] = {}
    for key, value in options.items():
        if value is not None:
            overrides.setdefault(sections[key], {})[key] = value
    return overrides


def _load_config(ctx: click.Context, overrides: Dict[str, Any]) -> ConfigManager:
    try:
        return ConfigManager(config_path=ctx.obj.get("config_path"), overrides=overrides)
    except ConfigurationError as e:
        _die(str(e), verbose=ctx.obj.get("verbose", False), exc=e)


def endpoint_options(func):
    func = click.option("--timeout", type=float, help="Per-attempt timeout in seconds. Overrides config.")(func)
    func = click.option("--port", type=int, help="Target TCP port. Overrides config.")(func)
    func = click.option("--host", type=str, help="Target host. Overrides config.")(func)
    return func


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to .netprobe.yml config file",
)
@click.pass_context
def cli(ctx, verbose: bool, config: Path):
    """netprobe - check whether a server is reachable right now"""
    ctx.ensure_object(dict)
    setup_logging(verbose)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose


@cli.command()
@endpoint_options
@click.option("--max-retries", type=int, help="Retries after the first attempt. Overrides config.")
@click.option("--base-delay", type=float, help="Wait before the first retry in seconds. Overrides config.")
@click.pass_context
def check(ctx, host: str, port: int, timeout: float, max_retries: int, base_delay: float):
    """Patient check: retry with exponential backoff.

    Exits with status 1 when the endpoint stays unreachable.
    """
    config_manager = _load_config(
        ctx,
        _build_overrides(
            host=host, port=port, timeout=timeout, max_retries=max_retries, base_delay=base_delay
        ),
    )
    checker = ConnectivityChecker.from_config(config_manager.config)
    logger.info(
        f"Checking {checker.endpoint.address} "
        f"(up to {checker.retry_config.max_attempts} attempts, "
        f"at most {config_manager.config.worst_case_duration():.1f}s)"
    )

    try:
        reachable = asyncio.run(checker.check_connectivity())
    except ConnectivityError as e:
        _die(f"Connectivity check failed: {e}", verbose=ctx.obj.get("verbose", False), exc=e)

    if reachable:
        click.echo("reachable")
    else:
        click.echo("unreachable")
        ctx.exit(1)


@cli.command()
@endpoint_options
@click.pass_context
def quick(ctx, host: str, port: int, timeout: float):
    """Quick check: a single attempt, no retries."""
    config_manager = _load_config(ctx, _build_overrides(host=host, port=port, timeout=timeout))
    checker = ConnectivityChecker.from_config(config_manager.config)

    try:
        asyncio.run(checker.check_connectivity_quick())
    except ConnectivityError as e:
        _die(f"{checker.endpoint.address}: {e}", verbose=ctx.obj.get("verbose", False), exc=e)

    click.echo("reachable")


@cli.command("config")
@click.pass_context
def show_config(ctx):
    """Print the effective configuration as YAML."""
    config_manager = _load_config(ctx, {})
    click.echo(yaml.safe_dump(config_manager.config.model_dump(), sort_keys=False).rstrip())


def main():
    """Main entry point"""
    cli(obj={})


if __name__ == "__main__":
    main()
