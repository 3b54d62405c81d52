"""Command-line entry point for zsh-ai-suggestions.

Commands:
- daemon  file-based IPC daemon used by the zsh plugin
- server  HTTP front-end (POST /suggest)
- repl    read prompts from stdin, print suggestions to stdout
- sweep   remove leftover request files by hand
"""

from pathlib import Path
from typing import Optional

import click

from . import __version__
from .config import Provider, Settings, load_settings
from .errors import ConfigError
from .lifecycle import purge_directory, sweep_stale
from .log import setup_logging


def _settings(ctx: click.Context, **overrides) -> Settings:
    """Load settings with CLI overrides and configure logging."""
    overrides = {k: v for k, v in overrides.items() if v is not None}
    try:
        settings = load_settings(**overrides)
    except ConfigError as e:
        click.echo(f"Error: {e.message}", err=True)
        ctx.exit(1)
    setup_logging(ctx.obj.get("log_level") or settings.log_level)
    return settings


@click.group()
@click.version_option(__version__, prog_name="zsh-ai-suggestions")
@click.option("--log-level", type=click.Choice(["error", "warn", "info", "debug", "off"]),
              help="Override ZSH_AI_SUGGESTIONS_LOG_LEVEL")
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str]):
    """AI command suggestions for zsh."""
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level


_provider_option = click.option(
    "-t", "--type", "provider",
    type=click.Choice([p.value for p in Provider]),
    help="Suggestion backend (ZSH_AI_SUGGESTIONS_TYPE)",
)


@cli.command()
@_provider_option
@click.option("--tmpdir", type=click.Path(file_okay=False, path_type=Path),
              help="Shared directory (ZSH_AI_SUGGESTIONS_TMPDIR)")
@click.option("--cleanup-on-exit/--no-cleanup-on-exit", default=None,
              help="Exit once no shell is left (ZSH_AI_SUGGESTIONS_CLEANUP_ON_EXIT)")
@click.pass_context
def daemon(ctx: click.Context, provider: Optional[str], tmpdir: Optional[Path], cleanup_on_exit: Optional[bool]):
    """Watch the shared directory and answer suggestion requests."""
    from .daemon import main

    settings = _settings(ctx, provider=provider, tmpdir=tmpdir, cleanup_on_exit=cleanup_on_exit)
    ctx.exit(main(settings))


@cli.command()
@_provider_option
@click.option("-p", "--port", type=click.IntRange(1, 65535),
              help="Listen port (ZSH_AI_SUGGESTIONS_SERVER_PORT or SERVER_PORT)")
@click.pass_context
def server(ctx: click.Context, provider: Optional[str], port: Optional[int]):
    """Serve suggestions over HTTP."""
    from .server import main

    settings = _settings(ctx, provider=provider, server_port=port)
    ctx.exit(main(settings))


@cli.command()
@_provider_option
@click.pass_context
def repl(ctx: click.Context, provider: Optional[str]):
    """Read partial commands from stdin and print suggestions."""
    from .repl import main

    settings = _settings(ctx, provider=provider)
    ctx.exit(main(settings))


@cli.command()
@click.option("--tmpdir", type=click.Path(file_okay=False, path_type=Path),
              help="Shared directory (ZSH_AI_SUGGESTIONS_TMPDIR)")
@click.option("--all", "purge_all", is_flag=True,
              help="Remove every file, responses included")
@click.pass_context
def sweep(ctx: click.Context, tmpdir: Optional[Path], purge_all: bool):
    """Remove leftover request and temp files."""
    settings = _settings(ctx, tmpdir=tmpdir)
    if purge_all:
        count = purge_directory(settings.tmpdir)
    else:
        count = sweep_stale(settings.tmpdir)
    click.echo(f"Removed {count} file{'s' if count != 1 else ''} from {settings.tmpdir}")


if __name__ == "__main__":
    cli()
