from __future__ import annotations
import click

from ..app import App, build_app
from ..config import load_config
from ..errors import ConfigurationError
from ..version import __version__


@click.group()
@click.version_option(version=__version__, prog_name="playport")
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              default=None, help='Override the configured log level')
@click.pass_context
def cli(ctx: click.Context, log_level: str | None):
    """Move playlists between music streaming services.

    \b
    TYPICAL WORKFLOWS:

    \b
    Run the web front end:
      playport serve               # http://127.0.0.1:8080
      playport redirect-uri        # Value to register with Spotify

    \b
    Try a transfer without any accounts:
      playport providers           # Registered providers
      playport demo-transfer       # Copy a sample playlist mock -> mock

    \b
    Configuration comes from .env and PLAYPORT__* environment variables,
    e.g. PLAYPORT__PROVIDERS__SPOTIFY__CLIENT_ID.
    """
    overrides = {'log_level': log_level.upper()} if log_level else None
    if isinstance(ctx.obj, dict):
        if overrides:
            ctx.obj = {**ctx.obj, **overrides}
    else:
        ctx.obj = load_config(overrides)


def get_app(ctx: click.Context) -> App:
    """Build the application for a command, turning config errors into usage errors."""
    try:
        app = build_app(ctx.obj)
    except ConfigurationError as e:
        raise click.UsageError(str(e))
    ctx.call_on_close(app.close)
    return app


__all__ = ["cli", "get_app"]
