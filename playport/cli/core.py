"""Core CLI commands: the web front end, provider listing and a demo transfer."""

from __future__ import annotations
import click
import logging

from .helpers import cli, get_app
from ..errors import PlayPortError
from ..web import create_server

logger = logging.getLogger(__name__)


@cli.command()
@click.option('--host', default=None, help='Bind address (overrides PLAYPORT__SERVER__HOST)')
@click.option('--port', type=int, default=None, help='Bind port (overrides PLAYPORT__SERVER__PORT)')
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None):
    """Run the HTTP front end until interrupted."""
    app = get_app(ctx)
    host = host or app.config.server.host
    port = app.config.server.port if port is None else port
    try:
        server = create_server(app, host, port)
    except OSError as e:
        raise click.ClickException(f"Cannot bind {host}:{port}: {e}")
    bound_host, bound_port = server.server_address[:2]
    click.echo(click.style(f"playport listening on http://{bound_host}:{bound_port}", fg="cyan", bold=True))
    if not app.spotify_enabled:
        click.echo("Spotify disabled (set PLAYPORT__PROVIDERS__SPOTIFY__CLIENT_ID, CLIENT_SECRET and REDIRECT_URL)")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        click.echo("\nShutting down")
    finally:
        server.server_close()


@cli.command()
@click.pass_context
def providers(ctx: click.Context):
    """List registered providers and their capabilities."""
    app = get_app(ctx)
    service = app.transfer_service
    names = service.list_providers()
    if not names:
        click.echo("No providers registered")
        return
    for name in names:
        caps = service.get_provider(name).capabilities
        flags = [
            "import" if caps.import_playlists else "export-only",
            "isrc" if caps.supports_isrc else "no-isrc",
        ]
        if caps.paginated:
            flags.append("paginated")
        click.echo(f"{name:<10} {', '.join(flags)}")


@cli.command(name="demo-transfer")
@click.option('--playlist-id', default='mock-1', show_default=True, help='Playlist to copy')
@click.option('--source', default='mock', show_default=True, help='Source provider name')
@click.option('--target', default='mock', show_default=True, help='Target provider name')
@click.pass_context
def demo_transfer(ctx: click.Context, playlist_id: str, source: str, target: str):
    """Copy a playlist between registered providers and print the outcome.

    With the defaults this copies a sample playlist within the built-in mock
    provider, so it works without any streaming accounts.
    """
    app = get_app(ctx)
    try:
        result = app.transfer_service.transfer_playlist(source, target, playlist_id)
    except PlayPortError as e:
        logger.debug(f"Transfer failed: {e!r}")
        raise click.ClickException(str(e))
    click.echo(
        f"Transferred '{result.playlist_name}' ({result.track_count} tracks) "
        f"from {result.source_provider} to {result.target_provider} as {result.imported_playlist_id}"
    )
    logger.debug(f"Completed in {result.duration_seconds:.2f}s")


__all__ = ["serve", "providers", "demo_transfer"]
