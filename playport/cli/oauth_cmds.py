"""OAuth helper commands."""

from __future__ import annotations
import click

from .helpers import cli, get_app


@cli.command(name="redirect-uri")
@click.pass_context
def redirect_uri(ctx: click.Context):
    """Show OAuth redirect URI for Spotify app configuration."""
    app = get_app(ctx)
    if app.spotify is None:
        raise click.ClickException(
            "Spotify is not configured. Set PLAYPORT__PROVIDERS__SPOTIFY__CLIENT_ID, "
            "PLAYPORT__PROVIDERS__SPOTIFY__CLIENT_SECRET and PLAYPORT__PROVIDERS__SPOTIFY__REDIRECT_URL."
        )
    uri = app.spotify.oauth.redirect_url
    click.echo(uri)
    click.echo("\nValidation checklist:")
    for line in [
        f"1. Spotify Dashboard has EXACT entry: {uri}",
        "2. The path routes to /auth/spotify/callback on the playport server",
        "3. No trailing slash difference (unless you registered with one)",
        "4. Client ID corresponds to the app whose dashboard you edited",
    ]:
        click.echo(f" - {line}")


__all__ = ["redirect_uri"]
