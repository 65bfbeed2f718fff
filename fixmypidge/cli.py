"""CLI tools for FixMyPidge administration."""

import click

from fixmypidge.core.security import create_session_token


@click.group()
def cli():
    """FixMyPidge CLI tools."""
    pass


@cli.command()
def init_db():
    """
    Create all tables directly from the models.

    For local development only; deployed databases are managed by Alembic:
        alembic upgrade head
    """
    from fixmypidge.db.base import Base
    from fixmypidge.db import models  # noqa: F401
    from fixmypidge.db.session import engine

    Base.metadata.create_all(engine)
    click.echo("✓ Tables created")


@cli.command()
@click.option("--user-id", required=True, help="Citizen identifier to embed in the token")
@click.option("--hours", default=None, type=int, help="Lifetime in hours (default: JWT_EXPIRES_HOURS)")
def mint_token(user_id: str, hours: int | None):
    """
    Print a session token for a citizen.

    Example:
        python -m fixmypidge.cli mint-token --user-id citizen-42
    """
    if not user_id.strip():
        raise click.BadParameter("must not be blank", param_hint="--user-id")
    click.echo(create_session_token(user_id.strip(), expires_hours=hours))


if __name__ == "__main__":
    cli()
