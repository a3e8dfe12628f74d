import click
from flask import current_app

from .utils.security import generate_hash


def register_cli(app):
    @app.cli.command("create-user")
    @click.option("--name", prompt=True)
    @click.option("--email", prompt=True)
    @click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
    def create_user(name, email, password):
        """Create a dashboard user."""
        store = current_app.extensions["store"]
        min_length = current_app.config["PASSWORD_MIN_LENGTH"]
        if len(password) < min_length:
            raise click.BadParameter(f"must be at least {min_length} characters", param_hint="--password")
        try:
            uid = store.create_user(name, email, generate_hash(password))
        except ValueError as e:
            raise click.ClickException(str(e))
        click.echo(f"Created user {email.strip().lower()} ({uid})")
