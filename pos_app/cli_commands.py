"""
Flask CLI commands for database and admin management.

Commands:
- flask init-db: Create tables and seed defaults
- flask create-admin: Create a new admin user
"""

import click
import re
from flask import current_app
from pos_app.database import db_session
from pos_app.exceptions import PosError
from pos_app.services.auth_service import register_admin
from pos_app.services.setup_service import initialize_database


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create tables and insert the default admin, settings and categories."""
        result = initialize_database(current_app, db_session)
        click.echo(click.style('Database initialized', fg='green', bold=True))
        click.echo(f"   Admins created: {result['admins']}")
        click.echo(f"   Categories created: {result['categories']}")

    @app.cli.command('create-admin')
    @click.option('--email', prompt=True, help='Admin email address')
    @click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Admin password')
    def create_admin(email, password):
        """Create a new admin user for the till."""

        # Validate email format
        email_pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        if not re.match(email_pattern, email):
            click.echo(click.style('Invalid email. Use the format user@example.com', fg='red'))
            return

        # Validate password length
        if len(password) < 6:
            click.echo(click.style('Password must be at least 6 characters long.', fg='red'))
            return

        try:
            admin = register_admin(db_session, email, password)
        except PosError as e:
            click.echo(click.style(f'Could not create admin: {e.message}', fg='red'))
            return

        click.echo(click.style('\nAdmin created successfully!', fg='green', bold=True))
        click.echo(f'   Email: {email}')
        click.echo(f'   ID: {admin.id}')
