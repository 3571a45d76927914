"""CLI commands for user accounts"""
import click
from flask.cli import with_appcontext
from pos import db
from pos.auth.user import User

@click.group('users')
def users_cli():
    """User account commands."""
    pass

@users_cli.command('create')
@click.argument('email')
@click.argument('username')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--role', 'roles', multiple=True, help='Role to assign, may be repeated.')
@click.option('--admin', is_flag=True, help='Create a system administrator.')
@with_appcontext
def create_user(email, username, password, roles, admin):
    """Create a user account."""
    if User.query.filter((User.username == username) | (User.email == email)).first():
        raise click.ClickException(f"User '{username}' or '{email}' already exists.")

    try:
        user = User.create_user(email=email, username=username, password=password,
                                roles=list(roles), is_system_admin=admin)
    except ValueError as e:
        db.session.rollback()
        raise click.ClickException(str(e))

    role_names = ', '.join(role.name for role in user.roles) or 'none'
    click.echo(f"User '{user.username}' created with roles: {role_names}.")
