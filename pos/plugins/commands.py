"""CLI commands for the point of sale plugin and plugin management"""
import click
from flask import current_app
from flask.cli import with_appcontext
from pos.auth.commands import users_cli
from pos.core.views import installation_status
from pos.installer import Installer
from pos.jobs.queue import get_job_queue
from pos.plugins.plugin_manager import PluginManager
from pos.plugins.plugin import Plugin, PluginStatus

@click.group('pos')
def pos_cli():
    """Point of sale commands."""
    pass

@pos_cli.command('install')
@with_appcontext
def install():
    """Run the point of sale installer."""
    try:
        Installer.from_app(current_app).run()
    except Exception as e:
        raise click.ClickException(f"Installation failed: {str(e)}")
    click.echo("Point of sale installed.")

@pos_cli.command('status')
@with_appcontext
def status():
    """Show the installation record and next daily run."""
    info = installation_status()
    click.echo(f"Installed: {info['installed'] or 'never'}")
    click.echo(f"Version: {info['version'] or 'unknown'}")
    click.echo(f"Next daily run: {info['next_daily_run'] or 'not scheduled'}")

@pos_cli.command('run-jobs')
@with_appcontext
def run_jobs():
    """Run scheduled actions that are due."""
    queue = get_job_queue()
    if queue is None:
        click.echo("Job queue is not enabled.")
        return

    run_ids = queue.run_due()
    click.echo(f"Ran {len(run_ids)} due action(s).")

@click.group('plugins')
def plugins_cli():
    """Plugin management commands."""
    pass

@plugins_cli.command('register')
@with_appcontext
def register_plugins():
    """Register the built-in plugins."""
    plugins = PluginManager().register_builtin_plugins()
    click.echo(f"Registered {len(plugins)} plugins.")
    for plugin in plugins:
        click.echo(f" - {plugin.name} ({plugin.slug})")

@plugins_cli.command('add')
@click.argument('slug')
@click.option('--name', default=None, help='Display name, defaults to the slug.')
@click.option('--version', 'version', default='1.0.0', show_default=True)
@with_appcontext
def add_plugin(slug, name, version):
    """Register a plugin that has no code of its own."""
    plugin = Plugin.register_plugin(name=name or slug, slug=slug, version=version)
    click.echo(f"Plugin '{plugin.slug}' registered with status {plugin.status}.")

@plugins_cli.command('list')
@with_appcontext
def list_plugins():
    """List all registered plugins."""
    plugins = Plugin.query.order_by(Plugin.slug).all()
    click.echo(f"Found {len(plugins)} registered plugins:")
    for plugin in plugins:
        click.echo(f" - {plugin.name} ({plugin.slug}): {plugin.status}")

@plugins_cli.command('activate')
@click.argument('slug')
@with_appcontext
def activate_plugin(slug):
    """Activate a plugin."""
    if not PluginManager().activate_plugin(slug):
        raise click.ClickException(f"Failed to activate plugin '{slug}'.")
    click.echo(f"Plugin '{slug}' activated successfully.")

@plugins_cli.command('deactivate')
@click.argument('slug')
@with_appcontext
def deactivate_plugin(slug):
    """Deactivate a plugin."""
    plugin = Plugin.query.filter_by(slug=slug).first()
    if plugin and plugin.status != PluginStatus.ACTIVE.value:
        click.echo(f"Plugin '{slug}' is not active.")
        return

    if not PluginManager().deactivate_plugin(slug):
        raise click.ClickException(f"Failed to deactivate plugin '{slug}'.")
    click.echo(f"Plugin '{slug}' deactivated successfully.")

def register_commands(app):
    """Register point of sale, plugin and user commands with Flask."""
    app.cli.add_command(pos_cli)
    app.cli.add_command(plugins_cli)
    app.cli.add_command(users_cli)
