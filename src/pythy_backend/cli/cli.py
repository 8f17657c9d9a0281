import click
from pythy_backend.cli.database import database_session
from pythy_backend.cli.users import users
from pythy_backend.permissions.bootstrap import BootstrapPolicy
from pythy_backend.permissions.catalog import role_catalog

@click.command()
def seed():
    """Create the schema and seed the built-in roles"""
    with database_session() as db:
      role_catalog.seed(db)
    click.echo("Role catalog seeded")

@click.command()
def setup_status():
    with database_session() as db:
      policy = BootstrapPolicy(db)
      if policy.needs_initial_setup():
        click.echo("Initial setup required: the first user to register becomes administrator")
      else:
        click.echo(f"Setup complete ({policy.user_count()} users)")

@click.group()
def cli():
    pass

cli.add_command(seed,"seed")
cli.add_command(setup_status,"setup-status")
cli.add_command(users,"users")

if __name__ == '__main__':
    cli()
