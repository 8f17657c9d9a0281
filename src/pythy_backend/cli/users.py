import click
from pythy_backend.cli.database import database_session
from pythy_backend.model.auth import User
from pythy_backend.repositories.base import DuplicateError
from pythy_backend.repositories.user import UserRepository

@click.command()
@click.option("--email", "-e", "email", prompt=True)
@click.option("--first-name", "-f", "first_name", default=None)
@click.option("--last-name", "-l", "last_name", default=None)
def create_user(email, first_name, last_name):

  with database_session() as db:
    try:
      user = UserRepository(db).create(User(email=email, first_name=first_name, last_name=last_name))
    except DuplicateError:
      raise click.ClickException(f"User {email} already exists")

    click.echo(f"Created {user.email} ({user.id}) with role {user.global_role_id}")
    if user.institution_id is not None:
      click.echo(f"Institution: {user.institution.display_name or user.institution.name}")

@click.command()
@click.argument("query", required=False, default="")
def search_users(query):

  with database_session() as db:
    repository = UserRepository(db)
    users = repository.alphabetical(repository.search(query)).all()

    if len(users) == 0:
      click.echo("No users found")
      return

    for user in users:
      click.echo(f"{user.display_name}\t{user.email}\t{user.global_role_id}")

@click.group()
def users():
    pass

users.add_command(create_user,"create")
users.add_command(search_users,"search")
