"""
CLI tests using click's CliRunner against the test database.
"""

import pytest
from contextlib import contextmanager
from click.testing import CliRunner

import pythy_backend.cli.cli as cli_module
import pythy_backend.cli.users as users_module
from pythy_backend.cli.cli import cli


@pytest.fixture
def runner(session, monkeypatch):
    @contextmanager
    def database_session():
        yield session

    monkeypatch.setattr(cli_module, "database_session", database_session)
    monkeypatch.setattr(users_module, "database_session", database_session)
    return CliRunner()


class TestCli:
    def test_setup_status_before_first_user(self, runner):
        result = runner.invoke(cli, ["setup-status"])

        assert result.exit_code == 0
        assert "Initial setup required" in result.output

    def test_first_created_user_is_administrator(self, runner):
        result = runner.invoke(cli, ["users", "create", "-e", "ada@example.edu", "-f", "Ada", "-l", "Lovelace"])

        assert result.exit_code == 0
        assert "with role administrator" in result.output

        status = runner.invoke(cli, ["setup-status"])
        assert "Setup complete (1 users)" in status.output

    def test_duplicate_user(self, runner):
        runner.invoke(cli, ["users", "create", "-e", "ada@example.edu"])

        result = runner.invoke(cli, ["users", "create", "-e", "ada@example.edu"])

        assert result.exit_code != 0
        assert "already exists" in result.output

    def test_institution_is_reported(self, runner, hierarchy):
        result = runner.invoke(cli, ["users", "create", "-e", "ada@example.edu"])

        assert "Institution: Example University" in result.output

    def test_search(self, runner):
        runner.invoke(cli, ["users", "create", "-e", "ada@example.edu", "-f", "Ada", "-l", "Lovelace"])
        runner.invoke(cli, ["users", "create", "-e", "alan@example.edu", "-f", "Alan", "-l", "Turing"])

        result = runner.invoke(cli, ["users", "search", "turing"])

        assert result.exit_code == 0
        assert "Turing, Alan" in result.output
        assert "Lovelace" not in result.output

    def test_search_without_matches(self, runner):
        result = runner.invoke(cli, ["users", "search", "nobody"])

        assert "No users found" in result.output

    def test_seed(self, runner):
        result = runner.invoke(cli, ["seed"])

        assert result.exit_code == 0
        assert "Role catalog seeded" in result.output
