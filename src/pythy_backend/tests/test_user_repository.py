"""
User repository tests: registration, search and listings.
"""

import pytest

from pythy_backend.model.auth import User
from pythy_backend.repositories.base import DuplicateError, NotFoundError
from pythy_backend.repositories.user import UserRepository


@pytest.fixture
def repository(session):
    repository = UserRepository(session)
    repository.create(User(email="ada@example.edu", first_name="Ada", last_name="Lovelace"))
    repository.create(User(email="alan@example.edu", first_name="Alan", last_name="Turing"))
    repository.create(User(email="grace@navy.mil", first_name="Grace", last_name="Hopper"))
    repository.create(User(email="charles@example.edu", first_name="Charles", last_name="Babbage"))
    return repository


class TestCreate:
    def test_duplicate_email_is_rejected(self, repository):
        with pytest.raises(DuplicateError) as exc_info:
            repository.create(User(email="ada@example.edu"))

        assert exc_info.value.criteria == {"email": "ada@example.edu"}

    def test_find_by_email(self, repository):
        assert repository.find_by_email("alan@example.edu").last_name == "Turing"
        assert repository.find_by_email("nobody@example.edu") is None

    def test_get_by_id(self, repository):
        user = repository.find_by_email("grace@navy.mil")

        assert repository.get_by_id(user.id) is user
        with pytest.raises(NotFoundError):
            repository.get_by_id("missing")


class TestSearch:
    def test_search_matches_email_and_names(self, repository):
        assert [u.email for u in repository.search("navy").all()] == ["grace@navy.mil"]
        assert [u.email for u in repository.search("turing").all()] == ["alan@example.edu"]
        assert [u.email for u in repository.search("ALAN").all()] == ["alan@example.edu"]

    def test_blank_search_returns_everyone(self, repository):
        assert repository.search("  ").count() == 4
        assert repository.search(None).count() == 4

    def test_alphabetical(self, repository):
        users = repository.alphabetical().all()

        assert [u.last_name for u in users] == ["Babbage", "Hopper", "Lovelace", "Turing"]

    def test_alphabetical_search(self, repository):
        users = repository.alphabetical(repository.search("example.edu")).all()

        assert [u.last_name for u in users] == ["Babbage", "Lovelace", "Turing"]

    def test_all_emails(self, repository):
        assert repository.all_emails("a") == ["ada@example.edu", "alan@example.edu"]
        assert len(repository.all_emails()) == 4

    def test_all_emails_ignores_case(self, repository):
        assert repository.all_emails("A") == ["ada@example.edu", "alan@example.edu"]
        assert repository.all_emails("GRACE") == ["grace@navy.mil"]


class TestNames:
    def test_full_name(self):
        assert User(first_name="Ada", last_name="Lovelace").full_name == "Lovelace, Ada"
        assert User(last_name="Lovelace").full_name == "Lovelace"
        assert User(first_name="Ada").full_name == "Ada"
        assert User().full_name is None

    def test_display_name_falls_back_to_email(self):
        assert User(email="ada@example.edu").display_name == "ada@example.edu"
        assert User(email="ada@example.edu", first_name="Ada").display_name == "Ada"

    def test_email_without_domain(self):
        assert User(email="ada@example.edu").email_without_domain == "ada"
