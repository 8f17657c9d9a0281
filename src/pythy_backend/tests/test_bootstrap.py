"""
First-user bootstrap and setup mode tests.
"""

import logging
import pytest
from unittest.mock import MagicMock
from sqlalchemy import insert

from pythy_backend.model.auth import BootstrapClaim, User
from pythy_backend.permissions.bootstrap import BootstrapPolicy
from pythy_backend.permissions.errors import ConfigurationError
from pythy_backend.repositories.user import UserRepository


class TestSetupMode:
    def test_empty_system_needs_setup(self, session):
        assert BootstrapPolicy(session).needs_initial_setup() is True

    def test_setup_ends_with_first_user(self, session):
        UserRepository(session).create(User(email="first@example.edu"))

        policy = BootstrapPolicy(session)
        assert policy.needs_initial_setup() is False
        assert policy.user_count() == 1


class TestInitialRole:
    def test_first_user_becomes_administrator(self, session):
        user = UserRepository(session).create(User(email="first@example.edu"))

        assert user.global_role_id == "administrator"

    def test_later_users_are_regular_users(self, session):
        repository = UserRepository(session)
        repository.create(User(email="first@example.edu"))

        second = repository.create(User(email="second@example.edu"))
        third = repository.create(User(email="third@example.edu"))

        assert second.global_role_id == "regular_user"
        assert third.global_role_id == "regular_user"

    def test_first_user_is_logged(self, session, caplog):
        with caplog.at_level(logging.INFO, logger="pythy_backend.permissions.bootstrap"):
            UserRepository(session).create(User(email="first@example.edu"))

        assert "first@example.edu as administrator" in caplog.text

    def test_unserialized_concurrent_creation_can_yield_two_administrators(self, session):
        # Both decisions happen before either row is flushed
        policy = BootstrapPolicy(session, serialize=False)
        first = User(email="a@example.edu")
        second = User(email="b@example.edu")

        policy.assign_initial_role(first)
        policy.assign_initial_role(second)

        assert first.global_role.id == "administrator"
        assert second.global_role.id == "administrator"

    def test_missing_seed_is_configuration_error(self):
        db = MagicMock()
        db.query.return_value.count.return_value = 3
        db.get.return_value = None

        with pytest.raises(ConfigurationError):
            BootstrapPolicy(db, serialize=False).assign_initial_role(User(email="x@example.edu"))


class TestSerializedBootstrap:
    def test_claim_is_recorded(self, session):
        repository = UserRepository(session, bootstrap=BootstrapPolicy(session, serialize=True))

        user = repository.create(User(email="first@example.edu"))

        claim = session.get(BootstrapClaim, 1)
        assert user.global_role_id == "administrator"
        assert claim.email == "first@example.edu"
        assert claim.user_id == user.id

    def test_loser_of_the_claim_is_demoted(self, session, caplog):
        UserRepository(session, bootstrap=BootstrapPolicy(session, serialize=True)).create(
            User(email="winner@example.edu")
        )
        session.expunge_all()

        # User count read before the winner's transaction became visible
        policy = BootstrapPolicy(session, serialize=True)
        policy.user_count = lambda: 0
        with caplog.at_level(logging.WARNING, logger="pythy_backend.permissions.bootstrap"):
            user = UserRepository(session, bootstrap=policy).create(User(email="loser@example.edu"))

        assert user.global_role_id == "regular_user"
        assert "Bootstrap already claimed" in caplog.text
        assert session.get(BootstrapClaim, 1).email == "winner@example.edu"

    def test_serialized_policy_ignores_later_users(self, session):
        repository = UserRepository(session, bootstrap=BootstrapPolicy(session, serialize=True))
        repository.create(User(email="first@example.edu"))

        second = repository.create(User(email="second@example.edu"))

        assert second.global_role_id == "regular_user"
        assert session.query(BootstrapClaim).count() == 1

    def test_emptied_user_table_bootstraps_again(self, session):
        repository = UserRepository(session, bootstrap=BootstrapPolicy(session, serialize=True))
        first = repository.create(User(email="first@example.edu"))
        session.delete(first)
        session.commit()
        assert BootstrapPolicy(session).needs_initial_setup() is True

        again = repository.create(User(email="again@example.edu"))

        assert again.global_role_id == "administrator"
        assert session.query(BootstrapClaim).count() == 1
        assert session.get(BootstrapClaim, 1).user_id == again.id

    def test_claim_without_user_is_discarded(self, session):
        session.execute(insert(BootstrapClaim).values(id=1, user_id="deleted-user", email="gone@example.edu"))
        session.commit()

        user = UserRepository(session, bootstrap=BootstrapPolicy(session, serialize=True)).create(
            User(email="first@example.edu")
        )

        assert user.global_role_id == "administrator"
        assert session.get(BootstrapClaim, 1).email == "first@example.edu"
