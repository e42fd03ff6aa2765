"""Tests for resolving federated profiles to local users."""

import pytest

from fedauth.auth.identity_resolver import IdentityResolver
from fedauth.database.models import LinkedIdentityDB, UserDB
from fedauth.exceptions import DuplicateIdentity, NotFound
from fedauth.models.profile import NormalizedProfile


def _profile(provider_id, email="a@example.com", display_name="Alice", picture_url=None):
    return NormalizedProfile(
        provider_id=provider_id,
        email=email,
        display_name=display_name,
        picture_url=picture_url,
    )


@pytest.fixture
def resolver(user_repository):
    return IdentityResolver(user_repository)


class TestIdentityResolver:

    def test_new_email_creates_one_user_with_one_link(self, resolver, db_session):
        user = resolver.resolve(_profile("g1", picture_url="https://img/g1"), "google")

        assert user.email == "a@example.com"
        assert user.display_name == "Alice"
        assert user.picture == "https://img/g1"
        assert user.linked_providers == {"google": "g1"}
        assert db_session.query(UserDB).count() == 1
        assert db_session.query(LinkedIdentityDB).count() == 1

    def test_same_identity_twice_is_idempotent(self, resolver, db_session):
        first = resolver.resolve(_profile("g1"), "google")
        second = resolver.resolve(_profile("g1"), "google")

        assert first.id == second.id
        assert second.linked_providers == {"google": "g1"}
        assert db_session.query(LinkedIdentityDB).count() == 1

    def test_second_provider_same_email_merges(self, resolver, db_session):
        """google:g1 then github:h1 for a@example.com end up on one account."""
        u1 = resolver.resolve(_profile("g1", display_name="Alice G"), "google")
        merged = resolver.resolve(
            _profile("h1", email="a@example.com", display_name="alice-gh", picture_url="https://img/h1"),
            "github",
        )

        assert merged.id == u1.id
        assert merged.linked_providers == {"google": "g1", "github": "h1"}
        # Existing values win; only empty fields are filled.
        assert merged.display_name == "Alice G"
        assert merged.email == "a@example.com"
        assert merged.picture == "https://img/h1"
        assert db_session.query(UserDB).count() == 1

    def test_email_match_is_case_insensitive(self, resolver):
        u1 = resolver.resolve(_profile("g1", email="a@example.com"), "google")
        merged = resolver.resolve(_profile("h1", email="A@Example.COM"), "github")

        assert merged.id == u1.id

    def test_repeat_login_does_not_refresh_profile(self, resolver):
        resolver.resolve(_profile("g1", display_name="Old Name", picture_url="https://img/old"), "google")
        again = resolver.resolve(
            _profile("g1", display_name="New Name", picture_url="https://img/new"),
            "google",
        )

        assert again.display_name == "Old Name"
        assert again.picture == "https://img/old"

    def test_new_provider_id_overwrites_existing_link(self, resolver):
        resolver.resolve(_profile("g1"), "google")
        updated = resolver.resolve(_profile("g2"), "google")

        assert updated.linked_providers == {"google": "g2"}

    def test_profile_without_email_creates_user(self, resolver, user_repository):
        # A local account exists, but no email means nothing to match it by.
        user_repository.create(email="a@example.com", display_name="Alice")

        user = resolver.resolve(_profile("t1", email=None, display_name="tw"), "twitter")

        assert user.email is None
        assert user.linked_providers == {"twitter": "t1"}

    def test_profile_without_email_found_again_by_identity(self, resolver, db_session):
        first = resolver.resolve(_profile("t1", email=None), "twitter")
        second = resolver.resolve(_profile("t1", email=None), "twitter")

        assert first.id == second.id
        assert db_session.query(UserDB).count() == 1

    def test_caller_is_target_regardless_of_email(self, resolver, user_repository):
        caller = user_repository.create(email="me@example.com", display_name="Me")

        linked = resolver.resolve(
            _profile("h1", email="someone-else@example.com", display_name="gh"),
            "github",
            caller_user_id=caller.id,
        )

        assert linked.id == caller.id
        assert linked.email == "me@example.com"
        assert linked.display_name == "Me"
        assert linked.linked_providers == {"github": "h1"}

    def test_caller_fills_missing_email_when_unclaimed(self, resolver):
        caller = resolver.resolve(_profile("t1", email=None), "twitter")

        linked = resolver.resolve(_profile("g1", email="a@example.com"), "google", caller_user_id=caller.id)

        assert linked.email == "a@example.com"
        assert linked.linked_providers == {"twitter": "t1", "google": "g1"}

    def test_caller_does_not_take_email_owned_by_another_user(self, resolver, user_repository):
        user_repository.create(email="a@example.com")
        caller = resolver.resolve(_profile("t1", email=None), "twitter")

        linked = resolver.resolve(_profile("g1", email="a@example.com"), "google", caller_user_id=caller.id)

        assert linked.email is None
        assert linked.linked_providers == {"twitter": "t1", "google": "g1"}

    def test_unknown_caller_raises_not_found(self, resolver):
        with pytest.raises(NotFound):
            resolver.resolve(_profile("g1"), "google", caller_user_id="missing-user")

    def test_identity_linked_elsewhere_cannot_be_claimed(self, resolver, user_repository):
        resolver.resolve(_profile("g1", email="a@example.com"), "google")
        other = user_repository.create(email="b@example.com")

        with pytest.raises(DuplicateIdentity):
            resolver.resolve(_profile("g1", email="a@example.com"), "google", caller_user_id=other.id)

    def test_concurrent_create_is_retried_as_merge(self, resolver, user_repository, monkeypatch):
        """Another request created the email between our lookup and insert."""
        winner = user_repository.create(email="a@example.com", display_name="Winner")

        real_lookup = user_repository.get_row_by_email
        calls = {"count": 0}

        def stale_first_lookup(email, for_update=False):
            calls["count"] += 1
            if calls["count"] == 1:
                return None
            return real_lookup(email, for_update=for_update)

        monkeypatch.setattr(user_repository, "get_row_by_email", stale_first_lookup)

        user = resolver.resolve(_profile("g1", email="a@example.com"), "google")

        assert user.id == winner.id
        assert user.linked_providers == {"google": "g1"}
        assert user_repository.get_by_email("a@example.com").id == winner.id

    def test_persistent_conflict_raises_duplicate_identity(self, user_repository, monkeypatch):
        user_repository.create(email="a@example.com")
        monkeypatch.setattr(user_repository, "get_row_by_email", lambda email, for_update=False: None)
        resolver = IdentityResolver(user_repository, max_attempts=2)

        with pytest.raises(DuplicateIdentity):
            resolver.resolve(_profile("g1", email="a@example.com"), "google")
