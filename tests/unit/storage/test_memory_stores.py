from datetime import datetime, timedelta, timezone

import pytest

from storage import DuplicateError, MemoryCredentialStore, MemorySessionStore


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestMemoryCredentialStore:
    def test_defaults(self):
        store = MemoryCredentialStore()
        user = store.create_user(email="a@gymsync.com")
        assert user.user_type == "aluno"
        assert user.is_active
        assert user.created_at is not None

    def test_unique_fields(self):
        store = MemoryCredentialStore()
        user = store.create_user(email="a@gymsync.com", google_id="g-1")
        with pytest.raises(DuplicateError):
            store.create_user(email="a@gymsync.com")
        with pytest.raises(DuplicateError):
            store.create_user(email="b@gymsync.com", google_id="g-1")
        other = store.create_user(email="c@gymsync.com")
        with pytest.raises(DuplicateError):
            store.update_user(other.id, email=user.email)

    def test_upsert_ignores_none(self):
        store = MemoryCredentialStore()
        store.create_user(id="sub", email="a@gymsync.com", user_type="academia")
        user = store.upsert_user("sub", defaults={"user_type": "aluno"}, email=None, last_name="Silva")
        assert user.email == "a@gymsync.com"
        assert user.user_type == "academia"
        assert user.last_name == "Silva"

    def test_reset_token_single_use(self):
        store = MemoryCredentialStore()
        user = store.create_user(email="a@gymsync.com")
        now = datetime.now(timezone.utc)
        store.set_password_reset_token(user.id, "t" * 64, now + timedelta(hours=1))

        assert store.consume_password_reset_token("t" * 64, "h1", now) is not None
        assert store.consume_password_reset_token("t" * 64, "h2", now) is None
        assert store.get_user(user.id).senha_hash == "h1"

    def test_reset_token_expired(self):
        store = MemoryCredentialStore()
        user = store.create_user(email="a@gymsync.com")
        now = datetime.now(timezone.utc)
        store.set_password_reset_token(user.id, "t" * 64, now - timedelta(seconds=1))
        assert store.consume_password_reset_token("t" * 64, "h1", now) is None

    def test_delete_gym_drops_memberships(self):
        store = MemoryCredentialStore()
        user = store.create_user(email="a@gymsync.com")
        gym = store.create_gym(name="A", invite_code="AAA111")
        store.add_membership(user.id, gym.id)
        store.delete_gym(gym.id)
        assert store.list_user_gyms(user.id) == []

    def test_delete_gym_clears_user_references(self):
        store = MemoryCredentialStore()
        gym = store.create_gym(name="A", invite_code="AAA111")
        user = store.create_user(email="a@gymsync.com", gym_id=gym.id, active_gym_id=gym.id)
        store.delete_gym(gym.id)
        assert (store.get_user(user.id).gym_id, store.get_user(user.id).active_gym_id) == (None, None)

    def test_count_ignores_inactive_when_asked(self):
        store = MemoryCredentialStore()
        store.create_user(email="a@gymsync.com", user_type="admin")
        store.create_user(email="b@gymsync.com", user_type="admin", is_active=False)
        assert store.count_users_by_type("admin") == 2
        assert store.count_users_by_type("admin", active_only=True) == 1


class TestMemorySessionStore:
    def test_expiry(self):
        clock = FakeClock()
        sessions = MemorySessionStore(clock=clock)
        sessions.set("sid", {"a": 1}, 10)
        assert sessions.get("sid") == {"a": 1}
        clock.now += 11
        assert sessions.get("sid") is None

    def test_returns_copies(self):
        sessions = MemorySessionStore()
        sessions.set("sid", {"a": 1}, 10)
        data = sessions.get("sid")
        data["a"] = 2
        assert sessions.get("sid") == {"a": 1}

    def test_periodic_prune(self):
        clock = FakeClock()
        sessions = MemorySessionStore(check_period=100, clock=clock)
        sessions.set("old", {"a": 1}, 10)
        clock.now += 101
        sessions.get("other")
        assert len(sessions) == 0
