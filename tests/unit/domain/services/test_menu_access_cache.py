"""Unit tests for MenuAccessCache."""

import time

from menugate.domain.entities import Identity, RoleLevel
from menugate.domain.services import MenuAccessCache


def make_identity(user_id: str, company_id: int = 1, role: RoleLevel = RoleLevel.USER) -> Identity:
    return Identity(user_id=user_id, role=role, company_id=company_id)


class TestMenuAccessCache:
    """Test suite for MenuAccessCache."""

    def test_cache_initialization(self):
        cache = MenuAccessCache(ttl_seconds=300)
        assert cache.ttl_seconds == 300
        assert cache.size() == 0

    def test_set_and_get(self):
        cache = MenuAccessCache(ttl_seconds=300)
        identity = make_identity("user1")

        cache.set(identity, "resolved-value")

        assert cache.get(identity) == "resolved-value"
        assert cache.get(identity, kind="other") is None

    def test_key_includes_role_and_company(self):
        """The same user with a different role or company misses the cache."""
        cache = MenuAccessCache(ttl_seconds=300)
        cache.set(make_identity("user1"), "value")

        assert cache.get(make_identity("user1", company_id=2)) is None
        assert cache.get(make_identity("user1", role=RoleLevel.ADMIN)) is None

    def test_expiration(self):
        cache = MenuAccessCache(ttl_seconds=1)
        identity = make_identity("user1")
        cache.set(identity, "value")

        assert cache.get(identity) is not None

        time.sleep(1.1)

        assert cache.get(identity) is None

    def test_zero_ttl_disables_caching(self):
        cache = MenuAccessCache(ttl_seconds=0)
        cache.set(make_identity("user1"), "value")

        assert cache.size() == 0

    def test_invalidate_user(self):
        cache = MenuAccessCache(ttl_seconds=300)
        cache.set(make_identity("user1"), "a")
        cache.set(make_identity("user1"), "b", kind="other")
        cache.set(make_identity("user10"), "c")

        cache.invalidate_user("user1")

        assert cache.get(make_identity("user1")) is None
        assert cache.get(make_identity("user10")) == "c"
        assert cache.size() == 1

    def test_invalidate_all(self):
        cache = MenuAccessCache(ttl_seconds=300)
        cache.set(make_identity("user1"), "a")
        cache.set(make_identity("user2"), "b")

        cache.invalidate_all()

        assert cache.size() == 0
