import time
from types import SimpleNamespace

import pytest

from salon_api.core import cache as cache_module
from salon_api.core.cache import Cache, _InMemoryCache, make_key
from salon_api.core.security import (
    create_access_token,
    create_refresh_token,
    get_password_hash,
    verify_password,
    verify_token,
)
from salon_api.core.tenancy import resolve_tenant


class TestResolveTenant:
    @pytest.mark.parametrize(
        "host, expected",
        [
            ("spa1.cxrsystems.com", "spa1"),
            ("Spa1.cxrsystems.com:443", "spa1"),
            ("a.b.cxrsystems.com:8443", "a"),
            ("cxrsystems.com", None),
            ("www.cxrsystems.com", None),
            ("localhost", None),
            ("", None),
            (None, None),
        ],
    )
    def test_hosts(self, host, expected):
        assert resolve_tenant(host) == expected

    def test_localhost_uses_query_parameter(self):
        assert resolve_tenant("localhost:5173", "glow") == "glow"
        assert resolve_tenant("127.0.0.1", None) is None


class TestCache:
    @pytest.fixture
    def cache(self):
        return Cache(default_ttl=60, client=_InMemoryCache())

    def test_composite_keys(self, cache):
        cache.set(("availability", "LOC-1", "2030-01-07", "svc"), {"slots": ["9:00 AM"]})

        assert make_key("availability", "LOC-1", "2030-01-07", "svc") == "availability:LOC-1:2030-01-07:svc"
        assert cache.get("availability:LOC-1:2030-01-07:svc") == {"slots": ["9:00 AM"]}

    def test_missing_key(self, cache):
        assert cache.get(("availability", "nope")) is None

    def test_invalidate_prefix_only_drops_matching_entries(self, cache):
        cache.set(("availability", "LOC-1", "2030-01-07", "a"), 1)
        cache.set(("availability", "LOC-1", "2030-01-08", "b"), 2)
        cache.set(("availability", "LOC-10", "2030-01-07", "a"), 3)

        removed = cache.invalidate_prefix(("availability", "LOC-1"))

        assert removed == 2
        assert cache.get(("availability", "LOC-1", "2030-01-07", "a")) is None
        # LOC-10 shares the text prefix but not the key segment
        assert cache.get(("availability", "LOC-10", "2030-01-07", "a")) == 3

    def test_entries_expire(self, cache, monkeypatch):
        cache.set("key", "value", ttl=10)
        later = time.monotonic() + 11
        monkeypatch.setattr(cache_module, "time", SimpleNamespace(monotonic=lambda: later))

        assert cache.get("key") is None

    def test_delete_and_clear(self, cache):
        cache.set("a", 1)
        cache.set("b", 2)
        cache.delete("a")
        assert cache.get("a") is None

        cache.clear()
        assert cache.get("b") is None


class TestSecurity:
    def test_password_round_trip(self):
        hashed = get_password_hash("correct horse")
        assert verify_password("correct horse", hashed)
        assert not verify_password("wrong horse", hashed)

    def test_token_types_are_not_interchangeable(self):
        refresh = create_refresh_token("user-id")
        assert verify_token(refresh, token_type="refresh")["sub"] == "user-id"
        with pytest.raises(ValueError):
            verify_token(refresh, token_type="access")

    def test_invalid_token(self):
        with pytest.raises(ValueError):
            verify_token("not-a-token")

    def test_access_token_subject(self):
        assert verify_token(create_access_token(42))["sub"] == "42"

    def test_access_token_carries_role(self):
        claims = verify_token(create_access_token("user-id", role="spa"))
        assert claims["role"] == "spa"
        assert "role" not in verify_token(create_refresh_token("user-id"), token_type="refresh")


def test_server_entry_point_runs_the_app(monkeypatch):
    from salon_api import __main__ as entry

    calls = []
    monkeypatch.setattr(entry.uvicorn, "run", lambda app, **options: calls.append((app, options)))

    entry.main()

    assert calls[0][0] == "salon_api.main:app"
    assert calls[0][1]["port"] == entry.settings.PORT
