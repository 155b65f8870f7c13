"""Tests for src/linkmap_mcp/store.py: namespaced key-value store.

Covers put/get/list/delete, prefix listing order, namespace isolation,
TTL expiry, purge mechanics and key validation.
"""

import time
from unittest.mock import patch

import pytest

from linkmap_mcp.store import KVStore


class TestBasics:
    def test_put_and_get(self, store):
        store.put("favorites", ["u1", "f1"], {"title": "A", "links": ["https://a.com"]})
        assert store.get("favorites", ["u1", "f1"]) == {
            "title": "A",
            "links": ["https://a.com"],
        }

    def test_get_missing(self, store):
        assert store.get("favorites", ["u1", "nope"]) is None

    def test_put_replaces(self, store):
        store.put("favorites", ["u1", "f1"], {"v": 1})
        store.put("favorites", ["u1", "f1"], {"v": 2})
        assert store.get("favorites", ["u1", "f1"]) == {"v": 2}
        assert len(store.list("favorites", ["u1"])) == 1

    def test_unicode_values(self, store):
        store.put("favorites", ["u1", "f1"], {"title": "文档"})
        assert store.get("favorites", ["u1", "f1"])["title"] == "文档"

    def test_delete(self, store):
        store.put("favorites", ["u1", "f1"], {"v": 1})
        assert store.delete("favorites", ["u1", "f1"]) is True
        assert store.get("favorites", ["u1", "f1"]) is None
        assert store.delete("favorites", ["u1", "f1"]) is False

    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "persist.db"
        first = KVStore(path)
        first.put("favorites", ["u1", "f1"], {"v": 1})
        first.close()

        second = KVStore(path)
        assert second.get("favorites", ["u1", "f1"]) == {"v": 1}
        second.close()


class TestList:
    def test_prefix_and_order(self, store):
        store.put("favorites", ["u1", "b"], {"id": "b"})
        store.put("favorites", ["u1", "a"], {"id": "a"})
        store.put("favorites", ["u2", "c"], {"id": "c"})
        assert [v["id"] for v in store.list("favorites", ["u1"])] == ["a", "b"]

    def test_prefix_does_not_match_longer_ids(self, store):
        store.put("favorites", ["u1", "x"], {"id": "x"})
        store.put("favorites", ["u10", "y"], {"id": "y"})
        assert [v["id"] for v in store.list("favorites", ["u1"])] == ["x"]

    def test_whole_namespace(self, store):
        store.put("favorites", ["u1", "a"], {"id": "a"})
        store.put("docsearch", ["u1", "acme"], {"id": "d"})
        assert [v["id"] for v in store.list("favorites")] == ["a"]

    def test_namespaces_isolated(self, store):
        store.put("favorites", ["u1", "k"], {"ns": "fav"})
        store.put("docsearch", ["u1", "k"], {"ns": "doc"})
        assert store.get("favorites", ["u1", "k"]) == {"ns": "fav"}
        assert store.get("docsearch", ["u1", "k"]) == {"ns": "doc"}


class TestExpiry:
    def test_expired_entries_invisible(self, store):
        store.put("docsearch", ["u1", "acme"], {"v": 1}, ttl=10)
        assert store.get("docsearch", ["u1", "acme"]) == {"v": 1}

        with patch("linkmap_mcp.store.time.time", return_value=time.time() + 11):
            assert store.get("docsearch", ["u1", "acme"]) is None
            assert store.list("docsearch", ["u1"]) == []

    def test_purge_removes_expired(self, store):
        store.put("docsearch", ["u1", "old"], {"v": 1}, ttl=-1)
        store.put("favorites", ["u1", "keep"], {"v": 2})
        store._purge_expired()
        count = store._conn.execute("SELECT COUNT(*) FROM kv_store").fetchone()[0]
        assert count == 1

    def test_periodic_purge(self, store):
        with patch("linkmap_mcp.store._PURGE_INTERVAL", 2):
            with patch.object(store, "_purge_expired") as mock_purge:
                store.put("favorites", ["u", "1"], {})
                mock_purge.assert_not_called()
                store.put("favorites", ["u", "2"], {})
                mock_purge.assert_called_once()


class TestKeys:
    def test_empty_key_rejected(self, store):
        with pytest.raises(ValueError):
            store.put("favorites", [], {})

    def test_separator_rejected(self, store):
        with pytest.raises(ValueError):
            store.put("favorites", ["u1\x1fx", "f"], {})
