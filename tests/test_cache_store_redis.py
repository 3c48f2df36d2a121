import unittest

from weathermon.cache_store import RedisCacheStore


class FakeRedis:
    def __init__(self):
        self.store = {}
        self.expires = {}

    def setex(self, key, ttl, value):
        self.store[key] = value
        self.expires[key] = ttl

    def get(self, key):
        return self.store.get(key)

    def delete(self, key):
        self.store.pop(key, None)
        self.expires.pop(key, None)

    def scan_iter(self, pattern):
        prefix = pattern.rstrip("*")
        return [k for k in list(self.store.keys()) if k.startswith(prefix)]


class BrokenRedis:
    def get(self, key):
        raise ConnectionError("redis down")

    def setex(self, key, ttl, value):
        raise ConnectionError("redis down")

    def delete(self, key):
        raise ConnectionError("redis down")

    def scan_iter(self, pattern):
        raise ConnectionError("redis down")


class TestRedisCacheStore(unittest.TestCase):
    def test_set_uses_setex_with_ttl(self):
        client = FakeRedis()
        store = RedisCacheStore(client)

        self.assertTrue(store.set("weather:Delhi", '{"t": 36.0}', 300))

        self.assertEqual(client.store["weather:Delhi"], b'{"t": 36.0}')
        self.assertEqual(client.expires["weather:Delhi"], 300)
        self.assertEqual(store.get("weather:Delhi"), '{"t": 36.0}')

    def test_prefix_is_applied(self):
        client = FakeRedis()
        store = RedisCacheStore(client, prefix="wm:")
        store.set("forecast:Delhi", "{}", 1800)
        self.assertIn("wm:forecast:Delhi", client.store)
        self.assertEqual(client.expires["wm:forecast:Delhi"], 1800)

    def test_miss_returns_none(self):
        self.assertIsNone(RedisCacheStore(FakeRedis()).get("weather:Delhi"))

    def test_undecodable_bytes_are_a_miss(self):
        client = FakeRedis()
        client.store["weather:Delhi"] = b"\xff\xfe"
        self.assertIsNone(RedisCacheStore(client).get("weather:Delhi"))

    def test_redis_errors_are_swallowed(self):
        store = RedisCacheStore(BrokenRedis(), prefix="wm:")
        self.assertIsNone(store.get("weather:Delhi"))
        self.assertFalse(store.set("weather:Delhi", "{}", 300))
        store.delete("weather:Delhi")
        store.clear()

    def test_clear_removes_prefixed_keys_only(self):
        client = FakeRedis()
        client.store["other:key"] = b"keep"
        store = RedisCacheStore(client, prefix="wm:")
        store.set("weather:Delhi", "{}", 300)
        store.set("weather:Mumbai", "{}", 300)

        store.clear()

        self.assertEqual(list(client.store), ["other:key"])

    def test_clear_without_prefix_is_refused(self):
        client = FakeRedis()
        client.store["other:key"] = b"keep"
        RedisCacheStore(client).clear()
        self.assertIn("other:key", client.store)


if __name__ == "__main__":
    unittest.main()
