import unittest

from rental_backend.kv_store import InMemoryKvStore, SqlKvStore, profile_key, settings_key


class SqlKvStoreTests(unittest.TestCase):
    """
    Uses SQLite via SQLAlchemy URL for fast/local testing of the SQL store.
    """

    @classmethod
    def setUpClass(cls):
        cls.kv = SqlKvStore("sqlite+pysqlite:///:memory:")

    def test_missing_key(self):
        self.assertIsNone(self.kv.get("user_profile:nobody"))

    def test_set_and_get(self):
        self.kv.set("user_profile:1", {"name": "Alice", "avatar": None})
        self.assertEqual(
            self.kv.get("user_profile:1"), {"name": "Alice", "avatar": None}
        )

    def test_overwrite(self):
        self.kv.set("user_settings:1", {"darkMode": False})
        self.kv.set("user_settings:1", {"darkMode": True})
        self.assertEqual(self.kv.get("user_settings:1"), {"darkMode": True})

    def test_delete(self):
        self.kv.set("user_settings:2", {"darkMode": False})
        self.kv.delete("user_settings:2")
        self.assertIsNone(self.kv.get("user_settings:2"))
        # Deleting again is harmless.
        self.kv.delete("user_settings:2")

    def test_rejects_empty_url(self):
        with self.assertRaises(ValueError):
            SqlKvStore("")


class InMemoryKvStoreTests(unittest.TestCase):
    def test_values_are_copied(self):
        kv = InMemoryKvStore()
        value = {"name": "Alice"}
        kv.set("k", value)
        value["name"] = "Mallory"
        loaded = kv.get("k")
        self.assertEqual(loaded, {"name": "Alice"})
        loaded["name"] = "Eve"
        self.assertEqual(kv.get("k"), {"name": "Alice"})

    def test_reset(self):
        kv = InMemoryKvStore()
        kv.set("k", {"a": 1})
        kv.reset()
        self.assertIsNone(kv.get("k"))

    def test_key_helpers(self):
        self.assertEqual(profile_key("u1"), "user_profile:u1")
        self.assertEqual(settings_key("u1"), "user_settings:u1")


if __name__ == "__main__":
    unittest.main()
