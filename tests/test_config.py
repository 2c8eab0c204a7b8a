import unittest

from herald.config import Config


class TestConfig(unittest.TestCase):
    def test_defaults(self):
        config = Config.from_environ({})
        self.assertEqual(config, Config())
        self.assertTrue(config.allows("a" * 40))

    def test_from_environ(self):
        config = Config.from_environ(
            {
                "ALLOWED_INFO_HASHES": "AAAA, bbbb,,",
                "PATH_KEY": "secret",
                "DD_API_KEY": "key",
                "CLIENT_IP_HEADER": "CF-Connecting-IP",
                "FAILURE_CODES": "true",
                "SWEEP_INTERVAL": "60",
            }
        )
        self.assertEqual(config.allowed_info_hashes, frozenset({"aaaa", "bbbb"}))
        self.assertEqual(config.path_key, "secret")
        self.assertEqual(config.dd_api_key, "key")
        self.assertEqual(config.client_ip_header, "CF-Connecting-IP")
        self.assertTrue(config.failure_codes)
        self.assertEqual(config.sweep_interval, 60.0)

    def test_allows(self):
        config = Config(allowed_info_hashes=frozenset({"ab"}))
        self.assertTrue(config.allows("ab"))
        self.assertTrue(config.allows("AB"))
        self.assertFalse(config.allows("cd"))

    def test_empty_values(self):
        config = Config.from_environ({"ALLOWED_INFO_HASHES": " ", "PATH_KEY": "", "FAILURE_CODES": "0"})
        self.assertEqual(config, Config())

    def test_invalid_sweep_interval(self):
        with self.assertRaises(ValueError):
            Config.from_environ({"SWEEP_INTERVAL": "soon"})
