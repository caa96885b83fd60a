import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from bref_cli.config import AppConfig, load_config
from bref_cli.errors import ConfigError

_ENV_KEYS = ("AWS_PROFILE", "AWS_REGION", "AWS_DEFAULT_REGION", "BREF_SHORT_URL_ENDPOINT", "BREF_LOG_LEVEL")


class ConfigTests(unittest.TestCase):
    def setUp(self) -> None:
        self._cwd = os.getcwd()
        self._tmp = tempfile.TemporaryDirectory()
        os.chdir(self._tmp.name)
        clean_env = {k: v for k, v in os.environ.items() if k not in _ENV_KEYS}
        self._env = mock.patch.dict(os.environ, clean_env, clear=True)
        self._env.start()

    def tearDown(self) -> None:
        self._env.stop()
        os.chdir(self._cwd)
        self._tmp.cleanup()

    def test_defaults_without_config_file(self) -> None:
        config = load_config()
        self.assertIsInstance(config, AppConfig)
        self.assertIsNone(config.aws.profile)
        self.assertEqual(config.dashboard.image, "bref/dashboard")
        self.assertEqual(config.dashboard.port, 8000)
        self.assertEqual(config.diagnostics.window_hours, 24.0)
        self.assertTrue(config.dashboard.aws_dir.endswith(".aws"))

    def test_loads_custom_config(self) -> None:
        Path("custom.json").write_text(
            """
{
  "aws": {"profile": "work", "region": "eu-west-3"},
  "dashboard": {"port": 9000, "_comment": "ignored"},
  "diagnostics": {"window_hours": 6}
}
""".strip()
        )
        config = load_config("custom.json")
        self.assertEqual(config.aws.profile, "work")
        self.assertEqual(config.aws.region, "eu-west-3")
        self.assertEqual(config.dashboard.port, 9000)
        self.assertEqual(config.dashboard.image, "bref/dashboard")
        self.assertEqual(config.diagnostics.window_hours, 6)

    def test_default_file_in_working_directory(self) -> None:
        Path("bref.json").write_text('{"short_url": {"endpoint": "https://s.example/api"}}')
        config = load_config()
        self.assertEqual(config.short_url.endpoint, "https://s.example/api")

    def test_explicit_missing_file_is_an_error(self) -> None:
        with self.assertRaises(FileNotFoundError):
            load_config("nope.json")

    def test_malformed_json_is_a_config_error(self) -> None:
        Path("bref.json").write_text('{"aws": {"region": ')
        with self.assertRaises(ConfigError):
            load_config()

    def test_unknown_section_key_is_a_config_error(self) -> None:
        Path("bref.json").write_text('{"dashboard": {"colour": "blue"}}')
        with self.assertRaises(ConfigError) as ctx:
            load_config()
        self.assertIn("colour", str(ctx.exception))

    def test_non_object_section_is_a_config_error(self) -> None:
        Path("bref.json").write_text('{"aws": ["eu-west-1"]}')
        with self.assertRaises(ConfigError):
            load_config()

    def test_env_vars_override_file(self) -> None:
        Path("bref.json").write_text('{"aws": {"profile": "file", "region": "us-west-2"}}')
        os.environ["AWS_PROFILE"] = "env-profile"
        os.environ["AWS_DEFAULT_REGION"] = "ca-central-1"
        os.environ["BREF_LOG_LEVEL"] = "debug"
        config = load_config()
        self.assertEqual(config.aws.profile, "env-profile")
        self.assertEqual(config.aws.region, "ca-central-1")
        self.assertEqual(config.logging.level, "DEBUG")

    def test_aws_region_wins_over_default_region(self) -> None:
        os.environ["AWS_REGION"] = "eu-central-1"
        os.environ["AWS_DEFAULT_REGION"] = "us-east-1"
        self.assertEqual(load_config().aws.region, "eu-central-1")


if __name__ == "__main__":
    unittest.main()
