import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from pydantic import ValidationError

from remote_config.config import ConfigLoadRequest, YamlConfigLoader

_PREFIX = "RCTEST__"


class YamlConfigLoaderTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.yaml_path = self.root / "config.yaml"
        self.env = mock.patch.dict(os.environ, {})
        self.env.start()

    def tearDown(self) -> None:
        self.env.stop()
        self._tmp.cleanup()

    async def _load(self, yaml_text: str, *, dotenv_path: str | None = None):
        self.yaml_path.write_text(yaml_text, encoding="utf-8")
        request = ConfigLoadRequest(yaml_path=str(self.yaml_path), env_prefix=_PREFIX, dotenv_path=dotenv_path)
        return await YamlConfigLoader().load(request)

    async def test_yaml_values_merge_over_defaults(self) -> None:
        config = await self._load("client:\n  service: https://cfg.example.com\n  application: billing\n")
        self.assertEqual(config.client.service, "https://cfg.example.com")
        self.assertEqual(config.client.application, "billing")
        self.assertEqual(config.client.label, "master")
        self.assertIsNone(config.client.timeout_seconds)
        self.assertEqual(config.logging.level, "INFO")

    async def test_empty_yaml_yields_defaults(self) -> None:
        config = await self._load("client:\n")
        self.assertEqual(config.client.label, "master")
        self.assertIsNone(config.logging.file)

    async def test_nested_file_logging_settings(self) -> None:
        config = await self._load("logging:\n  file:\n    path: logs/client.log\n")
        self.assertEqual(config.logging.file.path, "logs/client.log")
        self.assertEqual(config.logging.file.rotation.backup_count, 5)

    async def test_service_trailing_slash_is_dropped(self) -> None:
        config = await self._load("client:\n  service: http://cfg/root/\n")
        self.assertEqual(config.client.service, "http://cfg/root")

    async def test_service_without_http_scheme_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            await self._load("client:\n  service: cfg.example.com\n")

    async def test_document_name_with_slash_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            await self._load("client:\n  application: shop/admin\n")

    async def test_env_override_replaces_yaml_value(self) -> None:
        os.environ[f"{_PREFIX}CLIENT__LABEL"] = "prod"
        os.environ[f"{_PREFIX}LOGGING__LEVEL"] = "DEBUG"
        config = await self._load("client:\n  label: dev\n  application: shop\n")
        self.assertEqual(config.client.label, "prod")
        self.assertEqual(config.client.application, "shop")
        self.assertEqual(config.logging.level, "DEBUG")

    async def test_env_override_parses_timeout(self) -> None:
        os.environ[f"{_PREFIX}CLIENT__TIMEOUT_SECONDS"] = "2.5"
        config = await self._load("")
        self.assertEqual(config.client.timeout_seconds, 2.5)

    async def test_empty_timeout_override_disables_timeout(self) -> None:
        os.environ[f"{_PREFIX}CLIENT__TIMEOUT_SECONDS"] = ""
        config = await self._load("client:\n  timeout_seconds: 10\n")
        self.assertIsNone(config.client.timeout_seconds)

    async def test_non_positive_timeout_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            await self._load("client:\n  timeout_seconds: 0\n")

    async def test_settings_from_environment_only(self) -> None:
        os.environ[f"{_PREFIX}CLIENT__SERVICE"] = "https://cfg.internal"
        os.environ[f"{_PREFIX}CLIENT__APPLICATION"] = "orders"
        request = ConfigLoadRequest(yaml_path=None, env_prefix=_PREFIX, dotenv_path=None)
        config = await YamlConfigLoader().load(request)
        self.assertEqual(config.client.service, "https://cfg.internal")
        self.assertEqual(config.client.application, "orders")

    async def test_dotenv_feeds_env_overrides(self) -> None:
        dotenv = self.root / ".env"
        dotenv.write_text(f"{_PREFIX}CLIENT__APPLICATION=orders\n", encoding="utf-8")
        config = await self._load("", dotenv_path=str(dotenv))
        self.assertEqual(config.client.application, "orders")

    async def test_missing_dotenv_is_ignored(self) -> None:
        config = await self._load("", dotenv_path=str(self.root / "missing.env"))
        self.assertEqual(config.client.application, "application")

    async def test_unsupported_override_is_rejected(self) -> None:
        os.environ[f"{_PREFIX}CLIENT__PROFILE"] = "x"
        with self.assertRaises(KeyError) as ctx:
            await self._load("")
        self.assertIn(f"{_PREFIX}CLIENT__LABEL", str(ctx.exception))

    async def test_missing_yaml_raises(self) -> None:
        request = ConfigLoadRequest(yaml_path=str(self.root / "absent.yaml"), env_prefix=_PREFIX, dotenv_path=None)
        with self.assertRaises(FileNotFoundError):
            await YamlConfigLoader().load(request)

    async def test_non_mapping_yaml_raises(self) -> None:
        with self.assertRaises(ValueError):
            await self._load("- a\n- b\n")


if __name__ == "__main__":
    unittest.main()
