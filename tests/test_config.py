import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from pages_deployer.config import AppConfig, load_config


class ConfigTests(unittest.TestCase):
    def test_defaults_without_config_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp, mock.patch.dict(os.environ, {}, clear=True):
            cwd = os.getcwd()
            os.chdir(tmp)
            try:
                config = load_config()
            finally:
                os.chdir(cwd)
        self.assertIsInstance(config, AppConfig)
        self.assertEqual(config.deploy.branch, "gh-pages")
        self.assertEqual(config.deploy.cleanup_timeout, 30.0)
        self.assertEqual(config.git.command_timeout, 60.0)
        self.assertEqual(config.retry.max_attempts, 3)
        self.assertIsNone(config.github.token)

    def test_loads_custom_config(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text(
                json.dumps(
                    {
                        "deploy": {"branch": "pages", "_comment": "ignored"},
                        "retry": {"max_attempts": 5},
                        "git": {"binary": "/usr/local/bin/git"},
                    }
                ),
                encoding="utf-8",
            )
            with mock.patch.dict(os.environ, {}, clear=True):
                config = load_config(str(path))
        self.assertEqual(config.deploy.branch, "pages")
        self.assertEqual(config.deploy.remote, "origin")
        self.assertEqual(config.retry.max_attempts, 5)
        self.assertEqual(config.git.binary, "/usr/local/bin/git")

    def test_missing_explicit_config_raises(self) -> None:
        with self.assertRaises(FileNotFoundError):
            load_config("/nonexistent/pages_deployer.json")

    def test_env_vars_override_file(self) -> None:
        env = {
            "PAGES_DEPLOYER_BRANCH": "site",
            "PAGES_DEPLOYER_REMOTE_URL": "https://github.com/alice/blog.git",
            "PAGES_DEPLOYER_MAX_RETRIES": "7",
            "GITHUB_TOKEN": "token-from-env",
        }
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text(json.dumps({"deploy": {"branch": "pages"}}), encoding="utf-8")
            with mock.patch.dict(os.environ, env, clear=True):
                config = load_config(str(path))
        self.assertEqual(config.deploy.branch, "site")
        self.assertEqual(config.deploy.remote_url, "https://github.com/alice/blog.git")
        self.assertEqual(config.retry.max_attempts, 7)
        self.assertEqual(config.github.token, "token-from-env")

    def test_specific_token_wins_over_generic(self) -> None:
        env = {"PAGES_DEPLOYER_GITHUB_TOKEN": "specific", "GITHUB_TOKEN": "generic"}
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text("{}", encoding="utf-8")
            with mock.patch.dict(os.environ, env, clear=True):
                config = load_config(str(path))
        self.assertEqual(config.github.token, "specific")


if __name__ == "__main__":
    unittest.main()
