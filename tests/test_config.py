import logging
import os
import unittest
from unittest import mock

from config import DEFAULT_DATABASE_URL, configure_logging, load_settings


class LoadSettingsTests(unittest.TestCase):
    def setUp(self) -> None:
        # Keep a developer's local .env out of the picture.
        patcher = mock.patch("config.load_dotenv")
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_missing_token_is_fatal(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(RuntimeError):
                load_settings()

    def test_defaults(self):
        with mock.patch.dict(os.environ, {"BOT_TOKEN": "123:abc"}, clear=True):
            settings = load_settings()
        self.assertEqual(settings.bot_token, "123:abc")
        self.assertEqual(settings.database_url, DEFAULT_DATABASE_URL)
        self.assertEqual(settings.log_level, "INFO")

    def test_overrides_and_alternate_token_variable(self):
        env = {
            "DISCORD_TOKEN": "discord-secret",
            "DATABASE_URL": "postgresql://u@h/db",
            "LOG_LEVEL": "debug",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            settings = load_settings("DISCORD_TOKEN")
        self.assertEqual(settings.bot_token, "discord-secret")
        self.assertEqual(settings.database_url, "postgresql://u@h/db")
        self.assertEqual(settings.log_level, "DEBUG")


class ConfigureLoggingTests(unittest.TestCase):
    def test_known_level(self):
        with mock.patch("logging.basicConfig") as basic_config:
            configure_logging("warning")
        self.assertEqual(basic_config.call_args.kwargs["level"], logging.WARNING)

    def test_unknown_level_falls_back_to_info(self):
        with mock.patch("logging.basicConfig") as basic_config:
            configure_logging("chatty")
        self.assertEqual(basic_config.call_args.kwargs["level"], logging.INFO)


if __name__ == "__main__":
    unittest.main()
