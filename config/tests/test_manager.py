import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from config.manager import EnvironmentManager, configure
from config.types import AirflowConnectionConfig
from mcp_tools.errors import ConfigurationError


class TestEnvironmentManager(unittest.TestCase):
    """Test cases for the EnvironmentManager class."""

    def setUp(self):
        # Create a new instance for each test to avoid singleton issues
        EnvironmentManager._instance = None
        self.env_manager = EnvironmentManager()
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)
        EnvironmentManager._instance = None

    def create_env_file(self, content):
        env_file = Path(self.temp_dir) / ".env"
        env_file.write_text(content)
        return env_file

    def load_with(self, environ, env_file=None):
        """Load the manager from ``environ`` and an optional .env file."""
        candidates = [env_file] if env_file else []
        with mock.patch.dict(os.environ, environ, clear=True), mock.patch.object(
            self.env_manager, "_candidate_env_files", return_value=candidates
        ):
            return self.env_manager.load()

    def test_initialization(self):
        self.assertIsInstance(self.env_manager.env_variables, dict)
        self.assertIsInstance(self.env_manager._providers, list)
        self.assertIsInstance(self.env_manager.airflow_parameters, dict)
        self.assertEqual(self.env_manager.get_server_port(), 3000)
        self.assertEqual(self.env_manager.get_server_host(), "0.0.0.0")
        self.assertEqual(self.env_manager.get_log_level(), "INFO")

    def test_singleton_pattern(self):
        self.assertIs(EnvironmentManager(), self.env_manager)

    def test_airflow_variables_from_environment(self):
        self.load_with(
            {
                "AIRFLOW_BASE_URL": "https://airflow.example.com",
                "AIRFLOW_TOKEN": "tok",
                "AIRFLOW_REQUEST_TIMEOUT": "12.5",
            }
        )

        params = self.env_manager.get_airflow_parameters()
        self.assertEqual(params["base_url"], "https://airflow.example.com")
        self.assertEqual(params["token"], "tok")
        self.assertEqual(params["request_timeout"], 12.5)
        self.assertIsNone(params["username"])

    def test_defaults_when_unset(self):
        self.load_with({})

        params = self.env_manager.get_airflow_parameters()
        self.assertEqual(params["base_url"], "http://localhost:8080")
        self.assertEqual(params["request_timeout"], 30.0)

    def test_server_settings_are_converted(self):
        self.load_with({"SERVER_PORT": "8000", "LOG_LEVEL": "debug"})

        self.assertEqual(self.env_manager.get_server_port(), 8000)
        self.assertEqual(self.env_manager.get_log_level(), "DEBUG")

    def test_bad_server_port_is_ignored(self):
        self.load_with({"SERVER_PORT": "eighty"})

        self.assertEqual(self.env_manager.get_server_port(), 3000)

    def test_bad_timeout_raises_configuration_error(self):
        self.load_with({"AIRFLOW_TOKEN": "tok", "AIRFLOW_REQUEST_TIMEOUT": "soon"})

        with self.assertRaises(ConfigurationError) as ctx:
            self.env_manager.get_airflow_parameters()

        self.assertIn("AIRFLOW_REQUEST_TIMEOUT", str(ctx.exception))

    def test_env_file_is_parsed(self):
        env_file = self.create_env_file(
            "# Airflow connection\n"
            "AIRFLOW_USERNAME=admin\n"
            "AIRFLOW_PASSWORD='s3cret=1'\n"
            'AIRFLOW_BASE_URL="http://airflow:8080"\n'
            "\n"
            "not a variable\n"
        )

        self.load_with({}, env_file)

        params = self.env_manager.get_airflow_parameters()
        self.assertEqual(params["username"], "admin")
        self.assertEqual(params["password"], "s3cret=1")
        self.assertEqual(params["base_url"], "http://airflow:8080")

    def test_process_environment_overrides_env_file(self):
        env_file = self.create_env_file("AIRFLOW_TOKEN=from-file\nSERVER_PORT=9000\n")

        self.load_with({"AIRFLOW_TOKEN": "from-env"}, env_file)

        self.assertEqual(self.env_manager.get_airflow_parameters()["token"], "from-env")
        self.assertEqual(self.env_manager.get_server_port(), 9000)

    def test_provider_values_are_applied_last(self):
        self.env_manager.register_provider(
            lambda: {
                "airflow_parameters": {"token": "from-provider"},
                "settings": {"server_port": 4000, "unknown": "ignored"},
            }
        )

        self.load_with({"AIRFLOW_TOKEN": "from-env"})

        self.assertEqual(self.env_manager.get_airflow_parameters()["token"], "from-provider")
        self.assertEqual(self.env_manager.get_server_port(), 4000)
        self.assertNotIn("unknown", self.env_manager.settings)

    def test_relative_log_dir_is_resolved(self):
        self.load_with({"LOG_DIR": "logs"})

        self.assertTrue(Path(self.env_manager.get_log_dir()).is_absolute())


class TestConfigure(unittest.TestCase):
    def setUp(self):
        EnvironmentManager._instance = None
        self.manager = EnvironmentManager()

    def tearDown(self):
        EnvironmentManager._instance = None

    def test_configure_builds_connection_config(self):
        self.manager.airflow_parameters.update(
            {"base_url": "http://airflow:8080/", "username": "admin", "password": "pw"}
        )

        config = configure(self.manager)

        self.assertIsInstance(config, AirflowConnectionConfig)
        self.assertEqual(config.base_url, "http://airflow:8080")
        self.assertEqual(config.auth_mode, "basic")

    def test_configure_without_credentials_fails(self):
        with self.assertRaises(ConfigurationError):
            configure(self.manager)


if __name__ == "__main__":
    unittest.main()
