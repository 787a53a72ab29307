from pathlib import Path
from typing import Dict, Any, Optional, List, Callable
import logging
import os

from config.types import AirflowConnectionConfig, DEFAULT_BASE_URL
from mcp_tools.errors import ConfigurationError


class EnvironmentManager:
    """
    Environment manager that collects server settings and Airflow connection
    parameters from a .env file and the OS environment.
    """

    _instance = None

    # Default settings with their types
    DEFAULT_SETTINGS = {
        # Server settings
        "server_host": ("0.0.0.0", str),
        "server_port": (3000, int),
        # Logging settings
        "log_dir": (".logs", str),
        "log_level": ("INFO", str),
    }

    # Default Airflow settings with their types
    DEFAULT_AIRFLOW_SETTINGS = {
        "base_url": (DEFAULT_BASE_URL, str),
        "token": (None, str),
        "username": (None, str),
        "password": (None, str),
        "request_timeout": (30.0, float),
    }

    # Create mapping dynamically - each setting can be set via its uppercase env var
    ENV_MAPPING = {setting.upper(): setting for setting in DEFAULT_SETTINGS.keys()}

    AIRFLOW_PREFIX = "AIRFLOW_"

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialize()
        return cls._instance

    def _initialize(self):
        """Initialize environment with default values"""
        self.env_variables: Dict[str, str] = {}
        self._providers: List[Callable[[], Dict[str, Any]]] = []
        self.airflow_parameters: Dict[str, Any] = {}
        self.settings: Dict[str, Any] = {}
        self.logger = logging.getLogger(__name__)

        # Initialize settings with default values
        for key, (default_value, _) in self.DEFAULT_SETTINGS.items():
            self.settings[key] = default_value

    def _get_git_root(self) -> Optional[Path]:
        """Try to determine the git root directory

        Returns:
            Path to the git root directory or None if not found
        """
        dir_to_check = Path.cwd()
        for _ in range(10):  # Limit the search depth
            git_dir = dir_to_check / ".git"
            if git_dir.exists() and git_dir.is_dir():
                return dir_to_check

            parent_dir = dir_to_check.parent
            if parent_dir == dir_to_check:  # Reached the root
                break
            dir_to_check = parent_dir

        return None

    def _convert_value(self, value: str, target_type: type) -> Any:
        """Convert string value to target type"""
        if target_type == bool:
            return value.lower() == "true"
        return target_type(value)

    def _candidate_env_files(self) -> List[Path]:
        env_file_paths = [Path.cwd() / ".env"]

        try:
            env_file_paths.append(Path.home() / ".env")
        except (RuntimeError, OSError):
            # Home directory can't be determined in some sandboxes
            pass

        git_root = self._get_git_root()
        if git_root:
            env_file_paths.append(git_root / ".env")

        return env_file_paths

    def _load_from_env_file(self) -> Optional[Path]:
        """Find and load variables from the first .env file found"""
        for env_path in self._candidate_env_files():
            if env_path.exists() and env_path.is_file():
                self.logger.info(f"Loading environment from: {env_path}")
                self._parse_env_file(env_path)
                return env_path

        self.logger.debug("No .env file found, using the process environment only")
        return None

    def _parse_env_file(self, env_file_path: Path):
        """Parse a .env file and load variables into the environment"""
        try:
            with open(env_file_path, "r") as f:
                for line in f:
                    line = line.strip()
                    if line and not line.startswith("#") and "=" in line:
                        key, value = line.split("=", 1)
                        key = key.strip()
                        value = value.strip()

                        # Remove quotes if present
                        if (value.startswith('"') and value.endswith('"')) or (
                            value.startswith("'") and value.endswith("'")
                        ):
                            value = value[1:-1]

                        self._apply_variable(key, value)
        except OSError as e:
            self.logger.warning(f"Error parsing .env file {env_file_path}: {e}")

    def _apply_variable(self, key: str, value: str):
        self.env_variables[key] = value

        if key in self.ENV_MAPPING:
            setting_name = self.ENV_MAPPING[key]
            _, target_type = self.DEFAULT_SETTINGS[setting_name]
            try:
                self.settings[setting_name] = self._convert_value(value, target_type)
            except ValueError:
                self.logger.warning(
                    f"Ignoring {key}={value!r}: expected {target_type.__name__}"
                )
        # Handle AIRFLOW_ prefixed variables
        elif key.startswith(self.AIRFLOW_PREFIX):
            param_name = key[len(self.AIRFLOW_PREFIX):].lower()
            self.airflow_parameters[param_name] = value

    def register_provider(self, provider: Callable[[], Dict[str, Any]]):
        """Register a provider function that returns additional environment data"""
        self._providers.append(provider)
        return self

    def load(self):
        """Load all environment information.

        The .env file is read first, so values from the OS environment take
        precedence over it.
        """
        self._load_from_env_file()

        for key, value in os.environ.items():
            self._apply_variable(key, value)

        for provider in self._providers:
            additional_data = provider()

            if airflow_params := additional_data.get("airflow_parameters", {}):
                for key, value in airflow_params.items():
                    self.airflow_parameters[key] = value

            if settings := additional_data.get("settings", {}):
                for key, value in settings.items():
                    if key in self.settings:
                        self.settings[key] = value

        return self

    def get_setting(self, name: str, default: Any = None) -> Any:
        """Get a setting value by name"""
        return self.settings.get(name, default)

    def get_server_port(self) -> int:
        return int(self.settings["server_port"])

    def get_server_host(self) -> str:
        return self.settings["server_host"]

    def get_log_level(self) -> str:
        return str(self.settings["log_level"]).upper()

    def get_log_dir(self) -> str:
        """Get the log directory, resolved against the current directory."""
        log_dir = Path(self.settings["log_dir"])
        if not log_dir.is_absolute():
            log_dir = Path.cwd() / log_dir
        return str(log_dir)

    def get_airflow_parameters(self) -> Dict[str, Any]:
        """Get Airflow parameters with typed defaults applied"""
        result: Dict[str, Any] = {}
        for key, (default_value, target_type) in self.DEFAULT_AIRFLOW_SETTINGS.items():
            value = self.airflow_parameters.get(key)
            if value is None or value == "":
                result[key] = default_value
            elif isinstance(value, str) and target_type is not str:
                try:
                    result[key] = self._convert_value(value, target_type)
                except ValueError as e:
                    raise ConfigurationError(
                        f"Invalid value for AIRFLOW_{key.upper()}: {value!r}"
                    ) from e
            else:
                result[key] = value
        return result


# Create singleton instance
env_manager = EnvironmentManager()


def configure(manager: Optional[EnvironmentManager] = None) -> AirflowConnectionConfig:
    """Build the Airflow connection config from the environment.

    Args:
        manager: Environment manager to read from; the loaded singleton is used
            when omitted.

    Returns:
        A validated, immutable connection config

    Raises:
        ConfigurationError: If neither a token nor a username/password pair
            is configured
    """
    if manager is None:
        manager = env_manager.load()
    return AirflowConnectionConfig(**manager.get_airflow_parameters())
