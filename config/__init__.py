"""
Configuration package for the Airflow MCP server.

This package contains the environment manager and the Airflow connection
config model.
"""

from config.manager import EnvironmentManager, env_manager, configure
from config.types import AirflowConnectionConfig

# Re-export the singleton instance for easy access
env = env_manager

__all__ = [
    "EnvironmentManager",
    "env_manager",
    "env",
    "configure",
    "AirflowConnectionConfig",
]
