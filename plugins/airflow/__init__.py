"""Airflow REST API tools."""

from plugins.airflow.client import AirflowClient
from plugins.airflow.tool import AirflowTool, build_registry

__all__ = ["AirflowClient", "AirflowTool", "build_registry"]
